"""
Data models and catalog payload parsing.

Converts coin, equity and contest feed records into the immutable models the
roster and submission core operate on.
"""
