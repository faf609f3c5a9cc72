"""
Leagues App - Roster Selection & Contest Submission engine

Lets a user build a bounded roster of crypto and equity picks, each with an
up/down prediction, submit it against a timed prize contest, and rank the
persisted submissions once the contest has finished.
"""

__version__ = "0.1.0"
__author__ = "Leagues Team"
