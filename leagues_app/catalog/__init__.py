"""
Asset and contest catalogs.

Snapshot holders fed by the price and contest feeds; the roster core only reads
from them.
"""
from .assets import AssetCatalog
from .contests import ContestCatalog

__all__ = ["AssetCatalog", "ContestCatalog"]
