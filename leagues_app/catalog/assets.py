"""Asset catalog: the latest fetched snapshot of selectable coins and equities."""

from typing import Iterable, Optional, Union

from ..data.models import Asset, AssetRef, to_asset
from ..logging.config import get_logger

logger = get_logger(__name__)


class AssetCatalog:
    """
    Read-only view over the most recent asset snapshot.

    A refresh swaps the whole snapshot at once. Rosters keep their own copies
    of assets, so assets that disappear here stay in any roster that holds them.
    """

    def __init__(self, refs: Iterable[Union[AssetRef, Asset]] = ()):
        self._refs: tuple[Union[AssetRef, Asset], ...] = ()
        self._assets: tuple[Asset, ...] = ()
        self._by_id: dict[str, int] = {}
        self.refresh(refs)

    def refresh(self, refs: Iterable[Union[AssetRef, Asset]]) -> None:
        """Replace the snapshot. Duplicate ids keep their first occurrence."""
        kept_refs = []
        assets = []
        by_id: dict[str, int] = {}

        for ref in refs:
            asset = to_asset(ref)
            if asset.id in by_id:
                logger.warning("Duplicate asset id in catalog refresh", asset_id=asset.id)
                continue
            by_id[asset.id] = len(assets)
            kept_refs.append(ref)
            assets.append(asset)

        self._refs = tuple(kept_refs)
        self._assets = tuple(assets)
        self._by_id = by_id

        logger.info("Asset catalog refreshed", asset_count=len(assets))

    def current_assets(self) -> list[Asset]:
        """All assets in catalog order."""
        return list(self._assets)

    def asset_refs(self) -> list[Union[AssetRef, Asset]]:
        """The source coin/equity records, in catalog order."""
        return list(self._refs)

    def get(self, asset_id: str) -> Optional[Asset]:
        index = self._by_id.get(asset_id)
        return self._assets[index] if index is not None else None

    def search(self, text: str) -> list[Asset]:
        """Case-insensitive substring match on name or symbol."""
        needle = (text or "").strip().lower()
        if not needle:
            return self.current_assets()

        return [
            asset for asset in self._assets
            if needle in asset.name.lower() or needle in asset.symbol.lower()
        ]

    def __len__(self) -> int:
        return len(self._assets)
