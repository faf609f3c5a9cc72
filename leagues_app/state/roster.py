"""
Roster manager: the single source of truth for the current roster.

A roster is an ordered set of selections, unique by asset id and bounded by
max_size. Every mutation is total: requests that would break an invariant are
silent no-ops, never errors.
"""

import uuid
from dataclasses import replace
from typing import Callable, Optional, Union

from ..config.defaults import RosterParams
from ..data.models import Asset, AssetRef, Prediction, Selection, to_asset
from ..logging.config import get_state_logger
from .models import RosterChange, RosterEvent

state_logger = get_state_logger(__name__)

RosterListener = Callable[[RosterEvent], None]
AssetLike = Union[Asset, AssetRef]


class RosterManager:
    """Owns the current selections and enforces capacity and exclusivity."""

    def __init__(self, params: Optional[RosterParams] = None, roster_id: Optional[str] = None):
        self.params = params or RosterParams()
        self.roster_id = roster_id or uuid.uuid4().hex
        self.logger = state_logger.bind(roster_id=self.roster_id)
        self._selections: list[Selection] = []
        self._locked = False
        self._listeners: list[RosterListener] = []

    @property
    def max_size(self) -> int:
        return self.params.max_size

    @property
    def selections(self) -> tuple[Selection, ...]:
        """Snapshot of the roster in insertion order."""
        return tuple(self._selections)

    @property
    def size(self) -> int:
        return len(self._selections)

    @property
    def is_locked(self) -> bool:
        return self._locked

    def __len__(self) -> int:
        return len(self._selections)

    def _index_of(self, asset_id: str) -> Optional[int]:
        for index, selection in enumerate(self._selections):
            if selection.asset.id == asset_id:
                return index
        return None

    def is_in_roster(self, asset: AssetLike) -> bool:
        return self._index_of(to_asset(asset).id) is not None

    def is_full(self) -> bool:
        return len(self._selections) >= self.max_size

    def is_empty(self) -> bool:
        return not self._selections

    def prediction_for(self, asset: AssetLike) -> Optional[Prediction]:
        """Prediction held for the asset, or None when it is not selected."""
        index = self._index_of(to_asset(asset).id)
        return self._selections[index].prediction if index is not None else None

    def toggle_selection(self, asset: AssetLike, prediction: Union[Prediction, str]) -> None:
        """
        Apply one up/down tap to an asset row.

        - Absent and room left: add with the given prediction.
        - Absent and roster full: no-op.
        - Present with the same prediction: remove.
        - Present with the other prediction: flip in place, keeping position.
        """
        asset = to_asset(asset)
        prediction = Prediction.parse(prediction)

        if self._reject_when_locked("toggle_selection", asset.id):
            return

        index = self._index_of(asset.id)

        if index is None:
            if self.is_full():
                self.logger.debug(
                    "Roster full, selection ignored",
                    asset_id=asset.id,
                    max_size=self.max_size
                )
                return
            self._selections.append(Selection(asset=asset, prediction=prediction))
            self._emit(RosterChange.ADDED, asset.id, prediction)
            return

        current = self._selections[index]
        if current.prediction == prediction:
            del self._selections[index]
            self._emit(RosterChange.REMOVED, asset.id, prediction)
        else:
            self._selections[index] = replace(current, prediction=prediction)
            self._emit(RosterChange.FLIPPED, asset.id, prediction)

    def remove_asset(self, asset: AssetLike) -> None:
        """Remove the asset's selection if present."""
        asset_id = to_asset(asset).id

        if self._reject_when_locked("remove_asset", asset_id):
            return

        index = self._index_of(asset_id)
        if index is None:
            return

        removed = self._selections.pop(index)
        self._emit(RosterChange.REMOVED, asset_id, removed.prediction)

    def clear(self) -> None:
        if self._reject_when_locked("clear"):
            return
        if not self._selections:
            return

        self._selections.clear()
        self._emit(RosterChange.CLEARED)

    def lock(self) -> None:
        """Freeze the roster during and after a submit; mutations become no-ops."""
        self._locked = True
        self.logger.info("Roster locked", size=len(self._selections))

    def unlock(self) -> None:
        self._locked = False
        self.logger.info("Roster unlocked", size=len(self._selections))

    def subscribe(self, listener: RosterListener) -> Callable[[], None]:
        """Register a change listener. Returns a function that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _reject_when_locked(self, operation: str, asset_id: Optional[str] = None) -> bool:
        if self._locked:
            self.logger.warning(
                "Roster is locked, mutation ignored",
                operation=operation,
                asset_id=asset_id
            )
        return self._locked

    def _emit(
        self,
        kind: RosterChange,
        asset_id: Optional[str] = None,
        prediction: Optional[Prediction] = None
    ) -> None:
        event = RosterEvent(
            kind=kind,
            selections=self.selections,
            asset_id=asset_id,
            prediction=prediction,
        )

        self.logger.info(
            "Roster updated",
            change=kind.value,
            asset_id=asset_id,
            prediction=prediction.value if prediction else None,
            size=len(self._selections),
            max_size=self.max_size
        )

        for listener in list(self._listeners):
            listener(event)
