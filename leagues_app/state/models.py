"""
State machine data models for roster building and submission.

This module defines the roster lifecycle phases and the immutable event records
emitted to subscribers when a roster changes.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..data.models import Prediction, Selection


class RosterPhase(str, Enum):
    """Roster lifecycle phases."""
    EMPTY = "empty"
    BUILDING = "building"
    READY_TO_SUBMIT = "ready_to_submit"
    SUBMITTED = "submitted"


class RosterChange(str, Enum):
    """Kinds of effective roster mutation."""
    ADDED = "added"
    FLIPPED = "flipped"
    REMOVED = "removed"
    CLEARED = "cleared"


@dataclass(frozen=True)
class RosterEvent:
    """A single effective roster change, with the roster after the change."""

    kind: RosterChange
    selections: tuple[Selection, ...]
    asset_id: Optional[str] = None
    prediction: Optional[Prediction] = None


def derive_phase(size: int, max_size: int, is_submitted: bool) -> RosterPhase:
    """Map roster size and the submitted flag to a lifecycle phase."""
    if is_submitted:
        return RosterPhase.SUBMITTED
    if size == 0:
        return RosterPhase.EMPTY
    if size >= max_size:
        return RosterPhase.READY_TO_SUBMIT
    return RosterPhase.BUILDING
