"""
Canonical data models for assets, contests and submissions.

This module defines immutable data structures shared by the catalogs, the
roster state machine, the submission store and the results projection. A
roster holds its own copies of these values, so catalog refreshes never
change an in-progress roster.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional, Union

EQUITY_ID_PREFIX = "stock:"


@dataclass(frozen=True)
class Asset:
    """Selectable asset as seen by the roster. Identity is `id`."""
    id: str
    symbol: str
    name: str
    image: Optional[str] = None


@dataclass(frozen=True)
class Coin:
    """Cryptocurrency market record from the coin feed."""
    id: str                          # Provider id, stable across fetches
    symbol: str
    name: str
    image: Optional[str] = None
    current_price: float = 0.0
    price_change_pct_24h: float = 0.0


@dataclass(frozen=True)
class Equity:
    """Stock quote record from the equity feed."""
    symbol: str
    name: str
    price: float = 0.0
    change_pct: float = 0.0

    @property
    def id(self) -> str:
        """Stable identity derived from the ticker symbol."""
        return equity_id(self.symbol)


AssetRef = Union[Coin, Equity]


def equity_id(symbol: str) -> str:
    """Identity used for an equity ticker."""
    return f"{EQUITY_ID_PREFIX}{symbol.strip().upper()}"


def to_asset(ref: Union[AssetRef, Asset]) -> Asset:
    """Project a coin, equity or asset onto the common Asset shape."""
    if isinstance(ref, Asset):
        return ref
    if isinstance(ref, Coin):
        return Asset(id=ref.id, symbol=ref.symbol, name=ref.name, image=ref.image or None)
    if isinstance(ref, Equity):
        return Asset(id=ref.id, symbol=ref.symbol.strip().upper(), name=ref.name, image=None)
    raise TypeError(f"Unsupported asset type: {type(ref).__name__}")


class Prediction(str, Enum):
    """Direction a selection predicts for its asset."""
    UP = "up"
    DOWN = "down"

    @classmethod
    def parse(cls, value: Union[str, "Prediction"]) -> "Prediction":
        """Parse a prediction, ignoring case."""
        if isinstance(value, Prediction):
            return value
        return cls(str(value).strip().lower())


@dataclass(frozen=True)
class Selection:
    """One asset paired with a prediction inside a roster."""
    asset: Asset
    prediction: Prediction


class ContestState(str, Enum):
    """Contest lifecycle states as published by the contest feed."""
    UPCOMING = "Upcoming"
    ACTIVE = "Active"
    FINISHED = "Finished"

    @classmethod
    def parse(cls, value: Union[str, "ContestState"]) -> "ContestState":
        """Parse a state name, ignoring case."""
        if isinstance(value, ContestState):
            return value
        text = str(value).strip().lower()
        for state in cls:
            if state.value.lower() == text:
                return state
        raise ValueError(f"Unknown contest state: {value!r}")


ELIGIBLE_CONTEST_STATES = frozenset({ContestState.UPCOMING, ContestState.ACTIVE})


@dataclass(frozen=True)
class Contest:
    """Time-boxed competition a roster can be submitted against."""
    id: str
    name: str
    sport: str
    entry_fee: float
    prize_pool: float
    start_time: datetime
    end_time: datetime
    max_participants: int
    current_participants: int
    state: ContestState

    @property
    def participation_progress(self) -> float:
        """Fraction of seats taken, capped at 1.0; 0.0 with no seats."""
        if self.max_participants <= 0:
            return 0.0
        return min(1.0, self.current_participants / self.max_participants)

    @property
    def is_open(self) -> bool:
        """True while the contest accepts submissions."""
        return self.state in ELIGIBLE_CONTEST_STATES


@dataclass(frozen=True)
class Submission:
    """Durable record binding a roster snapshot to one contest."""
    submission_id: str
    contest_id: str
    owner_identity: str
    selections: tuple[Selection, ...]
    submitted_at: datetime
    team_name: str = "My Team"

    @property
    def asset_names(self) -> tuple[str, ...]:
        """Asset names in roster order."""
        return tuple(s.asset.name for s in self.selections)
