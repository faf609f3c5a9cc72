"""Pytest configuration and shared fixtures."""

import threading
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Sequence

import pytest

from leagues_app.config.defaults import SubmissionParams
from leagues_app.config.persistence import SqliteStoreConfig
from leagues_app.data.models import (
    Asset,
    Coin,
    Contest,
    ContestState,
    Equity,
    Selection,
    Submission,
)
from leagues_app.errors import PersistenceError
from leagues_app.persistence.base import SubmissionGateway
from leagues_app.persistence.submission_store import SubmissionStore
from leagues_app.state.roster import RosterManager
from leagues_app.state.submission import SubmissionController

WALLET = "0x742d35Cc6634C0532925a3b844Bc454e4438f44e"
CONTEST_START = datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


def make_coin(symbol: str, name: Optional[str] = None) -> Coin:
    return Coin(
        id=(name or symbol).lower(),
        symbol=symbol.lower(),
        name=name or symbol,
        image=f"https://assets.example/{symbol.lower()}.png",
        current_price=100.0,
        price_change_pct_24h=1.5,
    )


def make_contest(state: ContestState = ContestState.ACTIVE, contest_id: str = "1", **kwargs) -> Contest:
    fields = dict(
        id=contest_id,
        name="Crypto Weekly Challenge",
        sport="Crypto",
        entry_fee=10.0,
        prize_pool=5000.0,
        start_time=CONTEST_START,
        end_time=CONTEST_START + timedelta(days=7),
        max_participants=100,
        current_participants=42,
        state=state,
    )
    fields.update(kwargs)
    return Contest(**fields)


class FakeGateway(SubmissionGateway):
    """In-memory gateway recording every call."""

    def __init__(self, error: Optional[Exception] = None, drop_rows: int = 0):
        self.error = error
        self.drop_rows = drop_rows
        self.calls: List[Dict[str, Any]] = []
        self.saved: List[Submission] = []

    def save_submission(self, selections: Sequence[Selection], contest_id: str,
                        owner_identity: str, team_name: str = "My Team") -> Submission:
        self.calls.append({
            "selections": tuple(selections),
            "contest_id": contest_id,
            "owner_identity": owner_identity,
            "team_name": team_name,
        })
        if self.error is not None:
            raise self.error

        kept = tuple(selections)[:len(selections) - self.drop_rows]
        submission = Submission(
            submission_id=str(uuid.uuid4()),
            contest_id=contest_id,
            owner_identity=owner_identity,
            selections=kept,
            submitted_at=CONTEST_START + timedelta(seconds=len(self.saved)),
            team_name=team_name,
        )
        self.saved.append(submission)
        return submission

    def list_submissions(self, contest_id: str) -> List[Submission]:
        return [s for s in self.saved if s.contest_id == contest_id]

    def health_check(self) -> bool:
        return True


class BlockingGateway(FakeGateway):
    """Gateway that waits on an event before answering."""

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.started = threading.Event()
        self.release = threading.Event()
        self.entered = 0

    def save_submission(self, *args, **kwargs) -> Submission:
        self.entered += 1
        self.started.set()
        self.release.wait(timeout=5)
        return super().save_submission(*args, **kwargs)


@pytest.fixture
def coins() -> Dict[str, Coin]:
    """Six coins keyed by symbol."""
    return {
        symbol: make_coin(symbol, name)
        for symbol, name in [
            ("BTC", "Bitcoin"),
            ("ETH", "Ethereum"),
            ("SOL", "Solana"),
            ("ADA", "Cardano"),
            ("DOT", "Polkadot"),
            ("XRP", "XRP"),
        ]
    }


@pytest.fixture
def equity() -> Equity:
    return Equity(symbol="AAPL", name="Apple Inc.", price=190.5, change_pct=-0.8)


@pytest.fixture
def active_contest() -> Contest:
    return make_contest(ContestState.ACTIVE)


@pytest.fixture
def finished_contest() -> Contest:
    return make_contest(ContestState.FINISHED, contest_id="9")


@pytest.fixture
def roster() -> RosterManager:
    return RosterManager(roster_id="test-roster")


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def controller(roster: RosterManager, gateway: FakeGateway) -> SubmissionController:
    return SubmissionController(roster, gateway, owner_identity=WALLET,
                                params=SubmissionParams(timeout_seconds=2.0))


@pytest.fixture
def store(tmp_path) -> SubmissionStore:
    return SubmissionStore(SqliteStoreConfig(db_path=str(tmp_path / "submissions.db")))


@pytest.fixture
def sample_asset() -> Asset:
    return Asset(id="bitcoin", symbol="btc", name="Bitcoin", image=None)


@pytest.fixture
def persistence_failure() -> PersistenceError:
    return PersistenceError("connection refused", operation="save_submission")
