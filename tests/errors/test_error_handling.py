"""
Error handling tests for roster submission.

Tests cover the error hierarchy, where each error is raised, and that failures
leave the roster in a state the caller can recover from.
"""

import asyncio
import sqlite3
from unittest.mock import patch

import pytest

from conftest import FakeGateway, WALLET, make_contest
from leagues_app.config.defaults import SubmissionParams
from leagues_app.config.persistence import SqliteStoreConfig
from leagues_app.data.models import ContestState, Prediction, Selection
from leagues_app.errors import (
    ConfigurationError,
    DataQualityError,
    DuplicateSubmissionError,
    EmptyRosterError,
    IncompleteRosterError,
    InvalidContestStateError,
    MalformedDataError,
    MissingDataError,
    OwnerIdentityMissingError,
    PartialSubmissionError,
    PersistenceError,
    SubmissionError,
    SubmissionTimeoutError,
    SystemFailureError,
)
from leagues_app.persistence.submission_store import SubmissionStore
from leagues_app.state.models import RosterPhase
from leagues_app.state.roster import RosterManager
from leagues_app.state.submission import SubmissionController


class TestErrorClassification:
    """Test error classification system."""

    def test_data_quality_error_hierarchy(self):
        """Test that data quality errors have proper hierarchy."""
        base_error = DataQualityError("base error")
        assert base_error.recoverable is True
        assert base_error.context == {}

        missing_error = MissingDataError("missing", field_name="symbol")
        assert isinstance(missing_error, DataQualityError)
        assert missing_error.field_name == "symbol"

        malformed_error = MalformedDataError("bad", raw_data="abc", expected_format="number")
        assert malformed_error.raw_data == "abc"
        assert malformed_error.expected_format == "number"

    def test_submission_error_hierarchy(self):
        """Test that validation errors are recoverable submission errors."""
        for error in (
            EmptyRosterError("empty"),
            IncompleteRosterError("short", required_size=5, actual_size=3),
            InvalidContestStateError("closed", contest_id="1", contest_state="Finished"),
            DuplicateSubmissionError("again", in_flight=True),
            OwnerIdentityMissingError("no wallet"),
        ):
            assert isinstance(error, SubmissionError)
            assert error.recoverable is True

        incomplete = IncompleteRosterError("short", required_size=5, actual_size=3)
        assert (incomplete.required_size, incomplete.actual_size) == (5, 3)

    def test_system_failure_error_hierarchy(self):
        """Test that system failures carry their details."""
        assert SystemFailureError("boom").recoverable is False
        assert ConfigurationError("bad", errors=["x"]).errors == ["x"]
        assert ConfigurationError("bad").recoverable is False

        persistence = PersistenceError("down", operation="save_submission", target="teams")
        assert persistence.recoverable is True
        assert persistence.operation == "save_submission"

        partial = PartialSubmissionError("short", expected_rows=5, stored_rows=2)
        assert isinstance(partial, PersistenceError)
        assert (partial.expected_rows, partial.stored_rows) == (5, 2)

        timeout = SubmissionTimeoutError("slow", timeout_seconds=1.5)
        assert isinstance(timeout, PersistenceError)
        assert timeout.timeout_seconds == 1.5


def fill(roster, coins, count):
    for coin in list(coins.values())[:count]:
        roster.toggle_selection(coin, Prediction.UP)


class TestSubmissionRecovery:
    """Failures leave the roster intact and submittable."""

    @pytest.mark.parametrize("error", [
        PersistenceError("connection refused"),
        PartialSubmissionError("short", expected_rows=5, stored_rows=1),
    ])
    def test_gateway_failure_keeps_roster(self, coins, active_contest, error):
        roster = RosterManager()
        fill(roster, coins, 5)
        gateway = FakeGateway(error=error)
        controller = SubmissionController(roster, gateway, owner_identity=WALLET)
        before = roster.selections

        with pytest.raises(PersistenceError):
            asyncio.run(controller.submit(active_contest))

        assert roster.selections == before
        assert controller.phase == RosterPhase.READY_TO_SUBMIT
        assert not roster.is_locked

        gateway.error = None
        asyncio.run(controller.submit(active_contest))
        assert controller.phase == RosterPhase.SUBMITTED

    def test_validation_failures_never_reach_gateway(self, coins):
        roster = RosterManager()
        gateway = FakeGateway()
        controller = SubmissionController(roster, gateway, owner_identity=None,
                                          params=SubmissionParams())

        with pytest.raises(EmptyRosterError):
            asyncio.run(controller.submit(make_contest()))

        fill(roster, coins, 3)
        with pytest.raises(IncompleteRosterError):
            asyncio.run(controller.submit(make_contest()))

        fill(roster, dict(list(coins.items())[3:]), 2)
        with pytest.raises(InvalidContestStateError):
            asyncio.run(controller.submit(make_contest(ContestState.FINISHED)))

        with pytest.raises(OwnerIdentityMissingError):
            asyncio.run(controller.submit(make_contest()))

        assert gateway.calls == []


class TestStoreErrorWrapping:
    """SQLite errors surface as PersistenceError."""

    def test_connect_failure_on_save(self, tmp_path, sample_asset):
        store = SubmissionStore(SqliteStoreConfig(db_path=str(tmp_path / "s.db")))

        with patch("leagues_app.persistence.submission_store.sqlite3.connect",
                   side_effect=sqlite3.OperationalError("disk I/O error")):
            with pytest.raises(PersistenceError) as exc_info:
                store.save_submission([Selection(sample_asset, Prediction.UP)], "1", WALLET)

        assert exc_info.value.operation == "save_submission"
        assert isinstance(exc_info.value.__cause__, sqlite3.OperationalError)

    def test_health_check_reports_failure(self, tmp_path):
        store = SubmissionStore(SqliteStoreConfig(db_path=str(tmp_path / "s.db")))

        with patch("leagues_app.persistence.submission_store.sqlite3.connect",
                   side_effect=sqlite3.OperationalError("locked")):
            assert store.health_check() is False
