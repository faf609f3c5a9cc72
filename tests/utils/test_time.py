"""
Tests for time utilities.

Verifies that feed timestamps in every supported shape normalize to aware UTC
datetimes.
"""

import pytest
from datetime import datetime, timezone, timedelta
from unittest.mock import patch

from leagues_app.utils.time import ensure_utc, format_timestamp, parse_timestamp, utc_now

NOON = datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


class TestUtcNow:
    """Test utc_now function."""

    def test_returns_aware_utc(self):
        """Should return wall-clock time in UTC."""
        with patch('leagues_app.utils.time.datetime') as mock_datetime:
            mock_datetime.now.return_value = NOON

            assert utc_now() == NOON
            mock_datetime.now.assert_called_once_with(timezone.utc)


class TestEnsureUtc:
    """Test ensure_utc function."""

    def test_naive_assumed_utc(self):
        """Naive datetimes are tagged as UTC without shifting."""
        result = ensure_utc(datetime(2026, 1, 1, 12, 0, 0))
        assert result == NOON
        assert result.tzinfo == timezone.utc

    def test_converts_other_zones(self):
        """Aware datetimes are converted to UTC."""
        eastern = timezone(timedelta(hours=-5))
        result = ensure_utc(datetime(2026, 1, 1, 7, 0, 0, tzinfo=eastern))
        assert result == NOON
        assert result.utcoffset() == timedelta(0)


class TestParseTimestamp:
    """Test parse_timestamp function."""

    @pytest.mark.parametrize("value", [
        1767268800,
        1767268800.0,
        1767268800000,
        "1767268800",
        "1767268800000",
        "2026-01-01T12:00:00Z",
        "2026-01-01T12:00:00+00:00",
        "2026-01-01T14:00:00+02:00",
        "2026-01-01T12:00:00",
        NOON,
    ])
    def test_supported_shapes(self, value):
        """Every supported shape lands on the same instant."""
        result = parse_timestamp(value)
        assert result == NOON
        assert result.tzinfo is not None

    @pytest.mark.parametrize("value", ["", "   ", "soon", True, None, [1767268800]])
    def test_rejects_garbage(self, value):
        with pytest.raises(ValueError):
            parse_timestamp(value)


def test_format_timestamp_round_trip():
    text = format_timestamp(datetime(2026, 1, 1, 13, 0, 0, tzinfo=timezone(timedelta(hours=1))))

    assert text == "2026-01-01T12:00:00+00:00"
    assert parse_timestamp(text) == NOON
