"""
Time handling utilities.

All timestamps inside the system are timezone-aware UTC datetimes. Feeds hand
us epoch seconds, epoch milliseconds or ISO-8601 strings; these helpers
normalize them.
"""

from datetime import datetime, timezone
from typing import Union

# Values above this are treated as epoch milliseconds (year 33658 in seconds).
_EPOCH_MS_THRESHOLD = 1e12


def utc_now() -> datetime:
    """Current wall-clock time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(ts: datetime) -> datetime:
    """
    Return ts as an aware UTC datetime.

    Naive datetimes are assumed to already be in UTC.
    """
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc)


def parse_timestamp(value: Union[int, float, str, datetime]) -> datetime:
    """
    Parse a feed timestamp into an aware UTC datetime.

    Args:
        value: Epoch seconds, epoch milliseconds, ISO-8601 string or datetime

    Returns:
        UTC datetime

    Raises:
        ValueError: If the value cannot be interpreted as a timestamp
    """
    if isinstance(value, datetime):
        return ensure_utc(value)

    if isinstance(value, bool):
        raise ValueError(f"Invalid timestamp: {value!r}")

    if isinstance(value, (int, float)):
        seconds = value / 1000.0 if value > _EPOCH_MS_THRESHOLD else float(value)
        return datetime.fromtimestamp(seconds, tz=timezone.utc)

    if isinstance(value, str):
        text = value.strip()
        if not text:
            raise ValueError("Invalid timestamp: empty string")
        if text.lstrip("-").replace(".", "", 1).isdigit():
            return parse_timestamp(float(text))
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        return ensure_utc(datetime.fromisoformat(text))

    raise ValueError(f"Invalid timestamp type: {type(value).__name__}")


def format_timestamp(ts: datetime) -> str:
    """Format a timestamp as ISO-8601 in UTC."""
    return ensure_utc(ts).isoformat()
