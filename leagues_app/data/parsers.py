"""
Feed parsers for converting raw catalog payloads to model objects.

This module handles CoinGecko-style coin market records, equity quote records
and contest records. Single-record parsers raise DataQualityError subclasses;
batch parsers skip bad records and log them.
"""

import json
import math
from typing import Any, Callable, TypeVar, Union

from ..errors import DataQualityError, MalformedDataError, MissingDataError
from ..logging.config import get_logger
from ..utils.time import parse_timestamp
from .models import Coin, Contest, ContestState, Equity

logger = get_logger(__name__)

T = TypeVar("T")

Payload = Union[str, bytes, list[dict[str, Any]]]


def _require(record: dict[str, Any], *keys: str) -> Any:
    """Return the first present, non-null value among keys."""
    for key in keys:
        value = record.get(key)
        if value is not None:
            return value
    raise MissingDataError(
        f"Missing required field: {keys[0]}",
        field_name=keys[0],
        context={"record": record}
    )


def _optional(record: dict[str, Any], default: Any, *keys: str) -> Any:
    for key in keys:
        value = record.get(key)
        if value is not None:
            return value
    return default


def _to_float(value: Any, field_name: str) -> float:
    try:
        result = float(value)
    except (TypeError, ValueError) as e:
        raise MalformedDataError(
            f"Field {field_name} is not numeric: {value!r}",
            raw_data=str(value),
            expected_format="number"
        ) from e
    if not math.isfinite(result):
        raise MalformedDataError(
            f"Field {field_name} is not finite: {value!r}",
            raw_data=str(value),
            expected_format="finite number"
        )
    return result


def _to_int(value: Any, field_name: str) -> int:
    number = _to_float(value, field_name)
    if number < 0 or number != int(number):
        raise MalformedDataError(
            f"Field {field_name} must be a non-negative integer: {value!r}",
            raw_data=str(value),
            expected_format="non-negative integer"
        )
    return int(number)


def _to_text(value: Any, field_name: str) -> str:
    text = str(value).strip()
    if not text:
        raise MissingDataError(f"Field {field_name} is empty", field_name=field_name)
    return text


def parse_coin(record: dict[str, Any]) -> Coin:
    """Parse one coin market record (id, symbol, name, image, current_price, ...)."""
    if not isinstance(record, dict):
        raise MalformedDataError("Coin record must be an object", raw_data=repr(record))

    image = record.get("image")
    return Coin(
        id=_to_text(_require(record, "id"), "id"),
        symbol=_to_text(_require(record, "symbol"), "symbol"),
        name=_to_text(_require(record, "name"), "name"),
        image=str(image) if image else None,
        current_price=_to_float(_optional(record, 0.0, "current_price"), "current_price"),
        price_change_pct_24h=_to_float(
            _optional(record, 0.0, "price_change_percentage_24h"),
            "price_change_percentage_24h"
        ),
    )


def parse_equity(record: dict[str, Any]) -> Equity:
    """Parse one equity quote record (symbol, name, price, changesPercentage)."""
    if not isinstance(record, dict):
        raise MalformedDataError("Equity record must be an object", raw_data=repr(record))

    return Equity(
        symbol=_to_text(_require(record, "symbol"), "symbol").upper(),
        name=_to_text(_require(record, "name"), "name"),
        price=_to_float(_optional(record, 0.0, "price"), "price"),
        change_pct=_to_float(
            _optional(record, 0.0, "changesPercentage", "change_pct"),
            "changesPercentage"
        ),
    )


def parse_contest(record: dict[str, Any]) -> Contest:
    """Parse one contest record; accepts camelCase or snake_case keys."""
    if not isinstance(record, dict):
        raise MalformedDataError("Contest record must be an object", raw_data=repr(record))

    raw_state = _require(record, "state", "status")
    try:
        state = ContestState.parse(raw_state)
    except ValueError as e:
        raise MalformedDataError(
            str(e), raw_data=str(raw_state), expected_format="Upcoming|Active|Finished"
        ) from e

    raw_start = _require(record, "startTime", "start_time")
    raw_end = _require(record, "endTime", "end_time")
    try:
        start_time = parse_timestamp(raw_start)
        end_time = parse_timestamp(raw_end)
    except (TypeError, ValueError, OverflowError) as e:
        raise MalformedDataError(
            f"Invalid contest time: {e}",
            raw_data=f"{raw_start!r}..{raw_end!r}",
            expected_format="epoch seconds, epoch ms or ISO-8601"
        ) from e

    if end_time < start_time:
        raise MalformedDataError(
            "Contest ends before it starts",
            raw_data=f"{raw_start!r}..{raw_end!r}"
        )

    return Contest(
        id=_to_text(_require(record, "id", "contestId", "contest_id"), "id"),
        name=_to_text(_require(record, "name"), "name"),
        sport=str(_optional(record, "", "sport")).strip(),
        entry_fee=_to_float(_optional(record, 0.0, "entryFee", "entry_fee"), "entryFee"),
        prize_pool=_to_float(_optional(record, 0.0, "prizePool", "prize_pool"), "prizePool"),
        start_time=start_time,
        end_time=end_time,
        max_participants=_to_int(
            _optional(record, 0, "maxParticipants", "max_participants"), "maxParticipants"
        ),
        current_participants=_to_int(
            _optional(record, 0, "currentParticipants", "current_participants"),
            "currentParticipants"
        ),
        state=state,
    )


def _decode(payload: Payload) -> list[Any]:
    if isinstance(payload, (str, bytes)):
        try:
            payload = json.loads(payload)
        except json.JSONDecodeError as e:
            raise MalformedDataError(
                f"Invalid JSON payload: {e}",
                raw_data=str(payload[:200]),
                expected_format="JSON array"
            ) from e

    if not isinstance(payload, list):
        raise MalformedDataError(
            "Payload must be a list of records",
            raw_data=repr(payload)[:200],
            expected_format="JSON array"
        )
    return payload


def _parse_batch(payload: Payload, parse_one: Callable[[dict[str, Any]], T], kind: str) -> list[T]:
    records = _decode(payload)
    parsed = []
    skipped = 0

    for index, record in enumerate(records):
        try:
            parsed.append(parse_one(record))
        except DataQualityError as e:
            skipped += 1
            logger.warning(
                "Skipping malformed record",
                kind=kind,
                index=index,
                error=str(e)
            )

    logger.debug("Parsed feed payload", kind=kind, parsed=len(parsed), skipped=skipped)
    return parsed


def parse_coin_markets(payload: Payload) -> list[Coin]:
    """Parse a coin markets payload, skipping malformed records."""
    return _parse_batch(payload, parse_coin, "coin")


def parse_equity_quotes(payload: Payload) -> list[Equity]:
    """Parse an equity quotes payload, skipping malformed records."""
    return _parse_batch(payload, parse_equity, "equity")


def parse_contests(payload: Payload) -> list[Contest]:
    """Parse a contest list payload, skipping malformed records."""
    return _parse_batch(payload, parse_contest, "contest")
