"""
Price observation parsers.

Converts raw price rows (exchange candles, JSON documents, test fixtures)
into canonical PriceObservation objects with UTC timestamps.
"""

from collections.abc import Iterable
from datetime import datetime, timezone
from typing import Any, Union

import orjson

from ..backtest.models import PriceObservation
from ..errors import MalformedDataError
from ..utils.time import ensure_utc

TIMESTAMP_KEYS = ("ts", "timestamp", "date")
PRICE_KEYS = ("close", "price")


def parse_timestamp(value: Any) -> datetime:
    """
    Parse a timestamp in any supported representation.

    Accepts aware/naive datetimes, epoch milliseconds (int/float or digit
    strings) and ISO8601 strings with optional trailing "Z".

    Raises:
        MalformedDataError: If the value cannot be interpreted
    """
    if isinstance(value, datetime):
        return ensure_utc(value)

    if isinstance(value, bool):
        raise MalformedDataError(f"Invalid timestamp: {value!r}", raw_data=repr(value),
                                 expected_format="epoch ms or ISO8601")

    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value / 1000.0, tz=timezone.utc)

    if isinstance(value, str):
        text = value.strip()
        if text.isdigit():
            return datetime.fromtimestamp(int(text) / 1000.0, tz=timezone.utc)
        try:
            return ensure_utc(datetime.fromisoformat(text.replace("Z", "+00:00")))
        except ValueError as e:
            raise MalformedDataError(f"Invalid timestamp: {value!r}", raw_data=value,
                                     expected_format="epoch ms or ISO8601") from e

    raise MalformedDataError(f"Invalid timestamp: {value!r}", raw_data=repr(value),
                             expected_format="epoch ms or ISO8601")


def parse_price(value: Any) -> float:
    """Parse a positive, finite closing price."""
    try:
        price = float(value)
    except (TypeError, ValueError) as e:
        raise MalformedDataError(f"Invalid price: {value!r}", raw_data=repr(value),
                                 expected_format="positive number") from e

    if not price > 0 or price == float("inf"):
        raise MalformedDataError(f"Invalid price: {value!r}", raw_data=repr(value),
                                 expected_format="positive number")
    return price


def parse_observation(row: Union[dict[str, Any], list, tuple]) -> PriceObservation:
    """
    Parse one price row.

    Dict rows use the first present key of ("ts", "timestamp", "date") and
    ("close", "price"). Sequence rows follow the candle layout
    [ts, open, high, low, close, ...] or the pair layout [ts, price].
    """
    if isinstance(row, dict):
        ts_key = next((key for key in TIMESTAMP_KEYS if key in row), None)
        price_key = next((key for key in PRICE_KEYS if key in row), None)
        if ts_key is None or price_key is None:
            raise MalformedDataError("Price row missing timestamp or close", raw_data=repr(row),
                                     expected_format="{ts, close}")
        return PriceObservation(ts=parse_timestamp(row[ts_key]), price=parse_price(row[price_key]))

    if isinstance(row, (list, tuple)):
        if len(row) >= 5:
            return PriceObservation(ts=parse_timestamp(row[0]), price=parse_price(row[4]))
        if len(row) == 2:
            return PriceObservation(ts=parse_timestamp(row[0]), price=parse_price(row[1]))

    raise MalformedDataError("Unrecognized price row", raw_data=repr(row),
                             expected_format="{ts, close} or [ts, o, h, l, c]")


def parse_observations(rows: Iterable[Any]) -> list[PriceObservation]:
    """Parse rows into observations sorted ascending by timestamp."""
    observations = [parse_observation(row) for row in rows]
    observations.sort(key=lambda obs: obs.ts)
    return observations


def parse_price_document(payload: Union[bytes, str]) -> list[PriceObservation]:
    """
    Parse a JSON price document.

    The document is either a list of rows or an object with a "data" list.
    """
    try:
        document = orjson.loads(payload)
    except orjson.JSONDecodeError as e:
        raise MalformedDataError(f"Invalid JSON price document: {e}",
                                 expected_format="JSON") from e

    if isinstance(document, dict):
        document = document.get("data")

    if not isinstance(document, list):
        raise MalformedDataError("Price document must contain a list of rows",
                                 expected_format="[row, ...] or {\"data\": [row, ...]}")

    return parse_observations(document)
