"""
Parsers converting quote-provider payloads to PriceBar objects.

Providers deliver history as a JSON array (or list of dicts) of
{date, open, high, low, close, volume} records with ISO-8601 dates.
"""

from collections.abc import Iterable, Mapping
from datetime import date, datetime
from typing import Any, Union

import orjson

from ..errors import MalformedDataError
from .models import PriceBar
from .validators import SeriesValidator

REQUIRED_FIELDS = ("date", "open", "high", "low", "close")


def parse_date(value: Any) -> date:
    """
    Parse an ISO-8601 date or datetime into a date.

    Args:
        value: ISO string, date or datetime

    Returns:
        Calendar date of the value

    Raises:
        MalformedDataError: If the value cannot be parsed
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            if len(text) == 10:
                return date.fromisoformat(text)
            # Providers emit a trailing Z for UTC timestamps
            return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
        except ValueError as e:
            raise MalformedDataError(f"Invalid date: {value!r}", raw_data=str(value),
                                     expected_format="ISO-8601") from e
    raise MalformedDataError(f"Invalid date type: {type(value)}", raw_data=str(value),
                             expected_format="ISO-8601")


def _parse_number(raw: dict[str, Any], name: str, default: Any = None) -> float:
    value = raw.get(name, default)
    if value is None:
        raise MalformedDataError(f"Missing {name} field", raw_data=str(raw)[:100])
    if isinstance(value, bool):
        raise MalformedDataError(f"Invalid {name}: {value!r}", raw_data=str(raw)[:100])
    try:
        return float(value)
    except (TypeError, ValueError) as e:
        raise MalformedDataError(f"Invalid {name}: {value!r}", raw_data=str(raw)[:100]) from e


def parse_price_bar(raw: dict[str, Any]) -> PriceBar:
    """
    Parse one provider record into a PriceBar.

    Missing volume is treated as zero; every other field is required.

    Raises:
        MalformedDataError: If a field is missing or not numeric
    """
    if not isinstance(raw, dict):
        raise MalformedDataError(f"Price record must be an object, got {type(raw).__name__}",
                                 raw_data=str(raw)[:100])

    missing = [name for name in REQUIRED_FIELDS if raw.get(name) is None]
    if missing:
        raise MalformedDataError(f"Missing fields: {', '.join(missing)}", raw_data=str(raw)[:100])

    return PriceBar(
        date=parse_date(raw["date"]),
        open=_parse_number(raw, "open"),
        high=_parse_number(raw, "high"),
        low=_parse_number(raw, "low"),
        close=_parse_number(raw, "close"),
        volume=_parse_number(raw, "volume", default=0),
    )


def parse_json_payload(raw_data: Union[str, bytes]) -> Any:
    """
    Parse a raw JSON document.

    Raises:
        MalformedDataError: If JSON parsing fails
    """
    try:
        return orjson.loads(raw_data)
    except orjson.JSONDecodeError as e:
        raise MalformedDataError(f"Invalid JSON: {e}", raw_data=str(raw_data)[:100],
                                 expected_format="JSON") from e


def parse_price_series(raw: Union[str, bytes, Mapping[str, Any], Iterable[dict[str, Any]]],
                       validate: bool = True) -> list[PriceBar]:
    """
    Parse a provider history payload into an ordered list of bars.

    Args:
        raw: JSON text, an iterable of records, or a document wrapping
            them under "history" or "data"
        validate: Run the series validator on the result

    Returns:
        Parsed bars in payload order
    """
    records = parse_json_payload(raw) if isinstance(raw, (str, bytes)) else raw
    if isinstance(records, Mapping):
        # Some providers wrap the array
        records = records.get("history", records.get("data"))
    if records is None or isinstance(records, (Mapping, str, bytes, int, float)):
        raise MalformedDataError("Price history must be an array of records",
                                 expected_format="[{date, open, high, low, close, volume}]")

    bars = [parse_price_bar(record) for record in records]

    if validate:
        SeriesValidator().validate_series(bars)

    return bars
