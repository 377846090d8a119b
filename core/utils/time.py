"""
Time Utilities

This module normalizes the timestamp formats used by venue payloads.

Different endpoints return timestamps in different formats:
- Tickers, candles, public trades: seconds since epoch (e.g., 1704110400)
- Orders, private trades, transactions: ISO-8601 strings
  (e.g., "2021-10-09T08:08:46+03:00")
- We need: milliseconds since epoch (int) in every canonical record

ISO-8601 parsing uses python-dateutil, which accepts the offsets and
fractional seconds the venue emits.
"""

from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from dateutil import parser as dateparser


def seconds_to_milliseconds(value: Any) -> Optional[int]:
    """
    Convert an epoch-seconds value (int, float or numeric string) to milliseconds.

    Returns None for missing or non-numeric input.

    Examples:
        >>> seconds_to_milliseconds(1633392000)
        1633392000000
        >>> seconds_to_milliseconds("1666544755.5")
        1666544755500
    """
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(Decimal(str(value)) * 1000)
    except (InvalidOperation, ValueError):
        return None


def parse8601(value: Any) -> Optional[int]:
    """
    Parse an ISO-8601 string into milliseconds since epoch.

    Naive strings are treated as UTC. Returns None when the value is not a
    string or cannot be parsed.

    Examples:
        >>> parse8601("2021-10-09T08:08:46+03:00")
        1633756126000
        >>> parse8601("not a date") is None
        True
    """
    if not isinstance(value, str) or not value:
        return None
    try:
        dt = dateparser.isoparse(value)
    except (ValueError, OverflowError):
        return None
    return datetime_to_timestamp(dt, milliseconds=True)


def iso8601(timestamp: Optional[int]) -> Optional[str]:
    """
    Format milliseconds since epoch as an ISO-8601 UTC string.

    Example:
        >>> iso8601(1633392000000)
        '2021-10-05T00:00:00.000Z'
    """
    if timestamp is None:
        return None
    try:
        dt = datetime.fromtimestamp(timestamp / 1000.0, tz=timezone.utc)
    except (OSError, OverflowError, ValueError):
        return None
    return dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{int(timestamp) % 1000:03d}Z"


def datetime_to_timestamp(dt: datetime, milliseconds: bool = False) -> int:
    """
    Convert a datetime object to Unix timestamp.

    Args:
        dt: Datetime object (naive values are assumed to be UTC)
        milliseconds: If True, return milliseconds; if False, return seconds
    """
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)

    if milliseconds:
        return int(round(dt.timestamp() * 1000))
    return int(dt.timestamp())


def current_utc_timestamp(milliseconds: bool = False) -> int:
    """Get current UTC timestamp in seconds (or milliseconds)."""
    return datetime_to_timestamp(datetime.now(timezone.utc), milliseconds)
