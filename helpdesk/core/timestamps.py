"""
Time Codec

Converts between the wire timestamp representation (ISO 8601 strings)
and the storage representation (timezone-aware UTC datetimes). Rate
limit windows are tracked in epoch milliseconds. SQLite hands naive
datetimes back; those are always UTC.
"""

import time
from datetime import UTC, datetime
from typing import Annotated

from pydantic import PlainSerializer


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(UTC)


def now_ms() -> int:
    """Current time in epoch milliseconds."""
    return time.time_ns() // 1_000_000


def to_storage(value: datetime) -> datetime:
    """
    Normalize a datetime for storage and comparison.

    Args:
        value: Aware or naive datetime (naive is assumed to be UTC)

    Returns:
        Aware datetime in UTC

    Raises:
        ValueError: If shifting to UTC leaves the representable range
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    try:
        return value.astimezone(UTC)
    except OverflowError as e:
        raise ValueError("Timestamp out of range") from e


def parse_wire_timestamp(value: str | None) -> datetime | None:
    """
    Parse an ISO 8601 wire timestamp.

    Accepts a trailing ``Z`` and offsets; naive values are taken as UTC.

    Args:
        value: Timestamp string from a request

    Returns:
        Aware UTC datetime, or None if the value is empty, not ISO 8601
        or outside the representable range once shifted to UTC
    """
    if not value:
        return None
    try:
        return to_storage(datetime.fromisoformat(value.strip()))
    except ValueError:
        return None


def to_wire(value: datetime) -> str:
    """Format a stored datetime as an ISO 8601 UTC string ending in ``Z``."""
    return to_storage(value).isoformat().replace("+00:00", "Z")


WireDatetime = Annotated[datetime, PlainSerializer(to_wire, return_type=str)]
