"""Timestamp coercion for values read back from the storage index."""

from datetime import datetime, timezone
from typing import Any, Optional


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Coerce a stored timestamp into an aware UTC datetime.

    Accepts datetimes (naive ones are taken as UTC), ISO-8601 / SQL strings
    and epoch milliseconds. Anything unparseable yields None.
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, (int, float)):
        try:
            parsed = datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    try:
        return parsed.astimezone(timezone.utc)
    except OverflowError:
        # Offsets at the edge of the datetime range have no UTC equivalent
        return None


def to_iso8601(value: Any) -> Optional[str]:
    """
    Render a stored timestamp as ``YYYY-MM-DDTHH:MM:SS.mmmZ``.

    Examples:
        >>> to_iso8601(datetime(2024, 1, 2, 3, 4, 5))
        '2024-01-02T03:04:05.000Z'
        >>> to_iso8601("not a date") is None
        True
    """
    parsed = parse_timestamp(value)
    if parsed is None:
        return None
    return parsed.replace(tzinfo=None).isoformat(timespec="milliseconds") + "Z"
