"""Expiry windows for signed URLs and client uploads."""

from datetime import datetime, time, timedelta, timezone
from typing import Any, Optional

from medflow.schemas import FileExpiry
from medflow.utils.timestamps import parse_timestamp

# SigV4 presigned URLs cannot outlive seven days
MAX_SIGNED_URL_EXPIRES = 7 * 24 * 60 * 60
DEFAULT_SIGNED_URL_EXPIRES = 3600


def clamp_expires_in(
    value: Any, default: int = DEFAULT_SIGNED_URL_EXPIRES
) -> int:
    """
    Parse a requested signed-URL lifetime in seconds.

    Missing or non-integer values fall back to ``default``; the result is
    clamped to ``[1, MAX_SIGNED_URL_EXPIRES]``.
    """
    if value is None or isinstance(value, bool):
        seconds = default
    else:
        try:
            seconds = int(str(value).strip())
        except ValueError:
            seconds = default
    return max(1, min(seconds, MAX_SIGNED_URL_EXPIRES))


def calculate_file_expiry(
    uploaded_at: Any,
    retention_days: int = 7,
    now: Optional[datetime] = None,
) -> FileExpiry:
    """
    Compute the download window of a client upload.

    Uploads stay downloadable until the end of the UTC calendar day that is
    ``retention_days`` after the upload day. A missing or unparseable upload
    time counts as already expired.
    """
    now = parse_timestamp(now) if now is not None else datetime.now(timezone.utc)
    uploaded = parse_timestamp(uploaded_at)
    if uploaded is None:
        return _expired_window()

    try:
        expiry_day = uploaded.date() + timedelta(days=retention_days)
    except OverflowError:
        return _expired_window()
    expires_at = datetime.combine(expiry_day, time.max, tzinfo=timezone.utc)
    is_expired = now > expires_at
    days_remaining = (expiry_day - now.date()).days

    return FileExpiry(
        expires_at=expires_at,
        days_remaining=-1 if is_expired else days_remaining,
        is_expired=is_expired,
    )


def _expired_window() -> FileExpiry:
    return FileExpiry(
        expires_at=datetime.fromtimestamp(0, tz=timezone.utc),
        days_remaining=-1,
        is_expired=True,
    )
