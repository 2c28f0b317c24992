"""Unit tests for timestamp coercion and expiry windows."""

from datetime import datetime, timedelta, timezone

import pytest

from medflow.utils.expiry import (
    MAX_SIGNED_URL_EXPIRES,
    calculate_file_expiry,
    clamp_expires_in,
)
from medflow.utils.timestamps import parse_timestamp, to_iso8601


@pytest.mark.unit
@pytest.mark.parametrize(
    "value",
    [
        datetime(2024, 1, 2, 3, 4, 5),
        datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc),
        datetime(2024, 1, 2, 12, 4, 5, tzinfo=timezone(timedelta(hours=9))),
        "2024-01-02T03:04:05Z",
        "2024-01-02 03:04:05",
        1704164645000,
    ],
)
def test_to_iso8601_normalizes_to_utc_millis(value):
    assert to_iso8601(value) == "2024-01-02T03:04:05.000Z"


@pytest.mark.unit
def test_to_iso8601_keeps_milliseconds():
    value = datetime(2024, 1, 2, 3, 4, 5, 678901)
    assert to_iso8601(value) == "2024-01-02T03:04:05.678Z"


@pytest.mark.unit
@pytest.mark.parametrize("value", [None, "", "not a date", True, object(), 10**20])
def test_invalid_timestamps_become_none(value):
    assert parse_timestamp(value) is None
    assert to_iso8601(value) is None


@pytest.mark.unit
@pytest.mark.parametrize(
    "value, expected",
    [
        (None, 3600),
        ("600", 600),
        (" 120 ", 120),
        (604800, 604800),
        ("abc", 3600),
        ("0", 1),
        ("-5", 1),
        (10**9, MAX_SIGNED_URL_EXPIRES),
    ],
)
def test_clamp_expires_in(value, expected):
    assert clamp_expires_in(value) == expected


@pytest.mark.unit
def test_clamp_expires_in_custom_default():
    assert clamp_expires_in(None, default=900) == 900


@pytest.mark.unit
def test_file_expiry_within_window():
    now = datetime(2024, 1, 5, 12, 0, tzinfo=timezone.utc)
    expiry = calculate_file_expiry("2024-01-02T03:04:05Z", now=now)

    assert expiry.expires_at == datetime(
        2024, 1, 9, 23, 59, 59, 999999, tzinfo=timezone.utc
    )
    assert expiry.days_remaining == 4
    assert expiry.is_expired is False


@pytest.mark.unit
def test_file_expiry_last_day():
    now = datetime(2024, 1, 9, 22, 0, tzinfo=timezone.utc)
    expiry = calculate_file_expiry(datetime(2024, 1, 2, 3, 4, 5), now=now)

    assert expiry.days_remaining == 0
    assert expiry.is_expired is False


@pytest.mark.unit
def test_file_expiry_after_window():
    now = datetime(2024, 1, 10, 0, 0, 1, tzinfo=timezone.utc)
    expiry = calculate_file_expiry(datetime(2024, 1, 2, 3, 4, 5), now=now)

    assert expiry.is_expired is True
    assert expiry.days_remaining == -1


@pytest.mark.unit
def test_file_expiry_custom_retention():
    now = datetime(2024, 1, 3, tzinfo=timezone.utc)
    expiry = calculate_file_expiry(datetime(2024, 1, 2), retention_days=1, now=now)

    assert expiry.days_remaining == 0
    assert expiry.is_expired is False


@pytest.mark.unit
@pytest.mark.parametrize("value", [None, "", "garbage"])
def test_file_expiry_without_upload_time_is_expired(value):
    expiry = calculate_file_expiry(value)

    assert expiry.is_expired is True
    assert expiry.days_remaining == -1
    assert expiry.expires_at == datetime.fromtimestamp(0, tz=timezone.utc)


@pytest.mark.unit
@pytest.mark.parametrize(
    "value",
    [
        "0001-01-01T00:00:00+05:00",
        "9999-12-31T23:00:00-05:00",
        datetime(1, 1, 1, tzinfo=timezone(timedelta(hours=5))),
    ],
)
def test_timestamps_outside_utc_range_become_none(value):
    assert parse_timestamp(value) is None
    assert to_iso8601(value) is None


@pytest.mark.unit
def test_file_expiry_past_the_last_representable_day_is_expired():
    expiry = calculate_file_expiry("9999-12-31T00:00:00")

    assert expiry.is_expired is True
    assert expiry.days_remaining == -1
