"""Tests for time utilities."""

import pytest
from datetime import date, datetime, timezone, timedelta

from lexitable.utils.time import parse_datetime, to_epoch_ms, to_utc_z, utc_now_z


def test_utc_now_z_always_ends_with_z():
    result = utc_now_z()
    assert result.endswith('Z')
    assert '+00:00Z' not in result


def test_to_utc_z_raises_on_naive_datetime():
    with pytest.raises(ValueError, match="Naive datetime not allowed"):
        to_utc_z(datetime.now())


def test_to_utc_z_converts_non_utc_timezone():
    est = timezone(timedelta(hours=-5))
    result = to_utc_z(datetime(2025, 12, 23, 12, 0, 0, tzinfo=est))
    assert result == '2025-12-23T17:00:00Z'


def test_parse_datetime_accepts_common_shapes():
    expected = datetime(2024, 1, 2, tzinfo=timezone.utc)
    assert parse_datetime("2024-01-02") == expected
    assert parse_datetime("2024-01-02T00:00:00Z") == expected
    assert parse_datetime(date(2024, 1, 2)) == expected
    assert parse_datetime(expected.timestamp() * 1000) == expected


@pytest.mark.parametrize("value", [None, "", "next week", True, object()])
def test_parse_datetime_rejects_garbage(value):
    assert parse_datetime(value) is None


def test_to_epoch_ms():
    assert to_epoch_ms("1970-01-01T00:00:01Z") == 1000
    assert to_epoch_ms("nope") is None
