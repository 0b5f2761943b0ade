"""
Tests for timestamp normalization
"""

from datetime import datetime, timedelta, timezone

import pytest

from nimbus.ingest.timestamps import epoch_millis, parse_iso_datetime, parse_timestamp

REFERENCE = datetime(2023, 11, 14, 22, 13, 20, tzinfo=timezone.utc)


def _is_now(value: datetime) -> bool:
    return abs(datetime.now(timezone.utc) - value) < timedelta(seconds=5)


class TestEpochMillis:
    """Test unit inference from magnitude."""

    def test_seconds_at_boundary(self):
        """Test 1e12 is still read as seconds."""
        assert epoch_millis(1e12) == 1e15

    def test_milliseconds_just_above_boundary(self):
        """Test 1e12 + 1 is read as milliseconds."""
        assert epoch_millis(1e12 + 1) == 1e12 + 1

    def test_milliseconds_at_upper_boundary(self):
        """Test 1e15 is still read as milliseconds."""
        assert epoch_millis(1e15) == 1e15

    def test_nanoseconds_above_boundary(self):
        """Test 1e15 + 1 is read as nanoseconds."""
        assert epoch_millis(1e15 + 1) == pytest.approx((1e15 + 1) / 1e6)


class TestParseTimestamp:
    """Test parse_timestamp over every accepted input shape."""

    @pytest.mark.parametrize("value", [1700000000, 1700000000000, 1700000000000000000, 1700000000.0])
    def test_numeric_units_agree(self, value):
        """Test seconds, millis and nanos of the same instant normalize identically."""
        assert parse_timestamp(value) == REFERENCE

    def test_rfc3339_zulu(self):
        """Test Z suffix is UTC."""
        assert parse_timestamp("2024-01-01T00:00:00Z") == datetime(2024, 1, 1, tzinfo=timezone.utc)

    def test_offset_converted_to_utc(self):
        """Test offsets are converted to UTC."""
        assert parse_timestamp("2024-01-01T02:00:00+02:00") == datetime(2024, 1, 1, tzinfo=timezone.utc)

    def test_naive_string_is_utc(self):
        """Test naive strings are taken as UTC."""
        parsed = parse_timestamp("2024-01-01T00:00:00")
        assert parsed.tzinfo is not None
        assert parsed == datetime(2024, 1, 1, tzinfo=timezone.utc)

    def test_nanosecond_fraction_truncated(self):
        """Test fractions beyond microseconds are dropped."""
        parsed = parse_timestamp("2024-01-01T00:00:00.123456789Z")
        assert parsed.microsecond == 123456

    @pytest.mark.parametrize("value", [None, "", 0, False, True, "not a date", [], {"a": 1},
                                       float("nan"), float("inf"), 1e12, 10 ** 400, -10 ** 400,
                                       "0001-01-01T00:00:00+01:00", "9999-12-31T23:00:00-02:00"])
    def test_fallback_to_now(self, value):
        """Test missing, unparseable and unrepresentable values resolve to now."""
        assert _is_now(parse_timestamp(value))

    def test_result_is_always_utc(self):
        """Test outputs carry the UTC timezone."""
        for value in ("2024-06-01T12:00:00-05:00", 1700000000, None):
            assert parse_timestamp(value).utcoffset() == timedelta(0)

    def test_parse_iso_datetime_rejects_garbage(self):
        """Test the string parser reports failure as None."""
        assert parse_iso_datetime("yesterday") is None
        assert parse_iso_datetime(" 2024-01-01T00:00:00Z ") == datetime(2024, 1, 1, tzinfo=timezone.utc)
