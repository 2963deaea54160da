"""Tests for passkeep.core.clock — canonical, non-decreasing timestamps."""

from datetime import datetime, timedelta, timezone

import pytest

from passkeep.core.clock import Clock, format_timestamp, get_current_time, parse_timestamp
from passkeep.core.errors import GenerationError


class TestClockFormat:
    def test_canonical_form(self, clock):
        assert clock.now() == "2026-01-01T12:00:00.000000+00:00"

    def test_output_parses(self):
        value = get_current_time()
        parsed = parse_timestamp(value)
        assert parsed.tzinfo is not None
        assert parsed.utcoffset() == timedelta(0)

    def test_other_offsets_converted_to_utc(self):
        plus_two = timezone(timedelta(hours=2))
        c = Clock(source=lambda: datetime(2026, 1, 1, 14, 30, tzinfo=plus_two))
        assert c.now() == "2026-01-01T12:30:00.000000+00:00"

    def test_microseconds_kept(self):
        c = Clock(source=lambda: datetime(2026, 5, 6, 7, 8, 9, 123456, tzinfo=timezone.utc))
        assert c.now() == "2026-05-06T07:08:09.123456+00:00"


class TestClockOrdering:
    def test_successive_calls_non_decreasing(self):
        values = [get_current_time() for _ in range(500)]
        assert values == sorted(values)

    def test_advances_with_source(self, clock, fake_time):
        t1 = clock.now()
        fake_time.advance(0.5)
        t2 = clock.now()
        assert t1 < t2

    def test_clamps_when_source_goes_backwards(self, clock, fake_time):
        t1 = clock.now()
        fake_time.rewind(3600)
        t2 = clock.now()
        assert t2 == t1

    def test_resumes_after_source_catches_up(self, clock, fake_time):
        t1 = clock.now()
        fake_time.rewind(10)
        clock.now()
        fake_time.advance(20)
        assert clock.now() > t1

    def test_string_order_is_chronological(self):
        early = format_timestamp(datetime(2026, 1, 1, 9, 59, 59, 999999, tzinfo=timezone.utc))
        late = format_timestamp(datetime(2026, 1, 1, 10, 0, 0, tzinfo=timezone.utc))
        assert early < late


class TestClockFailures:
    def test_source_error_raises_generation_error(self):
        def broken():
            raise OSError("clock gone")

        with pytest.raises(GenerationError):
            Clock(source=broken).now()

    def test_naive_datetime_rejected(self):
        with pytest.raises(GenerationError):
            Clock(source=lambda: datetime(2026, 1, 1)).now()


class TestParseTimestamp:
    def test_round_trip(self):
        assert parse_timestamp("2026-01-01T12:00:00.000000+00:00") == datetime(
            2026, 1, 1, 12, tzinfo=timezone.utc
        )

    @pytest.mark.parametrize(
        "value",
        [
            "2026-01-01T12:00:00Z",
            "2026-01-01T12:00:00+00:00",
            "2026-01-01T12:00:00.000000+02:00",
            "2026-01-01 12:00:00.000000+00:00",
            "",
            None,
        ],
    )
    def test_rejects_non_canonical(self, value):
        with pytest.raises(ValueError):
            parse_timestamp(value)
