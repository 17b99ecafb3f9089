# backend/tests/unit/core/test_enums_and_timezone.py
"""
Tests for scheduling enums and the clock/timezone helpers.
"""

from datetime import date, datetime

import pytz

from tutorbook.core.enums import DayOfWeek, SessionStatus
from tutorbook.core.timezone_utils import (
    Clock,
    FixedClock,
    combine_local,
    get_timezone,
    to_local,
    to_utc,
)
from tutorbook.core.ulid_helper import generate_ulid, is_valid_ulid, parse_ulid

LA = "America/Los_Angeles"


class TestDayOfWeek:
    def test_from_date(self):
        assert DayOfWeek.from_date(date(2024, 1, 1)) == DayOfWeek.MONDAY
        assert DayOfWeek.from_date(date(2024, 1, 3)) == DayOfWeek.WEDNESDAY
        assert DayOfWeek.from_date(date(2024, 1, 7)) == DayOfWeek.SUNDAY

    def test_ordered_starts_on_sunday(self):
        ordered = DayOfWeek.ordered()
        assert len(ordered) == 7
        assert ordered[0] == DayOfWeek.SUNDAY
        assert ordered[1] == DayOfWeek.MONDAY
        assert set(ordered) == set(DayOfWeek)


class TestSessionStatus:
    def test_only_pending_and_confirmed_block(self):
        assert SessionStatus.blocking() == {SessionStatus.PENDING, SessionStatus.CONFIRMED}
        assert SessionStatus.CANCELLED not in SessionStatus.blocking()
        assert SessionStatus.COMPLETED not in SessionStatus.blocking()


class TestTimezoneHelpers:
    def test_to_local_converts_aware_values(self):
        local = to_local(datetime(2024, 1, 1, 18, 0, tzinfo=pytz.UTC), get_timezone(LA))
        assert (local.date(), local.hour) == (date(2024, 1, 1), 10)

    def test_to_local_keeps_naive_wall_clock(self):
        local = to_local(datetime(2024, 1, 1, 10, 0), get_timezone(LA))
        assert (local.date(), local.hour) == (date(2024, 1, 1), 10)
        assert local.tzinfo is not None

    def test_to_utc(self):
        naive = to_utc(datetime(2024, 1, 1, 10, 0))
        assert naive == datetime(2024, 1, 1, 10, 0, tzinfo=pytz.UTC)

        aware = combine_local(date(2024, 1, 1), datetime.min.time(), get_timezone(LA))
        assert to_utc(aware) == datetime(2024, 1, 1, 8, 0, tzinfo=pytz.UTC)


class TestClock:
    def test_start_of_day_converts_aware_datetimes(self):
        late_utc = datetime(2024, 1, 2, 3, 0, tzinfo=pytz.UTC)
        assert Clock("UTC").start_of_day(late_utc) == date(2024, 1, 2)
        assert Clock(LA).start_of_day(late_utc) == date(2024, 1, 1)

    def test_start_of_day_keeps_naive_wall_clock(self):
        assert Clock(LA).start_of_day(datetime(2024, 1, 1, 23, 30)) == date(2024, 1, 1)
        assert Clock(LA).start_of_day(date(2024, 1, 1)) == date(2024, 1, 1)

    def test_fixed_clock(self):
        clock = FixedClock(datetime(2024, 1, 1, 8, 0), "UTC")
        assert clock.today() == date(2024, 1, 1)
        assert clock.now().tzinfo is not None
        assert clock.now() == clock.now()

    def test_accepts_tzinfo(self):
        tz = pytz.timezone(LA)
        assert Clock(tz).tz is tz


class TestUlidHelper:
    def test_generated_ids_are_valid(self):
        value = generate_ulid()
        assert len(value) == 26
        assert is_valid_ulid(value)
        assert parse_ulid(value) is not None

    def test_invalid_ids(self):
        assert not is_valid_ulid("not-a-ulid")
        assert parse_ulid("") is None
