# backend/tests/unit/services/test_booking_validator.py
"""
Unit tests for booking range validation and payload assembly.
"""

from datetime import date, datetime
from decimal import Decimal

import pytest
import pytz

from tutorbook.core.enums import RejectionCode
from tutorbook.core.exceptions import TimeFormatException
from tutorbook.schemas.availability import BookingSlot
from tutorbook.schemas.booking import BookingPayload, BookingRejection
from tutorbook.services.booking_validator import (
    calculate_price,
    calculate_price_cents,
    find_containing_slot,
    invalid_durations,
    is_range_available,
    start_time_options,
    valid_durations,
    validate_and_build_booking,
    validate_requested_range,
)
from tutorbook.utils.time_utils import minutes_to_time_str

MONDAY = date(2024, 1, 1)
RATE = Decimal("50.00")


@pytest.fixture
def morning_slot() -> BookingSlot:
    return BookingSlot(tutor_id="tutor-1", day=MONDAY, start="09:00", end="12:00")


class TestValidateAndBuildBooking:
    def test_accepts_range_inside_slot(self, morning_slot):
        result = validate_and_build_booking(morning_slot, "10:00", 60, RATE, tz="UTC")

        assert isinstance(result, BookingPayload)
        assert (result.start, result.end, result.duration_minutes) == ("10:00", "11:00", 60)
        assert result.tutor_id == "tutor-1"
        assert result.day == MONDAY
        assert result.start_time == datetime(2024, 1, 1, 10, 0, tzinfo=pytz.UTC)
        assert result.end_time == datetime(2024, 1, 1, 11, 0, tzinfo=pytz.UTC)
        assert result.price == Decimal("50.00")
        assert result.price_cents == 5000
        assert result.clamped is False

    def test_range_filling_whole_slot(self, morning_slot):
        result = validate_and_build_booking(morning_slot, "09:00", 180, RATE, tz="UTC")
        assert isinstance(result, BookingPayload)
        assert result.end == "12:00"
        assert result.price == Decimal("150.00")

    def test_starts_before_slot(self, morning_slot):
        result = validate_and_build_booking(morning_slot, "08:30", 60, RATE)
        assert result == BookingRejection(
            code=RejectionCode.STARTS_BEFORE_SLOT, reason="selection starts before slot opens"
        )

    def test_extends_beyond_slot(self, morning_slot):
        result = validate_and_build_booking(morning_slot, "11:30", 60, RATE)
        assert result == BookingRejection(
            code=RejectionCode.EXTENDS_BEYOND_SLOT,
            reason="selection extends beyond available slot",
        )

    def test_clamps_end_when_requested(self, morning_slot):
        result = validate_and_build_booking(
            morning_slot, "11:30", 60, RATE, clamp_end=True, tz="UTC"
        )

        assert isinstance(result, BookingPayload)
        assert (result.start, result.end, result.duration_minutes) == ("11:30", "12:00", 30)
        assert result.clamped is True
        assert result.price == Decimal("25.00")

    def test_starting_at_slot_end(self, morning_slot):
        result = validate_and_build_booking(morning_slot, "12:00", 30, RATE)
        assert result.code == RejectionCode.STARTS_AFTER_SLOT

    def test_unavailable_slot(self, morning_slot):
        taken = morning_slot.model_copy(update={"available": False})
        result = validate_and_build_booking(taken, "10:00", 60, RATE)
        assert result.code == RejectionCode.SLOT_UNAVAILABLE
        assert result.reason == "selected slot is no longer available"

    @pytest.mark.parametrize("duration", [0, -30])
    def test_non_positive_duration(self, morning_slot, duration):
        result = validate_and_build_booking(morning_slot, "10:00", duration, RATE)
        assert result.code == RejectionCode.INVALID_DURATION

    def test_malformed_start_raises(self, morning_slot):
        with pytest.raises(TimeFormatException):
            validate_and_build_booking(morning_slot, "10h", 60, RATE)

    def test_end_of_day_maps_to_next_midnight(self):
        late = BookingSlot(day=MONDAY, start="22:00", end="24:00")
        result = validate_and_build_booking(late, "23:00", 60, RATE, tz="UTC")

        assert result.end == "24:00"
        assert result.end_time == datetime(2024, 1, 2, 0, 0, tzinfo=pytz.UTC)

    def test_wall_clock_uses_timezone(self, morning_slot):
        result = validate_and_build_booking(
            morning_slot, "10:00", 60, RATE, tz="America/Los_Angeles"
        )
        assert result.start_time.astimezone(pytz.UTC) == datetime(
            2024, 1, 1, 18, 0, tzinfo=pytz.UTC
        )

    def test_accepted_exactly_when_an_available_slot_contains_the_range(self):
        slots = [
            BookingSlot(day=MONDAY, start="09:00", end="12:00"),
            BookingSlot(day=MONDAY, start="13:00", end="15:00", available=False),
        ]
        for start_minute in range(8 * 60, 16 * 60, 30):
            for duration in (30, 60, 90):
                candidate = next((s for s in slots if s.contains_minute(start_minute)), None)
                if candidate is None:
                    continue
                result = validate_and_build_booking(
                    candidate, minutes_to_time_str(start_minute), duration, RATE, tz="UTC"
                )
                contained = find_containing_slot(
                    slots, MONDAY, start_minute, start_minute + duration
                )
                assert isinstance(result, BookingPayload) == (contained is not None)


class TestPricing:
    @pytest.mark.parametrize(
        "rate, minutes, expected",
        [
            (Decimal("45"), 90, Decimal("67.50")),
            ("33.33", 20, Decimal("11.11")),
            (60, 30, Decimal("30.00")),
            (Decimal("25.00"), 45, Decimal("18.75")),
        ],
    )
    def test_calculate_price(self, rate, minutes, expected):
        assert calculate_price(rate, minutes) == expected

    def test_price_cents(self):
        assert calculate_price_cents("33.33", 20) == 1111
        assert calculate_price_cents(Decimal("50"), 60) == 5000


class TestRangeHelpers:
    @pytest.fixture
    def adjacent_slots(self):
        return [
            BookingSlot(day=MONDAY, start="09:00", end="10:00"),
            BookingSlot(day=MONDAY, start="10:00", end="11:00"),
        ]

    def test_adjacent_slots_count_as_continuous(self, adjacent_slots):
        assert is_range_available(adjacent_slots, MONDAY, 570, 630)

    def test_gap_breaks_availability(self, adjacent_slots):
        adjacent_slots[1] = adjacent_slots[1].model_copy(update={"available": False})
        assert not is_range_available(adjacent_slots, MONDAY, 570, 630)
        assert is_range_available(adjacent_slots, MONDAY, 570, 600)

    def test_empty_or_other_day_range(self, adjacent_slots):
        assert not is_range_available(adjacent_slots, MONDAY, 600, 600)
        assert not is_range_available(adjacent_slots, date(2024, 1, 2), 570, 600)

    def test_validate_requested_range(self, adjacent_slots):
        assert validate_requested_range(adjacent_slots, MONDAY, "09:15", "10:00") is None

        spanning = validate_requested_range(adjacent_slots, MONDAY, "09:30", "10:30")
        assert spanning.code == RejectionCode.NO_MATCHING_SLOT

        backwards = validate_requested_range(adjacent_slots, MONDAY, "10:00", "09:00")
        assert backwards.code == RejectionCode.INVALID_DURATION


class TestDurationOptions:
    def test_durations_split_by_fit(self, morning_slot):
        options = (30, 60, 90, 120)
        assert valid_durations([morning_slot], MONDAY, "10:30", options) == [30, 60, 90]
        assert invalid_durations([morning_slot], MONDAY, "10:30", options) == [120]

    def test_no_durations_outside_availability(self, morning_slot):
        assert valid_durations([morning_slot], MONDAY, "13:00") == []

    def test_start_time_options(self, morning_slot):
        assert start_time_options(morning_slot, 60) == [
            "09:00",
            "09:30",
            "10:00",
            "10:30",
            "11:00",
        ]
        assert start_time_options(morning_slot, 180) == ["09:00"]
        assert start_time_options(morning_slot, 240) == []

    def test_unavailable_slot_offers_no_start_times(self, morning_slot):
        taken = morning_slot.model_copy(update={"available": False})
        assert start_time_options(taken, 30) == []
