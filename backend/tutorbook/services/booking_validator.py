# backend/tutorbook/services/booking_validator.py
"""
Booking validation and assembly for the Tutorbook platform.

A requested range [start, start + duration) is bookable only when one
available generated slot contains it completely. Expected failures come
back as BookingRejection values so the booking wizard can show inline
feedback; only malformed input raises.
"""

from datetime import date, datetime, timedelta, tzinfo
from decimal import ROUND_HALF_UP, Decimal
import logging
from typing import Iterable, List, Optional, Sequence, Union

from ..core.constants import (
    DEFAULT_DURATION_OPTIONS,
    GRID_STEP_MINUTES,
    MINUTES_PER_DAY,
)
from ..core.enums import RejectionCode
from ..core.timezone_utils import Clock, combine_local
from ..schemas.availability import BookingSlot
from ..schemas.booking import BookingPayload, BookingRejection
from ..utils.time_utils import minutes_to_time, minutes_to_time_str, parse_time_to_minutes

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")

BookingResult = Union[BookingPayload, BookingRejection]


def calculate_price(hourly_rate: Union[Decimal, float, int, str], duration_minutes: int) -> Decimal:
    """
    Price of a session, rounded to cents.

    The price is informational; nothing is charged here.
    """
    rate = Decimal(str(hourly_rate))
    return (rate * Decimal(duration_minutes) / Decimal(60)).quantize(CENT, rounding=ROUND_HALF_UP)


def calculate_price_cents(hourly_rate: Union[Decimal, float, int, str], duration_minutes: int) -> int:
    """Price of a session in integer cents."""
    return int(calculate_price(hourly_rate, duration_minutes) * 100)


def _reject(code: RejectionCode, reason: str) -> BookingRejection:
    logger.info(f"Booking range rejected ({code.value}): {reason}")
    return BookingRejection(code=code, reason=reason)


def _wall_clock(day: date, minute: int, tz: tzinfo) -> datetime:
    # 24:00 becomes midnight of the following day
    whole_days, remainder = divmod(minute, MINUTES_PER_DAY)
    return combine_local(day + timedelta(days=whole_days), minutes_to_time(remainder), tz)


def validate_and_build_booking(
    candidate_slot: BookingSlot,
    requested_start: str,
    duration_minutes: int,
    hourly_rate: Union[Decimal, float, int, str],
    *,
    clamp_end: bool = False,
    tz: Union[str, tzinfo, None] = None,
) -> BookingResult:
    """
    Validate a requested range against one slot and assemble the booking.

    Args:
        candidate_slot: Generated slot the selection was made in
        requested_start: Requested start time, HH:MM
        duration_minutes: Requested duration in minutes
        hourly_rate: Tutor's hourly rate used for the informational price
        clamp_end: Clamp an end past the slot end back to the slot end
            instead of rejecting (drag selections use this)
        tz: Timezone of the slot's wall-clock times (settings default)

    Returns:
        BookingPayload when the range fits, otherwise BookingRejection

    Raises:
        TimeFormatException: If requested_start is malformed
    """
    start_minute = parse_time_to_minutes(requested_start)

    if duration_minutes <= 0:
        return _reject(RejectionCode.INVALID_DURATION, "duration must be a positive number of minutes")
    if not candidate_slot.available:
        return _reject(RejectionCode.SLOT_UNAVAILABLE, "selected slot is no longer available")
    if start_minute < candidate_slot.start_minutes:
        return _reject(RejectionCode.STARTS_BEFORE_SLOT, "selection starts before slot opens")
    if start_minute >= candidate_slot.end_minutes:
        return _reject(RejectionCode.STARTS_AFTER_SLOT, "selection starts after slot closes")

    end_minute = start_minute + duration_minutes
    clamped = False
    if end_minute > candidate_slot.end_minutes:
        if not clamp_end:
            return _reject(
                RejectionCode.EXTENDS_BEYOND_SLOT, "selection extends beyond available slot"
            )
        end_minute = candidate_slot.end_minutes
        clamped = True

    zone = Clock(tz).tz
    duration = end_minute - start_minute
    return BookingPayload(
        tutor_id=candidate_slot.tutor_id,
        day=candidate_slot.day,
        start=minutes_to_time_str(start_minute),
        end=minutes_to_time_str(end_minute),
        start_time=_wall_clock(candidate_slot.day, start_minute, zone),
        end_time=_wall_clock(candidate_slot.day, end_minute, zone),
        duration_minutes=duration,
        hourly_rate=Decimal(str(hourly_rate)),
        price=calculate_price(hourly_rate, duration),
        price_cents=calculate_price_cents(hourly_rate, duration),
        clamped=clamped,
    )


def find_containing_slot(
    slots: Iterable[BookingSlot], day: date, start_minute: int, end_minute: int
) -> Optional[BookingSlot]:
    """First available slot on day whose [start, end) contains the range."""
    for slot in slots:
        if (
            slot.available
            and slot.day == day
            and slot.start_minutes <= start_minute
            and end_minute <= slot.end_minutes
        ):
            return slot
    return None


def validate_requested_range(
    slots: Sequence[BookingSlot], day: date, start: str, end: str
) -> Optional[BookingRejection]:
    """
    Check a requested [start, end) against the generated slots.

    Returns:
        None when an available slot contains the range, otherwise a rejection
    """
    start_minute = parse_time_to_minutes(start)
    end_minute = parse_time_to_minutes(end)
    if end_minute <= start_minute:
        return _reject(RejectionCode.INVALID_DURATION, "end time must be after start time")
    if find_containing_slot(slots, day, start_minute, end_minute) is None:
        return _reject(
            RejectionCode.NO_MATCHING_SLOT, "selection must fall within a single available slot"
        )
    return None


def is_range_available(
    slots: Iterable[BookingSlot],
    day: date,
    start_minute: int,
    end_minute: int,
    step: int = GRID_STEP_MINUTES,
) -> bool:
    """
    Check every step-minute increment of [start_minute, end_minute).

    Each increment must fall inside some available slot on day. Adjacent
    available slots count as continuous.
    """
    if end_minute <= start_minute:
        return False
    available = [slot for slot in slots if slot.day == day and slot.available]
    for minute in range(start_minute, end_minute, step):
        if not any(slot.contains_minute(minute) for slot in available):
            return False
    return True


def _fits_on_day(slots: Sequence[BookingSlot], day: date, start_minute: int, duration: int) -> bool:
    return find_containing_slot(slots, day, start_minute, start_minute + duration) is not None


def valid_durations(
    slots: Sequence[BookingSlot],
    day: date,
    start: str,
    options: Sequence[int] = DEFAULT_DURATION_OPTIONS,
) -> List[int]:
    """Durations from options that fit inside an available slot when starting at start."""
    start_minute = parse_time_to_minutes(start)
    return [option for option in options if _fits_on_day(slots, day, start_minute, option)]


def invalid_durations(
    slots: Sequence[BookingSlot],
    day: date,
    start: str,
    options: Sequence[int] = DEFAULT_DURATION_OPTIONS,
) -> List[int]:
    """Durations from options that would run past the tutor's available hours."""
    start_minute = parse_time_to_minutes(start)
    return [option for option in options if not _fits_on_day(slots, day, start_minute, option)]


def start_time_options(slot: BookingSlot, duration_minutes: int, step: int = 30) -> List[str]:
    """
    Start times offered inside a slot for a chosen duration.

    Unavailable slots and durations longer than the slot offer nothing.
    """
    if not slot.available or duration_minutes <= 0:
        return []
    last_start = slot.end_minutes - duration_minutes
    return [
        minutes_to_time_str(minute) for minute in range(slot.start_minutes, last_start + 1, step)
    ]
