# backend/tutorbook/services/slot_generator.py
"""
Slot generation for the Tutorbook platform.

Expands a tutor's weekly availability template across a window of calendar
dates and marks every generated slot unavailable when a blocking session
overlaps it. A partial overlap blocks the whole slot; slots are never split.

Everything here is a pure function of its arguments. Fetching the template
and the booked sessions is left to AvailabilityService.
"""

from collections import OrderedDict
from datetime import date, datetime, timedelta, tzinfo
import logging
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Sequence, Tuple, Union

from ..core.enums import DayOfWeek
from ..core.exceptions import ValidationException
from ..core.timezone_utils import Clock
from ..schemas.availability import BookingSlot, WeeklyAvailabilityTemplate
from .conflict_checker import intervals_overlap, session_blocks, session_minutes_on_day

logger = logging.getLogger(__name__)

TemplateInput = Union[WeeklyAvailabilityTemplate, Mapping[str, Any], None]


def _coerce_template(template: TemplateInput) -> Optional[WeeklyAvailabilityTemplate]:
    if template is None or isinstance(template, WeeklyAvailabilityTemplate):
        return template
    return WeeklyAvailabilityTemplate.from_mapping(template)


def validate_days_ahead(days_ahead: Any) -> int:
    if isinstance(days_ahead, bool) or not isinstance(days_ahead, int):
        raise ValidationException(
            f"days_ahead must be an integer, got {days_ahead!r}",
            code="INVALID_DAYS_AHEAD",
        )
    if days_ahead < 0:
        raise ValidationException(
            f"days_ahead must not be negative, got {days_ahead}",
            code="INVALID_DAYS_AHEAD",
        )
    return days_ahead


def iter_window_dates(
    window_start: Union[date, datetime], days_ahead: int, clock: Optional[Clock] = None
) -> Iterator[date]:
    """Yield each calendar date in [window_start, window_start + days_ahead)."""
    first = (clock or Clock()).start_of_day(window_start)
    for offset in range(validate_days_ahead(days_ahead)):
        yield first + timedelta(days=offset)


def _blocked_intervals(
    sessions: Iterable[Any], dates: Sequence[date], tz: tzinfo
) -> Dict[date, List[Tuple[int, int]]]:
    """Occupied minute intervals per window date from the blocking sessions."""
    blocking = [session for session in sessions if session_blocks(session)]
    intervals: Dict[date, List[Tuple[int, int]]] = {}
    for day in dates:
        occupied = []
        for session in blocking:
            clipped = session_minutes_on_day(session, day, tz)
            if clipped is not None:
                occupied.append(clipped)
        intervals[day] = occupied
    return intervals


def generate_available_slots(
    template: TemplateInput,
    booked_sessions: Iterable[Any],
    window_start: Union[date, datetime],
    days_ahead: int,
    *,
    tutor_id: Optional[str] = None,
    tz: Union[str, tzinfo, None] = None,
) -> List[BookingSlot]:
    """
    Generate the tutor's slots for a window of calendar dates.

    One slot is produced per (date, template range) pair, in date order and
    then in template order. A slot is unavailable when any pending or
    confirmed session overlaps its [start, end) on that date.

    Args:
        template: Weekly template (or its stored mapping); None or an empty
            template means no availability and yields no slots
        booked_sessions: Sessions with start_time, end_time and status; naive
            times are wall-clock values in tz, like window_start
        window_start: First day of the window; datetimes are reduced to
            their calendar day in tz
        days_ahead: Number of days in the window; 0 yields no slots
        tutor_id: Stamped onto every slot when given
        tz: Timezone used to resolve calendar days (settings default)

    Returns:
        Ordered list of BookingSlot values

    Raises:
        ValidationException: If days_ahead is negative or not an integer
        TimeFormatException: If a session or template time is malformed
    """
    days_ahead = validate_days_ahead(days_ahead)
    weekly = _coerce_template(template)
    if weekly is None or not weekly.has_any_ranges() or days_ahead == 0:
        return []

    clock = Clock(tz)
    dates = list(iter_window_dates(window_start, days_ahead, clock))
    blocked = _blocked_intervals(booked_sessions, dates, clock.tz)

    slots: List[BookingSlot] = []
    for current_date in dates:
        for availability in weekly.ranges_for(DayOfWeek.from_date(current_date)):
            range_start = availability.start_minutes
            range_end = availability.end_minutes
            conflicted = any(
                intervals_overlap(range_start, range_end, busy_start, busy_end)
                for busy_start, busy_end in blocked[current_date]
            )
            slots.append(
                BookingSlot(
                    tutor_id=tutor_id,
                    day=current_date,
                    start=availability.start,
                    end=availability.end,
                    available=not conflicted,
                )
            )

    logger.debug(
        f"Generated {len(slots)} slots for tutor {tutor_id} from {dates[0]} "
        f"over {days_ahead} days"
    )
    return slots


def slots_for_date(slots: Iterable[BookingSlot], day: date) -> List[BookingSlot]:
    """Slots that fall on the given calendar date, in their original order."""
    return [slot for slot in slots if slot.day == day]


def group_slots_by_day(slots: Iterable[BookingSlot]) -> "OrderedDict[date, List[BookingSlot]]":
    """Group slots by calendar date, preserving chronological order."""
    grouped: "OrderedDict[date, List[BookingSlot]]" = OrderedDict()
    for slot in slots:
        grouped.setdefault(slot.day, []).append(slot)
    return grouped
