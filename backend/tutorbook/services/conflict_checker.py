# backend/tutorbook/services/conflict_checker.py
"""
Conflict Checker Service for the Tutorbook platform

Handles booking conflict detection including:
- Half-open interval overlap on minutes since midnight
- Clipping (possibly multi-day) sessions to a single calendar day
- Finding the sessions that block a requested range
- Local time range validation

The module-level functions are pure and are shared by slot generation and
booking validation. ConflictChecker wraps them for callers that need the
tutor's sessions read from the database.
"""

from datetime import date, datetime, time, timedelta, tzinfo
import logging
from typing import Any, Dict, Iterable, List, Optional, Tuple, TypeVar, Union

from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.constants import MINUTES_PER_DAY
from ..core.enums import SessionStatus
from ..core.timezone_utils import Clock, combine_local, get_default_clock, to_local, to_utc
from ..repositories import RepositoryFactory
from ..repositories.session_repository import SessionRepository
from ..schemas.availability import BookedSession
from ..utils.time_utils import minutes_to_time_str, parse_time_to_minutes
from .base import BaseService

logger = logging.getLogger(__name__)

S = TypeVar("S")

TimeLike = Union[str, time]


def intervals_overlap(a_start: int, a_end: int, b_start: int, b_end: int) -> bool:
    """
    Check whether two half-open minute intervals overlap.

    Covers nested and partial overlaps. Intervals that only touch
    (a_end == b_start) do not overlap.
    """
    return a_start < b_end and a_end > b_start


def session_blocks(session: Any) -> bool:
    """True when the session's status makes overlapping slots unavailable."""
    status = getattr(session, "status", SessionStatus.CONFIRMED)
    return SessionStatus(status) in SessionStatus.blocking()


def _minutes_from_day(value: datetime, day: date) -> int:
    return (value.date() - day).days * MINUTES_PER_DAY + value.hour * 60 + value.minute


def session_minutes_on_day(session: Any, day: date, tz: tzinfo) -> Optional[Tuple[int, int]]:
    """
    Clip a session to the minutes it occupies on one calendar day.

    Aware timestamps are converted to wall-clock time in tz; naive ones are
    taken as wall-clock time in tz already. A session that spans midnight
    contributes to every day it touches.

    Returns:
        (start_minute, end_minute) within [0, 1440], or None when the
        session does not touch the day
    """
    start = _minutes_from_day(to_local(session.start_time, tz), day)
    end = _minutes_from_day(to_local(session.end_time, tz), day)
    if end <= 0 or start >= MINUTES_PER_DAY:
        return None
    return max(start, 0), min(end, MINUTES_PER_DAY)


def range_conflicts(
    day: date,
    start_minute: int,
    end_minute: int,
    sessions: Iterable[S],
    tz: tzinfo,
) -> List[S]:
    """
    Blocking sessions that overlap [start_minute, end_minute) on day.

    Cancelled, completed and no-show sessions never block.
    """
    conflicts = []
    for session in sessions:
        if not session_blocks(session):
            continue
        occupied = session_minutes_on_day(session, day, tz)
        if occupied and intervals_overlap(start_minute, end_minute, occupied[0], occupied[1]):
            conflicts.append(session)
    return conflicts


def validate_time_range(
    start: TimeLike,
    end: TimeLike,
    min_duration_minutes: Optional[int] = None,
    max_duration_minutes: Optional[int] = None,
) -> Dict[str, Any]:
    """
    Validate that a time range is valid for booking.

    Args:
        start: Start time (HH:MM or time)
        end: End time (HH:MM or time)
        min_duration_minutes: Minimum allowed duration
        max_duration_minutes: Maximum allowed duration

    Returns:
        Dictionary with validation result
    """
    start_minute = parse_time_to_minutes(start)
    end_minute = parse_time_to_minutes(end)

    if end_minute <= start_minute:
        return {"valid": False, "reason": "End time must be after start time"}

    duration = end_minute - start_minute

    if min_duration_minutes is not None and duration < min_duration_minutes:
        return {
            "valid": False,
            "reason": f"Session must be at least {min_duration_minutes} minutes long",
            "duration_minutes": duration,
        }

    if max_duration_minutes is not None and duration > max_duration_minutes:
        return {
            "valid": False,
            "reason": f"Session cannot be longer than {max_duration_minutes} minutes",
            "duration_minutes": duration,
        }

    return {"valid": True, "duration_minutes": duration}


class ConflictChecker(BaseService):
    """
    Service for checking booking conflicts against stored sessions.

    Reads the tutor's sessions around the requested day (padded so that
    multi-day sessions are seen) and applies the same overlap rules used by
    slot generation.
    """

    def __init__(
        self,
        db: Session,
        repository: Optional[SessionRepository] = None,
        clock: Optional[Clock] = None,
    ):
        """
        Initialize conflict checker service.

        Args:
            db: Database session
            repository: Optional SessionRepository instance
            clock: Clock carrying the scheduling timezone
        """
        super().__init__(db)
        self.logger = logging.getLogger(__name__)
        self.repository = repository or RepositoryFactory.create_session_repository(db)
        self.clock = clock or get_default_clock()

    def _sessions_around(
        self, tutor_id: str, check_date: date, exclude_session_id: Optional[str] = None
    ) -> List[BookedSession]:
        padding = timedelta(days=settings.booked_session_padding_days)
        range_start = combine_local(check_date, time.min, self.clock.tz) - padding
        range_end = combine_local(check_date + timedelta(days=1), time.min, self.clock.tz)
        sessions = self.repository.get_sessions_in_range(
            tutor_id,
            to_utc(range_start),
            to_utc(range_end),
            exclude_session_id=exclude_session_id,
        )
        return [BookedSession.from_stored(session) for session in sessions]

    @BaseService.measure_operation("check_booking_conflicts")
    def check_booking_conflicts(
        self,
        tutor_id: str,
        check_date: date,
        start: TimeLike,
        end: TimeLike,
        exclude_session_id: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """
        Check if a time range conflicts with existing sessions.

        Args:
            tutor_id: The tutor to check
            check_date: The date to check
            start: Start time of the range to check
            end: End time of the range to check
            exclude_session_id: Optional session ID to exclude from check

        Returns:
            List of conflicts with session details
        """
        start_minute = parse_time_to_minutes(start)
        end_minute = parse_time_to_minutes(end)
        sessions = self._sessions_around(tutor_id, check_date, exclude_session_id)

        conflicts = []
        for session in range_conflicts(check_date, start_minute, end_minute, sessions, self.clock.tz):
            occupied = session_minutes_on_day(session, check_date, self.clock.tz)
            conflicts.append(
                {
                    "session_id": session.id,
                    "start_time": minutes_to_time_str(occupied[0]),
                    "end_time": minutes_to_time_str(occupied[1]),
                    "status": SessionStatus(session.status).value,
                }
            )

        if conflicts:
            self.logger.warning(
                f"Found {len(conflicts)} session conflicts for tutor {tutor_id} "
                f"on {check_date} between {minutes_to_time_str(start_minute)}-"
                f"{minutes_to_time_str(end_minute)}"
            )

        return conflicts

    @BaseService.measure_operation("check_time_conflicts")
    def check_time_conflicts(
        self,
        tutor_id: str,
        check_date: date,
        start: TimeLike,
        end: TimeLike,
        exclude_session_id: Optional[str] = None,
    ) -> bool:
        """
        Check if a time range has any conflicts.

        Returns:
            True if there are conflicts, False otherwise
        """
        return bool(
            self.check_booking_conflicts(tutor_id, check_date, start, end, exclude_session_id)
        )

    @BaseService.measure_operation("get_booked_times_for_date")
    def get_booked_times_for_date(self, tutor_id: str, target_date: date) -> List[Dict[str, Any]]:
        """
        Get all blocking session times for a tutor on a specific date.

        Returns:
            List of booked time ranges, clipped to the date, in start order
        """
        booked = []
        for session in self._sessions_around(tutor_id, target_date):
            if not session_blocks(session):
                continue
            occupied = session_minutes_on_day(session, target_date, self.clock.tz)
            if occupied is None:
                continue
            booked.append(
                {
                    "session_id": session.id,
                    "start_time": minutes_to_time_str(occupied[0]),
                    "end_time": minutes_to_time_str(occupied[1]),
                }
            )
        return sorted(booked, key=lambda item: item["start_time"])
