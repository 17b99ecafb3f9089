# backend/tutorbook/services/booking_service.py
"""
Booking Service for the Tutorbook platform

Validates a requested range against freshly generated slots, enforces the
tutor's weekly session limit and persists the session. Payment, video and
email side effects belong to other collaborators and are not started here;
new sessions are stored confirmed with payment pending.
"""

from __future__ import annotations

from datetime import date, time, timedelta
from decimal import Decimal
import logging
from typing import TYPE_CHECKING, Optional, Tuple

from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.constants import MINUTES_PER_DAY
from ..core.enums import RejectionCode, SessionStatus
from ..core.exceptions import BookingConflictException, BusinessRuleException, NotFoundException
from ..core.timezone_utils import Clock, combine_local, get_default_clock, to_utc
from ..models.session import TutoringSession
from ..models.tutor import TutorProfile
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..repositories.factory import RepositoryFactory
from ..schemas.booking import (
    BookingCreateRequest,
    BookingPayload,
    BookingPreviewRequest,
    BookingPreviewResponse,
    BookingRejection,
)
from ..utils.time_utils import minutes_to_time_str, parse_time_to_minutes
from .availability_service import AvailabilityService
from .base import BaseService
from .booking_validator import validate_and_build_booking
from .conflict_checker import ConflictChecker, validate_time_range

if TYPE_CHECKING:
    from ..repositories.session_repository import SessionRepository
    from ..repositories.tutor_profile_repository import TutorProfileRepository

logger = logging.getLogger(__name__)

# Rejections that mean the time is taken rather than malformed
CONFLICT_CODES = frozenset({RejectionCode.SLOT_UNAVAILABLE})


def week_bounds(day: date) -> Tuple[date, date]:
    """Sunday-start calendar week containing day, as [start, end)."""
    week_start = day - timedelta(days=(day.weekday() + 1) % 7)
    return week_start, week_start + timedelta(days=7)


class BookingService(BaseService):
    """
    Service layer for booking previews and creation.

    Every call regenerates the day's slots from a fresh snapshot so a stale
    client-side slot list can never produce a double booking.
    """

    def __init__(
        self,
        db: Session,
        availability_service: Optional[AvailabilityService] = None,
        clock: Optional[Clock] = None,
        session_repository: Optional["SessionRepository"] = None,
        tutor_repository: Optional["TutorProfileRepository"] = None,
    ):
        super().__init__(db)
        self.clock = clock or get_default_clock()
        self.session_repository = (
            session_repository or RepositoryFactory.create_session_repository(db)
        )
        self.tutor_repository = (
            tutor_repository or RepositoryFactory.create_tutor_profile_repository(db)
        )
        self.availability_service = availability_service or AvailabilityService(
            db,
            clock=self.clock,
            session_repository=self.session_repository,
            tutor_repository=self.tutor_repository,
        )
        self.conflict_checker = ConflictChecker(
            db, repository=self.session_repository, clock=self.clock
        )

    def _get_profile(self, tutor_id: str) -> TutorProfile:
        profile = self.tutor_repository.get_by_profile_id(tutor_id)
        if profile is None:
            raise NotFoundException(f"Tutor {tutor_id} not found", code="TUTOR_NOT_FOUND")
        return profile

    def _reject(self, code: RejectionCode, reason: str) -> BookingPreviewResponse:
        prometheus_metrics.record_booking_rejection(code.value)
        return BookingPreviewResponse(
            accepted=False, rejection=BookingRejection(code=code, reason=reason)
        )

    # Weekly limit

    @BaseService.measure_operation("count_sessions_in_week")
    def count_sessions_in_week(self, tutor_id: str, day: date) -> int:
        """Non-cancelled sessions in the Sunday-start week containing day."""
        week_start, week_end = week_bounds(day)
        return self.session_repository.count_active_sessions(
            tutor_id,
            to_utc(combine_local(week_start, time.min, self.clock.tz)),
            to_utc(combine_local(week_end, time.min, self.clock.tz)),
        )

    @BaseService.measure_operation("is_tutor_at_weekly_limit")
    def is_tutor_at_weekly_limit(self, tutor_id: str, day: date) -> bool:
        """
        Check whether the tutor has reached max_weekly_sessions for day's week.

        Tutors without a configured limit are never at their limit.
        """
        profile = self._get_profile(tutor_id)
        if profile.max_weekly_sessions is None:
            return False
        return self.count_sessions_in_week(tutor_id, day) >= profile.max_weekly_sessions

    # Preview

    @BaseService.measure_operation("preview_booking")
    def preview_booking(
        self, tutor_id: str, request: BookingPreviewRequest
    ) -> BookingPreviewResponse:
        """
        Validate a requested range and assemble the booking payload.

        Rejections are returned, not raised.

        Raises:
            NotFoundException: If the tutor has no profile
        """
        profile = self._get_profile(tutor_id)
        start_minute = parse_time_to_minutes(request.start)

        end_minute = start_minute + request.duration_minutes
        if end_minute > MINUTES_PER_DAY:
            return self._reject(RejectionCode.INVALID_DURATION, "Session cannot run past midnight")

        duration_check = validate_time_range(
            request.start,
            minutes_to_time_str(end_minute),
            min_duration_minutes=settings.min_session_minutes,
            max_duration_minutes=settings.max_session_minutes,
        )
        if not duration_check["valid"]:
            return self._reject(RejectionCode.INVALID_DURATION, duration_check["reason"])

        slots = self.availability_service.get_slots_for_date(tutor_id, request.day)
        candidate = next((slot for slot in slots if slot.contains_minute(start_minute)), None)
        if candidate is None:
            return self._reject(
                RejectionCode.NO_MATCHING_SLOT, "tutor is not available at the requested time"
            )

        result = validate_and_build_booking(
            candidate,
            request.start,
            request.duration_minutes,
            Decimal(str(profile.hourly_rate)),
            tz=self.clock.tz,
        )
        if isinstance(result, BookingRejection):
            prometheus_metrics.record_booking_rejection(result.code.value)
            return BookingPreviewResponse(accepted=False, rejection=result)

        if (
            profile.max_weekly_sessions is not None
            and self.count_sessions_in_week(tutor_id, request.day) >= profile.max_weekly_sessions
        ):
            return self._reject(
                RejectionCode.WEEKLY_LIMIT_REACHED,
                f"tutor has reached the maximum of {profile.max_weekly_sessions} "
                f"sessions for this week",
            )

        return BookingPreviewResponse(accepted=True, booking=result)

    # Creation

    @BaseService.measure_operation("create_booking")
    def create_booking(self, tutor_id: str, request: BookingCreateRequest) -> TutoringSession:
        """
        Create a session for a validated range.

        Raises:
            NotFoundException: If the tutor has no profile
            BookingConflictException: If the time is already taken
            BusinessRuleException: If the range or weekly limit rules reject it
        """
        preview = self.preview_booking(tutor_id, request)
        if not preview.accepted:
            rejection = preview.rejection
            details = {"code": rejection.code.value, "reason": rejection.reason}
            if rejection.code in CONFLICT_CODES:
                raise BookingConflictException(details=details)
            raise BusinessRuleException(rejection.reason, code=rejection.code.value, details=details)

        booking: BookingPayload = preview.booking
        with self.transaction():
            # Tutor row lock: bookings for one tutor are checked and written one at a time
            profile = self.tutor_repository.get_by_profile_id(tutor_id, for_update=True)

            conflicts = self.conflict_checker.check_booking_conflicts(
                tutor_id, booking.day, booking.start, booking.end
            )
            if conflicts:
                raise BookingConflictException(details={"conflicts": conflicts})

            if (
                profile.max_weekly_sessions is not None
                and self.count_sessions_in_week(tutor_id, booking.day)
                >= profile.max_weekly_sessions
            ):
                raise BusinessRuleException(
                    f"tutor has reached the maximum of {profile.max_weekly_sessions} "
                    f"sessions for this week",
                    code=RejectionCode.WEEKLY_LIMIT_REACHED.value,
                )

            session = self.session_repository.create(
                tutor_id=tutor_id,
                student_id=request.student_id,
                course_id=request.course_id,
                start_time=to_utc(booking.start_time),
                end_time=to_utc(booking.end_time),
                status=SessionStatus.CONFIRMED.value,
                payment_status="pending",
                notes=request.notes,
            )

        self.logger.info(
            f"Created session {session.id} for tutor {tutor_id} on {booking.day} "
            f"{booking.start}-{booking.end}"
        )
        return session

    # Status changes

    @BaseService.measure_operation("update_session_status")
    def update_session_status(
        self,
        tutor_id: str,
        session_id: str,
        status: SessionStatus,
        reason: Optional[str] = None,
    ) -> TutoringSession:
        """
        Move a tutor's session to a new lifecycle status.

        Cancelling releases the session's time: only pending and confirmed
        sessions block slots.

        Raises:
            NotFoundException: If the tutor has no such session
            BusinessRuleException: If the session cannot move to status
        """
        target = SessionStatus(status)
        with self.transaction():
            session = self.session_repository.get_by_id(session_id)
            if session is None or session.tutor_id != tutor_id:
                raise NotFoundException(
                    f"Session {session_id} not found", code="SESSION_NOT_FOUND"
                )

            current = SessionStatus(session.status)
            if not current.can_transition_to(target):
                raise BusinessRuleException(
                    f"Session cannot move from {current.value} to {target.value}",
                    code="INVALID_STATUS_TRANSITION",
                    details={"current": current.value, "requested": target.value},
                )

            updates = {"status": target.value}
            if target == SessionStatus.CANCELLED:
                updates["cancellation_reason"] = reason
            session = self.session_repository.update(session_id, **updates)

        self.logger.info(
            f"Session {session_id} for tutor {tutor_id} moved from {current.value} "
            f"to {target.value}"
        )
        return session

    def cancel_session(
        self, tutor_id: str, session_id: str, reason: Optional[str] = None
    ) -> TutoringSession:
        """Cancel a pending or confirmed session, freeing its time."""
        return self.update_session_status(tutor_id, session_id, SessionStatus.CANCELLED, reason)
