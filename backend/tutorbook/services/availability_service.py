# backend/tutorbook/services/availability_service.py
"""
Availability Service for the Tutorbook platform

Fetches a tutor's weekly template and booked-session snapshot, then hands
them to the pure slot generator. Templates are cached through the injected
CacheService for settings.availability_cache_ttl_seconds.
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta
from decimal import Decimal
import logging
from typing import TYPE_CHECKING, List, Optional, Union

from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.exceptions import NotFoundException
from ..core.timezone_utils import Clock, combine_local, get_default_clock, to_utc
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..repositories.factory import RepositoryFactory
from ..schemas.availability import BookedSession, BookingSlot, WeeklyAvailabilityTemplate
from ..schemas.booking import DurationOption
from .base import BaseService
from .booking_validator import calculate_price, valid_durations
from .cache_service import CacheKeyBuilder
from .slot_generator import generate_available_slots, slots_for_date, validate_days_ahead

if TYPE_CHECKING:
    from ..repositories.availability_repository import AvailabilityRepository
    from ..repositories.session_repository import SessionRepository
    from ..repositories.tutor_profile_repository import TutorProfileRepository
    from .cache_service import CacheService

logger = logging.getLogger(__name__)


class AvailabilityService(BaseService):
    """
    Service layer for weekly templates and generated slots.

    Slots are recomputed from a fresh snapshot on every call; only the
    template is cached.
    """

    def __init__(
        self,
        db: Session,
        cache_service: Optional["CacheService"] = None,
        clock: Optional[Clock] = None,
        repository: Optional["AvailabilityRepository"] = None,
        session_repository: Optional["SessionRepository"] = None,
        tutor_repository: Optional["TutorProfileRepository"] = None,
    ):
        """Initialize availability service with optional cache, clock and repositories."""
        super().__init__(db, cache=cache_service)
        self.cache_service = cache_service
        self.clock = clock or get_default_clock()

        # Initialize repositories
        self.repository = repository or RepositoryFactory.create_availability_repository(db)
        self.session_repository = (
            session_repository or RepositoryFactory.create_session_repository(db)
        )
        self.tutor_repository = (
            tutor_repository or RepositoryFactory.create_tutor_profile_repository(db)
        )

    @staticmethod
    def template_cache_key(tutor_id: str) -> str:
        return CacheKeyBuilder.build("availability", "template", tutor_id)

    # Template

    @BaseService.measure_operation("get_template")
    def get_template(self, tutor_id: str) -> Optional[WeeklyAvailabilityTemplate]:
        """
        Get a tutor's weekly template.

        Returns:
            The template, or None when the tutor has not configured one
        """
        cache_key = self.template_cache_key(tutor_id)
        if self.cache_service:
            cached = self.cache_service.get(cache_key)
            prometheus_metrics.record_cache_lookup(hit=cached is not None)
            if cached is not None:
                return WeeklyAvailabilityTemplate.from_mapping(cached["template"])

        mapping = self.repository.get_template(tutor_id)

        if self.cache_service:
            self.cache_service.set(
                cache_key, {"template": mapping}, ttl=settings.availability_cache_ttl_seconds
            )

        return WeeklyAvailabilityTemplate.from_mapping(mapping)

    @BaseService.measure_operation("update_template")
    def update_template(
        self, tutor_id: str, template: WeeklyAvailabilityTemplate
    ) -> WeeklyAvailabilityTemplate:
        """Replace a tutor's weekly template and drop the cached copy."""
        with self.transaction():
            self.repository.upsert_template(tutor_id, template.to_mapping())

        self.invalidate_cache(self.template_cache_key(tutor_id))
        self.logger.info(f"Updated availability template for tutor {tutor_id}")
        return template

    @BaseService.measure_operation("has_availability")
    def has_availability(self, tutor_id: str) -> bool:
        template = self.get_template(tutor_id)
        return template is not None and template.has_any_ranges()

    # Booked sessions

    def _day_start_utc(self, day: date) -> datetime:
        return to_utc(combine_local(day, time.min, self.clock.tz))

    @BaseService.measure_operation("get_booked_sessions")
    def get_booked_sessions(
        self, tutor_id: str, window_start: date, days_ahead: int
    ) -> List[BookedSession]:
        """
        Booked-session snapshot covering a generation window.

        The query is padded on both sides by settings.booked_session_padding_days
        so sessions spanning the window edges are included.
        """
        padding = timedelta(days=settings.booked_session_padding_days)
        range_start = self._day_start_utc(window_start) - padding
        range_end = self._day_start_utc(window_start + timedelta(days=days_ahead)) + padding

        sessions = self.session_repository.get_sessions_in_range(tutor_id, range_start, range_end)
        return [BookedSession.from_stored(session) for session in sessions]

    # Slots

    @BaseService.measure_operation("get_available_slots")
    def get_available_slots(
        self,
        tutor_id: str,
        start_date: Optional[Union[date, datetime]] = None,
        days_ahead: Optional[int] = None,
    ) -> List[BookingSlot]:
        """
        Generate a tutor's slots for a window.

        Args:
            tutor_id: Tutor identifier
            start_date: First day of the window (clock's today by default)
            days_ahead: Window length (settings.slot_lookahead_days by default)

        Returns:
            Chronological list of slots; empty when no template is configured
        """
        window_start = self.clock.start_of_day(start_date or self.clock.today())
        days_ahead = validate_days_ahead(
            settings.slot_lookahead_days if days_ahead is None else days_ahead
        )

        template = self.get_template(tutor_id)
        if template is None or not template.has_any_ranges() or days_ahead == 0:
            return []

        sessions = self.get_booked_sessions(tutor_id, window_start, days_ahead)
        slots = generate_available_slots(
            template,
            sessions,
            window_start,
            days_ahead,
            tutor_id=tutor_id,
            tz=self.clock.tz,
        )

        available = sum(1 for slot in slots if slot.available)
        prometheus_metrics.record_slots_generated(available, len(slots) - available)
        self.logger.info(
            f"Generated {len(slots)} slots ({available} available) for tutor {tutor_id} "
            f"starting {window_start}"
        )
        return slots

    @BaseService.measure_operation("get_slots_for_date")
    def get_slots_for_date(self, tutor_id: str, on_date: date) -> List[BookingSlot]:
        """Slots for a single calendar day."""
        return slots_for_date(self.get_available_slots(tutor_id, on_date, 1), on_date)

    # Durations

    @BaseService.measure_operation("get_duration_options")
    def get_duration_options(
        self,
        tutor_id: str,
        on_date: date,
        start: str,
        options: Optional[List[int]] = None,
    ) -> List[DurationOption]:
        """
        Offered session durations for a start time, flagged valid or not.

        A duration is valid when the whole session fits inside one available
        slot on the date.

        Raises:
            NotFoundException: If the tutor has no profile (no hourly rate)
        """
        profile = self.tutor_repository.get_by_profile_id(tutor_id)
        if profile is None:
            raise NotFoundException(f"Tutor {tutor_id} not found", code="TUTOR_NOT_FOUND")

        offered = options or settings.duration_options
        slots = self.get_slots_for_date(tutor_id, on_date)
        fitting = set(valid_durations(slots, on_date, start, offered))
        hourly_rate = Decimal(str(profile.hourly_rate))

        return [
            DurationOption(
                minutes=minutes,
                price=calculate_price(hourly_rate, minutes),
                valid=minutes in fitting,
            )
            for minutes in offered
        ]
