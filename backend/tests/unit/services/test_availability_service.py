# backend/tests/unit/services/test_availability_service.py
"""
Tests for AvailabilityService against an in-memory database.

The template cache is exercised with a mocked AvailabilityRepository so
repository reads can be counted.
"""

from datetime import date, datetime
from decimal import Decimal
from unittest.mock import Mock

import pytest
import pytz

from tutorbook.core.config import settings
from tutorbook.core.exceptions import NotFoundException, ValidationException
from tutorbook.core.timezone_utils import FixedClock
from tutorbook.repositories import RepositoryFactory
from tutorbook.repositories.availability_repository import AvailabilityRepository
from tutorbook.schemas.availability import WeeklyAvailabilityTemplate
from tutorbook.services.availability_service import AvailabilityService
from tutorbook.services.cache_service import CacheService

MONDAY = date(2024, 1, 1)
TUTOR = "tutor-1"
MONDAY_MORNING = {"monday": [{"start": "09:00", "end": "12:00"}]}


@pytest.fixture
def clock():
    return FixedClock(datetime(2024, 1, 1, 8, 0), "UTC")


@pytest.fixture
def service(unit_db, clock):
    return AvailabilityService(unit_db, cache_service=CacheService(), clock=clock)


def _set_template(service, mapping):
    service.update_template(TUTOR, WeeklyAvailabilityTemplate.model_validate(mapping))


def _book(db, start, end, status="confirmed"):
    RepositoryFactory.create_session_repository(db).create(
        tutor_id=TUTOR,
        student_id="student-1",
        start_time=start.replace(tzinfo=pytz.UTC),
        end_time=end.replace(tzinfo=pytz.UTC),
        status=status,
    )
    db.commit()


class TestTemplate:
    def test_no_template(self, service):
        assert service.get_template(TUTOR) is None
        assert service.has_availability(TUTOR) is False
        assert service.get_available_slots(TUTOR, MONDAY, 7) == []

    def test_update_and_read_back(self, service):
        _set_template(service, MONDAY_MORNING)

        template = service.get_template(TUTOR)
        assert template.to_mapping()["monday"] == [{"start": "09:00", "end": "12:00"}]
        assert service.has_availability(TUTOR) is True

    def test_empty_template_has_no_availability(self, service):
        _set_template(service, {})
        assert service.has_availability(TUTOR) is False
        assert service.get_available_slots(TUTOR, MONDAY, 7) == []


class TestTemplateCache:
    @pytest.fixture
    def repository(self):
        repository = Mock(spec=AvailabilityRepository)
        repository.get_template.return_value = MONDAY_MORNING
        return repository

    def test_template_read_once_while_cached(self, unit_db, clock, repository):
        service = AvailabilityService(
            unit_db, cache_service=CacheService(), clock=clock, repository=repository
        )

        first = service.get_template(TUTOR)
        second = service.get_template(TUTOR)

        assert first == second
        repository.get_template.assert_called_once_with(TUTOR)

    def test_update_invalidates_cached_template(self, unit_db, clock, repository):
        service = AvailabilityService(
            unit_db, cache_service=CacheService(), clock=clock, repository=repository
        )
        service.get_template(TUTOR)

        service.update_template(TUTOR, WeeklyAvailabilityTemplate.model_validate(MONDAY_MORNING))
        service.get_template(TUTOR)

        repository.upsert_template.assert_called_once()
        assert repository.get_template.call_count == 2

    def test_missing_template_is_cached(self, unit_db, clock, repository):
        repository.get_template.return_value = None
        service = AvailabilityService(
            unit_db, cache_service=CacheService(), clock=clock, repository=repository
        )

        assert service.get_template(TUTOR) is None
        assert service.get_template(TUTOR) is None
        repository.get_template.assert_called_once()

    def test_zero_ttl_disables_caching(self, unit_db, clock, repository, monkeypatch):
        monkeypatch.setattr(settings, "availability_cache_ttl_seconds", 0)
        service = AvailabilityService(
            unit_db, cache_service=CacheService(), clock=clock, repository=repository
        )

        service.get_template(TUTOR)
        service.get_template(TUTOR)

        assert repository.get_template.call_count == 2

    def test_works_without_cache(self, unit_db, clock, repository):
        service = AvailabilityService(unit_db, clock=clock, repository=repository)
        assert service.has_availability(TUTOR)


class TestAvailableSlots:
    def test_booked_session_blocks_slot(self, unit_db, service):
        _set_template(service, MONDAY_MORNING)
        _book(unit_db, datetime(2024, 1, 1, 10, 0), datetime(2024, 1, 1, 10, 30))

        slots = service.get_available_slots(TUTOR, MONDAY, 7)

        assert [(s.day, s.start, s.end, s.available) for s in slots] == [
            (MONDAY, "09:00", "12:00", False)
        ]
        assert slots[0].tutor_id == TUTOR

    def test_cancelled_session_does_not_block(self, unit_db, service):
        _set_template(service, MONDAY_MORNING)
        _book(unit_db, datetime(2024, 1, 1, 10, 0), datetime(2024, 1, 1, 10, 30), "cancelled")

        assert service.get_available_slots(TUTOR, MONDAY, 7)[0].available

    def test_session_starting_before_window_is_seen(self, unit_db, service):
        _set_template(service, {"monday": [{"start": "00:00", "end": "02:00"}]})
        _book(unit_db, datetime(2023, 12, 31, 23, 0), datetime(2024, 1, 1, 1, 0))

        assert not service.get_available_slots(TUTOR, MONDAY, 1)[0].available

    def test_stored_sessions_are_read_as_utc(self, unit_db):
        clock = FixedClock(datetime(2024, 1, 1, 8, 0), "America/Los_Angeles")
        service = AvailabilityService(unit_db, cache_service=CacheService(), clock=clock)
        _set_template(service, MONDAY_MORNING)
        # 18:00 UTC is 10:00 in Los Angeles
        _book(unit_db, datetime(2024, 1, 1, 18, 0), datetime(2024, 1, 1, 18, 30))

        booked = service.get_booked_sessions(TUTOR, MONDAY, 1)

        assert booked[0].start_time == datetime(2024, 1, 1, 18, 0, tzinfo=pytz.UTC)
        assert not service.get_available_slots(TUTOR, MONDAY, 1)[0].available

    def test_defaults_to_clock_today_and_lookahead(self, service, monkeypatch):
        monkeypatch.setattr(settings, "slot_lookahead_days", 14)
        _set_template(service, MONDAY_MORNING)

        slots = service.get_available_slots(TUTOR)

        assert [s.day for s in slots] == [date(2024, 1, 1), date(2024, 1, 8)]

    def test_negative_days_ahead(self, service):
        with pytest.raises(ValidationException):
            service.get_available_slots(TUTOR, MONDAY, -1)

    def test_zero_days_ahead(self, service):
        _set_template(service, MONDAY_MORNING)
        assert service.get_available_slots(TUTOR, MONDAY, 0) == []

    def test_slots_for_date(self, service):
        _set_template(service, MONDAY_MORNING)
        assert len(service.get_slots_for_date(TUTOR, MONDAY)) == 1
        assert service.get_slots_for_date(TUTOR, date(2024, 1, 2)) == []


class TestDurationOptions:
    def test_options_priced_and_flagged(self, unit_db, service):
        RepositoryFactory.create_tutor_profile_repository(unit_db).create(
            profile_id=TUTOR, hourly_rate=Decimal("60.00")
        )
        unit_db.commit()
        _set_template(service, MONDAY_MORNING)

        options = service.get_duration_options(TUTOR, MONDAY, "10:30", [30, 60, 90, 120])

        assert [(o.minutes, o.price, o.valid) for o in options] == [
            (30, Decimal("30.00"), True),
            (60, Decimal("60.00"), True),
            (90, Decimal("90.00"), True),
            (120, Decimal("120.00"), False),
        ]

    def test_unknown_tutor(self, service):
        with pytest.raises(NotFoundException):
            service.get_duration_options("missing", MONDAY, "10:00")
