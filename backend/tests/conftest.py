# backend/tests/conftest.py
"""
Shared fixtures for the Tutorbook test suite.

Dates are anchored on Monday 2024-01-01 and clocks run in UTC unless a
test is specifically about timezone conversion.
"""

from datetime import date, datetime, timedelta
from typing import Callable, Optional

import pytest

from tutorbook.core.enums import SessionStatus
from tutorbook.core.timezone_utils import FixedClock
from tutorbook.schemas.availability import BookedSession, WeeklyAvailabilityTemplate

MONDAY = date(2024, 1, 1)
TUESDAY = MONDAY + timedelta(days=1)
WEDNESDAY = MONDAY + timedelta(days=2)


@pytest.fixture
def utc_clock() -> FixedClock:
    """Clock frozen at 08:00 UTC on Monday 2024-01-01."""
    return FixedClock(datetime(2024, 1, 1, 8, 0), "UTC")


@pytest.fixture
def monday_template() -> WeeklyAvailabilityTemplate:
    return WeeklyAvailabilityTemplate.model_validate(
        {"monday": [{"start": "09:00", "end": "12:00"}]}
    )


@pytest.fixture
def weekly_template() -> WeeklyAvailabilityTemplate:
    return WeeklyAvailabilityTemplate.model_validate(
        {
            "monday": [{"start": "09:00", "end": "12:00"}],
            "wednesday": [
                {"start": "13:00", "end": "15:00"},
                {"start": "16:00", "end": "18:00"},
            ],
        }
    )


@pytest.fixture
def make_session() -> Callable[..., BookedSession]:
    """Factory for booked sessions on a day, times given as (hour, minute)."""

    def _make(
        day: date,
        start: tuple,
        end: tuple,
        status: SessionStatus = SessionStatus.CONFIRMED,
        end_day: Optional[date] = None,
    ) -> BookedSession:
        return BookedSession(
            tutor_id="tutor-1",
            start_time=datetime(day.year, day.month, day.day, *start),
            end_time=datetime(
                (end_day or day).year, (end_day or day).month, (end_day or day).day, *end
            ),
            status=status,
        )

    return _make
