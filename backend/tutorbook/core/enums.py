# backend/tutorbook/core/enums.py
"""
Core enums for the Tutorbook platform.

Closed enumerations used throughout scheduling so that day names, session
statuses and rejection codes cannot drift into free-form strings.
"""

from datetime import date
from enum import Enum
from typing import Dict, FrozenSet, List


class DayOfWeek(str, Enum):
    """
    Days of the week as stored in weekly availability templates.

    Values are the lowercase English day names used as template keys.
    """

    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"
    SUNDAY = "sunday"

    @classmethod
    def from_date(cls, value: date) -> "DayOfWeek":
        """Map a calendar date to its day of week (date.weekday() is Monday-based)."""
        return _WEEKDAY_ORDER[value.weekday()]

    @classmethod
    def ordered(cls) -> List["DayOfWeek"]:
        """Calendar display order, Sunday first."""
        return [_WEEKDAY_ORDER[6]] + _WEEKDAY_ORDER[:6]


_WEEKDAY_ORDER: List[DayOfWeek] = [
    DayOfWeek.MONDAY,
    DayOfWeek.TUESDAY,
    DayOfWeek.WEDNESDAY,
    DayOfWeek.THURSDAY,
    DayOfWeek.FRIDAY,
    DayOfWeek.SATURDAY,
    DayOfWeek.SUNDAY,
]


class SessionStatus(str, Enum):
    """Tutoring session lifecycle statuses."""

    PENDING = "pending"  # Awaiting payment confirmation
    CONFIRMED = "confirmed"  # Default for instant booking
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    NO_SHOW = "no_show"

    @classmethod
    def blocking(cls) -> FrozenSet["SessionStatus"]:
        """Statuses that make an overlapping slot unavailable."""
        return frozenset({cls.PENDING, cls.CONFIRMED})

    def can_transition_to(self, target: "SessionStatus") -> bool:
        """Whether a session in this status may be moved to target."""
        return target in _SESSION_TRANSITIONS[self]


# Completed, cancelled and no-show sessions are final
_SESSION_TRANSITIONS: Dict[SessionStatus, FrozenSet[SessionStatus]] = {
    SessionStatus.PENDING: frozenset({SessionStatus.CONFIRMED, SessionStatus.CANCELLED}),
    SessionStatus.CONFIRMED: frozenset(
        {SessionStatus.COMPLETED, SessionStatus.CANCELLED, SessionStatus.NO_SHOW}
    ),
    SessionStatus.COMPLETED: frozenset(),
    SessionStatus.CANCELLED: frozenset(),
    SessionStatus.NO_SHOW: frozenset(),
}


class DragPhase(str, Enum):
    """Phases of the click-and-drag slot picker."""

    IDLE = "idle"
    DRAGGING = "dragging"
    COMMITTED = "committed"
    CANCELLED = "cancelled"


class RejectionCode(str, Enum):
    """Machine-readable reasons a requested booking range was rejected."""

    SLOT_UNAVAILABLE = "SLOT_UNAVAILABLE"
    STARTS_BEFORE_SLOT = "STARTS_BEFORE_SLOT"
    STARTS_AFTER_SLOT = "STARTS_AFTER_SLOT"
    EXTENDS_BEYOND_SLOT = "EXTENDS_BEYOND_SLOT"
    INVALID_DURATION = "INVALID_DURATION"
    NO_MATCHING_SLOT = "NO_MATCHING_SLOT"
    RANGE_NOT_AVAILABLE = "RANGE_NOT_AVAILABLE"
    WEEKLY_LIMIT_REACHED = "WEEKLY_LIMIT_REACHED"
