# backend/tutorbook/schemas/availability.py
"""
Availability schemas for the Tutorbook platform.

A tutor publishes a weekly recurring template (day of week -> time ranges).
Slots are generated from the template for concrete calendar dates and are
never persisted; booked sessions are read-only snapshots used to mark slots
unavailable.
"""

from datetime import date, datetime
from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..core.enums import DayOfWeek, SessionStatus
from ..core.exceptions import TimeFormatException
from ..core.timezone_utils import to_utc
from ..utils.time_utils import normalize_time_str, parse_time_to_minutes
from .base import StandardizedModel, StrictModel


def _normalize_hhmm(value: Any) -> str:
    try:
        return normalize_time_str(value)
    except TimeFormatException as exc:
        raise ValueError(exc.message)


class AvailabilityRange(StandardizedModel):
    """One recurring time range inside a day of the weekly template."""

    start: str = Field(..., description="Start time, HH:MM (24-hour)")
    end: str = Field(..., description="End time, HH:MM (24-hour); 24:00 allowed")
    day: Optional[DayOfWeek] = Field(default=None, description="Owning day (informational)")

    @field_validator("start", "end", mode="before")
    @classmethod
    def _normalize_times(cls, v):
        return _normalize_hhmm(v)

    @model_validator(mode="after")
    def _validate_order(self) -> "AvailabilityRange":
        if self.start == "24:00":
            raise ValueError("Start time cannot be 24:00")
        if parse_time_to_minutes(self.end) <= parse_time_to_minutes(self.start):
            raise ValueError("End time must be after start time")
        return self

    @property
    def start_minutes(self) -> int:
        return parse_time_to_minutes(self.start)

    @property
    def end_minutes(self) -> int:
        return parse_time_to_minutes(self.end)


class WeeklyAvailabilityTemplate(StrictModel):
    """
    A tutor's weekly recurring availability.

    One list per day; unknown day keys are rejected. Ranges within a day are
    expected not to overlap (the template editor enforces this).
    """

    monday: List[AvailabilityRange] = Field(default_factory=list)
    tuesday: List[AvailabilityRange] = Field(default_factory=list)
    wednesday: List[AvailabilityRange] = Field(default_factory=list)
    thursday: List[AvailabilityRange] = Field(default_factory=list)
    friday: List[AvailabilityRange] = Field(default_factory=list)
    saturday: List[AvailabilityRange] = Field(default_factory=list)
    sunday: List[AvailabilityRange] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _normalize_keys(cls, data: Any) -> Any:
        if isinstance(data, Mapping):
            normalized: Dict[str, Any] = {}
            for key, ranges in data.items():
                name = key.value if isinstance(key, DayOfWeek) else str(key).strip().lower()
                normalized[name] = [] if ranges is None else ranges
            return normalized
        return data

    def ranges_for(self, day: DayOfWeek) -> List[AvailabilityRange]:
        return getattr(self, day.value)

    def has_any_ranges(self) -> bool:
        return any(self.ranges_for(day) for day in DayOfWeek)

    def to_mapping(self) -> Dict[str, List[Dict[str, str]]]:
        """JSON-ready mapping keyed by day name, as stored in the database."""
        return {
            day.value: [{"start": r.start, "end": r.end} for r in self.ranges_for(day)]
            for day in DayOfWeek
        }

    @classmethod
    def from_mapping(
        cls, mapping: Optional[Mapping[str, Any]]
    ) -> Optional["WeeklyAvailabilityTemplate"]:
        """Build a template from a stored mapping; None stays None (no template)."""
        if mapping is None:
            return None
        return cls.model_validate(mapping)


class BookedSession(StandardizedModel):
    """A committed session as seen by slot generation."""

    id: Optional[str] = None
    tutor_id: Optional[str] = None
    start_time: datetime
    end_time: datetime
    status: SessionStatus = SessionStatus.CONFIRMED

    @model_validator(mode="after")
    def _validate_order(self) -> "BookedSession":
        if self.end_time <= self.start_time:
            raise ValueError("Session end_time must be after start_time")
        return self

    @classmethod
    def from_stored(cls, session: Any) -> "BookedSession":
        """Snapshot of a persisted session; stored timestamps are UTC."""
        return cls(
            id=session.id,
            tutor_id=getattr(session, "tutor_id", None),
            start_time=to_utc(session.start_time),
            end_time=to_utc(session.end_time),
            status=session.status,
        )

    @property
    def blocks_slots(self) -> bool:
        return self.status in SessionStatus.blocking()


class BookingSlot(BaseModel):
    """
    A bookable (or blocked) time range on a concrete calendar day.

    Produced fresh on every generation call; also used for the finalized
    selection handed to booking creation.
    """

    model_config = ConfigDict(frozen=True)

    tutor_id: Optional[str] = None
    day: date
    start: str
    end: str
    available: bool = True

    @field_validator("start", "end", mode="before")
    @classmethod
    def _normalize_times(cls, v):
        return _normalize_hhmm(v)

    @property
    def start_minutes(self) -> int:
        return parse_time_to_minutes(self.start)

    @property
    def end_minutes(self) -> int:
        return parse_time_to_minutes(self.end)

    @property
    def duration_minutes(self) -> int:
        return self.end_minutes - self.start_minutes

    def contains_minute(self, minute: int) -> bool:
        """True when minute falls inside [start, end)."""
        return self.start_minutes <= minute < self.end_minutes

    def with_tutor(self, tutor_id: str) -> "BookingSlot":
        return self.model_copy(update={"tutor_id": tutor_id})


class AvailabilityTemplateResponse(StandardizedModel):
    tutor_id: str
    has_availability: bool
    availability: Optional[WeeklyAvailabilityTemplate] = None


class SlotListResponse(StandardizedModel):
    tutor_id: str
    start_date: date
    days_ahead: int
    has_availability: bool
    slots: List[BookingSlot]
