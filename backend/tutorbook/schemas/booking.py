# backend/tutorbook/schemas/booking.py
"""
Booking schemas for the Tutorbook platform.

A validated selection becomes a BookingPayload that is handed to booking
creation. Rejections are returned as BookingRejection values so the booking
wizard can show inline feedback instead of failing the request.
"""

from datetime import date, datetime
from typing import List, Optional

from pydantic import ConfigDict, Field, field_validator

from ..core.enums import RejectionCode, SessionStatus
from .availability import _normalize_hhmm
from .base import Money, StandardizedModel, StrictRequestModel


class BookingPayload(StandardizedModel):
    """A finalized booking range ready for persistence."""

    model_config = ConfigDict(frozen=True)

    tutor_id: Optional[str] = None
    day: date
    start: str
    end: str
    start_time: datetime
    end_time: datetime
    duration_minutes: int
    hourly_rate: Money
    price: Money
    price_cents: int
    clamped: bool = Field(default=False, description="End was clamped to the slot end")


class BookingRejection(StandardizedModel):
    """Structured, non-fatal rejection of a requested booking range."""

    model_config = ConfigDict(frozen=True)

    code: RejectionCode
    reason: str


class BookingPreviewRequest(StrictRequestModel):
    day: date = Field(..., description="Calendar date of the session")
    start: str = Field(..., description="Requested start time, HH:MM")
    duration_minutes: int = Field(..., gt=0, le=24 * 60)

    @field_validator("start", mode="before")
    @classmethod
    def _normalize_start(cls, v):
        return _normalize_hhmm(v)


class BookingCreateRequest(BookingPreviewRequest):
    student_id: str = Field(..., min_length=1, max_length=64)
    notes: Optional[str] = Field(default=None, max_length=2000)
    course_id: Optional[str] = Field(default=None, max_length=64)


class SessionCancelRequest(StrictRequestModel):
    """Schema for cancelling a session."""

    reason: Optional[str] = Field(default=None, max_length=500)

    @field_validator("reason")
    @classmethod
    def _clean_reason(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        return v.strip() or None


class SessionStatusUpdateRequest(SessionCancelRequest):
    """Move a session to a new lifecycle status."""

    status: SessionStatus


class BookingPreviewResponse(StandardizedModel):
    accepted: bool
    booking: Optional[BookingPayload] = None
    rejection: Optional[BookingRejection] = None


class DurationOption(StandardizedModel):
    minutes: int
    price: Money
    valid: bool


class DurationOptionsResponse(StandardizedModel):
    tutor_id: str
    day: date
    start: str
    options: List[DurationOption]


class TutoringSessionResponse(StandardizedModel):
    """Persisted session returned after booking creation."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    tutor_id: str
    student_id: str
    start_time: datetime
    end_time: datetime
    status: SessionStatus
    payment_status: str
    notes: Optional[str] = None
    course_id: Optional[str] = None
    cancellation_reason: Optional[str] = None
    updated_at: Optional[datetime] = None
