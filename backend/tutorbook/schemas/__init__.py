# backend/tutorbook/schemas/__init__.py
"""
Pydantic schemas for the Tutorbook platform.
"""

from .availability import (
    AvailabilityRange,
    AvailabilityTemplateResponse,
    BookedSession,
    BookingSlot,
    SlotListResponse,
    WeeklyAvailabilityTemplate,
)
from .booking import (
    BookingCreateRequest,
    BookingPayload,
    BookingPreviewRequest,
    BookingPreviewResponse,
    BookingRejection,
    DurationOption,
    DurationOptionsResponse,
    TutoringSessionResponse,
)

__all__ = [
    "AvailabilityRange",
    "AvailabilityTemplateResponse",
    "BookedSession",
    "BookingCreateRequest",
    "BookingPayload",
    "BookingPreviewRequest",
    "BookingPreviewResponse",
    "BookingRejection",
    "BookingSlot",
    "DurationOption",
    "DurationOptionsResponse",
    "SlotListResponse",
    "TutoringSessionResponse",
    "WeeklyAvailabilityTemplate",
]
