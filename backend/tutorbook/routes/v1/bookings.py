# backend/tutorbook/routes/v1/bookings.py
"""
Booking routes - API v1

Endpoints:
    POST  /{tutor_id}/bookings/preview              → Validate a range (always 200)
    POST  /{tutor_id}/bookings                      → Create a session
    PATCH /{tutor_id}/bookings/{session_id}         → Change a session status
    POST  /{tutor_id}/bookings/{session_id}/cancel  → Cancel a session
"""

import logging

from fastapi import APIRouter, Depends, status

from ...api.dependencies.services import get_booking_service
from ...core.exceptions import DomainException
from ...schemas.booking import (
    BookingCreateRequest,
    BookingPreviewRequest,
    BookingPreviewResponse,
    SessionCancelRequest,
    SessionStatusUpdateRequest,
    TutoringSessionResponse,
)
from ...services.booking_service import BookingService
from .availability import handle_domain_exception

logger = logging.getLogger(__name__)

router = APIRouter(tags=["bookings-v1"])


@router.post("/{tutor_id}/bookings/preview", response_model=BookingPreviewResponse)
def preview_booking(
    tutor_id: str,
    request: BookingPreviewRequest,
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingPreviewResponse:
    """
    Validate a requested range against the tutor's current slots.

    Rejections come back in the body with accepted=false so the booking
    wizard can show them inline.
    """
    try:
        return booking_service.preview_booking(tutor_id, request)
    except DomainException as exc:
        handle_domain_exception(exc)


@router.post(
    "/{tutor_id}/bookings",
    response_model=TutoringSessionResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_booking(
    tutor_id: str,
    request: BookingCreateRequest,
    booking_service: BookingService = Depends(get_booking_service),
) -> TutoringSessionResponse:
    """
    Book a session.

    Returns 409 when the time is taken, 422 when the range or weekly limit
    rules reject it and 404 when the tutor is unknown.
    """
    try:
        session = booking_service.create_booking(tutor_id, request)
    except DomainException as exc:
        handle_domain_exception(exc)
    return TutoringSessionResponse.model_validate(session)


@router.patch("/{tutor_id}/bookings/{session_id}", response_model=TutoringSessionResponse)
def update_session_status(
    tutor_id: str,
    session_id: str,
    request: SessionStatusUpdateRequest,
    booking_service: BookingService = Depends(get_booking_service),
) -> TutoringSessionResponse:
    """
    Move a session to a new status.

    Returns 404 for an unknown session and 422 for a disallowed transition.
    """
    try:
        session = booking_service.update_session_status(
            tutor_id, session_id, request.status, request.reason
        )
    except DomainException as exc:
        handle_domain_exception(exc)
    return TutoringSessionResponse.model_validate(session)


@router.post("/{tutor_id}/bookings/{session_id}/cancel", response_model=TutoringSessionResponse)
def cancel_session(
    tutor_id: str,
    session_id: str,
    request: SessionCancelRequest,
    booking_service: BookingService = Depends(get_booking_service),
) -> TutoringSessionResponse:
    """Cancel a session so its time can be booked again."""
    try:
        session = booking_service.cancel_session(tutor_id, session_id, request.reason)
    except DomainException as exc:
        handle_domain_exception(exc)
    return TutoringSessionResponse.model_validate(session)
