# backend/tutorbook/routes/v1/availability.py
"""
Tutor availability routes - API v1

Versioned availability endpoints under /api/v1/tutors.

Endpoints:
    GET  /{tutor_id}/availability  → Stored weekly template
    PUT  /{tutor_id}/availability  → Replace the weekly template
    GET  /{tutor_id}/slots         → Generated slots for a window
    GET  /{tutor_id}/durations     → Duration options for a start time
"""

from datetime import date
import logging
from typing import NoReturn, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from ...api.dependencies.services import get_availability_service, get_clock
from ...core.config import settings
from ...core.exceptions import DomainException
from ...core.timezone_utils import Clock
from ...schemas.availability import (
    AvailabilityTemplateResponse,
    SlotListResponse,
    WeeklyAvailabilityTemplate,
)
from ...schemas.booking import DurationOptionsResponse
from ...services.availability_service import AvailabilityService
from ...utils.time_utils import normalize_time_str

logger = logging.getLogger(__name__)

# V1 router - no prefix here, will be added when mounting in main.py
router = APIRouter(tags=["availability-v1"])


def handle_domain_exception(exc: DomainException) -> NoReturn:
    """Convert domain exceptions to HTTP exceptions."""
    if hasattr(exc, "to_http_exception"):
        raise exc.to_http_exception()
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))


@router.get("/{tutor_id}/availability", response_model=AvailabilityTemplateResponse)
def get_availability(
    tutor_id: str,
    availability_service: AvailabilityService = Depends(get_availability_service),
) -> AvailabilityTemplateResponse:
    """Return the tutor's weekly template; availability is null when none is stored."""
    try:
        template = availability_service.get_template(tutor_id)
    except DomainException as exc:
        handle_domain_exception(exc)
    return AvailabilityTemplateResponse(
        tutor_id=tutor_id,
        has_availability=template is not None and template.has_any_ranges(),
        availability=template,
    )


@router.put("/{tutor_id}/availability", response_model=AvailabilityTemplateResponse)
def update_availability(
    tutor_id: str,
    template: WeeklyAvailabilityTemplate,
    availability_service: AvailabilityService = Depends(get_availability_service),
) -> AvailabilityTemplateResponse:
    """Replace the tutor's weekly template."""
    try:
        saved = availability_service.update_template(tutor_id, template)
    except DomainException as exc:
        handle_domain_exception(exc)
    return AvailabilityTemplateResponse(
        tutor_id=tutor_id,
        has_availability=saved.has_any_ranges(),
        availability=saved,
    )


@router.get("/{tutor_id}/slots", response_model=SlotListResponse)
def get_slots(
    tutor_id: str,
    start_date: Optional[date] = Query(None, description="First day of the window (default today)"),
    days_ahead: Optional[int] = Query(None, ge=0, le=365, description="Window length in days"),
    on_date: Optional[date] = Query(None, description="Return a single day's slots"),
    availability_service: AvailabilityService = Depends(get_availability_service),
    clock: Clock = Depends(get_clock),
) -> SlotListResponse:
    """
    Generate the tutor's bookable slots.

    on_date takes precedence over start_date/days_ahead and returns one day.
    """
    if on_date is not None:
        start_date, days_ahead = on_date, 1
    window_start = start_date or clock.today()
    if days_ahead is None:
        days_ahead = settings.slot_lookahead_days

    try:
        slots = availability_service.get_available_slots(tutor_id, window_start, days_ahead)
    except DomainException as exc:
        handle_domain_exception(exc)

    return SlotListResponse(
        tutor_id=tutor_id,
        start_date=window_start,
        days_ahead=days_ahead,
        has_availability=availability_service.has_availability(tutor_id),
        slots=slots,
    )


@router.get("/{tutor_id}/durations", response_model=DurationOptionsResponse)
def get_duration_options(
    tutor_id: str,
    on_date: date = Query(..., description="Date of the session"),
    start: str = Query(..., description="Start time, HH:MM"),
    availability_service: AvailabilityService = Depends(get_availability_service),
) -> DurationOptionsResponse:
    """List offered durations for a start time with price and validity."""
    try:
        normalized = normalize_time_str(start)
        options = availability_service.get_duration_options(tutor_id, on_date, normalized)
    except DomainException as exc:
        handle_domain_exception(exc)
    return DurationOptionsResponse(
        tutor_id=tutor_id, day=on_date, start=normalized, options=options
    )
