# backend/tutorbook/api/dependencies/services.py
"""
Service layer dependencies for dependency injection.

This module provides factory functions that create service instances
with their required dependencies properly injected.
"""

from functools import lru_cache
import logging

from fastapi import Depends
from sqlalchemy.orm import Session

from ...core.timezone_utils import Clock, get_default_clock
from ...services.availability_service import AvailabilityService
from ...services.booking_service import BookingService
from ...services.cache_service import CacheService
from .database import get_db

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_cache_service_singleton() -> CacheService:
    """Get singleton cache service instance."""
    return CacheService.from_settings()


def get_cache_service_dep() -> CacheService:
    """Get cache service instance for dependency injection."""
    return get_cache_service_singleton()


def get_clock() -> Clock:
    """Clock in the platform timezone; tests override this with a FixedClock."""
    return get_default_clock()


def get_availability_service(
    db: Session = Depends(get_db),
    cache: CacheService = Depends(get_cache_service_dep),
    clock: Clock = Depends(get_clock),
) -> AvailabilityService:
    """Get AvailabilityService instance with proper dependencies."""
    return AvailabilityService(db, cache_service=cache, clock=clock)


def get_booking_service(
    db: Session = Depends(get_db),
    availability_service: AvailabilityService = Depends(get_availability_service),
    clock: Clock = Depends(get_clock),
) -> BookingService:
    """Get BookingService instance sharing the request's availability service."""
    return BookingService(db, availability_service=availability_service, clock=clock)
