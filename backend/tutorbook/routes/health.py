# backend/tutorbook/routes/health.py
"""
Health check endpoint for monitoring and load balancer probes.
"""

from datetime import datetime, timezone

from fastapi import APIRouter

from .. import __version__
from ..core.config import settings
from ..core.constants import BRAND_NAME
from ..schemas.health import HealthResponse

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
def health_check() -> HealthResponse:
    """Basic health status including service info and environment."""
    return HealthResponse(
        status="healthy",
        service=f"{BRAND_NAME.lower()}-api",
        version=__version__,
        environment=settings.environment,
        timestamp=datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
    )
