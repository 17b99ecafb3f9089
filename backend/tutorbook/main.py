# backend/tutorbook/main.py
from contextlib import asynccontextmanager
import logging
from typing import AsyncGenerator

from fastapi import APIRouter, FastAPI, Request, Response
from fastapi.responses import JSONResponse

from . import __version__
from .core.config import settings
from .core.constants import BRAND_NAME
from .core.exceptions import DomainException
from .database import Base, engine
from .monitoring.prometheus_metrics import prometheus_metrics
from .routes import health
from .routes.v1 import availability as availability_v1, bookings as bookings_v1

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def app_lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Handle application startup/shutdown."""
    logger.info(f"{BRAND_NAME} API starting up...")
    logger.info(f"Environment: {settings.environment}, timezone: {settings.default_timezone}")

    if not settings.is_production:
        # Production schemas are managed by migrations
        from . import models  # noqa: F401

        Base.metadata.create_all(bind=engine)

    yield

    logger.info(f"{BRAND_NAME} API shutting down...")


def create_app() -> FastAPI:
    app = FastAPI(
        title=f"{settings.app_name} Scheduling API",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=app_lifespan,
    )

    @app.exception_handler(DomainException)
    async def domain_exception_handler(request: Request, exc: DomainException) -> JSONResponse:
        http_exc = exc.to_http_exception()
        return JSONResponse(status_code=http_exc.status_code, content={"detail": http_exc.detail})

    app.include_router(health.router)

    @app.get("/metrics/prometheus", include_in_schema=False)
    def prometheus_endpoint() -> Response:
        return Response(
            content=prometheus_metrics.get_metrics(),
            media_type=prometheus_metrics.get_content_type(),
        )

    # Create API v1 router
    api_v1 = APIRouter(prefix="/api/v1")
    api_v1.include_router(availability_v1.router, prefix="/tutors")
    api_v1.include_router(bookings_v1.router, prefix="/tutors")
    app.include_router(api_v1)

    return app


app = create_app()
