# backend/tutorbook/core/config.py
import logging
import os
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
import pytz

from .constants import (
    BOOKED_SESSION_PADDING_DAYS,
    BRAND_NAME,
    DEFAULT_DURATION_OPTIONS,
    DEFAULT_LOOKAHEAD_DAYS,
    DRAG_ROUND_MINUTES,
    GRID_STEP_MINUTES,
    INITIAL_SELECTION_MINUTES,
    MAX_SESSION_DURATION,
    MIN_SESSION_DURATION,
)


logger = logging.getLogger(__name__)

# Load .env file only if not in CI
if not os.getenv("CI"):
    env_path = Path(__file__).parent.parent.parent / ".env"  # Goes up to backend/.env
    logger.debug(f"[CONFIG] Looking for .env at: {env_path}")
    load_dotenv(env_path)


class Settings(BaseSettings):
    app_name: str = Field(default=BRAND_NAME, description="Display name of the API")
    environment: str = Field(default="development", alias="ENVIRONMENT")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    database_url: str = Field(
        default="sqlite:///./tutorbook.db",
        alias="DATABASE_URL",
        description="SQLAlchemy database URL",
    )
    redis_url: Optional[str] = Field(
        default=None,
        alias="REDIS_URL",
        description="Redis URL for the availability cache (in-memory when unset)",
    )

    # Scheduling
    default_timezone: str = Field(
        default="America/Los_Angeles",
        alias="DEFAULT_TIMEZONE",
        description="Timezone used to resolve calendar days and 'today'",
    )
    slot_lookahead_days: int = Field(default=DEFAULT_LOOKAHEAD_DAYS, ge=1, le=365)
    booked_session_padding_days: int = Field(default=BOOKED_SESSION_PADDING_DAYS, ge=0)
    grid_step_minutes: int = Field(default=GRID_STEP_MINUTES, ge=1, le=60)
    drag_round_minutes: int = Field(default=DRAG_ROUND_MINUTES, ge=1, le=60)
    initial_selection_minutes: int = Field(default=INITIAL_SELECTION_MINUTES, ge=1)
    min_session_minutes: int = Field(default=MIN_SESSION_DURATION, ge=1)
    max_session_minutes: int = Field(default=MAX_SESSION_DURATION, ge=1)
    duration_options: List[int] = Field(default_factory=lambda: list(DEFAULT_DURATION_OPTIONS))

    # Cache
    availability_cache_ttl_seconds: int = Field(
        default=300,
        ge=0,
        description="TTL for cached weekly availability templates (0 disables caching)",
    )

    model_config = SettingsConfigDict(
        env_file=".env" if not os.getenv("CI") else None,
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    @field_validator("default_timezone")
    @classmethod
    def _validate_timezone(cls, value: str) -> str:
        try:
            pytz.timezone(value)
        except pytz.UnknownTimeZoneError:
            raise ValueError(f"Unknown timezone: {value}")
        return value

    @field_validator("duration_options")
    @classmethod
    def _validate_duration_options(cls, value: List[int]) -> List[int]:
        if any(option <= 0 for option in value):
            raise ValueError("Duration options must be positive minutes")
        return sorted(set(value))

    @property
    def is_production(self) -> bool:
        return self.environment.strip().lower() in {"prod", "production"}


settings = Settings()
