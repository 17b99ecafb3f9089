# backend/tests/routes/conftest.py
from datetime import datetime
from decimal import Decimal

from fastapi.testclient import TestClient
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import tutorbook.models  # noqa: F401
from tutorbook.api.dependencies.database import get_db
from tutorbook.api.dependencies.services import get_cache_service_dep, get_clock
from tutorbook.core.timezone_utils import FixedClock
from tutorbook.database import Base
from tutorbook.main import create_app
from tutorbook.models.tutor import TutorProfile
from tutorbook.services.cache_service import CacheService


@pytest.fixture
def db_session_factory():
    engine = create_engine(
        "sqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(engine)
    factory = sessionmaker(bind=engine, expire_on_commit=False)
    yield factory
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def client(db_session_factory):
    """TestClient with an isolated database, a fresh cache and a clock frozen on Monday."""
    app = create_app()
    cache = CacheService()

    def override_get_db():
        db = db_session_factory()
        try:
            yield db
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_cache_service_dep] = lambda: cache
    app.dependency_overrides[get_clock] = lambda: FixedClock(datetime(2024, 1, 1, 8, 0), "UTC")

    return TestClient(app)


@pytest.fixture
def tutor(db_session_factory):
    db = db_session_factory()
    db.add(TutorProfile(profile_id="tutor-1", hourly_rate=Decimal("50.00")))
    db.commit()
    db.close()
    return "tutor-1"
