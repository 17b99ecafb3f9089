# backend/tutorbook/models/availability.py
"""
Weekly availability template storage.

One row per tutor. The template is a JSON object keyed by lowercase day
name, each value a list of {"start": "HH:MM", "end": "HH:MM"} ranges.
"""

from sqlalchemy import JSON, Column, DateTime, String
from sqlalchemy.sql import func

from ..core.ulid_helper import generate_ulid
from ..database import Base


class TutorAvailability(Base):
    """A tutor's weekly recurring availability template"""

    __tablename__ = "tutor_availability"

    id = Column(String(26), primary_key=True, default=generate_ulid)
    tutor_id = Column(String(64), nullable=False, unique=True, index=True)
    availability = Column(JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def __repr__(self) -> str:
        return f"<TutorAvailability tutor={self.tutor_id}>"
