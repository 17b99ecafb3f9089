# backend/tutorbook/models/tutor.py
from sqlalchemy import Column, DateTime, Integer, Numeric, String
from sqlalchemy.sql import func

from ..core.ulid_helper import generate_ulid
from ..database import Base


class TutorProfile(Base):
    """
    Tutor profile fields used by booking.

    profile_id is the tutor identifier used across scheduling.
    max_weekly_sessions is optional; None means no weekly limit.
    """

    __tablename__ = "tutors"

    id = Column(String(26), primary_key=True, default=generate_ulid)
    profile_id = Column(String(64), nullable=False, unique=True, index=True)
    hourly_rate = Column(Numeric(10, 2), nullable=False, default=0)
    max_weekly_sessions = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self) -> str:
        return f"<TutorProfile {self.profile_id} rate={self.hourly_rate}>"
