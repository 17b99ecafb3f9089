# backend/tutorbook/models/session.py
"""
Tutoring session model.

Timestamps are stored in UTC. Only pending and confirmed sessions block
availability; cancelled rows are kept for history.
"""

from sqlalchemy import CheckConstraint, Column, DateTime, Index, String, Text
from sqlalchemy.sql import func

from ..core.enums import SessionStatus
from ..core.ulid_helper import generate_ulid
from ..database import Base


class TutoringSession(Base):
    """A booked session between a tutor and a student"""

    __tablename__ = "sessions"

    id = Column(String(26), primary_key=True, default=generate_ulid)
    tutor_id = Column(String(64), nullable=False, index=True)
    student_id = Column(String(64), nullable=False, index=True)
    course_id = Column(String(64), nullable=True)
    start_time = Column(DateTime(timezone=True), nullable=False)
    end_time = Column(DateTime(timezone=True), nullable=False)
    status = Column(String(20), nullable=False, default=SessionStatus.CONFIRMED.value)
    payment_status = Column(String(20), nullable=False, default="pending")
    notes = Column(Text, nullable=True)
    cancellation_reason = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    __table_args__ = (
        CheckConstraint("end_time > start_time", name="check_session_time_order"),
        Index("idx_sessions_tutor_start", "tutor_id", "start_time"),
    )

    @property
    def blocks_slots(self) -> bool:
        return SessionStatus(self.status) in SessionStatus.blocking()

    def __repr__(self) -> str:
        return f"<TutoringSession {self.id} {self.start_time}-{self.end_time} ({self.status})>"
