# backend/tutorbook/repositories/session_repository.py
"""
Session Repository for the Tutorbook platform

Reads the booked-session snapshot that slot generation and conflict checks
work from, and persists new sessions handed over by booking creation.
Callers pass UTC datetimes; stored timestamps are UTC.
"""

from datetime import datetime
import logging
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.enums import SessionStatus
from ..core.exceptions import RepositoryException
from ..models.session import TutoringSession
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class SessionRepository(BaseRepository[TutoringSession]):
    """Repository for tutoring session data access."""

    def __init__(self, db: Session):
        super().__init__(db, TutoringSession)

    def get_sessions_in_range(
        self,
        tutor_id: str,
        range_start: datetime,
        range_end: datetime,
        exclude_session_id: Optional[str] = None,
    ) -> List[TutoringSession]:
        """
        Non-cancelled sessions for a tutor whose start falls in [range_start, range_end].

        Args:
            tutor_id: Tutor identifier
            range_start: Earliest start time (UTC)
            range_end: Latest start time (UTC)
            exclude_session_id: Optional session to leave out (rescheduling)

        Returns:
            Sessions ordered by start time
        """
        try:
            query = self.db.query(TutoringSession).filter(
                TutoringSession.tutor_id == tutor_id,
                TutoringSession.start_time >= range_start,
                TutoringSession.start_time <= range_end,
                TutoringSession.status != SessionStatus.CANCELLED.value,
            )
            if exclude_session_id:
                query = query.filter(TutoringSession.id != exclude_session_id)
            return query.order_by(TutoringSession.start_time).all()
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting sessions for tutor {tutor_id}: {str(e)}")
            raise RepositoryException(f"Failed to get sessions: {str(e)}")

    def count_active_sessions(
        self, tutor_id: str, range_start: datetime, range_end: datetime
    ) -> int:
        """Count non-cancelled sessions starting in [range_start, range_end)."""
        try:
            return (
                self.db.query(TutoringSession)
                .filter(
                    TutoringSession.tutor_id == tutor_id,
                    TutoringSession.start_time >= range_start,
                    TutoringSession.start_time < range_end,
                    TutoringSession.status != SessionStatus.CANCELLED.value,
                )
                .count()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error counting sessions for tutor {tutor_id}: {str(e)}")
            raise RepositoryException(f"Failed to count sessions: {str(e)}")
