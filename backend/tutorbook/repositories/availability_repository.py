# backend/tutorbook/repositories/availability_repository.py
"""
Availability Repository for the Tutorbook platform

Stores one weekly template per tutor as a JSON mapping keyed by day name.
"""

import logging
from typing import Any, Dict, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..models.availability import TutorAvailability
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class AvailabilityRepository(BaseRepository[TutorAvailability]):
    """Repository for weekly availability templates."""

    def __init__(self, db: Session):
        super().__init__(db, TutorAvailability)

    def get_template(self, tutor_id: str) -> Optional[Dict[str, Any]]:
        """
        Stored template mapping for a tutor.

        Returns:
            The JSON mapping, or None when the tutor has not configured one
        """
        record = self.find_one_by(tutor_id=tutor_id)
        if record is None:
            return None
        return record.availability

    def upsert_template(self, tutor_id: str, availability: Dict[str, Any]) -> TutorAvailability:
        """Create or replace a tutor's template. Does not commit."""
        try:
            record = self.find_one_by(tutor_id=tutor_id)
            if record is None:
                return self.create(tutor_id=tutor_id, availability=availability)
            record.availability = availability
            self.db.flush()
            return record
        except SQLAlchemyError as e:
            self.logger.error(f"Error saving availability for tutor {tutor_id}: {str(e)}")
            self.db.rollback()
            raise RepositoryException(f"Failed to save availability: {str(e)}")
