# backend/tutorbook/repositories/tutor_profile_repository.py
import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..models.tutor import TutorProfile
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class TutorProfileRepository(BaseRepository[TutorProfile]):
    """Repository for the tutor profile fields booking depends on."""

    def __init__(self, db: Session):
        super().__init__(db, TutorProfile)

    def get_by_profile_id(
        self, profile_id: str, for_update: bool = False
    ) -> Optional[TutorProfile]:
        """
        Look up a tutor profile.

        With for_update the row stays locked until the caller's transaction
        ends, so bookings for one tutor are written one at a time.
        """
        try:
            query = self.db.query(TutorProfile).filter(TutorProfile.profile_id == profile_id)
            if for_update:
                query = query.with_for_update()
            return query.first()
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting tutor profile {profile_id}: {str(e)}")
            raise RepositoryException(f"Failed to get tutor profile: {str(e)}")
