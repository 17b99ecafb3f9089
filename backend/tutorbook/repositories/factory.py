# backend/tutorbook/repositories/factory.py
"""
Repository Factory for the Tutorbook platform

Provides centralized creation of repository instances,
ensuring consistent initialization and dependency injection.
"""

from typing import TYPE_CHECKING

from sqlalchemy.orm import Session

# Avoid circular imports
if TYPE_CHECKING:
    from .availability_repository import AvailabilityRepository
    from .session_repository import SessionRepository
    from .tutor_profile_repository import TutorProfileRepository


class RepositoryFactory:
    """
    Factory class for creating repository instances.

    Centralizes repository creation to ensure consistent initialization
    and makes it easy to swap implementations if needed.
    """

    @staticmethod
    def create_availability_repository(db: Session) -> "AvailabilityRepository":
        """Create repository for weekly availability templates."""
        from .availability_repository import AvailabilityRepository

        return AvailabilityRepository(db)

    @staticmethod
    def create_session_repository(db: Session) -> "SessionRepository":
        """Create repository for booked sessions."""
        from .session_repository import SessionRepository

        return SessionRepository(db)

    @staticmethod
    def create_tutor_profile_repository(db: Session) -> "TutorProfileRepository":
        """Create repository for tutor profiles."""
        from .tutor_profile_repository import TutorProfileRepository

        return TutorProfileRepository(db)
