# backend/tutorbook/repositories/__init__.py
"""
Repository Pattern Implementation for the Tutorbook platform

This package provides the repository layer for data access,
separating business logic from database queries.

Key Components:
- BaseRepository: Foundation for all repositories with generic CRUD operations
- RepositoryFactory: Factory for creating repository instances
- AvailabilityRepository: Weekly availability templates
- SessionRepository: Booked sessions
- TutorProfileRepository: Tutor rate and weekly limit

Usage:
    from tutorbook.repositories import RepositoryFactory

    # In a service:
    repository = RepositoryFactory.create_session_repository(db)
    sessions = repository.get_sessions_in_range(tutor_id, start, end)
"""

from .availability_repository import AvailabilityRepository
from .base_repository import BaseRepository
from .factory import RepositoryFactory
from .session_repository import SessionRepository
from .tutor_profile_repository import TutorProfileRepository

__all__ = [
    "AvailabilityRepository",
    "BaseRepository",
    "RepositoryFactory",
    "SessionRepository",
    "TutorProfileRepository",
]
