# backend/tutorbook/models/__init__.py
"""
SQLAlchemy models for the Tutorbook scheduling backend.

Importing this package registers every table on Base.metadata.
"""

from .availability import TutorAvailability
from .session import TutoringSession
from .tutor import TutorProfile

__all__ = ["TutorAvailability", "TutoringSession", "TutorProfile"]
