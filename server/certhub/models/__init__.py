"""
Models package initialization
Import all record types here so callers can use ``certhub.models``
"""

from certhub.models.user import User, UserRole
from certhub.models.content import Question, StoredQuestion, Exam, Level
from certhub.models.certificate import Certificate

__all__ = [
    "User",
    "UserRole",
    "Question",
    "StoredQuestion",
    "Exam",
    "Level",
    "Certificate",
]
