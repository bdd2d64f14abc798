"""Models Package - Export all models for easy imports"""

from brightminds.models.base import BaseModel, TimestampMixin
from brightminds.models.enums import UserRole, ThemePreference, GameDifficulty, AttemptStatus
from brightminds.models.user import User
from brightminds.models.classroom import Classroom, ClassroomEnrollment, AssignedGame
from brightminds.models.game import Game
from brightminds.models.attempt import StudentGameAttempt


__all__ = [
    # Base classes
    "BaseModel",
    "TimestampMixin",

    # Enums
    "UserRole",
    "ThemePreference",
    "GameDifficulty",
    "AttemptStatus",

    # User
    "User",

    # Classroom
    "Classroom",
    "ClassroomEnrollment",
    "AssignedGame",

    # Catalog
    "Game",

    # Attempts
    "StudentGameAttempt",
]
