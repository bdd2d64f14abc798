"""Centralized Enum Definitions"""

import enum


class UserRole(str, enum.Enum):
    """User roles for RBAC"""
    TEACHER = "TEACHER"
    STUDENT = "STUDENT"


class ThemePreference(str, enum.Enum):
    """UI theme stored on the user profile"""
    LIGHT = "LIGHT"
    DARK = "DARK"


class GameDifficulty(str, enum.Enum):
    """Library game difficulty"""
    EASY = "EASY"
    MEDIUM = "MEDIUM"
    HARD = "HARD"


class AttemptStatus(str, enum.Enum):
    """Student game attempt status"""
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"


def enum_values(enum_cls):
    """values_callable for SQLAlchemy Enum columns: persist .value, not .name"""
    return [member.value for member in enum_cls]
