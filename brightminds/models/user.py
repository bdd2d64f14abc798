"""User & Gamification Model"""

from sqlalchemy import BigInteger, Column, Enum, Integer, JSON, String

from brightminds.database import Base
from brightminds.models.base import TimestampMixin
from brightminds.models.enums import UserRole, ThemePreference, enum_values


class User(Base, TimestampMixin):
    """
    Unified user record for teachers and students.

    The primary key is the identity provider's uid; it is never generated here.
    Gamification fields are only meaningful for students and stay NULL for
    teachers. Classroom membership is kept as id lists that the classroom
    transactions update in lockstep with the classroom side.
    """
    __tablename__ = "users"

    id = Column(String(128), primary_key=True)

    display_name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    role = Column(
        Enum(UserRole, name="user_role", values_callable=enum_values),
        nullable=False,
        index=True,
    )
    avatar_url = Column(String(500), nullable=True)
    theme_preference = Column(String(20), default=ThemePreference.LIGHT.value, nullable=False)

    # Gamification (students only)
    level = Column(Integer, nullable=True)
    current_xp = Column(BigInteger, nullable=True)
    xp_to_next_level = Column(BigInteger, nullable=True)

    # Membership
    student_of_classrooms = Column(JSON, default=list, nullable=False)
    teacher_of_classrooms = Column(JSON, default=list, nullable=False)

    version = Column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version, "eager_defaults": True}

    @property
    def is_teacher(self) -> bool:
        """Check if user is teacher"""
        return self.role == UserRole.TEACHER

    @property
    def is_student(self) -> bool:
        """Check if user is student"""
        return self.role == UserRole.STUDENT

    def is_member_of(self, classroom_id: str) -> bool:
        return classroom_id in (self.student_of_classrooms or [])

    def __repr__(self) -> str:
        return f"<User {self.email} ({self.role})>"
