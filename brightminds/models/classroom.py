"""Classroom, Enrollment Marker and Assigned Game Models"""

from sqlalchemy import (
    Column, DateTime, ForeignKey, Integer, String, Text, func,
)

from brightminds.database import Base
from brightminds.models.base import BaseModel, TimestampMixin


class Classroom(BaseModel, TimestampMixin):
    """
    Teacher-owned classroom.

    ``student_count`` and ``activity_count`` are denormalized counters. They are
    only ever changed inside the transaction that adds or removes the
    enrollment marker / assigned game they count.
    """
    __tablename__ = "classrooms"

    name = Column(String(100), nullable=False)
    teacher_id = Column(String(128), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    teacher_name = Column(String(100), nullable=True)
    unique_code = Column(String(8), unique=True, nullable=False, index=True)
    description = Column(String(255), nullable=True)
    icon_url = Column(String(500), nullable=True)

    student_count = Column(Integer, default=0, nullable=False)
    activity_count = Column(Integer, default=0, nullable=False)

    version = Column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version, "eager_defaults": True}

    def __repr__(self) -> str:
        return f"<Classroom {self.name} ({self.unique_code})>"


class ClassroomEnrollment(Base):
    """
    Enrollment marker: one row per (classroom, student).

    Mirrors ``User.student_of_classrooms`` from the classroom side.
    """
    __tablename__ = "classroom_enrollments"
    __parent_key__ = "classroom_id"
    __child_key__ = "student_id"

    classroom_id = Column(String(36), ForeignKey("classrooms.id", ondelete="CASCADE"), primary_key=True)
    student_id = Column(String(128), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True, index=True)
    student_name = Column(String(100), nullable=True)
    student_email = Column(String(255), nullable=True)
    date_enrolled = Column(DateTime, server_default=func.now(), nullable=False)

    __mapper_args__ = {"eager_defaults": True}

    def __repr__(self) -> str:
        return f"<ClassroomEnrollment {self.student_id} in {self.classroom_id}>"


class AssignedGame(BaseModel):
    """
    Classroom-scoped instance of a library game.

    Title, description, URL, max XP and total points are copied from the
    library game when it is assigned; later catalog edits do not touch them.
    """
    __tablename__ = "assigned_games"
    __parent_key__ = "classroom_id"
    __child_key__ = "id"

    classroom_id = Column(String(36), ForeignKey("classrooms.id", ondelete="CASCADE"), nullable=False, index=True)
    library_game_id = Column(String(36), nullable=False, index=True)

    game_title = Column(String(255), nullable=False)
    game_description = Column(Text, nullable=True)
    game_url_or_identifier = Column(String(500), nullable=True)
    max_xp_awarded = Column(Integer, nullable=True)
    total_points_possible = Column(Integer, nullable=True)

    due_date = Column(DateTime, nullable=True)
    max_attempts_allowed = Column(Integer, nullable=True)
    date_assigned = Column(DateTime, server_default=func.now(), nullable=False)

    __mapper_args__ = {"eager_defaults": True}

    def __repr__(self) -> str:
        return f"<AssignedGame {self.game_title} in {self.classroom_id}>"
