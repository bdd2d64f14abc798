"""Student Game Attempt Model"""

from sqlalchemy import BigInteger, Column, DateTime, Enum, Index, Integer, String, func

from brightminds.models.base import BaseModel
from brightminds.models.enums import AttemptStatus, enum_values


class StudentGameAttempt(BaseModel):
    """
    One completed play-through of an assigned game. Append-only.

    Student, classroom and assigned game are referenced by id only; deleting
    any of them leaves the attempt history in place.
    """
    __tablename__ = "student_game_attempts"
    __table_args__ = (
        Index("ix_attempts_student_assigned_game", "student_id", "assigned_game_id"),
        Index("ix_attempts_classroom_assigned_game", "classroom_id", "assigned_game_id"),
    )

    student_id = Column(String(128), nullable=False, index=True)
    classroom_id = Column(String(36), nullable=False, index=True)
    assigned_game_id = Column(String(36), nullable=False)
    library_game_id = Column(String(36), nullable=True)

    score = Column(Integer, nullable=True)
    total_points_possible = Column(Integer, nullable=True)
    xp_earned = Column(BigInteger, default=0, nullable=False)
    status = Column(
        Enum(AttemptStatus, name="attempt_status", values_callable=enum_values),
        default=AttemptStatus.COMPLETED,
        nullable=False,
    )

    started_at = Column(DateTime, server_default=func.now(), nullable=False)
    completed_at = Column(DateTime, server_default=func.now(), nullable=True)

    __mapper_args__ = {"eager_defaults": True}

    def __repr__(self) -> str:
        return f"<StudentGameAttempt {self.student_id} on {self.assigned_game_id}: {self.xp_earned} XP>"
