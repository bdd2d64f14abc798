"""Ownership and enrollment predicates used by the authorization dependencies"""

import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from brightminds.core.exceptions import ClassroomNotFoundError
from brightminds.models.classroom import Classroom
from brightminds.models.enums import UserRole
from brightminds.models.user import User
from brightminds.repositories.store import EntityStore

logger = logging.getLogger(__name__)


class AccessService:
    """Read-only checks; they never write and never open their own transaction"""

    @staticmethod
    async def is_teacher_owner(db: AsyncSession, teacher_id: str, classroom_id: str) -> bool:
        """
        Whether ``teacher_id`` owns the classroom.

        Raises:
            ClassroomNotFoundError: the classroom does not exist (not reported as False)
        """
        classroom = await EntityStore(db).get(Classroom, classroom_id)
        if classroom is None:
            logger.warning("Ownership check: classroom %s not found", classroom_id)
            raise ClassroomNotFoundError(classroom_id)
        return classroom.teacher_id == teacher_id

    @staticmethod
    async def is_student_enrolled(db: AsyncSession, student_id: str, classroom_id: str) -> bool:
        """Whether the classroom is on the student's membership list. Unknown students are not enrolled."""
        student = await EntityStore(db).get(User, student_id)
        if student is None:
            logger.warning("Enrollment check: student %s not found (classroom %s)", student_id, classroom_id)
            return False
        return student.is_member_of(classroom_id)

    @staticmethod
    async def is_user_student(db: AsyncSession, user_id: Optional[str]) -> bool:
        if not user_id or not user_id.strip():
            return False
        user = await EntityStore(db).get(User, user_id)
        return user is not None and user.role == UserRole.STUDENT
