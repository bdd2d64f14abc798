"""Classroom Service - membership and game assignment transactions"""

import logging
from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from brightminds.core.exceptions import (
    AssignedGameNotFoundError,
    ClassroomNotFoundError,
    ForbiddenError,
    GameNotFoundError,
    InvalidRoleError,
    UserNotFoundError,
)
from brightminds.core.security import generate_join_code
from brightminds.models.base import new_id
from brightminds.models.classroom import AssignedGame, Classroom, ClassroomEnrollment
from brightminds.models.game import Game
from brightminds.models.user import User
from brightminds.repositories.store import EntityStore, run_in_transaction
from brightminds.schemas.classroom import AssignGameRequest, ClassroomCreate, ClassroomUpdate
from brightminds.schemas.user import normalize_email

logger = logging.getLogger(__name__)


class ClassroomService:
    """Service layer for classroom membership and assignment operations"""

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    @staticmethod
    async def create_classroom(
        db: AsyncSession,
        teacher_id: str,
        data: ClassroomCreate,
    ) -> Classroom:
        """
        Create a classroom owned by ``teacher_id`` and record it on the teacher.

        A join-code collision violates the unique constraint and the
        transaction is retried with a new code.
        """
        async def work(store: EntityStore) -> Classroom:
            teacher = await store.get(User, teacher_id)
            if teacher is None:
                logger.warning("Teacher %s not found during classroom creation", teacher_id)
                raise UserNotFoundError(teacher_id)
            if not teacher.is_teacher:
                logger.warning("User %s is not a teacher (role %s)", teacher_id, teacher.role)
                raise InvalidRoleError(f"User with ID: {teacher_id} is not a teacher.")

            classroom = Classroom(
                id=new_id(),
                name=data.name,
                description=data.description,
                icon_url=data.icon_url,
                teacher_id=teacher.id,
                teacher_name=teacher.display_name,
                unique_code=generate_join_code(),
                student_count=0,
                activity_count=0,
            )
            store.put(classroom)

            teacher.teacher_of_classrooms = [*(teacher.teacher_of_classrooms or []), classroom.id]
            store.put(teacher)
            return classroom

        classroom = await run_in_transaction(db, work)
        await db.refresh(classroom)
        logger.info(
            "Classroom '%s' (%s) created by teacher %s with code %s",
            classroom.name, classroom.id, teacher_id, classroom.unique_code,
        )
        return classroom

    @staticmethod
    async def update_classroom(
        db: AsyncSession,
        classroom_id: str,
        teacher_id: str,
        data: ClassroomUpdate,
    ) -> Classroom:
        """Apply the non-empty fields of ``data``; no write at all when nothing changes."""
        async def work(store: EntityStore) -> Classroom:
            classroom = await ClassroomService._load_owned_classroom(store, classroom_id, teacher_id)

            changed = False
            if data.name and data.name.strip() and data.name != classroom.name:
                classroom.name = data.name
                changed = True
            if data.description is not None and data.description != classroom.description:
                classroom.description = data.description
                changed = True
            if data.icon_url is not None and data.icon_url != classroom.icon_url:
                classroom.icon_url = data.icon_url
                changed = True

            if changed:
                store.put(classroom)
            else:
                logger.info("No changes for classroom %s; skipping write", classroom_id)
            return classroom

        classroom = await run_in_transaction(db, work)
        await db.refresh(classroom)
        return classroom

    @staticmethod
    async def enroll_by_code(db: AsyncSession, student_id: str, code: str) -> Classroom:
        """Student joins a classroom with its join code. Re-joining is a no-op."""
        async def work(store: EntityStore) -> Classroom:
            student = await store.get(User, student_id)
            if student is None:
                logger.warning("Student %s not found for enrollment by code", student_id)
                raise UserNotFoundError(student_id)
            if not student.is_student:
                logger.warning("User %s is not a student (role %s)", student_id, student.role)
                raise InvalidRoleError(f"User {student_id} is not a valid student.")

            classroom = await store.first_equal(Classroom, "unique_code", code)
            if classroom is None:
                logger.warning("Classroom not found with code %s", code)
                raise ClassroomNotFoundError(code, field="code")

            await ClassroomService._enroll(store, student, classroom)
            return classroom

        classroom = await run_in_transaction(db, work)
        await db.refresh(classroom)
        return classroom

    @staticmethod
    async def enroll_by_email(
        db: AsyncSession,
        teacher_id: str,
        classroom_id: str,
        student_email: str,
    ) -> Classroom:
        """Owning teacher adds a student by email. Adding a member again is a no-op."""
        async def work(store: EntityStore) -> Classroom:
            classroom = await ClassroomService._load_owned_classroom(store, classroom_id, teacher_id)

            student = await store.first_equal(User, "email", normalize_email(student_email))
            if student is None:
                logger.warning("Student with email %s not found for classroom %s", student_email, classroom_id)
                raise UserNotFoundError(student_email, field="email")
            if not student.is_student:
                logger.warning("User with email %s is not a student (role %s)", student_email, student.role)
                raise InvalidRoleError(f"User with email {student_email} is not a student.")

            await ClassroomService._enroll(store, student, classroom)
            return classroom

        classroom = await run_in_transaction(db, work)
        await db.refresh(classroom)
        return classroom

    @staticmethod
    async def remove_student(
        db: AsyncSession,
        teacher_id: str,
        classroom_id: str,
        student_id: str,
    ) -> Classroom:
        """Reverse of enrollment. Removing a non-member writes nothing."""
        async def work(store: EntityStore) -> Classroom:
            classroom = await ClassroomService._load_owned_classroom(store, classroom_id, teacher_id)

            student = await store.get(User, student_id)
            if student is None:
                logger.warning("Student %s to remove not found", student_id)
                raise UserNotFoundError(student_id)

            if not student.is_member_of(classroom.id):
                logger.info("Student %s is not enrolled in classroom %s; nothing to remove", student_id, classroom_id)
                return classroom

            student.student_of_classrooms = [
                cid for cid in student.student_of_classrooms if cid != classroom.id
            ]
            store.put(student)

            classroom.student_count = max(0, (classroom.student_count or 0) - 1)
            store.put(classroom)

            marker = await store.get(ClassroomEnrollment, (classroom.id, student.id))
            if marker is not None:
                await store.delete(marker)
            return classroom

        classroom = await run_in_transaction(db, work)
        await db.refresh(classroom)
        logger.info(
            "Student %s removed from classroom %s; student count %s",
            student_id, classroom_id, classroom.student_count,
        )
        return classroom

    @staticmethod
    async def assign_game(
        db: AsyncSession,
        teacher_id: str,
        classroom_id: str,
        data: AssignGameRequest,
    ) -> AssignedGame:
        """Snapshot a library game into a new assignment under the classroom."""
        async def work(store: EntityStore) -> AssignedGame:
            classroom = await ClassroomService._load_owned_classroom(store, classroom_id, teacher_id)

            game = await store.get(Game, data.library_game_id)
            if game is None:
                logger.warning(
                    "Library game %s for classroom %s was not found", data.library_game_id, classroom_id
                )
                raise GameNotFoundError(data.library_game_id)

            assignment = AssignedGame(
                id=new_id(),
                classroom_id=classroom.id,
                library_game_id=game.id,
                game_title=game.title,
                game_description=game.description,
                game_url_or_identifier=game.game_url_or_identifier,
                max_xp_awarded=game.max_xp_awarded,
                total_points_possible=game.total_points_possible,
                due_date=data.due_date,
                max_attempts_allowed=data.max_attempts_allowed,
            )
            store.put(assignment)

            classroom.activity_count = (classroom.activity_count or 0) + 1
            store.put(classroom)
            return assignment

        assignment = await run_in_transaction(db, work)
        await db.refresh(assignment)
        logger.info(
            "Game '%s' (%s) assigned to classroom %s as %s, max attempts %s",
            assignment.game_title, assignment.library_game_id, classroom_id,
            assignment.id, assignment.max_attempts_allowed,
        )
        return assignment

    @staticmethod
    async def unassign_game(
        db: AsyncSession,
        teacher_id: str,
        classroom_id: str,
        assigned_game_id: str,
    ) -> None:
        async def work(store: EntityStore) -> None:
            classroom = await ClassroomService._load_owned_classroom(store, classroom_id, teacher_id)

            assignment = await store.get_child(AssignedGame, classroom.id, assigned_game_id)
            if assignment is None:
                logger.warning(
                    "Assigned game %s for removal from classroom %s was not found", assigned_game_id, classroom_id
                )
                raise AssignedGameNotFoundError(assigned_game_id, classroom_id)

            await store.delete(assignment)
            classroom.activity_count = max(0, (classroom.activity_count or 0) - 1)
            store.put(classroom)

        await run_in_transaction(db, work)
        logger.info("Assigned game %s removed from classroom %s by %s", assigned_game_id, classroom_id, teacher_id)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    @staticmethod
    async def get_classroom(db: AsyncSession, classroom_id: str) -> Classroom:
        classroom = await EntityStore(db).get(Classroom, classroom_id)
        if classroom is None:
            logger.warning("Classroom not found with ID %s", classroom_id)
            raise ClassroomNotFoundError(classroom_id)
        return classroom

    @staticmethod
    async def list_teaching_classrooms(db: AsyncSession, teacher_id: str) -> List[Classroom]:
        result = await db.execute(
            select(Classroom)
            .where(Classroom.teacher_id == teacher_id)
            .order_by(Classroom.created_at.desc())
        )
        return list(result.scalars().all())

    @staticmethod
    async def list_enrolled_classrooms(db: AsyncSession, student_id: str) -> List[Classroom]:
        """Classrooms on the student's membership list, skipping ids that no longer resolve."""
        store = EntityStore(db)
        student = await store.get(User, student_id)
        if student is None:
            raise UserNotFoundError(student_id)

        classrooms = []
        for classroom_id in student.student_of_classrooms or []:
            classroom = await store.get(Classroom, classroom_id)
            if classroom is not None:
                classrooms.append(classroom)
        return classrooms

    @staticmethod
    async def list_enrolled_students(
        db: AsyncSession,
        classroom_id: str,
        teacher_id: str,
    ) -> List[User]:
        store = EntityStore(db)
        await ClassroomService._load_owned_classroom(store, classroom_id, teacher_id)

        result = await db.execute(
            select(User)
            .join(ClassroomEnrollment, ClassroomEnrollment.student_id == User.id)
            .where(ClassroomEnrollment.classroom_id == classroom_id)
            .order_by(User.display_name)
        )
        return list(result.scalars().all())

    @staticmethod
    async def list_assigned_games(db: AsyncSession, classroom_id: str) -> List[AssignedGame]:
        await ClassroomService.get_classroom(db, classroom_id)
        result = await db.execute(
            select(AssignedGame)
            .where(AssignedGame.classroom_id == classroom_id)
            .order_by(AssignedGame.date_assigned)
        )
        return list(result.scalars().all())

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    async def _load_owned_classroom(store: EntityStore, classroom_id: str, teacher_id: str) -> Classroom:
        classroom = await store.get(Classroom, classroom_id)
        if classroom is None:
            logger.warning("Classroom %s not found", classroom_id)
            raise ClassroomNotFoundError(classroom_id)
        if classroom.teacher_id != teacher_id:
            logger.warning(
                "Teacher %s is not the owner of classroom %s (owner %s)",
                teacher_id, classroom_id, classroom.teacher_id,
            )
            raise ForbiddenError(f"User {teacher_id} is not the owner of classroom {classroom_id}")
        return classroom

    @staticmethod
    async def _enroll(store: EntityStore, student: User, classroom: Classroom) -> None:
        """Add membership on both sides; leaves everything untouched for an existing member."""
        if student.is_member_of(classroom.id):
            logger.info("Student %s already enrolled in classroom %s", student.id, classroom.id)
            return

        student.student_of_classrooms = [*(student.student_of_classrooms or []), classroom.id]
        store.put(student)

        classroom.student_count = (classroom.student_count or 0) + 1
        store.put(classroom)

        marker = await store.get(ClassroomEnrollment, (classroom.id, student.id))
        if marker is None:
            marker = ClassroomEnrollment(classroom_id=classroom.id, student_id=student.id)
        marker.student_name = student.display_name
        marker.student_email = student.email
        store.put(marker)
        logger.info(
            "Student %s enrolled in classroom %s; student count %s",
            student.id, classroom.id, classroom.student_count,
        )
