"""Student Game Attempt Service - scoring, XP and leveling in one transaction"""

import logging
import math
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from brightminds.config import GamificationConfig
from brightminds.core.exceptions import (
    AssignedGameNotFoundError,
    AttemptLimitExceededError,
    AttemptNotFoundError,
    InvalidRoleError,
    UserNotFoundError,
)
from brightminds.models.attempt import StudentGameAttempt
from brightminds.models.base import new_id
from brightminds.models.classroom import AssignedGame
from brightminds.models.enums import AttemptStatus
from brightminds.models.user import User
from brightminds.repositories.store import EntityStore, run_in_transaction
from brightminds.services.leveling_service import LevelingEngine
from brightminds.utils.time import get_utc_now

logger = logging.getLogger(__name__)


def xp_inputs_valid(score: Optional[int], total_points: Optional[int], max_xp: Optional[int]) -> bool:
    return bool(
        max_xp and max_xp > 0
        and total_points and total_points > 0
        and score is not None and score >= 0
    )


def compute_xp(score: Optional[int], total_points: Optional[int], max_xp: Optional[int]) -> int:
    """
    XP for a score against the assignment's authoritative values.

    ``round(score / total_points * max_xp)`` (half up) with the score capped at
    ``total_points`` and the result clamped to ``[0, max_xp]``. Returns 0 when
    any input is missing or out of range.
    """
    if not xp_inputs_valid(score, total_points, max_xp):
        return 0
    score = min(score, total_points)
    xp = math.floor(score / total_points * max_xp + 0.5)
    return max(0, min(xp, max_xp))


class AttemptService:
    """Processes game attempts and serves attempt history"""

    def __init__(self, config: GamificationConfig, leveling: Optional[LevelingEngine] = None):
        self.config = config
        self.leveling = leveling or LevelingEngine(config)

    def effective_max_attempts(self, assignment: AssignedGame) -> int:
        """Assignment cap when set and non-negative, else the configured default. 0 means unlimited."""
        if assignment.max_attempts_allowed is not None and assignment.max_attempts_allowed >= 0:
            return assignment.max_attempts_allowed
        return self.config.default_max_game_attempts

    async def process_attempt(
        self,
        db: AsyncSession,
        student_id: str,
        classroom_id: str,
        assigned_game_id: str,
        score: Optional[int],
        claimed_total_points: Optional[int] = None,
    ) -> User:
        """
        Record a completed attempt and award its XP.

        Validates the student and the assignment, enforces the attempt cap,
        computes XP from the assignment record (never from caller-supplied
        totals), appends the attempt and levels the student up, all in one
        transaction.

        Args:
            db: Database session
            student_id: Submitting student
            classroom_id: Classroom the assignment lives under
            assigned_game_id: Assignment being attempted
            score: Raw score reported by the game
            claimed_total_points: Caller's idea of the maximum score; logged if it disagrees

        Returns:
            The student after XP has been applied

        Raises:
            UserNotFoundError, InvalidRoleError, AssignedGameNotFoundError,
            AttemptLimitExceededError
        """
        logger.info(
            "Processing game attempt for student %s, classroom %s, assigned game %s",
            student_id, classroom_id, assigned_game_id,
        )

        async def work(store: EntityStore) -> User:
            student = await store.get(User, student_id)
            if student is None:
                raise UserNotFoundError(student_id)
            if not student.is_student:
                raise InvalidRoleError(f"User {student_id} is not a student.")

            assignment = await store.get_child(AssignedGame, classroom_id, assigned_game_id)
            if assignment is None:
                raise AssignedGameNotFoundError(assigned_game_id, classroom_id)

            now = get_utc_now()
            if assignment.due_date is not None and now > assignment.due_date:
                logger.warning(
                    "Game attempt for assigned game %s by student %s is overdue. Due: %s, submitted: %s",
                    assignment.id, student.id, assignment.due_date, now,
                )

            existing = await store.count_equal(
                StudentGameAttempt, student_id=student.id, assigned_game_id=assignment.id
            )
            max_attempts = self.effective_max_attempts(assignment)
            if max_attempts > 0 and existing >= max_attempts:
                logger.warning(
                    "Student %s has reached max attempts (%s) for assigned game %s",
                    student.id, max_attempts, assignment.id,
                )
                raise AttemptLimitExceededError(max_attempts)

            total_points = assignment.total_points_possible
            if claimed_total_points is not None and claimed_total_points != total_points:
                logger.warning(
                    "Claimed total points (%s) does not match assignment record (%s) for game %s; "
                    "using the assignment value",
                    claimed_total_points, total_points, assignment.id,
                )

            if xp_inputs_valid(score, total_points, assignment.max_xp_awarded):
                recorded_score = min(score, total_points)
                xp_earned = compute_xp(score, total_points, assignment.max_xp_awarded)
            else:
                logger.warning(
                    "Could not calculate XP for assigned game %s (student %s). Max XP: %s, total points: %s, score: %s",
                    assignment.id, student.id, assignment.max_xp_awarded, total_points, score,
                )
                recorded_score = score
                xp_earned = 0

            attempt = StudentGameAttempt(
                id=new_id(),
                student_id=student.id,
                classroom_id=classroom_id,
                assigned_game_id=assignment.id,
                library_game_id=assignment.library_game_id,
                score=recorded_score,
                total_points_possible=total_points,
                xp_earned=xp_earned,
                status=AttemptStatus.COMPLETED,
            )
            store.put(attempt)

            if xp_earned > 0:
                self.leveling.normalize(student)
                old_level = student.level
                levels_gained = self.leveling.apply_xp(student, xp_earned)
                if levels_gained:
                    logger.info(
                        "Student %s leveled up from %s to %s. XP: %s/%s",
                        student.id, old_level, student.level, student.current_xp, student.xp_to_next_level,
                    )
                else:
                    logger.info(
                        "Student %s awarded %s XP. XP: %s/%s, level %s",
                        student.id, xp_earned, student.current_xp, student.xp_to_next_level, student.level,
                    )

            # Always written: the version bump serializes concurrent attempts by the same student
            store.put(student)
            return student

        student = await run_in_transaction(db, work)
        await db.refresh(student)
        logger.info(
            "Game attempt processed for student %s. Level %s, XP %s/%s",
            student.id, student.level, student.current_xp, student.xp_to_next_level,
        )
        return student

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    @staticmethod
    async def get_attempt(db: AsyncSession, attempt_id: str) -> StudentGameAttempt:
        attempt = await EntityStore(db).get(StudentGameAttempt, attempt_id)
        if attempt is None:
            raise AttemptNotFoundError(attempt_id)
        return attempt

    @staticmethod
    async def list_for_student_in_classroom(
        db: AsyncSession, student_id: str, classroom_id: str
    ) -> List[StudentGameAttempt]:
        await AttemptService._require_user(db, student_id)
        return await AttemptService._list(
            db,
            StudentGameAttempt.student_id == student_id,
            StudentGameAttempt.classroom_id == classroom_id,
        )

    @staticmethod
    async def list_for_student_on_game(
        db: AsyncSession, student_id: str, assigned_game_id: str
    ) -> List[StudentGameAttempt]:
        await AttemptService._require_user(db, student_id)
        return await AttemptService._list(
            db,
            StudentGameAttempt.student_id == student_id,
            StudentGameAttempt.assigned_game_id == assigned_game_id,
        )

    @staticmethod
    async def list_for_student(db: AsyncSession, student_id: str) -> List[StudentGameAttempt]:
        await AttemptService._require_user(db, student_id)
        return await AttemptService._list(db, StudentGameAttempt.student_id == student_id)

    @staticmethod
    async def list_for_assigned_game(
        db: AsyncSession, classroom_id: str, assigned_game_id: str
    ) -> List[StudentGameAttempt]:
        """Raises AssignedGameNotFoundError when the assignment is not under the classroom"""
        if await EntityStore(db).get_child(AssignedGame, classroom_id, assigned_game_id) is None:
            raise AssignedGameNotFoundError(assigned_game_id, classroom_id)
        return await AttemptService._list(
            db,
            StudentGameAttempt.classroom_id == classroom_id,
            StudentGameAttempt.assigned_game_id == assigned_game_id,
        )

    @staticmethod
    async def _require_user(db: AsyncSession, user_id: str) -> User:
        user = await EntityStore(db).get(User, user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        return user

    @staticmethod
    async def _list(db: AsyncSession, *criteria) -> List[StudentGameAttempt]:
        result = await db.execute(
            select(StudentGameAttempt)
            .where(*criteria)
            .order_by(StudentGameAttempt.completed_at.desc(), StudentGameAttempt.id)
        )
        return list(result.scalars().all())
