"""User Service - profile registration, lookup and XP awards"""

import logging
import secrets
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from brightminds.config import settings
from brightminds.core.exceptions import AlreadyExistsError, BadRequestError, UserNotFoundError
from brightminds.models.enums import ThemePreference, UserRole
from brightminds.models.user import User
from brightminds.repositories.store import EntityStore, run_in_transaction
from brightminds.schemas.user import UserRegister, UserUpdate, normalize_email
from brightminds.services.leveling_service import LevelingEngine

logger = logging.getLogger(__name__)


class UserService:
    """Service layer for user-related operations"""

    def __init__(self, leveling: LevelingEngine, teacher_enrollment_code: Optional[str] = None):
        self.leveling = leveling
        self.teacher_enrollment_code = teacher_enrollment_code or settings.TEACHER_ENROLLMENT_CODE

    async def register_user(self, db: AsyncSession, identity_id: str, data: UserRegister) -> User:
        """
        Create the application profile for an identity-provider account.

        The identity provider has already created the account, so nothing here
        calls out over the network.

        Args:
            db: Database session
            identity_id: uid from the verified identity token
            data: Registration payload

        Returns:
            The new user

        Raises:
            AlreadyExistsError: a profile with this id or email already exists
            BadRequestError: TEACHER registration without the right enrollment code
        """
        logger.info("Registering user %s with email %s and role %s", identity_id, data.email, data.role.value)

        if data.role == UserRole.TEACHER and not secrets.compare_digest(
            data.teacher_enrollment_code or "", self.teacher_enrollment_code
        ):
            logger.warning("Invalid or missing teacher enrollment code for %s", data.email)
            raise BadRequestError("Invalid or missing teacher enrollment code required for TEACHER role.")

        async def work(store: EntityStore) -> User:
            if await store.get(User, identity_id) is not None:
                raise AlreadyExistsError(f"User with ID {identity_id} already exists.")
            if await store.first_equal(User, "email", data.email) is not None:
                logger.warning("Email %s already exists", data.email)
                raise AlreadyExistsError(f"User with email {data.email} already exists.")

            user = User(
                id=identity_id,
                email=data.email,
                display_name=data.display_name,
                role=data.role,
                avatar_url=data.avatar_url,
                theme_preference=ThemePreference.LIGHT.value,
                student_of_classrooms=[],
                teacher_of_classrooms=[],
            )
            if data.role == UserRole.STUDENT:
                for field, value in self.leveling.initial_state().items():
                    setattr(user, field, value)
            store.put(user)
            return user

        user = await run_in_transaction(db, work)
        await db.refresh(user)
        logger.info("User %s (%s) registered with role %s", user.id, user.email, user.role.value)
        return user

    @staticmethod
    async def get_user(db: AsyncSession, user_id: str) -> User:
        user = await EntityStore(db).get(User, user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        return user

    @staticmethod
    async def get_user_by_email(db: AsyncSession, email: str) -> User:
        user = await EntityStore(db).first_equal(User, "email", normalize_email(email))
        if user is None:
            raise UserNotFoundError(email, field="email")
        return user

    async def update_user(self, db: AsyncSession, user_id: str, data: UserUpdate) -> User:
        """
        Update profile fields.

        Blank values are ignored. A new email must not belong to another user.
        """
        async def work(store: EntityStore) -> User:
            user = await store.get(User, user_id)
            if user is None:
                raise UserNotFoundError(user_id)

            changed = False
            if data.display_name and data.display_name.strip() and data.display_name != user.display_name:
                user.display_name = data.display_name
                changed = True
            if data.email and data.email.lower() != user.email.lower():
                other = await store.first_equal(User, "email", data.email)
                if other is not None and other.id != user.id:
                    raise AlreadyExistsError(f"Email {data.email} is already in use by another user.")
                user.email = data.email
                changed = True
            if data.avatar_url and data.avatar_url.strip() and data.avatar_url != user.avatar_url:
                user.avatar_url = data.avatar_url
                changed = True
            if data.theme_preference is not None and data.theme_preference.value != user.theme_preference:
                user.theme_preference = data.theme_preference.value
                changed = True

            if changed:
                store.put(user)
            return user

        user = await run_in_transaction(db, work)
        await db.refresh(user)
        logger.info("User %s updated", user_id)
        return user

    async def award_xp(self, db: AsyncSession, student_id: str, xp_earned: int) -> User:
        """
        Award XP outside of a game attempt (e.g. a teacher bonus).

        Non-positive amounts and non-student users are returned unchanged.
        """
        async def work(store: EntityStore) -> User:
            user = await store.get(User, student_id)
            if user is None:
                raise UserNotFoundError(student_id)
            if xp_earned <= 0:
                return user
            if not user.is_student:
                logger.warning("Attempted to award XP to non-student user %s (role %s)", student_id, user.role)
                return user

            self.leveling.normalize(user)
            before = (user.level, user.current_xp, user.xp_to_next_level)
            levels_gained = self.leveling.apply_xp(user, xp_earned)
            store.put(user)
            logger.info(
                "Student %s awarded %s XP. Initial: Lvl %s (XP %s/%s). Final: Lvl %s (XP %s/%s)%s",
                student_id, xp_earned, *before,
                user.level, user.current_xp, user.xp_to_next_level,
                " - leveled up" if levels_gained else "",
            )
            return user

        user = await run_in_transaction(db, work)
        await db.refresh(user)
        return user
