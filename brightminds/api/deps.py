"""API Dependencies"""

from functools import lru_cache
from typing import Optional
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from brightminds.config import settings
from brightminds.database import get_db
from brightminds.core.security import decode_token
from brightminds.models.user import User
from brightminds.services.access_service import AccessService
from brightminds.services.attempt_service import AttemptService
from brightminds.services.leveling_service import LevelingEngine
from brightminds.services.user_service import UserService

__all__ = [
    "get_db",
    "Identity",
    "get_current_identity",
    "get_current_user",
    "require_teacher",
    "require_student",
    "require_classroom_owner",
    "require_classroom_member",
    "get_leveling_engine",
    "get_attempt_service",
    "get_user_service",
]

# Security scheme for bearer token
security = HTTPBearer()


class Identity(BaseModel):
    """Verified identity-provider claims"""
    uid: str
    email: Optional[str] = None


@lru_cache
def get_leveling_engine() -> LevelingEngine:
    return LevelingEngine(settings.gamification)


@lru_cache
def get_attempt_service() -> AttemptService:
    return AttemptService(settings.gamification, get_leveling_engine())


@lru_cache
def get_user_service() -> UserService:
    return UserService(get_leveling_engine(), settings.TEACHER_ENROLLMENT_CODE)


async def get_current_identity(
    credentials: HTTPAuthorizationCredentials = Depends(security)
) -> Identity:
    """
    Verify the bearer token issued by the identity provider.

    Raises:
        HTTPException: 401 if the token is invalid or carries no subject
    """
    payload = decode_token(credentials.credentials)
    if not payload:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    uid: Optional[str] = payload.get("sub") or payload.get("uid")
    if not uid:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return Identity(uid=uid, email=payload.get("email"))


async def get_current_user(
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
) -> User:
    """
    Get the application profile of the authenticated identity.

    Raises:
        HTTPException: 403 if the identity has not registered a profile yet
    """
    user = await db.get(User, identity.uid)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User profile not registered"
        )
    return user


async def require_teacher(current_user: User = Depends(get_current_user)) -> User:
    if not current_user.is_teacher:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Teacher role required"
        )
    return current_user


async def require_student(current_user: User = Depends(get_current_user)) -> User:
    if not current_user.is_student:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Student role required"
        )
    return current_user


async def require_classroom_owner(
    classroom_id: str,
    current_user: User = Depends(require_teacher),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Teacher who owns ``classroom_id``. A missing classroom surfaces as 404."""
    if not await AccessService.is_teacher_owner(db, current_user.id, classroom_id):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not the owner of this classroom"
        )
    return current_user


async def require_classroom_member(
    classroom_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Owning teacher or enrolled student of ``classroom_id``."""
    if current_user.is_teacher:
        allowed = await AccessService.is_teacher_owner(db, current_user.id, classroom_id)
    else:
        allowed = await AccessService.is_student_enrolled(db, current_user.id, classroom_id)
    if not allowed:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not a member of this classroom"
        )
    return current_user
