"""User Profile Endpoints"""

from typing import Any
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from brightminds.api import deps
from brightminds.models.user import User
from brightminds.schemas.responses import SuccessResponse
from brightminds.schemas.user import UserRegister, UserResponse, UserUpdate
from brightminds.services.user_service import UserService

router = APIRouter()


@router.post("/register", response_model=SuccessResponse[UserResponse], status_code=status.HTTP_201_CREATED)
async def register(
    user_in: UserRegister,
    identity: deps.Identity = Depends(deps.get_current_identity),
    db: AsyncSession = Depends(deps.get_db),
    user_service: UserService = Depends(deps.get_user_service),
) -> Any:
    """
    Create the profile for the identity in the bearer token.

    The email must match the one the identity provider verified, when the
    token carries one.
    """
    if identity.email and identity.email.lower() != user_in.email.lower():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email does not match the authenticated identity"
        )
    user = await user_service.register_user(db, identity.uid, user_in)
    return SuccessResponse(data=UserResponse.from_user(user), message="User registered successfully")


@router.get("/me", response_model=SuccessResponse[UserResponse])
async def read_me(current_user: User = Depends(deps.get_current_user)) -> Any:
    return SuccessResponse(data=UserResponse.from_user(current_user))


@router.get("/{user_id}", response_model=SuccessResponse[UserResponse])
async def read_user(
    user_id: str,
    current_user: User = Depends(deps.get_current_user),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    user = await UserService.get_user(db, user_id)
    return SuccessResponse(data=UserResponse.from_user(user))


@router.put("/{user_id}", response_model=SuccessResponse[UserResponse])
async def update_user(
    user_id: str,
    user_in: UserUpdate,
    current_user: User = Depends(deps.get_current_user),
    db: AsyncSession = Depends(deps.get_db),
    user_service: UserService = Depends(deps.get_user_service),
) -> Any:
    """
    Update own profile. Users cannot edit each other.
    """
    if current_user.id != user_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Cannot update another user's profile"
        )
    user = await user_service.update_user(db, user_id, user_in)
    return SuccessResponse(data=UserResponse.from_user(user), message="Profile updated")
