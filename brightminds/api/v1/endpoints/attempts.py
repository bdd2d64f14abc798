"""Game Attempt Endpoints"""

from typing import Any, List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from brightminds.api import deps
from brightminds.models.user import User
from brightminds.schemas.attempt import AttemptResponse, AttemptSubmit
from brightminds.schemas.responses import SuccessResponse
from brightminds.schemas.user import UserResponse
from brightminds.services.access_service import AccessService
from brightminds.services.attempt_service import AttemptService

router = APIRouter()


@router.post("", response_model=SuccessResponse[UserResponse])
async def submit_attempt(
    attempt_in: AttemptSubmit,
    current_user: User = Depends(deps.require_student),
    db: AsyncSession = Depends(deps.get_db),
    attempt_service: AttemptService = Depends(deps.get_attempt_service),
) -> Any:
    """
    Record a completed game attempt and award XP.

    Returns the student's updated level and XP.
    """
    student_id = current_user.id
    if not await AccessService.is_student_enrolled(db, student_id, attempt_in.classroom_id):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not enrolled in this classroom"
        )
    student = await attempt_service.process_attempt(
        db,
        student_id,
        attempt_in.classroom_id,
        attempt_in.assigned_game_id,
        attempt_in.score,
        attempt_in.total_points_possible,
    )
    return SuccessResponse(data=UserResponse.from_user(student), message="Game attempt processed")


@router.get("/my-attempts", response_model=SuccessResponse[List[AttemptResponse]])
async def list_my_attempts(
    classroom_id: Optional[str] = Query(None, description="Only attempts in this classroom"),
    assigned_game_id: Optional[str] = Query(None, description="Only attempts on this assignment"),
    current_user: User = Depends(deps.require_student),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    student_id = current_user.id
    if assigned_game_id:
        attempts = await AttemptService.list_for_student_on_game(db, student_id, assigned_game_id)
        if classroom_id:
            attempts = [a for a in attempts if a.classroom_id == classroom_id]
    elif classroom_id:
        attempts = await AttemptService.list_for_student_in_classroom(db, student_id, classroom_id)
    else:
        attempts = await AttemptService.list_for_student(db, student_id)
    return SuccessResponse(data=attempts)


@router.get("/{attempt_id}", response_model=SuccessResponse[AttemptResponse])
async def get_attempt(
    attempt_id: str,
    current_user: User = Depends(deps.get_current_user),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    """
    One attempt. Visible to the student who made it and to the owning teacher.
    """
    attempt = await AttemptService.get_attempt(db, attempt_id)
    if attempt.student_id != current_user.id:
        if not current_user.is_teacher or not await AccessService.is_teacher_owner(
            db, current_user.id, attempt.classroom_id
        ):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Not allowed to view this attempt"
            )
    return SuccessResponse(data=attempt)
