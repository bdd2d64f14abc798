"""Classroom Endpoints - membership and game assignment"""

from typing import Any, List
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from brightminds.api import deps
from brightminds.models.user import User
from brightminds.schemas.attempt import AttemptResponse
from brightminds.schemas.classroom import (
    AddStudentByEmail,
    AssignedGameResponse,
    AssignGameRequest,
    ClassroomCreate,
    ClassroomResponse,
    ClassroomUpdate,
    EnrollByCodeRequest,
)
from brightminds.schemas.responses import SuccessResponse
from brightminds.schemas.user import StudentBrief
from brightminds.services.attempt_service import AttemptService
from brightminds.services.classroom_service import ClassroomService

router = APIRouter()


@router.post("", response_model=SuccessResponse[ClassroomResponse], status_code=status.HTTP_201_CREATED)
async def create_classroom(
    classroom_in: ClassroomCreate,
    current_user: User = Depends(deps.require_teacher),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    teacher_id = current_user.id
    classroom = await ClassroomService.create_classroom(db, teacher_id, classroom_in)
    return SuccessResponse(data=classroom, message="Classroom created successfully")


@router.get("/my-teaching", response_model=SuccessResponse[List[ClassroomResponse]])
async def list_my_teaching(
    current_user: User = Depends(deps.require_teacher),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    classrooms = await ClassroomService.list_teaching_classrooms(db, current_user.id)
    return SuccessResponse(data=classrooms)


@router.get("/my-enrolled", response_model=SuccessResponse[List[ClassroomResponse]])
async def list_my_enrolled(
    current_user: User = Depends(deps.require_student),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    classrooms = await ClassroomService.list_enrolled_classrooms(db, current_user.id)
    return SuccessResponse(data=classrooms)


@router.post("/enroll", response_model=SuccessResponse[ClassroomResponse])
async def enroll_with_code(
    enroll_in: EnrollByCodeRequest,
    current_user: User = Depends(deps.require_student),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    """
    Join a classroom with its join code.
    """
    student_id = current_user.id
    classroom = await ClassroomService.enroll_by_code(db, student_id, enroll_in.code)
    return SuccessResponse(data=classroom, message="Enrolled successfully")


@router.get("/{classroom_id}", response_model=SuccessResponse[ClassroomResponse])
async def get_classroom(
    classroom_id: str,
    current_user: User = Depends(deps.require_classroom_member),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    classroom = await ClassroomService.get_classroom(db, classroom_id)
    return SuccessResponse(data=classroom)


@router.put("/{classroom_id}", response_model=SuccessResponse[ClassroomResponse])
async def update_classroom(
    classroom_id: str,
    classroom_in: ClassroomUpdate,
    current_user: User = Depends(deps.require_teacher),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    teacher_id = current_user.id
    classroom = await ClassroomService.update_classroom(db, classroom_id, teacher_id, classroom_in)
    return SuccessResponse(data=classroom, message="Classroom updated")


@router.post("/{classroom_id}/students", response_model=SuccessResponse[ClassroomResponse])
async def add_student(
    classroom_id: str,
    student_in: AddStudentByEmail,
    current_user: User = Depends(deps.require_teacher),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    """
    Add a registered student to the classroom by email.
    """
    teacher_id = current_user.id
    classroom = await ClassroomService.enroll_by_email(db, teacher_id, classroom_id, student_in.email)
    return SuccessResponse(data=classroom, message="Student added to classroom")


@router.delete("/{classroom_id}/students/{student_id}", response_model=SuccessResponse[ClassroomResponse])
async def remove_student(
    classroom_id: str,
    student_id: str,
    current_user: User = Depends(deps.require_teacher),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    teacher_id = current_user.id
    classroom = await ClassroomService.remove_student(db, teacher_id, classroom_id, student_id)
    return SuccessResponse(data=classroom, message="Student removed from classroom")


@router.get("/{classroom_id}/students", response_model=SuccessResponse[List[StudentBrief]])
async def list_students(
    classroom_id: str,
    current_user: User = Depends(deps.require_teacher),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    students = await ClassroomService.list_enrolled_students(db, classroom_id, current_user.id)
    return SuccessResponse(data=students)


@router.post(
    "/{classroom_id}/games",
    response_model=SuccessResponse[AssignedGameResponse],
    status_code=status.HTTP_201_CREATED,
)
async def assign_game(
    classroom_id: str,
    assign_in: AssignGameRequest,
    current_user: User = Depends(deps.require_teacher),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    """
    Assign a library game to the classroom.

    The game's title, URL and scoring values are copied onto the assignment.
    """
    teacher_id = current_user.id
    assignment = await ClassroomService.assign_game(db, teacher_id, classroom_id, assign_in)
    return SuccessResponse(data=assignment, message="Game assigned")


@router.get("/{classroom_id}/games", response_model=SuccessResponse[List[AssignedGameResponse]])
async def list_assigned_games(
    classroom_id: str,
    current_user: User = Depends(deps.require_classroom_member),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    assignments = await ClassroomService.list_assigned_games(db, classroom_id)
    return SuccessResponse(data=assignments)


@router.delete("/{classroom_id}/games/{assigned_game_id}", response_model=SuccessResponse[None])
async def unassign_game(
    classroom_id: str,
    assigned_game_id: str,
    current_user: User = Depends(deps.require_teacher),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    teacher_id = current_user.id
    await ClassroomService.unassign_game(db, teacher_id, classroom_id, assigned_game_id)
    return SuccessResponse(message="Assigned game removed")


@router.get(
    "/{classroom_id}/assigned-games/{assigned_game_id}/attempts",
    response_model=SuccessResponse[List[AttemptResponse]],
)
async def list_attempts_for_assignment(
    classroom_id: str,
    assigned_game_id: str,
    current_user: User = Depends(deps.require_classroom_owner),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    """
    All attempts on one assignment, newest first. Owning teacher only.
    """
    attempts = await AttemptService.list_for_assigned_game(db, classroom_id, assigned_game_id)
    return SuccessResponse(data=attempts)
