"""Unit tests for ClassroomService."""

from unittest.mock import patch

import pytest
from sqlalchemy import select

from brightminds.core.exceptions import (
    AssignedGameNotFoundError,
    ClassroomNotFoundError,
    ForbiddenError,
    GameNotFoundError,
    InvalidRoleError,
    UserNotFoundError,
)
from brightminds.core.security import JOIN_CODE_ALPHABET
from brightminds.models import AssignedGame, ClassroomEnrollment, UserRole
from brightminds.schemas.classroom import ClassroomCreate, ClassroomUpdate
from brightminds.services.classroom_service import ClassroomService
from tests.conftest import assign_game, create_classroom, create_game, create_user


async def _enrollment_markers(db, classroom_id):
    result = await db.execute(
        select(ClassroomEnrollment).where(ClassroomEnrollment.classroom_id == classroom_id)
    )
    return list(result.scalars().all())


@pytest.mark.asyncio
async def test_create_classroom(db, teacher):
    classroom = await ClassroomService.create_classroom(
        db, teacher.id, ClassroomCreate(name="Math 4B", description="Fractions and decimals")
    )

    assert classroom.teacher_id == teacher.id
    assert classroom.teacher_name == "Ms. Frizzle"
    assert len(classroom.unique_code) == 8
    assert set(classroom.unique_code) <= set(JOIN_CODE_ALPHABET)
    assert classroom.student_count == 0
    assert classroom.activity_count == 0
    assert classroom.created_at is not None

    await db.refresh(teacher)
    assert teacher.teacher_of_classrooms == [classroom.id]


@pytest.mark.asyncio
async def test_create_classroom_requires_teacher(db, student):
    with pytest.raises(InvalidRoleError):
        await ClassroomService.create_classroom(db, student.id, ClassroomCreate(name="Math 4B"))


@pytest.mark.asyncio
async def test_create_classroom_unknown_teacher(db):
    with pytest.raises(UserNotFoundError):
        await ClassroomService.create_classroom(db, "nobody", ClassroomCreate(name="Math 4B"))


@pytest.mark.asyncio
async def test_join_code_collision_is_retried(db, teacher):
    first = await create_classroom(db, teacher)
    first_id = first.id
    codes = iter([first.unique_code, "ZZZZ9999"])

    with patch(
        "brightminds.services.classroom_service.generate_join_code",
        side_effect=lambda: next(codes),
    ):
        second = await create_classroom(db, teacher, name="Science 4B")

    assert second.unique_code == "ZZZZ9999"
    await db.refresh(teacher)
    assert teacher.teacher_of_classrooms == [first_id, second.id]


@pytest.mark.asyncio
async def test_update_classroom(db, teacher, classroom):
    updated = await ClassroomService.update_classroom(
        db, classroom.id, teacher.id, ClassroomUpdate(name="Math 5A", icon_url="icons/abacus.png")
    )

    assert updated.name == "Math 5A"
    assert updated.icon_url == "icons/abacus.png"


@pytest.mark.asyncio
async def test_update_classroom_without_changes_writes_nothing(db, teacher, classroom):
    version_before = classroom.version

    await ClassroomService.update_classroom(
        db, classroom.id, teacher.id, ClassroomUpdate(name=classroom.name)
    )

    await db.refresh(classroom)
    assert classroom.version == version_before


@pytest.mark.asyncio
async def test_update_classroom_by_other_teacher(db, classroom):
    other = await create_user(db, UserRole.TEACHER)

    with pytest.raises(ForbiddenError):
        await ClassroomService.update_classroom(db, classroom.id, other.id, ClassroomUpdate(name="Hijacked"))


@pytest.mark.asyncio
async def test_enroll_by_code(db, student, classroom):
    result = await ClassroomService.enroll_by_code(db, student.id, classroom.unique_code)

    assert result.student_count == 1
    await db.refresh(student)
    assert student.student_of_classrooms == [classroom.id]
    markers = await _enrollment_markers(db, classroom.id)
    assert [(m.student_id, m.student_name, m.student_email) for m in markers] == [
        (student.id, student.display_name, student.email)
    ]


@pytest.mark.asyncio
async def test_enroll_by_code_twice_is_idempotent(db, student, classroom):
    await ClassroomService.enroll_by_code(db, student.id, classroom.unique_code)
    await db.refresh(classroom)
    version_after_first = classroom.version

    result = await ClassroomService.enroll_by_code(db, student.id, classroom.unique_code)

    assert result.student_count == 1
    assert result.version == version_after_first
    await db.refresh(student)
    assert student.student_of_classrooms == [classroom.id]
    assert len(await _enrollment_markers(db, classroom.id)) == 1


@pytest.mark.asyncio
async def test_enroll_by_unknown_code(db, student):
    with pytest.raises(ClassroomNotFoundError):
        await ClassroomService.enroll_by_code(db, student.id, "NOPE0000")


@pytest.mark.asyncio
async def test_teacher_cannot_enroll_by_code(db, teacher, classroom):
    with pytest.raises(InvalidRoleError):
        await ClassroomService.enroll_by_code(db, teacher.id, classroom.unique_code)


@pytest.mark.asyncio
async def test_enroll_by_email(db, teacher, student, classroom):
    result = await ClassroomService.enroll_by_email(db, teacher.id, classroom.id, student.email.upper())

    assert result.student_count == 1
    await db.refresh(student)
    assert student.is_member_of(classroom.id)


@pytest.mark.asyncio
async def test_enroll_by_email_unknown_student(db, teacher, classroom):
    with pytest.raises(UserNotFoundError):
        await ClassroomService.enroll_by_email(db, teacher.id, classroom.id, "ghost@test.example.com")


@pytest.mark.asyncio
async def test_enroll_by_email_requires_owner(db, student, classroom):
    other = await create_user(db, UserRole.TEACHER)

    with pytest.raises(ForbiddenError):
        await ClassroomService.enroll_by_email(db, other.id, classroom.id, student.email)

    await db.refresh(student)
    assert student.student_of_classrooms == []


@pytest.mark.asyncio
async def test_remove_student(db, teacher, student, classroom):
    await ClassroomService.enroll_by_code(db, student.id, classroom.unique_code)

    result = await ClassroomService.remove_student(db, teacher.id, classroom.id, student.id)

    assert result.student_count == 0
    await db.refresh(student)
    assert student.student_of_classrooms == []
    assert await _enrollment_markers(db, classroom.id) == []


@pytest.mark.asyncio
async def test_remove_non_member_writes_nothing(db, teacher, student, classroom):
    await db.refresh(classroom)
    await db.refresh(student)
    classroom_version = classroom.version
    student_version = student.version

    result = await ClassroomService.remove_student(db, teacher.id, classroom.id, student.id)

    assert result.student_count == 0
    assert result.version == classroom_version
    await db.refresh(student)
    assert student.version == student_version


@pytest.mark.asyncio
async def test_re_enroll_after_removal(db, teacher, student, classroom):
    await ClassroomService.enroll_by_code(db, student.id, classroom.unique_code)
    await ClassroomService.remove_student(db, teacher.id, classroom.id, student.id)

    result = await ClassroomService.enroll_by_code(db, student.id, classroom.unique_code)

    assert result.student_count == 1
    assert len(await _enrollment_markers(db, classroom.id)) == 1


@pytest.mark.asyncio
async def test_assign_and_unassign_game(db, teacher, classroom, game):
    assignment = await assign_game(db, teacher, classroom.id, game, max_attempts_allowed=5)

    assert assignment.classroom_id == classroom.id
    assert assignment.library_game_id == game.id
    assert assignment.game_title == game.title
    assert assignment.max_xp_awarded == 50
    assert assignment.total_points_possible == 20
    assert assignment.max_attempts_allowed == 5
    assert assignment.date_assigned is not None
    await db.refresh(classroom)
    assert classroom.activity_count == 1

    await ClassroomService.unassign_game(db, teacher.id, classroom.id, assignment.id)

    await db.refresh(classroom)
    assert classroom.activity_count == 0
    assert await db.get(AssignedGame, assignment.id) is None


@pytest.mark.asyncio
async def test_assignment_keeps_snapshot_after_catalog_edit(db, teacher, classroom, game):
    assignment = await assign_game(db, teacher, classroom.id, game)

    game.title = "Fraction Frenzy 2"
    game.max_xp_awarded = 500
    await db.commit()

    await db.refresh(assignment)
    assert assignment.game_title == "Fraction Frenzy"
    assert assignment.max_xp_awarded == 50


@pytest.mark.asyncio
async def test_assign_unknown_game(db, teacher, classroom):
    fake = await create_game(db)
    fake_id = fake.id
    await db.delete(fake)
    await db.commit()

    with pytest.raises(GameNotFoundError):
        await assign_game(db, teacher, classroom.id, fake)

    await db.refresh(classroom)
    assert classroom.activity_count == 0
    assert await db.get(AssignedGame, fake_id) is None


@pytest.mark.asyncio
async def test_assign_game_requires_owner(db, classroom, game):
    other = await create_user(db, UserRole.TEACHER)

    with pytest.raises(ForbiddenError):
        await assign_game(db, other, classroom.id, game)


@pytest.mark.asyncio
async def test_unassign_missing_game(db, teacher, classroom):
    with pytest.raises(AssignedGameNotFoundError):
        await ClassroomService.unassign_game(db, teacher.id, classroom.id, "missing")


@pytest.mark.asyncio
async def test_operations_on_missing_classroom(db, teacher, student):
    with pytest.raises(ClassroomNotFoundError):
        await ClassroomService.remove_student(db, teacher.id, "missing", student.id)
    with pytest.raises(ClassroomNotFoundError):
        await ClassroomService.get_classroom(db, "missing")


@pytest.mark.asyncio
async def test_listing_queries(db, teacher, student, classroom, game):
    second = await create_classroom(db, teacher, name="Science 4B")
    await ClassroomService.enroll_by_code(db, student.id, classroom.unique_code)
    await assign_game(db, teacher, classroom.id, game)

    teaching = await ClassroomService.list_teaching_classrooms(db, teacher.id)
    assert {c.id for c in teaching} == {classroom.id, second.id}

    enrolled = await ClassroomService.list_enrolled_classrooms(db, student.id)
    assert [c.id for c in enrolled] == [classroom.id]

    roster = await ClassroomService.list_enrolled_students(db, classroom.id, teacher.id)
    assert [s.id for s in roster] == [student.id]

    assignments = await ClassroomService.list_assigned_games(db, classroom.id)
    assert [a.library_game_id for a in assignments] == [game.id]


@pytest.mark.asyncio
async def test_enrolled_classrooms_skip_dangling_ids(db, student, classroom):
    await ClassroomService.enroll_by_code(db, student.id, classroom.unique_code)
    await db.refresh(student)
    student.student_of_classrooms = [*student.student_of_classrooms, "deleted-classroom"]
    await db.commit()

    enrolled = await ClassroomService.list_enrolled_classrooms(db, student.id)

    assert [c.id for c in enrolled] == [classroom.id]
