"""Unit tests for EntityStore and run_in_transaction."""

import pytest
from sqlalchemy import text
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm.exc import StaleDataError

from brightminds.core.exceptions import ForbiddenError, MappingError, TransientStoreError
from brightminds.models import AssignedGame, Classroom, Game, StudentGameAttempt, User
from brightminds.repositories.store import EntityStore, run_in_transaction
from tests.conftest import assign_game


@pytest.mark.asyncio
async def test_get_and_get_child(db, teacher, classroom, game):
    assignment = await assign_game(db, teacher, classroom.id, game)
    store = EntityStore(db)

    assert (await store.get(Classroom, classroom.id)).id == classroom.id
    assert await store.get(Classroom, "missing") is None
    assert (await store.get_child(AssignedGame, classroom.id, assignment.id)).id == assignment.id
    assert await store.get_child(AssignedGame, "other-classroom", assignment.id) is None


@pytest.mark.asyncio
async def test_query_helpers(db, teacher, student):
    store = EntityStore(db)

    assert (await store.first_equal(User, "email", student.email)).id == student.id
    assert await store.first_equal(User, "email", "ghost@test.example.com") is None
    assert [u.id for u in await store.query_equal(User, "role", student.role)] == [student.id]
    assert await store.count_equal(User) == 2
    assert await store.count_equal(StudentGameAttempt, student_id=student.id) == 0


@pytest.mark.asyncio
async def test_put_bumps_version_without_changes(db, classroom):
    version_before = classroom.version

    async def work(store: EntityStore):
        store.put(await store.get(Classroom, classroom.id))

    await run_in_transaction(db, work)

    await db.refresh(classroom)
    assert classroom.version == version_before + 1


@pytest.mark.asyncio
async def test_stale_write_is_retried(db, session_factory, classroom):
    classroom_id = classroom.id
    calls = []

    # Another session bumps the row after this session has loaded it
    async with session_factory() as other:
        row = await other.get(Classroom, classroom_id)
        row.student_count = 10
        await other.commit()

    async def work(store: EntityStore):
        calls.append(1)
        loaded = await store.get(Classroom, classroom_id)
        loaded.activity_count = (loaded.activity_count or 0) + 1
        store.put(loaded)
        return loaded

    result = await run_in_transaction(db, work)

    assert len(calls) == 2
    await db.refresh(result)
    assert result.student_count == 10
    assert result.activity_count == 1


@pytest.mark.asyncio
async def test_conflicts_exhaust_retries(db):
    calls = []

    async def work(store: EntityStore):
        calls.append(1)
        raise StaleDataError("row changed")

    with pytest.raises(TransientStoreError):
        await run_in_transaction(db, work, max_attempts=3)

    assert len(calls) == 3


@pytest.mark.asyncio
async def test_domain_errors_are_not_retried(db):
    calls = []

    async def work(store: EntityStore):
        calls.append(1)
        raise ForbiddenError("nope")

    with pytest.raises(ForbiddenError):
        await run_in_transaction(db, work)

    assert len(calls) == 1


@pytest.mark.asyncio
async def test_store_failures_become_transient(db):
    async def work(store: EntityStore):
        raise OperationalError("SELECT 1", {}, Exception("database is locked"))

    with pytest.raises(TransientStoreError) as exc_info:
        await run_in_transaction(db, work)

    assert isinstance(exc_info.value.cause, OperationalError)


@pytest.mark.asyncio
async def test_failed_transaction_writes_nothing(db, classroom):
    classroom_id = classroom.id

    async def work(store: EntityStore):
        loaded = await store.get(Classroom, classroom_id)
        loaded.student_count = 99
        store.put(loaded)
        await store.db.flush()
        raise ForbiddenError("abort after staging")

    with pytest.raises(ForbiddenError):
        await run_in_transaction(db, work)

    reloaded = await EntityStore(db).get(Classroom, classroom_id)
    assert reloaded.student_count == 0


@pytest.mark.asyncio
async def test_undecodable_row_raises_mapping_error(db):
    await db.execute(
        text(
            "INSERT INTO users (id, display_name, email, role, theme_preference, "
            "student_of_classrooms, teacher_of_classrooms, version) "
            "VALUES ('bad', 'Broken', 'broken@test.example.com', 'ADMIN', 'LIGHT', '[]', '[]', 1)"
        )
    )
    await db.commit()
    store = EntityStore(db)

    with pytest.raises(MappingError):
        await store.get(User, "bad")
    with pytest.raises(MappingError):
        await store.first_equal(User, "email", "broken@test.example.com")

    async def work(store: EntityStore):
        store.put(Game(title="Never Saved"))
        await store.db.flush()
        await store.get(User, "bad")

    with pytest.raises(MappingError):
        await run_in_transaction(db, work)

    assert await EntityStore(db).count_equal(Game) == 0
