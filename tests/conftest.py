"""Shared pytest fixtures: in-memory store, entity factories and an API client."""

import uuid
from datetime import timedelta
from typing import Optional

import pytest
from httpx import ASGITransport, AsyncClient
from jose import jwt
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from brightminds.config import GamificationConfig, settings
from brightminds.database import Base, get_db
from brightminds.main import app
from brightminds.models import Game, GameDifficulty, User, UserRole
from brightminds.schemas.classroom import AssignGameRequest, ClassroomCreate
from brightminds.services.attempt_service import AttemptService
from brightminds.services.classroom_service import ClassroomService
from brightminds.services.leveling_service import LevelingEngine
from brightminds.utils.time import get_utc_now

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture
async def engine():
    """Fresh in-memory schema per test."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=True,
    )


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def gamification() -> GamificationConfig:
    return GamificationConfig()


@pytest.fixture
def leveling(gamification) -> LevelingEngine:
    return LevelingEngine(gamification)


@pytest.fixture
def attempt_service(gamification, leveling) -> AttemptService:
    return AttemptService(gamification, leveling)


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------

async def create_user(
    db: AsyncSession,
    role: UserRole = UserRole.STUDENT,
    *,
    user_id: Optional[str] = None,
    email: Optional[str] = None,
    display_name: str = "Test User",
    **fields,
) -> User:
    """Insert a user directly; students start at level 1 with 0/100 XP unless overridden."""
    uid = user_id or f"uid-{uuid.uuid4().hex[:12]}"
    values = dict(
        id=uid,
        email=email or f"{uid}@test.example.com",
        display_name=display_name,
        role=role,
        student_of_classrooms=[],
        teacher_of_classrooms=[],
    )
    if role == UserRole.STUDENT:
        values.update(level=1, current_xp=0, xp_to_next_level=100)
    values.update(fields)
    user = User(**values)
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


async def create_game(db: AsyncSession, **fields) -> Game:
    values = dict(
        id=str(uuid.uuid4()),
        title="Fraction Frenzy",
        description="Match equivalent fractions",
        grade_level=4,
        difficulty=GameDifficulty.MEDIUM,
        game_url_or_identifier="games/fraction-frenzy",
        max_xp_awarded=50,
        total_points_possible=20,
    )
    values.update(fields)
    game = Game(**values)
    db.add(game)
    await db.commit()
    await db.refresh(game)
    return game


async def create_classroom(db: AsyncSession, teacher: User, name: str = "Math 4B"):
    return await ClassroomService.create_classroom(db, teacher.id, ClassroomCreate(name=name))


async def assign_game(
    db: AsyncSession,
    teacher: User,
    classroom_id: str,
    game: Game,
    *,
    max_attempts_allowed: Optional[int] = None,
    due_in: timedelta = timedelta(days=7),
):
    """Assign through the service. ``due_in`` may be negative to create an overdue assignment."""
    request = AssignGameRequest.model_construct(
        library_game_id=game.id,
        due_date=get_utc_now() + due_in,
        max_attempts_allowed=max_attempts_allowed,
    )
    return await ClassroomService.assign_game(db, teacher.id, classroom_id, request)


@pytest.fixture
async def teacher(db) -> User:
    return await create_user(db, UserRole.TEACHER, display_name="Ms. Frizzle")


@pytest.fixture
async def student(db) -> User:
    return await create_user(db, UserRole.STUDENT, display_name="Arnold")


@pytest.fixture
async def game(db) -> Game:
    return await create_game(db)


@pytest.fixture
async def classroom(db, teacher):
    return await create_classroom(db, teacher)


# ---------------------------------------------------------------------------
# API client
# ---------------------------------------------------------------------------

def make_token(uid: str, email: Optional[str] = None) -> str:
    """Sign a token the way the identity provider would."""
    claims = {"sub": uid}
    if email:
        claims["email"] = email
    return jwt.encode(claims, settings.IDENTITY_TOKEN_SECRET, algorithm=settings.IDENTITY_TOKEN_ALGORITHM)


def auth_headers(uid: str, email: Optional[str] = None) -> dict:
    return {"Authorization": f"Bearer {make_token(uid, email)}"}


@pytest.fixture
def api_base() -> str:
    """Base URL for API requests."""
    return f"http://test{settings.API_V1_PREFIX}"


@pytest.fixture
async def async_client(session_factory, api_base: str):
    """Async HTTP client bound to the in-memory store."""

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    transport = ASGITransport(app=app)
    client = AsyncClient(transport=transport, base_url=api_base, timeout=30.0)
    yield client
    await client.aclose()
    app.dependency_overrides.clear()


async def register_via_api(
    client: AsyncClient,
    api_base: str,
    role: UserRole,
    display_name: str,
    uid: Optional[str] = None,
) -> dict:
    """Register a profile through the API and return its id, email and auth headers."""
    uid = uid or f"uid-{uuid.uuid4().hex[:12]}"
    email = f"{uid}@test.example.com"
    headers = auth_headers(uid, email)
    payload = {"display_name": display_name, "email": email, "role": role.value}
    if role == UserRole.TEACHER:
        payload["teacher_enrollment_code"] = settings.TEACHER_ENROLLMENT_CODE

    resp = await client.post(f"{api_base}/users/register", headers=headers, json=payload)
    assert resp.status_code == 201, resp.text
    return {"id": uid, "email": email, "headers": headers}


@pytest.fixture
async def api_teacher(async_client: AsyncClient, api_base: str) -> dict:
    return await register_via_api(async_client, api_base, UserRole.TEACHER, "Ms. Frizzle")


@pytest.fixture
async def api_student(async_client: AsyncClient, api_base: str) -> dict:
    return await register_via_api(async_client, api_base, UserRole.STUDENT, "Arnold")


@pytest.fixture
async def api_classroom(async_client: AsyncClient, api_base: str, api_teacher: dict) -> dict:
    """Create a classroom as ``api_teacher`` and return its data."""
    resp = await async_client.post(
        f"{api_base}/classrooms",
        headers=api_teacher["headers"],
        json={"name": "Math 4B", "description": "Fractions and decimals"},
    )
    assert resp.status_code == 201, resp.text
    return resp.json()["data"]
