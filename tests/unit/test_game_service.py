"""Unit tests for GameService."""

import pytest

from brightminds.core.exceptions import GameNotFoundError
from brightminds.models.enums import GameDifficulty
from brightminds.schemas.game import GameCreate
from brightminds.services.game_service import GameService
from tests.conftest import create_game


@pytest.mark.asyncio
async def test_create_and_get_game(db):
    game = await GameService.create_game(
        db,
        GameCreate(
            title="Spelling Bee",
            difficulty=GameDifficulty.EASY,
            grade_level=2,
            max_xp_awarded=40,
            total_points_possible=10,
        ),
    )

    fetched = await GameService.get_game(db, game.id)
    assert fetched.title == "Spelling Bee"
    assert fetched.difficulty == GameDifficulty.EASY
    assert fetched.created_at is not None


@pytest.mark.asyncio
async def test_list_games_sorted_by_title(db):
    await create_game(db, title="Zoo Math")
    await create_game(db, title="Alphabet Soup")

    games = await GameService.list_games(db)

    assert [g.title for g in games] == ["Alphabet Soup", "Zoo Math"]


@pytest.mark.asyncio
async def test_get_missing_game(db):
    with pytest.raises(GameNotFoundError):
        await GameService.get_game(db, "missing")
