#!/usr/bin/env python3
"""
Seed the game library with starter games.

Usage:
  python scripts/seed_games.py
  # Uses DATABASE_URL from .env (or export)

Games whose title already exists are skipped.
"""
import asyncio
import os
import sys

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from brightminds.core.logging import setup_logging, get_logger
from brightminds.database import AsyncSessionLocal, close_db
from brightminds.models.enums import GameDifficulty
from brightminds.schemas.game import GameCreate
from brightminds.services.game_service import GameService

logger = get_logger(__name__)

STARTER_GAMES = [
    GameCreate(
        title="Fraction Frenzy",
        description="Match equivalent fractions before the timer runs out.",
        grade_level=4,
        difficulty=GameDifficulty.MEDIUM,
        game_url_or_identifier="games/fraction-frenzy",
        max_xp_awarded=50,
        total_points_possible=20,
    ),
    GameCreate(
        title="Spelling Bee",
        description="Spell the word you hear.",
        grade_level=2,
        difficulty=GameDifficulty.EASY,
        game_url_or_identifier="games/spelling-bee",
        max_xp_awarded=30,
        total_points_possible=10,
    ),
    GameCreate(
        title="Planet Quest",
        description="Put the planets in order and answer questions about each one.",
        grade_level=5,
        difficulty=GameDifficulty.HARD,
        game_url_or_identifier="games/planet-quest",
        max_xp_awarded=80,
        total_points_possible=40,
    ),
]


async def main() -> int:
    setup_logging()
    async with AsyncSessionLocal() as db:
        existing = {game.title for game in await GameService.list_games(db)}
        for payload in STARTER_GAMES:
            if payload.title in existing:
                logger.info("Skipping existing game '%s'", payload.title)
                continue
            await GameService.create_game(db, payload)
    await close_db()
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
