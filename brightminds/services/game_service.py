"""Game Service - library game catalog"""

import logging
from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from brightminds.core.exceptions import GameNotFoundError
from brightminds.models.base import new_id
from brightminds.models.game import Game
from brightminds.repositories.store import EntityStore, run_in_transaction
from brightminds.schemas.game import GameCreate

logger = logging.getLogger(__name__)


class GameService:
    @staticmethod
    async def list_games(db: AsyncSession) -> List[Game]:
        result = await db.execute(select(Game).order_by(Game.title))
        return list(result.scalars().all())

    @staticmethod
    async def get_game(db: AsyncSession, game_id: str) -> Game:
        game = await EntityStore(db).get(Game, game_id)
        if game is None:
            logger.warning("Library game not found with ID %s", game_id)
            raise GameNotFoundError(game_id)
        return game

    @staticmethod
    async def create_game(db: AsyncSession, data: GameCreate) -> Game:
        """Add a pre-made game to the catalog (seeding / admin tooling)."""
        async def work(store: EntityStore) -> Game:
            game = Game(id=new_id(), **data.model_dump())
            store.put(game)
            return game

        game = await run_in_transaction(db, work)
        await db.refresh(game)
        logger.info("Game '%s' added to library with ID %s", game.title, game.id)
        return game
