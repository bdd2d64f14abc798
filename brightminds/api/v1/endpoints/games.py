"""Game Library Endpoints"""

from typing import Any, List
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from brightminds.api import deps
from brightminds.models.user import User
from brightminds.schemas.game import GameResponse
from brightminds.schemas.responses import SuccessResponse
from brightminds.services.game_service import GameService

router = APIRouter()


@router.get("", response_model=SuccessResponse[List[GameResponse]])
async def list_games(
    current_user: User = Depends(deps.get_current_user),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    games = await GameService.list_games(db)
    return SuccessResponse(data=games)


@router.get("/{game_id}", response_model=SuccessResponse[GameResponse])
async def get_game(
    game_id: str,
    current_user: User = Depends(deps.get_current_user),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    game = await GameService.get_game(db, game_id)
    return SuccessResponse(data=game)
