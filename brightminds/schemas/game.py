from typing import Optional
from datetime import datetime
from pydantic import BaseModel, Field, ConfigDict

from brightminds.models.enums import GameDifficulty


class GameCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    grade_level: Optional[int] = Field(None, ge=0)
    difficulty: Optional[GameDifficulty] = None
    game_url_or_identifier: Optional[str] = None
    max_xp_awarded: Optional[int] = Field(None, ge=0)
    total_points_possible: Optional[int] = Field(None, ge=0)


class GameResponse(GameCreate):
    id: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
