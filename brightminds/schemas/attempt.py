from typing import Optional
from datetime import datetime
from pydantic import BaseModel, Field, ConfigDict

from brightminds.models.enums import AttemptStatus


class AttemptSubmit(BaseModel):
    """Result reported by the game client. The caller is the student."""
    classroom_id: str = Field(..., min_length=1)
    assigned_game_id: str = Field(..., min_length=1)
    score: int = Field(..., ge=0)
    # Informational only; the assignment's own value is authoritative
    total_points_possible: Optional[int] = Field(None, ge=1)


class AttemptResponse(BaseModel):
    id: str
    student_id: str
    classroom_id: str
    assigned_game_id: str
    library_game_id: Optional[str] = None
    score: Optional[int] = None
    total_points_possible: Optional[int] = None
    xp_earned: int = 0
    status: AttemptStatus
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
