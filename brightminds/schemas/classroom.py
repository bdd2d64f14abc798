from typing import Optional
from datetime import datetime
from pydantic import BaseModel, EmailStr, Field, ConfigDict, field_validator

from brightminds.schemas.user import normalize_email
from brightminds.utils.time import get_utc_now, to_naive_utc


class ClassroomCreate(BaseModel):
    name: str = Field(..., min_length=3, max_length=100)
    description: Optional[str] = Field(None, max_length=255)
    icon_url: Optional[str] = None


class ClassroomUpdate(BaseModel):
    """Partial update; blank name and None fields are left untouched."""
    name: Optional[str] = Field(None, min_length=3, max_length=100)
    description: Optional[str] = Field(None, max_length=255)
    icon_url: Optional[str] = None

    @field_validator("name", mode="before")
    @classmethod
    def blank_name_means_unchanged(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v


class ClassroomResponse(BaseModel):
    id: str
    name: str
    teacher_id: str
    teacher_name: Optional[str] = None
    unique_code: str
    description: Optional[str] = None
    icon_url: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    student_count: int = 0
    activity_count: int = 0

    model_config = ConfigDict(from_attributes=True)


class EnrollByCodeRequest(BaseModel):
    code: str = Field(..., min_length=1, max_length=8)

    @field_validator("code", mode="before")
    @classmethod
    def normalize_code(cls, v):
        if isinstance(v, str):
            return v.strip().upper()
        return v


class AddStudentByEmail(BaseModel):
    email: EmailStr

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, v: str) -> str:
        return normalize_email(v)


class AssignGameRequest(BaseModel):
    library_game_id: str = Field(..., min_length=1)
    due_date: datetime
    max_attempts_allowed: Optional[int] = Field(
        None, ge=0, description="0 for unlimited; leave blank to use the configured default"
    )

    @field_validator("due_date")
    @classmethod
    def due_date_in_future(cls, v: datetime) -> datetime:
        v = to_naive_utc(v)
        if v <= get_utc_now():
            raise ValueError("Due date must be in the future")
        return v


class AssignedGameBrief(BaseModel):
    id: str
    library_game_id: str
    game_title: str
    due_date: Optional[datetime] = None
    max_attempts_allowed: Optional[int] = None

    model_config = ConfigDict(from_attributes=True)


class AssignedGameResponse(AssignedGameBrief):
    classroom_id: str
    game_description: Optional[str] = None
    game_url_or_identifier: Optional[str] = None
    max_xp_awarded: Optional[int] = None
    total_points_possible: Optional[int] = None
    date_assigned: Optional[datetime] = None
