from typing import Optional
from datetime import datetime
from pydantic import BaseModel, EmailStr, Field, ConfigDict, field_validator

from brightminds.models.enums import UserRole, ThemePreference
from brightminds.models.user import User


def normalize_email(email: str) -> str:
    """Emails are stored and compared lowercased."""
    return email.strip().lower()


class UserRegister(BaseModel):
    """Profile for an identity that the identity provider has already created."""
    display_name: str = Field(..., min_length=2, max_length=50)
    email: EmailStr
    role: UserRole
    avatar_url: Optional[str] = None
    teacher_enrollment_code: Optional[str] = None

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, v: str) -> str:
        return normalize_email(v)


class UserUpdate(BaseModel):
    display_name: Optional[str] = Field(None, min_length=2, max_length=50)
    email: Optional[EmailStr] = None
    avatar_url: Optional[str] = None
    theme_preference: Optional[ThemePreference] = None

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, v: Optional[str]) -> Optional[str]:
        return normalize_email(v) if v is not None else v


class StudentBrief(BaseModel):
    """Minimal student info for classroom rosters."""
    id: str
    display_name: str
    email: str
    avatar_url: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class UserResponse(BaseModel):
    id: str
    display_name: str
    email: str
    role: UserRole
    avatar_url: Optional[str] = None
    theme_preference: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    # Students only
    level: Optional[int] = None
    current_xp: Optional[int] = None
    xp_to_next_level: Optional[int] = None

    model_config = ConfigDict(from_attributes=True)

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        """Build the response, exposing gamification fields for students only"""
        data = cls.model_validate(user)
        if user.role != UserRole.STUDENT:
            data.level = None
            data.current_xp = None
            data.xp_to_next_level = None
        return data
