"""Application Configuration"""

from typing import List
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class GamificationConfig(BaseModel):
    """Immutable XP formula constants handed to the leveling engine and attempt service"""

    model_config = ConfigDict(frozen=True)

    base_xp_threshold: int = Field(default=100, gt=0)
    level_xp_multiplier: float = Field(default=1.25, ge=1.0)
    default_max_game_attempts: int = Field(default=3, ge=0)


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Application
    APP_NAME: str = "BrightMinds Backend"
    APP_VERSION: str = "1.0.0"
    ENVIRONMENT: str = "development"
    DEBUG: bool = True
    API_V1_PREFIX: str = "/api/v1"

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # Database
    DATABASE_URL: str = "postgresql://localhost:5432/brightminds"
    DB_POOL_SIZE: int = 5
    DB_MAX_OVERFLOW: int = 10
    DB_POOL_TIMEOUT: int = 30
    DB_POOL_RECYCLE: int = 3600
    TRANSACTION_MAX_ATTEMPTS: int = 5

    # Identity provider tokens (verified here, issued elsewhere)
    IDENTITY_TOKEN_SECRET: str = "change-me"
    IDENTITY_TOKEN_ALGORITHM: str = "HS256"
    IDENTITY_TOKEN_AUDIENCE: str = ""

    # Registration
    TEACHER_ENROLLMENT_CODE: str = "BRIGHT-TEACHER"

    # CORS (5173 = Vite default dev server)
    ALLOWED_ORIGINS: str = "http://localhost:3000,http://localhost:5173"
    ALLOWED_METHODS: str = "GET,POST,PUT,DELETE,PATCH,OPTIONS"
    ALLOWED_HEADERS: str = "*"

    # Gamification
    XP_BASE_THRESHOLD: int = 100
    XP_LEVEL_MULTIPLIER: float = 1.25
    DEFAULT_MAX_GAME_ATTEMPTS: int = 3

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "json"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True
    )

    @field_validator("ALLOWED_ORIGINS")
    @classmethod
    def parse_origins(cls, v: str) -> List[str]:
        """Parse comma-separated origins into a list"""
        return [origin.strip() for origin in v.split(",")]

    @field_validator("ALLOWED_METHODS")
    @classmethod
    def parse_methods(cls, v: str) -> List[str]:
        """Parse comma-separated methods into a list"""
        return [method.strip() for method in v.split(",")]

    @field_validator("XP_BASE_THRESHOLD")
    @classmethod
    def check_base_threshold(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("XP_BASE_THRESHOLD must be positive")
        return v

    @field_validator("XP_LEVEL_MULTIPLIER")
    @classmethod
    def check_multiplier(cls, v: float) -> float:
        if v < 1.0:
            raise ValueError("XP_LEVEL_MULTIPLIER must be at least 1.0")
        return v

    @property
    def gamification(self) -> GamificationConfig:
        """Frozen snapshot of the XP constants"""
        return GamificationConfig(
            base_xp_threshold=self.XP_BASE_THRESHOLD,
            level_xp_multiplier=self.XP_LEVEL_MULTIPLIER,
            default_max_game_attempts=self.DEFAULT_MAX_GAME_ATTEMPTS,
        )

    @property
    def is_development(self) -> bool:
        """Check if running in development environment"""
        return self.ENVIRONMENT.lower() == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production environment"""
        return self.ENVIRONMENT.lower() == "production"


# Global settings instance
settings = Settings()
