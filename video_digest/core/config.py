"""
Application configuration using pydantic-settings.
"""
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from video_digest.core.constants import CacheConfig
from video_digest.models.enums import StoreBackendType


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    PROJECT_NAME: str = "Video Digest"

    # Storage
    SUMMARY_STORE_BACKEND: StoreBackendType = StoreBackendType.SQL
    DATABASE_URL: str = "sqlite+aiosqlite:///./summaries.db"
    JSON_STORE_PATH: str = "summaries.json"

    # Cache policy
    SUMMARY_CACHE_CAPACITY: int = Field(default=CacheConfig.DEFAULT_CAPACITY, ge=1)
    RECENT_SUMMARIES_LIMIT: int = Field(default=CacheConfig.DEFAULT_RECENT_LIMIT, ge=1)
    PARSED_CACHE_SIZE: int = Field(default=CacheConfig.PARSED_CACHE_SIZE, ge=1)

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FILE: Optional[str] = None

    @field_validator("DATABASE_URL", mode="before")
    @classmethod
    def use_async_driver(cls, v: str) -> str:
        if isinstance(v, str):
            if v.startswith("postgresql://"):
                return v.replace("postgresql://", "postgresql+asyncpg://", 1)
            if v.startswith("sqlite://"):
                return v.replace("sqlite://", "sqlite+aiosqlite://", 1)
        return v

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        return v.upper() if isinstance(v, str) else v

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


settings = Settings()
