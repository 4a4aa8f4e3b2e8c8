"""
Application settings.

Values come from environment variables (optionally namespaced with the
``VETCATALOG_`` prefix) and from the ``.env`` file named by
``VETCATALOG_ENV_FILE``. Invalid values fail at startup.
"""

from __future__ import annotations

import logging
import os
from typing import Annotated, List, Optional

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

logger = logging.getLogger(__name__)

DEV_JWT_SECRET = "dev-only-insecure-secret"
ENV_PREFIX = "VETCATALOG_"


def _env(name: str) -> AliasChoices:
    return AliasChoices(name, ENV_PREFIX + name)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
        populate_by_name=True,
    )

    database_url: str = Field(
        default="sqlite:///./vetcatalog.sqlite", validation_alias=_env("DATABASE_URL")
    )

    # Auth
    jwt_secret: str = Field(default=DEV_JWT_SECRET, min_length=1, validation_alias=_env("JWT_SECRET"))
    jwt_algorithm: str = Field(default="HS256", validation_alias=_env("JWT_ALGORITHM"))
    jwt_expires_minutes: int = Field(
        default=60 * 24, gt=0, validation_alias=_env("JWT_EXPIRES_MINUTES")
    )

    cors_origins: Annotated[List[str], NoDecode] = Field(
        default_factory=lambda: ["*"], validation_alias=_env("CORS_ORIGINS")
    )

    # Image storage
    storage_backend: str = Field(default="local", validation_alias=_env("STORAGE_BACKEND"))  # local | s3
    media_root: str = Field(default="./media", validation_alias=_env("MEDIA_ROOT"))
    media_url: str = Field(default="/media", validation_alias=_env("MEDIA_URL"))
    s3_bucket: Optional[str] = Field(default=None, validation_alias=_env("S3_BUCKET"))
    s3_region: Optional[str] = Field(default=None, validation_alias=_env("S3_REGION"))
    s3_endpoint_url: Optional[str] = Field(default=None, validation_alias=_env("S3_ENDPOINT_URL"))
    s3_public_url: Optional[str] = Field(default=None, validation_alias=_env("S3_PUBLIC_URL"))

    log_level: str = Field(default="INFO", validation_alias=_env("LOG_LEVEL"))

    @field_validator("cors_origins", mode="before")
    @classmethod
    def _split_origins(cls, value):
        if isinstance(value, str):
            return [item.strip() for item in value.split(",") if item.strip()] or ["*"]
        return value

    @field_validator("storage_backend", mode="before")
    @classmethod
    def _lower_backend(cls, value):
        return value.lower() if isinstance(value, str) else value

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_level(cls, value):
        return value.upper() if isinstance(value, str) else value

    @field_validator("media_url")
    @classmethod
    def _strip_media_url(cls, value: str) -> str:
        return value.rstrip("/") or "/media"

    @classmethod
    def from_env(cls) -> "Settings":
        settings = cls(_env_file=os.getenv("VETCATALOG_ENV_FILE", ".env"))
        if settings.jwt_secret == DEV_JWT_SECRET:
            logger.warning("JWT_SECRET is not set; using the development secret")
        return settings


_SETTINGS: Optional[Settings] = None


def get_settings() -> Settings:
    global _SETTINGS
    if _SETTINGS is None:
        _SETTINGS = Settings.from_env()
    return _SETTINGS


def override_settings(settings: Optional[Settings]) -> None:
    """Replace the process-wide settings (``None`` reloads from the environment)."""
    global _SETTINGS
    _SETTINGS = settings
