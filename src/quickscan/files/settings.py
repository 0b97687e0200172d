from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_ALLOWED_CONTENT_TYPES = [
    "application/pdf",
    "text/plain",
    "text/markdown",
    "text/csv",
    "application/json",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "image/jpeg",
    "image/png",
    "image/gif",
    "image/webp",
]


class FileSettings(BaseSettings):
    max_upload_bytes: int = 10 * 1024 * 1024
    allowed_content_types: list[str] = Field(
        default_factory=lambda: list(DEFAULT_ALLOWED_CONTENT_TYPES)
    )
    retention_hours: float = 24.0
    # Unset disables the background sweep; POST /api/files/cleanup still works.
    sweep_interval_seconds: float | None = None

    model_config = SettingsConfigDict(env_prefix="FILES_", env_file=".env", extra="ignore")


@lru_cache
def get_file_settings() -> FileSettings:
    return FileSettings()
