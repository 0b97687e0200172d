from __future__ import annotations

import tempfile
from enum import StrEnum
from functools import lru_cache
from pathlib import Path

from pydantic import SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageKind(StrEnum):
    TEMPORARY = "temporary"
    REMOTE = "remote"


_KIND_SYNONYMS = {
    "supabase": StorageKind.REMOTE,
    "temp": StorageKind.TEMPORARY,
    "local": StorageKind.TEMPORARY,
}


def _default_temp_dir() -> Path:
    return Path(tempfile.gettempdir()) / "quickscan_uploads"


class StorageSettings(BaseSettings):
    type: StorageKind = StorageKind.TEMPORARY
    temp_dir: Path = _default_temp_dir()

    remote_url: str | None = None
    remote_key: SecretStr | None = None
    remote_bucket: str = "uploads"
    remote_timeout_seconds: float = 30.0
    signed_url_ttl_seconds: int = 3600

    model_config = SettingsConfigDict(env_prefix="STORAGE_", env_file=".env", extra="ignore")

    @field_validator("type", mode="before")
    @classmethod
    def _normalize_type(cls, value: object) -> object:
        if isinstance(value, str):
            key = value.strip().lower()
            return _KIND_SYNONYMS.get(key, key)
        return value

    @field_validator("remote_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str | None) -> str | None:
        return value.rstrip("/") if value else value

    @model_validator(mode="after")
    def _remote_requires_credentials(self) -> "StorageSettings":
        if self.type is StorageKind.REMOTE and not (self.remote_url and self.remote_key):
            raise ValueError("STORAGE_REMOTE_URL and STORAGE_REMOTE_KEY are required for remote storage")
        return self


@lru_cache
def get_storage_settings() -> StorageSettings:
    return StorageSettings()


__all__ = ["StorageKind", "StorageSettings", "get_storage_settings"]
