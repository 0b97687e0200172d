from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from quickscan.app.env import Env


class AppSettings(BaseSettings):
    # flat = easy env overrides
    name: str = "QuickScan API"
    version: str = "0.1.0"
    env: Env = Env.LOCAL

    host: str = "127.0.0.1"
    port: int = 3000
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])

    model_config = SettingsConfigDict(
        env_prefix="APP_",  # APP_NAME, APP_ENV, APP_PORT
        env_file=".env",
        extra="ignore",
    )


@lru_cache
def get_app_settings() -> AppSettings:
    return AppSettings()
