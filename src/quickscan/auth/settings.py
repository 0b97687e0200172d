from __future__ import annotations

from functools import lru_cache

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_DEMO_TOKENS = [
    "quickscan-api-token-2024",
    "demo-token-12345",
    "test-api-key-abcdef",
]


class AuthSettings(BaseSettings):
    jwt_secret: SecretStr = SecretStr("your-secret-key-change-this-in-production")
    jwt_algorithm: str = "HS256"
    token_ttl_seconds: int = 60 * 60 * 24

    # Pre-shared strings accepted by POST /api/auth/token
    demo_tokens: list[str] = Field(default_factory=lambda: list(DEFAULT_DEMO_TOKENS))

    password_min_length: int = 8
    password_max_length: int = 128

    model_config = SettingsConfigDict(env_prefix="AUTH_", env_file=".env", extra="ignore")


@lru_cache
def get_auth_settings() -> AuthSettings:
    return AuthSettings()
