from __future__ import annotations

import os
import warnings
from enum import StrEnum
from functools import cache


class Env(StrEnum):
    LOCAL = "local"
    DEV = "dev"
    TEST = "test"
    PROD = "prod"


# Common aliases -> canonical
SYNONYMS: dict[str, Env] = {
    "development": Env.DEV,
    "testing": Env.TEST,
    "production": Env.PROD,
}


def normalize_env(raw: str | None) -> Env | None:
    if not raw:
        return None
    val = raw.strip().lower()
    if val in (e.value for e in Env):
        return Env(val)
    return SYNONYMS.get(val)


@cache
def get_env() -> Env:
    """
    Resolve the current environment from APP_ENV once.

    Unknown values fall back to LOCAL with a one-time warning.
    """
    raw = os.getenv("APP_ENV")
    env = normalize_env(raw)
    if env is None:
        if raw:
            warnings.warn(
                f"Unrecognized environment '{raw}', defaulting to 'local'.",
                RuntimeWarning,
                stacklevel=2,
            )
        env = Env.LOCAL
    return env


def pick(*, prod, nonprod, env: Env | None = None):
    """
    Choose a value based on the active environment.

    Example:
        log_level = pick(prod="INFO", nonprod="DEBUG")
    """
    e = env or get_env()
    return prod if e is Env.PROD else nonprod
