from __future__ import annotations

import pytest

from quickscan.app.env import Env, get_env, normalize_env, pick


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("prod", Env.PROD),
        ("Production", Env.PROD),
        (" development ", Env.DEV),
        ("testing", Env.TEST),
        ("local", Env.LOCAL),
        ("staging", None),
        (None, None),
        ("", None),
    ],
)
def test_normalize_env(raw, expected):
    assert normalize_env(raw) is expected


def test_unknown_env_falls_back_to_local(monkeypatch):
    monkeypatch.setenv("APP_ENV", "staging")
    get_env.cache_clear()
    try:
        with pytest.warns(RuntimeWarning, match="staging"):
            assert get_env() is Env.LOCAL
    finally:
        get_env.cache_clear()


def test_pick_by_environment():
    assert pick(prod="INFO", nonprod="DEBUG", env=Env.PROD) == "INFO"
    assert pick(prod="INFO", nonprod="DEBUG", env=Env.DEV) == "DEBUG"
