from __future__ import annotations

import pydantic
import pytest

from quickscan.storage import (
    RemoteBackend,
    StorageKind,
    StorageSettings,
    TemporaryBackend,
    build_storage_backend,
    sanitize_filename,
)


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("temporary", StorageKind.TEMPORARY),
        ("TEMP", StorageKind.TEMPORARY),
        ("remote", StorageKind.REMOTE),
        ("Supabase", StorageKind.REMOTE),
    ],
)
def test_storage_type_synonyms(raw, expected):
    settings = StorageSettings(type=raw, remote_url="https://x.supabase.co", remote_key="k")
    assert settings.type is expected


def test_remote_requires_url_and_key():
    with pytest.raises(pydantic.ValidationError):
        StorageSettings(type="remote")


def test_storage_settings_read_env(monkeypatch, tmp_path):
    monkeypatch.setenv("STORAGE_TYPE", "supabase")
    monkeypatch.setenv("STORAGE_REMOTE_URL", "https://x.supabase.co/")
    monkeypatch.setenv("STORAGE_REMOTE_KEY", "secret")
    monkeypatch.setenv("STORAGE_REMOTE_BUCKET", "docs")

    settings = StorageSettings()

    assert settings.type is StorageKind.REMOTE
    assert settings.remote_url == "https://x.supabase.co"
    assert settings.remote_bucket == "docs"
    assert settings.signed_url_ttl_seconds == 3600


def test_build_temporary_backend(tmp_path):
    backend = build_storage_backend(StorageSettings(temp_dir=tmp_path / "up"))
    assert isinstance(backend, TemporaryBackend)
    assert (tmp_path / "up").is_dir()


@pytest.mark.asyncio
async def test_build_remote_backend():
    backend = build_storage_backend(
        StorageSettings(
            type="remote",
            remote_url="https://x.supabase.co",
            remote_key="secret",
            remote_bucket="docs",
        )
    )
    try:
        assert isinstance(backend, RemoteBackend)
        assert backend.bucket == "docs"
    finally:
        await backend.aclose()


@pytest.mark.parametrize(
    "name, expected",
    [
        ("test file.txt", "test_file.txt"),
        ("normal-file_name.jpg", "normal-file_name.jpg"),
        ("../../../etc/passwd", ".._.._.._etc_passwd"),
        ("résumé.pdf", "r_sum_.pdf"),
        ("", "file"),
        (None, "file"),
    ],
)
def test_sanitize_filename(name, expected):
    assert sanitize_filename(name) == expected


def test_build_remote_without_credentials_raises():
    settings = StorageSettings.model_construct(type=StorageKind.REMOTE)
    with pytest.raises(ValueError, match="STORAGE_REMOTE_URL"):
        build_storage_backend(settings)
