from __future__ import annotations

import pytest
from starlette.testclient import TestClient

from quickscan.api.fastapi import create_app
from quickscan.auth import AuthSettings
from quickscan.files import FileSettings
from quickscan.storage import StorageSettings


@pytest.fixture()
def acceptance_app(tmp_path):
    return create_app(
        auth_settings=AuthSettings(jwt_secret="acceptance-secret"),
        storage_settings=StorageSettings(type="temporary", temp_dir=tmp_path / "uploads"),
        file_settings=FileSettings(),
    )


@pytest.fixture()
def local_client(acceptance_app):
    with TestClient(acceptance_app) as c:
        yield c
