"""
API test fixtures: the real app factory wired to test components.
"""

from __future__ import annotations

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from quickscan.api.fastapi import create_app
from quickscan.auth import AuthSettings
from quickscan.storage import StorageSettings


@pytest.fixture
def api_app(identity, temp_backend, registry, file_settings, upload_dir) -> FastAPI:
    return create_app(
        auth_settings=AuthSettings(jwt_secret="test-secret-key"),
        storage_settings=StorageSettings(temp_dir=upload_dir),
        file_settings=file_settings,
        identity=identity,
        storage=temp_backend,
        registry=registry,
    )


@pytest_asyncio.fixture
async def api_client(api_app: FastAPI) -> AsyncClient:
    transport = ASGITransport(app=api_app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client


@pytest.fixture
def auth_headers(demo_credential) -> dict[str, str]:
    return {"Authorization": f"Bearer {demo_credential}"}
