from __future__ import annotations

import pytest
from fastapi import FastAPI
from starlette.testclient import TestClient

from quickscan.api.fastapi import create_app
from quickscan.api.fastapi.middleware.request_size_limit import RequestSizeLimitMiddleware
from quickscan.auth import AuthSettings
from quickscan.files import FileSettings
from quickscan.storage import StorageSettings


@pytest.fixture
def guarded_client():
    app = FastAPI()
    app.add_middleware(RequestSizeLimitMiddleware, max_bytes=16)

    @app.put("/blob")
    async def store(request_body: dict):
        return {"keys": sorted(request_body)}

    return TestClient(app)


def test_body_within_limit_reaches_route(guarded_client):
    resp = guarded_client.put("/blob", json={"a": 1})

    assert resp.status_code == 200
    assert resp.json() == {"keys": ["a"]}


def test_body_over_limit_gets_error_envelope(guarded_client):
    resp = guarded_client.put("/blob", json={"payload": "z" * 64})

    assert resp.status_code == 413
    body = resp.json()
    assert body["success"] is False
    assert body["data"] is None
    assert body["error"] == {
        "type": "payload_too_large",
        "message": "Request body exceeds the 16 byte limit",
        "status": 413,
    }


def test_app_rejects_oversized_upload_before_reading(tmp_path):
    app = create_app(
        auth_settings=AuthSettings(jwt_secret="s"),
        storage_settings=StorageSettings(temp_dir=tmp_path),
        file_settings=FileSettings(max_upload_bytes=10),
    )
    c = TestClient(app)
    body = b"x" * (1024 * 1024 + 100)
    r = c.post("/api/upload", content=body, headers={"Content-Type": "application/octet-stream"})
    assert r.status_code == 413
    assert r.json()["error"]["type"] == "payload_too_large"
