from __future__ import annotations

import pytest
from starlette.testclient import TestClient

pytestmark = [pytest.mark.acceptance]


def test_register_login_upload_list_download_delete(local_client: TestClient):
    # 1) register
    r = local_client.post(
        "/api/auth/register",
        json={
            "email": "user@example.com",
            "password": "password123",
            "confirm_password": "password123",
        },
    )
    assert r.status_code == 200, r.text

    # 2) login
    r2 = local_client.post(
        "/api/auth/login",
        json={"email": "user@example.com", "password": "password123"},
    )
    assert r2.status_code == 200, r2.text
    token = r2.json()["data"]["token"]
    headers = {"authorization": f"Bearer {token}"}

    # 3) upload a.txt (5 bytes)
    r3 = local_client.post(
        "/api/upload",
        headers=headers,
        files={"file": ("a.txt", b"hello", "text/plain")},
    )
    assert r3.status_code == 200, r3.text
    uploaded = r3.json()["data"]
    assert uploaded["file_size"] == 5
    file_id = uploaded["id"]

    # 4) list
    r4 = local_client.get("/api/files", headers=headers)
    assert r4.status_code == 200, r4.text
    listing = r4.json()["data"]
    assert listing["total_count"] == 1
    assert listing["files"][0]["id"] == file_id

    # 5) download
    r5 = local_client.get(f"/api/files/{file_id}/download", headers=headers)
    assert r5.status_code == 200, r5.text
    assert r5.content == b"hello"

    # 6) delete
    r6 = local_client.delete(f"/api/files/{file_id}", headers=headers)
    assert r6.status_code == 200, r6.text
    assert r6.json()["data"]["id"] == file_id

    # 7) download again -> 404
    r7 = local_client.get(f"/api/files/{file_id}/download", headers=headers)
    assert r7.status_code == 404
    assert r7.json()["error"]["type"] == "not_found"

    r8 = local_client.get("/api/files", headers=headers)
    assert r8.json()["data"]["total_count"] == 0


def test_demo_token_flow(local_client: TestClient):
    r = local_client.post("/api/auth/token", json={"token": "demo-token-12345"})
    assert r.status_code == 200, r.text
    headers = {"authorization": f"Bearer {r.json()['data']['token']}"}

    up = local_client.post(
        "/api/upload",
        headers=headers,
        files={"file": ("report.pdf", b"%PDF-1.4 test", "application/pdf")},
    )
    assert up.status_code == 200, up.text

    link = local_client.get(f"/api/files/{up.json()['data']['id']}/url", headers=headers)
    assert link.status_code == 200
    assert link.json()["data"]["download_url"].endswith("/download")
