"""
Root conftest.py for QuickScan tests.

Provides:
1. Marker registration
2. A controllable clock
3. Component fixtures (identity store, storage backends, file service)
4. An in-process bucket API for the remote backend
"""

from __future__ import annotations

import json
import re
import time
from datetime import datetime, timedelta, timezone

import httpx
import pytest
import pytest_asyncio

from quickscan.auth import IdentityStore, TokenService
from quickscan.auth.settings import DEFAULT_DEMO_TOKENS
from quickscan.files import FileRegistry, FileService, FileSettings
from quickscan.storage import RemoteBackend, TemporaryBackend

# =============================================================================
# PYTEST CONFIGURATION
# =============================================================================


def pytest_collection_modifyitems(config, items):
    """Tag tests by folder so `-m storage` etc. select them."""
    for item in items:
        norm = str(item.fspath).replace("\\", "/")
        for folder in ("auth", "storage", "files", "api"):
            if f"/tests/unit/{folder}/" in norm:
                item.add_marker(getattr(pytest.mark, folder))
        if "/tests/acceptance/" in norm:
            item.add_marker(pytest.mark.acceptance)


def pytest_configure(config):
    # Registered here too in case pyproject.toml isn't picked up.
    for name, desc in [
        ("auth", "Identity store and token tests"),
        ("storage", "Storage backend tests"),
        ("files", "File registry and orchestration tests"),
        ("api", "HTTP surface tests"),
        ("acceptance", "End-to-end scenarios"),
    ]:
        config.addinivalue_line("markers", f"{name}: {desc}")


# =============================================================================
# CLOCKS
# =============================================================================


class FrozenClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **delta) -> None:
        self.now += timedelta(**delta)


class OffsetClock:
    """Wall clock shifted by ``offset`` seconds, for mtime based sweeps."""

    def __init__(self):
        self.offset = 0.0

    def __call__(self) -> float:
        return time.time() + self.offset

    def advance(self, **delta) -> None:
        self.offset += timedelta(**delta).total_seconds()


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock(datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def disk_clock() -> OffsetClock:
    return OffsetClock()


# =============================================================================
# COMPONENTS
# =============================================================================

TEST_SECRET = "test-secret-key"


@pytest.fixture
def identity(clock) -> IdentityStore:
    tokens = TokenService(TEST_SECRET, clock=clock)
    return IdentityStore(tokens, demo_tokens=DEFAULT_DEMO_TOKENS, clock=clock)


@pytest.fixture
def demo_credential(identity) -> str:
    user = identity.login_with_token("demo-token-12345")
    return identity.issue_token(user).token


@pytest.fixture
def upload_dir(tmp_path):
    return tmp_path / "uploads"


@pytest.fixture
def temp_backend(upload_dir, disk_clock) -> TemporaryBackend:
    return TemporaryBackend(upload_dir, clock=disk_clock)


@pytest.fixture
def registry() -> FileRegistry:
    return FileRegistry()


@pytest.fixture
def file_settings() -> FileSettings:
    return FileSettings()


@pytest.fixture
def file_service(identity, temp_backend, registry, file_settings) -> FileService:
    return FileService(identity, temp_backend, registry, file_settings)


# =============================================================================
# REMOTE BUCKET
# =============================================================================


class FakeBucketAPI:
    """Minimal Supabase Storage lookalike served through httpx.MockTransport."""

    base_url = "https://project.supabase.co"
    object_path = re.compile(r"^/storage/v1/object/(?P<bucket>[^/]+)/(?P<key>.+)$")
    sign_path = re.compile(r"^/storage/v1/object/sign/(?P<bucket>[^/]+)/(?P<key>.+)$")

    def __init__(self):
        self.objects: dict[str, tuple[bytes, str]] = {}
        self.requests: list[httpx.Request] = []
        self.signed_url_format = "/object/sign/{bucket}/{key}?token=signed-token"
        self.fail_with: int | None = None
        self.fail_signing = False
        self.fail_delete: int | None = None
        self.raise_exc: Exception | None = None

    def _not_found(self) -> httpx.Response:
        return httpx.Response(
            400, json={"statusCode": "404", "error": "not_found", "message": "Object not found"}
        )

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.raise_exc is not None:
            raise self.raise_exc
        if self.fail_with is not None:
            return httpx.Response(self.fail_with, json={"error": "boom"})

        path = request.url.path
        if m := self.sign_path.match(path):
            if self.fail_signing:
                return httpx.Response(500, json={"error": "signing unavailable"})
            if m["key"] not in self.objects:
                return self._not_found()
            body = json.loads(request.content)
            url = self.signed_url_format.format(bucket=m["bucket"], key=m["key"])
            return httpx.Response(200, json={"signedURL": f"{url}&exp={body['expiresIn']}"})

        m = self.object_path.match(path)
        if m is None:
            return httpx.Response(404)
        key = m["key"]
        if request.method == "POST":
            self.objects[key] = (request.content, request.headers["content-type"])
            return httpx.Response(200, json={"Key": f"{m['bucket']}/{key}"})
        if request.method == "GET":
            if key not in self.objects:
                return self._not_found()
            return httpx.Response(200, content=self.objects[key][0])
        if request.method == "DELETE":
            if self.fail_delete is not None:
                return httpx.Response(self.fail_delete, json={"error": "delete unavailable"})
            if self.objects.pop(key, None) is None:
                return httpx.Response(404, json={"message": "not found"})
            return httpx.Response(200, json=[{"name": key}])
        return httpx.Response(405)


@pytest.fixture
def bucket() -> FakeBucketAPI:
    return FakeBucketAPI()


@pytest_asyncio.fixture
async def remote_backend(bucket):
    backend = RemoteBackend(
        bucket.base_url + "/",
        "service-role-key",
        bucket="uploads",
        timeout=5.0,
        transport=httpx.MockTransport(bucket),
    )
    yield backend
    await backend.aclose()
