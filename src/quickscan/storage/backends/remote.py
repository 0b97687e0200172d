from __future__ import annotations

import logging
import re
import uuid
from datetime import timedelta

import httpx

from quickscan.exceptions import NotFoundError, StorageError

from ..base import StorageBackend, sanitize_filename
from ..settings import StorageKind

logger = logging.getLogger(__name__)

_VALID_KEY = re.compile(r"^[0-9a-f]{32}/[A-Za-z0-9._-]+$")
_API_PREFIX = "/storage/v1"


class RemoteBackend(StorageBackend):
    """Objects in a bucket behind a Supabase Storage compatible REST API.

    Keys are ``<uuid hex>/<sanitized filename>``. All calls share one
    ``httpx.AsyncClient`` with a bounded timeout; transport failures and
    timeouts surface as ``StorageError`` with status 502.
    """

    kind = StorageKind.REMOTE

    def __init__(
        self,
        url: str,
        api_key: str,
        *,
        bucket: str = "uploads",
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.url = url.rstrip("/")
        self.bucket = bucket
        self._client = httpx.AsyncClient(
            base_url=f"{self.url}{_API_PREFIX}",
            timeout=httpx.Timeout(timeout),
            headers={"Authorization": f"Bearer {api_key}", "apikey": api_key},
            transport=transport,
        )

    def _object_path(self, key: str) -> str:
        return f"/object/{self.bucket}/{key}"

    @staticmethod
    def _check_key(key: str) -> None:
        if not _VALID_KEY.match(key):
            raise NotFoundError(f"File not found: {key}")

    async def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        try:
            return await self._client.request(method, path, **kwargs)
        except httpx.TimeoutException as exc:
            raise StorageError(
                "Remote storage timed out", status_code=502, context={"path": path}
            ) from exc
        except httpx.HTTPError as exc:
            raise StorageError(
                f"Remote storage unreachable: {exc}", status_code=502, context={"path": path}
            ) from exc

    @staticmethod
    def _is_not_found(resp: httpx.Response) -> bool:
        # The bucket API reports missing objects as 404 or as 400 with a "not found" body.
        if resp.status_code == 404:
            return True
        return resp.status_code == 400 and "not found" in resp.text.lower()

    @staticmethod
    def _failure(resp: httpx.Response, action: str) -> StorageError:
        return StorageError(
            f"Remote storage {action} failed with HTTP {resp.status_code}",
            status_code=502,
            context={"upstream_status": resp.status_code},
        )

    async def put(self, data: bytes, content_type: str, *, filename: str | None = None) -> str:
        key = f"{uuid.uuid4().hex}/{sanitize_filename(filename)}"
        resp = await self._request(
            "POST",
            self._object_path(key),
            content=data,
            headers={"Content-Type": content_type, "x-upsert": "false"},
        )
        if resp.is_error:
            raise self._failure(resp, "upload")
        logger.debug("Uploaded %d bytes to %s/%s", len(data), self.bucket, key)
        return key

    async def get(self, key: str) -> bytes:
        self._check_key(key)
        resp = await self._request("GET", self._object_path(key))
        if self._is_not_found(resp):
            raise NotFoundError(f"File not found: {key}")
        if resp.is_error:
            raise self._failure(resp, "download")
        return resp.content

    async def signed_url(self, key: str, ttl: timedelta) -> str:
        self._check_key(key)
        expires_in = max(1, int(ttl.total_seconds()))
        resp = await self._request(
            "POST", f"/object/sign/{self.bucket}/{key}", json={"expiresIn": expires_in}
        )
        if self._is_not_found(resp):
            raise NotFoundError(f"File not found: {key}")
        if resp.is_error:
            raise self._failure(resp, "signing")

        try:
            body = resp.json()
        except ValueError:
            body = {}
        signed = body.get("signedURL") or body.get("signedUrl") if isinstance(body, dict) else None
        if not signed:
            raise StorageError("Remote storage returned no signed URL", status_code=502)

        if signed.startswith("http"):
            return signed
        if signed.startswith(_API_PREFIX):
            return f"{self.url}{signed}"
        return f"{self.url}{_API_PREFIX}/{signed.lstrip('/')}"

    async def delete(self, key: str) -> None:
        if not _VALID_KEY.match(key):
            return
        resp = await self._request("DELETE", self._object_path(key))
        if resp.is_error and not self._is_not_found(resp):
            raise self._failure(resp, "delete")

    async def sweep_expired(self, max_age: timedelta) -> list[str]:
        # Bucket lifecycle is managed on the remote side.
        return []

    def object_url(self, key: str) -> str | None:
        return f"{self.url}{_API_PREFIX}/object/public/{self.bucket}/{key}"

    async def aclose(self) -> None:
        await self._client.aclose()
