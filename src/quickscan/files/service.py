"""Upload/retrieval orchestration.

Every public method authenticates the caller through the identity store
first, then talks to the storage backend and the registry. Errors from either
collaborator are re-raised unchanged apart from the request context attached
through :meth:`QuickScanError.with_context`.
"""

from __future__ import annotations

import logging
import mimetypes
import uuid
from datetime import datetime, timedelta, timezone
from typing import Callable

from quickscan.auth import IdentityStore, User
from quickscan.exceptions import (
    InternalError,
    NotFoundError,
    PayloadTooLargeError,
    QuickScanError,
    UnsupportedError,
    ValidationError,
)
from quickscan.storage import StorageBackend, StorageKind

from .models import CleanupReport, DownloadLink, FileRecord, UploadResult
from .registry import FileRegistry
from .settings import FileSettings

logger = logging.getLogger(__name__)

DOWNLOAD_PATH = "/api/files/{id}/download"


def normalize_content_type(content_type: str | None, filename: str | None) -> str | None:
    """Strip parameters and lowercase; guess from the filename when absent."""
    base = content_type.split(";", 1)[0].strip().lower() if content_type else ""
    if base and base != "application/octet-stream":
        return base
    guessed = mimetypes.guess_type(filename)[0] if filename else None
    return guessed or base or None


class FileService:
    def __init__(
        self,
        identity: IdentityStore,
        storage: StorageBackend,
        registry: FileRegistry,
        settings: FileSettings | None = None,
        *,
        signed_url_ttl: timedelta = timedelta(hours=1),
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self.identity = identity
        self.storage = storage
        self.registry = registry
        self.settings = settings or FileSettings()
        self.signed_url_ttl = signed_url_ttl
        self._clock = clock
        self._allowed = frozenset(t.lower() for t in self.settings.allowed_content_types)

    def _authenticate(self, credential: str | None, operation: str) -> User:
        try:
            return self.identity.resolve(credential)
        except QuickScanError as exc:
            raise exc.with_context(operation=operation)

    def _validate(self, filename: str | None, content_type: str | None, size: int) -> str:
        limit = self.settings.max_upload_bytes
        if size > limit:
            raise PayloadTooLargeError(
                f"File too large: {size} bytes exceeds the {limit} byte limit",
                context={"size": size, "limit": limit},
            )
        if size == 0:
            raise ValidationError("Uploaded file is empty")
        normalized = normalize_content_type(content_type, filename)
        if normalized is None or normalized not in self._allowed:
            raise ValidationError(
                f"Unsupported content type: {normalized or 'unknown'}",
                context={"content_type": normalized},
            )
        return normalized

    async def _discard(self, key: str) -> bool:
        """Remove bytes left by a failed upload; the caller's error wins."""
        try:
            await self.storage.delete(key)
        except QuickScanError:
            logger.exception(
                "Could not remove %s after a failed upload",
                key,
                extra={"operation": "upload"},
            )
            return False
        return True

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def upload(
        self,
        credential: str | None,
        filename: str | None,
        content_type: str | None,
        data: bytes,
    ) -> UploadResult:
        user = self._authenticate(credential, "upload")
        try:
            normalized = self._validate(filename, content_type, len(data))
            key = await self.storage.put(data, normalized, filename=filename)
            try:
                record = self.registry.create(
                    filename=filename or "file",
                    file_size=len(data),
                    content_type=normalized,
                    storage_type=self.storage.kind,
                    backend_key=key,
                    download_url=self.storage.object_url(key),
                )
            except QuickScanError:
                await self._discard(key)
                raise

            signed_url = None
            if self.storage.kind is StorageKind.REMOTE:
                try:
                    signed_url = await self.storage.signed_url(key, self.signed_url_ttl)
                except QuickScanError:
                    if await self._discard(key):
                        self.registry.mark_deleted(record.id)
                    raise
        except QuickScanError as exc:
            raise exc.with_context(operation="upload")

        logger.info(
            "User %s uploaded %s (%d bytes)",
            user.id,
            record.id,
            record.file_size,
            extra={"operation": "upload", "file_id": record.id},
        )
        return UploadResult(record=record, signed_url=signed_url)

    async def list_files(self, credential: str | None) -> list[FileRecord]:
        self._authenticate(credential, "list")
        return self.registry.list()

    async def download(self, credential: str | None, file_id: uuid.UUID) -> tuple[FileRecord, bytes]:
        self._authenticate(credential, "download")
        try:
            record = self.registry.get(file_id)
            try:
                data = await self.storage.get(record.backend_key)
            except NotFoundError as exc:
                logger.error(
                    "Registry/backend desync: bytes missing for %s",
                    file_id,
                    extra={"operation": "download", "file_id": file_id},
                )
                raise InternalError(
                    "File metadata exists but its contents are missing"
                ) from exc
        except QuickScanError as exc:
            raise exc.with_context(operation="download", file_id=str(file_id))
        return record, data

    async def download_link(
        self,
        credential: str | None,
        file_id: uuid.UUID,
        ttl: timedelta | None = None,
    ) -> tuple[FileRecord, DownloadLink]:
        self._authenticate(credential, "download_link")
        ttl = ttl or self.signed_url_ttl
        try:
            record = self.registry.get(file_id)
            try:
                url = await self.storage.signed_url(record.backend_key, ttl)
            except UnsupportedError:
                return record, DownloadLink(url=DOWNLOAD_PATH.format(id=file_id))
        except QuickScanError as exc:
            raise exc.with_context(operation="download_link", file_id=str(file_id))
        return record, DownloadLink(url=url, expires_at=self._clock() + ttl)

    async def delete(self, credential: str | None, file_id: uuid.UUID) -> FileRecord:
        user = self._authenticate(credential, "delete")
        try:
            record = self.registry.get(file_id)
            await self.storage.delete(record.backend_key)
            record = self.registry.mark_deleted(file_id)
        except QuickScanError as exc:
            raise exc.with_context(operation="delete", file_id=str(file_id))
        logger.info(
            "User %s deleted %s",
            user.id,
            file_id,
            extra={"operation": "delete", "file_id": file_id},
        )
        return record

    async def cleanup(
        self,
        credential: str | None = None,
        max_age: timedelta | None = None,
    ) -> CleanupReport:
        """Sweep expired bytes and retract the records that pointed at them.

        ``credential`` is optional so the background sweeper can call this
        without a user; when given it must resolve.
        """
        if credential is not None:
            self._authenticate(credential, "cleanup")
        max_age = max_age or timedelta(hours=self.settings.retention_hours)

        try:
            swept = await self.storage.sweep_expired(max_age)
        except QuickScanError as exc:
            raise exc.with_context(operation="cleanup")

        removed = 0
        for key in swept:
            record = self.registry.find_by_backend_key(key)
            if record is None:
                continue
            try:
                self.registry.mark_deleted(record.id)
                removed += 1
            except NotFoundError:
                # Deleted concurrently.
                continue

        reconciled = 0
        live = {r.backend_key: r for r in self.registry.list()}
        for key in await self.storage.missing(live.keys()):
            try:
                self.registry.mark_deleted(live[key].id)
                reconciled += 1
            except NotFoundError:
                continue

        if swept or reconciled:
            logger.info(
                "Cleanup swept %d object(s), retracted %d record(s), reconciled %d",
                len(swept),
                removed,
                reconciled,
                extra={"operation": "cleanup"},
            )
        return CleanupReport(removed=removed, reconciled=reconciled)
