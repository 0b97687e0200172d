from __future__ import annotations

import asyncio
import contextlib
import logging
import os
import re
import time
import uuid
from datetime import timedelta
from pathlib import Path
from typing import Callable, Iterable

from quickscan.exceptions import NotFoundError, StorageError, UnsupportedError

from ..base import StorageBackend, sanitize_filename
from ..settings import StorageKind

logger = logging.getLogger(__name__)

_VALID_KEY = re.compile(r"^[A-Za-z0-9._-]+$")
_PART_SUFFIX = ".part"


class TemporaryBackend(StorageBackend):
    """Files in a local directory, reclaimed after the retention window.

    Layout: ``<base_path>/<uuid hex>_<sanitized filename>``. Writes go to a
    hidden ``.<key>.part`` file first and are renamed into place, so readers
    never observe a partial object. Age is taken from the file's mtime.
    """

    kind = StorageKind.TEMPORARY

    def __init__(self, base_path: str | Path, *, clock: Callable[[], float] = time.time):
        self.base_path = Path(base_path)
        self._clock = clock
        self.base_path.mkdir(parents=True, exist_ok=True)

    def _path_for(self, key: str) -> Path:
        if not _VALID_KEY.match(key) or key.startswith("."):
            raise NotFoundError(f"File not found: {key}")
        return self.base_path / key

    def _part_path(self, key: str) -> Path:
        return self.base_path / f".{key}{_PART_SUFFIX}"

    # ------------------------------------------------------------------
    # Blocking helpers, run through asyncio.to_thread
    # ------------------------------------------------------------------

    def _write(self, key: str, data: bytes) -> None:
        part = self._part_path(key)
        try:
            with open(part, "wb") as fh:
                fh.write(data)
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(part, self.base_path / key)
        except OSError as exc:
            with contextlib.suppress(OSError):
                part.unlink()
            raise StorageError(f"Failed to write file: {exc}", context={"key": key}) from exc

    def _read(self, path: Path) -> bytes:
        try:
            return path.read_bytes()
        except FileNotFoundError as exc:
            raise NotFoundError(f"File not found: {path.name}") from exc
        except OSError as exc:
            raise StorageError(f"Failed to read file: {exc}", context={"key": path.name}) from exc

    def _remove(self, path: Path) -> None:
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            raise StorageError(f"Failed to delete file: {exc}", context={"key": path.name}) from exc

    def _sweep(self, max_age: timedelta) -> list[str]:
        cutoff = self._clock() - max_age.total_seconds()
        removed: list[str] = []
        try:
            entries = list(os.scandir(self.base_path))
        except FileNotFoundError:
            return removed

        for entry in entries:
            if not entry.is_file(follow_symlinks=False):
                continue
            try:
                mtime = entry.stat(follow_symlinks=False).st_mtime
            except FileNotFoundError:
                continue
            if mtime >= cutoff:
                continue
            try:
                os.unlink(entry.path)
            except FileNotFoundError:
                continue
            except OSError as exc:
                logger.warning("Could not remove expired file %s: %s", entry.name, exc)
                continue
            # Abandoned part files are cleaned up but never reported as keys.
            if entry.name.startswith(".") and entry.name.endswith(_PART_SUFFIX):
                continue
            removed.append(entry.name)
        return removed

    # ------------------------------------------------------------------
    # StorageBackend
    # ------------------------------------------------------------------

    async def put(self, data: bytes, content_type: str, *, filename: str | None = None) -> str:
        key = f"{uuid.uuid4().hex}_{sanitize_filename(filename)}"
        await asyncio.to_thread(self._write, key, data)
        logger.debug("Stored %d bytes under %s", len(data), key)
        return key

    async def get(self, key: str) -> bytes:
        path = self._path_for(key)
        return await asyncio.to_thread(self._read, path)

    async def signed_url(self, key: str, ttl: timedelta) -> str:
        raise UnsupportedError("Signed URLs are not available for temporary storage")

    async def delete(self, key: str) -> None:
        try:
            path = self._path_for(key)
        except NotFoundError:
            return
        await asyncio.to_thread(self._remove, path)

    async def sweep_expired(self, max_age: timedelta) -> list[str]:
        removed = await asyncio.to_thread(self._sweep, max_age)
        if removed:
            logger.info("Swept %d expired file(s) from %s", len(removed), self.base_path)
        return removed

    async def missing(self, keys: Iterable[str]) -> list[str]:
        def _check(candidates: list[str]) -> list[str]:
            gone = []
            for key in candidates:
                try:
                    exists = self._path_for(key).is_file()
                except NotFoundError:
                    exists = False
                if not exists:
                    gone.append(key)
            return gone

        return await asyncio.to_thread(_check, list(keys))
