"""Storage backend interface.

Every backend maps an opaque key to a blob of bytes. Keys are produced by the
backend itself on ``put`` and are never derived from caller input alone, so a
key returned by one backend is meaningless to the other.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from datetime import timedelta
from typing import Iterable

from .settings import StorageKind

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]")


def sanitize_filename(filename: str | None) -> str:
    """Replace every character outside ``[A-Za-z0-9._-]`` with ``_``.

    >>> sanitize_filename("../../../etc/passwd")
    '.._.._.._etc_passwd'
    >>> sanitize_filename("")
    'file'
    """
    cleaned = _UNSAFE_CHARS.sub("_", filename or "")
    return cleaned or "file"


class StorageBackend(ABC):
    kind: StorageKind

    @abstractmethod
    async def put(self, data: bytes, content_type: str, *, filename: str | None = None) -> str:
        """Store ``data`` and return the key it can be fetched under.

        Raises:
            StorageError: Write failed; nothing is left behind.
        """

    @abstractmethod
    async def get(self, key: str) -> bytes:
        """Raises NotFoundError for unknown or malformed keys."""

    @abstractmethod
    async def signed_url(self, key: str, ttl: timedelta) -> str:
        """Time-limited download URL. Raises UnsupportedError if not offered."""

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove ``key``. Deleting an absent key is not an error."""

    @abstractmethod
    async def sweep_expired(self, max_age: timedelta) -> list[str]:
        """Remove objects older than ``max_age`` and return their keys."""

    def object_url(self, key: str) -> str | None:
        """Stable reference recorded alongside file metadata, if any."""
        return None

    async def missing(self, keys: Iterable[str]) -> list[str]:
        """Subset of ``keys`` whose bytes are gone."""
        return []

    async def aclose(self) -> None:
        return None


__all__ = ["StorageBackend", "sanitize_filename"]
