"""Storage backends for uploaded bytes.

``build_storage_backend`` picks the variant once at startup::

    storage = build_storage_backend(get_storage_settings())
    key = await storage.put(b"hello", "text/plain", filename="a.txt")
"""

from __future__ import annotations

import logging

from .backends import RemoteBackend, TemporaryBackend
from .base import StorageBackend, sanitize_filename
from .settings import StorageKind, StorageSettings, get_storage_settings

logger = logging.getLogger(__name__)


def build_storage_backend(settings: StorageSettings | None = None) -> StorageBackend:
    settings = settings or get_storage_settings()
    if settings.type is StorageKind.REMOTE:
        if not settings.remote_url or settings.remote_key is None:
            raise ValueError("Remote storage needs STORAGE_REMOTE_URL and STORAGE_REMOTE_KEY")
        logger.info("Using remote storage bucket %r at %s", settings.remote_bucket, settings.remote_url)
        return RemoteBackend(
            settings.remote_url,
            settings.remote_key.get_secret_value(),
            bucket=settings.remote_bucket,
            timeout=settings.remote_timeout_seconds,
        )
    logger.info("Using temporary storage at %s", settings.temp_dir)
    return TemporaryBackend(settings.temp_dir)


__all__ = [
    "RemoteBackend",
    "StorageBackend",
    "StorageKind",
    "StorageSettings",
    "TemporaryBackend",
    "build_storage_backend",
    "get_storage_settings",
    "sanitize_filename",
]
