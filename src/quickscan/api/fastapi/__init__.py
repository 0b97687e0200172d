from __future__ import annotations

import asyncio
import contextlib
import logging
from contextlib import asynccontextmanager
from datetime import timedelta

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from quickscan.app import get_env
from quickscan.app.settings import AppSettings, get_app_settings
from quickscan.auth import AuthSettings, IdentityStore, get_auth_settings
from quickscan.files import FileRegistry, FileService, FileSettings, get_file_settings
from quickscan.storage import (
    StorageBackend,
    StorageSettings,
    build_storage_backend,
    get_storage_settings,
)

from .middleware.errors.catchall import CatchAllExceptionMiddleware
from .middleware.errors.handlers import register_error_handlers
from .middleware.request_size_limit import RequestSizeLimitMiddleware
from .routers import api_router

logger = logging.getLogger(__name__)

# Multipart framing on top of the raw file bytes.
MULTIPART_OVERHEAD_BYTES = 1024 * 1024


async def run_sweeper(files: FileService, interval: float) -> None:
    """Run ``files.cleanup()`` every ``interval`` seconds until cancelled."""
    while True:
        await asyncio.sleep(interval)
        try:
            report = await files.cleanup()
        except Exception:
            logger.exception("Periodic cleanup failed", extra={"operation": "cleanup"})
            continue
        logger.debug("Periodic cleanup removed %d, reconciled %d", report.removed, report.reconciled)


@asynccontextmanager
async def _lifespan(app: FastAPI):
    files: FileService = app.state.files
    interval = files.settings.sweep_interval_seconds
    task: asyncio.Task | None = None
    if interval:
        task = asyncio.create_task(run_sweeper(files, interval), name="quickscan-sweeper")
        logger.info("Background cleanup every %ss", interval)
    try:
        yield
    finally:
        if task is not None:
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
        await files.storage.aclose()


def create_app(
    *,
    app_settings: AppSettings | None = None,
    auth_settings: AuthSettings | None = None,
    storage_settings: StorageSettings | None = None,
    file_settings: FileSettings | None = None,
    identity: IdentityStore | None = None,
    storage: StorageBackend | None = None,
    registry: FileRegistry | None = None,
) -> FastAPI:
    """Build the QuickScan API.

    Components default to instances built from settings; pass them in to
    share state with tests or to swap the storage backend.
    """
    app_settings = app_settings or get_app_settings()
    auth_settings = auth_settings or get_auth_settings()
    storage_settings = storage_settings or get_storage_settings()
    file_settings = file_settings or get_file_settings()

    # Stores define __len__, so an empty one is falsy.
    if identity is None:
        identity = IdentityStore.from_settings(auth_settings)
    if storage is None:
        storage = build_storage_backend(storage_settings)
    if registry is None:
        registry = FileRegistry()
    files = FileService(
        identity,
        storage,
        registry,
        file_settings,
        signed_url_ttl=timedelta(seconds=storage_settings.signed_url_ttl_seconds),
    )

    app = FastAPI(
        title=app_settings.name,
        version=app_settings.version,
        lifespan=_lifespan,
    )
    app.state.settings = app_settings
    app.state.identity = identity
    app.state.files = files

    app.add_middleware(
        RequestSizeLimitMiddleware,
        max_bytes=file_settings.max_upload_bytes + MULTIPART_OVERHEAD_BYTES,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    # Added last so it wraps everything else.
    app.add_middleware(CatchAllExceptionMiddleware)
    register_error_handlers(app)

    app.include_router(api_router)

    logger.info(
        f"{app_settings.version} version of {app_settings.name} initialized "
        f"[env: {get_env()}, storage: {storage.kind}]"
    )
    return app


__all__ = ["create_app", "run_sweeper"]
