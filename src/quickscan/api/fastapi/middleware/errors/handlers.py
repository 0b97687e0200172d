from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from quickscan.exceptions import QuickScanError

from ...envelope import error_response

logger = logging.getLogger(__name__)


def _describe_validation(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return "; ".join(parts) or "Invalid request"


def register_error_handlers(app: FastAPI) -> None:
    """Render every error in the ``ApiResponse`` envelope."""

    @app.exception_handler(QuickScanError)
    async def handle_quickscan_error(request: Request, exc: QuickScanError):
        extra = {
            "http_method": request.method,
            "path": request.url.path,
            "status_code": exc.status_code,
            "error_type": exc.error_type,
            "operation": exc.context.get("operation"),
            "file_id": exc.context.get("file_id"),
        }
        if exc.status_code >= 500:
            logger.error("%s: %s", type(exc).__name__, exc, exc_info=exc, extra=extra)
        else:
            logger.info("%s: %s", type(exc).__name__, exc, extra=extra)

        headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
        return error_response(exc.status_code, exc.error_type, exc.message, headers=headers)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        return error_response(400, "validation_error", _describe_validation(exc))

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        message = exc.detail if isinstance(exc.detail, str) else "HTTP error"
        return error_response(
            exc.status_code,
            "http_error",
            message,
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception):
        logger.error(
            "Unhandled %s on %s",
            type(exc).__name__,
            request.url.path,
            exc_info=exc,
            extra={"http_method": request.method, "path": request.url.path, "status_code": 500},
        )
        return error_response(500, "internal_error", "Internal server error")
