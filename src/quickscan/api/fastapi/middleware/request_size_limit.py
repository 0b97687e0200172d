from __future__ import annotations

from starlette.middleware.base import BaseHTTPMiddleware

from ..envelope import error_response


class RequestSizeLimitMiddleware(BaseHTTPMiddleware):
    """Reject bodies whose declared Content-Length exceeds ``max_bytes``."""

    def __init__(self, app, max_bytes: int = 1_000_000):
        super().__init__(app)
        self.max_bytes = max_bytes

    async def dispatch(self, request, call_next):
        length = request.headers.get("content-length")
        try:
            size = int(length) if length is not None else None
        except ValueError:
            size = None
        if size is not None and size > self.max_bytes:
            return error_response(
                413,
                "payload_too_large",
                f"Request body exceeds the {self.max_bytes} byte limit",
            )
        return await call_next(request)
