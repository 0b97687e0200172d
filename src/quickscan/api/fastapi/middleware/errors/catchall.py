import logging

from starlette.middleware.base import BaseHTTPMiddleware

from ...envelope import error_response

logger = logging.getLogger(__name__)


class CatchAllExceptionMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request, call_next):
        try:
            return await call_next(request)
        except Exception as exc:
            logger.error(
                f"{type(exc).__name__} on {request.url.path} (500): {exc}",
                exc_info=True,
                extra={"http_method": request.method, "path": request.url.path, "status_code": 500},
            )
            return error_response(500, "internal_error", "Internal server error")
