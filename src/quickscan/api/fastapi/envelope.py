"""Uniform response envelope for every ``/api`` route."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Generic, TypeVar

from fastapi.encoders import jsonable_encoder
from pydantic import BaseModel, Field
from starlette.responses import JSONResponse

T = TypeVar("T")


def _now() -> datetime:
    return datetime.now(timezone.utc)


class ErrorInfo(BaseModel):
    type: str
    message: str
    status: int


class ApiResponse(BaseModel, Generic[T]):
    success: bool = True
    data: T | None = None
    message: str | None = None
    error: ErrorInfo | None = None
    timestamp: datetime = Field(default_factory=_now)


def ok(data: Any = None, message: str | None = None) -> ApiResponse[Any]:
    return ApiResponse(success=True, data=data, message=message)


def error_response(
    status_code: int,
    error_type: str,
    message: str,
    *,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    body = ApiResponse[None](
        success=False,
        message=message,
        error=ErrorInfo(type=error_type, message=message, status=status_code),
    )
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(body),
        headers=headers,
    )
