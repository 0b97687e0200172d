from __future__ import annotations

from fastapi import APIRouter, Request

from ..envelope import ApiResponse, ok
from ..schemas import HealthOut

router = APIRouter(tags=["health"])


@router.get("/health", response_model=ApiResponse[HealthOut])
async def health(request: Request):
    settings = request.app.state.settings
    return ok(
        HealthOut(
            service=settings.name,
            version=settings.version,
            storage_type=request.app.state.files.storage.kind,
        ),
        "Service is healthy",
    )
