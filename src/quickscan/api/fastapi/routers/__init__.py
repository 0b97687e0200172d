from fastapi import APIRouter

from . import auth, files, health

api_router = APIRouter(prefix="/api")
api_router.include_router(health.router)
api_router.include_router(auth.router)
api_router.include_router(files.router)

__all__ = ["api_router"]
