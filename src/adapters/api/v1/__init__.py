"""API v1 router.

Mounted under ``API_PREFIX`` by the application factory:

- ``/health``: account store and email backend status
- ``/auth``: the account lifecycle endpoints
"""

from fastapi import APIRouter

from .auth import router as auth_router
from .health import router as health_router

api_router = APIRouter()

api_router.include_router(health_router, prefix="/health", tags=["health"])
api_router.include_router(auth_router)

__all__ = ["api_router"]
