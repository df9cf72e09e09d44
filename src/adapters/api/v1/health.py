"""Health check endpoint reporting the state of the account store."""

from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter
from pydantic import BaseModel

from src.infrastructure.dependency_injection.auth_dependencies import AppContextDep

router = APIRouter()


class HealthResponse(BaseModel):
    status: str
    env: str
    version: str
    services: Dict[str, Any]
    timestamp: datetime


@router.get("", response_model=HealthResponse)
async def health_check(context: AppContextDep) -> HealthResponse:
    """Reports ``ok`` when the account store answers, ``degraded`` otherwise."""
    store_healthy = await context.healthy()
    return HealthResponse(
        status="ok" if store_healthy else "degraded",
        env=context.settings.APP_ENV,
        version=context.settings.VERSION,
        services={
            "account_store": {
                "status": "healthy" if store_healthy else "unhealthy",
                "backend": "memory" if context.settings.uses_in_memory_store else "sql",
            },
            "email": {"backend": context.settings.EMAIL_BACKEND},
        },
        timestamp=datetime.now(timezone.utc),
    )
