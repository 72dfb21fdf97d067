"""Process liveness endpoint.

GET /health answers without touching any dependency; the dependency-aware
check lives at GET /api/v1/suggestions/health.
"""

from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter

from app.core.constants import SERVICE_DISPLAY_NAME

router = APIRouter()


@router.get("/health")
async def health_check() -> dict[str, Any]:
    return {
        "status": "healthy",
        "service": SERVICE_DISPLAY_NAME,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
