"""Health route."""

from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from textsync.api.deps import get_service
from textsync.facade import TextSyncService

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check(service: TextSyncService = Depends(get_service)) -> dict:
    """Liveness check -- always healthy if the server is running."""
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        "githubPRMode": service.github_enabled,
    }
