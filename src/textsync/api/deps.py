"""FastAPI dependency injection functions for shared state."""

from __future__ import annotations

from fastapi import Request

from textsync.facade import TextSyncService


def get_service(request: Request) -> TextSyncService:
    """Get the shared TextSyncService from app state."""
    return request.app.state.service
