"""Text management routes -- list, get, upsert, delete."""

from __future__ import annotations

from typing import Any

import structlog
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from textsync.api.deps import get_service
from textsync.api.errors import error_response
from textsync.api.models import GitHubSyncResult, UpdateTextRequest, dump
from textsync.facade import MutationResult, TextSyncService

logger = structlog.get_logger()

router = APIRouter(prefix="/api/texts", tags=["texts"])


def _mutation_response(result: MutationResult, data: dict[str, Any]) -> JSONResponse:
    """Envelope of a mutation; 207 when the store changed but the sync failed."""
    data["artifact"] = dump(result.artifact)
    content: dict[str, Any] = {"success": True, "data": data}
    if result.sync is not None:
        content["githubSync"] = dump(GitHubSyncResult.from_outcome(result.sync))
    return JSONResponse(status_code=207 if result.partial else 200, content=content)


@router.get("")
async def list_texts(service: TextSyncService = Depends(get_service)) -> dict:
    """All texts plus artifact metadata."""
    texts = {key: dump(item) for key, item in service.list_texts().items()}
    return {
        "success": True,
        "data": {**dump(service.metadata()), "texts": texts},
    }


@router.get("/{key}")
async def get_text(key: str, service: TextSyncService = Depends(get_service)):
    item = service.get_text(key)
    if item is None:
        return error_response(404, "Text not found")
    return {"success": True, "data": dump(item)}


@router.put("/{key}")
async def update_text(
    key: str,
    body: UpdateTextRequest,
    service: TextSyncService = Depends(get_service),
) -> JSONResponse:
    """Create or replace a text, then mirror the artifact in PR mode."""
    result = await service.update_text(key, body.content, body.approved_by)
    if result.partial:
        logger.warning("text_update_sync_failed", key=key)
    return _mutation_response(result, {"text": dump(result.item)})


@router.delete("/{key}")
async def delete_text(key: str, service: TextSyncService = Depends(get_service)):
    result = await service.delete_text(key)
    if result is None:
        return error_response(404, "Text not found")
    return _mutation_response(result, {"deleted": True})
