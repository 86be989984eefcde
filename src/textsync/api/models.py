"""Pydantic request/response models for the TextSync HTTP API."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from textsync.core.enums import SyncStage, SyncStatus
from textsync.core.models import SyncFailure, SyncOutcome, SyncSuccess


def dump(model: BaseModel) -> dict[str, Any]:
    """JSON-ready camelCase dict of ``model`` with absent fields omitted."""
    return model.model_dump(mode="json", by_alias=True, exclude_none=True)


# ── Requests ──────────────────────────────────────────────────────────────


class UpdateTextRequest(BaseModel):
    """Request body for creating or replacing a text."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    content: str = Field(..., min_length=1)
    approved_by: Optional[str] = None


# ── Sync Result ───────────────────────────────────────────────────────────


class GitHubSyncResult(BaseModel):
    """``githubSync`` block of a mutation response."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    success: bool
    status: SyncStatus
    no_changes: Optional[bool] = None
    pr_url: Optional[str] = None
    branch: Optional[str] = None
    error: Optional[str] = None
    error_code: Optional[str] = None
    stage: Optional[SyncStage] = None

    @classmethod
    def from_outcome(cls, outcome: SyncOutcome) -> "GitHubSyncResult":
        if isinstance(outcome, SyncSuccess):
            return cls(
                success=True,
                status=outcome.status,
                pr_url=outcome.reference,
                branch=outcome.branch,
            )
        if isinstance(outcome, SyncFailure):
            return cls(
                success=False,
                status=outcome.status,
                error=outcome.reason,
                error_code=outcome.error_code,
                stage=outcome.stage,
            )
        return cls(success=True, status=outcome.status, no_changes=True)
