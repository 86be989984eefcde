"""
textsync.core.models - Core Data Models
=========================================

Pydantic models shared by every layer of TextSync.

Model Hierarchy:
    TextItem          → one approved text, keyed and versioned
    TextArtifact      → the whole keyed collection (unit of remote versioning)
    ArtifactMetadata  → schema version, last update, item count
    RemoteFileHandle  → remote file content + its concurrency token
    SyncOutcome       → NoChange | SyncSuccess | SyncFailure

Data Flow:
    ┌──────────────┐  serialize()   ┌────────────────────────┐
    │ ArtifactStore│ ─────────────→ │ RemoteFileSynchronizer │
    │ (TextItems)  │    body: str   │                        │
    └──────────────┘                └───────────┬────────────┘
                                                │ SyncOutcome
                                                ↓
                                       TextSyncService / HTTP

JSON Shape:
    The artifact file kept in the repository uses camelCase keys:

        {
          "schemaVersion": "1.0.0",
          "lastUpdated": "2026-10-19T06:47:00.123000Z",
          "texts": {
            "greeting": {"key": "greeting", "content": "Hi",
                         "approvedAt": "...", "approvedBy": "alice",
                         "version": 1}
          }
        }

    Models accept both the camelCase aliases and the snake_case field names
    on input. Optional fields that are absent stay absent on output.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from textsync.core.enums import SyncStage, SyncStatus


DEFAULT_SCHEMA_VERSION = "1.0.0"


def _now() -> datetime:
    """Current UTC timestamp. Every timestamp in TextSync is UTC."""
    return datetime.now(timezone.utc)


# =============================================================================
# Text Item
# =============================================================================
# A write always replaces the whole item, so items are frozen: the store
# swaps in a new instance instead of mutating the old one. This also means
# the copies handed out by list_all() can never alias internal state.
# =============================================================================
class TextItem(BaseModel):
    """One approved text, identified by its key.

    Attributes:
        key: Unique identifier of the text.
        content: The text itself. Absent only on records loaded from a
            file that did not carry it.
        approved_at: When the current content was approved. Absent on
            records loaded from a file that did not carry it.
        approved_by: Identity of the approver, if one was given.
        version: 1 on first write, +1 on every subsequent write. Absent on
            records loaded from a file that did not carry it.

    Example:
        >>> item = TextItem(key="greeting", content="Hi", version=1)
        >>> item.model_dump(by_alias=True, exclude_none=True)
        {'key': 'greeting', 'content': 'Hi', 'version': 1}
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    key: str = Field(description="Unique identifier of the text")
    content: Optional[str] = Field(
        default=None,
        description="The approved text content",
    )
    approved_at: Optional[datetime] = Field(
        default=None,
        description="Approval timestamp (UTC)",
    )
    approved_by: Optional[str] = Field(
        default=None,
        description="Identity of the approver",
    )
    version: Optional[int] = Field(
        default=None,
        ge=1,
        description="Write counter, starts at 1",
    )


# =============================================================================
# Text Artifact
# =============================================================================
class TextArtifact(BaseModel):
    """The complete keyed collection, serialized as one JSON document.

    The artifact as a whole is what is version-controlled remotely; single
    items are never synchronized on their own.

    ``schema_version`` is also read from a legacy top-level ``version``
    field so files written by earlier releases still load.

    Records are checked one by one: a record without ``key`` takes its key
    from the mapping, and a ``null`` mapping reads as empty. Fields a record
    does not carry stay absent.
    """

    model_config = ConfigDict(populate_by_name=True)

    schema_version: str = Field(
        default=DEFAULT_SCHEMA_VERSION,
        validation_alias=AliasChoices("schemaVersion", "schema_version", "version"),
        serialization_alias="schemaVersion",
        description="Version of the artifact document format",
    )
    last_updated: datetime = Field(
        default_factory=_now,
        validation_alias=AliasChoices("lastUpdated", "last_updated"),
        serialization_alias="lastUpdated",
        description="Refreshed on every create, update or delete",
    )
    texts: dict[str, TextItem] = Field(
        default_factory=dict,
        description="Mapping of key to TextItem",
    )

    @model_validator(mode="before")
    @classmethod
    def _fill_record_keys(cls, data: Any) -> Any:
        if not isinstance(data, dict) or "texts" not in data:
            return data
        texts = data["texts"]
        if texts is None:
            return {**data, "texts": {}}
        if not isinstance(texts, dict):
            return data
        filled = {}
        for key, record in texts.items():
            if isinstance(record, dict) and "key" not in record:
                record = {"key": key, **record}
            filled[key] = record
        return {**data, "texts": filled}


class ArtifactMetadata(BaseModel):
    """Summary of the artifact, returned alongside list and mutation responses."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    schema_version: str
    last_updated: datetime
    count: int = Field(ge=0)


# =============================================================================
# Remote File Handle
# =============================================================================
class RemoteFileHandle(BaseModel):
    """Currently-known state of the remote artifact file.

    Attributes:
        sha: Opaque concurrency token. A conditional commit must present the
            token the remote currently holds, or it is rejected.
        content: Decoded UTF-8 file content.
    """

    model_config = ConfigDict(frozen=True)

    sha: str = Field(description="Concurrency token of the remote file")
    content: str = Field(description="Raw decoded file content")


# =============================================================================
# Sync Outcomes
# =============================================================================
# Exactly one outcome per sync call. A SyncFailure is returned, not raised:
# it is a business failure (the local mutation still happened).
# =============================================================================
class SyncOutcome(BaseModel):
    """Base class of the three sync outcome variants."""

    model_config = ConfigDict(frozen=True)

    status: SyncStatus

    @property
    def succeeded(self) -> bool:
        """True for NoChange and SyncSuccess, False for SyncFailure."""
        return self.status != SyncStatus.FAILURE


class NoChange(SyncOutcome):
    """Remote content already matched the local body; nothing was created."""

    status: Literal[SyncStatus.NO_CHANGE] = SyncStatus.NO_CHANGE


class SyncSuccess(SyncOutcome):
    """A pull request was opened for the change.

    Attributes:
        reference: Human-followable pull request URL.
        branch: Working branch the pull request was opened from.
    """

    status: Literal[SyncStatus.SUCCESS] = SyncStatus.SUCCESS
    reference: str
    branch: Optional[str] = None


class SyncFailure(SyncOutcome):
    """The sync gave up.

    Attributes:
        reason: Short human-readable reason. Conflicts that survive the
            retry use the literal ``"conflict after retry"``.
        error_code: Machine-readable code of the underlying error.
        stage: Stage of the sync in which the failure happened.
    """

    status: Literal[SyncStatus.FAILURE] = SyncStatus.FAILURE
    reason: str
    error_code: str = "SYNC_FAILED"
    stage: Optional[SyncStage] = None
