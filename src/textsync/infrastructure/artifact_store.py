"""
textsync.infrastructure.artifact_store - Artifact Store
=========================================================

Keyed, versioned collection of approved texts that serializes to and from
one JSON document, the artifact mirrored to the remote repository.

Architecture Context:
    The store is owned by TextSyncService and injected into it, never
    reached through a module-level singleton, so a persistent-backed store
    can replace the in-memory one without touching call sites.

    ┌────────────────┐  upsert/delete  ┌───────────────────┐  serialize()
    │ TextSyncService│ ──────────────→ │   ArtifactStore   │ ────────────→ sync
    │  (HTTP layer)  │ ←── TextItem ── │  TextArtifact     │
    └────────────────┘                 └───────────────────┘

Mutation Rules:
    - upsert(): version = previous version + 1, or 1 for a new key. The
      whole item is replaced; approved_at is set to now.
    - delete(): removes the key; no tombstone.
    - Both refresh ``last_updated``, delete only when something was removed.

Concurrency:
    Mutations are synchronous and unlocked. Callers that accept concurrent
    requests must serialize them themselves.

Storage Implementations:
    - InMemoryArtifactStore: process memory, lost on exit

Usage:
    >>> store = InMemoryArtifactStore()
    >>> store.upsert("greeting", "Hi", "alice").version
    1
    >>> body = store.serialize()
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Optional

import structlog
from pydantic import ValidationError

from textsync.core.exceptions import ArtifactError
from textsync.core.models import ArtifactMetadata, TextArtifact, TextItem


# =============================================================================
# Logger
# =============================================================================
logger = structlog.get_logger()


# =============================================================================
# Abstract Base Class
# =============================================================================
class ArtifactStore(ABC):
    """Abstract interface for the text artifact store.

    Methods:
        get(key): One item, or None.
        upsert(key, content, approved_by): Create or replace an item.
        delete(key): Remove an item.
        list_all(): Independent copy of the key → item mapping.
        metadata(): Schema version, last update and item count.
        serialize(): Canonical pretty-printed JSON of the artifact.
        deserialize(text): Replace the artifact from JSON, fail-open.
    """

    @abstractmethod
    def get(self, key: str) -> Optional[TextItem]:
        """Return the item stored under ``key``, or None."""
        ...

    @abstractmethod
    def upsert(
        self,
        key: str,
        content: str,
        approved_by: Optional[str] = None,
    ) -> TextItem:
        """Create or replace the item under ``key`` and return the new item."""
        ...

    @abstractmethod
    def delete(self, key: str) -> bool:
        """Remove ``key``. Returns True if it existed, False otherwise."""
        ...

    @abstractmethod
    def list_all(self) -> dict[str, TextItem]:
        """Return a mapping of every item, independent of internal storage."""
        ...

    @abstractmethod
    def metadata(self) -> ArtifactMetadata:
        """Return the artifact summary."""
        ...

    @abstractmethod
    def serialize(self) -> str:
        """Return the artifact as canonical, pretty-printed JSON."""
        ...

    @abstractmethod
    def deserialize(self, text: str) -> None:
        """Replace the artifact from JSON, resetting to empty when malformed."""
        ...

    @property
    def count(self) -> int:
        """Number of stored items."""
        return self.metadata().count


# =============================================================================
# In-Memory Implementation
# =============================================================================
class InMemoryArtifactStore(ArtifactStore):
    """Artifact store kept in process memory.

    Attributes:
        _artifact: The current TextArtifact. Replaced wholesale by
            deserialize(); its ``texts`` dict is mutated by upsert/delete.

    Example:
        >>> store = InMemoryArtifactStore()
        >>> store.upsert("greeting", "Hi", "alice")
        >>> store.upsert("greeting", "Hello", "bob").version
        2
    """

    def __init__(self, artifact: Optional[TextArtifact] = None) -> None:
        """Initialize the store, empty unless an artifact is given."""
        self._artifact: TextArtifact = artifact or TextArtifact()
        self._logger = logger.bind(component="in_memory_artifact_store")

    # =========================================================================
    # Reads
    # =========================================================================

    def get(self, key: str) -> Optional[TextItem]:
        return self._artifact.texts.get(key)

    def list_all(self) -> dict[str, TextItem]:
        # Items are frozen, so a shallow copy of the mapping is independent.
        return dict(self._artifact.texts)

    def metadata(self) -> ArtifactMetadata:
        return ArtifactMetadata(
            schema_version=self._artifact.schema_version,
            last_updated=self._artifact.last_updated,
            count=len(self._artifact.texts),
        )

    # =========================================================================
    # Mutations
    # =========================================================================

    def upsert(
        self,
        key: str,
        content: str,
        approved_by: Optional[str] = None,
    ) -> TextItem:
        """Create or replace a text item.

        Args:
            key: Item key. Must not be empty.
            content: New content.
            approved_by: Approver identity; None leaves it absent.

        Returns:
            The newly stored TextItem.

        Raises:
            ArtifactError: If ``key`` is empty.
        """
        if not key:
            raise ArtifactError(
                message="Text key must not be empty",
                error_code="EMPTY_KEY",
            )

        existing = self._artifact.texts.get(key)
        # A record loaded without a version counts as version 0.
        version = (existing.version or 0) + 1 if existing is not None else 1

        now = datetime.now(timezone.utc)
        item = TextItem(
            key=key,
            content=content,
            approved_at=now,
            approved_by=approved_by,
            version=version,
        )
        self._artifact.texts[key] = item
        self._artifact.last_updated = now

        self._logger.debug(
            "text_upserted",
            key=key,
            version=version,
            approved_by=approved_by,
        )
        return item

    def delete(self, key: str) -> bool:
        if key not in self._artifact.texts:
            return False

        del self._artifact.texts[key]
        self._artifact.last_updated = datetime.now(timezone.utc)
        self._logger.debug("text_deleted", key=key)
        return True

    # =========================================================================
    # Serialization
    # =========================================================================

    def serialize(self) -> str:
        """Render the artifact as pretty-printed JSON for readable diffs.

        Keys are camelCase and absent optional fields are omitted, so
        serialize → deserialize → serialize yields the same text.
        """
        return self._artifact.model_dump_json(
            by_alias=True,
            exclude_none=True,
            indent=2,
        )

    def deserialize(self, text: str) -> None:
        """Replace the artifact with the one encoded in ``text``.

        Best effort: malformed JSON, a non-object document or a record of
        the wrong shape resets the store to an empty artifact instead of
        raising. Missing item fields (content, version, approvedAt,
        approvedBy) stay absent and a missing ``key`` is taken from the
        mapping, so one sparse record never drops its neighbours. Top-level
        fields fall back to their defaults.

        Args:
            text: JSON document, typically the remote artifact file.
        """
        try:
            self._artifact = TextArtifact.model_validate_json(text)
        except ValidationError as exc:
            self._logger.warning(
                "artifact_deserialize_failed",
                error_count=exc.error_count(),
                detail=str(exc.errors()[0]["msg"]) if exc.errors() else None,
            )
            self._artifact = TextArtifact()
            return

        self._logger.info(
            "artifact_loaded",
            schema_version=self._artifact.schema_version,
            count=len(self._artifact.texts),
        )
