"""
textsync.facade - TextSync Service Facade
===========================================

The single entry point wiring the artifact store and the remote
synchronizer together. The HTTP layer only ever talks to this class.

Architecture Context:
    ┌──────────────────────────────────────────────┐
    │            TextSyncService (Facade)          │
    │                                              │
    │   ┌────────────────┐   ┌──────────────────┐  │
    │   │ ArtifactStore  │   │ RemoteFile       │  │
    │   │ (in memory)    │──→│ Synchronizer     │  │
    │   └────────────────┘   └────────┬─────────┘  │
    │                                 │            │
    │                       ┌─────────▼─────────┐  │
    │                       │ RemoteRepository  │  │
    │                       └───────────────────┘  │
    └──────────────────────────────────────────────┘

Mutation Flow:
    1. Mutate the store (always succeeds for a valid key).
    2. In PR mode, sync the whole artifact, bounded by a timeout.
    3. Return a MutationResult. A failed sync marks the result ``partial``:
       the local change stands, only the mirroring failed.

Usage:
    >>> async with TextSyncService(config) as service:
    ...     result = await service.update_text("greeting", "Hi", "alice")
    ...     result.item.version
    1
"""

from __future__ import annotations

import asyncio
from typing import Any, Optional

import structlog
from pydantic import BaseModel

from textsync.core.config import TextSyncConfig
from textsync.core.models import (
    ArtifactMetadata,
    SyncFailure,
    SyncOutcome,
    TextItem,
)
from textsync.infrastructure.artifact_store import ArtifactStore, InMemoryArtifactStore
from textsync.sync.synchronizer import RemoteFileSynchronizer


# =============================================================================
# Logger
# =============================================================================
logger = structlog.get_logger()

SYNC_TIMED_OUT = "sync timed out"


class MutationResult(BaseModel):
    """Result of an update or delete.

    Attributes:
        item: The stored item after an update. None for deletes.
        deleted: True when a delete removed the key.
        artifact: Artifact metadata after the mutation.
        sync: Sync outcome, or None when PR mode is off.
    """

    item: Optional[TextItem] = None
    deleted: bool = False
    artifact: ArtifactMetadata
    sync: Optional[SyncOutcome] = None

    @property
    def partial(self) -> bool:
        """True when the local mutation happened but the sync failed."""
        return self.sync is not None and not self.sync.succeeded


class TextSyncService:
    """Facade over the artifact store and the optional GitHub mirror.

    Attributes:
        _config: Service configuration.
        _store: Artifact store. Injected or a fresh InMemoryArtifactStore.
        _synchronizer: Remote synchronizer, or None when PR mode is off.
        _initialized: Whether initialize() has run.

    Example:
        >>> service = TextSyncService(TextSyncConfig())
        >>> await service.initialize()
        >>> result = await service.update_text("greeting", "Hi")
        >>> result.sync is None   # PR mode off
        True
        >>> await service.shutdown()
    """

    def __init__(
        self,
        config: Optional[TextSyncConfig] = None,
        *,
        store: Optional[ArtifactStore] = None,
        synchronizer: Optional[RemoteFileSynchronizer] = None,
    ) -> None:
        """Initialize the service.

        Args:
            config: Service configuration. Defaults to TextSyncConfig(),
                which reads TEXTSYNC_* environment variables.
            store: Optional custom artifact store.
            synchronizer: Optional prebuilt synchronizer. When omitted and
                PR mode is configured, one is built from ``config.github``.

        Raises:
            ConfigurationError: If PR mode is configured with invalid
                coordinates.
        """
        self._config = config or TextSyncConfig()
        self._store = store or InMemoryArtifactStore()

        if synchronizer is None and self._config.github.enabled:
            synchronizer = RemoteFileSynchronizer.from_config(self._config.github)
        self._synchronizer = synchronizer

        self._initialized = False
        self._logger = logger.bind(component="text_sync_service")

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def config(self) -> TextSyncConfig:
        return self._config

    @property
    def store(self) -> ArtifactStore:
        return self._store

    @property
    def synchronizer(self) -> Optional[RemoteFileSynchronizer]:
        return self._synchronizer

    @property
    def github_enabled(self) -> bool:
        """True when mutations are mirrored as pull requests."""
        return self._synchronizer is not None

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    # =========================================================================
    # Lifecycle Management
    # =========================================================================

    async def initialize(self) -> None:
        """Prepare the service. Loads the remote artifact when configured.

        Idempotent: Safe to call multiple times.
        """
        if self._initialized:
            return

        if self._config.bootstrap_from_remote:
            await self.bootstrap()

        self._initialized = True
        self._logger.info("service_initialized", github_pr_mode=self.github_enabled)

    async def shutdown(self) -> None:
        """Release the remote repository connection."""
        if self._synchronizer is not None:
            await self._synchronizer.aclose()
        self._initialized = False
        self._logger.info("service_shutdown_complete")

    async def bootstrap(self) -> bool:
        """Replace the store content with the remote artifact file.

        Returns:
            True if a remote file was found and loaded, False otherwise.

        Raises:
            RemoteAPIError: If the remote file could not be fetched.
        """
        if self._synchronizer is None:
            return False

        remote = await self._synchronizer.fetch_remote()
        if remote is None:
            self._logger.info("bootstrap_no_remote_artifact")
            return False

        self._store.deserialize(remote.content)
        self._logger.info("bootstrap_loaded", count=self._store.count)
        return True

    async def __aenter__(self) -> "TextSyncService":
        await self.initialize()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.shutdown()

    # =========================================================================
    # Reads
    # =========================================================================

    def list_texts(self) -> dict[str, TextItem]:
        return self._store.list_all()

    def get_text(self, key: str) -> Optional[TextItem]:
        return self._store.get(key)

    def metadata(self) -> ArtifactMetadata:
        return self._store.metadata()

    # =========================================================================
    # Mutations
    # =========================================================================

    async def update_text(
        self,
        key: str,
        content: str,
        approved_by: Optional[str] = None,
    ) -> MutationResult:
        """Store ``content`` under ``key`` and mirror the artifact.

        Raises:
            ArtifactError: If ``key`` is empty.
        """
        item = self._store.upsert(key, content, approved_by)
        self._logger.info("text_updated", key=key, version=item.version)

        outcome = await self._sync(key)
        return MutationResult(item=item, artifact=self._store.metadata(), sync=outcome)

    async def delete_text(self, key: str) -> Optional[MutationResult]:
        """Remove ``key`` and mirror the artifact.

        Returns:
            The result, or None if the key did not exist (nothing is synced).
        """
        if not self._store.delete(key):
            return None
        self._logger.info("text_deleted", key=key)

        outcome = await self._sync(key)
        return MutationResult(deleted=True, artifact=self._store.metadata(), sync=outcome)

    async def _sync(self, key: str) -> Optional[SyncOutcome]:
        if self._synchronizer is None:
            return None

        try:
            # serialize is passed uncalled so a retry picks up the latest state.
            return await asyncio.wait_for(
                self._synchronizer.sync(key, self._store.serialize),
                timeout=self._config.sync_timeout_seconds,
            )
        except asyncio.TimeoutError:
            self._logger.warning(
                "sync_timed_out",
                key=key,
                timeout=self._config.sync_timeout_seconds,
            )
            return SyncFailure(
                reason=SYNC_TIMED_OUT,
                error_code="SYNC_TIMEOUT",
                stage=None,
            )

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(texts={self._store.count}, "
            f"github_pr_mode={self.github_enabled})"
        )
