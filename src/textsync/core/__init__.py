"""
textsync.core - Foundation Layer
==================================

Building blocks every other TextSync module depends on:

    - config:      Configuration management (TextSyncConfig, GitHubConfig)
    - enums:       SyncStage, SyncStatus
    - models:      TextItem, TextArtifact, RemoteFileHandle, SyncOutcome variants
    - exceptions:  Exception hierarchy with error codes
    - logging:     structlog setup

Dependency Rule:
    core/ depends on NOTHING else in the textsync package.
"""

from textsync.core.config import GitHubConfig, TextSyncConfig
from textsync.core.enums import SyncStage, SyncStatus
from textsync.core.exceptions import (
    ArtifactError,
    ConfigurationError,
    RemoteAPIError,
    RemoteConflictError,
    RemoteNotFoundError,
    TextSyncError,
)
from textsync.core.models import (
    ArtifactMetadata,
    NoChange,
    RemoteFileHandle,
    SyncFailure,
    SyncOutcome,
    SyncSuccess,
    TextArtifact,
    TextItem,
)

__all__ = [
    # Config
    "TextSyncConfig",
    "GitHubConfig",
    # Enums
    "SyncStage",
    "SyncStatus",
    # Models
    "TextItem",
    "TextArtifact",
    "ArtifactMetadata",
    "RemoteFileHandle",
    "SyncOutcome",
    "NoChange",
    "SyncSuccess",
    "SyncFailure",
    # Exceptions
    "TextSyncError",
    "ConfigurationError",
    "ArtifactError",
    "RemoteAPIError",
    "RemoteConflictError",
    "RemoteNotFoundError",
]
