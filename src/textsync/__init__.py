"""
TextSync - Approved Text Store with GitHub Pull-Request Mirroring
===================================================================

TextSync keeps a keyed, versioned collection of approved texts in memory
and mirrors every change into a Git repository as a pull request:

    PUT /api/texts/{key}  →  ArtifactStore  →  RemoteFileSynchronizer
                              (upsert)          (branch → commit → PR)

Architecture Layers (top to bottom):
    1. API Layer            - FastAPI routes
    2. Service Facade       - TextSyncService
    3. Sync Layer           - RemoteFileSynchronizer (optimistic concurrency)
    4. Infrastructure Layer - ArtifactStore
    5. Integration Layer    - GitHub REST adapter, in-memory mock

Quick Start:
    >>> from textsync import TextSyncService
    >>> async with TextSyncService() as service:
    ...     result = await service.update_text("greeting", "Hi", "alice")
"""

# =============================================================================
# Package Version
# =============================================================================
__version__ = "0.1.0"

# =============================================================================
# Package-Level Exports
# =============================================================================
# For specific components, import from submodules directly:
#   from textsync.core.config import TextSyncConfig
#   from textsync.sync import RemoteFileSynchronizer
# =============================================================================
from textsync.facade import MutationResult, TextSyncService

__all__ = ["MutationResult", "TextSyncService", "__version__"]
