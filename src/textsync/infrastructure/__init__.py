"""
textsync.infrastructure - Storage Layer
=========================================

    - artifact_store: ArtifactStore interface and InMemoryArtifactStore
"""

from textsync.infrastructure.artifact_store import ArtifactStore, InMemoryArtifactStore

__all__ = [
    "ArtifactStore",
    "InMemoryArtifactStore",
]
