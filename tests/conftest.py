"""
Shared Test Fixtures for TextSync
===================================

Reusable pytest fixtures, organized by layer:

    1. Configuration fixtures
    2. Infrastructure fixtures (ArtifactStore)
    3. Integration fixtures (MockRemoteRepository)
    4. Sync fixtures (RemoteFileSynchronizer)
    5. Facade fixtures (TextSyncService)
"""

from __future__ import annotations

import pytest

from textsync.core.config import GitHubConfig, TextSyncConfig
from textsync.facade import TextSyncService
from textsync.infrastructure.artifact_store import InMemoryArtifactStore
from textsync.integrations.github.mock import MockRemoteRepository
from textsync.sync.synchronizer import RemoteFileSynchronizer


TARGET_PATH = "artifacts/texts.json"


# =============================================================================
# Configuration
# =============================================================================

@pytest.fixture
def github_config():
    """PR-mode GitHub configuration pointing at the mock provider."""
    return GitHubConfig(
        provider="mock",
        token="test-token",
        repo="acme/site",
        branch="main",
        target_path=TARGET_PATH,
    )


@pytest.fixture
def config(github_config):
    """TextSync configuration with PR mode enabled."""
    return TextSyncConfig(github=github_config)


# =============================================================================
# Infrastructure
# =============================================================================

@pytest.fixture
def artifact_store():
    """Fresh InMemoryArtifactStore."""
    return InMemoryArtifactStore()


# =============================================================================
# Remote Repository
# =============================================================================

@pytest.fixture
def mock_repository():
    """Fresh MockRemoteRepository with an empty main branch."""
    return MockRemoteRepository(repo_name="acme/site", base_branch="main")


# =============================================================================
# Sync
# =============================================================================

@pytest.fixture
def synchronizer(mock_repository, github_config):
    """RemoteFileSynchronizer backed by the mock repository."""
    return RemoteFileSynchronizer(mock_repository, github_config)


# =============================================================================
# Facade
# =============================================================================

@pytest.fixture
def service(config, artifact_store, synchronizer):
    """TextSyncService in PR mode, wired to the mock repository."""
    return TextSyncService(config, store=artifact_store, synchronizer=synchronizer)


@pytest.fixture
def local_service(artifact_store):
    """TextSyncService with PR mode off."""
    return TextSyncService(TextSyncConfig(github=GitHubConfig()), store=artifact_store)
