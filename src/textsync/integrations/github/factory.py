"""
textsync.integrations.github.factory - Remote Repository Factory
==================================================================

Maps ``GitHubConfig.provider`` to a concrete RemoteRepository.

Usage:
    >>> from textsync.integrations.github import create_remote_repository
    >>> repo = create_remote_repository(GitHubConfig(provider="mock", repo="acme/site"))
    >>> type(repo)  # MockRemoteRepository
"""

from __future__ import annotations

from textsync.core.config import GitHubConfig
from textsync.integrations.github.base import RemoteRepository


def create_remote_repository(config: GitHubConfig) -> RemoteRepository:
    """Create a remote repository adapter based on configuration.

        - "github" → GitHubRepository (REST API over httpx)
        - "mock"   → MockRemoteRepository (in memory)

    Args:
        config: GitHub configuration with provider, coordinates and token.

    Returns:
        A RemoteRepository ready for use by the synchronizer.

    Raises:
        ValueError: If the provider name is not recognized.
        ConfigurationError: If the "github" provider lacks credentials.
    """
    provider_name = config.provider.lower()

    if provider_name == "github":
        from textsync.integrations.github.client import GitHubRepository
        return GitHubRepository(config)

    if provider_name == "mock":
        from textsync.integrations.github.mock import MockRemoteRepository
        return MockRemoteRepository(
            repo_name=config.repo or "mock/repository",
            base_branch=config.branch,
        )

    raise ValueError(
        f"Unknown remote provider: '{provider_name}'. "
        f"Available providers: 'github', 'mock'."
    )
