"""
textsync.integrations.github - Remote Repository Adapters
===========================================================

The synchronizer talks to the remote through the RemoteRepository
interface, so the GitHub REST adapter can be swapped for the in-memory
mock in tests and offline deployments.

Available Adapters:
    - RemoteRepository:     Abstract base class defining the remote contract.
    - GitHubRepository:     GitHub REST API over httpx.
    - MockRemoteRepository: In-memory simulated repository.

Usage:
    >>> from textsync.integrations.github import create_remote_repository
    >>> repo = create_remote_repository(config.github)
    >>> handle = await repo.get_file("artifacts/texts.json", "main")
"""

from textsync.integrations.github.base import RemoteRepository
from textsync.integrations.github.client import GitHubRepository
from textsync.integrations.github.mock import MockRemoteRepository
from textsync.integrations.github.factory import create_remote_repository

__all__ = [
    "RemoteRepository",
    "GitHubRepository",
    "MockRemoteRepository",
    "create_remote_repository",
]
