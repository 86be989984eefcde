"""
textsync.integrations.github.base - Abstract Remote Repository Interface
==========================================================================

The contract every remote hosting adapter implements. The synchronizer
only ever talks to this interface.

Architecture Context:
    ┌────────────────────────┐   get_file / put_file   ┌──────────────────┐
    │ RemoteFileSynchronizer │ ──────────────────────→ │ RemoteRepository │
    │                        │ ←── RemoteFileHandle ── │   (abstract)     │
    └────────────────────────┘                         └────────┬─────────┘
                                                                │
                                                    ┌───────────┴──────────┐
                                               ┌────▼─────┐        ┌───────▼────────┐
                                               │  GitHub  │        │ MockRemote     │
                                               │ (httpx)  │        │ Repository     │
                                               └──────────┘        └────────────────┘

Error Translation:
    Adapters translate their raw failures into a closed set of exceptions
    before they leave the adapter:

        not found          → RemoteNotFoundError (get_file returns None instead)
        token mismatch     → RemoteConflictError
        everything else    → RemoteAPIError

Usage:
    >>> class MyRepository(RemoteRepository):
    ...     async def get_file(self, path, ref):
    ...         ...
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from textsync.core.models import RemoteFileHandle


class RemoteRepository(ABC):
    """Abstract base class for remote hosting adapters.

    What subclasses must implement:
        - get_file(): content + concurrency token at a ref, or None
        - get_branch_tip(): commit id at the tip of a branch
        - create_branch(): new branch ref pointing at a commit
        - put_file(): create or conditionally update a file on a branch
        - create_pull_request(): open a review request, return its URL
        - delete_branch(): remove a branch ref

    What subclasses can optionally override:
        - aclose(): release network resources
    """

    @abstractmethod
    async def get_file(self, path: str, ref: str) -> Optional[RemoteFileHandle]:
        """Fetch a file and its concurrency token.

        Args:
            path: File path inside the repository.
            ref: Branch (or other ref) to read from.

        Returns:
            RemoteFileHandle, or None when the file does not exist.

        Raises:
            RemoteAPIError: Any failure other than "not found".
        """
        ...

    @abstractmethod
    async def get_branch_tip(self, branch: str) -> str:
        """Return the commit id at the tip of ``branch``.

        Raises:
            RemoteNotFoundError: If the branch does not exist.
            RemoteAPIError: Any other failure.
        """
        ...

    @abstractmethod
    async def create_branch(self, name: str, sha: str) -> None:
        """Create branch ``name`` pointing at commit ``sha``.

        Raises:
            RemoteAPIError: If the ref could not be created (including when
                it already exists).
        """
        ...

    @abstractmethod
    async def put_file(
        self,
        path: str,
        branch: str,
        content: str,
        message: str,
        sha: Optional[str] = None,
    ) -> None:
        """Write ``content`` to ``path`` on ``branch`` as a new commit.

        Args:
            path: File path inside the repository.
            branch: Branch to commit on.
            content: Full new file content (UTF-8 text).
            message: Commit message.
            sha: Expected current concurrency token. When given, the write
                only succeeds if the remote still holds this token. When
                None, the file is created.

        Raises:
            RemoteConflictError: The remote token no longer matches ``sha``.
            RemoteAPIError: Any other failure.
        """
        ...

    @abstractmethod
    async def create_pull_request(
        self,
        head: str,
        base: str,
        title: str,
        body: str,
    ) -> str:
        """Open a pull request from ``head`` into ``base``.

        Returns:
            The pull request's human-followable URL.
        """
        ...

    @abstractmethod
    async def delete_branch(self, name: str) -> None:
        """Delete branch ``name``.

        Raises:
            RemoteAPIError: If the branch could not be deleted.
        """
        ...

    async def aclose(self) -> None:
        """Release any held resources. No-op by default."""
        return None

    async def __aenter__(self) -> "RemoteRepository":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()
