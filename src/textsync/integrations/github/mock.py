"""
textsync.integrations.github.mock - In-Memory Remote Repository
=================================================================

A RemoteRepository that simulates a GitHub repository in process memory.
It is the adapter used by the test suite and by ``provider="mock"``
deployments that want the full PR flow without network access.

What Is Simulated:
    - Branches, each with its own files and a tip commit id.
    - Git-style blob shas as concurrency tokens: a conditional put_file()
      with a stale sha raises RemoteConflictError, exactly like the
      contents API answering 409.
    - Pull requests with GitHub-shaped URLs, and merging them into the base.

Test Controls:
    - queue_failure(method, exc): the next call of ``method`` raises ``exc``.
    - queue_side_effect(method, fn): run ``fn`` right before the next call of
      ``method`` executes, e.g. to simulate a concurrent writer.
    - call_history / calls(method): every call with its arguments.

Usage:
    >>> repo = MockRemoteRepository(repo_name="acme/site")
    >>> repo.seed_file("artifacts/texts.json", "{}")
    >>> repo.queue_failure("put_file", RemoteConflictError("stale sha"))
    >>> handle = await repo.get_file("artifacts/texts.json", "main")
"""

from __future__ import annotations

import hashlib
import uuid
from collections import defaultdict, deque
from typing import Any, Callable, Optional, Union

import structlog

from textsync.core.exceptions import (
    RemoteAPIError,
    RemoteConflictError,
    RemoteNotFoundError,
)
from textsync.core.models import RemoteFileHandle
from textsync.integrations.github.base import RemoteRepository


# =============================================================================
# Logger
# =============================================================================
logger = structlog.get_logger()

Effect = Union[Exception, Callable[[], Any]]


def blob_sha(content: str) -> str:
    """Git blob sha of ``content``, the token GitHub reports for a file."""
    data = content.encode("utf-8")
    header = f"blob {len(data)}\0".encode("ascii")
    return hashlib.sha1(header + data).hexdigest()


class MockRemoteRepository(RemoteRepository):
    """In-memory remote repository for tests and offline development.

    Attributes:
        _base_branch: Name of the default branch created at startup.
        _files: branch → {path → content}.
        _tips: branch → current tip commit id.
        _pull_requests: Opened pull requests, in order.
        _effects: method → FIFO of queued exceptions/side effects.
        _call_history: Every interface call, in order.

    Example:
        >>> repo = MockRemoteRepository()
        >>> tip = await repo.get_branch_tip("main")
        >>> await repo.create_branch("feature", tip)
        >>> await repo.put_file("a.txt", "feature", "hello", "add a.txt")
        >>> url = await repo.create_pull_request("feature", "main", "t", "b")
        >>> repo.merge_pull_request(url)
    """

    def __init__(
        self,
        *,
        repo_name: str = "mock/repository",
        base_branch: str = "main",
    ) -> None:
        self._repo_name = repo_name
        self._base_branch = base_branch

        # --- Repository State ---
        self._files: dict[str, dict[str, str]] = {base_branch: {}}
        self._tips: dict[str, str] = {base_branch: self._new_commit_id()}
        self._pull_requests: list[dict[str, Any]] = []

        # --- Test Controls ---
        self._effects: dict[str, deque[Effect]] = defaultdict(deque)
        self._call_history: list[dict[str, Any]] = []
        self._closed = False

        self._logger = logger.bind(component="mock_remote_repository")

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def call_history(self) -> list[dict[str, Any]]:
        """All recorded calls. Each entry has "method" and "args"."""
        return self._call_history

    @property
    def call_count(self) -> int:
        return len(self._call_history)

    @property
    def branches(self) -> list[str]:
        return sorted(self._files)

    @property
    def pull_requests(self) -> list[dict[str, Any]]:
        """Opened pull requests (number, url, head, base, title, body, merged)."""
        return self._pull_requests

    @property
    def closed(self) -> bool:
        return self._closed

    def calls(self, method: str) -> list[dict[str, Any]]:
        """Argument dicts of every recorded call to ``method``."""
        return [c["args"] for c in self._call_history if c["method"] == method]

    # =========================================================================
    # Test Controls
    # =========================================================================

    def seed_file(self, path: str, content: str, branch: Optional[str] = None) -> str:
        """Write a file directly (no call recorded) and return its sha."""
        branch = branch or self._base_branch
        self._files.setdefault(branch, {})[path] = content
        self._tips[branch] = self._new_commit_id()
        return blob_sha(content)

    def read_file(self, path: str, branch: Optional[str] = None) -> Optional[str]:
        """Current content of ``path`` on ``branch``, without recording a call."""
        return self._files.get(branch or self._base_branch, {}).get(path)

    def queue_failure(self, method: str, exc: Exception) -> None:
        """Make the next call of ``method`` raise ``exc``."""
        self._effects[method].append(exc)

    def queue_side_effect(self, method: str, fn: Callable[[], Any]) -> None:
        """Run ``fn`` just before the next call of ``method`` executes."""
        self._effects[method].append(fn)

    def clear_history(self) -> None:
        self._call_history.clear()

    def merge_pull_request(self, pull: Union[int, str]) -> None:
        """Apply the files of a pull request's head branch onto its base.

        Args:
            pull: Pull request number or URL.

        Raises:
            RemoteNotFoundError: If no such pull request exists.
        """
        pr = next(
            (p for p in self._pull_requests if pull in (p["number"], p["url"])),
            None,
        )
        if pr is None:
            raise RemoteNotFoundError(message=f"Pull request {pull!r} not found")

        head_files = self._files.get(pr["head"], {})
        self._files[pr["base"]].update(head_files)
        self._tips[pr["base"]] = self._new_commit_id()
        pr["merged"] = True
        self._logger.debug("mock_pull_request_merged", number=pr["number"])

    # =========================================================================
    # RemoteRepository Interface
    # =========================================================================

    async def get_file(self, path: str, ref: str) -> Optional[RemoteFileHandle]:
        self._record("get_file", path=path, ref=ref)
        files = self._require_branch(ref)
        content = files.get(path)
        if content is None:
            return None
        return RemoteFileHandle(sha=blob_sha(content), content=content)

    async def get_branch_tip(self, branch: str) -> str:
        self._record("get_branch_tip", branch=branch)
        self._require_branch(branch)
        return self._tips[branch]

    async def create_branch(self, name: str, sha: str) -> None:
        self._record("create_branch", name=name, sha=sha)
        if name in self._files:
            raise RemoteAPIError(
                message="Reference already exists",
                status_code=422,
                details={"branch": name},
            )
        source = next((b for b, tip in self._tips.items() if tip == sha), None)
        if source is None:
            raise RemoteAPIError(
                message="Object does not exist",
                status_code=422,
                details={"sha": sha},
            )
        self._files[name] = dict(self._files[source])
        self._tips[name] = sha

    async def put_file(
        self,
        path: str,
        branch: str,
        content: str,
        message: str,
        sha: Optional[str] = None,
    ) -> None:
        self._record(
            "put_file",
            path=path,
            branch=branch,
            content=content,
            message=message,
            sha=sha,
        )
        files = self._require_branch(branch)
        current = files.get(path)

        if current is None and sha is not None:
            raise RemoteConflictError(message=f"{path} does not match {sha}")
        if current is not None:
            if sha is None:
                raise RemoteAPIError(
                    message='Invalid request. "sha" wasn\'t supplied.',
                    status_code=422,
                    details={"path": path},
                )
            if sha != blob_sha(current):
                raise RemoteConflictError(
                    message=f"{path} is at {blob_sha(current)} but expected {sha}"
                )

        files[path] = content
        self._tips[branch] = self._new_commit_id()

    async def create_pull_request(
        self,
        head: str,
        base: str,
        title: str,
        body: str,
    ) -> str:
        self._record("create_pull_request", head=head, base=base, title=title, body=body)
        self._require_branch(head)
        self._require_branch(base)

        number = len(self._pull_requests) + 1
        url = f"https://github.com/{self._repo_name}/pull/{number}"
        self._pull_requests.append({
            "number": number,
            "url": url,
            "head": head,
            "base": base,
            "title": title,
            "body": body,
            "merged": False,
        })
        return url

    async def delete_branch(self, name: str) -> None:
        self._record("delete_branch", name=name)
        if name == self._base_branch:
            raise RemoteAPIError(
                message="Cannot delete the default branch",
                status_code=422,
                details={"branch": name},
            )
        self._require_branch(name)
        del self._files[name]
        del self._tips[name]

    async def aclose(self) -> None:
        self._closed = True

    # =========================================================================
    # Internals
    # =========================================================================

    def _record(self, method: str, **args: Any) -> None:
        """Record a call, then apply the next queued effect for ``method``."""
        self._call_history.append({"method": method, "args": args})
        self._logger.debug("mock_remote_call", method=method, **args)

        queue = self._effects.get(method)
        if queue:
            effect = queue.popleft()
            if isinstance(effect, Exception):
                raise effect
            effect()

    def _require_branch(self, branch: str) -> dict[str, str]:
        files = self._files.get(branch)
        if files is None:
            raise RemoteNotFoundError(
                message="Branch not found",
                details={"branch": branch},
            )
        return files

    @staticmethod
    def _new_commit_id() -> str:
        return uuid.uuid4().hex + uuid.uuid4().hex[:8]

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(repo={self._repo_name!r}, "
            f"branches={len(self._files)}, pulls={len(self._pull_requests)})"
        )
