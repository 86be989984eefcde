"""
textsync.sync.synchronizer - Remote File Synchronizer
=======================================================

Mirrors the serialized artifact into the remote repository as a pull
request, using the remote file's sha as an optimistic-concurrency token.

Sync Flow (one call):
    ┌───────┐   identical   ┌──────────┐
    │ Fetch │ ────────────→ │ NoChange │
    └───┬───┘               └──────────┘
        │ differs / absent
    ┌───▼────┐  ┌────────┐  ┌─────────────┐  ┌─────────┐
    │ Branch │→ │ Commit │→ │ PullRequest │→ │ Success │
    └────────┘  └───┬────┘  └──────┬──────┘  └─────────┘
                    │ conflict     │ error
                    ↓              ↓
               delete branch   delete branch → Failure
               retry once from Fetch,
               then Failure("conflict after retry")

Key Properties:
    - Unchanged content never creates a branch, commit or pull request.
    - Exactly two attempts at most, immediately one after the other.
    - Branch deletion is best effort; its errors are logged, never returned.
    - All remote calls of one sync are issued strictly one after another.

Concurrency Unit:
    Every key lives in the same remote file, so two syncs for different keys
    still race on that file. The loser sees a conflict, re-fetches and
    retries. Pass ``body`` as a callable (e.g. ``store.serialize``) so the
    retry commits the current store state instead of the stale body.

Usage:
    >>> sync = RemoteFileSynchronizer.from_config(config.github)
    >>> outcome = await sync.sync("greeting", store.serialize)
    >>> if isinstance(outcome, SyncSuccess):
    ...     print(outcome.reference)
"""

from __future__ import annotations

import re
import time
import uuid
from datetime import datetime, timezone
from typing import Callable, Optional, Union

import structlog

from textsync.core.config import GitHubConfig, require_github_coordinates
from textsync.core.enums import SyncStage
from textsync.core.exceptions import RemoteAPIError, RemoteConflictError
from textsync.core.models import (
    NoChange,
    RemoteFileHandle,
    SyncFailure,
    SyncOutcome,
    SyncSuccess,
)
from textsync.integrations.github.base import RemoteRepository
from textsync.integrations.github.factory import create_remote_repository


# =============================================================================
# Logger
# =============================================================================
logger = structlog.get_logger()

MAX_ATTEMPTS = 2
CONFLICT_AFTER_RETRY = "conflict after retry"

Body = Union[str, Callable[[], str]]

_UNSAFE_REF_CHARS = re.compile(r"[^A-Za-z0-9._-]+")
_DOT_RUNS = re.compile(r"\.{2,}")


# =============================================================================
# Helpers
# =============================================================================
def render_template(template: str, key: str, timestamp: str) -> str:
    """Substitute ``{key}`` and ``{timestamp}`` in ``template``.

    Plain string replacement, not ``str.format``: unknown placeholders and
    stray braces are left exactly as written.

    Example:
        >>> render_template("Text Update: {key} {other}", "greeting", "t")
        'Text Update: greeting {other}'
    """
    return template.replace("{key}", key).replace("{timestamp}", timestamp)


def generate_branch_name(key: str, prefix: str = "text-update-") -> str:
    """Build a working branch name unique to one sync attempt.

    Format: ``<prefix><sanitized key>-<epoch ms>-<8 hex chars>``. The random
    suffix keeps two calls within the same millisecond apart.
    """
    slug = _DOT_RUNS.sub(".", _UNSAFE_REF_CHARS.sub("-", key)).strip("-.") or "item"
    millis = int(time.time() * 1000)
    return f"{prefix}{slug}-{millis}-{uuid.uuid4().hex[:8]}"


# =============================================================================
# Synchronizer
# =============================================================================
class RemoteFileSynchronizer:
    """Mirrors one remote file through branch + commit + pull request.

    Attributes:
        _repository: Remote hosting adapter.
        _config: GitHub settings (base branch, path, templates, prefix).

    Example:
        >>> repo = MockRemoteRepository()
        >>> sync = RemoteFileSynchronizer(repo, GitHubConfig(token="t", repo="a/b"))
        >>> outcome = await sync.sync("greeting", '{"texts": {}}')
    """

    def __init__(self, repository: RemoteRepository, config: GitHubConfig) -> None:
        """Initialize the synchronizer.

        Raises:
            ConfigurationError: If credentials, repository, base branch or
                target path are missing.
        """
        require_github_coordinates(config)
        self._repository = repository
        self._config = config
        self._logger = logger.bind(
            component="remote_file_synchronizer",
            repo=config.repo,
            path=config.target_path,
        )

    @classmethod
    def from_config(cls, config: GitHubConfig) -> "RemoteFileSynchronizer":
        """Build a synchronizer with the adapter selected by ``config.provider``."""
        require_github_coordinates(config)
        return cls(create_remote_repository(config), config)

    @property
    def repository(self) -> RemoteRepository:
        return self._repository

    @property
    def config(self) -> GitHubConfig:
        return self._config

    # =========================================================================
    # Remote Steps
    # =========================================================================

    async def fetch_remote(self) -> Optional[RemoteFileHandle]:
        """Current content and token of the target file on the base branch.

        Returns:
            The handle, or None if the file does not exist yet.

        Raises:
            RemoteAPIError: Any failure other than "not found".
        """
        return await self._repository.get_file(self._config.target_path, self._config.branch)

    async def create_branch(self, name: str) -> None:
        """Create ``name`` at the current tip of the base branch."""
        tip = await self._repository.get_branch_tip(self._config.branch)
        await self._repository.create_branch(name, tip)
        self._logger.debug("branch_created", branch=name, base_sha=tip)

    async def commit_file(
        self,
        branch: str,
        body: str,
        message: str,
        expected_token: Optional[str] = None,
    ) -> None:
        """Write ``body`` to the target path on ``branch``.

        Raises:
            RemoteConflictError: ``expected_token`` no longer matches.
            RemoteAPIError: Any other failure.
        """
        await self._repository.put_file(
            self._config.target_path,
            branch,
            body,
            message,
            sha=expected_token,
        )

    async def open_review(self, branch: str, title: str, body: str) -> str:
        """Open a pull request from ``branch`` into the base branch."""
        return await self._repository.create_pull_request(
            head=branch,
            base=self._config.branch,
            title=title,
            body=body,
        )

    async def delete_branch(self, name: str) -> None:
        """Delete ``name``, logging and swallowing any remote failure."""
        try:
            await self._repository.delete_branch(name)
        except RemoteAPIError as exc:
            self._logger.warning(
                "branch_cleanup_failed",
                stage=SyncStage.CLEANUP.value,
                branch=name,
                error=exc.message,
                error_code=exc.error_code,
            )

    # =========================================================================
    # Sync
    # =========================================================================

    async def sync(self, key: str, body: Body) -> SyncOutcome:
        """Mirror ``body`` to the remote file as a pull request for ``key``.

        Args:
            key: Key of the text whose change triggered this sync. Used in
                the branch name and the rendered messages.
            body: Serialized artifact, or a zero-argument callable returning
                it. A callable is invoked again for the retry attempt.

        Returns:
            NoChange, SyncSuccess with the pull request URL, or SyncFailure.
        """
        # One timestamp for commit message, title and body across attempts.
        timestamp = datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
        commit_message = render_template(self._config.commit_message_template, key, timestamp)
        pr_title = render_template(self._config.pr_title_template, key, timestamp)
        pr_body = render_template(self._config.pr_body_template, key, timestamp)

        self._logger.info("sync_started", key=key)

        for attempt in range(MAX_ATTEMPTS):
            local = body() if callable(body) else body

            try:
                remote = await self.fetch_remote()
            except RemoteAPIError as exc:
                return self._failure(key, exc, SyncStage.FETCH, attempt)

            if remote is not None and remote.content == local:
                self._logger.info(
                    "sync_no_change",
                    key=key,
                    stage=SyncStage.COMPARE.value,
                    attempt=attempt,
                )
                return NoChange()

            branch = generate_branch_name(key, self._config.branch_prefix)
            try:
                await self.create_branch(branch)
            except RemoteAPIError as exc:
                return self._failure(key, exc, SyncStage.BRANCH, attempt)

            try:
                await self.commit_file(
                    branch,
                    local,
                    commit_message,
                    expected_token=remote.sha if remote is not None else None,
                )
            except RemoteConflictError as exc:
                await self.delete_branch(branch)
                if attempt + 1 < MAX_ATTEMPTS:
                    self._logger.info(
                        "sync_conflict_retrying",
                        key=key,
                        branch=branch,
                        attempt=attempt,
                    )
                    continue
                self._logger.warning(
                    "sync_failed",
                    key=key,
                    stage=SyncStage.COMMIT.value,
                    attempt=attempt,
                    error=exc.message,
                )
                return SyncFailure(
                    reason=CONFLICT_AFTER_RETRY,
                    error_code=exc.error_code,
                    stage=SyncStage.COMMIT,
                )
            except RemoteAPIError as exc:
                await self.delete_branch(branch)
                return self._failure(key, exc, SyncStage.COMMIT, attempt)

            # Only a commit conflict loops back; any review failure is final.
            try:
                reference = await self.open_review(branch, pr_title, pr_body)
            except RemoteAPIError as exc:
                await self.delete_branch(branch)
                return self._failure(key, exc, SyncStage.PULL_REQUEST, attempt)

            self._logger.info(
                "sync_succeeded",
                key=key,
                stage=SyncStage.DONE.value,
                branch=branch,
                reference=reference,
                attempt=attempt,
            )
            return SyncSuccess(reference=reference, branch=branch)

        # Unreachable: the last attempt always returns.
        raise AssertionError("sync loop exited without an outcome")

    def _failure(
        self,
        key: str,
        exc: RemoteAPIError,
        stage: SyncStage,
        attempt: int,
    ) -> SyncFailure:
        self._logger.warning(
            "sync_failed",
            key=key,
            stage=stage.value,
            attempt=attempt,
            error=exc.message,
            error_code=exc.error_code,
        )
        return SyncFailure(reason=exc.message, error_code=exc.error_code, stage=stage)

    async def aclose(self) -> None:
        await self._repository.aclose()

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(repo={self._config.repo!r}, "
            f"branch={self._config.branch!r}, path={self._config.target_path!r})"
        )
