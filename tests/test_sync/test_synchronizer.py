"""
Tests for textsync.sync.synchronizer
======================================

RemoteFileSynchronizer against MockRemoteRepository. Most assertions count
calls on the mock, because the protocol is defined by which remote
operations happen (and which never do).

What's Being Tested:
    - NoChange short-circuit (no branch, commit or PR)
    - First sync creates the file without a token
    - Conflict → cleanup → one retry → Success
    - Conflict twice → two cleanups → Failure("conflict after retry")
    - Other failures: cleanup happens, reason is kept, no retry
    - Cleanup failures never change the outcome
    - Template rendering and branch naming
"""

import re

import pytest
from structlog.testing import capture_logs

from textsync.core.config import GitHubConfig
from textsync.core.enums import SyncStage
from textsync.core.exceptions import (
    ConfigurationError,
    RemoteAPIError,
    RemoteConflictError,
)
from textsync.core.models import NoChange, SyncFailure, SyncSuccess
from textsync.infrastructure.artifact_store import InMemoryArtifactStore
from textsync.integrations.github.mock import MockRemoteRepository
from textsync.sync.synchronizer import (
    CONFLICT_AFTER_RETRY,
    RemoteFileSynchronizer,
    generate_branch_name,
    render_template,
)


PATH = "artifacts/texts.json"


def _conflict() -> RemoteConflictError:
    return RemoteConflictError(message="artifacts/texts.json does not match")


# =============================================================================
# Tests: Construction
# =============================================================================
class TestConstruction:
    """Coordinates are validated when the synchronizer is built."""

    def test_missing_credentials_fail_immediately(self, mock_repository) -> None:
        with pytest.raises(ConfigurationError) as exc_info:
            RemoteFileSynchronizer(mock_repository, GitHubConfig())
        assert exc_info.value.message == "GitHub credentials not provided"

    def test_from_config_missing_credentials(self) -> None:
        with pytest.raises(ConfigurationError):
            RemoteFileSynchronizer.from_config(GitHubConfig(provider="mock"))

    def test_from_config_builds_mock_repository(self, github_config) -> None:
        sync = RemoteFileSynchronizer.from_config(github_config)
        assert isinstance(sync.repository, MockRemoteRepository)


# =============================================================================
# Tests: NoChange
# =============================================================================
class TestNoChange:
    """Identical content never produces side effects."""

    async def test_identical_content_returns_no_change(self, synchronizer, mock_repository) -> None:
        mock_repository.seed_file(PATH, "same body")

        outcome = await synchronizer.sync("greeting", "same body")

        assert isinstance(outcome, NoChange)
        assert mock_repository.calls("create_branch") == []
        assert mock_repository.calls("put_file") == []
        assert mock_repository.calls("create_pull_request") == []
        assert mock_repository.branches == ["main"]

    async def test_repeated_sync_of_merged_content_is_no_change(
        self, synchronizer, mock_repository
    ) -> None:
        outcome = await synchronizer.sync("greeting", "v1")
        assert isinstance(outcome, SyncSuccess)
        mock_repository.merge_pull_request(outcome.reference)

        assert isinstance(await synchronizer.sync("greeting", "v1"), NoChange)


# =============================================================================
# Tests: Success
# =============================================================================
class TestSuccess:
    """Happy paths."""

    async def test_first_sync_creates_file_without_token(
        self, synchronizer, mock_repository
    ) -> None:
        outcome = await synchronizer.sync("greeting", "new body")

        assert isinstance(outcome, SyncSuccess)
        puts = mock_repository.calls("put_file")
        assert len(puts) == 1
        assert puts[0]["sha"] is None
        assert puts[0]["content"] == "new body"
        assert outcome.reference == mock_repository.pull_requests[0]["url"]
        assert outcome.branch == puts[0]["branch"]

    async def test_update_passes_fetched_token(self, synchronizer, mock_repository) -> None:
        sha = mock_repository.seed_file(PATH, "old body")

        outcome = await synchronizer.sync("greeting", "new body")

        assert isinstance(outcome, SyncSuccess)
        assert mock_repository.calls("put_file")[0]["sha"] == sha

    async def test_pull_request_targets_base_branch(self, synchronizer, mock_repository) -> None:
        outcome = await synchronizer.sync("greeting", "body")

        pr = mock_repository.pull_requests[0]
        assert pr["base"] == "main"
        assert pr["head"] == outcome.branch
        assert pr["title"] == "Text Update: greeting"

    async def test_rendered_texts_share_one_timestamp(self, synchronizer, mock_repository) -> None:
        await synchronizer.sync("greeting", "body")

        message = mock_repository.calls("put_file")[0]["message"]
        pr_body = mock_repository.pull_requests[0]["body"]
        commit_ts = message.removeprefix("Update text artifact for greeting - ")
        pr_ts = pr_body.removeprefix("Automated text update for greeting at ")
        assert commit_ts == pr_ts
        assert commit_ts.endswith("Z")


# =============================================================================
# Tests: Conflict Retry
# =============================================================================
class TestConflictRetry:
    """Exactly one retry, only for conflicts."""

    async def test_conflict_then_success(self, synchronizer, mock_repository) -> None:
        mock_repository.queue_failure("put_file", _conflict())

        outcome = await synchronizer.sync("greeting", "body")

        assert isinstance(outcome, SyncSuccess)
        assert len(mock_repository.calls("put_file")) == 2
        deletes = mock_repository.calls("delete_branch")
        assert len(deletes) == 1
        assert deletes[0]["name"] == mock_repository.calls("put_file")[0]["branch"]
        assert len(mock_repository.calls("get_file")) == 2

    async def test_conflict_twice_fails(self, synchronizer, mock_repository) -> None:
        mock_repository.queue_failure("put_file", _conflict())
        mock_repository.queue_failure("put_file", _conflict())

        outcome = await synchronizer.sync("greeting", "body")

        assert isinstance(outcome, SyncFailure)
        assert outcome.reason == CONFLICT_AFTER_RETRY == "conflict after retry"
        assert outcome.stage == SyncStage.COMMIT
        assert len(mock_repository.calls("put_file")) == 2
        assert len(mock_repository.calls("delete_branch")) == 2
        assert mock_repository.calls("create_pull_request") == []
        assert mock_repository.branches == ["main"]

    async def test_retry_uses_distinct_branches(self, synchronizer, mock_repository) -> None:
        mock_repository.queue_failure("put_file", _conflict())

        await synchronizer.sync("greeting", "body")

        first, second = (c["name"] for c in mock_repository.calls("create_branch"))
        assert first != second

    async def test_real_concurrent_writer_is_detected(self, synchronizer, mock_repository) -> None:
        """Another writer lands on main between our fetch and our branch."""
        mock_repository.seed_file(PATH, "v0")
        mock_repository.queue_side_effect(
            "get_branch_tip",
            lambda: mock_repository.seed_file(PATH, "someone else"),
        )

        outcome = await synchronizer.sync("greeting", "ours")

        assert isinstance(outcome, SyncSuccess)
        puts = mock_repository.calls("put_file")
        assert len(puts) == 2
        assert mock_repository.read_file(PATH, outcome.branch) == "ours"

    async def test_callable_body_is_recomputed_for_retry(
        self, synchronizer, mock_repository
    ) -> None:
        store = InMemoryArtifactStore()
        store.upsert("greeting", "Hi")
        mock_repository.queue_failure("put_file", _conflict())
        # Another request lands while the first branch is being cleaned up.
        mock_repository.queue_side_effect(
            "delete_branch", lambda: store.upsert("farewell", "Bye")
        )

        outcome = await synchronizer.sync("greeting", store.serialize)

        assert isinstance(outcome, SyncSuccess)
        first, second = mock_repository.calls("put_file")
        assert "farewell" not in first["content"]
        assert "farewell" in second["content"]

    async def test_string_body_is_resent_unchanged(self, synchronizer, mock_repository) -> None:
        mock_repository.queue_failure("put_file", _conflict())

        await synchronizer.sync("greeting", "fixed body")

        contents = [c["content"] for c in mock_repository.calls("put_file")]
        assert contents == ["fixed body", "fixed body"]


# =============================================================================
# Tests: Other Failures
# =============================================================================
class TestFailures:
    """Non-conflict failures are reported immediately."""

    async def test_fetch_failure(self, synchronizer, mock_repository) -> None:
        mock_repository.queue_failure("get_file", RemoteAPIError("Bad credentials", status_code=401))

        outcome = await synchronizer.sync("greeting", "body")

        assert isinstance(outcome, SyncFailure)
        assert outcome.reason == "Bad credentials"
        assert outcome.stage == SyncStage.FETCH
        assert mock_repository.calls("create_branch") == []
        assert mock_repository.calls("delete_branch") == []

    async def test_branch_failure_needs_no_cleanup(self, synchronizer, mock_repository) -> None:
        mock_repository.queue_failure("create_branch", RemoteAPIError("Reference already exists", status_code=422))

        outcome = await synchronizer.sync("greeting", "body")

        assert isinstance(outcome, SyncFailure)
        assert outcome.stage == SyncStage.BRANCH
        assert mock_repository.calls("delete_branch") == []

    async def test_commit_failure_cleans_up_without_retry(self, synchronizer, mock_repository) -> None:
        mock_repository.queue_failure("put_file", RemoteAPIError("Server Error", status_code=500))

        outcome = await synchronizer.sync("greeting", "body")

        assert isinstance(outcome, SyncFailure)
        assert outcome.reason == "Server Error"
        assert outcome.reason != CONFLICT_AFTER_RETRY
        assert outcome.stage == SyncStage.COMMIT
        assert outcome.error_code == "REMOTE_API_ERROR"
        assert len(mock_repository.calls("put_file")) == 1
        assert len(mock_repository.calls("delete_branch")) == 1

    async def test_pull_request_failure_cleans_up(self, synchronizer, mock_repository) -> None:
        mock_repository.queue_failure(
            "create_pull_request",
            RemoteAPIError("Validation Failed", status_code=422),
        )

        outcome = await synchronizer.sync("greeting", "body")

        assert isinstance(outcome, SyncFailure)
        assert outcome.stage == SyncStage.PULL_REQUEST
        assert len(mock_repository.calls("delete_branch")) == 1
        assert mock_repository.branches == ["main"]

    async def test_pull_request_conflict_is_not_retried(self, synchronizer, mock_repository) -> None:
        mock_repository.queue_failure("create_pull_request", _conflict())

        outcome = await synchronizer.sync("greeting", '{"a": 1}')

        assert isinstance(outcome, SyncFailure)
        assert outcome.stage == SyncStage.PULL_REQUEST
        assert outcome.reason != CONFLICT_AFTER_RETRY
        assert outcome.error_code == "REMOTE_CONFLICT"
        assert len(mock_repository.calls("create_pull_request")) == 1
        assert len(mock_repository.calls("put_file")) == 1
        assert len(mock_repository.calls("get_file")) == 1
        assert len(mock_repository.calls("delete_branch")) == 1
        assert mock_repository.branches == ["main"]

    async def test_cleanup_failure_keeps_original_reason(self, synchronizer, mock_repository) -> None:
        mock_repository.queue_failure("put_file", RemoteAPIError("Server Error", status_code=500))
        mock_repository.queue_failure("delete_branch", RemoteAPIError("Forbidden", status_code=403))

        outcome = await synchronizer.sync("greeting", "body")

        assert isinstance(outcome, SyncFailure)
        assert outcome.reason == "Server Error"

    async def test_cleanup_failure_during_conflict_still_retries(
        self, synchronizer, mock_repository
    ) -> None:
        mock_repository.queue_failure("put_file", _conflict())
        mock_repository.queue_failure("delete_branch", RemoteAPIError("Forbidden", status_code=403))

        outcome = await synchronizer.sync("greeting", "body")

        assert isinstance(outcome, SyncSuccess)


# =============================================================================
# Tests: Helpers
# =============================================================================
class TestRenderTemplate:
    """Literal placeholder substitution."""

    def test_replaces_every_occurrence(self) -> None:
        assert render_template("{key}/{key} at {timestamp}", "a", "t") == "a/a at t"

    def test_unknown_placeholders_left_verbatim(self) -> None:
        assert render_template("{key} {author} {}", "a", "t") == "a {author} {}"

    def test_values_with_braces_are_not_reinterpreted(self) -> None:
        assert render_template("{key}", "{timestamp}", "t") == "{timestamp}"


class TestGenerateBranchName:
    """Branch names are unique and valid refs."""

    def test_format(self) -> None:
        name = generate_branch_name("greeting", "text-update-")
        assert re.fullmatch(r"text-update-greeting-\d{13}-[0-9a-f]{8}", name)

    def test_unique_for_same_key(self) -> None:
        names = {generate_branch_name("greeting") for _ in range(50)}
        assert len(names) == 50

    @pytest.mark.parametrize("key", ["hello world", "a/b..c", "~^:?*[", "..."])
    def test_unsafe_keys_are_sanitized(self, key: str) -> None:
        name = generate_branch_name(key)
        assert re.fullmatch(r"[A-Za-z0-9._-]+", name)
        assert ".." not in name


# =============================================================================
# Tests: Stage Logging
# =============================================================================
class TestStageLogging:
    """Terminal and cleanup events carry the stage they happened in."""

    async def test_no_change_logged_at_compare(self, synchronizer, mock_repository) -> None:
        mock_repository.seed_file(PATH, "same body")

        with capture_logs() as logs:
            await synchronizer.sync("greeting", "same body")

        event = next(e for e in logs if e["event"] == "sync_no_change")
        assert event["stage"] == SyncStage.COMPARE.value

    async def test_success_logged_as_done(self, synchronizer) -> None:
        with capture_logs() as logs:
            await synchronizer.sync("greeting", "body")

        event = next(e for e in logs if e["event"] == "sync_succeeded")
        assert event["stage"] == SyncStage.DONE.value

    async def test_cleanup_failure_logged_at_cleanup(self, synchronizer, mock_repository) -> None:
        mock_repository.queue_failure("put_file", RemoteAPIError("Server Error", status_code=500))
        mock_repository.queue_failure("delete_branch", RemoteAPIError("Forbidden", status_code=403))

        with capture_logs() as logs:
            await synchronizer.sync("greeting", "body")

        event = next(e for e in logs if e["event"] == "branch_cleanup_failed")
        assert event["stage"] == SyncStage.CLEANUP.value
        assert event["log_level"] == "warning"
