"""
Tests for textsync.integrations.github.mock
=============================================

The mock repository must behave like GitHub where the synchronizer can
tell the difference: sha tokens, conflicts, branch lifecycle, PR URLs.
"""

import pytest

from textsync.core.exceptions import (
    RemoteAPIError,
    RemoteConflictError,
    RemoteNotFoundError,
)
from textsync.integrations.github.mock import MockRemoteRepository, blob_sha


PATH = "artifacts/texts.json"


# =============================================================================
# Tests: Files
# =============================================================================
class TestFiles:
    """Tests for get_file / put_file semantics."""

    async def test_missing_file_returns_none(self, mock_repository) -> None:
        assert await mock_repository.get_file(PATH, "main") is None

    async def test_seeded_file_has_blob_sha(self, mock_repository) -> None:
        sha = mock_repository.seed_file(PATH, "hello")
        handle = await mock_repository.get_file(PATH, "main")
        assert handle is not None
        assert handle.sha == sha == blob_sha("hello")
        assert handle.content == "hello"

    def test_blob_sha_matches_git(self) -> None:
        # git hash-object of an empty blob
        assert blob_sha("") == "e69de29bb2d1d6434b8b29ae775ad8c2e48c5391"

    async def test_conditional_put_with_current_sha(self, mock_repository) -> None:
        sha = mock_repository.seed_file(PATH, "v1")
        await mock_repository.put_file(PATH, "main", "v2", "update", sha=sha)
        assert mock_repository.read_file(PATH) == "v2"

    async def test_stale_sha_conflicts(self, mock_repository) -> None:
        mock_repository.seed_file(PATH, "v1")
        with pytest.raises(RemoteConflictError):
            await mock_repository.put_file(PATH, "main", "v2", "update", sha=blob_sha("v0"))
        assert mock_repository.read_file(PATH) == "v1"

    async def test_put_without_sha_over_existing_file_fails(self, mock_repository) -> None:
        mock_repository.seed_file(PATH, "v1")
        with pytest.raises(RemoteAPIError) as exc_info:
            await mock_repository.put_file(PATH, "main", "v2", "update")
        assert exc_info.value.status_code == 422
        assert not isinstance(exc_info.value, RemoteConflictError)

    async def test_get_file_on_missing_branch(self, mock_repository) -> None:
        with pytest.raises(RemoteNotFoundError):
            await mock_repository.get_file(PATH, "nope")


# =============================================================================
# Tests: Branches and Pull Requests
# =============================================================================
class TestBranchesAndPulls:
    """Tests for the branch lifecycle and pull requests."""

    async def test_branch_copies_base_files(self, mock_repository) -> None:
        mock_repository.seed_file(PATH, "v1")
        tip = await mock_repository.get_branch_tip("main")

        await mock_repository.create_branch("feature", tip)

        assert mock_repository.read_file(PATH, "feature") == "v1"
        assert mock_repository.branches == ["feature", "main"]

    async def test_duplicate_branch_rejected(self, mock_repository) -> None:
        tip = await mock_repository.get_branch_tip("main")
        await mock_repository.create_branch("feature", tip)
        with pytest.raises(RemoteAPIError):
            await mock_repository.create_branch("feature", tip)

    async def test_delete_branch(self, mock_repository) -> None:
        tip = await mock_repository.get_branch_tip("main")
        await mock_repository.create_branch("feature", tip)
        await mock_repository.delete_branch("feature")
        assert mock_repository.branches == ["main"]

    async def test_cannot_delete_base_branch(self, mock_repository) -> None:
        with pytest.raises(RemoteAPIError):
            await mock_repository.delete_branch("main")

    async def test_pull_request_and_merge(self, mock_repository) -> None:
        tip = await mock_repository.get_branch_tip("main")
        await mock_repository.create_branch("feature", tip)
        await mock_repository.put_file(PATH, "feature", "v1", "add")

        url = await mock_repository.create_pull_request("feature", "main", "t", "b")
        assert url == "https://github.com/acme/site/pull/1"
        assert mock_repository.read_file(PATH) is None

        mock_repository.merge_pull_request(url)

        assert mock_repository.read_file(PATH) == "v1"
        assert mock_repository.pull_requests[0]["merged"] is True

    def test_merge_unknown_pull_raises(self, mock_repository) -> None:
        with pytest.raises(RemoteNotFoundError):
            mock_repository.merge_pull_request(99)


# =============================================================================
# Tests: Test Controls
# =============================================================================
class TestControls:
    """Tests for failure injection and call tracking."""

    async def test_queued_failure_raised_once(self, mock_repository) -> None:
        mock_repository.queue_failure("get_branch_tip", RemoteAPIError("boom", status_code=502))

        with pytest.raises(RemoteAPIError):
            await mock_repository.get_branch_tip("main")
        assert await mock_repository.get_branch_tip("main")

    async def test_side_effect_runs_before_call(self, mock_repository) -> None:
        mock_repository.queue_side_effect("get_file", lambda: mock_repository.seed_file(PATH, "x"))
        handle = await mock_repository.get_file(PATH, "main")
        assert handle is not None

    async def test_calls_are_recorded(self, mock_repository) -> None:
        await mock_repository.get_file(PATH, "main")
        await mock_repository.get_branch_tip("main")

        assert mock_repository.call_count == 2
        assert mock_repository.calls("get_file") == [{"path": PATH, "ref": "main"}]

    async def test_aclose(self) -> None:
        async with MockRemoteRepository() as repo:
            pass
        assert repo.closed is True
