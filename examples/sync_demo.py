"""
Sync Demo: Mirror Text Changes as Pull Requests
================================================

This example walks through PR mode end to end without touching GitHub:
the synchronizer talks to the in-memory MockRemoteRepository, so every
branch, commit and pull request it makes can be inspected afterwards.

What it shows:
    - An update opening a pull request
    - Merging it, after which a re-sync is a no-op
    - A concurrent writer forcing the single conflict retry
    - A failed remote call leaving a partial result

Usage:
    python examples/sync_demo.py
"""

from __future__ import annotations

import asyncio

from textsync.core.config import GitHubConfig, TextSyncConfig
from textsync.core.exceptions import RemoteAPIError
from textsync.core.logging import configure_logging
from textsync.facade import TextSyncService
from textsync.integrations.github.mock import MockRemoteRepository
from textsync.sync.synchronizer import RemoteFileSynchronizer


async def main() -> None:
    """Run the four scenarios against a mock repository."""
    config = TextSyncConfig(
        github=GitHubConfig(provider="mock", token="demo-token", repo="acme/site"),
    )
    configure_logging(config.log_level)

    repository = MockRemoteRepository(repo_name="acme/site")
    synchronizer = RemoteFileSynchronizer(repository, config.github)

    async with TextSyncService(config, synchronizer=synchronizer) as service:
        # 1. A plain update opens a pull request
        result = await service.update_text("greeting", "Hello, world", "alice")
        print(f"greeting v{result.item.version} -> {result.sync.reference}")

        # 2. Once merged, syncing the same artifact again changes nothing
        repository.merge_pull_request(result.sync.reference)
        outcome = await synchronizer.sync("greeting", service.store.serialize)
        print(f"re-sync after merge: {outcome.status.value}")

        # 3. Someone else lands on main between our fetch and our branch
        repository.queue_side_effect(
            "get_branch_tip",
            lambda: repository.seed_file(config.github.target_path, '{"texts": {}}'),
        )
        result = await service.update_text("greeting", "Hello again", "bob")
        print(
            f"after conflict: {result.sync.status.value}, "
            f"{len(repository.calls('delete_branch'))} branch(es) cleaned up"
        )

        # 4. A remote failure keeps the local change but marks it partial
        repository.queue_failure("get_file", RemoteAPIError("Bad credentials", status_code=401))
        result = await service.update_text("farewell", "Goodbye", "carol")
        print(f"farewell stored locally, partial={result.partial}: {result.sync.reason}")

    print(f"\nPull requests opened: {len(repository.pull_requests)}")
    for pr in repository.pull_requests:
        print(f"  #{pr['number']} {pr['title']} ({pr['head']} -> {pr['base']})")


if __name__ == "__main__":
    asyncio.run(main())
