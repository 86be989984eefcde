"""
textsync.sync - Remote Synchronization
========================================

    - synchronizer: RemoteFileSynchronizer, the branch/commit/PR protocol
"""

from textsync.sync.synchronizer import (
    CONFLICT_AFTER_RETRY,
    RemoteFileSynchronizer,
    generate_branch_name,
    render_template,
)

__all__ = [
    "CONFLICT_AFTER_RETRY",
    "RemoteFileSynchronizer",
    "generate_branch_name",
    "render_template",
]
