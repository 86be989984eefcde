"""
textsync.core.enums - Type-Safe Enumerations
==============================================

Enumerations shared by the synchronizer, the service facade and the HTTP
surface. Like every enum in TextSync they inherit from both ``str`` and
``Enum`` so they serialize as plain strings in JSON responses and compare
equal to their string values.

    ┌─────────────────────────────────────────────────────────────────┐
    │  SYNC PROTOCOL                                                  │
    │    SyncStage:  where a sync call currently is (FETCH → DONE)    │
    │    SyncStatus: which outcome variant a sync call produced       │
    └─────────────────────────────────────────────────────────────────┘
"""

from enum import Enum


# =============================================================================
# Sync Stage Enumeration
# =============================================================================
# The state machine walked by RemoteFileSynchronizer.sync():
#
#   FETCH → COMPARE → BRANCH → COMMIT → PULL_REQUEST → DONE
#                        ↘        ↘           ↘
#                         CLEANUP (delete the working branch on failure)
#
#   COMMIT ──(conflict, first attempt)──→ FETCH   (single bounded retry)
# =============================================================================
class SyncStage(str, Enum):
    """Stages of one sync call.

    Used in structured log events and recorded on ``SyncFailure.stage`` so a
    caller can tell where a sync gave up.

    Usage:
        >>> SyncStage.COMMIT.value
        'commit'
    """

    FETCH = "fetch"                 # Read remote file + concurrency token
    COMPARE = "compare"             # Short-circuit when nothing changed
    BRANCH = "branch"               # Create the per-change working branch
    COMMIT = "commit"               # Conditional write on the working branch
    PULL_REQUEST = "pull_request"   # Open the review request
    CLEANUP = "cleanup"             # Best-effort working branch deletion
    DONE = "done"                   # Terminal


# =============================================================================
# Sync Status Enumeration
# =============================================================================
class SyncStatus(str, Enum):
    """Discriminator for the three SyncOutcome variants.

    A FAILURE is a normal return value (a business failure), not a raised
    error. Callers must check the status instead of relying on the absence
    of an exception.
    """

    NO_CHANGE = "no_change"   # Remote already identical, nothing was created
    SUCCESS = "success"       # Pull request opened
    FAILURE = "failure"       # Sync gave up; reason attached
