"""
textsync.core.exceptions - Custom Exception Hierarchy
=======================================================

Structured exceptions for TextSync. Components raise and catch specific
exception types that carry an error code and a details dict instead of
matching on message text.

Exception Hierarchy:
    TextSyncError (base)
        ├── ConfigurationError        - Missing or invalid configuration
        ├── ArtifactError             - Invalid artifact store input
        └── RemoteAPIError            - Remote hosting API failure
                ├── RemoteNotFoundError   - File or ref does not exist
                └── RemoteConflictError   - Concurrency token mismatch

Where They Are Raised and Handled:
    GitHubRepository translates HTTP responses into the Remote* types
        → RemoteFileSynchronizer inspects only the exception TYPE
        → RemoteConflictError: delete branch, retry once
        → any other RemoteAPIError: delete branch, SyncFailure outcome
    ConfigurationError is raised at construction and never caught by the
    library; the application should fail fast.

Usage:
    >>> from textsync.core.exceptions import RemoteAPIError
    >>> raise RemoteAPIError(
    ...     message="GitHub API returned 502",
    ...     status_code=502,
    ...     details={"method": "PUT", "path": "/repos/acme/site/contents/x.json"},
    ... )
"""

from __future__ import annotations

from typing import Any, Optional


# =============================================================================
# Base Exception
# =============================================================================
# All TextSync exceptions inherit from this base class, so callers can catch
# every library-specific error with a single except clause:
#
#   try:
#       service = TextSyncService(config)
#   except TextSyncError as e:
#       logger.error(e.message, error_code=e.error_code, details=e.details)
# =============================================================================
class TextSyncError(Exception):
    """Base exception for all TextSync errors.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code, UPPER_SNAKE_CASE
            (e.g., "REMOTE_CONFLICT", "CONFIG_ERROR").
        details: Arbitrary dict with additional debugging context.

    Example:
        >>> try:
        ...     do_something()
        ... except TextSyncError as e:
        ...     print(f"[{e.error_code}] {e.message}")
    """

    def __init__(
        self,
        message: str,
        error_code: str = "UNKNOWN_ERROR",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        # Call Exception.__init__ with the message so that str(exception) works
        super().__init__(message)

        self.message = message
        self.error_code = error_code
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Serialize this exception to a dictionary.

        Used for structlog events and API error bodies.

        Returns:
            Dictionary with error_type, message, error_code, and details.
        """
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "error_code": self.error_code,
            "details": self.details,
        }

    def __repr__(self) -> str:
        """Detailed string representation for debugging."""
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"error_code={self.error_code!r}, "
            f"details={self.details!r})"
        )


# =============================================================================
# Configuration Error
# =============================================================================
# Raised when required repository coordinates are missing. The synchronizer
# validates eagerly at construction, so this never surfaces mid-sync.
# =============================================================================
class ConfigurationError(TextSyncError):
    """Raised when TextSync configuration is invalid or missing.

    Common Causes:
        - GitHub token or repository not set while building a synchronizer
        - Repository not in ``owner/name`` form
        - Malformed YAML configuration file

    Example:
        >>> raise ConfigurationError(
        ...     message="GitHub credentials not provided",
        ...     error_code="MISSING_GITHUB_CREDENTIALS",
        ... )
    """

    def __init__(
        self,
        message: str,
        error_code: str = "CONFIG_ERROR",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message=message, error_code=error_code, details=details)


# =============================================================================
# Artifact Error
# =============================================================================
class ArtifactError(TextSyncError):
    """Raised when the artifact store is asked to do something invalid.

    Malformed JSON handed to ``deserialize()`` is NOT an ArtifactError; the
    store resets to an empty artifact instead.
    """

    def __init__(
        self,
        message: str,
        error_code: str = "ARTIFACT_ERROR",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message=message, error_code=error_code, details=details)


# =============================================================================
# Remote API Errors
# =============================================================================
# The remote hosting adapter translates raw HTTP/transport failures into this
# closed set. The synchronizer never looks at message text: it dispatches on
# the exception class alone.
#
#   404                 → RemoteNotFoundError  (get_file returns None instead)
#   409                 → RemoteConflictError  (retried once when the commit raised it)
#   anything else       → RemoteAPIError       (reported as SyncFailure)
#   transport failures  → RemoteAPIError       (status_code is None)
# =============================================================================
class RemoteAPIError(TextSyncError):
    """Raised when a remote hosting API call fails.

    Attributes:
        status_code: HTTP status code of the failed response, or None when
            the request never produced a response (DNS, timeout, reset).

    Example:
        >>> raise RemoteAPIError(
        ...     message="Bad credentials",
        ...     status_code=401,
        ... )
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        error_code: str = "REMOTE_API_ERROR",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        enriched_details = details or {}
        if status_code is not None:
            enriched_details["status_code"] = status_code

        super().__init__(message=message, error_code=error_code, details=enriched_details)

        self.status_code = status_code


class RemoteNotFoundError(RemoteAPIError):
    """The requested file, branch or ref does not exist on the remote."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = 404,
        error_code: str = "REMOTE_NOT_FOUND",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(
            message=message,
            status_code=status_code,
            error_code=error_code,
            details=details,
        )


class RemoteConflictError(RemoteAPIError):
    """A conditional write was rejected because the concurrency token moved.

    Another writer changed the remote file between our fetch and our commit.
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = 409,
        error_code: str = "REMOTE_CONFLICT",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(
            message=message,
            status_code=status_code,
            error_code=error_code,
            details=details,
        )
