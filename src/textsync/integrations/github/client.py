"""
textsync.integrations.github.client - GitHub REST Adapter
===========================================================

RemoteRepository implementation backed by the GitHub REST API, using an
httpx ``AsyncClient``.

Endpoints Used:
    GET    /repos/{owner}/{repo}/contents/{path}?ref=...   get_file
    GET    /repos/{owner}/{repo}/branches/{branch}         get_branch_tip
    POST   /repos/{owner}/{repo}/git/refs                  create_branch
    PUT    /repos/{owner}/{repo}/contents/{path}           put_file
    POST   /repos/{owner}/{repo}/pulls                     create_pull_request
    DELETE /repos/{owner}/{repo}/git/refs/heads/{branch}   delete_branch

Status Translation:
    404 → RemoteNotFoundError
    409 → RemoteConflictError   (contents API: "is at <sha> but expected <sha>")
    other 4xx/5xx and transport errors → RemoteAPIError

    Translation is by status code only; response messages are carried along
    for humans but never matched on.

Usage:
    >>> config = GitHubConfig(token="ghp_...", repo="acme/site")
    >>> async with GitHubRepository(config) as repo:
    ...     handle = await repo.get_file("artifacts/texts.json", "main")
"""

from __future__ import annotations

import base64
from typing import Any, Optional
from urllib.parse import quote

import httpx
import structlog

from textsync.core.config import GitHubConfig, require_github_coordinates
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

GITHUB_API_VERSION = "2022-11-28"


def _error_message(response: httpx.Response) -> str:
    """Best human-readable message of a failed GitHub response."""
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return response.reason_phrase


class GitHubRepository(RemoteRepository):
    """GitHub REST API adapter.

    Coordinates and credentials are validated in the constructor; a missing
    token or repository raises ConfigurationError before any request is made.

    Attributes:
        _config: GitHub configuration (API URL, timeout, coordinates).
        _owner: Repository owner parsed from ``config.repo``.
        _name: Repository name parsed from ``config.repo``.
        _client: Shared httpx AsyncClient with auth headers preset.

    Example:
        >>> repo = GitHubRepository(config)
        >>> tip = await repo.get_branch_tip("main")
        >>> await repo.create_branch("text-update-greeting-1", tip)
        >>> await repo.aclose()
    """

    def __init__(
        self,
        config: GitHubConfig,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """Initialize the adapter.

        Args:
            config: GitHub configuration. Token and repo are required.
            transport: Optional httpx transport, e.g. ``httpx.MockTransport``
                in tests.

        Raises:
            ConfigurationError: If token or repository are missing/malformed.
        """
        self._owner, self._name = require_github_coordinates(config)
        self._config = config
        self._client = httpx.AsyncClient(
            base_url=config.api_base_url,
            timeout=config.request_timeout,
            transport=transport,
            headers={
                "Authorization": f"Bearer {config.token}",
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": GITHUB_API_VERSION,
            },
        )
        self._logger = logger.bind(
            component="github_repository",
            repo=f"{self._owner}/{self._name}",
        )

    # =========================================================================
    # Paths
    # =========================================================================

    @property
    def _repo_path(self) -> str:
        return f"/repos/{quote(self._owner, safe='')}/{quote(self._name, safe='')}"

    def _contents_path(self, path: str) -> str:
        return f"{self._repo_path}/contents/{quote(path.lstrip('/'), safe='/')}"

    # =========================================================================
    # Transport
    # =========================================================================

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: Optional[dict[str, Any]] = None,
        params: Optional[dict[str, Any]] = None,
    ) -> httpx.Response:
        """Send one request and translate failures into Remote* errors."""
        try:
            response = await self._client.request(method, path, json=json, params=params)
        except httpx.HTTPError as exc:
            raise RemoteAPIError(
                message=f"GitHub request failed: {exc}",
                details={"method": method, "path": path},
            ) from exc

        self._logger.debug(
            "github_request",
            method=method,
            path=path,
            status_code=response.status_code,
        )

        if response.is_success:
            return response

        message = _error_message(response)
        details = {"method": method, "path": path}
        if response.status_code == 404:
            raise RemoteNotFoundError(message=message, details=details)
        if response.status_code == 409:
            raise RemoteConflictError(message=message, details=details)
        raise RemoteAPIError(
            message=message,
            status_code=response.status_code,
            details=details,
        )

    @staticmethod
    def _json_object(response: httpx.Response) -> dict[str, Any]:
        try:
            data = response.json()
        except ValueError as exc:
            raise RemoteAPIError(
                message="GitHub returned a non-JSON response",
                status_code=response.status_code,
            ) from exc
        if not isinstance(data, dict):
            raise RemoteAPIError(
                message="GitHub returned an unexpected response shape",
                status_code=response.status_code,
            )
        return data

    # =========================================================================
    # RemoteRepository Interface
    # =========================================================================

    async def get_file(self, path: str, ref: str) -> Optional[RemoteFileHandle]:
        try:
            response = await self._request(
                "GET", self._contents_path(path), params={"ref": ref}
            )
        except RemoteNotFoundError:
            # Expected before the first sync ever committed the file.
            return None

        try:
            data = response.json()
        except ValueError as exc:
            raise RemoteAPIError(
                message="GitHub returned a non-JSON response",
                status_code=response.status_code,
                details={"path": path, "ref": ref},
            ) from exc
        if isinstance(data, list):
            raise RemoteAPIError(
                message="Path points to a directory, not a file",
                details={"path": path, "ref": ref},
            )
        if not isinstance(data, dict) or data.get("type") != "file":
            raise RemoteAPIError(
                message="Path does not point to a file",
                details={"path": path, "ref": ref},
            )
        if data.get("encoding", "base64") != "base64":
            raise RemoteAPIError(
                message="File content is not available inline (file too large)",
                details={"path": path, "ref": ref, "encoding": data.get("encoding")},
            )

        try:
            content = base64.b64decode(data.get("content") or "").decode("utf-8")
            sha = str(data["sha"])
        except (ValueError, KeyError, TypeError) as exc:
            # binascii.Error and UnicodeDecodeError are both ValueErrors.
            raise RemoteAPIError(
                message=f"Unreadable file content from GitHub: {exc}",
                details={"path": path, "ref": ref},
            ) from exc
        return RemoteFileHandle(sha=sha, content=content)

    async def get_branch_tip(self, branch: str) -> str:
        response = await self._request(
            "GET", f"{self._repo_path}/branches/{quote(branch, safe='')}"
        )
        data = self._json_object(response)
        try:
            return str(data["commit"]["sha"])
        except (KeyError, TypeError) as exc:
            raise RemoteAPIError(
                message="Branch response did not include a commit sha",
                details={"branch": branch},
            ) from exc

    async def create_branch(self, name: str, sha: str) -> None:
        await self._request(
            "POST",
            f"{self._repo_path}/git/refs",
            json={"ref": f"refs/heads/{name}", "sha": sha},
        )
        self._logger.info("github_branch_created", branch=name, sha=sha)

    async def put_file(
        self,
        path: str,
        branch: str,
        content: str,
        message: str,
        sha: Optional[str] = None,
    ) -> None:
        payload: dict[str, Any] = {
            "message": message,
            "content": base64.b64encode(content.encode("utf-8")).decode("ascii"),
            "branch": branch,
        }
        if sha:
            payload["sha"] = sha

        await self._request("PUT", self._contents_path(path), json=payload)
        self._logger.info(
            "github_file_committed",
            path=path,
            branch=branch,
            conditional=bool(sha),
        )

    async def create_pull_request(
        self,
        head: str,
        base: str,
        title: str,
        body: str,
    ) -> str:
        response = await self._request(
            "POST",
            f"{self._repo_path}/pulls",
            json={"title": title, "body": body, "head": head, "base": base},
        )
        data = self._json_object(response)
        url = data.get("html_url")
        if not url:
            raise RemoteAPIError(
                message="Pull request response did not include html_url",
                details={"head": head, "base": base},
            )
        self._logger.info("github_pull_request_opened", head=head, base=base, url=url)
        return str(url)

    async def delete_branch(self, name: str) -> None:
        await self._request(
            "DELETE", f"{self._repo_path}/git/refs/heads/{quote(name, safe='/')}"
        )
        self._logger.info("github_branch_deleted", branch=name)

    async def aclose(self) -> None:
        await self._client.aclose()

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(repo={self._owner}/{self._name})"
