"""
textsync.core.config - Configuration Management
=================================================

Configuration for TextSync. Values are resolved with the following priority
(highest first):

    1. Explicit constructor arguments (load_config passes YAML values here)
    2. Environment variables (prefixed with TEXTSYNC_)
    3. Default values defined in the models below

Architecture Context:
    TextSyncConfig is created once at startup and handed down:

        TextSyncConfig
            ├── GitHubConfig     → GitHubRepository, RemoteFileSynchronizer
            └── (other settings) → TextSyncService, HTTP app, logging

PR Mode:
    GitHub synchronization is optional. It is enabled only when both a token
    and a repository are configured (``GitHubConfig.enabled``). Without them
    the service still stores texts in memory but never talks to GitHub.

Usage:
    # Load from environment variables:
    config = TextSyncConfig()

    # Load from YAML file:
    config = load_config("textsync.yaml")

    # Explicit overrides:
    config = TextSyncConfig(github=GitHubConfig(token="ghp_...", repo="acme/site"))

Environment Variables:
    TEXTSYNC_LOG_LEVEL=DEBUG
    TEXTSYNC_PORT=8080
    TEXTSYNC_GITHUB__TOKEN=ghp_...
    TEXTSYNC_GITHUB__REPO=acme/site
    TEXTSYNC_GITHUB__BRANCH=main
    TEXTSYNC_GITHUB__TARGET_PATH=artifacts/texts.json
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal, Optional

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings

from textsync.core.exceptions import ConfigurationError


# =============================================================================
# GitHub Configuration
# =============================================================================
# Repository coordinates, credentials and the three message templates used
# when a change is mirrored as a pull request. Templates accept the literal
# placeholders {key} and {timestamp}.
# =============================================================================
class GitHubConfig(BaseModel):
    """Configuration for the GitHub pull-request synchronization.

    Attributes:
        provider: Which remote adapter to build: "github" for the real REST
            API, "mock" for the in-memory simulated repository.
        token: Personal access or app token used as a bearer credential.
        repo: Repository coordinates in ``owner/name`` form.
        branch: Base branch that pull requests target and that working
            branches are cut from.
        target_path: Path of the shared artifact file inside the repository.
        commit_message_template: Commit message, with {key}/{timestamp}.
        pr_title_template: Pull request title, with {key}/{timestamp}.
        pr_body_template: Pull request body, with {key}/{timestamp}.
        branch_prefix: Prefix of every per-change working branch name.
        api_base_url: GitHub REST API root (override for GitHub Enterprise).
        request_timeout: Per-request HTTP timeout in seconds.
    """

    provider: str = Field(
        default="github",
        description="Remote adapter: 'github' or 'mock'",
    )
    token: Optional[str] = Field(
        default=None,
        description="GitHub token (None disables PR mode)",
    )
    repo: Optional[str] = Field(
        default=None,
        description="Repository in 'owner/name' form (None disables PR mode)",
    )
    branch: str = Field(
        default="main",
        description="Base branch for working branches and pull requests",
    )
    target_path: str = Field(
        default="artifacts/texts.json",
        description="Path of the artifact file inside the repository",
    )
    commit_message_template: str = Field(
        default="Update text artifact for {key} - {timestamp}",
        description="Commit message template ({key}, {timestamp})",
    )
    pr_title_template: str = Field(
        default="Text Update: {key}",
        description="Pull request title template ({key}, {timestamp})",
    )
    pr_body_template: str = Field(
        default="Automated text update for {key} at {timestamp}",
        description="Pull request body template ({key}, {timestamp})",
    )
    branch_prefix: str = Field(
        default="text-update-",
        description="Prefix for per-change working branch names",
    )
    api_base_url: str = Field(
        default="https://api.github.com",
        description="GitHub REST API base URL",
    )
    request_timeout: float = Field(
        default=30.0,
        gt=0,
        description="HTTP timeout in seconds for a single GitHub request",
    )

    @property
    def enabled(self) -> bool:
        """True when both token and repository are configured (PR mode)."""
        return bool(self.token and self.repo)

    @property
    def owner_and_name(self) -> tuple[str, str]:
        """Split ``repo`` into ``(owner, name)``.

        Raises:
            ConfigurationError: If ``repo`` is missing or malformed.
        """
        owner, _, name = (self.repo or "").partition("/")
        if not owner or not name or "/" in name:
            raise ConfigurationError(
                message=f"GitHub repository must be 'owner/name', got {self.repo!r}",
                error_code="INVALID_GITHUB_REPO",
                details={"repo": self.repo},
            )
        return owner, name


# =============================================================================
# Main Configuration
# =============================================================================
# Environment Variable Mapping:
#   TEXTSYNC_LOG_LEVEL          → config.log_level
#   TEXTSYNC_PORT               → config.port
#   TEXTSYNC_GITHUB__TOKEN      → config.github.token (nested, double underscore)
#   TEXTSYNC_GITHUB__REPO       → config.github.repo
# =============================================================================
class TextSyncConfig(BaseSettings):
    """Top-level configuration for the TextSync service.

    Attributes:
        environment: Deployment environment.
        log_level: Logging level applied by ``configure_logging``.
        host: Interface the HTTP server binds to.
        port: Port the HTTP server listens on.
        cors_origins: Origins allowed to call the HTTP API from a browser.
        sync_timeout_seconds: Caller-level timeout wrapped around a whole
            sync call. A working branch created before the timeout fires is
            left behind.
        bootstrap_from_remote: Load the remote artifact file into the store
            when the service starts (PR mode only).
        github: GitHub synchronization settings (see GitHubConfig).

    Example:
        >>> config = TextSyncConfig(
        ...     log_level="DEBUG",
        ...     github=GitHubConfig(token="ghp_x", repo="acme/site"),
        ... )
        >>> config.github.enabled
        True
    """

    # -------------------------------------------------------------------------
    # General Settings
    # -------------------------------------------------------------------------
    environment: Literal["dev", "staging", "prod"] = Field(
        default="dev",
        description="Deployment environment",
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level: DEBUG, INFO, WARNING, ERROR, CRITICAL",
    )
    host: str = Field(
        default="0.0.0.0",
        description="HTTP bind address",
    )
    port: int = Field(
        default=3000,
        ge=1,
        le=65535,
        description="HTTP listen port",
    )
    cors_origins: list[str] = Field(
        default_factory=lambda: ["*"],
        description="Origins allowed by the CORS middleware",
    )
    sync_timeout_seconds: float = Field(
        default=60.0,
        gt=0,
        le=600,
        description="Timeout in seconds around one complete sync call",
    )
    bootstrap_from_remote: bool = Field(
        default=False,
        description="Load the remote artifact into the store on startup",
    )

    # -------------------------------------------------------------------------
    # Nested Configurations
    # -------------------------------------------------------------------------
    github: GitHubConfig = Field(
        default_factory=GitHubConfig,
        description="GitHub synchronization configuration",
    )

    model_config = {
        "env_prefix": "TEXTSYNC_",
        "env_nested_delimiter": "__",
        "case_sensitive": False,
    }


# =============================================================================
# Eager Validation
# =============================================================================
def require_github_coordinates(github: GitHubConfig) -> tuple[str, str]:
    """Validate that the GitHub coordinates needed for syncing are present.

    Called when a synchronizer or GitHub adapter is constructed, so a
    missing token or repository fails immediately instead of on first use.

    Args:
        github: The GitHub configuration to check.

    Returns:
        The ``(owner, name)`` pair parsed from ``github.repo``.

    Raises:
        ConfigurationError: If the token or repository is missing, or the
            repository is not in ``owner/name`` form.
    """
    if not github.token or not github.repo:
        raise ConfigurationError(
            message="GitHub credentials not provided",
            error_code="MISSING_GITHUB_CREDENTIALS",
            details={
                "token_set": bool(github.token),
                "repo_set": bool(github.repo),
            },
        )
    if not github.branch or not github.target_path:
        raise ConfigurationError(
            message="GitHub base branch and target path must not be empty",
            error_code="MISSING_GITHUB_TARGET",
            details={"branch": github.branch, "target_path": github.target_path},
        )
    return github.owner_and_name


# =============================================================================
# Configuration Loader
# =============================================================================
def load_config(path: Optional[str] = None) -> TextSyncConfig:
    """Load configuration from a YAML file and/or environment variables.

    Args:
        path: Path to a YAML configuration file. If None, looks for
            'textsync.yaml' in the current directory and falls back to pure
            defaults + environment variables when it is absent.

    Returns:
        A fully validated TextSyncConfig instance.

    Raises:
        FileNotFoundError: If an explicit path is provided but doesn't exist.
        ConfigurationError: If the YAML file cannot be parsed.
    """
    if path is None:
        default_path = Path("textsync.yaml")
        if default_path.exists():
            path = str(default_path)

    yaml_data: dict[str, Any] = {}
    if path is not None:
        config_path = Path(path)
        if not config_path.exists():
            raise FileNotFoundError(
                f"Configuration file not found: {path}. "
                f"Create one or use TEXTSYNC_* environment variables."
            )

        with open(config_path) as f:
            try:
                raw_data = yaml.safe_load(f)
            except yaml.YAMLError as exc:
                raise ConfigurationError(
                    message=f"Invalid YAML in configuration file: {path}",
                    error_code="INVALID_CONFIG_FILE",
                    details={"path": path, "error": str(exc)},
                ) from exc
            if isinstance(raw_data, dict):
                yaml_data = raw_data

    # YAML values are passed as constructor args; environment variables are
    # loaded automatically by BaseSettings.
    return TextSyncConfig(**yaml_data)


def get_default_config() -> TextSyncConfig:
    """Create a TextSyncConfig from defaults and environment variables."""
    return TextSyncConfig()
