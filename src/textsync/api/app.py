"""FastAPI application factory for the TextSync API."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Optional

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from textsync import __version__
from textsync.core.config import TextSyncConfig, load_config
from textsync.core.logging import configure_logging
from textsync.facade import TextSyncService

logger = structlog.get_logger()


def create_app(
    config: Optional[TextSyncConfig] = None,
    service: Optional[TextSyncService] = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Both arguments are injectable for testing. With no arguments the
    configuration is loaded from ``textsync.yaml`` and TEXTSYNC_* variables.

    Args:
        config: Injected configuration (the service's own config if None).
        service: Injected service (built from ``config`` if None).

    Returns:
        Configured FastAPI instance.
    """
    if config is None:
        config = service.config if service is not None else load_config()
    configure_logging(config.log_level, json_output=config.environment == "prod")

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Initialize the service on start, release it on exit."""
        service_ = app.state.service
        logger.info(
            "textsync_api_starting",
            version=__version__,
            github_pr_mode=service_.github_enabled,
            environment=config.environment,
        )
        await service_.initialize()
        yield
        logger.info("textsync_api_shutting_down")
        await service_.shutdown()

    app = FastAPI(
        title="TextSync API",
        description="Approved text store mirrored to GitHub through pull requests.",
        version=__version__,
        lifespan=lifespan,
    )

    # ── Shared state ──────────────────────────────────────────────────
    app.state.service = service or TextSyncService(config)

    # ── CORS ──────────────────────────────────────────────────────────
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ── Errors ────────────────────────────────────────────────────────
    from textsync.api.errors import register_error_handlers

    register_error_handlers(app)

    # ── Routers ───────────────────────────────────────────────────────
    from textsync.api.routes.health import router as health_router
    from textsync.api.routes.texts import router as texts_router

    app.include_router(health_router)
    app.include_router(texts_router)

    return app
