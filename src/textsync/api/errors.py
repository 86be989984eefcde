"""
Error handlers for the TextSync HTTP API.

Every error leaves the API in the same envelope as a regular response:

    {"success": false, "error": "<human readable>", ...}
"""

from __future__ import annotations

import structlog
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from textsync.core.exceptions import ArtifactError, TextSyncError

logger = structlog.get_logger()


def error_response(status_code: int, error: str, **extra: object) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": error, **jsonable_encoder(extra)},
    )


def register_error_handlers(app: FastAPI) -> None:
    """Register the envelope-producing exception handlers on ``app``."""

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        logger.info(
            "request_validation_failed",
            path=request.url.path,
            error_count=len(exc.errors()),
        )
        details = [
            {
                "field": ".".join(str(loc) for loc in error["loc"]),
                "message": error["msg"],
                "code": error["type"],
            }
            for error in exc.errors()
        ]
        return error_response(400, "Invalid request body", details=details)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404 and request.url.path.startswith("/api"):
            return error_response(404, "API endpoint not found")
        return error_response(exc.status_code, str(exc.detail))

    @app.exception_handler(TextSyncError)
    async def textsync_exception_handler(request: Request, exc: TextSyncError):
        status_code = 400 if isinstance(exc, ArtifactError) else 500
        error = exc.to_dict()
        logger.warning("request_failed", path=request.url.path, **error)
        return error_response(
            status_code,
            error["message"],
            errorCode=error["error_code"],
            errorType=error["error_type"],
        )

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception):
        logger.error(
            "unhandled_exception",
            path=request.url.path,
            error_type=type(exc).__name__,
            exc_info=exc,
        )
        return error_response(500, "Internal server error")
