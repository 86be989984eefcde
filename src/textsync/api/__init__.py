"""
textsync.api - HTTP Surface
=============================

Thin FastAPI layer over TextSyncService:

    GET    /health
    GET    /api/texts
    GET    /api/texts/{key}
    PUT    /api/texts/{key}
    DELETE /api/texts/{key}
"""

from textsync.api.app import create_app

__all__ = ["create_app"]
