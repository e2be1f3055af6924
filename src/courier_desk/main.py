"""FastAPI application entry point."""

from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api.routes import backup, courier, entries, extraction, health, reports, steadfast
from .api.routes import settings as settings_routes
from .config import settings
from .persistence.store import EntryStore
from .services.statistics import CourierStatisticsService

logger = logging.getLogger(__name__)


def create_app(store: EntryStore | None = None) -> FastAPI:
    app = FastAPI(title=settings.app_name, root_path="")
    if settings.frontend_allowed_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=list(settings.frontend_allowed_origins),
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    app.state.store = store if store is not None else EntryStore().hydrate()
    app.state.statistics = CourierStatisticsService()
    logger.info(f"Loaded {len(app.state.store.entries)} stored entries")

    # Root endpoint for diagnostics
    @app.get("/")
    def root():
        return {
            "service": settings.app_name,
            "status": "running",
            "api_prefix": settings.api_prefix,
            "health": f"{settings.api_prefix}/health",
            "docs": "/docs",
        }

    app.include_router(health.router, prefix=settings.api_prefix)
    app.include_router(courier.router, prefix=settings.api_prefix)
    app.include_router(steadfast.router, prefix=settings.api_prefix)
    app.include_router(extraction.router, prefix=settings.api_prefix)
    app.include_router(settings_routes.router, prefix=settings.api_prefix)
    app.include_router(entries.router, prefix=settings.api_prefix)
    app.include_router(reports.router, prefix=settings.api_prefix)
    app.include_router(backup.router, prefix=settings.api_prefix)
    return app


app = create_app()
