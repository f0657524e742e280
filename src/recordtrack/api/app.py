"""FastAPI application with lifespan and router mounting."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from recordtrack.api.routes import admin, health, records
from recordtrack.core.config import AppSettings
from recordtrack.core.log import configure_logging
from recordtrack.tracking import RecordTracker, create_scheduler, create_tracker


def create_app(tracker: RecordTracker | None = None, settings: AppSettings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        tracker: Tracker shared with the orchestrator. A fresh one is built
            from settings when omitted.
        settings: Application settings; loaded from the environment when omitted.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        """Initialize and tear down application resources."""
        app_settings = settings or AppSettings()
        configure_logging(app_settings.log_level)
        app.state.settings = app_settings
        app.state.tracker = tracker or create_tracker(app_settings)

        scheduler = None
        if app_settings.maintenance.enabled:
            scheduler = create_scheduler(app.state.tracker, app_settings)
            scheduler.start()
        try:
            yield
        finally:
            if scheduler is not None:
                scheduler.stop()

    app = FastAPI(
        title="recordtrack diagnostics",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.include_router(health.router)
    app.include_router(records.router)
    app.include_router(admin.router, prefix="/admin")
    return app
