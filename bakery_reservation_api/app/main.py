"""
Main entrypoint for the Bakery Reservation API.

This module assembles the FastAPI application: it sets up logging,
includes the versioned routers, applies database migrations on start-up
and registers the daily sales rollup scheduler.  The ``create_app``
function builds the app, which is then instantiated at module import
time as ``app``, so it can be served with::

    uvicorn bakery_reservation_api.app.main:app --reload
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from .api.v1.router import router as v1_router
from .core.config import Settings, settings
from .core.db import init_db
from .core.logging_config import setup_logging
from .services.sales_rollup import SalesRollupScheduler


def create_app(config: Settings = settings) -> FastAPI:
    """Create and configure a FastAPI application.

    The sales rollup scheduler is built from ``config`` and kept on
    ``app.state.sales_rollup_scheduler``; it is started with the
    application and stopped on shutdown.  Set ``SALES_ROLLUP_ENABLED``
    to false to run the API without it.
    """
    setup_logging(config.log_level, config.log_file or None)
    logger = logging.getLogger(__name__)

    scheduler = SalesRollupScheduler.from_settings(config) if config.sales_rollup_enabled else None

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        # Apply migrations before the first request is served.
        init_db()
        if scheduler is not None:
            scheduler.start()
        logger.info("%s %s started", config.project_name, config.api_version)
        try:
            yield
        finally:
            if scheduler is not None:
                await scheduler.stop()

    app = FastAPI(
        title=config.project_name,
        version=config.api_version,
        debug=config.debug,
        lifespan=lifespan,
    )
    app.state.sales_rollup_scheduler = scheduler
    app.include_router(v1_router, prefix="/api/v1")
    return app


app = create_app()
