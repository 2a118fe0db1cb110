"""FastAPI application for the AdBoard performance dashboard.

This module provides the main application setup and router configuration.
All route handlers are organized in the api/routers/ directory.

Run with: uvicorn api.main:app (or the `adboard` script)
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api import __version__
from api.dependencies import set_config_manager, set_store, set_vertical_teams
from api.routers import dashboard_router, sync_data_router, system_router
from config import ConfigManager, build_vertical_teams, configure_logging
from storage import SQLiteStore

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown."""
    config_manager = ConfigManager()
    config = config_manager.get_config()
    configure_logging(config.log_level)

    store = SQLiteStore(config.database.path)
    await store.initialize()

    set_store(store)
    set_config_manager(config_manager)
    set_vertical_teams(build_vertical_teams(config.verticals))

    logger.info(f"AdBoard API started with {len(config.verticals)} tabs")

    yield

    logger.info("AdBoard API shutting down")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance.
    """
    application = FastAPI(
        title="AdBoard",
        description="Advertising performance dashboard API",
        version=__version__,
        lifespan=lifespan,
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Configure appropriately for production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    application.include_router(system_router)
    application.include_router(dashboard_router)
    application.include_router(sync_data_router)

    return application


app = create_app()


def run() -> None:
    """Serve the API with uvicorn on the configured host and port."""
    import uvicorn

    config = ConfigManager().get_config()
    uvicorn.run("api.main:app", host=config.api_host, port=config.api_port)
