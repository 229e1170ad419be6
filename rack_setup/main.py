"""FastAPI application factory with lifespan context manager."""

from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI

from rack_setup.config import Settings
from rack_setup.exceptions import register_exception_handlers

logger = logging.getLogger(__name__)

_start_time: float = 0.0


def get_uptime() -> int:
    """Return process uptime in seconds."""
    return int(time.monotonic() - _start_time)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: configure logging and open the rack setup session."""
    global _start_time
    _start_time = time.monotonic()

    settings: Settings = app.state.settings

    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    from rack_setup.services import RackSetupService

    our_baseboard = settings.our_baseboard()
    app.state.rack_setup = RackSetupService(our_baseboard=our_baseboard)

    logger.info(
        "Rack setup API started (running on %s)",
        our_baseboard if our_baseboard is not None else "unknown baseboard",
    )

    yield

    logger.info("Rack setup API stopped")


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    if settings is None:
        settings = Settings()

    version = "1.0.0"
    version_file = Path(__file__).parent.parent / "VERSION"
    if version_file.exists():
        version = version_file.read_text().strip()

    from rack_setup.models.error import ErrorResponse

    app = FastAPI(
        title="Rack Setup API",
        version=version,
        summary="Accumulates and validates rack initialization settings",
        lifespan=lifespan,
        responses={
            400: {"model": ErrorResponse},
            409: {"model": ErrorResponse},
        },
    )

    app.state.settings = settings
    app.state.version = version

    register_exception_handlers(app)

    from rack_setup.routers import health, inventory, rss

    app.include_router(health.router)
    app.include_router(inventory.router)
    app.include_router(rss.router)

    return app


# Default app instance for uvicorn
app = create_app()
