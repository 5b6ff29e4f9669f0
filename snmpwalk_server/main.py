"""
snmpwalk-server - FastAPI Application Entry Point.
"""
from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI

from snmpwalk_server import __version__
from snmpwalk_server.api.routes import api_router, health_router
from snmpwalk_server.core.config import Settings, get_settings
from snmpwalk_server.services.registry import start_registration
from snmpwalk_server.snmp.engine import SnmpWalkEngine

logger = logging.getLogger(__name__)


def configure_logging(debug: bool = False) -> None:
    """Configure root logging once for the process."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan management.

    Startup: launch the one-shot registration task (if enabled) without
    waiting for it.
    Shutdown: cancel the registration task if it is still in flight.
    """
    settings: Settings = app.state.settings
    logger.info(
        "Server started: %s:%d%s/snmpwalk",
        settings.listen_addr, settings.listen_port, settings.api_prefix,
    )

    task: asyncio.Task | None = None
    if settings.registry.enabled:
        task = start_registration(settings)
    app.state.registration_task = task

    yield

    if task is not None and not task.done():
        task.cancel()
        logger.info("Registration task cancelled at shutdown")


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="SNMP v2c GetBulk walk gateway",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.walk_engine = SnmpWalkEngine(strict=settings.snmp_strict)

    app.include_router(api_router, prefix=settings.api_prefix)
    app.include_router(health_router)

    return app
