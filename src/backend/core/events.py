"""
Application lifecycle event handlers.

Manages startup and shutdown tasks: database schema creation for the SQL
backend and construction of the process-wide governance engine.
"""

from typing import Callable

import structlog
from fastapi import FastAPI

from core.config import settings
from db.session import close_db, init_db
from services.governance_engine import get_governance_engine

logger = structlog.get_logger(__name__)


def create_start_app_handler(app: FastAPI) -> Callable:
    """Create startup event handler."""

    async def start_app() -> None:
        logger.info("Starting CivicVision API...", storage_backend=settings.STORAGE_BACKEND)

        if settings.STORAGE_BACKEND == "sql":
            await init_db()
            logger.info("Database initialized")

        engine = get_governance_engine()
        logger.info("Governance engine ready", owner=engine.owner, tick=engine.clock.now())

        if not settings.GOVERNANCE_ENABLED:
            logger.warning("Governance is disabled; mutating endpoints will be rejected")

        logger.info("CivicVision API started successfully")

    return start_app


def create_stop_app_handler(app: FastAPI) -> Callable:
    """Create shutdown event handler."""

    async def stop_app() -> None:
        logger.info("Shutting down CivicVision API...")

        if settings.STORAGE_BACKEND == "sql":
            await close_db()

        logger.info("CivicVision API shutdown complete")

    return stop_app
