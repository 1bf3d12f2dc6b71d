"""Application lifespan: startup and shutdown.

Only wiring of infrastructure here: the shared outbound HTTP client (SMS
gateway) and the SQL engine dispose.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

import httpx
from fastapi import FastAPI

from school_auth.core.config import get_settings
from school_auth.shared.logging import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def create_lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Run startup then yield; on exit run shutdown."""
    setup_logging()
    settings = get_settings()

    # ---- Startup ----
    # Shared HTTP client for the SMS gateway (connection reuse).
    app.state.http_client = httpx.AsyncClient(
        timeout=settings.otp_delivery_timeout_seconds
    )
    logger.info(
        "%s %s started (otp channel=%s)",
        settings.app_name,
        settings.app_version,
        settings.otp_delivery_channel,
    )

    yield

    # ---- Shutdown ----
    if getattr(app.state, "http_client", None) is not None:
        await app.state.http_client.aclose()
        app.state.http_client = None
        logger.info("HTTP client closed")

    from school_auth.infrastructure.persistence.database import dispose_engine

    await dispose_engine()
