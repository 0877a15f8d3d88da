"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from temporalio.client import Client as TemporalClient

from app.core.config import settings
from app.core.errors import DomainError
from app.core.logging import setup_logging
from app.db import init_db
from app.routes import (
    contracts_router,
    dashboard_router,
    health_router,
    notifications_router,
    sweeps_router,
    tasks_router,
    users_router,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize resources on startup, cleanup on shutdown."""
    setup_logging()

    # Initialize database tables
    init_db()

    # Temporal client - tolerate failure
    try:
        app.state.temporal = await TemporalClient.connect(
            settings.TEMPORAL_ADDRESS,
            namespace=settings.TEMPORAL_NAMESPACE,
        )
        logger.info("Connected to Temporal at %s", settings.TEMPORAL_ADDRESS)
    except Exception as e:
        logger.warning("Failed to connect to Temporal: %s", e)
        app.state.temporal = None

    yield


app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)


@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError):
    """Map lifecycle errors to their HTTP status codes."""
    if exc.status_code >= 500:
        logger.error("Unhandled domain error on %s: %s", request.url.path, exc.message)
    else:
        logger.info("%s on %s: %s", type(exc).__name__, request.url.path, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "error": type(exc).__name__},
    )


# Register routers
app.include_router(health_router)
app.include_router(users_router)
app.include_router(contracts_router)
app.include_router(tasks_router)
app.include_router(notifications_router)
app.include_router(dashboard_router)
app.include_router(sweeps_router)
