"""
FastAPI Application Entry Point.

This is the main application file for the Omnibus commuter booking API.
"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from omnibus.app.core.config import settings
from omnibus.app.core.logging_config import configure_logging
from omnibus.app.core.observability import ObservabilityMiddleware
from omnibus.app.core.redis_client import ping_redis
from omnibus.app.api.v1.router import router as api_v1_router
from omnibus.app.db.session import engine, Base, AsyncSessionLocal
from omnibus.app.core.exceptions import (
    AppException,
    app_exception_handler,
    http_exception_handler,
    validation_exception_handler,
    generic_exception_handler
)
from omnibus.app.services.reference_data import seed_demo_data

# Import models to ensure they are registered with Base
from omnibus.app.models.user import User
from omnibus.app.models.route import Route
from omnibus.app.models.vehicle import Vehicle
from omnibus.app.models.schedule import Schedule
from omnibus.app.models.booking import Booking
from omnibus.app.models.subscription import Subscription
from omnibus.app.models.message import Message
from omnibus.app.models.vehicle_location import VehicleLocation
from omnibus.app.models.audit_log import AuditLog

configure_logging()
logger = logging.getLogger("omnibus.app")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for application startup/shutdown.

    1. Creates database tables on startup.
    2. Seeds the demo network when SEED_DEMO_DATA is set.
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    if settings.seed_demo_data:
        async with AsyncSessionLocal() as db:
            await seed_demo_data(db)

    logger.info("%s %s started", settings.app_name, settings.api_version)
    yield
    await engine.dispose()


# Initialize FastAPI application
app = FastAPI(
    title=settings.app_name,
    version=settings.api_version,
    debug=settings.debug,
    description="Commuter ride booking: routes, schedules, seat bookings and subscriptions",
    lifespan=lifespan,
)

app.add_middleware(ObservabilityMiddleware)

# Register global exception handlers
app.add_exception_handler(AppException, app_exception_handler)
app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, generic_exception_handler)


@app.get("/health", tags=["Health"])
async def health_check():
    """
    Health check endpoint.

    Returns:
        dict: Status and application information
    """
    return {
        "status": "healthy",
        "app_name": settings.app_name,
        "version": settings.api_version,
        "redis": "up" if await ping_redis() else "down",
    }


# Include API v1 router
app.include_router(api_v1_router, prefix=f"/{settings.api_version}")


@app.get("/", tags=["Root"])
async def root():
    """
    Root endpoint.

    Returns:
        dict: Welcome message and API documentation links
    """
    return {
        "message": "Welcome to the Omnibus Transport API",
        "docs": "/docs",
        "health": "/health",
    }
