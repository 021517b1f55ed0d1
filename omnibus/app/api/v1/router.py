"""
API v1 Router.

Aggregates all v1 API endpoints.
"""

from fastapi import APIRouter
from omnibus.app.api.v1.endpoints import (
    auth, routes, vehicles, schedules,
    bookings, driver, subscriptions, messages
)

router = APIRouter()

# Identity
router.include_router(auth.router)

# Reference data
router.include_router(routes.router)
router.include_router(vehicles.router)
router.include_router(schedules.router)

# Booking lifecycle
router.include_router(bookings.router)
router.include_router(driver.router)

# Subscriptions
router.include_router(subscriptions.router)

# Messaging
router.include_router(messages.router)
