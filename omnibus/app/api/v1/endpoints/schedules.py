"""
Schedule API endpoints.

Availability and capacity lookups for passengers, maintenance for admins.
"""

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from datetime import date
from typing import List

from omnibus.app.db.session import get_db
from omnibus.app.core.dependencies import get_current_user
from omnibus.app.core.guards import require_admin
from omnibus.app.domain.booking.capacity_checker import CapacityChecker
from omnibus.app.schemas.reference import (
    ScheduleCreate, ScheduleUpdate, ScheduleResponse, ScheduleWithDetails, CapacityCheckResponse
)
from omnibus.app.services.reference_data import ReferenceDataService
from omnibus.app.services import booking_queries

router = APIRouter(prefix="/schedules", tags=["Schedules"])


@router.get("/available", response_model=List[ScheduleWithDetails])
async def list_available_schedules(
    travel_date: date = Query(..., alias="date", description="Travel date (YYYY-MM-DD)"),
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Active schedules running on the weekday of ``date``.
    
    Each entry carries its route, vehicle, driver and the seats still free.
    """
    return await booking_queries.list_available_schedules(db, travel_date)


@router.get("/{schedule_id}/capacity", response_model=CapacityCheckResponse)
async def check_capacity(
    schedule_id: int = Path(..., description="Schedule ID"),
    travel_date: date = Query(..., description="Travel date (YYYY-MM-DD)"),
    seats: int = Query(1, ge=1, description="Seats wanted"),
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Whether ``seats`` still fit on the schedule on ``travel_date``."""
    result = await CapacityChecker.check_capacity(db, schedule_id, travel_date, seats)
    return CapacityCheckResponse(
        schedule_id=schedule_id,
        travel_date=travel_date,
        requested_seats=seats,
        ok=result.ok,
        available_seats=result.available_seats,
        committed_seats=result.committed_seats,
        capacity=result.capacity,
        operates_on_date=result.operates_on_date
    )


@router.post("", response_model=ScheduleResponse, status_code=status.HTTP_201_CREATED)
async def create_schedule(
    data: ScheduleCreate,
    current_user: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """Create a schedule (Admin only)."""
    return await ReferenceDataService.create_schedule(db, data, current_user)


@router.patch("/{schedule_id}", response_model=ScheduleResponse)
async def update_schedule(
    data: ScheduleUpdate,
    schedule_id: int = Path(..., description="Schedule ID"),
    current_user: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """Update times, weekdays or deactivate a schedule (Admin only)."""
    return await ReferenceDataService.update_schedule(db, schedule_id, data, current_user)
