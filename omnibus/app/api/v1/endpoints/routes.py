"""
Route API endpoints.

Passengers browse active routes; admins maintain them.
"""

from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from omnibus.app.db.session import get_db
from omnibus.app.core.dependencies import get_current_user
from omnibus.app.core.guards import require_admin
from omnibus.app.schemas.reference import RouteCreate, RouteUpdate, RouteResponse, RouteWithSchedules
from omnibus.app.services.reference_data import ReferenceDataService
from omnibus.app.services import booking_queries

router = APIRouter(prefix="/routes", tags=["Routes"])


@router.get("", response_model=List[RouteResponse])
async def list_routes(
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """List active routes."""
    return await ReferenceDataService.list_active_routes(db)


@router.get("/{route_id}", response_model=RouteWithSchedules)
async def get_route(
    route_id: int = Path(..., description="Route ID"),
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Route with its active schedules, vehicles and drivers."""
    return await booking_queries.get_route_with_schedules(db, route_id)


@router.post("", response_model=RouteResponse, status_code=status.HTTP_201_CREATED)
async def create_route(
    data: RouteCreate,
    current_user: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """Create a route (Admin only)."""
    return await ReferenceDataService.create_route(db, data, current_user)


@router.patch("/{route_id}", response_model=RouteResponse)
async def update_route(
    data: RouteUpdate,
    route_id: int = Path(..., description="Route ID"),
    current_user: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """Update a route or deactivate it (Admin only)."""
    return await ReferenceDataService.update_route(db, route_id, data, current_user)
