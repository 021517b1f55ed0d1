"""
Vehicle API endpoints.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from omnibus.app.db.session import get_db
from omnibus.app.core.guards import require_admin, require_role
from omnibus.app.models.enums import UserType
from omnibus.app.schemas.reference import VehicleCreate, VehicleResponse
from omnibus.app.services.reference_data import ReferenceDataService

router = APIRouter(prefix="/vehicles", tags=["Vehicles"])


@router.post("", response_model=VehicleResponse, status_code=status.HTTP_201_CREATED)
async def create_vehicle(
    data: VehicleCreate,
    current_user: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """
    Register a vehicle (Admin only).
    
    The capacity is the seat limit for every schedule using the vehicle.
    """
    return await ReferenceDataService.create_vehicle(db, data, current_user)


@router.get("/mine", response_model=List[VehicleResponse])
async def list_my_vehicles(
    current_user: dict = Depends(require_role([UserType.DRIVER])),
    db: AsyncSession = Depends(get_db)
):
    """Vehicles assigned to the calling driver."""
    return await ReferenceDataService.list_driver_vehicles(db, current_user["user_id"])
