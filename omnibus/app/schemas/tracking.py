"""
Vehicle tracking schemas.
"""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional

from omnibus.app.models.enums import BookingStatus


class LocationReport(BaseModel):
    """Position pushed by a driver for one of their vehicles."""
    vehicle_id: int
    booking_id: Optional[int] = Field(None, description="Custom booking being served, if any")
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    speed_kmh: Optional[float] = Field(None, ge=0)
    heading: Optional[int] = Field(None, ge=0, le=360)


class LocationResponse(BaseModel):
    id: int
    vehicle_id: int
    booking_id: Optional[int]
    latitude: float
    longitude: float
    speed_kmh: Optional[float]
    heading: Optional[int]
    recorded_at: datetime
    
    class Config:
        from_attributes = True


class TrackingView(BaseModel):
    """Last known vehicle position for a passenger's booking."""
    booking_id: int
    booking_number: str
    status: BookingStatus
    vehicle_id: Optional[int]
    vehicle_number: Optional[str]
    pickup_point: str
    dropoff_point: str
    pickup_coordinates: Optional[str]
    dropoff_coordinates: Optional[str]
    location: Optional[LocationResponse] = None  # None until the driver reports a position
