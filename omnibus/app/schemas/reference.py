"""
Reference data schemas: routes, vehicles and schedules.

Defines request and response models for reference data management and
the enriched route/schedule read models.
"""

from pydantic import BaseModel, Field, field_validator
from datetime import date
from decimal import Decimal
from typing import Optional, List

from omnibus.app.models.enums import RouteType

WEEKDAY_NAMES = {"monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"}
TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


def _normalize_days(days: List[str]) -> List[str]:
    normalized = [d.strip().lower() for d in days]
    unknown = [d for d in normalized if d not in WEEKDAY_NAMES]
    if unknown:
        raise ValueError(f"Unknown weekday(s): {', '.join(unknown)}")
    return list(dict.fromkeys(normalized))


class RouteCreate(BaseModel):
    """Schema for creating a route."""
    name: str = Field(..., min_length=1, max_length=200)
    origin: str = Field(..., min_length=1, max_length=200)
    destination: str = Field(..., min_length=1, max_length=200)
    pickup_points: List[str] = Field(..., min_length=1, description="Ordered named pickup points")
    dropoff_points: List[str] = Field(..., min_length=1, description="Ordered named dropoff points")
    base_fare: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2, description="Per-trip fare")
    estimated_duration: int = Field(..., gt=0, description="Minutes")
    max_seats: int = Field(..., ge=1)
    route_type: RouteType = RouteType.GENERAL


class RouteUpdate(BaseModel):
    """Schema for updating a route (admin)."""
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    pickup_points: Optional[List[str]] = Field(None, min_length=1)
    dropoff_points: Optional[List[str]] = Field(None, min_length=1)
    base_fare: Optional[Decimal] = Field(None, gt=0, max_digits=10, decimal_places=2)
    estimated_duration: Optional[int] = Field(None, gt=0)
    max_seats: Optional[int] = Field(None, ge=1)
    is_active: Optional[bool] = None


class RouteResponse(BaseModel):
    id: int
    name: str
    origin: str
    destination: str
    pickup_points: List[str]
    dropoff_points: List[str]
    base_fare: Decimal
    estimated_duration: int
    max_seats: int
    route_type: RouteType
    is_active: bool
    
    class Config:
        from_attributes = True


class VehicleCreate(BaseModel):
    """Schema for registering a vehicle."""
    vehicle_number: str = Field(..., min_length=1, max_length=100, description="Unique registration number")
    driver_id: Optional[int] = Field(None, description="Owning driver")
    capacity: int = Field(..., ge=1, description="Passenger seats")
    vehicle_type: str = Field("omnibus", max_length=50)
    make: Optional[str] = Field(None, max_length=100)
    model: Optional[str] = Field(None, max_length=100)
    color: Optional[str] = Field(None, max_length=50)


class DriverSummary(BaseModel):
    id: int
    full_name: str
    phone: Optional[str]
    
    class Config:
        from_attributes = True


class VehicleResponse(BaseModel):
    id: int
    vehicle_number: str
    driver_id: Optional[int]
    capacity: int
    vehicle_type: str
    make: Optional[str]
    model: Optional[str]
    color: Optional[str]
    is_active: bool
    
    class Config:
        from_attributes = True


class VehicleWithDriver(VehicleResponse):
    driver: Optional[DriverSummary] = None


class ScheduleCreate(BaseModel):
    """Schema for creating a schedule."""
    route_id: int
    vehicle_id: int
    departure_time: str = Field(..., pattern=TIME_PATTERN, description="HH:MM")
    arrival_time: str = Field(..., pattern=TIME_PATTERN, description="HH:MM")
    days_of_week: List[str] = Field(..., min_length=1)
    
    @field_validator("days_of_week")
    @classmethod
    def validate_days(cls, value: List[str]) -> List[str]:
        return _normalize_days(value)


class ScheduleUpdate(BaseModel):
    departure_time: Optional[str] = Field(None, pattern=TIME_PATTERN)
    arrival_time: Optional[str] = Field(None, pattern=TIME_PATTERN)
    days_of_week: Optional[List[str]] = Field(None, min_length=1)
    is_active: Optional[bool] = None
    
    @field_validator("days_of_week")
    @classmethod
    def validate_days(cls, value: Optional[List[str]]) -> Optional[List[str]]:
        return _normalize_days(value) if value is not None else value


class ScheduleResponse(BaseModel):
    id: int
    route_id: int
    vehicle_id: int
    departure_time: str
    arrival_time: str
    days_of_week: List[str]
    is_active: bool
    
    class Config:
        from_attributes = True


class ScheduleWithVehicle(ScheduleResponse):
    vehicle: Optional[VehicleWithDriver] = None


class ScheduleWithDetails(ScheduleWithVehicle):
    route: Optional[RouteResponse] = None
    seats_available: Optional[int] = None


class RouteWithSchedules(RouteResponse):
    schedules: List[ScheduleWithVehicle] = []


class CapacityCheckResponse(BaseModel):
    """Seat availability for a schedule on a date."""
    schedule_id: int
    travel_date: date
    requested_seats: int
    ok: bool
    available_seats: int
    committed_seats: int
    capacity: int
    operates_on_date: bool
