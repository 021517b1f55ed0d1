"""
Booking schemas.

Booking requests are a tagged union on ``booking_type``: standard requests
name a schedule and its stops, custom requests carry free-text locations.
"""

from pydantic import BaseModel, Field, field_validator
from datetime import date, datetime
from decimal import Decimal
from typing import Optional, List, Literal, Tuple, Union, Annotated

from omnibus.app.models.enums import BookingType, BookingStatus, DriverResponse, PaymentStatus
from omnibus.app.schemas.reference import ScheduleWithDetails

Coordinates = Tuple[float, float]


def _validate_coordinates(value: Optional[Coordinates]) -> Optional[Coordinates]:
    if value is None:
        return value
    lat, lng = value
    if not -90 <= lat <= 90 or not -180 <= lng <= 180:
        raise ValueError("Coordinates must be [latitude, longitude] within valid ranges")
    return value


class StandardBookingRequest(BaseModel):
    """Seat booking on a fixed schedule."""
    booking_type: Literal["standard"]
    schedule_id: int
    pickup_point: str = Field(..., min_length=1, max_length=200)
    dropoff_point: str = Field(..., min_length=1, max_length=200)
    number_of_seats: int = Field(1, ge=1, le=60)
    travel_date: date
    payment_method: Optional[str] = Field(None, max_length=50)


class CustomBookingRequest(BaseModel):
    """Point-to-point request that a driver has to confirm."""
    booking_type: Literal["custom"]
    custom_pickup_point: str = Field(..., min_length=1, max_length=500)
    custom_dropoff_point: str = Field(..., min_length=1, max_length=500)
    pickup_coords: Optional[Coordinates] = Field(None, description="[lat, lng]")
    dropoff_coords: Optional[Coordinates] = Field(None, description="[lat, lng]")
    fare_per_seat: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2, description="Quoted fare per seat")
    number_of_seats: int = Field(1, ge=1, le=60)
    travel_date: date
    payment_method: Optional[str] = Field(None, max_length=50)
    
    @field_validator("pickup_coords", "dropoff_coords")
    @classmethod
    def validate_coords(cls, value):
        return _validate_coordinates(value)


BookingRequest = Annotated[
    Union[StandardBookingRequest, CustomBookingRequest],
    Field(discriminator="booking_type")
]


class DriverResponseRequest(BaseModel):
    """Driver's answer to a pending booking."""
    driver_response: DriverResponse
    alternative_pickup: Optional[str] = Field(None, max_length=500)
    alternative_dropoff: Optional[str] = Field(None, max_length=500)
    driver_notes: Optional[str] = Field(None, max_length=2000)


class UserResponseRequest(BaseModel):
    """Passenger's answer to a driver's alternative offer."""
    accepted: bool


class PaymentRequest(BaseModel):
    payment_method: Optional[str] = Field(None, max_length=50)


class BookingResponse(BaseModel):
    """Stored booking fields."""
    id: int
    booking_number: str
    user_id: int
    schedule_id: Optional[int]
    booking_type: BookingType
    pickup_point: str
    dropoff_point: str
    custom_pickup_point: Optional[str]
    custom_dropoff_point: Optional[str]
    pickup_coordinates: Optional[str]
    dropoff_coordinates: Optional[str]
    display_pickup: str
    display_dropoff: str
    number_of_seats: int
    total_fare: Decimal
    payment_method: Optional[str]
    payment_status: PaymentStatus
    status: BookingStatus
    driver_response: Optional[DriverResponse]
    alternative_pickup: Optional[str]
    alternative_dropoff: Optional[str]
    driver_notes: Optional[str]
    booking_date: datetime
    travel_date: date
    
    class Config:
        from_attributes = True


class BookingWithDetails(BookingResponse):
    """
    Booking joined with schedule, route, vehicle and driver.
    
    ``schedule`` is None for custom bookings.
    """
    schedule: Optional[ScheduleWithDetails] = None


class BookingListResponse(BaseModel):
    bookings: List[BookingWithDetails]
    total: int
