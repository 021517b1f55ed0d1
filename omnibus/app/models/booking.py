"""
Booking database model.

A booking is a passenger's seat reservation. Standard bookings reference a
schedule and consume its vehicle capacity on the travel date; custom
bookings carry free-text locations and wait for a driver to respond.
"""

from sqlalchemy import (
    Column, Integer, String, Text, Numeric, Date, DateTime, ForeignKey, Enum, CheckConstraint, Index
)
from sqlalchemy.sql import func
from omnibus.app.db.session import Base
from omnibus.app.models.enums import BookingType, BookingStatus, DriverResponse, PaymentStatus


class Booking(Base):
    """
    Booking model.
    
    Never physically deleted: cancellation is a status value and cancelled
    bookings stop counting against schedule capacity.
    """
    __tablename__ = "bookings"
    
    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    booking_number = Column(String(64), unique=True, nullable=False, index=True)
    
    # References
    user_id = Column(Integer, ForeignKey('users.id'), nullable=False, index=True)
    schedule_id = Column(Integer, ForeignKey('schedules.id'), nullable=True, index=True)
    booking_type = Column(Enum(BookingType), default=BookingType.STANDARD, nullable=False)
    
    # Named stops (standard) or free-text locations (custom)
    pickup_point = Column(String(200), nullable=False)
    dropoff_point = Column(String(200), nullable=False)
    custom_pickup_point = Column(String(500), nullable=True)
    custom_dropoff_point = Column(String(500), nullable=True)
    pickup_coordinates = Column(String(64), nullable=True)  # "lat,lng"
    dropoff_coordinates = Column(String(64), nullable=True)  # "lat,lng"
    
    number_of_seats = Column(Integer, nullable=False, default=1)
    total_fare = Column(Numeric(10, 2), nullable=False)
    payment_method = Column(String(50), nullable=True)
    payment_status = Column(Enum(PaymentStatus), default=PaymentStatus.PENDING, nullable=False)
    
    status = Column(Enum(BookingStatus), default=BookingStatus.CONFIRMED, nullable=False, index=True)
    
    # Driver response (only set once a driver acted on the request)
    driver_response = Column(Enum(DriverResponse), nullable=True)
    responded_by_id = Column(Integer, ForeignKey('users.id'), nullable=True)
    alternative_pickup = Column(String(500), nullable=True)
    alternative_dropoff = Column(String(500), nullable=True)
    driver_notes = Column(Text, nullable=True)
    
    booking_date = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    travel_date = Column(Date, nullable=False)
    
    __table_args__ = (
        CheckConstraint("number_of_seats >= 1", name="check_booking_seats_positive"),
        Index("ix_bookings_schedule_travel_date", "schedule_id", "travel_date"),
    )
    
    @property
    def display_pickup(self) -> str:
        return self.custom_pickup_point or self.pickup_point
    
    @property
    def display_dropoff(self) -> str:
        return self.custom_dropoff_point or self.dropoff_point
    
    def __repr__(self):
        return f"<Booking(id={self.id}, number='{self.booking_number}', status='{self.status.value}')>"
