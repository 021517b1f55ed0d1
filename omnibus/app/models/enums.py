"""
Enumerations shared by the booking, subscription and reference-data models.

Values are lowercase strings because they travel verbatim over the wire.
"""

import enum


class UserType(str, enum.Enum):
    """
    User type enumeration.
    
    Roles:
        PASSENGER: Books seats and buys subscriptions (default role)
        DRIVER: Owns vehicles and answers booking requests
        ADMIN: Maintains routes, vehicles and schedules
    """
    PASSENGER = "passenger"
    DRIVER = "driver"
    ADMIN = "admin"


class RouteType(str, enum.Enum):
    SCHOOL = "school"
    WORK = "work"
    GENERAL = "general"
    CUSTOM = "custom"


class BookingType(str, enum.Enum):
    """Standard bookings consume schedule capacity, custom ones wait for a driver."""
    STANDARD = "standard"
    CUSTOM = "custom"


class BookingStatus(str, enum.Enum):
    """Booking status enumeration."""
    PENDING = "pending"
    PENDING_DRIVER_CONFIRMATION = "pending_driver_confirmation"  # Custom request, no vehicle yet
    CONFIRMED = "confirmed"
    DRIVER_ALTERNATIVE = "driver_alternative"  # Driver proposed other pickup/dropoff
    IN_TRANSIT = "in_transit"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class DriverResponse(str, enum.Enum):
    ACCEPTED = "accepted"
    ALTERNATIVE_OFFERED = "alternative_offered"
    DECLINED = "declined"


class PaymentStatus(str, enum.Enum):
    PENDING = "pending"
    PAID = "paid"
    REFUNDED = "refunded"


class SubscriptionStatus(str, enum.Enum):
    ACTIVE = "active"
    PAUSED = "paused"
    CANCELLED = "cancelled"
    EXPIRED = "expired"
