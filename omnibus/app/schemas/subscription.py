"""
Subscription schemas.

end_date and total_amount are derived server-side and cannot be supplied.
"""

from pydantic import BaseModel, Field
from datetime import date, datetime
from decimal import Decimal
from typing import Optional, List

from omnibus.app.models.enums import SubscriptionStatus, PaymentStatus


class SubscriptionCreate(BaseModel):
    """Schema for purchasing a subscription package."""
    route_id: int
    package_type: str = Field(..., description="1month | 3months | 6months | 12months")
    start_date: Optional[date] = Field(None, description="Defaults to today")
    payment_method: str = Field(..., min_length=1, max_length=50)
    
    class Config:
        extra = "forbid"


class SubscriptionPackageResponse(BaseModel):
    package_type: str
    name: str
    discount_percent: Decimal
    day_count: int
    months: int
    max_rides: int
    
    class Config:
        from_attributes = True


class SubscriptionQuote(BaseModel):
    """Price preview for a route and package."""
    route_id: int
    package_type: str
    base_fare: Decimal
    discount_percent: Decimal
    day_count: int
    total_amount: Decimal
    start_date: date
    end_date: date
    max_rides: int


class SubscriptionResponse(BaseModel):
    id: int
    user_id: int
    route_id: int
    package_type: str
    start_date: date
    end_date: date
    total_amount: Decimal
    discount_applied: Decimal
    payment_method: str
    payment_status: PaymentStatus
    status: SubscriptionStatus
    rides_used: int
    max_rides: int
    created_at: datetime
    
    class Config:
        from_attributes = True


class SubscriptionListResponse(BaseModel):
    subscriptions: List[SubscriptionResponse]
    total: int
