"""
Subscription API endpoints.

Package catalog, price quotes and the passenger's subscription lifecycle.
"""

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from datetime import date
from typing import List, Optional

from omnibus.app.db.session import get_db
from omnibus.app.core.dependencies import get_current_user
from omnibus.app.domain.subscription.pricing import list_packages
from omnibus.app.domain.subscription.subscription_service import SubscriptionService
from omnibus.app.schemas.subscription import (
    SubscriptionCreate, SubscriptionResponse, SubscriptionListResponse,
    SubscriptionPackageResponse, SubscriptionQuote
)

router = APIRouter(prefix="/subscriptions", tags=["Subscriptions"])


@router.get("/packages", response_model=List[SubscriptionPackageResponse])
async def get_packages():
    """Available packages with discount and nominal day count."""
    return [
        SubscriptionPackageResponse(
            package_type=p.package_type,
            name=p.name,
            discount_percent=p.discount_percent,
            day_count=p.day_count,
            months=p.months,
            max_rides=p.max_rides
        )
        for p in list_packages()
    ]


@router.get("/quote", response_model=SubscriptionQuote)
async def quote_subscription(
    route_id: int = Query(..., description="Route ID"),
    package_type: str = Query(..., description="1month | 3months | 6months | 12months"),
    start_date: Optional[date] = Query(None, description="Defaults to today"),
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Price and end date a subscription would get, without creating it."""
    return await SubscriptionService.quote(db, route_id, package_type, start_date)


@router.post("", response_model=SubscriptionResponse, status_code=status.HTTP_201_CREATED)
async def create_subscription(
    data: SubscriptionCreate,
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Subscribe to a route.
    
    end_date, total_amount and max_rides are derived from the package.
    """
    return await SubscriptionService.create_subscription(
        db,
        user_id=current_user["user_id"],
        route_id=data.route_id,
        package_type=data.package_type,
        start_date=data.start_date,
        payment_method=data.payment_method,
        actor_username=current_user.get("sub")
    )


@router.get("/mine", response_model=SubscriptionListResponse)
async def list_my_subscriptions(
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Caller's subscriptions, newest first."""
    subscriptions = await SubscriptionService.list_user_subscriptions(db, current_user["user_id"])
    return SubscriptionListResponse(
        subscriptions=[SubscriptionResponse.model_validate(s) for s in subscriptions],
        total=len(subscriptions)
    )


@router.post("/{subscription_id}/pause", response_model=SubscriptionResponse)
async def pause_subscription(
    subscription_id: int = Path(..., description="Subscription ID"),
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await SubscriptionService.change_status(db, subscription_id, "pause", current_user)


@router.post("/{subscription_id}/resume", response_model=SubscriptionResponse)
async def resume_subscription(
    subscription_id: int = Path(..., description="Subscription ID"),
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await SubscriptionService.change_status(db, subscription_id, "resume", current_user)


@router.post("/{subscription_id}/cancel", response_model=SubscriptionResponse)
async def cancel_subscription(
    subscription_id: int = Path(..., description="Subscription ID"),
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await SubscriptionService.change_status(db, subscription_id, "cancel", current_user)


@router.post("/{subscription_id}/use-ride", response_model=SubscriptionResponse)
async def use_ride(
    subscription_id: int = Path(..., description="Subscription ID"),
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Count one ride against the subscription.
    
    Returns 409 once the package is exhausted, paused, cancelled or expired.
    """
    return await SubscriptionService.use_ride(db, subscription_id, current_user)
