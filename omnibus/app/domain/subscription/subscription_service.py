"""
Subscription Manager (Domain Logic).

Prices and dates recurring-route packages and manages their status and
ride usage.
"""

import logging
from datetime import date
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from omnibus.app.core.clock import utc_today
from omnibus.app.core.exceptions import ResourceNotFoundError, InvalidStateError, InsufficientPermissionsError
from omnibus.app.core.guards import is_admin
from omnibus.app.domain.subscription.pricing import get_package, compute_end_date, compute_total_amount
from omnibus.app.models.enums import SubscriptionStatus, PaymentStatus
from omnibus.app.models.route import Route
from omnibus.app.models.subscription import Subscription
from omnibus.app.schemas.subscription import SubscriptionQuote
from omnibus.app.services.audit import log_event, AuditAction

logger = logging.getLogger("omnibus.subscriptions")

# action -> (allowed source statuses, target status)
STATUS_ACTIONS = {
    "pause": ({SubscriptionStatus.ACTIVE}, SubscriptionStatus.PAUSED),
    "resume": ({SubscriptionStatus.PAUSED}, SubscriptionStatus.ACTIVE),
    "cancel": ({SubscriptionStatus.ACTIVE, SubscriptionStatus.PAUSED}, SubscriptionStatus.CANCELLED),
}


class SubscriptionService:

    @staticmethod
    async def _get_active_route(db: AsyncSession, route_id: int) -> Route:
        route = await db.get(Route, route_id)
        if not route or not route.is_active:
            raise ResourceNotFoundError("Route", route_id)
        return route

    @staticmethod
    async def quote(
        db: AsyncSession,
        route_id: int,
        package_type: str,
        start_date: Optional[date] = None
    ) -> SubscriptionQuote:
        """
        Price preview without creating anything.

        Raises:
            InvalidPackageTypeError: Unknown package
            ResourceNotFoundError: Unknown or inactive route
        """
        package = get_package(package_type)
        route = await SubscriptionService._get_active_route(db, route_id)
        start_date = start_date or utc_today()

        return SubscriptionQuote(
            route_id=route.id,
            package_type=package.package_type,
            base_fare=route.base_fare,
            discount_percent=package.discount_percent,
            day_count=package.day_count,
            total_amount=compute_total_amount(route.base_fare, package.package_type),
            start_date=start_date,
            end_date=compute_end_date(start_date, package.package_type),
            max_rides=package.max_rides
        )

    @staticmethod
    async def create_subscription(
        db: AsyncSession,
        user_id: int,
        route_id: int,
        package_type: str,
        start_date: Optional[date],
        payment_method: str,
        actor_username: Optional[str] = None
    ) -> Subscription:
        """
        Create a subscription with derived end date, price and ride allowance.

        Raises:
            InvalidPackageTypeError: Unknown package
            ResourceNotFoundError: Unknown or inactive route
        """
        quote = await SubscriptionService.quote(db, route_id, package_type, start_date)

        subscription = Subscription(
            user_id=user_id,
            route_id=route_id,
            package_type=quote.package_type,
            start_date=quote.start_date,
            end_date=quote.end_date,
            total_amount=quote.total_amount,
            discount_applied=quote.discount_percent,
            payment_method=payment_method,
            payment_status=PaymentStatus.PENDING,
            status=SubscriptionStatus.ACTIVE,
            rides_used=0,
            max_rides=quote.max_rides
        )
        db.add(subscription)
        await db.flush()

        await log_event(
            db=db,
            action=AuditAction.SUBSCRIPTION_CREATED,
            actor_id=user_id,
            actor_username=actor_username,
            metadata={
                "subscription_id": subscription.id,
                "route_id": route_id,
                "package_type": quote.package_type,
                "total_amount": str(quote.total_amount)
            }
        )
        await db.commit()
        await db.refresh(subscription)

        logger.info("Subscription %s created: user=%s route=%s package=%s total=%s",
                    subscription.id, user_id, route_id, quote.package_type, quote.total_amount)
        return subscription

    @staticmethod
    async def list_user_subscriptions(db: AsyncSession, user_id: int) -> List[Subscription]:
        result = await db.execute(
            select(Subscription)
            .where(Subscription.user_id == user_id)
            .order_by(Subscription.created_at.desc(), Subscription.id.desc())
        )
        return list(result.scalars().all())

    @staticmethod
    async def _get_owned(db: AsyncSession, subscription_id: int, current_user: dict) -> Subscription:
        subscription = await db.get(Subscription, subscription_id)
        if not subscription:
            raise ResourceNotFoundError("Subscription", subscription_id)
        if not is_admin(current_user) and subscription.user_id != current_user["user_id"]:
            raise InsufficientPermissionsError(
                "This subscription belongs to another passenger",
                details={"subscription_id": subscription_id}
            )
        return subscription

    @staticmethod
    def _expire_if_past(subscription: Subscription, today: date) -> bool:
        if subscription.status in (SubscriptionStatus.ACTIVE, SubscriptionStatus.PAUSED) \
                and today > subscription.end_date:
            subscription.status = SubscriptionStatus.EXPIRED
            return True
        return False

    @staticmethod
    async def change_status(
        db: AsyncSession,
        subscription_id: int,
        action: str,
        current_user: dict
    ) -> Subscription:
        """
        Apply pause / resume / cancel.

        Raises:
            InvalidStateError: Transition not allowed (including expired packages)
        """
        sources, target = STATUS_ACTIONS[action]
        subscription = await SubscriptionService._get_owned(db, subscription_id, current_user)

        if SubscriptionService._expire_if_past(subscription, utc_today()):
            await db.commit()

        if subscription.status not in sources:
            raise InvalidStateError("subscription", subscription.status.value, action)

        previous = subscription.status
        subscription.status = target
        await log_event(
            db=db,
            action=AuditAction.SUBSCRIPTION_STATUS_CHANGED,
            actor_id=current_user["user_id"],
            actor_username=current_user.get("sub"),
            metadata={
                "subscription_id": subscription.id,
                "from_status": previous.value,
                "to_status": target.value
            }
        )
        await db.commit()
        return subscription

    @staticmethod
    async def use_ride(
        db: AsyncSession,
        subscription_id: int,
        current_user: dict,
        on_date: Optional[date] = None
    ) -> Subscription:
        """
        Count one ride against the package.

        Raises:
            InvalidStateError: Not active, outside its date range, or out of rides
        """
        on_date = on_date or utc_today()
        subscription = await SubscriptionService._get_owned(db, subscription_id, current_user)

        if SubscriptionService._expire_if_past(subscription, on_date):
            await db.commit()
            logger.info("Subscription %s expired on %s", subscription.id, subscription.end_date)

        if subscription.status != SubscriptionStatus.ACTIVE:
            raise InvalidStateError("subscription", subscription.status.value, "use a ride on")
        if on_date < subscription.start_date:
            raise InvalidStateError("subscription", "not_started", "use a ride on")
        if subscription.rides_used >= subscription.max_rides:
            raise InvalidStateError("subscription", "exhausted", "use a ride on")

        subscription.rides_used += 1
        await log_event(
            db=db,
            action=AuditAction.SUBSCRIPTION_RIDE_USED,
            actor_id=current_user["user_id"],
            actor_username=current_user.get("sub"),
            metadata={"subscription_id": subscription.id, "rides_used": subscription.rides_used}
        )
        await db.commit()
        return subscription
