"""
Audit logging service for booking, subscription and reference-data events.

Entries are added to the caller's transaction; the caller commits.
"""

from typing import Optional, Dict, Any, List
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, desc
from omnibus.app.models.audit_log import AuditLog


class AuditAction:
    """Standardized audit action constants."""
    USER_LOGGED_OUT = "USER_LOGGED_OUT"
    
    # Reference data
    ROUTE_CREATED = "ROUTE_CREATED"
    ROUTE_UPDATED = "ROUTE_UPDATED"
    VEHICLE_CREATED = "VEHICLE_CREATED"
    SCHEDULE_CREATED = "SCHEDULE_CREATED"
    SCHEDULE_UPDATED = "SCHEDULE_UPDATED"
    
    # Booking lifecycle
    BOOKING_CREATED = "BOOKING_CREATED"
    BOOKING_CANCELLED = "BOOKING_CANCELLED"
    BOOKING_PAID = "BOOKING_PAID"
    DRIVER_RESPONDED = "DRIVER_RESPONDED"
    PASSENGER_RESPONDED = "PASSENGER_RESPONDED"
    TRIP_STARTED = "TRIP_STARTED"
    TRIP_COMPLETED = "TRIP_COMPLETED"
    
    # Subscriptions
    SUBSCRIPTION_CREATED = "SUBSCRIPTION_CREATED"
    SUBSCRIPTION_STATUS_CHANGED = "SUBSCRIPTION_STATUS_CHANGED"
    SUBSCRIPTION_RIDE_USED = "SUBSCRIPTION_RIDE_USED"


async def log_event(
    db: AsyncSession,
    action: str,
    actor_id: Optional[int] = None,
    actor_username: Optional[str] = None,
    metadata: Optional[Dict[str, Any]] = None
) -> AuditLog:
    """
    Add an audit entry to the current transaction.
    
    Args:
        db: Database session
        action: Action being performed (use AuditAction constants)
        actor_id: ID of user performing the action
        actor_username: Username of actor
        metadata: Additional context as JSON
        
    Returns:
        Pending AuditLog instance
    """
    audit_log = AuditLog(
        actor_id=actor_id,
        actor_username=actor_username,
        action=action,
        meta_data=metadata
    )
    
    db.add(audit_log)
    return audit_log


async def get_audit_logs(
    db: AsyncSession,
    action: Optional[str] = None,
    actor_id: Optional[int] = None,
    limit: int = 100
) -> List[AuditLog]:
    """Fetch the most recent audit entries, optionally filtered."""
    query = select(AuditLog)
    if action:
        query = query.where(AuditLog.action == action)
    if actor_id:
        query = query.where(AuditLog.actor_id == actor_id)
    query = query.order_by(desc(AuditLog.timestamp), desc(AuditLog.id)).limit(limit)
    
    result = await db.execute(query)
    return list(result.scalars().all())
