"""
Audit Log Database Model.

Records booking, subscription and reference-data events with who did them.
"""

from sqlalchemy import Column, Integer, String, DateTime, JSON
from sqlalchemy.sql import func
from omnibus.app.db.session import Base


class AuditLog(Base):
    """
    Audit log model.
    
    Events logged:
    - BOOKING_CREATED / BOOKING_CANCELLED / DRIVER_RESPONDED / PASSENGER_RESPONDED
    - TRIP_STARTED / TRIP_COMPLETED
    - SUBSCRIPTION_CREATED / SUBSCRIPTION_STATUS_CHANGED
    - ROUTE_CREATED / VEHICLE_CREATED / SCHEDULE_CREATED
    """
    __tablename__ = "audit_logs"
    
    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    
    # Who performed the action (None for system actions)
    actor_id = Column(Integer, index=True, nullable=True)
    actor_username = Column(String(100), nullable=True)
    
    action = Column(String(100), nullable=False, index=True)
    
    # Additional context (JSON for flexibility)
    meta_data = Column(JSON, nullable=True)
    
    timestamp = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)
    
    def __repr__(self):
        return f"<AuditLog(id={self.id}, action='{self.action}', actor={self.actor_username})>"
