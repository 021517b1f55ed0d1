"""
Vehicle database model.

The vehicle capacity is the authoritative seat limit for every schedule
that uses the vehicle.
"""

from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, CheckConstraint
from sqlalchemy.sql import func
from omnibus.app.db.session import Base


class Vehicle(Base):
    """Vehicle, optionally owned by a driver."""
    __tablename__ = "vehicles"
    
    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    
    vehicle_number = Column(String(100), unique=True, nullable=False, index=True)
    driver_id = Column(Integer, ForeignKey('users.id'), nullable=True, index=True)
    
    capacity = Column(Integer, nullable=False)
    vehicle_type = Column(String(50), nullable=False, default="omnibus")
    make = Column(String(100), nullable=True)
    model = Column(String(100), nullable=True)
    color = Column(String(50), nullable=True)
    
    is_active = Column(Boolean, default=True, nullable=False, index=True)
    
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
    
    __table_args__ = (
        CheckConstraint("capacity >= 1", name="check_vehicle_capacity_positive"),
    )
    
    def __repr__(self):
        return f"<Vehicle(id={self.id}, number='{self.vehicle_number}', capacity={self.capacity})>"
