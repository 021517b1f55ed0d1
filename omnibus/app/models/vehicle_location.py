"""
Vehicle location database model.

Breadcrumb of positions reported by drivers. Only the latest row per
vehicle is read back for passengers.
"""

from sqlalchemy import Column, Integer, Float, DateTime, ForeignKey
from sqlalchemy.sql import func
from omnibus.app.db.session import Base


class VehicleLocation(Base):
    __tablename__ = "vehicle_locations"
    
    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    vehicle_id = Column(Integer, ForeignKey('vehicles.id'), nullable=False, index=True)
    booking_id = Column(Integer, ForeignKey('bookings.id'), nullable=True, index=True)
    reported_by_id = Column(Integer, ForeignKey('users.id'), nullable=False)
    
    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)
    speed_kmh = Column(Float, nullable=True)
    heading = Column(Integer, nullable=True)  # degrees 0-360
    
    recorded_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)
    
    def __repr__(self):
        return f"<VehicleLocation(vehicle_id={self.vehicle_id}, lat={self.latitude}, lng={self.longitude})>"
