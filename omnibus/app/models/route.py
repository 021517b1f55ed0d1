"""
Route database model.

A route is a named origin/destination pair with ordered pickup and dropoff
points and the per-trip base fare used for bookings and subscriptions.
"""

from sqlalchemy import Column, Integer, String, Numeric, Boolean, Enum, JSON
from omnibus.app.db.session import Base
from omnibus.app.models.enums import RouteType


class Route(Base):
    """Commuter route offered to passengers."""
    __tablename__ = "routes"
    
    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(200), nullable=False)
    origin = Column(String(200), nullable=False)
    destination = Column(String(200), nullable=False)
    
    # Ordered lists of named stops
    pickup_points = Column(JSON, nullable=False, default=list)
    dropoff_points = Column(JSON, nullable=False, default=list)
    
    base_fare = Column(Numeric(10, 2), nullable=False)
    estimated_duration = Column(Integer, nullable=False)  # minutes
    max_seats = Column(Integer, nullable=False)
    route_type = Column(Enum(RouteType), nullable=False)
    
    is_active = Column(Boolean, default=True, nullable=False, index=True)
    
    def __repr__(self):
        return f"<Route(id={self.id}, name='{self.name}')>"
