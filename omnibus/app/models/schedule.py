"""
Schedule database model.

A schedule is a recurring departure slot: one route served by one vehicle
on a set of weekdays. Capacity is checked per schedule and travel date.
"""

from sqlalchemy import Column, Integer, String, Boolean, ForeignKey, JSON
from omnibus.app.db.session import Base


class Schedule(Base):
    __tablename__ = "schedules"
    
    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    route_id = Column(Integer, ForeignKey('routes.id'), nullable=False, index=True)
    vehicle_id = Column(Integer, ForeignKey('vehicles.id'), nullable=False, index=True)
    
    departure_time = Column(String(5), nullable=False)  # HH:MM
    arrival_time = Column(String(5), nullable=False)  # HH:MM
    days_of_week = Column(JSON, nullable=False, default=list)  # ["monday", "tuesday", ...]
    
    is_active = Column(Boolean, default=True, nullable=False, index=True)
    
    def operates_on(self, weekday: str) -> bool:
        return weekday in (self.days_of_week or [])
    
    def __repr__(self):
        return f"<Schedule(id={self.id}, route_id={self.route_id}, vehicle_id={self.vehicle_id}, departs='{self.departure_time}')>"
