"""
Subscription database model.

A prepaid recurring-ride package on one route. end_date is derived from
start_date and package_type when the subscription is created.
"""

from sqlalchemy import Column, Integer, String, Numeric, Date, DateTime, ForeignKey, Enum
from sqlalchemy.sql import func
from omnibus.app.db.session import Base
from omnibus.app.models.enums import SubscriptionStatus, PaymentStatus


class Subscription(Base):
    __tablename__ = "subscriptions"
    
    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey('users.id'), nullable=False, index=True)
    route_id = Column(Integer, ForeignKey('routes.id'), nullable=False, index=True)
    
    package_type = Column(String(20), nullable=False)  # 1month | 3months | 6months | 12months
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    
    total_amount = Column(Numeric(10, 2), nullable=False)
    discount_applied = Column(Numeric(5, 2), nullable=False, default=0)  # percent
    payment_method = Column(String(50), nullable=False)
    payment_status = Column(Enum(PaymentStatus), default=PaymentStatus.PENDING, nullable=False)
    
    status = Column(Enum(SubscriptionStatus), default=SubscriptionStatus.ACTIVE, nullable=False, index=True)
    rides_used = Column(Integer, nullable=False, default=0)
    max_rides = Column(Integer, nullable=False)
    
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    
    def __repr__(self):
        return f"<Subscription(id={self.id}, route_id={self.route_id}, package='{self.package_type}', status='{self.status.value}')>"
