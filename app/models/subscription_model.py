# app/models/subscription_model.py
from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship

from .base import Base, AuditMixin

RESOURCE_TYPES = ("Clinics", "Patients", "Staff", "Appointments")


class Subscription(AuditMixin, Base):
    __tablename__ = 'subscriptions'
    __table_args__ = (
        Index("ix_subscriptions_user_status", "user_id", "status", "is_active"),
    )
    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey('staff.id'), nullable=False)
    package_id = Column(Integer, ForeignKey('subscription_packages.id'), nullable=False)
    start_date = Column(DateTime, nullable=False)
    end_date = Column(DateTime, nullable=False)

    # Active -> Upgraded | Cancelled | Expired; PendingPayment before activation
    status = Column(String(20), default='Active', nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    auto_renew = Column(Boolean, default=True, nullable=False)
    payment_id = Column(String(100), nullable=True)
    last_payment_date = Column(DateTime, nullable=True)

    package = relationship("SubscriptionPackage", lazy="selectin")
    usage = relationship("UsageTracking", back_populates="subscription", lazy="selectin")


class UsageTracking(Base):
    __tablename__ = 'usage_tracking'
    __table_args__ = (
        Index("ix_usage_tracking_subscription_resource", "subscription_id", "resource_type", unique=True),
    )
    id = Column(Integer, primary_key=True, index=True)
    subscription_id = Column(Integer, ForeignKey('subscriptions.id'), nullable=False)
    resource_type = Column(String(50), nullable=False)
    current_usage = Column(Integer, default=0, nullable=False)
    last_updated = Column(DateTime, nullable=False)

    subscription = relationship("Subscription", back_populates="usage")
