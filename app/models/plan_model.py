# app/models/plan_model.py
from sqlalchemy import Column, Integer, String, Boolean, Numeric, Text, ForeignKey, Index
from sqlalchemy.orm import relationship
from .base import Base, AuditMixin


class SubscriptionPackage(AuditMixin, Base):
    __tablename__ = 'subscription_packages'
    __table_args__ = (
        Index("ix_subscription_packages_is_active", "is_active"),
        Index("ix_subscription_packages_price", "price"),
    )
    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), unique=True, nullable=False)
    description = Column(Text, nullable=True)
    price = Column(Numeric(18, 2), nullable=False, default=0)
    duration_in_days = Column(Integer, nullable=False, default=30)
    is_active = Column(Boolean, default=True, nullable=False)
    is_trial_package = Column(Boolean, default=False, nullable=False)

    limits = relationship("PackageLimit", back_populates="package", cascade="all, delete-orphan", lazy="selectin")


class PackageLimit(Base):
    __tablename__ = 'package_limits'
    id = Column(Integer, primary_key=True, index=True)
    package_id = Column(Integer, ForeignKey('subscription_packages.id'), nullable=False, index=True)
    # Clinics, Patients, Staff, Appointments
    limit_type = Column(String(50), nullable=False)
    # -1 = unlimited
    limit_value = Column(Integer, nullable=False, default=-1)
    is_active = Column(Boolean, default=True, nullable=False)

    package = relationship("SubscriptionPackage", back_populates="limits")
