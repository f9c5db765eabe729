# app/schemas/subscription_schema.py
from pydantic import BaseModel
from typing import List, Optional
from decimal import Decimal
from datetime import datetime


class PackageLimit(BaseModel):
    limit_type: str
    limit_value: int
    display_text: Optional[str] = None

    class Config:
        from_attributes = True


class SubscriptionPackage(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    price: Decimal
    duration_in_days: int
    is_trial_package: Optional[bool] = None
    limits: List[PackageLimit] = []

    class Config:
        from_attributes = True


class SubscribeRequest(BaseModel):
    package_id: int


class UpgradeRequest(BaseModel):
    new_package_id: int


class Subscription(BaseModel):
    id: int
    user_id: int
    package_id: int
    start_date: datetime
    end_date: datetime
    status: str
    is_active: bool
    auto_renew: bool
    last_payment_date: Optional[datetime] = None
    package: Optional[SubscriptionPackage] = None

    class Config:
        from_attributes = True


class Usage(BaseModel):
    resource_type: str
    current_usage: int
    # None when the package does not cap this resource
    limit: Optional[int] = None
    last_updated: Optional[datetime] = None
