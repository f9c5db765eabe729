from datetime import datetime
from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy import func, update
from app.models import plan_model, subscription_model
from app.repository.base_repository import BaseRepository

SubscriptionPackage = plan_model.SubscriptionPackage
PackageLimit = plan_model.PackageLimit
Subscription = subscription_model.Subscription
UsageTracking = subscription_model.UsageTracking


class PackageRepository(BaseRepository[SubscriptionPackage]):
    def __init__(self):
        super().__init__(SubscriptionPackage)

    async def get_active_packages(self, db: AsyncSession) -> List[SubscriptionPackage]:
        result = await db.execute(
            self._live(select(SubscriptionPackage))
            .filter(SubscriptionPackage.is_active.is_(True))
            .order_by(SubscriptionPackage.price)
        )
        return result.scalars().all()

    async def get_active_limit(self, db: AsyncSession, package_id: int, limit_type: str) -> Optional[PackageLimit]:
        result = await db.execute(
            select(PackageLimit).filter(
                PackageLimit.package_id == package_id,
                PackageLimit.limit_type == limit_type,
                PackageLimit.is_active.is_(True),
            )
        )
        return result.scalars().first()


class SubscriptionRepository(BaseRepository[Subscription]):
    def __init__(self):
        super().__init__(Subscription)

    async def get_active_by_user(self, db: AsyncSession, user_id: int, now: datetime) -> Optional[Subscription]:
        result = await db.execute(
            select(Subscription)
            .filter(
                Subscription.user_id == user_id,
                Subscription.is_active.is_(True),
                Subscription.status == "Active",
                Subscription.end_date > now,
            )
            .order_by(Subscription.end_date.desc())
        )
        return result.scalars().first()

    async def get_latest_by_user(self, db: AsyncSession, user_id: int) -> Optional[Subscription]:
        """Most recent subscription regardless of state; used to tell 'expired' from 'never subscribed'."""
        result = await db.execute(
            select(Subscription).filter(Subscription.user_id == user_id).order_by(Subscription.end_date.desc())
        )
        return result.scalars().first()

    async def get_expiring(self, db: AsyncSession, before: datetime) -> List[Subscription]:
        result = await db.execute(
            select(Subscription).filter(
                Subscription.is_active.is_(True),
                Subscription.status == "Active",
                Subscription.end_date <= before,
            )
        )
        return result.scalars().all()

    # --- Usage tracking ---

    async def get_usage(self, db: AsyncSession, subscription_id: int, resource_type: str) -> Optional[UsageTracking]:
        result = await db.execute(
            select(UsageTracking).filter(
                UsageTracking.subscription_id == subscription_id,
                UsageTracking.resource_type == resource_type,
            )
        )
        return result.scalars().first()

    async def get_all_usage(self, db: AsyncSession, subscription_id: int) -> List[UsageTracking]:
        result = await db.execute(select(UsageTracking).filter(UsageTracking.subscription_id == subscription_id))
        return result.scalars().all()

    async def increment_usage(self, db: AsyncSession, usage_id: int, amount: int, now: datetime) -> None:
        """Adds ``amount`` (negative to release) in one UPDATE, never going below zero."""
        await db.execute(
            update(UsageTracking)
            .where(UsageTracking.id == usage_id)
            .values(current_usage=func.greatest(UsageTracking.current_usage + amount, 0), last_updated=now)
        )

    async def reset_usage(self, db: AsyncSession, subscription_id: int, now: datetime) -> None:
        await db.execute(
            update(UsageTracking)
            .where(UsageTracking.subscription_id == subscription_id)
            .values(current_usage=0, last_updated=now)
        )


package_repository = PackageRepository()
subscription_repository = SubscriptionRepository()
