import logging
from datetime import datetime, timedelta
from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.clinic_context import ClinicContext
from app.core.exceptions import NotFoundError, ServiceError
from app.models.plan_model import SubscriptionPackage
from app.models.subscription_model import Subscription, UsageTracking, RESOURCE_TYPES
from app.repository.clinic_repository import clinic_repository
from app.repository.subscription_repository import package_repository, subscription_repository
from app.schemas.subscription_schema import Usage
from app.utils.helpers import utcnow

logger = logging.getLogger(__name__)

UNLIMITED = -1

LIMIT_UNITS = {
    "Clinics": "clinic(s)",
    "Patients": "patient(s)",
    "Staff": "staff member(s)",
    "Appointments": "appointment(s) per month",
}


def limit_display_text(limit_type: str, limit_value: int) -> str:
    if limit_value == UNLIMITED:
        return "Unlimited"
    return f"Up to {limit_value} {LIMIT_UNITS.get(limit_type, limit_type.lower())}"


class SubscriptionService:
    """Tenant subscriptions, package limits and per-resource usage counters."""

    async def get_active_packages(self, db: AsyncSession) -> List[SubscriptionPackage]:
        return await package_repository.get_active_packages(db)

    async def get_package(self, db: AsyncSession, package_id: int) -> SubscriptionPackage:
        package = await package_repository.get(db, package_id)
        if not package or not package.is_active:
            raise NotFoundError("SUBSCRIPTION_PACKAGE_NOT_FOUND", "Subscription package not found")
        return package

    async def get_active_subscription(self, db: AsyncSession, user_id: int) -> Optional[Subscription]:
        return await subscription_repository.get_active_by_user(db, user_id, utcnow())

    async def has_active_subscription(self, db: AsyncSession, user_id: int) -> bool:
        return await self.get_active_subscription(db, user_id) is not None

    async def get_current_subscription(self, db: AsyncSession, user_id: int) -> Subscription:
        subscription = await self.get_active_subscription(db, user_id)
        if not subscription:
            raise NotFoundError("SUBSCRIPTION_NO_ACTIVE", "No active subscription found")
        return subscription

    async def _initialize_usage(self, db: AsyncSession, subscription_id: int, now: datetime) -> None:
        for resource_type in RESOURCE_TYPES:
            db.add(UsageTracking(
                subscription_id=subscription_id,
                resource_type=resource_type,
                current_usage=0,
                last_updated=now,
            ))

    async def create_subscription(
        self,
        db: AsyncSession,
        user_id: int,
        package_id: int,
        *,
        commit: bool = True,
    ) -> Subscription:
        if await self.has_active_subscription(db, user_id):
            raise ServiceError("SUBSCRIPTION_ALREADY_EXISTS", message="User already has an active subscription")

        package = await self.get_package(db, package_id)
        now = utcnow()
        subscription = Subscription(
            user_id=user_id,
            package_id=package.id,
            start_date=now,
            end_date=now + timedelta(days=package.duration_in_days),
            is_active=True,
            status="Active",
            auto_renew=True,
        )
        db.add(subscription)
        await db.flush()
        await self._initialize_usage(db, subscription.id, now)
        if commit:
            await db.commit()
            await db.refresh(subscription)
        logger.info("User %s subscribed to package '%s'", user_id, package.name)
        return subscription

    async def upgrade_subscription(self, db: AsyncSession, user_id: int, new_package_id: int) -> Subscription:
        current = await self.get_active_subscription(db, user_id)
        if not current:
            raise NotFoundError("SUBSCRIPTION_NO_ACTIVE", "No active subscription to upgrade")

        new_package = await self.get_package(db, new_package_id)
        current_package = await package_repository.get(db, current.package_id)
        if current_package is not None and new_package.price <= current_package.price:
            raise ServiceError(
                "SUBSCRIPTION_INVALID_UPGRADE",
                message="The new package must be priced higher than the current one",
            )

        now = utcnow()
        current.status = "Upgraded"
        current.is_active = False
        upgraded = Subscription(
            user_id=user_id,
            package_id=new_package.id,
            start_date=now,
            end_date=now + timedelta(days=new_package.duration_in_days),
            is_active=True,
            status="Active",
            auto_renew=current.auto_renew,
        )
        db.add(upgraded)
        await db.flush()
        await self._initialize_usage(db, upgraded.id, now)
        await db.commit()
        await db.refresh(upgraded)
        logger.info("User %s upgraded subscription %s to package '%s'", user_id, current.id, new_package.name)
        return upgraded

    async def cancel_subscription(self, db: AsyncSession, user_id: int) -> Subscription:
        subscription = await self.get_active_subscription(db, user_id)
        if not subscription:
            raise NotFoundError("SUBSCRIPTION_NO_ACTIVE", "No active subscription to cancel")
        subscription.status = "Cancelled"
        subscription.auto_renew = False
        await db.commit()
        await db.refresh(subscription)
        logger.info("User %s cancelled subscription %s", user_id, subscription.id)
        return subscription

    # --- Usage limits ---

    async def validate_usage_limit(
        self,
        db: AsyncSession,
        user_id: int,
        resource_type: str,
        requested_amount: int = 1,
    ) -> bool:
        """True when ``requested_amount`` more of ``resource_type`` fits the user's active package."""
        subscription = await self.get_active_subscription(db, user_id)
        if not subscription:
            return False

        limit = await package_repository.get_active_limit(db, subscription.package_id, resource_type)
        if limit is None or limit.limit_value == UNLIMITED:
            return True

        usage = await subscription_repository.get_usage(db, subscription.id, resource_type)
        current_usage = usage.current_usage if usage else 0
        return current_usage + requested_amount <= limit.limit_value

    async def ensure_within_limit(self, db: AsyncSession, user_id: int, resource_type: str) -> None:
        """Raises the 403 failure matching why a new ``resource_type`` may not be created."""
        if not await self.has_active_subscription(db, user_id):
            latest = await subscription_repository.get_latest_by_user(db, user_id)
            if latest and latest.status in ("Active", "Expired") and latest.end_date <= utcnow():
                raise ServiceError("SUBSCRIPTION_EXPIRED", status_code=403, message="Your subscription has expired")
            raise ServiceError("SUBSCRIPTION_NO_ACTIVE", status_code=403, message="No active subscription found")

        if not await self.validate_usage_limit(db, user_id, resource_type):
            raise ServiceError(
                "SUBSCRIPTION_LIMIT_EXCEEDED",
                status_code=403,
                message=f"{resource_type} limit exceeded for your current package",
            )

    async def update_usage(self, db: AsyncSession, user_id: int, resource_type: str, amount: int) -> None:
        subscription = await self.get_active_subscription(db, user_id)
        if not subscription:
            return

        now = utcnow()
        usage = await subscription_repository.get_usage(db, subscription.id, resource_type)
        if usage is None:
            db.add(UsageTracking(
                subscription_id=subscription.id,
                resource_type=resource_type,
                current_usage=max(amount, 0),
                last_updated=now,
            ))
        else:
            await subscription_repository.increment_usage(db, usage.id, amount, now)
        await db.commit()

    async def get_usage(self, db: AsyncSession, user_id: int) -> List[Usage]:
        subscription = await self.get_current_subscription(db, user_id)
        rows = {u.resource_type: u for u in await subscription_repository.get_all_usage(db, subscription.id)}
        limits = {
            limit.limit_type: limit.limit_value
            for limit in (subscription.package.limits if subscription.package else [])
            if limit.is_active
        }
        usage = []
        for resource_type in RESOURCE_TYPES:
            row = rows.get(resource_type)
            limit_value = limits.get(resource_type)
            usage.append(Usage(
                resource_type=resource_type,
                current_usage=row.current_usage if row else 0,
                limit=None if limit_value in (None, UNLIMITED) else limit_value,
                last_updated=row.last_updated if row else None,
            ))
        return usage

    async def resolve_owner_id(self, db: AsyncSession, ctx: ClinicContext) -> int:
        """The subscription that pays for a request belongs to the clinic owner, or the caller outside a clinic."""
        if ctx.current_clinic_id is not None:
            owner_id = await clinic_repository.get_owner_id(db, ctx.current_clinic_id)
            if owner_id is not None:
                return owner_id
        return ctx.require_user()

    # --- Renewal and expiry ---

    async def process_renewal(self, db: AsyncSession, subscription_id: int) -> Subscription:
        subscription = await subscription_repository.get(db, subscription_id)
        if not subscription:
            raise NotFoundError("SUBSCRIPTION_NOT_FOUND", "Subscription not found")
        if not subscription.auto_renew or subscription.status != "Active":
            raise ServiceError("SUBSCRIPTION_RENEWAL_NOT_ALLOWED", message="Subscription cannot be renewed")

        package = await package_repository.get(db, subscription.package_id)
        if not package:
            raise NotFoundError("SUBSCRIPTION_PACKAGE_NOT_FOUND", "Subscription package not found")

        now = utcnow()
        subscription.start_date = subscription.end_date
        subscription.end_date = subscription.end_date + timedelta(days=package.duration_in_days)
        subscription.last_payment_date = now
        await subscription_repository.reset_usage(db, subscription.id, now)
        await db.commit()
        await db.refresh(subscription)
        logger.info("Renewed subscription %s until %s", subscription.id, subscription.end_date)
        return subscription

    async def get_expiring_subscriptions(self, db: AsyncSession, before: datetime) -> List[Subscription]:
        return await subscription_repository.get_expiring(db, before)

    async def process_expired_subscriptions(self, db: AsyncSession) -> tuple[int, int]:
        """Renews overdue auto-renew subscriptions and expires the rest. Returns (renewed, expired)."""
        renewed = expired = 0
        for subscription in await self.get_expiring_subscriptions(db, utcnow()):
            if subscription.auto_renew:
                try:
                    await self.process_renewal(db, subscription.id)
                    renewed += 1
                    continue
                except ServiceError as e:
                    logger.warning("Renewal of subscription %s failed: %s", subscription.id, e.code)
            subscription.status = "Expired"
            subscription.is_active = False
            await db.commit()
            expired += 1
        return renewed, expired


subscription_service = SubscriptionService()
