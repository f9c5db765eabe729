from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from app.core.config import settings
from typing import AsyncGenerator
from decimal import Decimal
import asyncio
import logging
from sqlalchemy.future import select
from app.utils.security import get_password_hash
from app.models.base import Base

import app.models

logger = logging.getLogger(__name__)

# name, description, price, duration_in_days, is_trial, limits (Clinics, Patients, Staff, Appointments)
DEFAULT_PACKAGES = [
    ("Trial", "Try every feature for 14 days.", Decimal("0"), 14, True, (1, 50, 3, 100)),
    ("Basic", "For a single small clinic.", Decimal("29.00"), 30, False, (1, 500, 5, 1000)),
    ("Professional", "For growing practices with several branches.", Decimal("79.00"), 30, False, (3, 5000, 20, -1)),
    ("Enterprise", "Unlimited clinics, staff and patients.", Decimal("199.00"), 30, False, (-1, -1, -1, -1)),
]

class DatabaseManager:
    def __init__(self):
        """Initializes the database engine and session maker upon creation."""
        self.engine = create_async_engine(settings.DATABASE_URL, echo=False)
        self.async_session_maker = async_sessionmaker(
            self.engine, expire_on_commit=False, class_=AsyncSession
        )

    async def close(self):
        """Closes the database engine connections."""
        if self.engine:
            await self.engine.dispose()

    async def get_db_session(self) -> AsyncGenerator[AsyncSession, None]:
        """Provides a database session."""
        async with self.async_session_maker() as session:
            yield session

db_manager = DatabaseManager()

async def create_super_admin(db_session: AsyncSession):
    """Creates the initial super admin staff account from settings."""
    from app.models.staff_model import Staff, StaffRole

    if settings.SUPERADMIN_PASSWORD == "superadmin":
        logger.warning("SUPERADMIN_PASSWORD not set. Using the default password.")

    result = await db_session.execute(select(Staff).filter(Staff.email == settings.SUPERADMIN_EMAIL))
    if result.scalar_one_or_none():
        logger.info("Super admin '%s' already exists.", settings.SUPERADMIN_EMAIL)
        return

    super_admin = Staff(
        full_name=settings.SUPERADMIN_NAME,
        email=settings.SUPERADMIN_EMAIL,
        password_hash=get_password_hash(settings.SUPERADMIN_PASSWORD),
        role=StaffRole.SuperAdmin.value,
        is_active=True,
    )
    db_session.add(super_admin)
    await db_session.commit()
    logger.info("Super admin '%s' created successfully.", settings.SUPERADMIN_EMAIL)

async def seed_subscription_packages(db_session: AsyncSession):
    """Creates the default subscription packages when none exist yet."""
    from app.models.plan_model import SubscriptionPackage, PackageLimit
    from app.models.subscription_model import RESOURCE_TYPES

    existing = await db_session.execute(select(SubscriptionPackage.id).limit(1))
    if existing.scalar_one_or_none() is not None:
        return

    for name, description, price, days, is_trial, limits in DEFAULT_PACKAGES:
        package = SubscriptionPackage(
            name=name,
            description=description,
            price=price,
            duration_in_days=days,
            is_active=True,
            is_trial_package=is_trial,
        )
        package.limits = [
            PackageLimit(limit_type=resource_type, limit_value=value, is_active=True)
            for resource_type, value in zip(RESOURCE_TYPES, limits)
        ]
        db_session.add(package)
    await db_session.commit()
    logger.info("Seeded %d subscription packages.", len(DEFAULT_PACKAGES))

async def init_db(drop_existing: bool = False):
    """
    Creates all database tables, the initial super admin and default packages.
    """
    logger.info("Initializing database with tables: %s", list(Base.metadata.tables.keys()))
    async with db_manager.engine.begin() as conn:
        if drop_existing:
            logger.info("Dropping all existing tables...")
            await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    async with db_manager.async_session_maker() as db:
        await create_super_admin(db)
        await seed_subscription_packages(db)

    logger.info("Database initialization finished successfully.")

if __name__ == "__main__":
    from app.core.logging_config import setup_logging

    setup_logging()
    asyncio.run(init_db())
