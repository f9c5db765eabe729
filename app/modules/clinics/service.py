import logging
from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.clinic_context import ClinicContext
from app.core.exceptions import NotFoundError, ServiceError
from app.models.clinic_model import Clinic
from app.models.staff_model import StaffClinic
from app.modules.subscription.service import subscription_service
from app.repository.clinic_repository import clinic_repository
from app.schemas import clinic_schema
from app.schemas.common_schema import PagedResult
from app.utils.helpers import total_pages

logger = logging.getLogger(__name__)


async def search_clinics(
    db: AsyncSession,
    search: Optional[str],
    page: int,
    page_size: int,
) -> PagedResult[clinic_schema.Clinic]:
    clinics, total = await clinic_repository.get_clinics(
        db, skip=(page - 1) * page_size, limit=page_size, search=search
    )
    return PagedResult[clinic_schema.Clinic](
        items=[clinic_schema.Clinic.model_validate(c) for c in clinics],
        total=total,
        page=page,
        page_size=page_size,
        total_pages=total_pages(total, page_size),
    )


async def get_active_clinics(db: AsyncSession) -> List[Clinic]:
    return await clinic_repository.get_active_clinics(db)


async def get_clinic(db: AsyncSession, clinic_id: int) -> Clinic:
    clinic = await clinic_repository.get(db, clinic_id)
    if clinic is None:
        raise NotFoundError("CLINIC_NOT_FOUND", "Clinic not found")
    return clinic


async def create_clinic(db: AsyncSession, clinic_in: clinic_schema.ClinicCreate, owner_id: Optional[int]) -> Clinic:
    clinic = Clinic(**clinic_in.model_dump(), owner_id=owner_id, is_active=True)
    db.add(clinic)
    await db.flush()
    if owner_id is not None:
        db.add(StaffClinic(staff_id=owner_id, clinic_id=clinic.id, is_active=True))
    await db.commit()
    await db.refresh(clinic)
    logger.info("Clinic %s '%s' created for owner %s", clinic.id, clinic.name, owner_id)
    return clinic


async def create_clinic_with_package(
    db: AsyncSession,
    clinic_in: clinic_schema.ClinicWithPackageCreate,
    owner_id: int,
) -> Clinic:
    """
    Provisions a new tenant: subscribes the owner to ``package_id`` when they
    have no active subscription yet, creates the clinic and counts it.
    """
    if await subscription_service.has_active_subscription(db, owner_id):
        if not await subscription_service.validate_usage_limit(db, owner_id, "Clinics"):
            raise ServiceError(
                "CLINIC_LIMIT_EXCEEDED",
                status_code=403,
                message="Clinics limit exceeded for your current package",
            )
    else:
        await subscription_service.create_subscription(db, owner_id, clinic_in.package_id, commit=False)

    clinic = await create_clinic(
        db, clinic_schema.ClinicCreate(**clinic_in.model_dump(exclude={"package_id"})), owner_id
    )
    await subscription_service.update_usage(db, owner_id, "Clinics", 1)
    return clinic


def _ensure_owner(clinic: Clinic, ctx: ClinicContext, action: str) -> None:
    if not ctx.is_super_admin and clinic.owner_id != ctx.current_user_id:
        raise ServiceError("AUTH_UNAUTHORIZED", status_code=403, message=f"Only the clinic owner can {action} it")


async def update_clinic(
    db: AsyncSession,
    clinic_id: int,
    clinic_in: clinic_schema.ClinicUpdate,
    ctx: ClinicContext,
) -> Clinic:
    clinic = await get_clinic(db, clinic_id)
    _ensure_owner(clinic, ctx, "update")
    return await clinic_repository.update(db, clinic, clinic_in)


async def delete_clinic(db: AsyncSession, clinic_id: int, ctx: ClinicContext) -> Clinic:
    clinic = await get_clinic(db, clinic_id)
    _ensure_owner(clinic, ctx, "delete")
    await clinic_repository.soft_delete(db, clinic)
    if clinic.owner_id is not None:
        await subscription_service.update_usage(db, clinic.owner_id, "Clinics", -1)
    return clinic
