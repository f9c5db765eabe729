import logging
from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.clinic_context import ClinicContext
from app.core.exceptions import NotFoundError, ServiceError
from app.models.staff_model import Staff, StaffRole
from app.repository.clinic_repository import clinic_repository
from app.repository.staff_repository import staff_repository
from app.schemas import staff_schema
from app.schemas.clinic_schema import ClinicSummary
from app.schemas.common_schema import PagedResult
from app.utils.helpers import total_pages
from app.utils.security import get_password_hash, verify_password

logger = logging.getLogger(__name__)


def _check_role(role: str, ctx: ClinicContext) -> None:
    if role not in StaffRole.__members__:
        raise ServiceError("INVALID_INPUT", message=f"Invalid role '{role}'")
    if role == StaffRole.SuperAdmin.value and not ctx.is_super_admin:
        raise ServiceError("FORBIDDEN", status_code=403, message="Only a super admin can grant the SuperAdmin role")


async def _assignable_clinic_ids(db: AsyncSession, ctx: ClinicContext, clinic_ids: List[int]) -> List[int]:
    """Existing clinics among ``clinic_ids``; non super admins may only assign their own clinics."""
    existing = await clinic_repository.get_existing_ids(db, clinic_ids)
    if ctx.is_super_admin:
        return existing
    own = set(await staff_repository.get_staff_clinic_ids(db, ctx.require_user()))
    return [clinic_id for clinic_id in existing if clinic_id in own]


async def _get_in_scope(db: AsyncSession, ctx: ClinicContext, staff_id: int) -> Staff:
    staff = await staff_repository.get(db, staff_id)
    if staff is None:
        raise NotFoundError("STAFF_NOT_FOUND", "Staff member not found")
    if not ctx.is_super_admin:
        # Staff of other clinics are invisible
        if not await staff_repository.has_access_to_clinic(db, staff.id, ctx.require_clinic()):
            raise NotFoundError("STAFF_NOT_FOUND", "Staff member not found")
    return staff


async def search_staff(
    db: AsyncSession,
    search: Optional[str],
    page: int,
    page_size: int,
    clinic_id: Optional[int] = None,
) -> PagedResult[staff_schema.Staff]:
    staff, total = await staff_repository.get_staff(
        db, skip=(page - 1) * page_size, limit=page_size, search=search, clinic_id=clinic_id
    )
    return PagedResult[staff_schema.Staff](
        items=[staff_schema.Staff.model_validate(s) for s in staff],
        total=total,
        page=page,
        page_size=page_size,
        total_pages=total_pages(total, page_size),
    )


async def get_staff(db: AsyncSession, ctx: ClinicContext, staff_id: int) -> staff_schema.StaffDetail:
    staff = await _get_in_scope(db, ctx, staff_id)
    detail = staff_schema.StaffDetail.model_validate(staff)
    detail.clinics = [ClinicSummary.model_validate(c) for c in await staff_repository.get_staff_clinics(db, staff.id)]
    return detail


async def create_staff(db: AsyncSession, ctx: ClinicContext, staff_in: staff_schema.StaffCreate) -> Staff:
    if staff_in.email and await staff_repository.get_by_email(db, staff_in.email):
        raise ServiceError("AUTH_EMAIL_EXISTS", message="Email is already registered")
    if staff_in.phone_number and await staff_repository.get_by_email_or_phone(db, staff_in.phone_number):
        raise ServiceError("AUTH_EMAIL_EXISTS", message="Phone number is already registered")
    _check_role(staff_in.role, ctx)

    staff = Staff(
        full_name=staff_in.full_name,
        email=staff_in.email,
        phone_number=staff_in.phone_number,
        password_hash=get_password_hash(staff_in.password),
        role=staff_in.role,
        is_active=True,
    )
    db.add(staff)
    await db.flush()

    # Unknown or foreign clinic ids are skipped
    for clinic_id in await _assignable_clinic_ids(db, ctx, staff_in.clinic_ids):
        await staff_repository.assign_clinic(db, staff.id, clinic_id)

    await db.commit()
    await db.refresh(staff)
    logger.info("Staff %s (%s) created with role %s", staff.id, staff.email, staff.role)
    return staff


async def update_staff(db: AsyncSession, ctx: ClinicContext, staff_id: int, staff_in: staff_schema.StaffUpdate) -> Staff:
    staff = await _get_in_scope(db, ctx, staff_id)

    update_data = staff_in.model_dump(exclude_unset=True)
    clinic_ids = update_data.pop("clinic_ids", None)

    if update_data.get("email") and update_data["email"].lower() != (staff.email or "").lower():
        if await staff_repository.get_by_email(db, update_data["email"]):
            raise ServiceError("AUTH_EMAIL_EXISTS", message="Email is already registered")
    if "role" in update_data:
        _check_role(update_data["role"], ctx)

    for field, value in update_data.items():
        setattr(staff, field, value)

    if clinic_ids is not None:
        await staff_repository.replace_clinics(db, staff.id, await _assignable_clinic_ids(db, ctx, clinic_ids))

    await db.commit()
    await db.refresh(staff)
    return staff


async def change_password(db: AsyncSession, staff_id: int, request: staff_schema.ChangePasswordRequest) -> None:
    staff = await staff_repository.get(db, staff_id)
    if staff is None:
        raise NotFoundError("STAFF_NOT_FOUND", "Staff member not found")
    if not verify_password(request.current_password, staff.password_hash):
        raise ServiceError("AUTH_INVALID_CREDENTIALS", message="Current password is incorrect")
    staff.password_hash = get_password_hash(request.new_password)
    await db.commit()


async def delete_staff(db: AsyncSession, ctx: ClinicContext, staff_id: int) -> Staff:
    staff = await _get_in_scope(db, ctx, staff_id)
    staff.is_active = False
    await staff_repository.soft_delete(db, staff)
    return staff
