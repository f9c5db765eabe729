from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.clinic_context import ClinicContext
from app.core.config import settings
from app.core.dependencies import get_db, get_clinic_context, require_roles, guard_staff, release_staff, UsageGuard
from app.core.exceptions import ServiceError
from app.models.staff_model import StaffRole
from app.modules.staff import service as staff_service
from app.schemas import staff_schema
from app.schemas.common_schema import ApiResponse, PagedResult, ok
from app.utils.activity_logger import log_activity

router = APIRouter(
    prefix="/staff",
    tags=["Staff"],
)

manage_staff = require_roles(StaffRole.ClinicManager)


@router.get("/", response_model=ApiResponse[PagedResult[staff_schema.Staff]])
async def search_staff(
    search: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=100, alias="pageSize"),
    db: AsyncSession = Depends(get_db),
    ctx: ClinicContext = Depends(get_clinic_context),
):
    return ok(await staff_service.search_staff(db, search, page, page_size, clinic_id=ctx.current_clinic_id))


@router.get("/{staff_id}", response_model=ApiResponse[staff_schema.StaffDetail])
async def get_staff(
    staff_id: int,
    db: AsyncSession = Depends(get_db),
    ctx: ClinicContext = Depends(get_clinic_context),
):
    return ok(await staff_service.get_staff(db, ctx, staff_id))


@router.post("/", response_model=ApiResponse[staff_schema.Staff], status_code=201)
async def create_staff(
    staff_in: staff_schema.StaffCreate,
    db: AsyncSession = Depends(get_db),
    ctx: ClinicContext = Depends(manage_staff),
    usage: UsageGuard = Depends(guard_staff),
):
    if not staff_in.clinic_ids and ctx.current_clinic_id is not None:
        staff_in.clinic_ids = [ctx.current_clinic_id]
    staff = await staff_service.create_staff(db, ctx, staff_in)
    await usage.record(db)
    await log_activity(
        db=db,
        user_id=ctx.current_user_id,
        activity_type_category="Data/CRUD",
        clinic_id=ctx.current_clinic_id,
        activity_description=f"Staff '{staff.full_name}' created with role {staff.role}.",
    )
    return ok(staff_schema.Staff.model_validate(staff), message="Staff created successfully")


@router.put("/{staff_id}", response_model=ApiResponse[staff_schema.Staff])
async def update_staff(
    staff_id: int,
    staff_in: staff_schema.StaffUpdate,
    db: AsyncSession = Depends(get_db),
    ctx: ClinicContext = Depends(manage_staff),
):
    staff = await staff_service.update_staff(db, ctx, staff_id, staff_in)
    await log_activity(
        db=db,
        user_id=ctx.current_user_id,
        activity_type_category="Data/CRUD",
        clinic_id=ctx.current_clinic_id,
        activity_description=f"Staff '{staff.full_name}' updated.",
    )
    return ok(staff_schema.Staff.model_validate(staff), message="Staff updated successfully")


@router.put("/{staff_id}/password", response_model=ApiResponse[None])
async def change_password(
    staff_id: int,
    request: staff_schema.ChangePasswordRequest,
    db: AsyncSession = Depends(get_db),
    ctx: ClinicContext = Depends(get_clinic_context),
):
    if staff_id != ctx.current_user_id and not ctx.is_super_admin:
        raise ServiceError("AUTH_UNAUTHORIZED", status_code=403, message="You can only change your own password")
    await staff_service.change_password(db, staff_id, request)
    return ok(message="Password changed successfully")


@router.delete("/{staff_id}", response_model=ApiResponse[None])
async def delete_staff(
    staff_id: int,
    db: AsyncSession = Depends(get_db),
    ctx: ClinicContext = Depends(manage_staff),
    usage: UsageGuard = Depends(release_staff),
):
    staff = await staff_service.delete_staff(db, ctx, staff_id)
    await usage.record(db, -1)
    await log_activity(
        db=db,
        user_id=ctx.current_user_id,
        activity_type_category="Data/CRUD",
        clinic_id=ctx.current_clinic_id,
        activity_description=f"Staff '{staff.full_name}' deleted.",
    )
    return ok(message="Staff deleted successfully")
