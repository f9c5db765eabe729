from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.clinic_context import ClinicContext
from app.core.config import settings
from app.core.dependencies import get_db, get_clinic_context, require_roles, guard_clinics, UsageGuard
from app.models.staff_model import StaffRole
from app.modules.clinics import service as clinic_service
from app.schemas import clinic_schema
from app.schemas.common_schema import ApiResponse, PagedResult, ok
from app.utils.activity_logger import log_activity

router = APIRouter(
    prefix="/clinics",
    tags=["Clinics"],
)

manage_clinic = require_roles(StaffRole.ClinicManager)


@router.get("/", response_model=ApiResponse[PagedResult[clinic_schema.Clinic]])
async def search_clinics(
    search: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=100, alias="pageSize"),
    db: AsyncSession = Depends(get_db),
    ctx: ClinicContext = Depends(get_clinic_context),
):
    return ok(await clinic_service.search_clinics(db, search, page, page_size))


@router.get("/active", response_model=ApiResponse[List[clinic_schema.Clinic]])
async def get_active_clinics(
    db: AsyncSession = Depends(get_db),
    ctx: ClinicContext = Depends(get_clinic_context),
):
    clinics = await clinic_service.get_active_clinics(db)
    return ok([clinic_schema.Clinic.model_validate(c) for c in clinics])


@router.get("/{clinic_id}", response_model=ApiResponse[clinic_schema.Clinic])
async def get_clinic(
    clinic_id: int,
    db: AsyncSession = Depends(get_db),
    ctx: ClinicContext = Depends(get_clinic_context),
):
    clinic = await clinic_service.get_clinic(db, clinic_id)
    return ok(clinic_schema.Clinic.model_validate(clinic))


@router.post("/", response_model=ApiResponse[clinic_schema.Clinic], status_code=201)
async def create_clinic(
    clinic_in: clinic_schema.ClinicCreate,
    db: AsyncSession = Depends(get_db),
    ctx: ClinicContext = Depends(manage_clinic),
    usage: UsageGuard = Depends(guard_clinics),
):
    clinic = await clinic_service.create_clinic(db, clinic_in, owner_id=ctx.current_user_id)
    await usage.record(db)
    await log_activity(
        db=db,
        user_id=ctx.current_user_id,
        activity_type_category="Data/CRUD",
        clinic_id=clinic.id,
        activity_description=f"Clinic '{clinic.name}' created.",
    )
    return ok(clinic_schema.Clinic.model_validate(clinic), message="Clinic created successfully")


@router.post("/with-package", response_model=ApiResponse[clinic_schema.Clinic], status_code=201)
async def create_clinic_with_package(
    clinic_in: clinic_schema.ClinicWithPackageCreate,
    db: AsyncSession = Depends(get_db),
    ctx: ClinicContext = Depends(manage_clinic),
):
    clinic = await clinic_service.create_clinic_with_package(db, clinic_in, owner_id=ctx.require_user())
    await log_activity(
        db=db,
        user_id=ctx.current_user_id,
        activity_type_category="Data/CRUD",
        clinic_id=clinic.id,
        activity_description=f"Clinic '{clinic.name}' created with package {clinic_in.package_id}.",
    )
    return ok(clinic_schema.Clinic.model_validate(clinic), message="Clinic created successfully")


@router.put("/{clinic_id}", response_model=ApiResponse[clinic_schema.Clinic])
async def update_clinic(
    clinic_id: int,
    clinic_in: clinic_schema.ClinicUpdate,
    db: AsyncSession = Depends(get_db),
    ctx: ClinicContext = Depends(manage_clinic),
):
    clinic = await clinic_service.update_clinic(db, clinic_id, clinic_in, ctx)
    await log_activity(
        db=db,
        user_id=ctx.current_user_id,
        activity_type_category="Data/CRUD",
        clinic_id=clinic.id,
        activity_description=f"Clinic '{clinic.name}' updated.",
    )
    return ok(clinic_schema.Clinic.model_validate(clinic), message="Clinic updated successfully")


@router.delete("/{clinic_id}", response_model=ApiResponse[None])
async def delete_clinic(
    clinic_id: int,
    db: AsyncSession = Depends(get_db),
    ctx: ClinicContext = Depends(manage_clinic),
):
    clinic = await clinic_service.delete_clinic(db, clinic_id, ctx)
    await log_activity(
        db=db,
        user_id=ctx.current_user_id,
        activity_type_category="Data/CRUD",
        clinic_id=clinic.id,
        activity_description=f"Clinic '{clinic.name}' deleted.",
    )
    return ok(message="Clinic deleted successfully")
