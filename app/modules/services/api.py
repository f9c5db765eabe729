from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.clinic_context import ClinicContext
from app.core.config import settings
from app.core.dependencies import get_db, get_clinic_context, require_roles
from app.models.staff_model import StaffRole
from app.modules.services import service as medical_service
from app.schemas import medical_service_schema
from app.schemas.common_schema import ApiResponse, PagedResult, ok
from app.utils.activity_logger import log_activity

router = APIRouter(
    prefix="/services",
    tags=["Medical Services"],
)

manage_services = require_roles(StaffRole.ClinicManager)


@router.get("/", response_model=ApiResponse[PagedResult[medical_service_schema.MedicalService]])
async def search_services(
    search: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=100, alias="pageSize"),
    db: AsyncSession = Depends(get_db),
    ctx: ClinicContext = Depends(get_clinic_context),
):
    return ok(await medical_service.search_services(db, ctx, search, page, page_size))


@router.get("/active", response_model=ApiResponse[List[medical_service_schema.MedicalService]])
async def get_active_services(
    db: AsyncSession = Depends(get_db),
    ctx: ClinicContext = Depends(get_clinic_context),
):
    services = await medical_service.get_active_services(db, ctx)
    return ok([medical_service_schema.MedicalService.model_validate(s) for s in services])


@router.get("/{service_id}", response_model=ApiResponse[medical_service_schema.MedicalService])
async def get_service(
    service_id: int,
    db: AsyncSession = Depends(get_db),
    ctx: ClinicContext = Depends(get_clinic_context),
):
    service = await medical_service.get_service(db, ctx, service_id)
    return ok(medical_service_schema.MedicalService.model_validate(service))


@router.post("/", response_model=ApiResponse[medical_service_schema.MedicalService], status_code=201)
async def create_service(
    service_in: medical_service_schema.MedicalServiceCreate,
    db: AsyncSession = Depends(get_db),
    ctx: ClinicContext = Depends(manage_services),
):
    service = await medical_service.create_service(db, ctx, service_in)
    await log_activity(
        db=db,
        user_id=ctx.current_user_id,
        activity_type_category="Data/CRUD",
        clinic_id=ctx.current_clinic_id,
        activity_description=f"Service '{service.name}' created.",
    )
    return ok(medical_service_schema.MedicalService.model_validate(service), message="Service created successfully")


@router.put("/{service_id}", response_model=ApiResponse[medical_service_schema.MedicalService])
async def update_service(
    service_id: int,
    service_in: medical_service_schema.MedicalServiceUpdate,
    db: AsyncSession = Depends(get_db),
    ctx: ClinicContext = Depends(manage_services),
):
    service = await medical_service.update_service(db, ctx, service_id, service_in)
    return ok(medical_service_schema.MedicalService.model_validate(service), message="Service updated successfully")


@router.delete("/{service_id}", response_model=ApiResponse[None])
async def delete_service(
    service_id: int,
    db: AsyncSession = Depends(get_db),
    ctx: ClinicContext = Depends(manage_services),
):
    service = await medical_service.delete_service(db, ctx, service_id)
    await log_activity(
        db=db,
        user_id=ctx.current_user_id,
        activity_type_category="Data/CRUD",
        clinic_id=ctx.current_clinic_id,
        activity_description=f"Service '{service.name}' deleted.",
    )
    return ok(message="Service deleted successfully")
