from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.clinic_context import ClinicContext
from app.core.config import settings
from app.core.dependencies import get_db, get_clinic_context, require_roles
from app.models.staff_model import StaffRole
from app.modules.medicines import service as medicine_service
from app.schemas import medicine_schema
from app.schemas.common_schema import ApiResponse, PagedResult, ok
from app.utils.activity_logger import log_activity

router = APIRouter(
    prefix="/medicines",
    tags=["Medicines"],
)

manage_medicines = require_roles(StaffRole.ClinicManager, StaffRole.Pharmacist)


@router.get("/", response_model=ApiResponse[PagedResult[medicine_schema.Medicine]])
async def search_medicines(
    search: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=100, alias="pageSize"),
    db: AsyncSession = Depends(get_db),
    ctx: ClinicContext = Depends(get_clinic_context),
):
    return ok(await medicine_service.search_medicines(db, ctx, search, page, page_size))


@router.get("/active", response_model=ApiResponse[List[medicine_schema.Medicine]])
async def get_active_medicines(
    db: AsyncSession = Depends(get_db),
    ctx: ClinicContext = Depends(get_clinic_context),
):
    medicines = await medicine_service.get_active_medicines(db, ctx)
    return ok([medicine_schema.Medicine.model_validate(m) for m in medicines])


@router.get("/{medicine_id}", response_model=ApiResponse[medicine_schema.MedicineWithStock])
async def get_medicine(
    medicine_id: int,
    db: AsyncSession = Depends(get_db),
    ctx: ClinicContext = Depends(get_clinic_context),
):
    return ok(await medicine_service.get_medicine_with_stock(db, ctx, medicine_id))


@router.post("/", response_model=ApiResponse[medicine_schema.Medicine], status_code=201)
async def create_medicine(
    medicine_in: medicine_schema.MedicineCreate,
    db: AsyncSession = Depends(get_db),
    ctx: ClinicContext = Depends(manage_medicines),
):
    medicine = await medicine_service.create_medicine(db, ctx, medicine_in)
    await log_activity(
        db=db,
        user_id=ctx.current_user_id,
        activity_type_category="Data/CRUD",
        clinic_id=ctx.current_clinic_id,
        activity_description=f"Medicine '{medicine.name}' added.",
    )
    return ok(medicine_schema.Medicine.model_validate(medicine), message="Medicine created successfully")


@router.put("/{medicine_id}", response_model=ApiResponse[medicine_schema.Medicine])
async def update_medicine(
    medicine_id: int,
    medicine_in: medicine_schema.MedicineUpdate,
    db: AsyncSession = Depends(get_db),
    ctx: ClinicContext = Depends(manage_medicines),
):
    medicine = await medicine_service.update_medicine(db, ctx, medicine_id, medicine_in)
    return ok(medicine_schema.Medicine.model_validate(medicine), message="Medicine updated successfully")


@router.delete("/{medicine_id}", response_model=ApiResponse[None])
async def delete_medicine(
    medicine_id: int,
    db: AsyncSession = Depends(get_db),
    ctx: ClinicContext = Depends(manage_medicines),
):
    medicine = await medicine_service.delete_medicine(db, ctx, medicine_id)
    await log_activity(
        db=db,
        user_id=ctx.current_user_id,
        activity_type_category="Data/CRUD",
        clinic_id=ctx.current_clinic_id,
        activity_description=f"Medicine '{medicine.name}' deleted.",
    )
    return ok(message="Medicine deleted successfully")
