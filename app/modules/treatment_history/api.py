from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.clinic_context import ClinicContext
from app.core.config import settings
from app.core.dependencies import get_db, require_roles
from app.models.staff_model import StaffRole
from app.modules.treatment_history import service as treatment_service
from app.schemas import treatment_history_schema
from app.schemas.common_schema import ApiResponse, PagedResult, ok
from app.utils.activity_logger import log_activity

router = APIRouter(
    prefix="/treatment-history",
    tags=["Treatment History"],
)

view_patient_records = require_roles(StaffRole.ClinicManager, StaffRole.Doctor, StaffRole.Nurse)

TreatmentOut = treatment_history_schema.TreatmentHistory


@router.get("/", response_model=ApiResponse[PagedResult[TreatmentOut]])
async def search_treatments(
    search: Optional[str] = Query(None),
    patient_id: Optional[int] = Query(None, alias="patientId"),
    page: int = Query(1, ge=1),
    page_size: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=100, alias="pageSize"),
    db: AsyncSession = Depends(get_db),
    ctx: ClinicContext = Depends(view_patient_records),
):
    return ok(await treatment_service.search_treatments(db, ctx, search, page, page_size, patient_id=patient_id))


@router.get("/appointment/{appointment_id}", response_model=ApiResponse[TreatmentOut])
async def get_treatment_by_appointment(
    appointment_id: int,
    db: AsyncSession = Depends(get_db),
    ctx: ClinicContext = Depends(view_patient_records),
):
    treatment = await treatment_service.get_treatment_by_appointment(db, ctx, appointment_id)
    return ok(TreatmentOut.model_validate(treatment))


@router.get("/patient/{patient_id}", response_model=ApiResponse[List[TreatmentOut]])
async def get_patient_treatments(
    patient_id: int,
    db: AsyncSession = Depends(get_db),
    ctx: ClinicContext = Depends(view_patient_records),
):
    treatments = await treatment_service.get_patient_treatments(db, ctx, patient_id)
    return ok([TreatmentOut.model_validate(t) for t in treatments])


@router.get("/{treatment_id}", response_model=ApiResponse[TreatmentOut])
async def get_treatment(
    treatment_id: int,
    db: AsyncSession = Depends(get_db),
    ctx: ClinicContext = Depends(view_patient_records),
):
    return ok(TreatmentOut.model_validate(await treatment_service.get_treatment(db, ctx, treatment_id)))


@router.post("/", response_model=ApiResponse[TreatmentOut], status_code=201)
async def create_treatment(
    treatment_in: treatment_history_schema.TreatmentHistoryCreate,
    db: AsyncSession = Depends(get_db),
    ctx: ClinicContext = Depends(view_patient_records),
):
    treatment = await treatment_service.create_treatment(db, ctx, treatment_in)
    await log_activity(
        db=db,
        user_id=ctx.current_user_id,
        activity_type_category="Data/CRUD",
        clinic_id=ctx.current_clinic_id,
        activity_description=f"Treatment history {treatment.id} recorded for patient {treatment.patient_id}.",
    )
    return ok(TreatmentOut.model_validate(treatment), message="Treatment history created successfully")


@router.put("/{treatment_id}", response_model=ApiResponse[TreatmentOut])
async def update_treatment(
    treatment_id: int,
    treatment_in: treatment_history_schema.TreatmentHistoryUpdate,
    db: AsyncSession = Depends(get_db),
    ctx: ClinicContext = Depends(view_patient_records),
):
    treatment = await treatment_service.update_treatment(db, ctx, treatment_id, treatment_in)
    return ok(TreatmentOut.model_validate(treatment), message="Treatment history updated successfully")


@router.delete("/{treatment_id}", response_model=ApiResponse[None])
async def delete_treatment(
    treatment_id: int,
    db: AsyncSession = Depends(get_db),
    ctx: ClinicContext = Depends(view_patient_records),
):
    treatment = await treatment_service.delete_treatment(db, ctx, treatment_id)
    await log_activity(
        db=db,
        user_id=ctx.current_user_id,
        activity_type_category="Data/CRUD",
        clinic_id=ctx.current_clinic_id,
        activity_description=f"Treatment history {treatment.id} deleted.",
    )
    return ok(message="Treatment history deleted successfully")
