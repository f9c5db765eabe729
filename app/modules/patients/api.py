from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.clinic_context import ClinicContext
from app.core.config import settings
from app.core.dependencies import get_db, require_roles, guard_patients, release_patients, UsageGuard
from app.models.staff_model import StaffRole
from app.modules.patients import service as patient_service
from app.schemas import patient_schema
from app.schemas.common_schema import ApiResponse, PagedResult, ok
from app.utils.activity_logger import log_activity

router = APIRouter(
    prefix="/patients",
    tags=["Patients"],
)

manage_patients = require_roles(StaffRole.ClinicManager, StaffRole.Doctor, StaffRole.Nurse, StaffRole.Receptionist)


@router.get("/", response_model=ApiResponse[PagedResult[patient_schema.Patient]])
async def search_patients(
    search: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=100, alias="pageSize"),
    db: AsyncSession = Depends(get_db),
    ctx: ClinicContext = Depends(manage_patients),
):
    return ok(await patient_service.search_patients(db, ctx, search, page, page_size))


@router.get("/{patient_id}", response_model=ApiResponse[patient_schema.Patient])
async def get_patient(
    patient_id: int,
    db: AsyncSession = Depends(get_db),
    ctx: ClinicContext = Depends(manage_patients),
):
    patient = await patient_service.get_patient(db, ctx, patient_id)
    return ok(patient_schema.Patient.model_validate(patient))


@router.post("/", response_model=ApiResponse[patient_schema.Patient], status_code=201)
async def create_patient(
    patient_in: patient_schema.PatientCreate,
    db: AsyncSession = Depends(get_db),
    ctx: ClinicContext = Depends(manage_patients),
    usage: UsageGuard = Depends(guard_patients),
):
    patient = await patient_service.create_patient(db, ctx, patient_in)
    await usage.record(db)
    await log_activity(
        db=db,
        user_id=ctx.current_user_id,
        activity_type_category="Data/CRUD",
        clinic_id=ctx.current_clinic_id,
        activity_description=f"Patient '{patient.full_name}' ({patient.patient_code}) registered.",
    )
    return ok(patient_schema.Patient.model_validate(patient), message="Patient created successfully")


@router.put("/{patient_id}", response_model=ApiResponse[patient_schema.Patient])
async def update_patient(
    patient_id: int,
    patient_in: patient_schema.PatientUpdate,
    db: AsyncSession = Depends(get_db),
    ctx: ClinicContext = Depends(manage_patients),
):
    patient = await patient_service.update_patient(db, ctx, patient_id, patient_in)
    await log_activity(
        db=db,
        user_id=ctx.current_user_id,
        activity_type_category="Data/CRUD",
        clinic_id=ctx.current_clinic_id,
        activity_description=f"Patient '{patient.full_name}' updated.",
    )
    return ok(patient_schema.Patient.model_validate(patient), message="Patient updated successfully")


@router.delete("/{patient_id}", response_model=ApiResponse[None])
async def delete_patient(
    patient_id: int,
    db: AsyncSession = Depends(get_db),
    ctx: ClinicContext = Depends(manage_patients),
    usage: UsageGuard = Depends(release_patients),
):
    patient = await patient_service.delete_patient(db, ctx, patient_id)
    await usage.record(db, -1)
    await log_activity(
        db=db,
        user_id=ctx.current_user_id,
        activity_type_category="Data/CRUD",
        clinic_id=ctx.current_clinic_id,
        activity_description=f"Patient '{patient.full_name}' deleted.",
    )
    return ok(message="Patient deleted successfully")
