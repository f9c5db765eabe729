from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.clinic_context import ClinicContext
from app.core.dependencies import get_db, get_clinic_context, require_roles
from app.models.staff_model import StaffRole
from app.modules.prescriptions import service as prescription_service
from app.schemas import prescription_schema
from app.schemas.common_schema import ApiResponse, ok
from app.utils.activity_logger import log_activity

router = APIRouter(
    prefix="/prescriptions",
    tags=["Prescriptions"],
)

prescribers = require_roles(StaffRole.ClinicManager, StaffRole.Doctor)
dispensers = require_roles(StaffRole.ClinicManager, StaffRole.Pharmacist)

PrescriptionOut = prescription_schema.Prescription


@router.get("/active", response_model=ApiResponse[List[PrescriptionOut]])
async def get_active_prescriptions(
    db: AsyncSession = Depends(get_db),
    ctx: ClinicContext = Depends(get_clinic_context),
):
    prescriptions = await prescription_service.get_active_prescriptions(db, ctx)
    return ok([PrescriptionOut.model_validate(p) for p in prescriptions])


@router.get("/patient/{patient_id}", response_model=ApiResponse[List[PrescriptionOut]])
async def get_patient_prescriptions(
    patient_id: int,
    db: AsyncSession = Depends(get_db),
    ctx: ClinicContext = Depends(get_clinic_context),
):
    prescriptions = await prescription_service.get_patient_prescriptions(db, ctx, patient_id)
    return ok([PrescriptionOut.model_validate(p) for p in prescriptions])


@router.get("/{prescription_id}", response_model=ApiResponse[PrescriptionOut])
async def get_prescription(
    prescription_id: int,
    db: AsyncSession = Depends(get_db),
    ctx: ClinicContext = Depends(get_clinic_context),
):
    return ok(PrescriptionOut.model_validate(await prescription_service.get_prescription(db, ctx, prescription_id)))


@router.post("/", response_model=ApiResponse[PrescriptionOut], status_code=201)
async def create_prescription(
    prescription_in: prescription_schema.PrescriptionCreate,
    db: AsyncSession = Depends(get_db),
    ctx: ClinicContext = Depends(prescribers),
):
    prescription = await prescription_service.create_prescription(db, ctx, prescription_in)
    await log_activity(
        db=db,
        user_id=ctx.current_user_id,
        activity_type_category="Data/CRUD",
        clinic_id=ctx.current_clinic_id,
        activity_description=f"Prescription {prescription.prescription_number} created.",
    )
    return ok(PrescriptionOut.model_validate(prescription), message="Prescription created successfully")


@router.put("/{prescription_id}", response_model=ApiResponse[PrescriptionOut])
async def update_prescription(
    prescription_id: int,
    prescription_in: prescription_schema.PrescriptionUpdate,
    db: AsyncSession = Depends(get_db),
    ctx: ClinicContext = Depends(prescribers),
):
    prescription = await prescription_service.update_prescription(db, ctx, prescription_id, prescription_in)
    return ok(PrescriptionOut.model_validate(prescription), message="Prescription updated successfully")


@router.post("/{prescription_id}/dispense", response_model=ApiResponse[PrescriptionOut])
async def dispense_medicine(
    prescription_id: int,
    request: prescription_schema.DispenseRequest,
    db: AsyncSession = Depends(get_db),
    ctx: ClinicContext = Depends(dispensers),
):
    prescription = await prescription_service.dispense_medicine(db, ctx, prescription_id, request)
    await log_activity(
        db=db,
        user_id=ctx.current_user_id,
        activity_type_category="Data/CRUD",
        clinic_id=ctx.current_clinic_id,
        activity_description=f"Dispensed {request.quantity} unit(s) on prescription {prescription.prescription_number}.",
    )
    return ok(PrescriptionOut.model_validate(prescription), message="Medicine dispensed successfully")
