import logging
from typing import List
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.clinic_context import ClinicContext
from app.core.exceptions import NotFoundError, ServiceError
from app.models.prescription_model import Prescription, PrescriptionMedicine
from app.repository.medical_repository import treatment_history_repository
from app.repository.prescription_repository import prescription_repository
from app.schemas import prescription_schema
from app.utils.generators import dated_prefix, next_sequence_number
from app.utils.helpers import utcnow

logger = logging.getLogger(__name__)

LOCKED_STATUSES = ("Dispensed", "Cancelled")


def _build_lines(medicines: List[prescription_schema.PrescriptionMedicineCreate]) -> List[PrescriptionMedicine]:
    return [PrescriptionMedicine(**m.model_dump(), quantity_dispensed=0, is_dispensed=False) for m in medicines]


def apply_dispense(prescription: Prescription, line: PrescriptionMedicine, quantity: int) -> None:
    """Records ``quantity`` as dispensed on ``line`` and closes the prescription once every line is done."""
    if line.quantity_dispensed + quantity > line.quantity:
        raise ServiceError(
            "QUANTITY_EXCEEDS_PRESCRIBED",
            message=f"Only {line.quantity - line.quantity_dispensed} unit(s) remain to be dispensed",
        )
    line.quantity_dispensed += quantity
    if line.quantity_dispensed >= line.quantity:
        line.is_dispensed = True
    if all(m.is_dispensed for m in prescription.medicines):
        prescription.status = "Dispensed"


async def get_prescription(db: AsyncSession, ctx: ClinicContext, prescription_id: int) -> Prescription:
    prescription = await prescription_repository.get_in_clinic(db, ctx.require_clinic(), prescription_id)
    if prescription is None:
        raise NotFoundError("PRESCRIPTION_NOT_FOUND", "Prescription not found")
    return prescription


async def get_patient_prescriptions(db: AsyncSession, ctx: ClinicContext, patient_id: int) -> List[Prescription]:
    return await prescription_repository.get_by_patient(db, ctx.require_clinic(), patient_id)


async def get_active_prescriptions(db: AsyncSession, ctx: ClinicContext) -> List[Prescription]:
    return await prescription_repository.get_active(db, ctx.require_clinic())


async def create_prescription(
    db: AsyncSession, ctx: ClinicContext, prescription_in: prescription_schema.PrescriptionCreate
) -> Prescription:
    clinic_id = ctx.require_clinic()
    treatment = await treatment_history_repository.get_in_clinic(db, clinic_id, prescription_in.treatment_history_id)
    if treatment is None:
        raise NotFoundError("TREATMENT_HISTORY_NOT_FOUND", "Treatment history not found")
    if not prescription_in.medicines:
        raise ServiceError("NO_MEDICINES", message="A prescription needs at least one medicine")

    now = utcnow()
    prefix = dated_prefix("RX", now)
    last_number = await prescription_repository.get_last_prescription_number(db, prefix)

    prescription = Prescription(
        clinic_id=clinic_id,
        treatment_history_id=treatment.id,
        patient_id=treatment.patient_id,
        doctor_id=treatment.staff_id,
        prescription_number=next_sequence_number(prefix, last_number),
        prescription_date=now,
        status="Active",
        notes=prescription_in.notes,
        medicines=_build_lines(prescription_in.medicines),
    )
    db.add(prescription)
    await db.commit()
    await db.refresh(prescription)
    logger.info("Prescription %s issued for patient %s", prescription.prescription_number, prescription.patient_id)
    return prescription


async def update_prescription(
    db: AsyncSession,
    ctx: ClinicContext,
    prescription_id: int,
    prescription_in: prescription_schema.PrescriptionUpdate,
) -> Prescription:
    prescription = await get_prescription(db, ctx, prescription_id)
    if prescription.status in LOCKED_STATUSES:
        raise ServiceError(
            "PRESCRIPTION_NOT_EDITABLE",
            message=f"A {prescription.status.lower()} prescription cannot be edited",
        )

    update_data = prescription_in.model_dump(exclude_unset=True, exclude={"medicines"})
    for field, value in update_data.items():
        setattr(prescription, field, value)
    if prescription_in.medicines is not None:
        prescription.medicines = _build_lines(prescription_in.medicines)

    await db.commit()
    await db.refresh(prescription)
    return prescription


async def dispense_medicine(
    db: AsyncSession, ctx: ClinicContext, prescription_id: int, request: prescription_schema.DispenseRequest
) -> Prescription:
    prescription = await get_prescription(db, ctx, prescription_id)
    line = next((m for m in prescription.medicines if m.id == request.prescription_medicine_id), None)
    if line is None:
        raise NotFoundError("MEDICINE_NOT_FOUND", "Medicine is not part of this prescription")

    apply_dispense(prescription, line, request.quantity)
    await db.commit()
    await db.refresh(prescription)
    return prescription
