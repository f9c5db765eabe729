from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.clinic_context import ClinicContext
from app.core.exceptions import NotFoundError
from app.models.patient_model import Patient
from app.repository.patient_repository import patient_repository
from app.schemas import patient_schema
from app.schemas.common_schema import PagedResult
from app.utils.generators import generate_patient_code
from app.utils.helpers import total_pages


async def search_patients(
    db: AsyncSession,
    ctx: ClinicContext,
    search: Optional[str],
    page: int,
    page_size: int,
) -> PagedResult[patient_schema.Patient]:
    patients, total = await patient_repository.search(
        db, ctx.require_clinic(), search=search, skip=(page - 1) * page_size, limit=page_size
    )
    return PagedResult[patient_schema.Patient](
        items=[patient_schema.Patient.model_validate(p) for p in patients],
        total=total,
        page=page,
        page_size=page_size,
        total_pages=total_pages(total, page_size),
    )


async def get_patient(db: AsyncSession, ctx: ClinicContext, patient_id: int) -> Patient:
    patient = await patient_repository.get_in_clinic(db, ctx.require_clinic(), patient_id)
    if patient is None:
        raise NotFoundError("PATIENT_NOT_FOUND", "Patient not found")
    return patient


async def create_patient(db: AsyncSession, ctx: ClinicContext, patient_in: patient_schema.PatientCreate) -> Patient:
    """Registers a patient; phone numbers are not required to be unique."""
    clinic_id = ctx.require_clinic()
    existing = await patient_repository.count_all_in_clinic(db, clinic_id)
    data = patient_in.model_dump()
    data["patient_code"] = generate_patient_code(existing)
    return await patient_repository.create_in_clinic(db, clinic_id, data)


async def update_patient(
    db: AsyncSession,
    ctx: ClinicContext,
    patient_id: int,
    patient_in: patient_schema.PatientUpdate,
) -> Patient:
    patient = await get_patient(db, ctx, patient_id)
    return await patient_repository.update(db, patient, patient_in)


async def delete_patient(db: AsyncSession, ctx: ClinicContext, patient_id: int) -> Patient:
    patient = await get_patient(db, ctx, patient_id)
    return await patient_repository.soft_delete(db, patient)
