from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.clinic_context import ClinicContext
from app.core.exceptions import NotFoundError
from app.models.treatment_history_model import TreatmentHistory
from app.repository.medical_repository import treatment_history_repository
from app.repository.patient_repository import patient_repository
from app.schemas import treatment_history_schema
from app.schemas.common_schema import PagedResult
from app.utils.helpers import total_pages, utcnow


async def search_treatments(
    db: AsyncSession,
    ctx: ClinicContext,
    search: Optional[str],
    page: int,
    page_size: int,
    patient_id: Optional[int] = None,
) -> PagedResult[treatment_history_schema.TreatmentHistory]:
    filters = (TreatmentHistory.patient_id == patient_id,) if patient_id is not None else ()
    treatments, total = await treatment_history_repository.search(
        db,
        ctx.require_clinic(),
        search=search,
        skip=(page - 1) * page_size,
        limit=page_size,
        order_by=TreatmentHistory.treatment_date.desc(),
        filters=filters,
    )
    return PagedResult[treatment_history_schema.TreatmentHistory](
        items=[treatment_history_schema.TreatmentHistory.model_validate(t) for t in treatments],
        total=total,
        page=page,
        page_size=page_size,
        total_pages=total_pages(total, page_size),
    )


async def get_treatment(db: AsyncSession, ctx: ClinicContext, treatment_id: int) -> TreatmentHistory:
    treatment = await treatment_history_repository.get_in_clinic(db, ctx.require_clinic(), treatment_id)
    if treatment is None:
        raise NotFoundError("TREATMENT_HISTORY_NOT_FOUND", "Treatment history not found")
    return treatment


async def get_treatment_by_appointment(db: AsyncSession, ctx: ClinicContext, appointment_id: int) -> TreatmentHistory:
    treatment = await treatment_history_repository.get_by_appointment(db, ctx.require_clinic(), appointment_id)
    if treatment is None:
        raise NotFoundError("TREATMENT_HISTORY_NOT_FOUND", "No treatment history recorded for this appointment")
    return treatment


async def get_patient_treatments(db: AsyncSession, ctx: ClinicContext, patient_id: int) -> List[TreatmentHistory]:
    return await treatment_history_repository.get_by_patient(db, ctx.require_clinic(), patient_id)


async def create_treatment(
    db: AsyncSession, ctx: ClinicContext, treatment_in: treatment_history_schema.TreatmentHistoryCreate
) -> TreatmentHistory:
    clinic_id = ctx.require_clinic()
    if await patient_repository.get_in_clinic(db, clinic_id, treatment_in.patient_id) is None:
        raise NotFoundError("PATIENT_NOT_FOUND", "Patient not found")
    data = treatment_in.model_dump()
    if data.get("treatment_date") is None:
        data["treatment_date"] = utcnow()
    return await treatment_history_repository.create_in_clinic(db, clinic_id, data)


async def update_treatment(
    db: AsyncSession,
    ctx: ClinicContext,
    treatment_id: int,
    treatment_in: treatment_history_schema.TreatmentHistoryUpdate,
) -> TreatmentHistory:
    treatment = await get_treatment(db, ctx, treatment_id)
    return await treatment_history_repository.update(db, treatment, treatment_in)


async def delete_treatment(db: AsyncSession, ctx: ClinicContext, treatment_id: int) -> TreatmentHistory:
    treatment = await get_treatment(db, ctx, treatment_id)
    return await treatment_history_repository.soft_delete(db, treatment)
