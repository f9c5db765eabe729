import logging
from datetime import datetime, time
from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.clinic_context import ClinicContext
from app.core.exceptions import NotFoundError, ServiceError
from app.models.appointment_model import Appointment
from app.repository.appointment_repository import appointment_repository
from app.repository.patient_repository import patient_repository
from app.schemas import appointment_schema
from app.utils.helpers import add_months, utcnow

logger = logging.getLogger(__name__)


def _slot_taken() -> ServiceError:
    return ServiceError(
        "APPOINTMENT_TIME_SLOT_NOT_AVAILABLE",
        message="The selected time slot is not available for this staff member",
    )


async def get_appointments(
    db: AsyncSession,
    ctx: ClinicContext,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
) -> List[Appointment]:
    """Appointments in a date range; defaults to today through one month ahead."""
    if start_date is None:
        start_date = datetime.combine(utcnow().date(), time.min)
    if end_date is None:
        end_date = add_months(start_date, 1)
    return await appointment_repository.get_by_date_range(db, ctx.require_clinic(), start_date, end_date)


async def get_appointment(db: AsyncSession, ctx: ClinicContext, appointment_id: int) -> Appointment:
    appointment = await appointment_repository.get_in_clinic(db, ctx.require_clinic(), appointment_id)
    if appointment is None:
        raise NotFoundError("APPOINTMENT_NOT_FOUND", "Appointment not found")
    return appointment


async def get_patient_appointments(db: AsyncSession, ctx: ClinicContext, patient_id: int) -> List[Appointment]:
    return await appointment_repository.get_by_patient(db, ctx.require_clinic(), patient_id)


async def get_staff_appointments(db: AsyncSession, ctx: ClinicContext, staff_id: int) -> List[Appointment]:
    return await appointment_repository.get_by_staff(db, ctx.require_clinic(), staff_id)


async def create_appointment(
    db: AsyncSession, ctx: ClinicContext, appointment_in: appointment_schema.AppointmentCreate
) -> Appointment:
    clinic_id = ctx.require_clinic()
    if await patient_repository.get_in_clinic(db, clinic_id, appointment_in.patient_id) is None:
        raise NotFoundError("PATIENT_NOT_FOUND", "Patient not found")
    if await appointment_repository.has_conflict(db, appointment_in.staff_id, appointment_in.appointment_date):
        raise _slot_taken()

    appointment = await appointment_repository.create_in_clinic(db, clinic_id, appointment_in)
    logger.info(
        "Appointment %s booked for patient %s with staff %s at %s",
        appointment.id, appointment.patient_id, appointment.staff_id, appointment.appointment_date,
    )
    return appointment


async def update_appointment(
    db: AsyncSession,
    ctx: ClinicContext,
    appointment_id: int,
    appointment_in: appointment_schema.AppointmentUpdate,
) -> Appointment:
    appointment = await get_appointment(db, ctx, appointment_id)
    update_data = appointment_in.model_dump(exclude_unset=True)

    staff_id = update_data.get("staff_id", appointment.staff_id)
    appointment_date = update_data.get("appointment_date", appointment.appointment_date)
    if (staff_id, appointment_date) != (appointment.staff_id, appointment.appointment_date):
        if await appointment_repository.has_conflict(db, staff_id, appointment_date, exclude_id=appointment.id):
            raise _slot_taken()

    return await appointment_repository.update(db, appointment, update_data)


async def update_appointment_status(
    db: AsyncSession, ctx: ClinicContext, appointment_id: int, status: str
) -> Appointment:
    appointment = await get_appointment(db, ctx, appointment_id)
    return await appointment_repository.update(db, appointment, {"status": status})


async def delete_appointment(db: AsyncSession, ctx: ClinicContext, appointment_id: int) -> Appointment:
    appointment = await get_appointment(db, ctx, appointment_id)
    return await appointment_repository.soft_delete(db, appointment)
