from datetime import datetime
from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.clinic_context import ClinicContext
from app.core.dependencies import get_db, require_roles, guard_appointments, release_appointments, UsageGuard
from app.models.staff_model import StaffRole
from app.modules.appointments import service as appointment_service
from app.schemas import appointment_schema
from app.schemas.common_schema import ApiResponse, ok
from app.utils.activity_logger import log_activity

router = APIRouter(
    prefix="/appointments",
    tags=["Appointments"],
)

manage_appointments = require_roles(StaffRole.ClinicManager, StaffRole.Doctor, StaffRole.Nurse, StaffRole.Receptionist)


def _to_list(appointments) -> List[appointment_schema.Appointment]:
    return [appointment_schema.Appointment.model_validate(a) for a in appointments]


@router.get("/", response_model=ApiResponse[List[appointment_schema.Appointment]])
async def get_appointments(
    start_date: Optional[datetime] = Query(None, alias="startDate"),
    end_date: Optional[datetime] = Query(None, alias="endDate"),
    db: AsyncSession = Depends(get_db),
    ctx: ClinicContext = Depends(manage_appointments),
):
    return ok(_to_list(await appointment_service.get_appointments(db, ctx, start_date, end_date)))


@router.get("/patient/{patient_id}", response_model=ApiResponse[List[appointment_schema.Appointment]])
async def get_patient_appointments(
    patient_id: int,
    db: AsyncSession = Depends(get_db),
    ctx: ClinicContext = Depends(manage_appointments),
):
    return ok(_to_list(await appointment_service.get_patient_appointments(db, ctx, patient_id)))


@router.get("/staff/{staff_id}", response_model=ApiResponse[List[appointment_schema.Appointment]])
async def get_staff_appointments(
    staff_id: int,
    db: AsyncSession = Depends(get_db),
    ctx: ClinicContext = Depends(manage_appointments),
):
    return ok(_to_list(await appointment_service.get_staff_appointments(db, ctx, staff_id)))


@router.get("/{appointment_id}", response_model=ApiResponse[appointment_schema.Appointment])
async def get_appointment(
    appointment_id: int,
    db: AsyncSession = Depends(get_db),
    ctx: ClinicContext = Depends(manage_appointments),
):
    appointment = await appointment_service.get_appointment(db, ctx, appointment_id)
    return ok(appointment_schema.Appointment.model_validate(appointment))


@router.post("/", response_model=ApiResponse[appointment_schema.Appointment], status_code=201)
async def create_appointment(
    appointment_in: appointment_schema.AppointmentCreate,
    db: AsyncSession = Depends(get_db),
    ctx: ClinicContext = Depends(manage_appointments),
    usage: UsageGuard = Depends(guard_appointments),
):
    appointment = await appointment_service.create_appointment(db, ctx, appointment_in)
    await usage.record(db)
    await log_activity(
        db=db,
        user_id=ctx.current_user_id,
        activity_type_category="Data/CRUD",
        clinic_id=ctx.current_clinic_id,
        activity_description=f"Appointment {appointment.id} scheduled for {appointment.appointment_date}.",
    )
    return ok(appointment_schema.Appointment.model_validate(appointment), message="Appointment created successfully")


@router.put("/{appointment_id}", response_model=ApiResponse[appointment_schema.Appointment])
async def update_appointment(
    appointment_id: int,
    appointment_in: appointment_schema.AppointmentUpdate,
    db: AsyncSession = Depends(get_db),
    ctx: ClinicContext = Depends(manage_appointments),
):
    appointment = await appointment_service.update_appointment(db, ctx, appointment_id, appointment_in)
    return ok(appointment_schema.Appointment.model_validate(appointment), message="Appointment updated successfully")


@router.put("/{appointment_id}/status", response_model=ApiResponse[appointment_schema.Appointment])
async def update_appointment_status(
    appointment_id: int,
    request: appointment_schema.AppointmentStatusUpdate,
    db: AsyncSession = Depends(get_db),
    ctx: ClinicContext = Depends(manage_appointments),
):
    appointment = await appointment_service.update_appointment_status(db, ctx, appointment_id, request.status)
    await log_activity(
        db=db,
        user_id=ctx.current_user_id,
        activity_type_category="Data/CRUD",
        clinic_id=ctx.current_clinic_id,
        activity_description=f"Appointment {appointment.id} marked {appointment.status}.",
    )
    return ok(appointment_schema.Appointment.model_validate(appointment), message="Appointment status updated")


@router.delete("/{appointment_id}", response_model=ApiResponse[None])
async def delete_appointment(
    appointment_id: int,
    db: AsyncSession = Depends(get_db),
    ctx: ClinicContext = Depends(manage_appointments),
    usage: UsageGuard = Depends(release_appointments),
):
    appointment = await appointment_service.delete_appointment(db, ctx, appointment_id)
    await usage.record(db, -1)
    await log_activity(
        db=db,
        user_id=ctx.current_user_id,
        activity_type_category="Data/CRUD",
        clinic_id=ctx.current_clinic_id,
        activity_description=f"Appointment {appointment.id} deleted.",
    )
    return ok(message="Appointment deleted successfully")
