import logging
from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.clinic_context import ClinicContext
from app.core.config import settings
from app.core.exceptions import NotFoundError
from app.models.queue_model import PatientQueue
from app.repository.patient_repository import patient_repository
from app.repository.queue_repository import queue_repository
from app.schemas import queue_schema
from app.utils.generators import next_sequence_number, queue_number_prefix
from app.utils.helpers import utcnow

logger = logging.getLogger(__name__)

STATUS_TIMESTAMPS = {
    "Called": "called_time",
    "InProgress": "start_time",
    "Completed": "completion_time",
    "NoShow": "completion_time",
    "Cancelled": "completion_time",
}


def apply_status(item: PatientQueue, status: str, assigned_staff_id: Optional[int] = None, room_id: Optional[int] = None) -> None:
    item.status = status
    if assigned_staff_id is not None:
        item.assigned_staff_id = assigned_staff_id
    if room_id is not None:
        item.room_id = room_id
    timestamp_field = STATUS_TIMESTAMPS.get(status)
    if timestamp_field:
        setattr(item, timestamp_field, utcnow())


async def add_to_queue(db: AsyncSession, ctx: ClinicContext, queue_in: queue_schema.QueueCreate) -> PatientQueue:
    clinic_id = ctx.require_clinic()
    if await patient_repository.get_in_clinic(db, clinic_id, queue_in.patient_id) is None:
        raise NotFoundError("PATIENT_NOT_FOUND", "Patient not found")

    now = utcnow()
    prefix = queue_number_prefix(queue_in.queue_type, now)
    last_number = await queue_repository.get_last_queue_number(db, clinic_id, prefix)

    data = queue_in.model_dump()
    data.update(
        queue_number=next_sequence_number(prefix, last_number, width=3, separator=""),
        queue_date=now.date(),
        check_in_time=now,
        status="Waiting",
    )
    item = await queue_repository.create_in_clinic(db, clinic_id, data)
    logger.info("Patient %s checked in as %s", item.patient_id, item.queue_number)
    return item


async def get_queue_item(db: AsyncSession, ctx: ClinicContext, queue_id: int) -> PatientQueue:
    item = await queue_repository.get_in_clinic(db, ctx.require_clinic(), queue_id)
    if item is None:
        raise NotFoundError("QUEUE_NOT_FOUND", "Queue entry not found")
    return item


async def update_status(
    db: AsyncSession, ctx: ClinicContext, queue_id: int, request: queue_schema.QueueStatusUpdate
) -> PatientQueue:
    item = await get_queue_item(db, ctx, queue_id)
    apply_status(item, request.status, request.assigned_staff_id, request.room_id)
    await db.commit()
    await db.refresh(item)
    return item


async def call_next(db: AsyncSession, ctx: ClinicContext, request: queue_schema.CallNextRequest) -> PatientQueue:
    """Calls the highest-priority, longest-waiting patient, optionally for a given staff member or room."""
    item = await queue_repository.get_next_waiting(
        db, ctx.require_clinic(), utcnow().date(), staff_id=request.staff_id, room_id=request.room_id
    )
    if item is None:
        raise NotFoundError("NO_PATIENTS_WAITING", "No patients are waiting")
    apply_status(item, "Called", request.staff_id, request.room_id)
    await db.commit()
    await db.refresh(item)
    logger.info("Called %s", item.queue_number)
    return item


async def get_today_queue(db: AsyncSession, ctx: ClinicContext) -> List[PatientQueue]:
    return await queue_repository.get_for_date(db, ctx.require_clinic(), utcnow().date())


async def get_waiting(db: AsyncSession, ctx: ClinicContext) -> List[PatientQueue]:
    return await queue_repository.get_for_date(
        db, ctx.require_clinic(), utcnow().date(), statuses=("Waiting", "Called")
    )


async def get_estimated_wait(db: AsyncSession, ctx: ClinicContext, queue_id: int) -> int:
    """Minutes until the entry is likely to be seen; 0 for an unknown entry."""
    item = await queue_repository.get_in_clinic(db, ctx.require_clinic(), queue_id)
    if item is None:
        return 0
    ahead = await queue_repository.count_ahead(db, item)
    return ahead * settings.QUEUE_MINUTES_PER_PATIENT
