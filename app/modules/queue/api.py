from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.clinic_context import ClinicContext
from app.core.dependencies import get_db, require_roles
from app.models.staff_model import StaffRole
from app.modules.queue import service as queue_service
from app.schemas import queue_schema
from app.schemas.common_schema import ApiResponse, ok

router = APIRouter(
    prefix="/queue",
    tags=["Queue"],
)

manage_queue = require_roles(StaffRole.ClinicManager, StaffRole.Doctor, StaffRole.Nurse, StaffRole.Receptionist)

QueueOut = queue_schema.QueueItem


@router.get("/today", response_model=ApiResponse[List[QueueOut]])
async def get_today_queue(
    db: AsyncSession = Depends(get_db),
    ctx: ClinicContext = Depends(manage_queue),
):
    return ok([QueueOut.model_validate(q) for q in await queue_service.get_today_queue(db, ctx)])


@router.get("/waiting", response_model=ApiResponse[List[QueueOut]])
async def get_waiting(
    db: AsyncSession = Depends(get_db),
    ctx: ClinicContext = Depends(manage_queue),
):
    return ok([QueueOut.model_validate(q) for q in await queue_service.get_waiting(db, ctx)])


@router.get("/{queue_id}", response_model=ApiResponse[QueueOut])
async def get_queue_item(
    queue_id: int,
    db: AsyncSession = Depends(get_db),
    ctx: ClinicContext = Depends(manage_queue),
):
    return ok(QueueOut.model_validate(await queue_service.get_queue_item(db, ctx, queue_id)))


@router.get("/{queue_id}/estimated-wait", response_model=ApiResponse[queue_schema.EstimatedWait])
async def get_estimated_wait(
    queue_id: int,
    db: AsyncSession = Depends(get_db),
    ctx: ClinicContext = Depends(manage_queue),
):
    minutes = await queue_service.get_estimated_wait(db, ctx, queue_id)
    return ok(queue_schema.EstimatedWait(queue_id=queue_id, estimated_wait_minutes=minutes))


@router.post("/", response_model=ApiResponse[QueueOut], status_code=201)
async def add_to_queue(
    queue_in: queue_schema.QueueCreate,
    db: AsyncSession = Depends(get_db),
    ctx: ClinicContext = Depends(manage_queue),
):
    item = await queue_service.add_to_queue(db, ctx, queue_in)
    return ok(QueueOut.model_validate(item), message=f"Patient added to queue as {item.queue_number}")


@router.put("/{queue_id}/status", response_model=ApiResponse[QueueOut])
async def update_status(
    queue_id: int,
    request: queue_schema.QueueStatusUpdate,
    db: AsyncSession = Depends(get_db),
    ctx: ClinicContext = Depends(manage_queue),
):
    item = await queue_service.update_status(db, ctx, queue_id, request)
    return ok(QueueOut.model_validate(item), message="Queue status updated")


@router.post("/call-next", response_model=ApiResponse[QueueOut])
async def call_next(
    request: queue_schema.CallNextRequest,
    db: AsyncSession = Depends(get_db),
    ctx: ClinicContext = Depends(manage_queue),
):
    item = await queue_service.call_next(db, ctx, request)
    return ok(QueueOut.model_validate(item), message=f"Now calling {item.queue_number}")
