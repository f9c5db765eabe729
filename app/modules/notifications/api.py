from typing import Dict, List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.clinic_context import ClinicContext
from app.core.dependencies import get_db, get_clinic_context, require_roles
from app.models.staff_model import StaffRole
from app.modules.notifications import service as notification_service
from app.schemas import notification_schema
from app.schemas.common_schema import ApiResponse, ok

router = APIRouter(
    prefix="/notifications",
    tags=["Notifications"],
)

managers = require_roles(StaffRole.ClinicManager)

NotificationOut = notification_schema.Notification
UserNotificationOut = notification_schema.UserNotification


# --- Patient notifications ---

@router.post("/", response_model=ApiResponse[NotificationOut], status_code=201)
async def schedule_notification(
    notification_in: notification_schema.NotificationCreate,
    db: AsyncSession = Depends(get_db),
    ctx: ClinicContext = Depends(get_clinic_context),
):
    notification = await notification_service.schedule_notification(db, ctx, notification_in)
    return ok(NotificationOut.model_validate(notification), message="Notification scheduled")


@router.post("/{notification_id}/send", response_model=ApiResponse[NotificationOut])
async def send_notification(
    notification_id: int,
    db: AsyncSession = Depends(get_db),
    ctx: ClinicContext = Depends(get_clinic_context),
):
    notification = await notification_service.send_notification(db, ctx, notification_id)
    return ok(NotificationOut.model_validate(notification), message="Notification sent")


@router.post("/appointment-reminder", response_model=ApiResponse[NotificationOut], status_code=201)
async def send_appointment_reminder(
    request: notification_schema.AppointmentReminderRequest,
    db: AsyncSession = Depends(get_db),
    ctx: ClinicContext = Depends(get_clinic_context),
):
    notification = await notification_service.send_appointment_reminder(db, ctx, request)
    return ok(NotificationOut.model_validate(notification), message="Appointment reminder scheduled")


@router.post("/payment-reminder", response_model=ApiResponse[NotificationOut], status_code=201)
async def send_payment_reminder(
    request: notification_schema.PaymentReminderRequest,
    db: AsyncSession = Depends(get_db),
    ctx: ClinicContext = Depends(get_clinic_context),
):
    notification = await notification_service.send_payment_reminder(db, ctx, request)
    return ok(NotificationOut.model_validate(notification), message="Payment reminder scheduled")


@router.post("/follow-up-reminder", response_model=ApiResponse[NotificationOut], status_code=201)
async def schedule_follow_up_reminder(
    request: notification_schema.FollowUpReminderRequest,
    db: AsyncSession = Depends(get_db),
    ctx: ClinicContext = Depends(get_clinic_context),
):
    notification = await notification_service.schedule_follow_up_reminder(db, ctx, request)
    return ok(NotificationOut.model_validate(notification), message="Follow-up reminder scheduled")


@router.get("/pending", response_model=ApiResponse[List[NotificationOut]])
async def get_pending_notifications(
    db: AsyncSession = Depends(get_db),
    ctx: ClinicContext = Depends(get_clinic_context),
):
    notifications = await notification_service.get_pending_notifications(db, ctx)
    return ok([NotificationOut.model_validate(n) for n in notifications])


@router.post("/process-pending", response_model=ApiResponse[Dict[str, int]])
async def process_pending_notifications(
    db: AsyncSession = Depends(get_db),
    ctx: ClinicContext = Depends(managers),
):
    sent = await notification_service.process_pending_notifications(db, ctx.require_clinic())
    return ok({"sent": sent}, message=f"{sent} notification(s) sent")


@router.get("/patient/{patient_id}", response_model=ApiResponse[List[NotificationOut]])
async def get_patient_notifications(
    patient_id: int,
    db: AsyncSession = Depends(get_db),
    ctx: ClinicContext = Depends(get_clinic_context),
):
    notifications = await notification_service.get_patient_notifications(db, ctx, patient_id)
    return ok([NotificationOut.model_validate(n) for n in notifications])


# --- In-app user notifications ---

@router.get("/me", response_model=ApiResponse[List[UserNotificationOut]])
async def get_my_notifications(
    is_read: Optional[bool] = Query(None, alias="isRead"),
    type: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
    ctx: ClinicContext = Depends(get_clinic_context),
):
    notifications = await notification_service.get_user_notifications(db, ctx, is_read=is_read, type=type)
    return ok([UserNotificationOut.model_validate(n) for n in notifications])


@router.get("/me/unread-count", response_model=ApiResponse[notification_schema.UnreadCount])
async def get_unread_count(
    db: AsyncSession = Depends(get_db),
    ctx: ClinicContext = Depends(get_clinic_context),
):
    count = await notification_service.get_unread_count(db, ctx)
    return ok(notification_schema.UnreadCount(unread_count=count))


@router.put("/me/read-all", response_model=ApiResponse[None])
async def mark_all_as_read(
    db: AsyncSession = Depends(get_db),
    ctx: ClinicContext = Depends(get_clinic_context),
):
    await notification_service.mark_all_as_read(db, ctx)
    return ok(message="All notifications marked as read")


@router.get("/me/{notification_id}", response_model=ApiResponse[UserNotificationOut])
async def get_my_notification(
    notification_id: int,
    db: AsyncSession = Depends(get_db),
    ctx: ClinicContext = Depends(get_clinic_context),
):
    notification = await notification_service.get_user_notification(db, ctx, notification_id)
    return ok(UserNotificationOut.model_validate(notification))


@router.put("/me/{notification_id}/read", response_model=ApiResponse[UserNotificationOut])
async def mark_as_read(
    notification_id: int,
    db: AsyncSession = Depends(get_db),
    ctx: ClinicContext = Depends(get_clinic_context),
):
    notification = await notification_service.mark_as_read(db, ctx, notification_id)
    return ok(UserNotificationOut.model_validate(notification), message="Notification marked as read")


@router.delete("/me/{notification_id}", response_model=ApiResponse[None])
async def delete_my_notification(
    notification_id: int,
    db: AsyncSession = Depends(get_db),
    ctx: ClinicContext = Depends(get_clinic_context),
):
    await notification_service.delete_user_notification(db, ctx, notification_id)
    return ok(message="Notification deleted")


@router.post("/system", response_model=ApiResponse[Dict[str, int]], status_code=201)
async def send_system_notification(
    request: notification_schema.SystemNotificationRequest,
    db: AsyncSession = Depends(get_db),
    ctx: ClinicContext = Depends(managers),
):
    recipients = await notification_service.send_system_notification(db, ctx, request)
    return ok({"recipients": recipients}, message=f"Notification sent to {recipients} user(s)")
