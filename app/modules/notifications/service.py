import logging
from datetime import datetime, timedelta
from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.clinic_context import ClinicContext
from app.core.exceptions import NotFoundError, ServiceError
from app.models.notification_model import Notification
from app.models.staff_model import StaffRole
from app.repository.appointment_repository import appointment_repository
from app.repository.billing_repository import bill_repository
from app.repository.medical_repository import treatment_history_repository
from app.repository.notification_repository import notification_repository
from app.repository.patient_repository import patient_repository
from app.repository.staff_repository import staff_repository
from app.schemas import notification_schema
from app.utils.helpers import utcnow

logger = logging.getLogger(__name__)


def appointment_reminder_message(patient_name: str, appointment_date: datetime) -> str:
    return (
        f"Dear {patient_name}, you have an appointment scheduled for "
        f"{appointment_date:%b %d, %Y at %H:%M}. Please arrive 15 minutes early."
    )


def payment_reminder_message(patient_name: str, total_amount, bill_number: str) -> str:
    return (
        f"Dear {patient_name}, you have an outstanding bill of {total_amount:,.2f}. "
        f"Bill number: {bill_number}. Please make payment at your earliest convenience."
    )


def follow_up_reminder_message(patient_name: str, follow_up_date: datetime) -> str:
    return (
        f"Dear {patient_name}, this is a reminder for your follow-up appointment scheduled for "
        f"{follow_up_date:%b %d, %Y}. Please contact us to confirm your appointment."
    )


async def _patient_for(db: AsyncSession, clinic_id: int, patient_id: int):
    patient = await patient_repository.get_in_clinic(db, clinic_id, patient_id)
    if patient is None:
        raise NotFoundError("PATIENT_NOT_FOUND", "Patient not found")
    return patient


# --- Patient notifications ---

async def schedule_notification(
    db: AsyncSession, ctx: ClinicContext, notification_in: notification_schema.NotificationCreate
) -> Notification:
    data = notification_in.model_dump()
    data.update(status="Pending", retry_count=0)
    notification = await notification_repository.create(db, {**data, "clinic_id": ctx.require_clinic()})
    logger.info(
        "%s notification %s scheduled for %s",
        notification.notification_type, notification.id, notification.scheduled_time,
    )
    return notification


async def deliver(db: AsyncSession, notification: Notification) -> Notification:
    """Marks a notification as sent; no SMS or e-mail gateway is wired in yet."""
    notification.status = "Sent"
    notification.sent_time = utcnow()
    await db.commit()
    logger.info(
        "Notification %s sent via %s to %s",
        notification.id, notification.delivery_method, notification.recipient,
    )
    return notification


async def send_notification(db: AsyncSession, ctx: ClinicContext, notification_id: int) -> Notification:
    notification = await notification_repository.get(db, notification_id)
    if notification is None or notification.clinic_id != ctx.require_clinic():
        raise NotFoundError("NOTIFICATION_NOT_FOUND", "Notification not found")
    return await deliver(db, notification)


async def send_appointment_reminder(
    db: AsyncSession, ctx: ClinicContext, request: notification_schema.AppointmentReminderRequest
) -> Notification:
    clinic_id = ctx.require_clinic()
    appointment = await appointment_repository.get_in_clinic(db, clinic_id, request.appointment_id)
    if appointment is None:
        raise NotFoundError("APPOINTMENT_NOT_FOUND", "Appointment not found")
    patient = await _patient_for(db, clinic_id, appointment.patient_id)

    return await schedule_notification(db, ctx, notification_schema.NotificationCreate(
        patient_id=patient.id,
        appointment_id=appointment.id,
        notification_type="AppointmentReminder",
        delivery_method="SMS",
        recipient=patient.phone_number,
        subject="Appointment Reminder",
        message=appointment_reminder_message(patient.full_name, appointment.appointment_date),
        scheduled_time=appointment.appointment_date - timedelta(hours=request.hours_before),
    ))


async def send_payment_reminder(
    db: AsyncSession, ctx: ClinicContext, request: notification_schema.PaymentReminderRequest
) -> Notification:
    clinic_id = ctx.require_clinic()
    bill = await bill_repository.get_in_clinic(db, clinic_id, request.bill_id)
    if bill is None:
        raise NotFoundError("BILL_NOT_FOUND", "Bill not found")
    patient = await _patient_for(db, clinic_id, bill.patient_id)

    return await schedule_notification(db, ctx, notification_schema.NotificationCreate(
        patient_id=patient.id,
        notification_type="PaymentReminder",
        delivery_method="SMS",
        recipient=patient.phone_number,
        subject="Payment Reminder",
        message=payment_reminder_message(patient.full_name, bill.total_amount, bill.bill_number),
        scheduled_time=utcnow(),
    ))


async def schedule_follow_up_reminder(
    db: AsyncSession, ctx: ClinicContext, request: notification_schema.FollowUpReminderRequest
) -> Notification:
    clinic_id = ctx.require_clinic()
    treatment = await treatment_history_repository.get_in_clinic(db, clinic_id, request.treatment_history_id)
    if treatment is None:
        raise NotFoundError("TREATMENT_NOT_FOUND", "Treatment history not found")
    patient = await _patient_for(db, clinic_id, treatment.patient_id)

    return await schedule_notification(db, ctx, notification_schema.NotificationCreate(
        patient_id=patient.id,
        notification_type="FollowUp",
        delivery_method="SMS",
        recipient=patient.phone_number,
        subject="Follow-up Reminder",
        message=follow_up_reminder_message(patient.full_name, request.follow_up_date),
        scheduled_time=request.follow_up_date - timedelta(days=1),
    ))


async def get_pending_notifications(db: AsyncSession, ctx: ClinicContext) -> List[Notification]:
    return await notification_repository.get_pending_due(db, utcnow(), clinic_id=ctx.require_clinic())


async def get_patient_notifications(db: AsyncSession, ctx: ClinicContext, patient_id: int) -> List[Notification]:
    return await notification_repository.get_by_patient(db, ctx.require_clinic(), patient_id)


async def process_pending_notifications(db: AsyncSession, clinic_id: Optional[int] = None) -> int:
    """Sends every due notification; returns how many were sent."""
    pending = await notification_repository.get_pending_due(db, utcnow(), clinic_id=clinic_id)
    for notification in pending:
        await deliver(db, notification)
    if pending:
        logger.info("Processed %s pending notification(s)", len(pending))
    return len(pending)


# --- In-app user notifications ---

async def get_user_notifications(
    db: AsyncSession, ctx: ClinicContext, is_read: Optional[bool] = None, type: Optional[str] = None
) -> List[Notification]:
    return await notification_repository.get_for_user(db, ctx.require_user(), is_read=is_read, type=type)


async def get_unread_count(db: AsyncSession, ctx: ClinicContext) -> int:
    return await notification_repository.count_unread(db, ctx.require_user())


async def get_user_notification(db: AsyncSession, ctx: ClinicContext, notification_id: int) -> Notification:
    notification = await notification_repository.get_user_notification(db, notification_id, ctx.require_user())
    if notification is None:
        raise NotFoundError("NOTIFICATION_NOT_FOUND", "Notification not found")
    return notification


async def mark_as_read(db: AsyncSession, ctx: ClinicContext, notification_id: int) -> Notification:
    notification = await get_user_notification(db, ctx, notification_id)
    if not notification.is_read:
        notification.is_read = True
        notification.read_at = utcnow()
        await db.commit()
    return notification


async def mark_all_as_read(db: AsyncSession, ctx: ClinicContext) -> None:
    await notification_repository.mark_all_read(db, ctx.require_user(), utcnow())


async def delete_user_notification(db: AsyncSession, ctx: ClinicContext, notification_id: int) -> None:
    notification = await get_user_notification(db, ctx, notification_id)
    await notification_repository.soft_delete(db, notification)


async def send_system_notification(
    db: AsyncSession, ctx: ClinicContext, request: notification_schema.SystemNotificationRequest
) -> int:
    """
    Creates one in-app notification per recipient and returns the recipient count.
    Recipients are the explicit ``user_ids`` or, failing that, staff of ``role`` in the current clinic.
    """
    clinic_id = ctx.require_clinic()
    if request.user_ids is not None:
        recipients = list(request.user_ids)
    elif request.role:
        if request.role not in StaffRole.__members__:
            raise ServiceError("INVALID_INPUT", message=f"Invalid role '{request.role}'")
        recipients = await staff_repository.get_ids_by_role_in_clinic(db, request.role, clinic_id)
    else:
        raise ServiceError("INVALID_INPUT", message="Either user_ids or role is required")

    now = utcnow()
    for user_id in recipients:
        db.add(Notification(
            clinic_id=clinic_id,
            user_id=user_id,
            title=request.title,
            message=request.message,
            type=request.type,
            priority=request.priority,
            is_read=False,
            notification_type="System",
            delivery_method="InApp",
            scheduled_time=now,
            sent_time=now,
            status="Sent",
        ))
    await db.commit()
    logger.info("System notification '%s' sent to %s user(s)", request.title, len(recipients))
    return len(recipients)
