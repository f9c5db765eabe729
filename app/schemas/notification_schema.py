from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime


class NotificationCreate(BaseModel):
    patient_id: Optional[int] = None
    appointment_id: Optional[int] = None
    notification_type: str = Field(..., min_length=1, max_length=50)
    delivery_method: str = Field("SMS", max_length=20)
    recipient: Optional[str] = Field(None, max_length=200)
    subject: Optional[str] = Field(None, max_length=200)
    message: str = Field(..., min_length=1)
    scheduled_time: datetime


class AppointmentReminderRequest(BaseModel):
    appointment_id: int
    hours_before: int = Field(24, gt=0)


class PaymentReminderRequest(BaseModel):
    bill_id: int


class FollowUpReminderRequest(BaseModel):
    treatment_history_id: int
    follow_up_date: datetime


class SystemNotificationRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    message: str = Field(..., min_length=1)
    type: str = "info"
    priority: str = "normal"
    user_ids: Optional[List[int]] = None
    role: Optional[str] = None


class Notification(BaseModel):
    id: int
    clinic_id: int
    patient_id: Optional[int] = None
    appointment_id: Optional[int] = None
    notification_type: str
    delivery_method: Optional[str] = None
    recipient: Optional[str] = None
    subject: Optional[str] = None
    message: str
    scheduled_time: datetime
    sent_time: Optional[datetime] = None
    status: Optional[str] = None
    error_message: Optional[str] = None
    retry_count: Optional[int] = None

    class Config:
        from_attributes = True


class UserNotification(BaseModel):
    id: int
    user_id: Optional[int] = None
    title: Optional[str] = None
    message: str
    type: Optional[str] = None
    priority: Optional[str] = None
    is_read: Optional[bool] = None
    read_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class UnreadCount(BaseModel):
    unread_count: int
