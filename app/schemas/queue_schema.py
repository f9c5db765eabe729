from pydantic import BaseModel, Field
from typing import Literal, Optional
from datetime import date, datetime

QueueStatus = Literal["Waiting", "Called", "InProgress", "Completed", "NoShow", "Cancelled"]


class QueueCreate(BaseModel):
    patient_id: int
    appointment_id: Optional[int] = None
    queue_type: Literal["Appointment", "WalkIn", "Emergency"] = "WalkIn"
    priority: int = Field(0, ge=0, le=2)
    notes: Optional[str] = None


class QueueStatusUpdate(BaseModel):
    status: QueueStatus
    assigned_staff_id: Optional[int] = None
    room_id: Optional[int] = None


class CallNextRequest(BaseModel):
    staff_id: Optional[int] = None
    room_id: Optional[int] = None


class QueueItem(BaseModel):
    id: int
    clinic_id: int
    patient_id: int
    appointment_id: Optional[int] = None
    queue_number: str
    queue_date: date
    check_in_time: datetime
    called_time: Optional[datetime] = None
    start_time: Optional[datetime] = None
    completion_time: Optional[datetime] = None
    status: str
    queue_type: str
    priority: int
    assigned_staff_id: Optional[int] = None
    room_id: Optional[int] = None
    notes: Optional[str] = None

    class Config:
        from_attributes = True


class EstimatedWait(BaseModel):
    queue_id: int
    estimated_wait_minutes: int
