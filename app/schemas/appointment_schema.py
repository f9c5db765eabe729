from pydantic import BaseModel, Field
from typing import Literal, Optional
from datetime import datetime

AppointmentStatus = Literal["Scheduled", "Confirmed", "Completed", "Cancelled", "NoShow"]


class AppointmentCreate(BaseModel):
    patient_id: int
    staff_id: int
    appointment_date: datetime
    status: AppointmentStatus = "Scheduled"
    notes: Optional[str] = Field(None, max_length=1000)


class AppointmentUpdate(BaseModel):
    patient_id: Optional[int] = None
    staff_id: Optional[int] = None
    appointment_date: Optional[datetime] = None
    status: Optional[AppointmentStatus] = None
    notes: Optional[str] = Field(None, max_length=1000)


class AppointmentStatusUpdate(BaseModel):
    status: AppointmentStatus


class Appointment(BaseModel):
    id: int
    clinic_id: int
    patient_id: int
    staff_id: int
    appointment_date: datetime
    status: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
