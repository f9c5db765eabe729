from pydantic import BaseModel, Field
from typing import Optional
from decimal import Decimal
from datetime import datetime


class TreatmentHistoryBase(BaseModel):
    chief_complaint: Optional[str] = None
    symptoms: Optional[str] = None
    blood_pressure: Optional[str] = Field(None, max_length=20)
    temperature: Optional[Decimal] = None
    heart_rate: Optional[int] = None
    respiratory_rate: Optional[int] = None
    weight: Optional[Decimal] = None
    height: Optional[Decimal] = None
    physical_examination: Optional[str] = None
    diagnosis: Optional[str] = None
    differential_diagnosis: Optional[str] = None
    prescription: Optional[str] = None
    treatment_plan: Optional[str] = None
    follow_up_instructions: Optional[str] = None
    next_appointment_date: Optional[datetime] = None
    notes: Optional[str] = None


class TreatmentHistoryCreate(TreatmentHistoryBase):
    patient_id: int
    appointment_id: Optional[int] = None
    staff_id: int
    treatment_date: Optional[datetime] = None
    treatment: str = Field(..., min_length=1)


class TreatmentHistoryUpdate(TreatmentHistoryBase):
    appointment_id: Optional[int] = None
    staff_id: Optional[int] = None
    treatment_date: Optional[datetime] = None
    treatment: Optional[str] = Field(None, min_length=1)


class TreatmentHistory(TreatmentHistoryBase):
    id: int
    clinic_id: int
    patient_id: int
    appointment_id: Optional[int] = None
    staff_id: int
    treatment_date: datetime
    treatment: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
