from pydantic import BaseModel, EmailStr, Field
from typing import Optional
from datetime import date, datetime


class PatientBase(BaseModel):
    full_name: str = Field(..., min_length=1, max_length=200)
    phone_number: Optional[str] = Field(None, max_length=20)
    email: Optional[EmailStr] = None
    date_of_birth: Optional[date] = None
    gender: Optional[str] = Field(None, max_length=20)
    address: Optional[str] = Field(None, max_length=500)
    allergies: Optional[str] = None
    chronic_conditions: Optional[str] = None
    blood_type: Optional[str] = Field(None, max_length=5)
    emergency_contact_name: Optional[str] = Field(None, max_length=200)
    emergency_contact_phone: Optional[str] = Field(None, max_length=20)
    id_number: Optional[str] = Field(None, max_length=50)
    insurance_number: Optional[str] = Field(None, max_length=50)
    insurance_provider: Optional[str] = Field(None, max_length=100)
    occupation: Optional[str] = Field(None, max_length=100)
    referral_source: Optional[str] = Field(None, max_length=100)
    first_visit_date: Optional[datetime] = None
    receive_promotions: bool = False
    notes: Optional[str] = None


class PatientCreate(PatientBase):
    pass


class PatientUpdate(BaseModel):
    full_name: Optional[str] = Field(None, min_length=1, max_length=200)
    phone_number: Optional[str] = Field(None, max_length=20)
    email: Optional[EmailStr] = None
    date_of_birth: Optional[date] = None
    gender: Optional[str] = None
    address: Optional[str] = None
    allergies: Optional[str] = None
    chronic_conditions: Optional[str] = None
    blood_type: Optional[str] = Field(None, max_length=5)
    emergency_contact_name: Optional[str] = None
    emergency_contact_phone: Optional[str] = None
    id_number: Optional[str] = None
    insurance_number: Optional[str] = None
    insurance_provider: Optional[str] = None
    occupation: Optional[str] = None
    referral_source: Optional[str] = None
    first_visit_date: Optional[datetime] = None
    receive_promotions: Optional[bool] = None
    notes: Optional[str] = None


class Patient(PatientBase):
    id: int
    clinic_id: int
    patient_code: str
    email: Optional[str] = None
    receive_promotions: Optional[bool] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
