from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime


class PrescriptionMedicineCreate(BaseModel):
    medicine_id: int
    quantity: int = Field(..., gt=0)
    dosage: Optional[str] = Field(None, max_length=100)
    frequency: Optional[str] = Field(None, max_length=100)
    duration_days: Optional[int] = Field(None, gt=0)
    instructions: Optional[str] = None


class PrescriptionCreate(BaseModel):
    treatment_history_id: int
    notes: Optional[str] = None
    medicines: List[PrescriptionMedicineCreate] = []


class PrescriptionUpdate(BaseModel):
    notes: Optional[str] = None
    status: Optional[str] = None
    medicines: Optional[List[PrescriptionMedicineCreate]] = None


class DispenseRequest(BaseModel):
    prescription_medicine_id: int
    quantity: int = Field(..., gt=0)


class PrescriptionMedicine(BaseModel):
    id: int
    medicine_id: int
    quantity: int
    dosage: Optional[str] = None
    frequency: Optional[str] = None
    duration_days: Optional[int] = None
    instructions: Optional[str] = None
    quantity_dispensed: Optional[int] = 0
    is_dispensed: Optional[bool] = False

    class Config:
        from_attributes = True


class Prescription(BaseModel):
    id: int
    clinic_id: int
    treatment_history_id: int
    patient_id: int
    doctor_id: int
    prescription_number: str
    prescription_date: datetime
    status: Optional[str] = None
    notes: Optional[str] = None
    medicines: List[PrescriptionMedicine] = []

    class Config:
        from_attributes = True
