from pydantic import BaseModel, Field
from typing import Optional
from decimal import Decimal


class MedicalServiceCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=1000)
    price: Decimal = Field(..., ge=0)
    duration_minutes: int = Field(30, gt=0)
    is_active: bool = True


class MedicalServiceUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=1000)
    price: Optional[Decimal] = Field(None, ge=0)
    duration_minutes: Optional[int] = Field(None, gt=0)
    is_active: Optional[bool] = None


class MedicalService(BaseModel):
    id: int
    clinic_id: int
    name: str
    description: Optional[str] = None
    price: Decimal
    duration_minutes: Optional[int] = None
    is_active: Optional[bool] = None

    class Config:
        from_attributes = True
