from pydantic import BaseModel, Field
from typing import Optional
from decimal import Decimal


class MedicineCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    generic_name: Optional[str] = Field(None, max_length=200)
    manufacturer: Optional[str] = Field(None, max_length=200)
    dosage: Optional[str] = Field(None, max_length=100)
    form: Optional[str] = Field(None, max_length=50)
    price: Decimal = Field(Decimal("0"), ge=0)
    description: Optional[str] = None
    is_active: bool = True


class MedicineUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    generic_name: Optional[str] = None
    manufacturer: Optional[str] = None
    dosage: Optional[str] = None
    form: Optional[str] = None
    price: Optional[Decimal] = Field(None, ge=0)
    description: Optional[str] = None
    is_active: Optional[bool] = None


class Medicine(BaseModel):
    id: int
    clinic_id: int
    name: str
    generic_name: Optional[str] = None
    manufacturer: Optional[str] = None
    dosage: Optional[str] = None
    form: Optional[str] = None
    price: Optional[Decimal] = None
    description: Optional[str] = None
    is_active: Optional[bool] = None

    class Config:
        from_attributes = True


class MedicineWithStock(Medicine):
    available_quantity: int = 0
