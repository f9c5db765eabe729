from pydantic import BaseModel, Field
from typing import List, Literal, Optional
from decimal import Decimal
from datetime import datetime


class BillItemCreate(BaseModel):
    service_id: Optional[int] = None
    medicine_id: Optional[int] = None
    item_name: str = Field(..., min_length=1, max_length=200)
    item_type: Literal["Service", "Medicine", "Other"] = "Service"
    quantity: int = Field(1, gt=0)
    unit_price: Decimal = Field(..., ge=0)


class BillCreate(BaseModel):
    patient_id: int
    appointment_id: Optional[int] = None
    discount_amount: Decimal = Field(Decimal("0"), ge=0)
    discount_percentage: Decimal = Field(Decimal("0"), ge=0, le=100)
    notes: Optional[str] = None
    items: List[BillItemCreate] = []


class BillUpdate(BillCreate):
    pass


class PaymentCreate(BaseModel):
    amount: Decimal
    payment_method: str = Field(..., min_length=1, max_length=50)
    reference: Optional[str] = Field(None, max_length=100)
    notes: Optional[str] = None


class BillItem(BaseModel):
    id: int
    service_id: Optional[int] = None
    medicine_id: Optional[int] = None
    item_name: str
    item_type: Optional[str] = None
    quantity: int
    unit_price: Decimal
    total_price: Decimal

    class Config:
        from_attributes = True


class Payment(BaseModel):
    id: int
    bill_id: int
    payment_number: str
    payment_date: datetime
    amount: Decimal
    payment_method: str
    reference: Optional[str] = None
    status: Optional[str] = None

    class Config:
        from_attributes = True


class Bill(BaseModel):
    id: int
    clinic_id: int
    patient_id: int
    appointment_id: Optional[int] = None
    bill_number: str
    bill_date: datetime
    sub_total: Decimal
    discount_amount: Optional[Decimal] = None
    discount_percentage: Optional[Decimal] = None
    total_amount: Decimal
    status: Optional[str] = None
    payment_method: Optional[str] = None
    notes: Optional[str] = None
    items: List[BillItem] = []
    payments: List[Payment] = []

    class Config:
        from_attributes = True


class RevenueSummary(BaseModel):
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    total_revenue: Decimal
