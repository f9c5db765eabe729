from pydantic import BaseModel, Field
from typing import Optional
from decimal import Decimal
from datetime import datetime


class StockCreate(BaseModel):
    medicine_id: int
    quantity: int = Field(..., gt=0)
    batch_number: Optional[str] = Field(None, max_length=50)
    expiry_date: Optional[datetime] = None
    cost_price: Optional[Decimal] = Field(None, ge=0)
    supplier: Optional[str] = Field(None, max_length=200)
    reorder_level: Optional[int] = Field(None, ge=0)


class StockUpdate(BaseModel):
    quantity: int = Field(..., ge=0)
    reorder_level: int = Field(..., ge=0)


class StockDeduct(BaseModel):
    medicine_id: int
    quantity: int = Field(..., gt=0)


class InventoryItem(BaseModel):
    id: int
    clinic_id: int
    medicine_id: int
    batch_number: Optional[str] = None
    quantity: int
    reorder_level: Optional[int] = None
    expiry_date: Optional[datetime] = None
    cost_price: Optional[Decimal] = None
    supplier: Optional[str] = None
    received_date: Optional[datetime] = None

    class Config:
        from_attributes = True


class AvailableStock(BaseModel):
    medicine_id: int
    available_quantity: int
