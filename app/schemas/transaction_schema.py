from datetime import datetime
from decimal import Decimal
from typing import List, Literal, Optional

from pydantic import BaseModel, Field


class TransactionCreate(BaseModel):
    type: Literal["revenue", "expense"]
    description: str = Field(..., min_length=1)
    category: Optional[str] = Field(None, max_length=100)
    amount: Decimal = Field(..., gt=0)
    date: datetime
    payment_method: Optional[str] = Field(None, max_length=50)
    reference: Optional[str] = Field(None, max_length=100)


class TransactionUpdate(TransactionCreate):
    pass


class Transaction(BaseModel):
    id: int
    clinic_id: int
    type: str
    description: str
    category: Optional[str] = None
    amount: Decimal
    date: datetime
    payment_method: Optional[str] = None
    reference: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class TransactionSummary(BaseModel):
    total_revenue: Decimal
    total_expenses: Decimal
    net_income: Decimal
    transaction_count: int


class CategorySummary(BaseModel):
    category: Optional[str] = None
    revenue: Decimal
    expense: Decimal
    count: int


class TransactionListResponse(BaseModel):
    transactions: List[Transaction]
    total: int
