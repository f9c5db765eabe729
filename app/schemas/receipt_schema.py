from pydantic import BaseModel
from typing import Literal, Optional
from decimal import Decimal
from datetime import datetime


class ReceiptGenerate(BaseModel):
    bill_id: int
    receipt_type: Literal["Receipt", "Invoice", "CreditNote"] = "Receipt"
    send_email: bool = False
    notes: Optional[str] = None


class Receipt(BaseModel):
    id: int
    clinic_id: int
    bill_id: int
    receipt_number: str
    receipt_date: datetime
    receipt_type: str
    total_amount: Decimal
    status: Optional[str] = None
    customer_email: Optional[str] = None
    customer_phone: Optional[str] = None
    is_email_sent: Optional[bool] = None
    email_sent_date: Optional[datetime] = None
    notes: Optional[str] = None

    class Config:
        from_attributes = True
