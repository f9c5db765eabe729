from sqlalchemy import Column, Integer, String, Boolean, DateTime, Numeric, Text, ForeignKey
from sqlalchemy.orm import relationship
from app.models.base import Base, ClinicScopedMixin


class Receipt(ClinicScopedMixin, Base):
    __tablename__ = "receipts"
    id = Column(Integer, primary_key=True, index=True)
    bill_id = Column(Integer, ForeignKey("bills.id"), nullable=False, index=True)
    receipt_number = Column(String(50), nullable=False, index=True)
    receipt_date = Column(DateTime, nullable=False)
    # Receipt, Invoice, CreditNote
    receipt_type = Column(String(20), nullable=False, default="Receipt")
    total_amount = Column(Numeric(18, 2), nullable=False)
    # Generated, Sent, Cancelled
    status = Column(String(20), nullable=False, default="Generated")
    customer_email = Column(String(100), nullable=True)
    customer_phone = Column(String(20), nullable=True)
    is_email_sent = Column(Boolean, nullable=False, default=False)
    email_sent_date = Column(DateTime, nullable=True)
    file_path = Column(String(500), nullable=True)
    notes = Column(Text, nullable=True)
    generated_by_staff_id = Column(Integer, ForeignKey("staff.id"), nullable=True)

    bill = relationship("Bill", lazy="selectin")
