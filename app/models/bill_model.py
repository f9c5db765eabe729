from sqlalchemy import Column, Integer, String, DateTime, Numeric, Text, ForeignKey
from sqlalchemy.orm import relationship
from app.models.base import Base, ClinicScopedMixin


class Bill(ClinicScopedMixin, Base):
    __tablename__ = "bills"
    id = Column(Integer, primary_key=True, index=True)
    patient_id = Column(Integer, ForeignKey("patients.id"), nullable=False, index=True)
    appointment_id = Column(Integer, ForeignKey("appointments.id"), nullable=True)
    bill_number = Column(String(50), nullable=False, index=True)
    bill_date = Column(DateTime, nullable=False)
    sub_total = Column(Numeric(18, 2), nullable=False, default=0)
    discount_amount = Column(Numeric(18, 2), nullable=False, default=0)
    discount_percentage = Column(Numeric(5, 2), nullable=False, default=0)
    tax_amount = Column(Numeric(18, 2), nullable=False, default=0)
    tax_percentage = Column(Numeric(5, 2), nullable=False, default=0)
    total_amount = Column(Numeric(18, 2), nullable=False, default=0)
    # Pending, Partial, Paid, Cancelled
    status = Column(String(20), nullable=False, default="Pending")
    payment_method = Column(String(50), nullable=True)
    notes = Column(Text, nullable=True)
    created_by_staff_id = Column(Integer, ForeignKey("staff.id"), nullable=True)

    patient = relationship("Patient", lazy="selectin")
    items = relationship("BillItem", back_populates="bill", cascade="all, delete-orphan", lazy="selectin")
    payments = relationship("Payment", back_populates="bill", lazy="selectin")


class BillItem(Base):
    __tablename__ = "bill_items"
    id = Column(Integer, primary_key=True, index=True)
    bill_id = Column(Integer, ForeignKey("bills.id"), nullable=False, index=True)
    service_id = Column(Integer, ForeignKey("services.id"), nullable=True)
    medicine_id = Column(Integer, ForeignKey("medicines.id"), nullable=True)
    item_name = Column(String(200), nullable=False)
    # Service, Medicine, Other
    item_type = Column(String(20), nullable=False, default="Service")
    quantity = Column(Integer, nullable=False, default=1)
    unit_price = Column(Numeric(18, 2), nullable=False)
    total_price = Column(Numeric(18, 2), nullable=False)

    bill = relationship("Bill", back_populates="items")


class Payment(ClinicScopedMixin, Base):
    __tablename__ = "payments"
    id = Column(Integer, primary_key=True, index=True)
    bill_id = Column(Integer, ForeignKey("bills.id"), nullable=False, index=True)
    payment_number = Column(String(50), nullable=False)
    payment_date = Column(DateTime, nullable=False)
    amount = Column(Numeric(18, 2), nullable=False)
    payment_method = Column(String(50), nullable=False)
    reference = Column(String(100), nullable=True)
    # Completed, Failed, Refunded
    status = Column(String(20), nullable=False, default="Completed")
    notes = Column(Text, nullable=True)
    received_by_staff_id = Column(Integer, ForeignKey("staff.id"), nullable=True)

    bill = relationship("Bill", back_populates="payments")
