from sqlalchemy import Column, Integer, String, DateTime, Numeric, Text, Index

from app.models.base import Base, ClinicScopedMixin


class Transaction(ClinicScopedMixin, Base):
    __tablename__ = "transactions"
    __table_args__ = (
        Index("ix_transactions_clinic_date", "clinic_id", "date"),
    )

    id = Column(Integer, primary_key=True, index=True)
    # revenue | expense
    type = Column(String(20), nullable=False)
    description = Column(Text, nullable=False)
    category = Column(String(100), nullable=True)
    amount = Column(Numeric(18, 2), nullable=False)
    date = Column(DateTime, nullable=False)
    payment_method = Column(String(50), nullable=True)
    reference = Column(String(100), nullable=True)
