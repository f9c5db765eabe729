from sqlalchemy import Column, Integer, String, DateTime, Numeric, ForeignKey, Index
from sqlalchemy.orm import relationship
from app.models.base import Base, ClinicScopedMixin


class InventoryItem(ClinicScopedMixin, Base):
    __tablename__ = "inventory_items"
    __table_args__ = (
        Index("ix_inventory_items_medicine_expiry", "medicine_id", "expiry_date"),
    )
    id = Column(Integer, primary_key=True, index=True)
    medicine_id = Column(Integer, ForeignKey("medicines.id"), nullable=False)
    batch_number = Column(String(50), nullable=True)
    quantity = Column(Integer, nullable=False, default=0)
    reorder_level = Column(Integer, nullable=False, default=10)
    expiry_date = Column(DateTime, nullable=True)
    cost_price = Column(Numeric(18, 2), nullable=True)
    supplier = Column(String(200), nullable=True)
    received_date = Column(DateTime, nullable=False)

    medicine = relationship("Medicine", back_populates="inventory_items")
