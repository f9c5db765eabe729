from sqlalchemy import Column, Integer, String, Boolean, Numeric, Text
from sqlalchemy.orm import relationship
from app.models.base import Base, ClinicScopedMixin


class Medicine(ClinicScopedMixin, Base):
    __tablename__ = "medicines"
    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(200), nullable=False)
    generic_name = Column(String(200), nullable=True)
    manufacturer = Column(String(200), nullable=True)
    dosage = Column(String(100), nullable=True)
    form = Column(String(50), nullable=True)
    price = Column(Numeric(18, 2), nullable=False, default=0)
    description = Column(Text, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)

    inventory_items = relationship("InventoryItem", back_populates="medicine")
