from sqlalchemy import Column, Integer, String, Boolean, Numeric
from app.models.base import Base, ClinicScopedMixin


class MedicalService(ClinicScopedMixin, Base):
    __tablename__ = "services"
    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(200), nullable=False)
    description = Column(String(1000), nullable=True)
    price = Column(Numeric(18, 2), nullable=False, default=0)
    duration_minutes = Column(Integer, nullable=False, default=30)
    is_active = Column(Boolean, default=True, nullable=False)
