from sqlalchemy import Column, Integer, String, Boolean, DateTime, Text, ForeignKey
from sqlalchemy.orm import relationship
from app.models.base import Base, ClinicScopedMixin


class Prescription(ClinicScopedMixin, Base):
    __tablename__ = "prescriptions"
    id = Column(Integer, primary_key=True, index=True)
    treatment_history_id = Column(Integer, ForeignKey("treatment_histories.id"), nullable=False, index=True)
    patient_id = Column(Integer, ForeignKey("patients.id"), nullable=False, index=True)
    doctor_id = Column(Integer, ForeignKey("staff.id"), nullable=False)
    prescription_number = Column(String(50), nullable=False, index=True)
    prescription_date = Column(DateTime, nullable=False)
    # Active, Dispensed, Cancelled
    status = Column(String(20), nullable=False, default="Active")
    notes = Column(Text, nullable=True)

    patient = relationship("Patient")
    doctor = relationship("Staff")
    medicines = relationship(
        "PrescriptionMedicine",
        back_populates="prescription",
        cascade="all, delete-orphan",
        lazy="selectin",
    )


class PrescriptionMedicine(Base):
    __tablename__ = "prescription_medicines"
    id = Column(Integer, primary_key=True, index=True)
    prescription_id = Column(Integer, ForeignKey("prescriptions.id"), nullable=False, index=True)
    medicine_id = Column(Integer, ForeignKey("medicines.id"), nullable=False)
    quantity = Column(Integer, nullable=False)
    dosage = Column(String(100), nullable=True)
    frequency = Column(String(100), nullable=True)
    duration_days = Column(Integer, nullable=True)
    instructions = Column(Text, nullable=True)
    quantity_dispensed = Column(Integer, nullable=False, default=0)
    is_dispensed = Column(Boolean, nullable=False, default=False)

    prescription = relationship("Prescription", back_populates="medicines")
    medicine = relationship("Medicine", lazy="selectin")
