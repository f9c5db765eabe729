from sqlalchemy import Column, Integer, String, DateTime, Text, ForeignKey, Index
from sqlalchemy.orm import relationship
from app.models.base import Base, ClinicScopedMixin


class Appointment(ClinicScopedMixin, Base):
    __tablename__ = "appointments"
    __table_args__ = (
        Index("ix_appointments_staff_date", "staff_id", "appointment_date"),
        Index("ix_appointments_clinic_date", "clinic_id", "appointment_date"),
    )
    id = Column(Integer, primary_key=True, index=True)
    patient_id = Column(Integer, ForeignKey("patients.id"), nullable=False, index=True)
    staff_id = Column(Integer, ForeignKey("staff.id"), nullable=False)
    appointment_date = Column(DateTime, nullable=False)
    # Scheduled -> Confirmed -> Completed, or Cancelled / NoShow
    status = Column(String(50), nullable=False, default="Scheduled")
    notes = Column(Text, nullable=True)

    patient = relationship("Patient", back_populates="appointments")
    staff = relationship("Staff")
