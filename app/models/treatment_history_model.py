from sqlalchemy import Column, Integer, String, DateTime, Text, Numeric, ForeignKey
from sqlalchemy.orm import relationship
from app.models.base import Base, ClinicScopedMixin


class TreatmentHistory(ClinicScopedMixin, Base):
    __tablename__ = "treatment_histories"
    id = Column(Integer, primary_key=True, index=True)
    patient_id = Column(Integer, ForeignKey("patients.id"), nullable=False, index=True)
    appointment_id = Column(Integer, ForeignKey("appointments.id"), nullable=True, index=True)
    staff_id = Column(Integer, ForeignKey("staff.id"), nullable=False)
    treatment_date = Column(DateTime, nullable=False)

    chief_complaint = Column(Text, nullable=True)
    symptoms = Column(Text, nullable=True)

    # Vital signs
    blood_pressure = Column(String(20), nullable=True)
    temperature = Column(Numeric(4, 1), nullable=True)
    heart_rate = Column(Integer, nullable=True)
    respiratory_rate = Column(Integer, nullable=True)
    weight = Column(Numeric(5, 2), nullable=True)
    height = Column(Numeric(5, 2), nullable=True)

    physical_examination = Column(Text, nullable=True)
    diagnosis = Column(Text, nullable=True)
    differential_diagnosis = Column(Text, nullable=True)
    treatment = Column(Text, nullable=False)
    prescription = Column(Text, nullable=True)
    treatment_plan = Column(Text, nullable=True)
    follow_up_instructions = Column(Text, nullable=True)
    next_appointment_date = Column(DateTime, nullable=True)
    notes = Column(Text, nullable=True)

    patient = relationship("Patient")
    staff = relationship("Staff")
    appointment = relationship("Appointment")
