from sqlalchemy import Column, Integer, String, Boolean, Date, DateTime, Text, Index
from sqlalchemy.orm import relationship
from app.models.base import Base, ClinicScopedMixin


class Patient(ClinicScopedMixin, Base):
    __tablename__ = "patients"
    __table_args__ = (
        Index("ix_patients_clinic_code", "clinic_id", "patient_code"),
        Index("ix_patients_clinic_phone", "clinic_id", "phone_number"),
    )
    id = Column(Integer, primary_key=True, index=True)
    patient_code = Column(String(20), nullable=False)
    full_name = Column(String(200), nullable=False)
    # Not unique: family members often share a phone number
    phone_number = Column(String(20), nullable=True)
    email = Column(String(100), nullable=True)
    date_of_birth = Column(Date, nullable=True)
    gender = Column(String(20), nullable=True)
    address = Column(String(500), nullable=True)

    allergies = Column(Text, nullable=True)
    chronic_conditions = Column(Text, nullable=True)
    blood_type = Column(String(5), nullable=True)
    emergency_contact_name = Column(String(200), nullable=True)
    emergency_contact_phone = Column(String(20), nullable=True)

    id_number = Column(String(50), nullable=True)
    insurance_number = Column(String(50), nullable=True)
    insurance_provider = Column(String(100), nullable=True)
    occupation = Column(String(100), nullable=True)
    referral_source = Column(String(100), nullable=True)
    first_visit_date = Column(DateTime, nullable=True)
    receive_promotions = Column(Boolean, default=False, nullable=False)
    notes = Column(Text, nullable=True)

    appointments = relationship("Appointment", back_populates="patient")
