from sqlalchemy import Column, Integer, String, Date, DateTime, Text, ForeignKey, Index
from sqlalchemy.orm import relationship
from app.models.base import Base, ClinicScopedMixin


class PatientQueue(ClinicScopedMixin, Base):
    __tablename__ = "patient_queues"
    __table_args__ = (
        Index("ix_patient_queues_clinic_date_status", "clinic_id", "queue_date", "status"),
    )
    id = Column(Integer, primary_key=True, index=True)
    patient_id = Column(Integer, ForeignKey("patients.id"), nullable=False)
    appointment_id = Column(Integer, ForeignKey("appointments.id"), nullable=True)
    queue_number = Column(String(20), nullable=False)
    queue_date = Column(Date, nullable=False)
    check_in_time = Column(DateTime, nullable=False)
    called_time = Column(DateTime, nullable=True)
    start_time = Column(DateTime, nullable=True)
    completion_time = Column(DateTime, nullable=True)
    # Waiting, Called, InProgress, Completed, NoShow, Cancelled
    status = Column(String(20), nullable=False, default="Waiting")
    # Appointment, WalkIn, Emergency
    queue_type = Column(String(20), nullable=False, default="WalkIn")
    # 0 normal, 1 high, 2 emergency
    priority = Column(Integer, nullable=False, default=0)
    assigned_staff_id = Column(Integer, ForeignKey("staff.id"), nullable=True)
    room_id = Column(Integer, nullable=True)
    notes = Column(Text, nullable=True)

    patient = relationship("Patient", lazy="selectin")
