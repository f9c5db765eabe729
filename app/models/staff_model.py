import enum
from app.utils.helpers import utcnow
from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship
from app.models.base import Base, AuditMixin


class StaffRole(str, enum.Enum):
    SuperAdmin = "SuperAdmin"
    ClinicManager = "ClinicManager"
    Doctor = "Doctor"
    Nurse = "Nurse"
    Receptionist = "Receptionist"
    Accountant = "Accountant"
    Pharmacist = "Pharmacist"


class Staff(AuditMixin, Base):
    __tablename__ = "staff"
    id = Column(Integer, primary_key=True, index=True)
    full_name = Column(String(200), nullable=False)
    email = Column(String(100), nullable=True, unique=True)
    password_hash = Column(String(255), nullable=False)
    phone_number = Column(String(20), nullable=True, index=True)
    role = Column(String(50), nullable=False, default=StaffRole.Receptionist.value)
    is_active = Column(Boolean, default=True, nullable=False)

    clinic_links = relationship("StaffClinic", back_populates="staff", cascade="all, delete-orphan")
    activity_logs = relationship("ActivityLog", back_populates="user")


class StaffClinic(Base):
    __tablename__ = "staff_clinics"
    __table_args__ = (
        Index("ix_staff_clinics_staff_clinic", "staff_id", "clinic_id", unique=True),
    )
    id = Column(Integer, primary_key=True, index=True)
    staff_id = Column(Integer, ForeignKey("staff.id"), nullable=False)
    clinic_id = Column(Integer, ForeignKey("clinics.id"), nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    assigned_date = Column(DateTime, default=utcnow, nullable=False)

    staff = relationship("Staff", back_populates="clinic_links")
    clinic = relationship("Clinic", back_populates="staff_links")
