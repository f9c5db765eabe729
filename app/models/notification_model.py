from sqlalchemy import Column, Integer, String, Boolean, DateTime, Text, ForeignKey, Index
from sqlalchemy.orm import relationship
from app.models.base import Base, ClinicScopedMixin


class Notification(ClinicScopedMixin, Base):
    """Outbound patient messages and in-app staff notifications share this table."""

    __tablename__ = "notifications"
    __table_args__ = (
        Index("ix_notifications_status_scheduled", "status", "scheduled_time"),
        Index("ix_notifications_user_read", "user_id", "is_read"),
    )
    id = Column(Integer, primary_key=True, index=True)
    patient_id = Column(Integer, ForeignKey("patients.id"), nullable=True, index=True)
    appointment_id = Column(Integer, ForeignKey("appointments.id"), nullable=True)
    # AppointmentReminder, PaymentReminder, FollowUpReminder, System, ...
    notification_type = Column(String(50), nullable=False)
    # SMS, Email, InApp
    delivery_method = Column(String(20), nullable=False, default="SMS")
    recipient = Column(String(200), nullable=True)
    subject = Column(String(200), nullable=True)
    message = Column(Text, nullable=False)
    scheduled_time = Column(DateTime, nullable=False)
    sent_time = Column(DateTime, nullable=True)
    # Pending, Sent, Failed, Cancelled
    status = Column(String(20), nullable=False, default="Pending")
    error_message = Column(Text, nullable=True)
    retry_count = Column(Integer, nullable=False, default=0)
    next_retry = Column(DateTime, nullable=True)

    # In-app notifications addressed to a staff member
    user_id = Column(Integer, ForeignKey("staff.id"), nullable=True)
    title = Column(String(200), nullable=True)
    type = Column(String(20), nullable=True)
    priority = Column(String(20), nullable=True)
    is_read = Column(Boolean, nullable=False, default=False)
    read_at = Column(DateTime, nullable=True)

    patient = relationship("Patient")
