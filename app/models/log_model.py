from app.utils.helpers import utcnow
from sqlalchemy import Column, Integer, String, DateTime, Text, ForeignKey, Index
from sqlalchemy.orm import relationship
from app.models.base import Base


class ActivityLog(Base):
    __tablename__ = "activity_logs"
    __table_args__ = (
        Index("ix_activity_logs_clinic_type", "clinic_id", "activity_type_category"),
        Index("ix_activity_logs_clinic_timestamp", "clinic_id", "timestamp"),
    )

    id = Column(Integer, primary_key=True, index=True)
    timestamp = Column(DateTime, default=utcnow, nullable=False)
    user_id = Column(Integer, ForeignKey("staff.id"), nullable=True)
    activity_type_category = Column(String, nullable=False)
    clinic_id = Column(Integer, ForeignKey("clinics.id"), nullable=True)
    activity_description = Column(Text, nullable=False)

    user = relationship("Staff", back_populates="activity_logs")
