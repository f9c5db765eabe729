from sqlalchemy import Column, Integer, Boolean, DateTime, ForeignKey, func
from sqlalchemy.orm import declarative_base, declared_attr

Base = declarative_base()


class AuditMixin:
    """Audit and soft-delete columns shared by every domain table."""

    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
    is_deleted = Column(Boolean, default=False, nullable=False)
    deleted_at = Column(DateTime, nullable=True)


class ClinicScopedMixin(AuditMixin):
    """Rows owned by a single clinic (the tenant)."""

    @declared_attr
    def clinic_id(cls):
        return Column(Integer, ForeignKey("clinics.id"), nullable=False, index=True)
