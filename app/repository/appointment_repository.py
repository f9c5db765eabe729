from datetime import datetime
from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from app.models import appointment_model
from app.repository.base_repository import ClinicScopedRepository

Appointment = appointment_model.Appointment


class AppointmentRepository(ClinicScopedRepository[Appointment]):
    def __init__(self):
        super().__init__(Appointment)

    async def get_by_date_range(self, db: AsyncSession, clinic_id: int, start: datetime, end: datetime) -> List[Appointment]:
        return await self.list_in_clinic(
            db,
            clinic_id,
            Appointment.appointment_date >= start,
            Appointment.appointment_date <= end,
            order_by=Appointment.appointment_date,
        )

    async def get_by_patient(self, db: AsyncSession, clinic_id: int, patient_id: int) -> List[Appointment]:
        return await self.list_in_clinic(
            db, clinic_id, Appointment.patient_id == patient_id, order_by=Appointment.appointment_date.desc()
        )

    async def get_by_staff(self, db: AsyncSession, clinic_id: int, staff_id: int) -> List[Appointment]:
        return await self.list_in_clinic(
            db, clinic_id, Appointment.staff_id == staff_id, order_by=Appointment.appointment_date.desc()
        )

    async def has_conflict(
        self,
        db: AsyncSession,
        staff_id: int,
        appointment_date: datetime,
        exclude_id: Optional[int] = None,
    ) -> bool:
        """True when the staff member already has a live appointment at exactly this time."""
        query = self._live(select(Appointment.id)).filter(
            Appointment.staff_id == staff_id,
            Appointment.appointment_date == appointment_date,
            Appointment.status != "Cancelled",
        )
        if exclude_id is not None:
            query = query.filter(Appointment.id != exclude_id)
        return (await db.scalar(query.limit(1))) is not None


appointment_repository = AppointmentRepository()
