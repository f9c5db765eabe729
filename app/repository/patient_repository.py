from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy import func
from app.models import patient_model
from app.repository.base_repository import ClinicScopedRepository


class PatientRepository(ClinicScopedRepository[patient_model.Patient]):
    search_fields = ("full_name", "phone_number", "email", "patient_code")

    def __init__(self):
        super().__init__(patient_model.Patient)

    async def count_all_in_clinic(self, db: AsyncSession, clinic_id: int) -> int:
        """Counts patients ever registered in a clinic, soft-deleted ones included."""
        return await db.scalar(
            select(func.count()).select_from(self.model).filter(self.model.clinic_id == clinic_id)
        ) or 0


patient_repository = PatientRepository()
