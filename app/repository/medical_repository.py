from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from app.models import medical_service_model, medicine_model, treatment_history_model
from app.repository.base_repository import ClinicScopedRepository

MedicalService = medical_service_model.MedicalService
Medicine = medicine_model.Medicine
TreatmentHistory = treatment_history_model.TreatmentHistory


class MedicalServiceRepository(ClinicScopedRepository[MedicalService]):
    search_fields = ("name", "description")

    def __init__(self):
        super().__init__(MedicalService)

    async def get_active(self, db: AsyncSession, clinic_id: int) -> List[MedicalService]:
        return await self.list_in_clinic(db, clinic_id, MedicalService.is_active.is_(True), order_by=MedicalService.name)


class MedicineRepository(ClinicScopedRepository[Medicine]):
    search_fields = ("name", "generic_name", "manufacturer")

    def __init__(self):
        super().__init__(Medicine)

    async def get_active(self, db: AsyncSession, clinic_id: int) -> List[Medicine]:
        return await self.list_in_clinic(db, clinic_id, Medicine.is_active.is_(True), order_by=Medicine.name)


class TreatmentHistoryRepository(ClinicScopedRepository[TreatmentHistory]):
    search_fields = ("treatment", "diagnosis", "chief_complaint")

    def __init__(self):
        super().__init__(TreatmentHistory)

    async def get_by_patient(self, db: AsyncSession, clinic_id: int, patient_id: int) -> List[TreatmentHistory]:
        return await self.list_in_clinic(
            db, clinic_id, TreatmentHistory.patient_id == patient_id, order_by=TreatmentHistory.treatment_date.desc()
        )

    async def get_by_appointment(self, db: AsyncSession, clinic_id: int, appointment_id: int) -> Optional[TreatmentHistory]:
        rows = await self.list_in_clinic(db, clinic_id, TreatmentHistory.appointment_id == appointment_id)
        return rows[0] if rows else None


medical_service_repository = MedicalServiceRepository()
medicine_repository = MedicineRepository()
treatment_history_repository = TreatmentHistoryRepository()
