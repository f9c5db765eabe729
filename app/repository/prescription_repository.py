from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from app.models import prescription_model
from app.repository.base_repository import ClinicScopedRepository
from app.repository.billing_repository import get_last_number

Prescription = prescription_model.Prescription
PrescriptionMedicine = prescription_model.PrescriptionMedicine


class PrescriptionRepository(ClinicScopedRepository[Prescription]):
    def __init__(self):
        super().__init__(Prescription)

    async def get_last_prescription_number(self, db: AsyncSession, prefix: str) -> Optional[str]:
        return await get_last_number(db, Prescription.prescription_number, prefix)

    async def get_by_patient(self, db: AsyncSession, clinic_id: int, patient_id: int) -> List[Prescription]:
        return await self.list_in_clinic(
            db, clinic_id, Prescription.patient_id == patient_id, order_by=Prescription.prescription_date.desc()
        )

    async def get_active(self, db: AsyncSession, clinic_id: int) -> List[Prescription]:
        """Active prescriptions that still have something left to dispense."""
        return await self.list_in_clinic(
            db,
            clinic_id,
            Prescription.status == "Active",
            Prescription.medicines.any(PrescriptionMedicine.is_dispensed.is_(False)),
            order_by=Prescription.prescription_date,
        )


prescription_repository = PrescriptionRepository()
