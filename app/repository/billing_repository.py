from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy import func, or_
from app.models import bill_model, receipt_model, patient_model
from app.repository.base_repository import ClinicScopedRepository

Bill = bill_model.Bill
Payment = bill_model.Payment
Receipt = receipt_model.Receipt


async def get_last_number(db: AsyncSession, column, prefix: str) -> Optional[str]:
    """Highest number issued so far that starts with ``prefix``."""
    return await db.scalar(
        select(column).filter(column.like(f"{prefix}%")).order_by(column.desc()).limit(1)
    )


class BillRepository(ClinicScopedRepository[Bill]):
    def __init__(self):
        super().__init__(Bill)

    async def get_last_bill_number(self, db: AsyncSession, prefix: str) -> Optional[str]:
        return await get_last_number(db, Bill.bill_number, prefix)

    async def get_by_patient(self, db: AsyncSession, clinic_id: int, patient_id: int) -> List[Bill]:
        return await self.list_in_clinic(db, clinic_id, Bill.patient_id == patient_id, order_by=Bill.bill_date.desc())

    async def get_pending(self, db: AsyncSession, clinic_id: int) -> List[Bill]:
        return await self.list_in_clinic(db, clinic_id, Bill.status.in_(("Pending", "Partial")), order_by=Bill.bill_date)

    async def get_total_paid(self, db: AsyncSession, bill_id: int) -> Decimal:
        total = await db.scalar(
            select(func.coalesce(func.sum(Payment.amount), 0)).filter(
                Payment.bill_id == bill_id,
                Payment.status == "Completed",
                Payment.is_deleted.is_(False),
            )
        )
        return Decimal(total or 0)

    async def get_revenue(
        self,
        db: AsyncSession,
        clinic_id: int,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> Decimal:
        query = self._scoped(select(func.coalesce(func.sum(Bill.total_amount), 0)), clinic_id).filter(Bill.status == "Paid")
        if start_date:
            query = query.filter(Bill.bill_date >= start_date)
        if end_date:
            query = query.filter(Bill.bill_date <= end_date)
        return Decimal(await db.scalar(query) or 0)


class PaymentRepository(ClinicScopedRepository[Payment]):
    def __init__(self):
        super().__init__(Payment)


class ReceiptRepository(ClinicScopedRepository[Receipt]):
    def __init__(self):
        super().__init__(Receipt)

    async def get_last_receipt_number(self, db: AsyncSession, prefix: str) -> Optional[str]:
        return await get_last_number(db, Receipt.receipt_number, prefix)

    async def get_by_bill(self, db: AsyncSession, clinic_id: int, bill_id: int) -> List[Receipt]:
        return await self.list_in_clinic(db, clinic_id, Receipt.bill_id == bill_id, order_by=Receipt.receipt_date.desc())

    async def get_by_date_range(self, db: AsyncSession, clinic_id: int, start: datetime, end: datetime) -> List[Receipt]:
        return await self.list_in_clinic(
            db,
            clinic_id,
            Receipt.receipt_date >= start,
            Receipt.receipt_date <= end,
            order_by=Receipt.receipt_date.desc(),
        )

    async def search_receipts(self, db: AsyncSession, clinic_id: int, term: str) -> List[Receipt]:
        pattern = f"%{term.strip()}%"
        Patient = patient_model.Patient
        result = await db.execute(
            self._scoped(select(Receipt), clinic_id)
            .join(Bill, Bill.id == Receipt.bill_id)
            .join(Patient, Patient.id == Bill.patient_id)
            .filter(or_(Receipt.receipt_number.ilike(pattern), Patient.full_name.ilike(pattern)))
            .order_by(Receipt.receipt_date.desc())
        )
        return result.scalars().all()


bill_repository = BillRepository()
payment_repository = PaymentRepository()
receipt_repository = ReceiptRepository()
