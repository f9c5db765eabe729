from datetime import datetime
from typing import List
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy import func
from app.models import inventory_model
from app.repository.base_repository import ClinicScopedRepository

InventoryItem = inventory_model.InventoryItem


class InventoryRepository(ClinicScopedRepository[InventoryItem]):
    def __init__(self):
        super().__init__(InventoryItem)

    async def get_by_medicine(self, db: AsyncSession, clinic_id: int, medicine_id: int) -> List[InventoryItem]:
        return await self.list_in_clinic(
            db, clinic_id, InventoryItem.medicine_id == medicine_id, order_by=InventoryItem.expiry_date
        )

    async def get_batches_for_deduction(self, db: AsyncSession, clinic_id: int, medicine_id: int) -> List[InventoryItem]:
        """In-stock batches, earliest expiry first, then oldest received."""
        result = await db.execute(
            self._scoped(select(InventoryItem), clinic_id)
            .filter(InventoryItem.medicine_id == medicine_id, InventoryItem.quantity > 0)
            .order_by(InventoryItem.expiry_date.asc().nulls_last(), InventoryItem.received_date.asc())
        )
        return result.scalars().all()

    async def get_available_quantity(self, db: AsyncSession, clinic_id: int, medicine_id: int) -> int:
        total = await db.scalar(
            self._scoped(select(func.coalesce(func.sum(InventoryItem.quantity), 0)), clinic_id)
            .filter(InventoryItem.medicine_id == medicine_id)
        )
        return int(total or 0)

    async def get_low_stock(self, db: AsyncSession, clinic_id: int) -> List[InventoryItem]:
        return await self.list_in_clinic(
            db, clinic_id, InventoryItem.quantity <= InventoryItem.reorder_level, order_by=InventoryItem.quantity
        )

    async def get_expiring(self, db: AsyncSession, clinic_id: int, before: datetime) -> List[InventoryItem]:
        return await self.list_in_clinic(
            db,
            clinic_id,
            InventoryItem.expiry_date.is_not(None),
            InventoryItem.expiry_date <= before,
            InventoryItem.quantity > 0,
            order_by=InventoryItem.expiry_date,
        )


inventory_repository = InventoryRepository()
