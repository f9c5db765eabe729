import logging
from datetime import timedelta
from typing import List, Optional, Sequence, Tuple
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.clinic_context import ClinicContext
from app.core.config import settings
from app.core.exceptions import NotFoundError, ServiceError
from app.models.inventory_model import InventoryItem
from app.repository.inventory_repository import inventory_repository
from app.repository.medical_repository import medicine_repository
from app.schemas import inventory_schema
from app.utils.helpers import utcnow

logger = logging.getLogger(__name__)


def allocate_fifo(batches: Sequence[InventoryItem], quantity: int) -> List[Tuple[InventoryItem, int]]:
    """
    Splits ``quantity`` across ``batches`` in the order given.
    Returns (batch, amount taken) pairs; raises INSUFFICIENT_STOCK when the
    batches together hold less than requested.
    """
    available = sum(batch.quantity for batch in batches)
    if available < quantity:
        raise ServiceError(
            "INSUFFICIENT_STOCK",
            message=f"Insufficient stock: requested {quantity}, available {available}",
        )

    allocations = []
    remaining = quantity
    for batch in batches:
        if remaining <= 0:
            break
        take = min(batch.quantity, remaining)
        if take > 0:
            allocations.append((batch, take))
            remaining -= take
    return allocations


async def add_stock(db: AsyncSession, ctx: ClinicContext, stock_in: inventory_schema.StockCreate) -> InventoryItem:
    clinic_id = ctx.require_clinic()
    if await medicine_repository.get_in_clinic(db, clinic_id, stock_in.medicine_id) is None:
        raise NotFoundError("MEDICINE_NOT_FOUND", "Medicine not found")

    data = stock_in.model_dump()
    if data.get("reorder_level") is None:
        data["reorder_level"] = settings.DEFAULT_REORDER_LEVEL
    data["received_date"] = utcnow()
    item = await inventory_repository.create_in_clinic(db, clinic_id, data)
    logger.info("Added %s units of medicine %s to clinic %s", item.quantity, item.medicine_id, clinic_id)
    return item


async def get_stock_item(db: AsyncSession, ctx: ClinicContext, item_id: int) -> InventoryItem:
    item = await inventory_repository.get_in_clinic(db, ctx.require_clinic(), item_id)
    if item is None:
        raise NotFoundError("INVENTORY_ITEM_NOT_FOUND", "Inventory item not found")
    return item


async def update_stock(
    db: AsyncSession, ctx: ClinicContext, item_id: int, stock_in: inventory_schema.StockUpdate
) -> InventoryItem:
    item = await get_stock_item(db, ctx, item_id)
    return await inventory_repository.update(
        db, item, {"quantity": stock_in.quantity, "reorder_level": stock_in.reorder_level}
    )


async def deduct_stock(db: AsyncSession, clinic_id: int, medicine_id: int, quantity: int) -> List[InventoryItem]:
    """Takes ``quantity`` units from the earliest-expiring batches first."""
    batches = await inventory_repository.get_batches_for_deduction(db, clinic_id, medicine_id)
    allocations = allocate_fifo(batches, quantity)
    for batch, take in allocations:
        batch.quantity -= take
    await db.commit()
    logger.info("Deducted %s units of medicine %s across %s batch(es)", quantity, medicine_id, len(allocations))
    return [batch for batch, _ in allocations]


async def get_low_stock(db: AsyncSession, ctx: ClinicContext) -> List[InventoryItem]:
    return await inventory_repository.get_low_stock(db, ctx.require_clinic())


async def get_expiring_stock(db: AsyncSession, ctx: ClinicContext, days: Optional[int] = None) -> List[InventoryItem]:
    if days is None:
        days = settings.EXPIRING_STOCK_DAYS
    return await inventory_repository.get_expiring(db, ctx.require_clinic(), utcnow() + timedelta(days=days))


async def get_stock_by_medicine(db: AsyncSession, ctx: ClinicContext, medicine_id: int) -> List[InventoryItem]:
    return await inventory_repository.get_by_medicine(db, ctx.require_clinic(), medicine_id)


async def get_available_quantity(db: AsyncSession, ctx: ClinicContext, medicine_id: int) -> int:
    return await inventory_repository.get_available_quantity(db, ctx.require_clinic(), medicine_id)


async def get_all_stock(db: AsyncSession, ctx: ClinicContext) -> List[InventoryItem]:
    return await inventory_repository.list_in_clinic(db, ctx.require_clinic(), order_by=InventoryItem.medicine_id)
