from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.clinic_context import ClinicContext
from app.core.exceptions import NotFoundError
from app.models.medicine_model import Medicine
from app.repository.inventory_repository import inventory_repository
from app.repository.medical_repository import medicine_repository
from app.schemas import medicine_schema
from app.schemas.common_schema import PagedResult
from app.utils.helpers import total_pages


async def get_active_medicines(db: AsyncSession, ctx: ClinicContext) -> List[Medicine]:
    return await medicine_repository.get_active(db, ctx.require_clinic())


async def search_medicines(
    db: AsyncSession,
    ctx: ClinicContext,
    search: Optional[str],
    page: int,
    page_size: int,
) -> PagedResult[medicine_schema.Medicine]:
    medicines, total = await medicine_repository.search(
        db,
        ctx.require_clinic(),
        search=search,
        skip=(page - 1) * page_size,
        limit=page_size,
        order_by=Medicine.name,
    )
    return PagedResult[medicine_schema.Medicine](
        items=[medicine_schema.Medicine.model_validate(m) for m in medicines],
        total=total,
        page=page,
        page_size=page_size,
        total_pages=total_pages(total, page_size),
    )


async def get_medicine(db: AsyncSession, ctx: ClinicContext, medicine_id: int) -> Medicine:
    medicine = await medicine_repository.get_in_clinic(db, ctx.require_clinic(), medicine_id)
    if medicine is None:
        raise NotFoundError("MEDICINE_NOT_FOUND", "Medicine not found")
    return medicine


async def get_medicine_with_stock(db: AsyncSession, ctx: ClinicContext, medicine_id: int) -> medicine_schema.MedicineWithStock:
    medicine = await get_medicine(db, ctx, medicine_id)
    result = medicine_schema.MedicineWithStock.model_validate(medicine)
    result.available_quantity = await inventory_repository.get_available_quantity(db, medicine.clinic_id, medicine.id)
    return result


async def create_medicine(db: AsyncSession, ctx: ClinicContext, medicine_in: medicine_schema.MedicineCreate) -> Medicine:
    return await medicine_repository.create_in_clinic(db, ctx.require_clinic(), medicine_in)


async def update_medicine(
    db: AsyncSession,
    ctx: ClinicContext,
    medicine_id: int,
    medicine_in: medicine_schema.MedicineUpdate,
) -> Medicine:
    medicine = await get_medicine(db, ctx, medicine_id)
    return await medicine_repository.update(db, medicine, medicine_in)


async def delete_medicine(db: AsyncSession, ctx: ClinicContext, medicine_id: int) -> Medicine:
    medicine = await get_medicine(db, ctx, medicine_id)
    return await medicine_repository.soft_delete(db, medicine)
