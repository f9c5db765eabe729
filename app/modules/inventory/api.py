from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.clinic_context import ClinicContext
from app.core.dependencies import get_db, get_clinic_context, require_roles
from app.models.staff_model import StaffRole
from app.modules.inventory import service as inventory_service
from app.schemas import inventory_schema
from app.schemas.common_schema import ApiResponse, ok
from app.utils.activity_logger import log_activity

router = APIRouter(
    prefix="/inventory",
    tags=["Inventory"],
)

manage_inventory = require_roles(StaffRole.ClinicManager, StaffRole.Pharmacist)

ItemOut = inventory_schema.InventoryItem


def _to_list(items) -> List[ItemOut]:
    return [ItemOut.model_validate(i) for i in items]


@router.get("/", response_model=ApiResponse[List[ItemOut]])
async def get_all_stock(
    db: AsyncSession = Depends(get_db),
    ctx: ClinicContext = Depends(get_clinic_context),
):
    return ok(_to_list(await inventory_service.get_all_stock(db, ctx)))


@router.get("/low-stock", response_model=ApiResponse[List[ItemOut]])
async def get_low_stock(
    db: AsyncSession = Depends(get_db),
    ctx: ClinicContext = Depends(get_clinic_context),
):
    return ok(_to_list(await inventory_service.get_low_stock(db, ctx)))


@router.get("/expiring", response_model=ApiResponse[List[ItemOut]])
async def get_expiring_stock(
    days: Optional[int] = Query(None, ge=0),
    db: AsyncSession = Depends(get_db),
    ctx: ClinicContext = Depends(get_clinic_context),
):
    return ok(_to_list(await inventory_service.get_expiring_stock(db, ctx, days)))


@router.get("/medicine/{medicine_id}", response_model=ApiResponse[List[ItemOut]])
async def get_stock_by_medicine(
    medicine_id: int,
    db: AsyncSession = Depends(get_db),
    ctx: ClinicContext = Depends(get_clinic_context),
):
    return ok(_to_list(await inventory_service.get_stock_by_medicine(db, ctx, medicine_id)))


@router.get("/medicine/{medicine_id}/available", response_model=ApiResponse[inventory_schema.AvailableStock])
async def get_available_quantity(
    medicine_id: int,
    db: AsyncSession = Depends(get_db),
    ctx: ClinicContext = Depends(get_clinic_context),
):
    quantity = await inventory_service.get_available_quantity(db, ctx, medicine_id)
    return ok(inventory_schema.AvailableStock(medicine_id=medicine_id, available_quantity=quantity))


@router.post("/", response_model=ApiResponse[ItemOut], status_code=201)
async def add_stock(
    stock_in: inventory_schema.StockCreate,
    db: AsyncSession = Depends(get_db),
    ctx: ClinicContext = Depends(manage_inventory),
):
    item = await inventory_service.add_stock(db, ctx, stock_in)
    await log_activity(
        db=db,
        user_id=ctx.current_user_id,
        activity_type_category="Data/CRUD",
        clinic_id=ctx.current_clinic_id,
        activity_description=f"Stock of {item.quantity} added for medicine {item.medicine_id}.",
    )
    return ok(ItemOut.model_validate(item), message="Stock added successfully")


@router.put("/{item_id}", response_model=ApiResponse[ItemOut])
async def update_stock(
    item_id: int,
    stock_in: inventory_schema.StockUpdate,
    db: AsyncSession = Depends(get_db),
    ctx: ClinicContext = Depends(manage_inventory),
):
    item = await inventory_service.update_stock(db, ctx, item_id, stock_in)
    return ok(ItemOut.model_validate(item), message="Stock updated successfully")


@router.post("/deduct", response_model=ApiResponse[None])
async def deduct_stock(
    request: inventory_schema.StockDeduct,
    db: AsyncSession = Depends(get_db),
    ctx: ClinicContext = Depends(manage_inventory),
):
    await inventory_service.deduct_stock(db, ctx.require_clinic(), request.medicine_id, request.quantity)
    await log_activity(
        db=db,
        user_id=ctx.current_user_id,
        activity_type_category="Data/CRUD",
        clinic_id=ctx.current_clinic_id,
        activity_description=f"Deducted {request.quantity} units of medicine {request.medicine_id}.",
    )
    return ok(message="Stock deducted successfully")
