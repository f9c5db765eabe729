from datetime import datetime
from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.clinic_context import ClinicContext
from app.core.dependencies import get_db, require_roles
from app.models.staff_model import StaffRole
from app.modules.transactions import service as transaction_service
from app.schemas import transaction_schema
from app.schemas.common_schema import ApiResponse, ok
from app.utils.activity_logger import log_activity

router = APIRouter(
    prefix="/transactions",
    tags=["Transactions"],
)

finance_staff = require_roles(StaffRole.ClinicManager, StaffRole.Accountant)


@router.get("/", response_model=ApiResponse[transaction_schema.TransactionListResponse])
async def get_transactions(
    start_date: Optional[datetime] = Query(None, alias="startDate"),
    end_date: Optional[datetime] = Query(None, alias="endDate"),
    db: AsyncSession = Depends(get_db),
    ctx: ClinicContext = Depends(finance_staff),
):
    return ok(await transaction_service.get_transactions(db, ctx, start_date, end_date))


@router.get("/summary", response_model=ApiResponse[transaction_schema.TransactionSummary])
async def get_summary(
    start_date: Optional[datetime] = Query(None, alias="startDate"),
    end_date: Optional[datetime] = Query(None, alias="endDate"),
    db: AsyncSession = Depends(get_db),
    ctx: ClinicContext = Depends(finance_staff),
):
    return ok(await transaction_service.get_summary(db, ctx, start_date, end_date))


@router.get("/by-category", response_model=ApiResponse[List[transaction_schema.CategorySummary]])
async def get_by_category(
    start_date: Optional[datetime] = Query(None, alias="startDate"),
    end_date: Optional[datetime] = Query(None, alias="endDate"),
    db: AsyncSession = Depends(get_db),
    ctx: ClinicContext = Depends(finance_staff),
):
    return ok(await transaction_service.get_by_category(db, ctx, start_date, end_date))


@router.get("/{transaction_id}", response_model=ApiResponse[transaction_schema.Transaction])
async def get_transaction(
    transaction_id: int,
    db: AsyncSession = Depends(get_db),
    ctx: ClinicContext = Depends(finance_staff),
):
    transaction = await transaction_service.get_transaction(db, ctx, transaction_id)
    return ok(transaction_schema.Transaction.model_validate(transaction))


@router.post("/", response_model=ApiResponse[transaction_schema.Transaction], status_code=201)
async def create_transaction(
    transaction_in: transaction_schema.TransactionCreate,
    db: AsyncSession = Depends(get_db),
    ctx: ClinicContext = Depends(finance_staff),
):
    transaction = await transaction_service.create_transaction(db, ctx, transaction_in)
    await log_activity(
        db=db,
        user_id=ctx.current_user_id,
        activity_type_category="Finance",
        clinic_id=ctx.current_clinic_id,
        activity_description=f"Recorded {transaction.type} of {transaction.amount}: {transaction.description}",
    )
    return ok(transaction_schema.Transaction.model_validate(transaction), message="Transaction created successfully")


@router.put("/{transaction_id}", response_model=ApiResponse[transaction_schema.Transaction])
async def update_transaction(
    transaction_id: int,
    transaction_in: transaction_schema.TransactionUpdate,
    db: AsyncSession = Depends(get_db),
    ctx: ClinicContext = Depends(finance_staff),
):
    transaction = await transaction_service.update_transaction(db, ctx, transaction_id, transaction_in)
    return ok(transaction_schema.Transaction.model_validate(transaction), message="Transaction updated successfully")


@router.delete("/{transaction_id}", response_model=ApiResponse[None])
async def delete_transaction(
    transaction_id: int,
    db: AsyncSession = Depends(get_db),
    ctx: ClinicContext = Depends(finance_staff),
):
    transaction = await transaction_service.delete_transaction(db, ctx, transaction_id)
    await log_activity(
        db=db,
        user_id=ctx.current_user_id,
        activity_type_category="Finance",
        clinic_id=ctx.current_clinic_id,
        activity_description=f"Deleted {transaction.type} transaction {transaction.id}.",
    )
    return ok(message="Transaction deleted successfully")
