from datetime import datetime
from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.clinic_context import ClinicContext
from app.core.exceptions import NotFoundError
from app.models.transaction_model import Transaction
from app.repository.transaction_repository import transaction_repository
from app.schemas import transaction_schema


async def get_transactions(
    db: AsyncSession,
    ctx: ClinicContext,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
) -> transaction_schema.TransactionListResponse:
    transactions = await transaction_repository.get_transactions(db, ctx.require_clinic(), start_date, end_date)
    return transaction_schema.TransactionListResponse(
        transactions=[transaction_schema.Transaction.model_validate(t) for t in transactions],
        total=len(transactions),
    )


async def get_transaction(db: AsyncSession, ctx: ClinicContext, transaction_id: int) -> Transaction:
    transaction = await transaction_repository.get_in_clinic(db, ctx.require_clinic(), transaction_id)
    if transaction is None:
        raise NotFoundError("TRANSACTION_NOT_FOUND", "Transaction not found")
    return transaction


async def create_transaction(
    db: AsyncSession, ctx: ClinicContext, transaction_in: transaction_schema.TransactionCreate
) -> Transaction:
    return await transaction_repository.create_in_clinic(db, ctx.require_clinic(), transaction_in)


async def update_transaction(
    db: AsyncSession,
    ctx: ClinicContext,
    transaction_id: int,
    transaction_in: transaction_schema.TransactionUpdate,
) -> Transaction:
    transaction = await get_transaction(db, ctx, transaction_id)
    return await transaction_repository.update(db, transaction, transaction_in)


async def delete_transaction(db: AsyncSession, ctx: ClinicContext, transaction_id: int) -> Transaction:
    transaction = await get_transaction(db, ctx, transaction_id)
    return await transaction_repository.soft_delete(db, transaction)


async def get_summary(
    db: AsyncSession,
    ctx: ClinicContext,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
) -> transaction_schema.TransactionSummary:
    revenue, expenses, count = await transaction_repository.get_summary(db, ctx.require_clinic(), start_date, end_date)
    return transaction_schema.TransactionSummary(
        total_revenue=revenue,
        total_expenses=expenses,
        net_income=revenue - expenses,
        transaction_count=count,
    )


async def get_by_category(
    db: AsyncSession,
    ctx: ClinicContext,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
) -> List[transaction_schema.CategorySummary]:
    rows = await transaction_repository.get_category_breakdown(db, ctx.require_clinic(), start_date, end_date)
    return [
        transaction_schema.CategorySummary(category=row.category, revenue=row.revenue, expense=row.expense, count=row.count)
        for row in rows
    ]
