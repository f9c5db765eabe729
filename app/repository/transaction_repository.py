from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy import case, func
from app.models import transaction_model
from app.repository.base_repository import ClinicScopedRepository

Transaction = transaction_model.Transaction


class TransactionRepository(ClinicScopedRepository[Transaction]):
    def __init__(self):
        super().__init__(Transaction)

    def _in_range(self, query, start_date: Optional[datetime], end_date: Optional[datetime]):
        if start_date:
            query = query.filter(Transaction.date >= start_date)
        if end_date:
            query = query.filter(Transaction.date <= end_date)
        return query

    async def get_transactions(
        self,
        db: AsyncSession,
        clinic_id: int,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> List[Transaction]:
        query = self._in_range(self._scoped(select(Transaction), clinic_id), start_date, end_date)
        result = await db.execute(query.order_by(Transaction.date.desc()))
        return result.scalars().all()

    async def get_summary(
        self,
        db: AsyncSession,
        clinic_id: int,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> tuple[Decimal, Decimal, int]:
        """Returns (total revenue, total expenses, transaction count)."""
        revenue = func.coalesce(func.sum(case((Transaction.type == "revenue", Transaction.amount), else_=0)), 0)
        expense = func.coalesce(func.sum(case((Transaction.type == "expense", Transaction.amount), else_=0)), 0)
        query = self._in_range(
            self._scoped(select(revenue, expense, func.count(Transaction.id)), clinic_id), start_date, end_date
        )
        row = (await db.execute(query)).one()
        return Decimal(row[0] or 0), Decimal(row[1] or 0), int(row[2] or 0)

    async def get_category_breakdown(
        self,
        db: AsyncSession,
        clinic_id: int,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ):
        revenue = func.coalesce(func.sum(case((Transaction.type == "revenue", Transaction.amount), else_=0)), 0)
        expense = func.coalesce(func.sum(case((Transaction.type == "expense", Transaction.amount), else_=0)), 0)
        query = self._in_range(
            self._scoped(
                select(Transaction.category, revenue.label("revenue"), expense.label("expense"), func.count(Transaction.id).label("count")),
                clinic_id,
            ),
            start_date,
            end_date,
        )
        query = query.group_by(Transaction.category).order_by(func.sum(Transaction.amount).desc())
        return (await db.execute(query)).all()


transaction_repository = TransactionRepository()
