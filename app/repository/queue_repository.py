from datetime import date
from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy import func, or_
from app.models import queue_model
from app.repository.base_repository import ClinicScopedRepository

PatientQueue = queue_model.PatientQueue


class QueueRepository(ClinicScopedRepository[PatientQueue]):
    def __init__(self):
        super().__init__(PatientQueue)

    async def get_last_queue_number(self, db: AsyncSession, clinic_id: int, prefix: str) -> Optional[str]:
        return await db.scalar(
            select(PatientQueue.queue_number)
            .filter(PatientQueue.clinic_id == clinic_id, PatientQueue.queue_number.like(f"{prefix}%"))
            .order_by(PatientQueue.queue_number.desc())
            .limit(1)
        )

    async def get_for_date(self, db: AsyncSession, clinic_id: int, queue_date: date, statuses=None) -> List[PatientQueue]:
        filters = [PatientQueue.queue_date == queue_date]
        if statuses:
            filters.append(PatientQueue.status.in_(statuses))
        result = await db.execute(
            self._scoped(select(PatientQueue), clinic_id)
            .filter(*filters)
            .order_by(PatientQueue.priority.desc(), PatientQueue.check_in_time)
        )
        return result.scalars().all()

    async def get_next_waiting(
        self,
        db: AsyncSession,
        clinic_id: int,
        queue_date: date,
        staff_id: Optional[int] = None,
        room_id: Optional[int] = None,
    ) -> Optional[PatientQueue]:
        query = self._scoped(select(PatientQueue), clinic_id).filter(
            PatientQueue.queue_date == queue_date,
            PatientQueue.status == "Waiting",
        )
        if staff_id is not None:
            query = query.filter(or_(PatientQueue.assigned_staff_id.is_(None), PatientQueue.assigned_staff_id == staff_id))
        if room_id is not None:
            query = query.filter(or_(PatientQueue.room_id.is_(None), PatientQueue.room_id == room_id))
        result = await db.execute(
            query.order_by(PatientQueue.priority.desc(), PatientQueue.check_in_time).limit(1)
        )
        return result.scalars().first()

    async def count_ahead(self, db: AsyncSession, item: PatientQueue) -> int:
        """Waiting or called entries that checked in earlier with the same or higher priority."""
        return await db.scalar(
            self._scoped(select(func.count()).select_from(PatientQueue), item.clinic_id).filter(
                PatientQueue.queue_date == item.queue_date,
                PatientQueue.status.in_(("Waiting", "Called")),
                PatientQueue.check_in_time < item.check_in_time,
                PatientQueue.priority >= item.priority,
                PatientQueue.id != item.id,
            )
        ) or 0


queue_repository = QueueRepository()
