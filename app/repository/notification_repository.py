from datetime import datetime
from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy import func, update
from app.models import notification_model
from app.repository.base_repository import BaseRepository

Notification = notification_model.Notification


class NotificationRepository(BaseRepository[Notification]):
    def __init__(self):
        super().__init__(Notification)

    async def get_pending_due(self, db: AsyncSession, now: datetime, clinic_id: Optional[int] = None) -> List[Notification]:
        """Pending notifications whose scheduled time has passed, across all clinics unless one is given."""
        query = self._live(select(Notification)).filter(
            Notification.status == "Pending", Notification.scheduled_time <= now
        )
        if clinic_id is not None:
            query = query.filter(Notification.clinic_id == clinic_id)
        result = await db.execute(query.order_by(Notification.scheduled_time))
        return result.scalars().all()

    async def get_by_patient(self, db: AsyncSession, clinic_id: int, patient_id: int) -> List[Notification]:
        result = await db.execute(
            self._live(select(Notification))
            .filter(Notification.clinic_id == clinic_id, Notification.patient_id == patient_id)
            .order_by(Notification.scheduled_time.desc())
        )
        return result.scalars().all()

    async def get_for_user(
        self,
        db: AsyncSession,
        user_id: int,
        is_read: Optional[bool] = None,
        type: Optional[str] = None,
    ) -> List[Notification]:
        query = self._live(select(Notification)).filter(Notification.user_id == user_id)
        if is_read is not None:
            query = query.filter(Notification.is_read.is_(is_read))
        if type:
            query = query.filter(Notification.type == type)
        result = await db.execute(query.order_by(Notification.created_at.desc()))
        return result.scalars().all()

    async def get_user_notification(self, db: AsyncSession, notification_id: int, user_id: int) -> Optional[Notification]:
        result = await db.execute(
            self._live(select(Notification)).filter(Notification.id == notification_id, Notification.user_id == user_id)
        )
        return result.scalar_one_or_none()

    async def count_unread(self, db: AsyncSession, user_id: int) -> int:
        return await db.scalar(
            self._live(select(func.count()).select_from(Notification)).filter(
                Notification.user_id == user_id, Notification.is_read.is_(False)
            )
        ) or 0

    async def mark_all_read(self, db: AsyncSession, user_id: int, now: datetime) -> None:
        await db.execute(
            update(Notification)
            .where(Notification.user_id == user_id, Notification.is_read.is_(False))
            .values(is_read=True, read_at=now)
        )
        await db.commit()


notification_repository = NotificationRepository()
