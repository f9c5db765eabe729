from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy import func, or_
from app.models import clinic_model
from app.repository.base_repository import BaseRepository
from typing import Optional, List

class ClinicRepository(BaseRepository[clinic_model.Clinic]):
    def __init__(self):
        super().__init__(clinic_model.Clinic)

    async def get_clinics(
        self,
        db: AsyncSession,
        skip: int = 0,
        limit: int = 10,
        search: Optional[str] = None,
    ) -> tuple[List[clinic_model.Clinic], int]:
        """Gets a paginated list of clinics with optional search filtering."""
        query = self._live(select(self.model))
        count_query = self._live(select(func.count()).select_from(self.model))

        if search and search.strip():
            pattern = f"%{search.strip()}%"
            filter_clause = or_(
                self.model.name.ilike(pattern),
                self.model.address.ilike(pattern),
                self.model.phone_number.ilike(pattern),
                self.model.email.ilike(pattern),
            )
            query = query.filter(filter_clause)
            count_query = count_query.filter(filter_clause)

        query = query.order_by(self.model.created_at.desc()).offset(skip).limit(limit)
        result = await db.execute(query)
        clinics = result.scalars().all()

        total_clinics = await db.scalar(count_query) or 0
        return clinics, total_clinics

    async def get_active_clinics(self, db: AsyncSession) -> List[clinic_model.Clinic]:
        result = await db.execute(
            self._live(select(self.model))
            .filter(self.model.is_active.is_(True))
            .order_by(self.model.name)
        )
        return result.scalars().all()

    async def get_existing_ids(self, db: AsyncSession, clinic_ids: List[int]) -> List[int]:
        if not clinic_ids:
            return []
        result = await db.execute(
            self._live(select(self.model.id)).filter(self.model.id.in_(clinic_ids))
        )
        return list(result.scalars().all())

    async def get_owner_id(self, db: AsyncSession, clinic_id: int) -> Optional[int]:
        return await db.scalar(select(self.model.owner_id).filter(self.model.id == clinic_id))

clinic_repository = ClinicRepository()
