from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy import func, or_
from typing import Optional, List

from app.models import staff_model, clinic_model
from app.repository.base_repository import BaseRepository


class StaffRepository(BaseRepository[staff_model.Staff]):
    def __init__(self):
        super().__init__(staff_model.Staff)

    async def get_by_email(self, db: AsyncSession, email: str) -> Optional[staff_model.Staff]:
        result = await db.execute(self._live(select(self.model)).filter(func.lower(self.model.email) == email.lower()))
        return result.scalars().first()

    async def get_by_email_or_phone(self, db: AsyncSession, email_or_phone: str) -> Optional[staff_model.Staff]:
        result = await db.execute(
            self._live(select(self.model)).filter(
                or_(
                    func.lower(self.model.email) == email_or_phone.lower(),
                    self.model.phone_number == email_or_phone,
                )
            )
        )
        return result.scalars().first()

    async def get_staff(
        self,
        db: AsyncSession,
        skip: int = 0,
        limit: int = 10,
        search: Optional[str] = None,
        clinic_id: Optional[int] = None,
    ) -> tuple[List[staff_model.Staff], int]:
        """Gets a paginated list of staff ordered by name, optionally limited to one clinic."""
        stmt = self._live(select(self.model))
        count_stmt = self._live(select(func.count()).select_from(self.model))

        if clinic_id is not None:
            in_clinic = self.model.clinic_links.any(
                (staff_model.StaffClinic.clinic_id == clinic_id) & staff_model.StaffClinic.is_active.is_(True)
            )
            stmt = stmt.where(in_clinic)
            count_stmt = count_stmt.where(in_clinic)

        if search and search.strip():
            pattern = f"%{search.strip()}%"
            filter_clause = or_(
                self.model.full_name.ilike(pattern),
                self.model.email.ilike(pattern),
                self.model.phone_number.ilike(pattern),
            )
            stmt = stmt.where(filter_clause)
            count_stmt = count_stmt.where(filter_clause)

        stmt = stmt.order_by(self.model.full_name).offset(skip).limit(limit)
        result = await db.execute(stmt)
        staff = result.scalars().all()

        total_staff = await db.scalar(count_stmt) or 0
        return staff, total_staff

    async def get_ids_by_role_in_clinic(self, db: AsyncSession, role: str, clinic_id: int) -> List[int]:
        result = await db.execute(
            self._live(select(self.model.id))
            .join(staff_model.StaffClinic, staff_model.StaffClinic.staff_id == self.model.id)
            .filter(self.model.role == role, staff_model.StaffClinic.clinic_id == clinic_id)
        )
        return list(result.scalars().all())

    # --- Clinic assignments ---

    async def has_access_to_clinic(self, db: AsyncSession, staff_id: int, clinic_id: int) -> bool:
        link_id = await db.scalar(
            select(staff_model.StaffClinic.id).filter(
                staff_model.StaffClinic.staff_id == staff_id,
                staff_model.StaffClinic.clinic_id == clinic_id,
                staff_model.StaffClinic.is_active.is_(True),
            )
        )
        return link_id is not None

    async def get_staff_clinic_ids(self, db: AsyncSession, staff_id: int) -> List[int]:
        result = await db.execute(
            select(staff_model.StaffClinic.clinic_id).filter(
                staff_model.StaffClinic.staff_id == staff_id,
                staff_model.StaffClinic.is_active.is_(True),
            )
        )
        return list(result.scalars().all())

    async def get_staff_clinics(self, db: AsyncSession, staff_id: int) -> List[clinic_model.Clinic]:
        result = await db.execute(
            select(clinic_model.Clinic)
            .join(staff_model.StaffClinic, staff_model.StaffClinic.clinic_id == clinic_model.Clinic.id)
            .filter(
                staff_model.StaffClinic.staff_id == staff_id,
                staff_model.StaffClinic.is_active.is_(True),
                clinic_model.Clinic.is_deleted.is_(False),
            )
            .order_by(clinic_model.Clinic.name)
        )
        return result.scalars().all()

    async def assign_clinic(self, db: AsyncSession, staff_id: int, clinic_id: int) -> staff_model.StaffClinic:
        link = staff_model.StaffClinic(staff_id=staff_id, clinic_id=clinic_id, is_active=True)
        db.add(link)
        await db.flush()
        return link

    async def replace_clinics(self, db: AsyncSession, staff_id: int, clinic_ids: List[int]) -> None:
        """Replaces every clinic assignment of a staff member. Caller commits."""
        result = await db.execute(
            select(staff_model.StaffClinic).filter(staff_model.StaffClinic.staff_id == staff_id)
        )
        for link in result.scalars().all():
            await db.delete(link)
        await db.flush()
        for clinic_id in clinic_ids:
            db.add(staff_model.StaffClinic(staff_id=staff_id, clinic_id=clinic_id, is_active=True))
        await db.flush()


staff_repository = StaffRepository()
