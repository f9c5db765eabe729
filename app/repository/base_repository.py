from typing import Any, Dict, TypeVar, Type, List, Optional, Generic, Union
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy import func, or_
from pydantic import BaseModel
from app.models.base import Base
from app.utils.helpers import utcnow

ModelType = TypeVar("ModelType", bound=Base)
CreateSchemaType = TypeVar("CreateSchemaType", bound=BaseModel)
UpdateSchemaType = TypeVar("UpdateSchemaType", bound=BaseModel)

class BaseRepository(Generic[ModelType]):
    def __init__(self, model: Type[ModelType]):
        self.model = model

    def _live(self, query):
        if hasattr(self.model, "is_deleted"):
            query = query.filter(self.model.is_deleted.is_(False))
        return query

    async def create(self, db: AsyncSession, obj_in: Union[CreateSchemaType, Dict[str, Any]]) -> ModelType:
        data = obj_in if isinstance(obj_in, dict) else obj_in.model_dump()
        db_obj = self.model(**data)
        db.add(db_obj)
        await db.commit()
        await db.refresh(db_obj)
        return db_obj

    async def get(self, db: AsyncSession, id: int) -> Optional[ModelType]:
        result = await db.execute(self._live(select(self.model).filter(self.model.id == id)))
        return result.scalar_one_or_none()

    async def get_multi(self, db: AsyncSession, skip: int = 0, limit: int = 100) -> List[ModelType]:
        result = await db.execute(self._live(select(self.model)).offset(skip).limit(limit))
        return result.scalars().all()

    async def update(self, db: AsyncSession, db_obj: ModelType, obj_in: Union[UpdateSchemaType, Dict[str, Any]]) -> ModelType:
        update_data = obj_in if isinstance(obj_in, dict) else obj_in.model_dump(exclude_unset=True)
        for field, value in update_data.items():
            setattr(db_obj, field, value)
        db.add(db_obj)
        await db.commit()
        await db.refresh(db_obj)
        return db_obj

    async def delete(self, db: AsyncSession, id: int) -> Optional[ModelType]:
        db_obj = await self.get(db, id)
        if db_obj:
            await db.delete(db_obj)
            await db.commit()
        return db_obj

    async def soft_delete(self, db: AsyncSession, db_obj: ModelType) -> ModelType:
        db_obj.is_deleted = True
        db_obj.deleted_at = utcnow()
        db.add(db_obj)
        await db.commit()
        return db_obj


class ClinicScopedRepository(BaseRepository[ModelType]):
    """Repository for tenant-owned rows; every query is filtered by clinic."""

    search_fields: tuple = ()

    def _scoped(self, query, clinic_id: int):
        return self._live(query).filter(self.model.clinic_id == clinic_id)

    async def create_in_clinic(self, db: AsyncSession, clinic_id: int, obj_in: Union[CreateSchemaType, Dict[str, Any]]) -> ModelType:
        data = dict(obj_in) if isinstance(obj_in, dict) else obj_in.model_dump()
        data["clinic_id"] = clinic_id
        return await self.create(db, data)

    async def get_in_clinic(self, db: AsyncSession, clinic_id: int, id: int) -> Optional[ModelType]:
        result = await db.execute(self._scoped(select(self.model), clinic_id).filter(self.model.id == id))
        return result.scalar_one_or_none()

    async def list_in_clinic(self, db: AsyncSession, clinic_id: int, *filters, order_by=None) -> List[ModelType]:
        query = self._scoped(select(self.model), clinic_id)
        if filters:
            query = query.filter(*filters)
        if order_by is not None:
            query = query.order_by(order_by)
        result = await db.execute(query)
        return result.scalars().all()

    async def count_in_clinic(self, db: AsyncSession, clinic_id: int, *filters) -> int:
        query = self._scoped(select(func.count()).select_from(self.model), clinic_id)
        if filters:
            query = query.filter(*filters)
        return await db.scalar(query) or 0

    async def search(
        self,
        db: AsyncSession,
        clinic_id: int,
        search: Optional[str] = None,
        skip: int = 0,
        limit: int = 10,
        order_by=None,
        filters: tuple = (),
    ) -> tuple[List[ModelType], int]:
        """Gets a paginated list of rows with optional text search over ``search_fields``."""
        query = self._scoped(select(self.model), clinic_id)
        count_query = self._scoped(select(func.count()).select_from(self.model), clinic_id)

        if filters:
            query = query.filter(*filters)
            count_query = count_query.filter(*filters)

        if search and search.strip() and self.search_fields:
            pattern = f"%{search.strip()}%"
            filter_clause = or_(*[getattr(self.model, name).ilike(pattern) for name in self.search_fields])
            query = query.filter(filter_clause)
            count_query = count_query.filter(filter_clause)

        if order_by is None:
            order_by = self.model.created_at.desc()
        query = query.order_by(order_by).offset(skip).limit(limit)
        result = await db.execute(query)
        items = result.scalars().all()

        total = await db.scalar(count_query) or 0
        return items, total
