from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.clinic_context import ClinicContext
from app.core.exceptions import NotFoundError
from app.models.medical_service_model import MedicalService
from app.repository.medical_repository import medical_service_repository
from app.schemas import medical_service_schema
from app.schemas.common_schema import PagedResult
from app.utils.helpers import total_pages


async def search_services(
    db: AsyncSession,
    ctx: ClinicContext,
    search: Optional[str],
    page: int,
    page_size: int,
) -> PagedResult[medical_service_schema.MedicalService]:
    services, total = await medical_service_repository.search(
        db,
        ctx.require_clinic(),
        search=search,
        skip=(page - 1) * page_size,
        limit=page_size,
        order_by=MedicalService.name,
    )
    return PagedResult[medical_service_schema.MedicalService](
        items=[medical_service_schema.MedicalService.model_validate(s) for s in services],
        total=total,
        page=page,
        page_size=page_size,
        total_pages=total_pages(total, page_size),
    )


async def get_active_services(db: AsyncSession, ctx: ClinicContext) -> List[MedicalService]:
    return await medical_service_repository.get_active(db, ctx.require_clinic())


async def get_service(db: AsyncSession, ctx: ClinicContext, service_id: int) -> MedicalService:
    service = await medical_service_repository.get_in_clinic(db, ctx.require_clinic(), service_id)
    if service is None:
        raise NotFoundError("SERVICE_NOT_FOUND", "Service not found")
    return service


async def create_service(
    db: AsyncSession, ctx: ClinicContext, service_in: medical_service_schema.MedicalServiceCreate
) -> MedicalService:
    return await medical_service_repository.create_in_clinic(db, ctx.require_clinic(), service_in)


async def update_service(
    db: AsyncSession,
    ctx: ClinicContext,
    service_id: int,
    service_in: medical_service_schema.MedicalServiceUpdate,
) -> MedicalService:
    service = await get_service(db, ctx, service_id)
    return await medical_service_repository.update(db, service, service_in)


async def delete_service(db: AsyncSession, ctx: ClinicContext, service_id: int) -> MedicalService:
    service = await get_service(db, ctx, service_id)
    return await medical_service_repository.soft_delete(db, service)
