from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.dependencies import get_db, get_current_user
from app.models.staff_model import Staff
from app.modules.auth import service as auth_service
from app.repository.staff_repository import staff_repository
from app.schemas import token_schema
from app.schemas.common_schema import ApiResponse, ok
from app.schemas.clinic_schema import ClinicSummary
from app.schemas.staff_schema import StaffDetail
from app.utils.activity_logger import log_activity

router = APIRouter(
    prefix="/auth",
    tags=["Authentication"],
)


@router.post("/login", response_model=ApiResponse[token_schema.LoginResponse])
async def login(request: token_schema.LoginRequest, db: AsyncSession = Depends(get_db)):
    response = await auth_service.login(db, request)
    await log_activity(
        db=db,
        user_id=response.user_id,
        activity_type_category="Login/Access",
        clinic_id=response.clinic_id,
        activity_description=f"Staff '{response.full_name}' logged in.",
    )
    return ok(response, message="Login successful", code="AUTH_LOGIN_SUCCESS")


@router.post("/select-clinic", response_model=ApiResponse[token_schema.LoginResponse])
async def select_clinic(request: token_schema.SelectClinicRequest, db: AsyncSession = Depends(get_db)):
    response = await auth_service.select_clinic(db, request)
    await log_activity(
        db=db,
        user_id=response.user_id,
        activity_type_category="Login/Access",
        clinic_id=response.clinic_id,
        activity_description=f"Staff '{response.full_name}' switched to clinic {response.clinic_id}.",
    )
    return ok(response, message="Clinic selected", code="AUTH_LOGIN_SUCCESS")


@router.get("/me", response_model=ApiResponse[StaffDetail])
async def read_me(
    db: AsyncSession = Depends(get_db),
    current_user: Staff = Depends(get_current_user),
):
    clinics = await staff_repository.get_staff_clinics(db, current_user.id)
    detail = StaffDetail.model_validate(current_user)
    detail.clinics = [ClinicSummary.model_validate(c) for c in clinics]
    return ok(detail)
