import logging
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ServiceError
from app.models.staff_model import Staff, StaffRole
from app.repository.staff_repository import staff_repository
from app.schemas import token_schema
from app.schemas.clinic_schema import ClinicSummary
from app.utils import auth
from app.utils.security import verify_password

logger = logging.getLogger(__name__)


async def authenticate_staff(db: AsyncSession, email_or_phone: Optional[str], password: Optional[str]) -> Staff:
    """
    Authenticates a staff member by e-mail or phone number and password.
    Only active staff may sign in.
    """
    if not email_or_phone or not password:
        raise ServiceError("AUTH_FIELDS_REQUIRED", message="Email or phone and password are required")

    staff = await staff_repository.get_by_email_or_phone(db, email_or_phone.strip())
    if not staff or not staff.is_active or not verify_password(password, staff.password_hash):
        logger.info("Failed login attempt for '%s'", email_or_phone)
        raise ServiceError("AUTH_INVALID_CREDENTIALS", status_code=401, message="Invalid credentials")
    return staff


async def build_login_response(
    db: AsyncSession,
    staff: Staff,
    clinic_id: Optional[int] = None,
) -> token_schema.LoginResponse:
    clinics = await staff_repository.get_staff_clinics(db, staff.id)
    token = auth.create_access_token(data=auth.build_staff_claims(staff, clinic_id))
    return token_schema.LoginResponse(
        token=token["access_token"],
        expires_in=token["expires_in"],
        user_id=staff.id,
        full_name=staff.full_name,
        email=staff.email,
        role=staff.role,
        clinic_id=clinic_id,
        clinics=[ClinicSummary.model_validate(c) for c in clinics],
    )


async def login(db: AsyncSession, request: token_schema.LoginRequest) -> token_schema.LoginResponse:
    staff = await authenticate_staff(db, request.email_or_phone, request.password)
    clinic_ids = await staff_repository.get_staff_clinic_ids(db, staff.id)
    # A single assignment is selected automatically
    clinic_id = clinic_ids[0] if len(clinic_ids) == 1 else None
    return await build_login_response(db, staff, clinic_id)


async def select_clinic(db: AsyncSession, request: token_schema.SelectClinicRequest) -> token_schema.LoginResponse:
    staff = await authenticate_staff(db, request.email_or_phone, request.password)
    if staff.role != StaffRole.SuperAdmin.value and not await staff_repository.has_access_to_clinic(
        db, staff.id, request.clinic_id
    ):
        raise ServiceError("AUTH_CLINIC_ACCESS_DENIED", status_code=403, message="You do not have access to this clinic")
    return await build_login_response(db, staff, request.clinic_id)
