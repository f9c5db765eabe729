import logging
from typing import AsyncGenerator, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import SQLAlchemyError
from app.core.database import db_manager
from jose import JWTError
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer

from app.core.clinic_context import ClinicContext
from app.models.staff_model import Staff, StaffRole
from app.schemas import token_schema
from app.repository.staff_repository import staff_repository
from app.modules.subscription.service import subscription_service
from app.utils.auth import decode_access_token

logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login")

async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async for session in db_manager.get_db_session():
        yield session

# --- Staff Authentication and Authorization Dependencies ---

def _credentials_exception() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail={"code": "AUTH_UNAUTHORIZED", "message": "Could not validate credentials"},
        headers={"WWW-Authenticate": "Bearer"},
    )

async def get_token_data(token: str = Depends(oauth2_scheme)) -> token_schema.TokenData:
    """Decodes and validates the bearer token claims."""
    try:
        payload = decode_access_token(token)
    except JWTError:
        raise _credentials_exception()
    if payload.get("sub") is None:
        raise _credentials_exception()
    return token_schema.TokenData(
        sub=payload.get("sub"),
        email=payload.get("email"),
        role=payload.get("role"),
        clinic_id=payload.get("clinic_id"),
        name=payload.get("name"),
    )

async def get_current_user(
    token_data: token_schema.TokenData = Depends(get_token_data),
    db: AsyncSession = Depends(get_db),
) -> Staff:
    """
    Dependency to get the current staff member from a JWT token.
    Inactive or deleted staff are rejected even when the token is still valid.
    """
    try:
        staff_id = int(token_data.sub)
    except ValueError:
        raise _credentials_exception()
    user = await staff_repository.get(db, staff_id)
    if user is None or not user.is_active:
        raise _credentials_exception()
    return user

async def get_clinic_context(
    token_data: token_schema.TokenData = Depends(get_token_data),
    current_user: Staff = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> ClinicContext:
    """
    Builds the request's ClinicContext from the token claims.
    A selected clinic must be one the staff member is actively assigned to.
    """
    ctx = ClinicContext(
        current_user_id=current_user.id,
        current_clinic_id=token_data.clinic_id,
        current_user_role=current_user.role,
    )
    if ctx.current_clinic_id is not None and not ctx.is_super_admin:
        if not await staff_repository.has_access_to_clinic(db, current_user.id, ctx.current_clinic_id):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail={"code": "AUTH_CLINIC_ACCESS_DENIED", "message": "You do not have access to this clinic"},
            )
    return ctx

async def get_current_super_admin(current_user: Staff = Depends(get_current_user)) -> Staff:
    """
    Dependency to ensure the user is a super admin.
    """
    if current_user.role != StaffRole.SuperAdmin.value:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="The user does not have super admin privileges",
        )
    return current_user

def require_roles(*roles: StaffRole):
    """Dependency factory restricting an endpoint to the given roles (super admins always pass)."""
    allowed = {role.value for role in roles} | {StaffRole.SuperAdmin.value}

    async def _check(ctx: ClinicContext = Depends(get_clinic_context)) -> ClinicContext:
        if ctx.current_user_role not in allowed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="The user does not have the required role",
            )
        return ctx

    return _check

# --- Subscription usage limits ---

class UsageGuard:
    """Returned by the usage-limit dependencies; records usage once the create succeeded."""

    def __init__(self, owner_id: Optional[int], resource_type: str):
        self.owner_id = owner_id
        self.resource_type = resource_type

    async def record(self, db: AsyncSession, amount: int = 1) -> None:
        if self.owner_id is None:
            return
        try:
            await subscription_service.update_usage(db, self.owner_id, self.resource_type, amount)
        except SQLAlchemyError as e:
            # The resource is already committed; usage errors are only logged
            await db.rollback()
            logger.error(
                "Failed to record %s usage for owner %s: %s", self.resource_type, self.owner_id, e
            )

def enforce_usage_limit(resource_type: str, owner_is_caller: bool = False):
    """
    Dependency factory rejecting a create when the tenant owner's package limit is reached.
    With ``owner_is_caller`` the caller's own counter is checked; clinics belong to whoever creates them.
    """

    async def _guard(
        ctx: ClinicContext = Depends(get_clinic_context),
        db: AsyncSession = Depends(get_db),
    ) -> UsageGuard:
        if ctx.is_super_admin and ctx.current_clinic_id is None:
            return UsageGuard(None, resource_type)
        if owner_is_caller:
            owner_id = ctx.require_user()
        else:
            owner_id = await subscription_service.resolve_owner_id(db, ctx)
        await subscription_service.ensure_within_limit(db, owner_id, resource_type)
        return UsageGuard(owner_id, resource_type)

    return _guard

guard_clinics = enforce_usage_limit("Clinics", owner_is_caller=True)
guard_patients = enforce_usage_limit("Patients")
guard_staff = enforce_usage_limit("Staff")
guard_appointments = enforce_usage_limit("Appointments")

def release_usage(resource_type: str):
    """Dependency factory for deletes: resolves the owner whose counter goes down, without a limit check."""

    async def _release(
        ctx: ClinicContext = Depends(get_clinic_context),
        db: AsyncSession = Depends(get_db),
    ) -> UsageGuard:
        if ctx.is_super_admin and ctx.current_clinic_id is None:
            return UsageGuard(None, resource_type)
        return UsageGuard(await subscription_service.resolve_owner_id(db, ctx), resource_type)

    return _release

release_patients = release_usage("Patients")
release_staff = release_usage("Staff")
release_appointments = release_usage("Appointments")
