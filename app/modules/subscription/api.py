from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.clinic_context import ClinicContext
from app.core.dependencies import get_db, get_clinic_context, get_current_super_admin
from app.models.staff_model import Staff
from app.schemas.common_schema import ApiResponse, ok
from app.schemas.subscription_schema import (
    PackageLimit,
    SubscriptionPackage,
    Subscription,
    SubscribeRequest,
    UpgradeRequest,
    Usage,
)
from app.modules.subscription.service import subscription_service, limit_display_text
from app.utils.activity_logger import log_activity

router = APIRouter(
    prefix="/subscription",
    tags=["Subscription"],
)


def _package_out(package) -> SubscriptionPackage:
    out = SubscriptionPackage.model_validate(package)
    out.limits = [
        PackageLimit(
            limit_type=limit.limit_type,
            limit_value=limit.limit_value,
            display_text=limit_display_text(limit.limit_type, limit.limit_value),
        )
        for limit in package.limits
        if limit.is_active
    ]
    return out


@router.get("/packages", response_model=ApiResponse[List[SubscriptionPackage]])
async def get_packages(db: AsyncSession = Depends(get_db)):
    packages = await subscription_service.get_active_packages(db)
    return ok([_package_out(p) for p in packages])


@router.get("/current", response_model=ApiResponse[Subscription])
async def get_current_subscription(
    db: AsyncSession = Depends(get_db),
    ctx: ClinicContext = Depends(get_clinic_context),
):
    owner_id = await subscription_service.resolve_owner_id(db, ctx)
    subscription = await subscription_service.get_current_subscription(db, owner_id)
    return ok(Subscription.model_validate(subscription))


@router.post("/subscribe", response_model=ApiResponse[Subscription])
async def subscribe(
    request: SubscribeRequest,
    db: AsyncSession = Depends(get_db),
    ctx: ClinicContext = Depends(get_clinic_context),
):
    subscription = await subscription_service.create_subscription(db, ctx.current_user_id, request.package_id)
    await log_activity(
        db=db,
        user_id=ctx.current_user_id,
        activity_type_category="Subscription",
        clinic_id=ctx.current_clinic_id,
        activity_description=f"Subscribed to package {request.package_id}.",
    )
    return ok(Subscription.model_validate(subscription), message="Subscription created successfully")


@router.put("/upgrade", response_model=ApiResponse[Subscription])
async def upgrade(
    request: UpgradeRequest,
    db: AsyncSession = Depends(get_db),
    ctx: ClinicContext = Depends(get_clinic_context),
):
    subscription = await subscription_service.upgrade_subscription(db, ctx.current_user_id, request.new_package_id)
    await log_activity(
        db=db,
        user_id=ctx.current_user_id,
        activity_type_category="Subscription",
        clinic_id=ctx.current_clinic_id,
        activity_description=f"Upgraded subscription to package {request.new_package_id}.",
    )
    return ok(Subscription.model_validate(subscription), message="Subscription upgraded successfully")


@router.delete("/cancel", response_model=ApiResponse[Subscription])
async def cancel(
    db: AsyncSession = Depends(get_db),
    ctx: ClinicContext = Depends(get_clinic_context),
):
    subscription = await subscription_service.cancel_subscription(db, ctx.current_user_id)
    await log_activity(
        db=db,
        user_id=ctx.current_user_id,
        activity_type_category="Subscription",
        clinic_id=ctx.current_clinic_id,
        activity_description=f"Cancelled subscription {subscription.id}.",
    )
    return ok(Subscription.model_validate(subscription), message="Subscription cancelled successfully")


@router.get("/usage", response_model=ApiResponse[List[Usage]])
async def get_usage(
    db: AsyncSession = Depends(get_db),
    ctx: ClinicContext = Depends(get_clinic_context),
):
    owner_id = await subscription_service.resolve_owner_id(db, ctx)
    return ok(await subscription_service.get_usage(db, owner_id))


@router.post("/{subscription_id}/renew", response_model=ApiResponse[Subscription])
async def renew(
    subscription_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: Staff = Depends(get_current_super_admin),
):
    subscription = await subscription_service.process_renewal(db, subscription_id)
    return ok(Subscription.model_validate(subscription), message="Subscription renewed successfully")
