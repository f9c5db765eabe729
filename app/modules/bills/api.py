from datetime import datetime
from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.clinic_context import ClinicContext
from app.core.dependencies import get_db, get_clinic_context, require_roles
from app.models.staff_model import StaffRole
from app.modules.bills import service as bill_service
from app.schemas import bill_schema
from app.schemas.common_schema import ApiResponse, ok
from app.utils.activity_logger import log_activity

router = APIRouter(
    prefix="/bills",
    tags=["Bills"],
)

billing_staff = require_roles(StaffRole.ClinicManager, StaffRole.Receptionist, StaffRole.Accountant)

BillOut = bill_schema.Bill


@router.get("/pending", response_model=ApiResponse[List[BillOut]])
async def get_pending_bills(
    db: AsyncSession = Depends(get_db),
    ctx: ClinicContext = Depends(get_clinic_context),
):
    bills = await bill_service.get_pending_bills(db, ctx)
    return ok([BillOut.model_validate(b) for b in bills])


@router.get("/revenue", response_model=ApiResponse[bill_schema.RevenueSummary])
async def get_revenue(
    start_date: Optional[datetime] = Query(None, alias="startDate"),
    end_date: Optional[datetime] = Query(None, alias="endDate"),
    db: AsyncSession = Depends(get_db),
    ctx: ClinicContext = Depends(billing_staff),
):
    revenue = await bill_service.get_revenue(db, ctx, start_date, end_date)
    return ok(bill_schema.RevenueSummary(start_date=start_date, end_date=end_date, total_revenue=revenue))


@router.get("/patient/{patient_id}", response_model=ApiResponse[List[BillOut]])
async def get_patient_bills(
    patient_id: int,
    db: AsyncSession = Depends(get_db),
    ctx: ClinicContext = Depends(get_clinic_context),
):
    bills = await bill_service.get_patient_bills(db, ctx, patient_id)
    return ok([BillOut.model_validate(b) for b in bills])


@router.get("/{bill_id}", response_model=ApiResponse[BillOut])
async def get_bill(
    bill_id: int,
    db: AsyncSession = Depends(get_db),
    ctx: ClinicContext = Depends(get_clinic_context),
):
    return ok(BillOut.model_validate(await bill_service.get_bill(db, ctx, bill_id)))


@router.post("/", response_model=ApiResponse[BillOut], status_code=201)
async def create_bill(
    bill_in: bill_schema.BillCreate,
    db: AsyncSession = Depends(get_db),
    ctx: ClinicContext = Depends(billing_staff),
):
    bill = await bill_service.create_bill(db, ctx, bill_in)
    await log_activity(
        db=db,
        user_id=ctx.current_user_id,
        activity_type_category="Billing",
        clinic_id=ctx.current_clinic_id,
        activity_description=f"Bill {bill.bill_number} created for {bill.total_amount}.",
    )
    return ok(BillOut.model_validate(bill), message="Bill created successfully")


@router.put("/{bill_id}", response_model=ApiResponse[BillOut])
async def update_bill(
    bill_id: int,
    bill_in: bill_schema.BillUpdate,
    db: AsyncSession = Depends(get_db),
    ctx: ClinicContext = Depends(billing_staff),
):
    bill = await bill_service.update_bill(db, ctx, bill_id, bill_in)
    return ok(BillOut.model_validate(bill), message="Bill updated successfully")


@router.post("/{bill_id}/payments", response_model=ApiResponse[BillOut])
async def process_payment(
    bill_id: int,
    payment_in: bill_schema.PaymentCreate,
    db: AsyncSession = Depends(get_db),
    ctx: ClinicContext = Depends(billing_staff),
):
    bill = await bill_service.process_payment(db, ctx, bill_id, payment_in)
    await log_activity(
        db=db,
        user_id=ctx.current_user_id,
        activity_type_category="Billing",
        clinic_id=ctx.current_clinic_id,
        activity_description=f"Payment of {payment_in.amount} received on bill {bill.bill_number}.",
    )
    return ok(BillOut.model_validate(bill), message="Payment processed successfully")
