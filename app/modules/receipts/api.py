from datetime import datetime
from typing import List
from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.clinic_context import ClinicContext
from app.core.dependencies import get_db, get_clinic_context, require_roles
from app.models.staff_model import StaffRole
from app.modules.receipts import service as receipt_service
from app.schemas import receipt_schema
from app.schemas.common_schema import ApiResponse, ok
from app.utils.activity_logger import log_activity

router = APIRouter(
    prefix="/receipts",
    tags=["Receipts"],
)

billing_staff = require_roles(StaffRole.ClinicManager, StaffRole.Receptionist, StaffRole.Accountant)

ReceiptOut = receipt_schema.Receipt


def _to_list(receipts) -> List[ReceiptOut]:
    return [ReceiptOut.model_validate(r) for r in receipts]


@router.get("/search", response_model=ApiResponse[List[ReceiptOut]])
async def search_receipts(
    q: str = Query(..., min_length=1),
    db: AsyncSession = Depends(get_db),
    ctx: ClinicContext = Depends(get_clinic_context),
):
    return ok(_to_list(await receipt_service.search_receipts(db, ctx, q)))


@router.get("/date-range", response_model=ApiResponse[List[ReceiptOut]])
async def get_receipts_by_date(
    start_date: datetime = Query(..., alias="startDate"),
    end_date: datetime = Query(..., alias="endDate"),
    db: AsyncSession = Depends(get_db),
    ctx: ClinicContext = Depends(get_clinic_context),
):
    return ok(_to_list(await receipt_service.get_receipts_by_date(db, ctx, start_date, end_date)))


@router.get("/bill/{bill_id}", response_model=ApiResponse[List[ReceiptOut]])
async def get_bill_receipts(
    bill_id: int,
    db: AsyncSession = Depends(get_db),
    ctx: ClinicContext = Depends(get_clinic_context),
):
    return ok(_to_list(await receipt_service.get_bill_receipts(db, ctx, bill_id)))


@router.get("/{receipt_id}", response_model=ApiResponse[ReceiptOut])
async def get_receipt(
    receipt_id: int,
    db: AsyncSession = Depends(get_db),
    ctx: ClinicContext = Depends(get_clinic_context),
):
    return ok(ReceiptOut.model_validate(await receipt_service.get_receipt(db, ctx, receipt_id)))


@router.get("/{receipt_id}/pdf")
async def download_receipt_pdf(
    receipt_id: int,
    db: AsyncSession = Depends(get_db),
    ctx: ClinicContext = Depends(get_clinic_context),
):
    receipt = await receipt_service.get_receipt(db, ctx, receipt_id)
    return Response(
        content=receipt_service.render_receipt_pdf(receipt),
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{receipt.receipt_number}.pdf"'},
    )


@router.post("/", response_model=ApiResponse[ReceiptOut], status_code=201)
async def generate_receipt(
    request: receipt_schema.ReceiptGenerate,
    db: AsyncSession = Depends(get_db),
    ctx: ClinicContext = Depends(billing_staff),
):
    receipt = await receipt_service.generate_receipt(db, ctx, request)
    await log_activity(
        db=db,
        user_id=ctx.current_user_id,
        activity_type_category="Billing",
        clinic_id=ctx.current_clinic_id,
        activity_description=f"{receipt.receipt_type} {receipt.receipt_number} generated.",
    )
    return ok(ReceiptOut.model_validate(receipt), message="Receipt generated successfully")


@router.post("/{receipt_id}/send-email", response_model=ApiResponse[ReceiptOut])
async def send_receipt_email(
    receipt_id: int,
    db: AsyncSession = Depends(get_db),
    ctx: ClinicContext = Depends(billing_staff),
):
    receipt = await receipt_service.get_receipt(db, ctx, receipt_id)
    receipt = await receipt_service.send_receipt_email(db, receipt)
    return ok(ReceiptOut.model_validate(receipt), message="Receipt sent successfully")


@router.delete("/{receipt_id}", response_model=ApiResponse[None])
async def delete_receipt(
    receipt_id: int,
    db: AsyncSession = Depends(get_db),
    ctx: ClinicContext = Depends(billing_staff),
):
    receipt = await receipt_service.delete_receipt(db, ctx, receipt_id)
    await log_activity(
        db=db,
        user_id=ctx.current_user_id,
        activity_type_category="Billing",
        clinic_id=ctx.current_clinic_id,
        activity_description=f"Receipt {receipt.receipt_number} deleted.",
    )
    return ok(message="Receipt deleted successfully")
