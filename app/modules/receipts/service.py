import logging
from datetime import datetime
from typing import List
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.clinic_context import ClinicContext
from app.core.exceptions import NotFoundError, ServiceError
from app.models.receipt_model import Receipt
from app.repository.billing_repository import bill_repository, receipt_repository
from app.schemas import receipt_schema
from app.utils.generators import dated_prefix, next_sequence_number
from app.utils.helpers import utcnow

logger = logging.getLogger(__name__)


def receipt_number_prefix(receipt_type: str, on: datetime) -> str:
    """Invoices are numbered INV-..., everything else REC-..."""
    return dated_prefix("INV" if receipt_type == "Invoice" else "REC", on)


def render_receipt_pdf(receipt: Receipt) -> bytes:
    # Plain-text placeholder until a PDF renderer is wired in
    content = (
        f"Receipt #{receipt.receipt_number}\n"
        f"Amount: {receipt.total_amount:,.2f}\n"
        f"Date: {receipt.receipt_date:%Y-%m-%d}"
    )
    return content.encode("utf-8")


async def get_receipt(db: AsyncSession, ctx: ClinicContext, receipt_id: int) -> Receipt:
    receipt = await receipt_repository.get_in_clinic(db, ctx.require_clinic(), receipt_id)
    if receipt is None:
        raise NotFoundError("RECEIPT_NOT_FOUND", "Receipt not found")
    return receipt


async def get_bill_receipts(db: AsyncSession, ctx: ClinicContext, bill_id: int) -> List[Receipt]:
    return await receipt_repository.get_by_bill(db, ctx.require_clinic(), bill_id)


async def get_receipts_by_date(db: AsyncSession, ctx: ClinicContext, start: datetime, end: datetime) -> List[Receipt]:
    return await receipt_repository.get_by_date_range(db, ctx.require_clinic(), start, end)


async def search_receipts(db: AsyncSession, ctx: ClinicContext, term: str) -> List[Receipt]:
    return await receipt_repository.search_receipts(db, ctx.require_clinic(), term)


async def send_receipt_email(db: AsyncSession, receipt: Receipt) -> Receipt:
    """Marks the receipt as e-mailed; delivery itself is not wired in yet."""
    receipt.is_email_sent = True
    receipt.email_sent_date = utcnow()
    receipt.status = "Sent"
    await db.commit()
    await db.refresh(receipt)
    logger.info("Receipt %s sent to %s", receipt.receipt_number, receipt.customer_email)
    return receipt


async def generate_receipt(db: AsyncSession, ctx: ClinicContext, request: receipt_schema.ReceiptGenerate) -> Receipt:
    clinic_id = ctx.require_clinic()
    bill = await bill_repository.get_in_clinic(db, clinic_id, request.bill_id)
    if bill is None:
        raise NotFoundError("BILL_NOT_FOUND", "Bill not found")
    if request.receipt_type == "Receipt" and bill.status != "Paid":
        raise ServiceError("BILL_NOT_PAID", message="A receipt can only be generated for a paid bill")

    now = utcnow()
    prefix = receipt_number_prefix(request.receipt_type, now)
    last_number = await receipt_repository.get_last_receipt_number(db, prefix)

    patient = bill.patient
    receipt = Receipt(
        clinic_id=clinic_id,
        bill_id=bill.id,
        receipt_number=next_sequence_number(prefix, last_number),
        receipt_date=now,
        receipt_type=request.receipt_type,
        total_amount=bill.total_amount,
        status="Generated",
        customer_email=patient.email if patient else None,
        customer_phone=patient.phone_number if patient else None,
        is_email_sent=False,
        notes=request.notes,
        generated_by_staff_id=ctx.current_user_id,
    )
    db.add(receipt)
    await db.commit()
    await db.refresh(receipt)
    logger.info("%s %s generated for bill %s", receipt.receipt_type, receipt.receipt_number, bill.bill_number)

    if request.send_email and receipt.customer_email:
        receipt = await send_receipt_email(db, receipt)
    return receipt


async def delete_receipt(db: AsyncSession, ctx: ClinicContext, receipt_id: int) -> Receipt:
    receipt = await get_receipt(db, ctx, receipt_id)
    return await receipt_repository.soft_delete(db, receipt)
