import logging
from datetime import datetime
from decimal import Decimal
from typing import Iterable, List, Optional, Tuple
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.clinic_context import ClinicContext
from app.core.exceptions import NotFoundError, ServiceError
from app.models.bill_model import Bill, BillItem, Payment
from app.repository.billing_repository import bill_repository
from app.repository.patient_repository import patient_repository
from app.schemas import bill_schema
from app.utils.generators import dated_prefix, generate_payment_number, next_sequence_number
from app.utils.helpers import utcnow

logger = logging.getLogger(__name__)

HUNDRED = Decimal("100")


def calculate_totals(
    items: Iterable[BillItem],
    discount_amount: Decimal = Decimal("0"),
    discount_percentage: Decimal = Decimal("0"),
) -> Tuple[Decimal, Decimal]:
    """Returns (sub_total, total_amount); the total never goes below zero."""
    sub_total = sum((Decimal(item.total_price) for item in items), Decimal("0"))
    discount = Decimal(discount_amount) + sub_total * (Decimal(discount_percentage) / HUNDRED)
    return sub_total, max(Decimal("0"), sub_total - discount)


def payment_status(total_paid: Decimal, total_amount: Decimal) -> Optional[str]:
    if total_paid >= total_amount:
        return "Paid"
    if total_paid > 0:
        return "Partial"
    return None


def _build_items(items: List[bill_schema.BillItemCreate]) -> List[BillItem]:
    return [
        BillItem(**item.model_dump(), total_price=item.unit_price * item.quantity)
        for item in items
    ]


async def get_bill(db: AsyncSession, ctx: ClinicContext, bill_id: int) -> Bill:
    bill = await bill_repository.get_in_clinic(db, ctx.require_clinic(), bill_id)
    if bill is None:
        raise NotFoundError("NOT_FOUND", "Bill not found")
    return bill


async def get_patient_bills(db: AsyncSession, ctx: ClinicContext, patient_id: int) -> List[Bill]:
    return await bill_repository.get_by_patient(db, ctx.require_clinic(), patient_id)


async def get_pending_bills(db: AsyncSession, ctx: ClinicContext) -> List[Bill]:
    return await bill_repository.get_pending(db, ctx.require_clinic())


async def get_revenue(
    db: AsyncSession,
    ctx: ClinicContext,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
) -> Decimal:
    return await bill_repository.get_revenue(db, ctx.require_clinic(), start_date, end_date)


async def create_bill(db: AsyncSession, ctx: ClinicContext, bill_in: bill_schema.BillCreate) -> Bill:
    clinic_id = ctx.require_clinic()
    if not bill_in.items:
        raise ServiceError("NO_ITEMS", message="A bill needs at least one item")
    if await patient_repository.get_in_clinic(db, clinic_id, bill_in.patient_id) is None:
        raise NotFoundError("PATIENT_NOT_FOUND", "Patient not found")

    items = _build_items(bill_in.items)
    sub_total, total_amount = calculate_totals(items, bill_in.discount_amount, bill_in.discount_percentage)

    now = utcnow()
    prefix = dated_prefix("BILL", now)
    last_number = await bill_repository.get_last_bill_number(db, prefix)

    bill = Bill(
        clinic_id=clinic_id,
        patient_id=bill_in.patient_id,
        appointment_id=bill_in.appointment_id,
        bill_number=next_sequence_number(prefix, last_number),
        bill_date=now,
        sub_total=sub_total,
        discount_amount=bill_in.discount_amount,
        discount_percentage=bill_in.discount_percentage,
        total_amount=total_amount,
        status="Pending",
        notes=bill_in.notes,
        created_by_staff_id=ctx.current_user_id,
        items=items,
    )
    db.add(bill)
    await db.commit()
    await db.refresh(bill)
    logger.info("Bill %s created for patient %s, total %s", bill.bill_number, bill.patient_id, bill.total_amount)
    return bill


async def update_bill(db: AsyncSession, ctx: ClinicContext, bill_id: int, bill_in: bill_schema.BillUpdate) -> Bill:
    bill = await get_bill(db, ctx, bill_id)
    if bill.status == "Paid":
        raise ServiceError("BILL_ALREADY_PAID", message="A paid bill cannot be modified")
    if not bill_in.items:
        raise ServiceError("NO_ITEMS", message="A bill needs at least one item")

    items = _build_items(bill_in.items)
    sub_total, total_amount = calculate_totals(items, bill_in.discount_amount, bill_in.discount_percentage)

    bill.patient_id = bill_in.patient_id
    bill.appointment_id = bill_in.appointment_id
    bill.notes = bill_in.notes
    bill.discount_amount = bill_in.discount_amount
    bill.discount_percentage = bill_in.discount_percentage
    bill.sub_total = sub_total
    bill.total_amount = total_amount
    bill.items = items

    await db.commit()
    await db.refresh(bill)
    return bill


async def process_payment(
    db: AsyncSession, ctx: ClinicContext, bill_id: int, payment_in: bill_schema.PaymentCreate
) -> Bill:
    """
    Records a completed payment against a bill.
    The bill becomes Paid once completed payments cover the total, Partial otherwise.
    """
    bill = await get_bill(db, ctx, bill_id)
    if payment_in.amount <= 0:
        raise ServiceError("INVALID_AMOUNT", message="Payment amount must be greater than zero")

    total_paid = await bill_repository.get_total_paid(db, bill.id)
    remaining = Decimal(bill.total_amount) - total_paid
    if payment_in.amount > remaining:
        raise ServiceError(
            "AMOUNT_EXCEEDS_REMAINING",
            message=f"Payment exceeds the remaining amount of {remaining}",
        )

    now = utcnow()
    db.add(Payment(
        clinic_id=bill.clinic_id,
        bill_id=bill.id,
        payment_number=generate_payment_number(now),
        payment_date=now,
        amount=payment_in.amount,
        payment_method=payment_in.payment_method,
        reference=payment_in.reference,
        status="Completed",
        notes=payment_in.notes,
        received_by_staff_id=ctx.current_user_id,
    ))

    status = payment_status(total_paid + payment_in.amount, Decimal(bill.total_amount))
    if status is not None:
        bill.status = status
    if status == "Paid":
        bill.payment_method = payment_in.payment_method

    await db.commit()
    await db.refresh(bill)
    logger.info("Payment of %s recorded on bill %s, status now %s", payment_in.amount, bill.bill_number, bill.status)
    return bill
