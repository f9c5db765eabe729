import pytest
from datetime import datetime
from decimal import Decimal
from types import SimpleNamespace
from unittest.mock import AsyncMock, patch

from app.core.clinic_context import ClinicContext
from app.core.exceptions import ServiceError
from app.models.appointment_model import Appointment
from app.models.bill_model import Bill, Payment
from app.models.clinic_model import Clinic
from app.models.notification_model import Notification
from app.models.patient_model import Patient
from app.models.prescription_model import Prescription, PrescriptionMedicine
from app.models.queue_model import PatientQueue
from app.models.staff_model import Staff
from app.models.treatment_history_model import TreatmentHistory
from app.modules.appointments import service as appointment_service
from app.modules.bills import service as bill_service
from app.modules.clinics import service as clinic_service
from app.modules.notifications import service as notification_service
from app.modules.patients import service as patient_service
from app.modules.prescriptions import service as prescription_service
from app.modules.queue import service as queue_service
from app.modules.staff import service as staff_service
from app.modules.subscription.service import subscription_service
from app.modules.transactions import service as transaction_service
from app.repository.queue_repository import queue_repository
from app.schemas.appointment_schema import AppointmentCreate, AppointmentUpdate
from app.schemas.bill_schema import BillCreate, BillItemCreate, PaymentCreate
from app.schemas.clinic_schema import ClinicUpdate, ClinicWithPackageCreate
from app.schemas.notification_schema import AppointmentReminderRequest, SystemNotificationRequest
from app.schemas.patient_schema import PatientCreate
from app.schemas.prescription_schema import DispenseRequest, PrescriptionCreate, PrescriptionMedicineCreate, PrescriptionUpdate
from app.schemas.queue_schema import CallNextRequest, QueueCreate
from app.schemas.staff_schema import StaffCreate, StaffUpdate

FIXED_NOW = datetime(2024, 1, 15, 9, 30)


@pytest.fixture
def ctx():
    return ClinicContext(current_user_id=10, current_clinic_id=1, current_user_role="ClinicManager")


# --- Clinic context ---

@pytest.mark.asyncio
async def test_clinic_data_requires_selected_clinic(mock_db_session):
    no_clinic = ClinicContext(current_user_id=10, current_user_role="ClinicManager")
    with pytest.raises(ServiceError) as exc_info:
        await patient_service.get_patient(mock_db_session, no_clinic, 1)
    assert exc_info.value.code == "CLINIC_CONTEXT_REQUIRED"


# --- Patients ---

@pytest.mark.asyncio
async def test_create_patient_assigns_next_code(mock_db_session, ctx):
    with patch("app.modules.patients.service.patient_repository.count_all_in_clinic", new_callable=AsyncMock, return_value=7), \
         patch("app.modules.patients.service.patient_repository.create_in_clinic", new_callable=AsyncMock) as mock_create:
        mock_create.side_effect = lambda db, clinic_id, data: Patient(id=8, clinic_id=clinic_id, **data)
        patient = await patient_service.create_patient(
            mock_db_session, ctx, PatientCreate(full_name="Jane Doe", phone_number="0800")
        )
    assert patient.patient_code == "PT00008"
    assert patient.clinic_id == 1


# --- Appointments ---

@pytest.mark.asyncio
async def test_create_appointment_rejects_taken_slot(mock_db_session, ctx):
    request = AppointmentCreate(patient_id=3, staff_id=4, appointment_date=FIXED_NOW)
    with patch("app.modules.appointments.service.patient_repository.get_in_clinic", new_callable=AsyncMock, return_value=Patient(id=3)), \
         patch("app.modules.appointments.service.appointment_repository.has_conflict", new_callable=AsyncMock, return_value=True), \
         patch("app.modules.appointments.service.appointment_repository.create_in_clinic", new_callable=AsyncMock) as mock_create:
        with pytest.raises(ServiceError) as exc_info:
            await appointment_service.create_appointment(mock_db_session, ctx, request)
    assert exc_info.value.code == "APPOINTMENT_TIME_SLOT_NOT_AVAILABLE"
    assert exc_info.value.status_code == 400
    mock_create.assert_not_awaited()


@pytest.mark.asyncio
async def test_create_appointment_requires_patient_in_clinic(mock_db_session, ctx):
    request = AppointmentCreate(patient_id=3, staff_id=4, appointment_date=FIXED_NOW)
    with patch("app.modules.appointments.service.patient_repository.get_in_clinic", new_callable=AsyncMock, return_value=None):
        with pytest.raises(ServiceError) as exc_info:
            await appointment_service.create_appointment(mock_db_session, ctx, request)
    assert exc_info.value.code == "PATIENT_NOT_FOUND"
    assert exc_info.value.status_code == 404


@pytest.mark.asyncio
async def test_update_appointment_notes_skips_conflict_check(mock_db_session, ctx):
    appointment = Appointment(id=5, clinic_id=1, patient_id=3, staff_id=4, appointment_date=FIXED_NOW, status="Scheduled")
    with patch("app.modules.appointments.service.appointment_repository.get_in_clinic", new_callable=AsyncMock, return_value=appointment), \
         patch("app.modules.appointments.service.appointment_repository.has_conflict", new_callable=AsyncMock) as mock_conflict, \
         patch("app.modules.appointments.service.appointment_repository.update", new_callable=AsyncMock, return_value=appointment):
        await appointment_service.update_appointment(mock_db_session, ctx, 5, AppointmentUpdate(notes="Bring x-rays"))
    mock_conflict.assert_not_awaited()


@pytest.mark.asyncio
async def test_reschedule_checks_conflict_excluding_itself(mock_db_session, ctx):
    appointment = Appointment(id=5, clinic_id=1, patient_id=3, staff_id=4, appointment_date=FIXED_NOW, status="Scheduled")
    new_time = datetime(2024, 1, 16, 10, 0)
    with patch("app.modules.appointments.service.appointment_repository.get_in_clinic", new_callable=AsyncMock, return_value=appointment), \
         patch("app.modules.appointments.service.appointment_repository.has_conflict", new_callable=AsyncMock, return_value=False) as mock_conflict, \
         patch("app.modules.appointments.service.appointment_repository.update", new_callable=AsyncMock, return_value=appointment):
        await appointment_service.update_appointment(mock_db_session, ctx, 5, AppointmentUpdate(appointment_date=new_time))
    mock_conflict.assert_awaited_once_with(mock_db_session, 4, new_time, exclude_id=5)


# --- Bills ---

@pytest.mark.asyncio
async def test_create_bill_numbers_and_totals(mock_db_session, ctx):
    request = BillCreate(
        patient_id=3,
        discount_percentage=Decimal("10"),
        items=[
            BillItemCreate(item_name="Consultation", unit_price=Decimal("150.00")),
            BillItemCreate(item_name="Paracetamol", item_type="Medicine", quantity=2, unit_price=Decimal("25.00")),
        ],
    )
    with patch("app.modules.bills.service.utcnow", return_value=FIXED_NOW), \
         patch("app.modules.bills.service.patient_repository.get_in_clinic", new_callable=AsyncMock, return_value=Patient(id=3)), \
         patch("app.modules.bills.service.bill_repository.get_last_bill_number", new_callable=AsyncMock, return_value="BILL-20240115-0003"):
        bill = await bill_service.create_bill(mock_db_session, ctx, request)

    assert bill.bill_number == "BILL-20240115-0004"
    assert bill.sub_total == Decimal("200.00")
    assert bill.total_amount == Decimal("180.00")
    assert bill.status == "Pending"
    assert bill.created_by_staff_id == 10
    assert [item.total_price for item in bill.items] == [Decimal("150.00"), Decimal("50.00")]
    mock_db_session.add.assert_called_once_with(bill)


@pytest.mark.asyncio
async def test_create_bill_requires_items(mock_db_session, ctx):
    with pytest.raises(ServiceError) as exc_info:
        await bill_service.create_bill(mock_db_session, ctx, BillCreate(patient_id=3))
    assert exc_info.value.code == "NO_ITEMS"


@pytest.mark.asyncio
async def test_paid_bill_cannot_be_updated(mock_db_session, ctx):
    bill = Bill(id=1, clinic_id=1, patient_id=3, status="Paid", total_amount=Decimal("100"))
    request = BillCreate(patient_id=3, items=[BillItemCreate(item_name="Consultation", unit_price=Decimal("100"))])
    with patch("app.modules.bills.service.bill_repository.get_in_clinic", new_callable=AsyncMock, return_value=bill):
        with pytest.raises(ServiceError) as exc_info:
            await bill_service.update_bill(mock_db_session, ctx, 1, request)
    assert exc_info.value.code == "BILL_ALREADY_PAID"


@pytest.mark.asyncio
async def test_partial_then_full_payment(mock_db_session, ctx):
    bill = Bill(id=1, clinic_id=1, patient_id=3, bill_number="BILL-20240115-0001", status="Pending", total_amount=Decimal("100"))
    with patch("app.modules.bills.service.bill_repository.get_in_clinic", new_callable=AsyncMock, return_value=bill), \
         patch("app.modules.bills.service.bill_repository.get_total_paid", new_callable=AsyncMock) as mock_paid:
        mock_paid.return_value = Decimal("0")
        await bill_service.process_payment(mock_db_session, ctx, 1, PaymentCreate(amount=Decimal("40"), payment_method="Cash"))
        assert bill.status == "Partial"
        assert bill.payment_method is None

        mock_paid.return_value = Decimal("40")
        await bill_service.process_payment(mock_db_session, ctx, 1, PaymentCreate(amount=Decimal("60"), payment_method="Card"))
        assert bill.status == "Paid"
        assert bill.payment_method == "Card"

    payments = [call.args[0] for call in mock_db_session.add.call_args_list]
    assert all(isinstance(p, Payment) for p in payments)
    assert [p.amount for p in payments] == [Decimal("40"), Decimal("60")]
    assert payments[0].payment_number.startswith("PAY-")


@pytest.mark.asyncio
async def test_payment_cannot_exceed_remaining(mock_db_session, ctx):
    bill = Bill(id=1, clinic_id=1, patient_id=3, status="Partial", total_amount=Decimal("100"))
    with patch("app.modules.bills.service.bill_repository.get_in_clinic", new_callable=AsyncMock, return_value=bill), \
         patch("app.modules.bills.service.bill_repository.get_total_paid", new_callable=AsyncMock, return_value=Decimal("70")):
        with pytest.raises(ServiceError) as exc_info:
            await bill_service.process_payment(mock_db_session, ctx, 1, PaymentCreate(amount=Decimal("31"), payment_method="Cash"))
    assert exc_info.value.code == "AMOUNT_EXCEEDS_REMAINING"
    mock_db_session.add.assert_not_called()


@pytest.mark.asyncio
async def test_payment_must_be_positive(mock_db_session, ctx):
    bill = Bill(id=1, clinic_id=1, patient_id=3, status="Pending", total_amount=Decimal("100"))
    with patch("app.modules.bills.service.bill_repository.get_in_clinic", new_callable=AsyncMock, return_value=bill):
        with pytest.raises(ServiceError) as exc_info:
            await bill_service.process_payment(mock_db_session, ctx, 1, PaymentCreate(amount=Decimal("0"), payment_method="Cash"))
    assert exc_info.value.code == "INVALID_AMOUNT"


# --- Prescriptions ---

@pytest.mark.asyncio
async def test_create_prescription_uses_treating_doctor(mock_db_session, ctx):
    treatment = TreatmentHistory(id=9, clinic_id=1, patient_id=3, staff_id=4, treatment="Rest")
    request = PrescriptionCreate(
        treatment_history_id=9,
        medicines=[PrescriptionMedicineCreate(medicine_id=2, quantity=10, dosage="500mg")],
    )
    with patch("app.modules.prescriptions.service.utcnow", return_value=FIXED_NOW), \
         patch("app.modules.prescriptions.service.treatment_history_repository.get_in_clinic", new_callable=AsyncMock, return_value=treatment), \
         patch("app.modules.prescriptions.service.prescription_repository.get_last_prescription_number", new_callable=AsyncMock, return_value=None):
        prescription = await prescription_service.create_prescription(mock_db_session, ctx, request)

    assert prescription.prescription_number == "RX-20240115-0001"
    assert prescription.doctor_id == 4
    assert prescription.patient_id == 3
    assert prescription.status == "Active"
    assert prescription.medicines[0].quantity_dispensed == 0


@pytest.mark.asyncio
async def test_dispensed_prescription_is_not_editable(mock_db_session, ctx):
    prescription = Prescription(id=1, clinic_id=1, status="Dispensed")
    with patch("app.modules.prescriptions.service.prescription_repository.get_in_clinic", new_callable=AsyncMock, return_value=prescription):
        with pytest.raises(ServiceError) as exc_info:
            await prescription_service.update_prescription(mock_db_session, ctx, 1, PrescriptionUpdate(notes="x"))
    assert exc_info.value.code == "PRESCRIPTION_NOT_EDITABLE"


@pytest.mark.asyncio
async def test_dispense_unknown_line(mock_db_session, ctx):
    prescription = Prescription(id=1, clinic_id=1, status="Active")
    prescription.medicines = [PrescriptionMedicine(id=1, medicine_id=2, quantity=5, quantity_dispensed=0, is_dispensed=False)]
    with patch("app.modules.prescriptions.service.prescription_repository.get_in_clinic", new_callable=AsyncMock, return_value=prescription):
        with pytest.raises(ServiceError) as exc_info:
            await prescription_service.dispense_medicine(
                mock_db_session, ctx, 1, DispenseRequest(prescription_medicine_id=99, quantity=1)
            )
    assert exc_info.value.code == "MEDICINE_NOT_FOUND"
    assert exc_info.value.status_code == 404


# --- Queue ---

@pytest.mark.asyncio
async def test_add_to_queue_numbers_per_day(mock_db_session, ctx):
    with patch("app.modules.queue.service.utcnow", return_value=FIXED_NOW), \
         patch("app.modules.queue.service.patient_repository.get_in_clinic", new_callable=AsyncMock, return_value=Patient(id=3)), \
         patch("app.modules.queue.service.queue_repository.get_last_queue_number", new_callable=AsyncMock, return_value="E20240115002") as mock_last, \
         patch("app.modules.queue.service.queue_repository.create_in_clinic", new_callable=AsyncMock) as mock_create:
        mock_create.side_effect = lambda db, clinic_id, data: PatientQueue(id=1, clinic_id=clinic_id, **data)
        item = await queue_service.add_to_queue(mock_db_session, ctx, QueueCreate(patient_id=3, queue_type="Emergency", priority=2))

    mock_last.assert_awaited_once_with(mock_db_session, 1, "E20240115")
    assert item.queue_number == "E20240115003"
    assert item.status == "Waiting"
    assert item.queue_date == FIXED_NOW.date()
    assert item.check_in_time == FIXED_NOW


@pytest.mark.asyncio
async def test_call_next_with_empty_queue(mock_db_session, ctx):
    with patch("app.modules.queue.service.queue_repository.get_next_waiting", new_callable=AsyncMock, return_value=None):
        with pytest.raises(ServiceError) as exc_info:
            await queue_service.call_next(mock_db_session, ctx, CallNextRequest())
    assert exc_info.value.code == "NO_PATIENTS_WAITING"


@pytest.mark.asyncio
async def test_estimated_wait(mock_db_session, ctx):
    item = PatientQueue(id=4, clinic_id=1, status="Waiting")
    with patch("app.modules.queue.service.queue_repository.get_in_clinic", new_callable=AsyncMock, return_value=item), \
         patch("app.modules.queue.service.queue_repository.count_ahead", new_callable=AsyncMock, return_value=3), \
         patch("app.modules.queue.service.settings.QUEUE_MINUTES_PER_PATIENT", 15):
        assert await queue_service.get_estimated_wait(mock_db_session, ctx, 4) == 45

    with patch("app.modules.queue.service.queue_repository.get_in_clinic", new_callable=AsyncMock, return_value=None):
        assert await queue_service.get_estimated_wait(mock_db_session, ctx, 99) == 0


@pytest.mark.asyncio
async def test_wait_estimate_counts_called_patients(mock_db_session):
    item = PatientQueue(id=4, clinic_id=1, queue_date=FIXED_NOW.date(), check_in_time=FIXED_NOW, priority=0, status="Waiting")
    mock_db_session.scalar.return_value = 2

    assert await queue_repository.count_ahead(mock_db_session, item) == 2

    statement = mock_db_session.scalar.await_args.args[0]
    statuses = [v for v in statement.compile().params.values() if isinstance(v, (list, tuple))]
    assert [set(s) for s in statuses] == [{"Waiting", "Called"}]


# --- Notifications ---

@pytest.mark.asyncio
async def test_appointment_reminder_is_scheduled_before_visit(mock_db_session, ctx):
    appointment = Appointment(id=5, clinic_id=1, patient_id=3, staff_id=4, appointment_date=datetime(2024, 1, 20, 10, 0))
    patient = Patient(id=3, clinic_id=1, full_name="Jane Doe", phone_number="0800")
    with patch("app.modules.notifications.service.appointment_repository.get_in_clinic", new_callable=AsyncMock, return_value=appointment), \
         patch("app.modules.notifications.service.patient_repository.get_in_clinic", new_callable=AsyncMock, return_value=patient), \
         patch("app.modules.notifications.service.notification_repository.create", new_callable=AsyncMock) as mock_create:
        mock_create.side_effect = lambda db, data: Notification(id=1, **data)
        notification = await notification_service.send_appointment_reminder(
            mock_db_session, ctx, AppointmentReminderRequest(appointment_id=5, hours_before=2)
        )

    assert notification.scheduled_time == datetime(2024, 1, 20, 8, 0)
    assert notification.recipient == "0800"
    assert notification.status == "Pending"
    assert notification.notification_type == "AppointmentReminder"
    assert "Jan 20, 2024 at 10:00" in notification.message


@pytest.mark.asyncio
async def test_process_pending_notifications_marks_sent(mock_db_session):
    due = [Notification(id=1, status="Pending"), Notification(id=2, status="Pending")]
    with patch("app.modules.notifications.service.notification_repository.get_pending_due", new_callable=AsyncMock, return_value=due):
        sent = await notification_service.process_pending_notifications(mock_db_session)
    assert sent == 2
    assert all(n.status == "Sent" and n.sent_time is not None for n in due)


@pytest.mark.asyncio
async def test_system_notification_to_role(mock_db_session, ctx):
    with patch("app.modules.notifications.service.staff_repository.get_ids_by_role_in_clinic", new_callable=AsyncMock, return_value=[11, 12]):
        count = await notification_service.send_system_notification(
            mock_db_session, ctx, SystemNotificationRequest(title="Maintenance", message="Tonight at 10pm", role="Doctor")
        )
    assert count == 2
    added = [call.args[0] for call in mock_db_session.add.call_args_list]
    assert [n.user_id for n in added] == [11, 12]
    assert all(n.delivery_method == "InApp" and n.status == "Sent" for n in added)


@pytest.mark.asyncio
async def test_system_notification_rejects_unknown_role(mock_db_session, ctx):
    with pytest.raises(ServiceError) as exc_info:
        await notification_service.send_system_notification(
            mock_db_session, ctx, SystemNotificationRequest(title="Hi", message="Hello", role="Janitor")
        )
    assert exc_info.value.code == "INVALID_INPUT"


# --- Staff ---

@pytest.mark.asyncio
async def test_create_staff_rejects_registered_email(mock_db_session, ctx):
    request = StaffCreate(full_name="Dr. Who", email="who@example.com", password="secret1", role="Doctor")
    with patch("app.modules.staff.service.staff_repository.get_by_email", new_callable=AsyncMock, return_value=Staff(id=1)):
        with pytest.raises(ServiceError) as exc_info:
            await staff_service.create_staff(mock_db_session, ctx, request)
    assert exc_info.value.code == "AUTH_EMAIL_EXISTS"
    mock_db_session.add.assert_not_called()


@pytest.mark.asyncio
async def test_create_staff_rejects_unknown_role(mock_db_session, ctx):
    request = StaffCreate(full_name="Dr. Who", password="secret1", role="Janitor")
    with pytest.raises(ServiceError) as exc_info:
        await staff_service.create_staff(mock_db_session, ctx, request)
    assert exc_info.value.code == "INVALID_INPUT"


@pytest.mark.asyncio
async def test_manager_cannot_create_super_admin(mock_db_session, ctx):
    request = StaffCreate(full_name="Root", password="secret1", role="SuperAdmin")
    with pytest.raises(ServiceError) as exc_info:
        await staff_service.create_staff(mock_db_session, ctx, request)
    assert exc_info.value.code == "FORBIDDEN"
    assert exc_info.value.status_code == 403
    mock_db_session.add.assert_not_called()


@pytest.mark.asyncio
async def test_manager_cannot_promote_to_super_admin(mock_db_session, ctx):
    with patch("app.modules.staff.service.staff_repository.get", new_callable=AsyncMock, return_value=Staff(id=20, role="Nurse")), \
         patch("app.modules.staff.service.staff_repository.has_access_to_clinic", new_callable=AsyncMock, return_value=True):
        with pytest.raises(ServiceError) as exc_info:
            await staff_service.update_staff(mock_db_session, ctx, 20, StaffUpdate(role="SuperAdmin"))
    assert exc_info.value.code == "FORBIDDEN"
    mock_db_session.commit.assert_not_awaited()


@pytest.mark.asyncio
async def test_create_staff_assigns_only_callers_clinics(mock_db_session, ctx):
    request = StaffCreate(full_name="Nurse Joy", password="secret1", role="Nurse", clinic_ids=[1, 2, 99])
    with patch("app.modules.staff.service.get_password_hash", return_value="hashed"), \
         patch("app.modules.staff.service.clinic_repository.get_existing_ids", new_callable=AsyncMock, return_value=[1, 2]), \
         patch("app.modules.staff.service.staff_repository.get_staff_clinic_ids", new_callable=AsyncMock, return_value=[1]) as mock_own, \
         patch("app.modules.staff.service.staff_repository.assign_clinic", new_callable=AsyncMock) as mock_assign:
        staff = await staff_service.create_staff(mock_db_session, ctx, request)

    assert staff.password_hash == "hashed"
    mock_own.assert_awaited_once_with(mock_db_session, 10)
    assert [call.args[2] for call in mock_assign.await_args_list] == [1]


@pytest.mark.asyncio
async def test_super_admin_assigns_any_existing_clinic(mock_db_session):
    admin = ClinicContext(current_user_id=1, current_user_role="SuperAdmin")
    request = StaffCreate(full_name="Manager", password="secret1", role="ClinicManager", clinic_ids=[1, 2, 99])
    with patch("app.modules.staff.service.get_password_hash", return_value="hashed"), \
         patch("app.modules.staff.service.clinic_repository.get_existing_ids", new_callable=AsyncMock, return_value=[1, 2]), \
         patch("app.modules.staff.service.staff_repository.get_staff_clinic_ids", new_callable=AsyncMock) as mock_own, \
         patch("app.modules.staff.service.staff_repository.assign_clinic", new_callable=AsyncMock) as mock_assign:
        await staff_service.create_staff(mock_db_session, admin, request)

    mock_own.assert_not_awaited()
    assert [call.args[2] for call in mock_assign.await_args_list] == [1, 2]


@pytest.mark.asyncio
async def test_update_staff_keeps_only_callers_clinics(mock_db_session, ctx):
    with patch("app.modules.staff.service.staff_repository.get", new_callable=AsyncMock, return_value=Staff(id=20, role="Nurse")), \
         patch("app.modules.staff.service.staff_repository.has_access_to_clinic", new_callable=AsyncMock, return_value=True), \
         patch("app.modules.staff.service.clinic_repository.get_existing_ids", new_callable=AsyncMock, return_value=[1, 2]), \
         patch("app.modules.staff.service.staff_repository.get_staff_clinic_ids", new_callable=AsyncMock, return_value=[1]), \
         patch("app.modules.staff.service.staff_repository.replace_clinics", new_callable=AsyncMock) as mock_replace:
        await staff_service.update_staff(mock_db_session, ctx, 20, StaffUpdate(clinic_ids=[1, 2]))

    mock_replace.assert_awaited_once_with(mock_db_session, 20, [1])


@pytest.mark.asyncio
async def test_staff_of_other_clinics_are_not_found(mock_db_session, ctx):
    with patch("app.modules.staff.service.staff_repository.get", new_callable=AsyncMock, return_value=Staff(id=30, role="Doctor")), \
         patch("app.modules.staff.service.staff_repository.has_access_to_clinic", new_callable=AsyncMock, return_value=False), \
         patch("app.modules.staff.service.staff_repository.soft_delete", new_callable=AsyncMock) as mock_delete:
        for call in (
            staff_service.get_staff(mock_db_session, ctx, 30),
            staff_service.delete_staff(mock_db_session, ctx, 30),
        ):
            with pytest.raises(ServiceError) as exc_info:
                await call
            assert exc_info.value.code == "STAFF_NOT_FOUND"
            assert exc_info.value.status_code == 404

    mock_delete.assert_not_awaited()


# --- Clinics ---

@pytest.mark.asyncio
async def test_clinic_with_package_subscribes_owner_and_counts_clinic(mock_db_session):
    clinic = Clinic(id=5, name="North Branch", owner_id=10, is_active=True)
    request = ClinicWithPackageCreate(name="North Branch", package_id=2)
    with patch.object(subscription_service, "has_active_subscription", new_callable=AsyncMock, return_value=False), \
         patch.object(subscription_service, "create_subscription", new_callable=AsyncMock) as mock_subscribe, \
         patch.object(subscription_service, "update_usage", new_callable=AsyncMock) as mock_usage, \
         patch("app.modules.clinics.service.create_clinic", new_callable=AsyncMock, return_value=clinic) as mock_create:
        result = await clinic_service.create_clinic_with_package(mock_db_session, request, owner_id=10)

    assert result is clinic
    mock_subscribe.assert_awaited_once_with(mock_db_session, 10, 2, commit=False)
    assert mock_create.await_args.args[1].name == "North Branch"
    assert mock_create.await_args.args[2] == 10
    mock_usage.assert_awaited_once_with(mock_db_session, 10, "Clinics", 1)


@pytest.mark.asyncio
async def test_clinic_with_package_respects_existing_limit(mock_db_session):
    request = ClinicWithPackageCreate(name="Third Branch", package_id=2)
    with patch.object(subscription_service, "has_active_subscription", new_callable=AsyncMock, return_value=True), \
         patch.object(subscription_service, "validate_usage_limit", new_callable=AsyncMock, return_value=False), \
         patch("app.modules.clinics.service.create_clinic", new_callable=AsyncMock) as mock_create:
        with pytest.raises(ServiceError) as exc_info:
            await clinic_service.create_clinic_with_package(mock_db_session, request, owner_id=10)

    assert exc_info.value.code == "CLINIC_LIMIT_EXCEEDED"
    mock_create.assert_not_awaited()


@pytest.mark.asyncio
async def test_delete_clinic_releases_owner_usage(mock_db_session, ctx):
    clinic = Clinic(id=5, name="North Branch", owner_id=10, is_active=True)
    with patch("app.modules.clinics.service.clinic_repository.get", new_callable=AsyncMock, return_value=clinic), \
         patch("app.modules.clinics.service.clinic_repository.soft_delete", new_callable=AsyncMock) as mock_delete, \
         patch.object(subscription_service, "update_usage", new_callable=AsyncMock) as mock_usage:
        await clinic_service.delete_clinic(mock_db_session, 5, ctx)

    mock_delete.assert_awaited_once_with(mock_db_session, clinic)
    mock_usage.assert_awaited_once_with(mock_db_session, 10, "Clinics", -1)


@pytest.mark.asyncio
async def test_only_owner_can_change_clinic(mock_db_session):
    clinic = Clinic(id=1, name="Main", owner_id=1, is_active=True)
    manager = ClinicContext(current_user_id=10, current_clinic_id=1, current_user_role="ClinicManager")
    with patch("app.modules.clinics.service.clinic_repository.get", new_callable=AsyncMock, return_value=clinic), \
         patch("app.modules.clinics.service.clinic_repository.update", new_callable=AsyncMock) as mock_update, \
         patch("app.modules.clinics.service.clinic_repository.soft_delete", new_callable=AsyncMock) as mock_delete:
        with pytest.raises(ServiceError) as exc_info:
            await clinic_service.update_clinic(mock_db_session, 1, ClinicUpdate(name="Renamed"), manager)
        assert exc_info.value.code == "AUTH_UNAUTHORIZED"
        assert exc_info.value.status_code == 403

        with pytest.raises(ServiceError):
            await clinic_service.delete_clinic(mock_db_session, 1, manager)

    mock_update.assert_not_awaited()
    mock_delete.assert_not_awaited()


@pytest.mark.asyncio
async def test_owner_and_super_admin_can_update_clinic(mock_db_session):
    clinic = Clinic(id=1, name="Main", owner_id=10, is_active=True)
    owner = ClinicContext(current_user_id=10, current_clinic_id=1, current_user_role="ClinicManager")
    admin = ClinicContext(current_user_id=1, current_user_role="SuperAdmin")
    with patch("app.modules.clinics.service.clinic_repository.get", new_callable=AsyncMock, return_value=clinic), \
         patch("app.modules.clinics.service.clinic_repository.update", new_callable=AsyncMock, return_value=clinic) as mock_update:
        await clinic_service.update_clinic(mock_db_session, 1, ClinicUpdate(name="Renamed"), owner)
        await clinic_service.update_clinic(mock_db_session, 1, ClinicUpdate(is_active=False), admin)

    assert mock_update.await_count == 2


# --- Transactions ---

@pytest.mark.asyncio
async def test_transaction_summary_nets_revenue_and_expenses(mock_db_session, ctx):
    with patch("app.modules.transactions.service.transaction_repository.get_summary", new_callable=AsyncMock,
               return_value=(Decimal("1500.00"), Decimal("400.50"), 7)) as mock_summary:
        summary = await transaction_service.get_summary(mock_db_session, ctx)

    mock_summary.assert_awaited_once_with(mock_db_session, 1, None, None)
    assert summary.total_revenue == Decimal("1500.00")
    assert summary.total_expenses == Decimal("400.50")
    assert summary.net_income == Decimal("1099.50")
    assert summary.transaction_count == 7


@pytest.mark.asyncio
async def test_transactions_by_category_keeps_repository_order(mock_db_session, ctx):
    rows = [
        SimpleNamespace(category="Consultation", revenue=Decimal("900"), expense=Decimal("0"), count=6),
        SimpleNamespace(category="Supplies", revenue=Decimal("0"), expense=Decimal("300"), count=2),
        SimpleNamespace(category=None, revenue=Decimal("50"), expense=Decimal("0"), count=1),
    ]
    with patch("app.modules.transactions.service.transaction_repository.get_category_breakdown",
               new_callable=AsyncMock, return_value=rows):
        breakdown = await transaction_service.get_by_category(mock_db_session, ctx)

    assert [(c.category, c.revenue, c.expense, c.count) for c in breakdown] == [
        ("Consultation", Decimal("900"), Decimal("0"), 6),
        ("Supplies", Decimal("0"), Decimal("300"), 2),
        (None, Decimal("50"), Decimal("0"), 1),
    ]
