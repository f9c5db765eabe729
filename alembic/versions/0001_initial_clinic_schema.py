"""initial clinic management schema

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "0001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _audit_columns():
    return [
        sa.Column("created_at", sa.DateTime(), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.text("now()"), nullable=True),
        sa.Column("is_deleted", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("deleted_at", sa.DateTime(), nullable=True),
    ]


def _clinic_columns():
    return [sa.Column("clinic_id", sa.Integer(), sa.ForeignKey("clinics.id"), nullable=False), *_audit_columns()]


def _tenant_table(name: str, *columns, indexes=()):
    op.create_table(name, sa.Column("id", sa.Integer(), primary_key=True), *columns, *_clinic_columns())
    op.create_index(op.f(f"ix_{name}_id"), name, ["id"], unique=False)
    op.create_index(op.f(f"ix_{name}_clinic_id"), name, ["clinic_id"], unique=False)
    for index_name, index_columns in indexes:
        op.create_index(index_name, name, index_columns, unique=False)


def upgrade() -> None:
    # --- Staff and clinics ---
    op.create_table(
        "staff",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("full_name", sa.String(200), nullable=False),
        sa.Column("email", sa.String(100), nullable=True, unique=True),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("phone_number", sa.String(20), nullable=True),
        sa.Column("role", sa.String(50), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        *_audit_columns(),
    )
    op.create_index(op.f("ix_staff_id"), "staff", ["id"], unique=False)
    op.create_index(op.f("ix_staff_phone_number"), "staff", ["phone_number"], unique=False)

    op.create_table(
        "clinics",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("address", sa.String(500), nullable=True),
        sa.Column("phone_number", sa.String(20), nullable=True),
        sa.Column("email", sa.String(100), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("owner_id", sa.Integer(), sa.ForeignKey("staff.id"), nullable=True),
        *_audit_columns(),
    )
    op.create_index(op.f("ix_clinics_id"), "clinics", ["id"], unique=False)
    op.create_index(op.f("ix_clinics_owner_id"), "clinics", ["owner_id"], unique=False)

    op.create_table(
        "staff_clinics",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("staff_id", sa.Integer(), sa.ForeignKey("staff.id"), nullable=False),
        sa.Column("clinic_id", sa.Integer(), sa.ForeignKey("clinics.id"), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("assigned_date", sa.DateTime(), nullable=False),
    )
    op.create_index(op.f("ix_staff_clinics_id"), "staff_clinics", ["id"], unique=False)
    op.create_index("ix_staff_clinics_staff_clinic", "staff_clinics", ["staff_id", "clinic_id"], unique=True)

    # --- Subscriptions ---
    op.create_table(
        "subscription_packages",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False, unique=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("price", sa.Numeric(18, 2), nullable=False),
        sa.Column("duration_in_days", sa.Integer(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("is_trial_package", sa.Boolean(), nullable=False),
        *_audit_columns(),
    )
    op.create_index(op.f("ix_subscription_packages_id"), "subscription_packages", ["id"], unique=False)
    op.create_index("ix_subscription_packages_is_active", "subscription_packages", ["is_active"], unique=False)
    op.create_index("ix_subscription_packages_price", "subscription_packages", ["price"], unique=False)

    op.create_table(
        "package_limits",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("package_id", sa.Integer(), sa.ForeignKey("subscription_packages.id"), nullable=False),
        sa.Column("limit_type", sa.String(50), nullable=False),
        sa.Column("limit_value", sa.Integer(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
    )
    op.create_index(op.f("ix_package_limits_id"), "package_limits", ["id"], unique=False)
    op.create_index(op.f("ix_package_limits_package_id"), "package_limits", ["package_id"], unique=False)

    op.create_table(
        "subscriptions",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("staff.id"), nullable=False),
        sa.Column("package_id", sa.Integer(), sa.ForeignKey("subscription_packages.id"), nullable=False),
        sa.Column("start_date", sa.DateTime(), nullable=False),
        sa.Column("end_date", sa.DateTime(), nullable=False),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("auto_renew", sa.Boolean(), nullable=False),
        sa.Column("payment_id", sa.String(100), nullable=True),
        sa.Column("last_payment_date", sa.DateTime(), nullable=True),
        *_audit_columns(),
    )
    op.create_index(op.f("ix_subscriptions_id"), "subscriptions", ["id"], unique=False)
    op.create_index("ix_subscriptions_user_status", "subscriptions", ["user_id", "status", "is_active"], unique=False)

    op.create_table(
        "usage_tracking",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("subscription_id", sa.Integer(), sa.ForeignKey("subscriptions.id"), nullable=False),
        sa.Column("resource_type", sa.String(50), nullable=False),
        sa.Column("current_usage", sa.Integer(), nullable=False),
        sa.Column("last_updated", sa.DateTime(), nullable=False),
    )
    op.create_index(op.f("ix_usage_tracking_id"), "usage_tracking", ["id"], unique=False)
    op.create_index(
        "ix_usage_tracking_subscription_resource", "usage_tracking", ["subscription_id", "resource_type"], unique=True
    )

    # --- Clinical records ---
    _tenant_table(
        "patients",
        sa.Column("patient_code", sa.String(20), nullable=False),
        sa.Column("full_name", sa.String(200), nullable=False),
        sa.Column("phone_number", sa.String(20), nullable=True),
        sa.Column("email", sa.String(100), nullable=True),
        sa.Column("date_of_birth", sa.Date(), nullable=True),
        sa.Column("gender", sa.String(20), nullable=True),
        sa.Column("address", sa.String(500), nullable=True),
        sa.Column("allergies", sa.Text(), nullable=True),
        sa.Column("chronic_conditions", sa.Text(), nullable=True),
        sa.Column("blood_type", sa.String(5), nullable=True),
        sa.Column("emergency_contact_name", sa.String(200), nullable=True),
        sa.Column("emergency_contact_phone", sa.String(20), nullable=True),
        sa.Column("id_number", sa.String(50), nullable=True),
        sa.Column("insurance_number", sa.String(50), nullable=True),
        sa.Column("insurance_provider", sa.String(100), nullable=True),
        sa.Column("occupation", sa.String(100), nullable=True),
        sa.Column("referral_source", sa.String(100), nullable=True),
        sa.Column("first_visit_date", sa.DateTime(), nullable=True),
        sa.Column("receive_promotions", sa.Boolean(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        indexes=(
            ("ix_patients_clinic_code", ["clinic_id", "patient_code"]),
            ("ix_patients_clinic_phone", ["clinic_id", "phone_number"]),
        ),
    )

    _tenant_table(
        "services",
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("description", sa.String(1000), nullable=True),
        sa.Column("price", sa.Numeric(18, 2), nullable=False),
        sa.Column("duration_minutes", sa.Integer(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
    )

    _tenant_table(
        "appointments",
        sa.Column("patient_id", sa.Integer(), sa.ForeignKey("patients.id"), nullable=False),
        sa.Column("staff_id", sa.Integer(), sa.ForeignKey("staff.id"), nullable=False),
        sa.Column("appointment_date", sa.DateTime(), nullable=False),
        sa.Column("status", sa.String(50), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        indexes=(
            ("ix_appointments_patient_id", ["patient_id"]),
            ("ix_appointments_staff_date", ["staff_id", "appointment_date"]),
            ("ix_appointments_clinic_date", ["clinic_id", "appointment_date"]),
        ),
    )

    _tenant_table(
        "treatment_histories",
        sa.Column("patient_id", sa.Integer(), sa.ForeignKey("patients.id"), nullable=False),
        sa.Column("appointment_id", sa.Integer(), sa.ForeignKey("appointments.id"), nullable=True),
        sa.Column("staff_id", sa.Integer(), sa.ForeignKey("staff.id"), nullable=False),
        sa.Column("treatment_date", sa.DateTime(), nullable=False),
        sa.Column("chief_complaint", sa.Text(), nullable=True),
        sa.Column("symptoms", sa.Text(), nullable=True),
        sa.Column("blood_pressure", sa.String(20), nullable=True),
        sa.Column("temperature", sa.Numeric(4, 1), nullable=True),
        sa.Column("heart_rate", sa.Integer(), nullable=True),
        sa.Column("respiratory_rate", sa.Integer(), nullable=True),
        sa.Column("weight", sa.Numeric(5, 2), nullable=True),
        sa.Column("height", sa.Numeric(5, 2), nullable=True),
        sa.Column("physical_examination", sa.Text(), nullable=True),
        sa.Column("diagnosis", sa.Text(), nullable=True),
        sa.Column("differential_diagnosis", sa.Text(), nullable=True),
        sa.Column("treatment", sa.Text(), nullable=False),
        sa.Column("prescription", sa.Text(), nullable=True),
        sa.Column("treatment_plan", sa.Text(), nullable=True),
        sa.Column("follow_up_instructions", sa.Text(), nullable=True),
        sa.Column("next_appointment_date", sa.DateTime(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        indexes=(
            ("ix_treatment_histories_patient_id", ["patient_id"]),
            ("ix_treatment_histories_appointment_id", ["appointment_id"]),
        ),
    )

    # --- Pharmacy ---
    _tenant_table(
        "medicines",
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("generic_name", sa.String(200), nullable=True),
        sa.Column("manufacturer", sa.String(200), nullable=True),
        sa.Column("dosage", sa.String(100), nullable=True),
        sa.Column("form", sa.String(50), nullable=True),
        sa.Column("price", sa.Numeric(18, 2), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
    )

    _tenant_table(
        "inventory_items",
        sa.Column("medicine_id", sa.Integer(), sa.ForeignKey("medicines.id"), nullable=False),
        sa.Column("batch_number", sa.String(50), nullable=True),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("reorder_level", sa.Integer(), nullable=False),
        sa.Column("expiry_date", sa.DateTime(), nullable=True),
        sa.Column("cost_price", sa.Numeric(18, 2), nullable=True),
        sa.Column("supplier", sa.String(200), nullable=True),
        sa.Column("received_date", sa.DateTime(), nullable=False),
        indexes=(("ix_inventory_items_medicine_expiry", ["medicine_id", "expiry_date"]),),
    )

    _tenant_table(
        "prescriptions",
        sa.Column("treatment_history_id", sa.Integer(), sa.ForeignKey("treatment_histories.id"), nullable=False),
        sa.Column("patient_id", sa.Integer(), sa.ForeignKey("patients.id"), nullable=False),
        sa.Column("doctor_id", sa.Integer(), sa.ForeignKey("staff.id"), nullable=False),
        sa.Column("prescription_number", sa.String(50), nullable=False),
        sa.Column("prescription_date", sa.DateTime(), nullable=False),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        indexes=(
            ("ix_prescriptions_treatment_history_id", ["treatment_history_id"]),
            ("ix_prescriptions_patient_id", ["patient_id"]),
            ("ix_prescriptions_prescription_number", ["prescription_number"]),
        ),
    )

    op.create_table(
        "prescription_medicines",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("prescription_id", sa.Integer(), sa.ForeignKey("prescriptions.id"), nullable=False),
        sa.Column("medicine_id", sa.Integer(), sa.ForeignKey("medicines.id"), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("dosage", sa.String(100), nullable=True),
        sa.Column("frequency", sa.String(100), nullable=True),
        sa.Column("duration_days", sa.Integer(), nullable=True),
        sa.Column("instructions", sa.Text(), nullable=True),
        sa.Column("quantity_dispensed", sa.Integer(), nullable=False),
        sa.Column("is_dispensed", sa.Boolean(), nullable=False),
    )
    op.create_index(op.f("ix_prescription_medicines_id"), "prescription_medicines", ["id"], unique=False)
    op.create_index(
        op.f("ix_prescription_medicines_prescription_id"), "prescription_medicines", ["prescription_id"], unique=False
    )

    # --- Billing ---
    _tenant_table(
        "bills",
        sa.Column("patient_id", sa.Integer(), sa.ForeignKey("patients.id"), nullable=False),
        sa.Column("appointment_id", sa.Integer(), sa.ForeignKey("appointments.id"), nullable=True),
        sa.Column("bill_number", sa.String(50), nullable=False),
        sa.Column("bill_date", sa.DateTime(), nullable=False),
        sa.Column("sub_total", sa.Numeric(18, 2), nullable=False),
        sa.Column("discount_amount", sa.Numeric(18, 2), nullable=False),
        sa.Column("discount_percentage", sa.Numeric(5, 2), nullable=False),
        sa.Column("tax_amount", sa.Numeric(18, 2), nullable=False),
        sa.Column("tax_percentage", sa.Numeric(5, 2), nullable=False),
        sa.Column("total_amount", sa.Numeric(18, 2), nullable=False),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("payment_method", sa.String(50), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_by_staff_id", sa.Integer(), sa.ForeignKey("staff.id"), nullable=True),
        indexes=(
            ("ix_bills_patient_id", ["patient_id"]),
            ("ix_bills_bill_number", ["bill_number"]),
        ),
    )

    op.create_table(
        "bill_items",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("bill_id", sa.Integer(), sa.ForeignKey("bills.id"), nullable=False),
        sa.Column("service_id", sa.Integer(), sa.ForeignKey("services.id"), nullable=True),
        sa.Column("medicine_id", sa.Integer(), sa.ForeignKey("medicines.id"), nullable=True),
        sa.Column("item_name", sa.String(200), nullable=False),
        sa.Column("item_type", sa.String(20), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("unit_price", sa.Numeric(18, 2), nullable=False),
        sa.Column("total_price", sa.Numeric(18, 2), nullable=False),
    )
    op.create_index(op.f("ix_bill_items_id"), "bill_items", ["id"], unique=False)
    op.create_index(op.f("ix_bill_items_bill_id"), "bill_items", ["bill_id"], unique=False)

    _tenant_table(
        "payments",
        sa.Column("bill_id", sa.Integer(), sa.ForeignKey("bills.id"), nullable=False),
        sa.Column("payment_number", sa.String(50), nullable=False),
        sa.Column("payment_date", sa.DateTime(), nullable=False),
        sa.Column("amount", sa.Numeric(18, 2), nullable=False),
        sa.Column("payment_method", sa.String(50), nullable=False),
        sa.Column("reference", sa.String(100), nullable=True),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("received_by_staff_id", sa.Integer(), sa.ForeignKey("staff.id"), nullable=True),
        indexes=(("ix_payments_bill_id", ["bill_id"]),),
    )

    _tenant_table(
        "receipts",
        sa.Column("bill_id", sa.Integer(), sa.ForeignKey("bills.id"), nullable=False),
        sa.Column("receipt_number", sa.String(50), nullable=False),
        sa.Column("receipt_date", sa.DateTime(), nullable=False),
        sa.Column("receipt_type", sa.String(20), nullable=False),
        sa.Column("total_amount", sa.Numeric(18, 2), nullable=False),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("customer_email", sa.String(100), nullable=True),
        sa.Column("customer_phone", sa.String(20), nullable=True),
        sa.Column("is_email_sent", sa.Boolean(), nullable=False),
        sa.Column("email_sent_date", sa.DateTime(), nullable=True),
        sa.Column("file_path", sa.String(500), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("generated_by_staff_id", sa.Integer(), sa.ForeignKey("staff.id"), nullable=True),
        indexes=(
            ("ix_receipts_bill_id", ["bill_id"]),
            ("ix_receipts_receipt_number", ["receipt_number"]),
        ),
    )

    # --- Front desk and finance ---
    _tenant_table(
        "patient_queues",
        sa.Column("patient_id", sa.Integer(), sa.ForeignKey("patients.id"), nullable=False),
        sa.Column("appointment_id", sa.Integer(), sa.ForeignKey("appointments.id"), nullable=True),
        sa.Column("queue_number", sa.String(20), nullable=False),
        sa.Column("queue_date", sa.Date(), nullable=False),
        sa.Column("check_in_time", sa.DateTime(), nullable=False),
        sa.Column("called_time", sa.DateTime(), nullable=True),
        sa.Column("start_time", sa.DateTime(), nullable=True),
        sa.Column("completion_time", sa.DateTime(), nullable=True),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("queue_type", sa.String(20), nullable=False),
        sa.Column("priority", sa.Integer(), nullable=False),
        sa.Column("assigned_staff_id", sa.Integer(), sa.ForeignKey("staff.id"), nullable=True),
        sa.Column("room_id", sa.Integer(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        indexes=(("ix_patient_queues_clinic_date_status", ["clinic_id", "queue_date", "status"]),),
    )

    _tenant_table(
        "transactions",
        sa.Column("type", sa.String(20), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("category", sa.String(100), nullable=True),
        sa.Column("amount", sa.Numeric(18, 2), nullable=False),
        sa.Column("date", sa.DateTime(), nullable=False),
        sa.Column("payment_method", sa.String(50), nullable=True),
        sa.Column("reference", sa.String(100), nullable=True),
        indexes=(("ix_transactions_clinic_date", ["clinic_id", "date"]),),
    )

    _tenant_table(
        "notifications",
        sa.Column("patient_id", sa.Integer(), sa.ForeignKey("patients.id"), nullable=True),
        sa.Column("appointment_id", sa.Integer(), sa.ForeignKey("appointments.id"), nullable=True),
        sa.Column("notification_type", sa.String(50), nullable=False),
        sa.Column("delivery_method", sa.String(20), nullable=False),
        sa.Column("recipient", sa.String(200), nullable=True),
        sa.Column("subject", sa.String(200), nullable=True),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("scheduled_time", sa.DateTime(), nullable=False),
        sa.Column("sent_time", sa.DateTime(), nullable=True),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("error_message", sa.Text(), nullable=True),
        sa.Column("retry_count", sa.Integer(), nullable=False),
        sa.Column("next_retry", sa.DateTime(), nullable=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("staff.id"), nullable=True),
        sa.Column("title", sa.String(200), nullable=True),
        sa.Column("type", sa.String(20), nullable=True),
        sa.Column("priority", sa.String(20), nullable=True),
        sa.Column("is_read", sa.Boolean(), nullable=False),
        sa.Column("read_at", sa.DateTime(), nullable=True),
        indexes=(
            ("ix_notifications_patient_id", ["patient_id"]),
            ("ix_notifications_status_scheduled", ["status", "scheduled_time"]),
            ("ix_notifications_user_read", ["user_id", "is_read"]),
        ),
    )

    op.create_table(
        "activity_logs",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("timestamp", sa.DateTime(), nullable=False),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("staff.id"), nullable=True),
        sa.Column("activity_type_category", sa.String(), nullable=False),
        sa.Column("clinic_id", sa.Integer(), sa.ForeignKey("clinics.id"), nullable=True),
        sa.Column("activity_description", sa.Text(), nullable=False),
    )
    op.create_index(op.f("ix_activity_logs_id"), "activity_logs", ["id"], unique=False)
    op.create_index("ix_activity_logs_clinic_type", "activity_logs", ["clinic_id", "activity_type_category"], unique=False)
    op.create_index("ix_activity_logs_clinic_timestamp", "activity_logs", ["clinic_id", "timestamp"], unique=False)


def downgrade() -> None:
    for table in (
        "activity_logs",
        "notifications",
        "transactions",
        "patient_queues",
        "receipts",
        "payments",
        "bill_items",
        "bills",
        "prescription_medicines",
        "prescriptions",
        "inventory_items",
        "medicines",
        "treatment_histories",
        "appointments",
        "services",
        "patients",
        "usage_tracking",
        "subscriptions",
        "package_limits",
        "subscription_packages",
        "staff_clinics",
        "clinics",
        "staff",
    ):
        op.drop_table(table)
