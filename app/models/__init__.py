from .clinic_model import Clinic
from .staff_model import Staff, StaffClinic, StaffRole
from .patient_model import Patient
from .medical_service_model import MedicalService
from .appointment_model import Appointment
from .treatment_history_model import TreatmentHistory
from .medicine_model import Medicine
from .inventory_model import InventoryItem
from .prescription_model import Prescription, PrescriptionMedicine
from .bill_model import Bill, BillItem, Payment
from .receipt_model import Receipt
from .queue_model import PatientQueue
from .plan_model import SubscriptionPackage, PackageLimit
from .subscription_model import Subscription, UsageTracking, RESOURCE_TYPES
from .transaction_model import Transaction
from .notification_model import Notification
from .log_model import ActivityLog

__all__ = [
    "Clinic",
    "Staff",
    "StaffClinic",
    "StaffRole",
    "Patient",
    "MedicalService",
    "Appointment",
    "TreatmentHistory",
    "Medicine",
    "InventoryItem",
    "Prescription",
    "PrescriptionMedicine",
    "Bill",
    "BillItem",
    "Payment",
    "Receipt",
    "PatientQueue",
    "SubscriptionPackage",
    "PackageLimit",
    "Subscription",
    "UsageTracking",
    "RESOURCE_TYPES",
    "Transaction",
    "Notification",
    "ActivityLog",
]
