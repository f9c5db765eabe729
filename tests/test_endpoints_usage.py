from datetime import timedelta
from unittest.mock import AsyncMock, patch

from app.models.appointment_model import Appointment
from app.models.clinic_model import Clinic
from app.models.plan_model import PackageLimit
from app.models.staff_model import Staff, StaffRole
from app.models.subscription_model import Subscription, UsageTracking
from app.modules.subscription.service import subscription_service
from app.utils.helpers import utcnow

DEPS = "app.core.dependencies"
SUB = "app.modules.subscription.service"


def _staff(staff_id=10, role=StaffRole.ClinicManager):
    return Staff(id=staff_id, full_name="Staff Member", email=f"staff{staff_id}@example.com", role=role.value, is_active=True)


def _active_subscription():
    now = utcnow()
    return Subscription(
        id=1,
        user_id=1,
        package_id=2,
        start_date=now - timedelta(days=1),
        end_date=now + timedelta(days=29),
        status="Active",
        is_active=True,
        auto_renew=True,
    )


def test_new_clinic_is_charged_to_its_owner(token_client, mock_db_session):
    # Manager 10 works in clinic 1, which belongs to owner 1
    client = token_client(_staff(10), clinic_id=1)
    created = Clinic(id=5, name="North Branch", is_active=True, owner_id=10)
    with patch(f"{DEPS}.staff_repository.has_access_to_clinic", new_callable=AsyncMock, return_value=True), \
         patch(f"{SUB}.clinic_repository.get_owner_id", new_callable=AsyncMock, return_value=1), \
         patch.object(subscription_service, "ensure_within_limit", new_callable=AsyncMock) as mock_limit, \
         patch.object(subscription_service, "update_usage", new_callable=AsyncMock) as mock_usage, \
         patch("app.modules.clinics.service.create_clinic", new_callable=AsyncMock, return_value=created) as mock_create:
        response = client.post("/api/clinics/", json={"name": "North Branch"})

    assert response.status_code == 201
    owner_id = mock_create.await_args.kwargs["owner_id"]
    assert owner_id == created.owner_id == 10
    assert mock_limit.await_args.args[1:] == (owner_id, "Clinics")
    mock_usage.assert_awaited_once_with(mock_db_session, owner_id, "Clinics", 1)


def test_create_without_subscription_is_rejected(token_client):
    client = token_client(_staff(10), clinic_id=1)
    with patch(f"{DEPS}.staff_repository.has_access_to_clinic", new_callable=AsyncMock, return_value=True), \
         patch(f"{SUB}.clinic_repository.get_owner_id", new_callable=AsyncMock, return_value=1), \
         patch(f"{SUB}.subscription_repository.get_active_by_user", new_callable=AsyncMock, return_value=None), \
         patch(f"{SUB}.subscription_repository.get_latest_by_user", new_callable=AsyncMock, return_value=None), \
         patch("app.modules.patients.service.create_patient", new_callable=AsyncMock) as mock_create:
        response = client.post("/api/patients/", json={"full_name": "Jane Doe", "phone_number": "0800"})

    assert response.status_code == 403
    assert response.json()["code"] == "SUBSCRIPTION_NO_ACTIVE"
    mock_create.assert_not_awaited()


def test_create_over_package_limit_is_rejected(token_client):
    client = token_client(_staff(10), clinic_id=1)
    with patch(f"{DEPS}.staff_repository.has_access_to_clinic", new_callable=AsyncMock, return_value=True), \
         patch(f"{SUB}.clinic_repository.get_owner_id", new_callable=AsyncMock, return_value=1), \
         patch(f"{SUB}.subscription_repository.get_active_by_user", new_callable=AsyncMock, return_value=_active_subscription()), \
         patch(f"{SUB}.package_repository.get_active_limit", new_callable=AsyncMock,
               return_value=PackageLimit(limit_type="Patients", limit_value=50, is_active=True)), \
         patch(f"{SUB}.subscription_repository.get_usage", new_callable=AsyncMock,
               return_value=UsageTracking(id=3, resource_type="Patients", current_usage=50)), \
         patch("app.modules.patients.service.create_patient", new_callable=AsyncMock) as mock_create:
        response = client.post("/api/patients/", json={"full_name": "Jane Doe", "phone_number": "0800"})

    assert response.status_code == 403
    body = response.json()
    assert body["code"] == "SUBSCRIPTION_LIMIT_EXCEEDED"
    assert body["message"] == "Patients limit exceeded for your current package"
    mock_create.assert_not_awaited()


def test_clinic_without_assignment_is_denied(token_client):
    client = token_client(_staff(10), clinic_id=9)
    with patch(f"{DEPS}.staff_repository.has_access_to_clinic", new_callable=AsyncMock, return_value=False):
        response = client.get("/api/patients/")

    assert response.status_code == 403
    assert response.json()["code"] == "AUTH_CLINIC_ACCESS_DENIED"


def test_super_admin_without_clinic_bypasses_limits(token_client):
    client = token_client(_staff(1, StaffRole.SuperAdmin))
    created = Clinic(id=6, name="HQ", is_active=True, owner_id=1)
    with patch(f"{DEPS}.staff_repository.has_access_to_clinic", new_callable=AsyncMock) as mock_access, \
         patch.object(subscription_service, "ensure_within_limit", new_callable=AsyncMock) as mock_limit, \
         patch.object(subscription_service, "update_usage", new_callable=AsyncMock) as mock_usage, \
         patch("app.modules.clinics.service.create_clinic", new_callable=AsyncMock, return_value=created):
        response = client.post("/api/clinics/", json={"name": "HQ"})

    assert response.status_code == 201
    mock_access.assert_not_awaited()
    mock_limit.assert_not_awaited()
    mock_usage.assert_not_awaited()


def test_deleting_appointment_releases_owner_usage(token_client, mock_db_session):
    client = token_client(_staff(10), clinic_id=1)
    appointment = Appointment(id=5, clinic_id=1, patient_id=3, staff_id=4, appointment_date=utcnow())
    with patch(f"{DEPS}.staff_repository.has_access_to_clinic", new_callable=AsyncMock, return_value=True), \
         patch(f"{SUB}.clinic_repository.get_owner_id", new_callable=AsyncMock, return_value=1), \
         patch.object(subscription_service, "update_usage", new_callable=AsyncMock) as mock_usage, \
         patch("app.modules.appointments.service.delete_appointment", new_callable=AsyncMock, return_value=appointment):
        response = client.delete("/api/appointments/5")

    assert response.status_code == 200
    mock_usage.assert_awaited_once_with(mock_db_session, 1, "Appointments", -1)


def test_pharmacist_cannot_read_treatment_history(token_client):
    client = token_client(_staff(13, StaffRole.Pharmacist), clinic_id=1)
    with patch(f"{DEPS}.staff_repository.has_access_to_clinic", new_callable=AsyncMock, return_value=True), \
         patch("app.modules.treatment_history.service.get_patient_treatments", new_callable=AsyncMock) as mock_list:
        response = client.get("/api/treatment-history/patient/1")

    assert response.status_code == 403
    assert response.json()["code"] == "FORBIDDEN"
    mock_list.assert_not_awaited()


def test_accountant_cannot_manage_patients_or_queue(token_client):
    client = token_client(_staff(14, StaffRole.Accountant), clinic_id=1)
    with patch(f"{DEPS}.staff_repository.has_access_to_clinic", new_callable=AsyncMock, return_value=True):
        assert client.get("/api/patients/").status_code == 403
        assert client.get("/api/appointments/").status_code == 403
        assert client.get("/api/queue/today").status_code == 403
