from fastapi.testclient import TestClient
from unittest.mock import patch, AsyncMock
from app.main import app
from app.models.clinic_model import Clinic
from app.models.staff_model import Staff
from app.utils.auth import decode_access_token


def _staff(**overrides):
    values = dict(
        id=1,
        full_name="Test Doctor",
        email="doctor@example.com",
        phone_number="0811",
        password_hash="hashed_password",
        role="Doctor",
        is_active=True,
    )
    values.update(overrides)
    return Staff(**values)


def test_login_selects_single_clinic():
    with TestClient(app) as client:
        with patch('app.modules.auth.service.staff_repository.get_by_email_or_phone', new_callable=AsyncMock, return_value=_staff()), \
             patch('app.modules.auth.service.verify_password', return_value=True), \
             patch('app.modules.auth.service.staff_repository.get_staff_clinic_ids', new_callable=AsyncMock, return_value=[7]), \
             patch('app.modules.auth.service.staff_repository.get_staff_clinics', new_callable=AsyncMock, return_value=[Clinic(id=7, name="Main")]):
            response = client.post("/api/auth/login", json={"email_or_phone": "doctor@example.com", "password": "password123"})

            assert response.status_code == 200
            body = response.json()
            assert body["code"] == "AUTH_LOGIN_SUCCESS"
            assert body["data"]["token_type"] == "bearer"
            assert body["data"]["clinic_id"] == 7
            assert body["data"]["clinics"] == [{"id": 7, "name": "Main"}]

            claims = decode_access_token(body["data"]["token"])
            assert claims["sub"] == "1"
            assert claims["role"] == "Doctor"
            assert claims["clinic_id"] == 7


def test_login_with_several_clinics_leaves_selection_open():
    with TestClient(app) as client:
        clinics = [Clinic(id=7, name="Main"), Clinic(id=8, name="North")]
        with patch('app.modules.auth.service.staff_repository.get_by_email_or_phone', new_callable=AsyncMock, return_value=_staff()), \
             patch('app.modules.auth.service.verify_password', return_value=True), \
             patch('app.modules.auth.service.staff_repository.get_staff_clinic_ids', new_callable=AsyncMock, return_value=[7, 8]), \
             patch('app.modules.auth.service.staff_repository.get_staff_clinics', new_callable=AsyncMock, return_value=clinics):
            response = client.post("/api/auth/login", json={"email_or_phone": "0811", "password": "password123"})

            assert response.status_code == 200
            data = response.json()["data"]
            assert data["clinic_id"] is None
            assert "clinic_id" not in decode_access_token(data["token"])


def test_login_invalid_credentials():
    with TestClient(app) as client:
        with patch('app.modules.auth.service.staff_repository.get_by_email_or_phone', new_callable=AsyncMock, return_value=None):
            response = client.post("/api/auth/login", json={"email_or_phone": "nobody@example.com", "password": "password123"})

            assert response.status_code == 401
            assert response.json()["code"] == "AUTH_INVALID_CREDENTIALS"


def test_login_rejects_inactive_staff():
    with TestClient(app) as client:
        with patch('app.modules.auth.service.staff_repository.get_by_email_or_phone', new_callable=AsyncMock, return_value=_staff(is_active=False)), \
             patch('app.modules.auth.service.verify_password', return_value=True):
            response = client.post("/api/auth/login", json={"email_or_phone": "doctor@example.com", "password": "password123"})

            assert response.status_code == 401


def test_login_requires_fields():
    with TestClient(app) as client:
        response = client.post("/api/auth/login", json={"email_or_phone": "doctor@example.com"})

        assert response.status_code == 400
        assert response.json()["code"] == "AUTH_FIELDS_REQUIRED"


def test_select_clinic_without_access():
    with TestClient(app) as client:
        with patch('app.modules.auth.service.staff_repository.get_by_email_or_phone', new_callable=AsyncMock, return_value=_staff()), \
             patch('app.modules.auth.service.verify_password', return_value=True), \
             patch('app.modules.auth.service.staff_repository.has_access_to_clinic', new_callable=AsyncMock, return_value=False):
            response = client.post(
                "/api/auth/select-clinic",
                json={"email_or_phone": "doctor@example.com", "password": "password123", "clinic_id": 9},
            )

            assert response.status_code == 403
            assert response.json()["code"] == "AUTH_CLINIC_ACCESS_DENIED"


def test_read_me(manager_client):
    with patch('app.modules.auth.api.staff_repository.get_staff_clinics', new_callable=AsyncMock, return_value=[Clinic(id=1, name="Main")]):
        response = manager_client.get("/api/auth/me")

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["role"] == "ClinicManager"
    assert data["clinics"] == [{"id": 1, "name": "Main"}]
