import pytest
from fastapi.testclient import TestClient
from unittest.mock import AsyncMock
from sqlalchemy.ext.asyncio import AsyncSession

from app.main import app
from app.core.clinic_context import ClinicContext
from app.core.dependencies import (
    get_clinic_context,
    get_current_user,
    get_db,
    get_token_data,
    guard_appointments,
    guard_clinics,
    guard_patients,
    guard_staff,
    release_appointments,
    release_patients,
    release_staff,
    UsageGuard,
)
from app.models.staff_model import Staff, StaffRole
from app.schemas.token_schema import TokenData


@pytest.fixture
def mock_db_session():
    return AsyncMock(spec=AsyncSession)


@pytest.fixture(autouse=True)
def override_get_db(mock_db_session):
    async def _override():
        yield mock_db_session
    app.dependency_overrides[get_db] = _override
    yield
    app.dependency_overrides.pop(get_db, None)


@pytest.fixture
def usage_guard():
    """A usage guard whose record() is observable; returned by every limit dependency."""
    guard = UsageGuard(owner_id=10, resource_type="Patients")
    guard.record = AsyncMock()
    return guard


def _override_staff(staff: Staff, clinic_id, usage_guard):
    ctx = ClinicContext(current_user_id=staff.id, current_clinic_id=clinic_id, current_user_role=staff.role)
    app.dependency_overrides[get_current_user] = lambda: staff
    app.dependency_overrides[get_clinic_context] = lambda: ctx
    for dependency in (
        guard_clinics, guard_patients, guard_staff, guard_appointments,
        release_patients, release_staff, release_appointments,
    ):
        app.dependency_overrides[dependency] = lambda: usage_guard


def _clear_staff_overrides():
    for dependency in list(app.dependency_overrides):
        if dependency is not get_db:
            app.dependency_overrides.pop(dependency, None)


@pytest.fixture
def manager_client(usage_guard):
    """Provide a client authenticated as the manager of clinic 1."""
    manager = Staff(
        id=10,
        full_name="Clinic Manager",
        email="manager@example.com",
        role=StaffRole.ClinicManager.value,
        is_active=True,
    )
    _override_staff(manager, 1, usage_guard)
    with TestClient(app) as client:
        yield client
    _clear_staff_overrides()


@pytest.fixture
def receptionist_client(usage_guard):
    """Provide a client authenticated as a receptionist of clinic 1."""
    receptionist = Staff(
        id=11,
        full_name="Front Desk",
        email="desk@example.com",
        role=StaffRole.Receptionist.value,
        is_active=True,
    )
    _override_staff(receptionist, 1, usage_guard)
    with TestClient(app) as client:
        yield client
    _clear_staff_overrides()


@pytest.fixture
def no_clinic_client(usage_guard):
    """Provide a client for a manager who has not selected a clinic."""
    manager = Staff(
        id=12,
        full_name="Unassigned Manager",
        email="owner@example.com",
        role=StaffRole.ClinicManager.value,
        is_active=True,
    )
    _override_staff(manager, None, usage_guard)
    with TestClient(app) as client:
        yield client
    _clear_staff_overrides()


@pytest.fixture
def token_client():
    """
    Provide a factory for clients where only the bearer token is faked.
    Clinic access, role and usage-limit dependencies run for real.
    """
    def _make(staff: Staff, clinic_id=None) -> TestClient:
        token = TokenData(sub=str(staff.id), role=staff.role, clinic_id=clinic_id)
        app.dependency_overrides[get_token_data] = lambda: token
        app.dependency_overrides[get_current_user] = lambda: staff
        return TestClient(app)

    yield _make
    _clear_staff_overrides()
