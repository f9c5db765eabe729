import pytest
from datetime import timedelta
from decimal import Decimal
from unittest.mock import AsyncMock, patch

from app.core.clinic_context import ClinicContext
from app.core.exceptions import ServiceError
from app.models.plan_model import PackageLimit, SubscriptionPackage
from app.models.subscription_model import Subscription, UsageTracking
from app.modules.subscription.service import subscription_service
from app.repository.subscription_repository import subscription_repository
from app.utils.helpers import utcnow

REPO = "app.modules.subscription.service"


def _subscription(**overrides):
    now = utcnow()
    values = dict(
        id=1,
        user_id=10,
        package_id=2,
        start_date=now - timedelta(days=10),
        end_date=now + timedelta(days=20),
        status="Active",
        is_active=True,
        auto_renew=True,
    )
    values.update(overrides)
    return Subscription(**values)


@pytest.mark.asyncio
async def test_validate_usage_limit_within_limit(mock_db_session):
    with patch(f"{REPO}.subscription_repository.get_active_by_user", new_callable=AsyncMock) as mock_active, \
         patch(f"{REPO}.package_repository.get_active_limit", new_callable=AsyncMock) as mock_limit, \
         patch(f"{REPO}.subscription_repository.get_usage", new_callable=AsyncMock) as mock_usage:
        mock_active.return_value = _subscription()
        mock_limit.return_value = PackageLimit(limit_type="Patients", limit_value=50, is_active=True)
        mock_usage.return_value = UsageTracking(resource_type="Patients", current_usage=49)

        assert await subscription_service.validate_usage_limit(mock_db_session, 10, "Patients") is True
        assert await subscription_service.validate_usage_limit(mock_db_session, 10, "Patients", 2) is False


@pytest.mark.asyncio
async def test_validate_usage_limit_unlimited(mock_db_session):
    with patch(f"{REPO}.subscription_repository.get_active_by_user", new_callable=AsyncMock) as mock_active, \
         patch(f"{REPO}.package_repository.get_active_limit", new_callable=AsyncMock) as mock_limit, \
         patch(f"{REPO}.subscription_repository.get_usage", new_callable=AsyncMock) as mock_usage:
        mock_active.return_value = _subscription()
        mock_limit.return_value = PackageLimit(limit_type="Appointments", limit_value=-1, is_active=True)

        assert await subscription_service.validate_usage_limit(mock_db_session, 10, "Appointments", 1000) is True
        mock_usage.assert_not_awaited()


@pytest.mark.asyncio
async def test_validate_usage_limit_without_subscription(mock_db_session):
    with patch(f"{REPO}.subscription_repository.get_active_by_user", new_callable=AsyncMock, return_value=None):
        assert await subscription_service.validate_usage_limit(mock_db_session, 10, "Patients") is False


@pytest.mark.asyncio
async def test_ensure_within_limit_reports_expired_subscription(mock_db_session):
    expired = _subscription(end_date=utcnow() - timedelta(days=1))
    with patch(f"{REPO}.subscription_repository.get_active_by_user", new_callable=AsyncMock, return_value=None), \
         patch(f"{REPO}.subscription_repository.get_latest_by_user", new_callable=AsyncMock, return_value=expired):
        with pytest.raises(ServiceError) as exc_info:
            await subscription_service.ensure_within_limit(mock_db_session, 10, "Patients")
    assert exc_info.value.code == "SUBSCRIPTION_EXPIRED"
    assert exc_info.value.status_code == 403


@pytest.mark.asyncio
async def test_ensure_within_limit_reports_missing_subscription(mock_db_session):
    with patch(f"{REPO}.subscription_repository.get_active_by_user", new_callable=AsyncMock, return_value=None), \
         patch(f"{REPO}.subscription_repository.get_latest_by_user", new_callable=AsyncMock, return_value=None):
        with pytest.raises(ServiceError) as exc_info:
            await subscription_service.ensure_within_limit(mock_db_session, 10, "Patients")
    assert exc_info.value.code == "SUBSCRIPTION_NO_ACTIVE"


@pytest.mark.asyncio
async def test_ensure_within_limit_reports_exceeded(mock_db_session):
    with patch.object(subscription_service, "has_active_subscription", new_callable=AsyncMock, return_value=True), \
         patch.object(subscription_service, "validate_usage_limit", new_callable=AsyncMock, return_value=False):
        with pytest.raises(ServiceError) as exc_info:
            await subscription_service.ensure_within_limit(mock_db_session, 10, "Staff")
    assert exc_info.value.code == "SUBSCRIPTION_LIMIT_EXCEEDED"
    assert exc_info.value.message == "Staff limit exceeded for your current package"


@pytest.mark.asyncio
async def test_create_subscription_rejects_second_active(mock_db_session):
    with patch.object(subscription_service, "has_active_subscription", new_callable=AsyncMock, return_value=True):
        with pytest.raises(ServiceError) as exc_info:
            await subscription_service.create_subscription(mock_db_session, 10, 2)
    assert exc_info.value.code == "SUBSCRIPTION_ALREADY_EXISTS"
    mock_db_session.commit.assert_not_awaited()


@pytest.mark.asyncio
async def test_create_subscription_initializes_usage(mock_db_session):
    package = SubscriptionPackage(id=2, name="Basic", price=Decimal("29"), duration_in_days=30, is_active=True)
    with patch.object(subscription_service, "has_active_subscription", new_callable=AsyncMock, return_value=False), \
         patch(f"{REPO}.package_repository.get", new_callable=AsyncMock, return_value=package):
        subscription = await subscription_service.create_subscription(mock_db_session, 10, 2)

    assert subscription.status == "Active"
    assert subscription.end_date - subscription.start_date == timedelta(days=30)
    added = [call.args[0] for call in mock_db_session.add.call_args_list]
    assert sorted(u.resource_type for u in added if isinstance(u, UsageTracking)) == [
        "Appointments", "Clinics", "Patients", "Staff",
    ]
    mock_db_session.commit.assert_awaited_once()


@pytest.mark.asyncio
async def test_upgrade_requires_higher_price(mock_db_session):
    current_package = SubscriptionPackage(id=2, name="Professional", price=Decimal("79"), duration_in_days=30, is_active=True)
    cheaper_package = SubscriptionPackage(id=3, name="Basic", price=Decimal("29"), duration_in_days=30, is_active=True)
    with patch(f"{REPO}.subscription_repository.get_active_by_user", new_callable=AsyncMock, return_value=_subscription()), \
         patch(f"{REPO}.package_repository.get", new_callable=AsyncMock) as mock_get_package:
        mock_get_package.side_effect = lambda db, package_id: {2: current_package, 3: cheaper_package}[package_id]
        with pytest.raises(ServiceError) as exc_info:
            await subscription_service.upgrade_subscription(mock_db_session, 10, 3)
    assert exc_info.value.code == "SUBSCRIPTION_INVALID_UPGRADE"


@pytest.mark.asyncio
async def test_upgrade_replaces_current_subscription(mock_db_session):
    current = _subscription(auto_renew=False)
    basic = SubscriptionPackage(id=2, name="Basic", price=Decimal("29"), duration_in_days=30, is_active=True)
    enterprise = SubscriptionPackage(id=4, name="Enterprise", price=Decimal("199"), duration_in_days=30, is_active=True)
    with patch(f"{REPO}.subscription_repository.get_active_by_user", new_callable=AsyncMock, return_value=current), \
         patch(f"{REPO}.package_repository.get", new_callable=AsyncMock) as mock_get_package:
        mock_get_package.side_effect = lambda db, package_id: {2: basic, 4: enterprise}[package_id]
        upgraded = await subscription_service.upgrade_subscription(mock_db_session, 10, 4)

    assert current.status == "Upgraded"
    assert current.is_active is False
    assert upgraded.package_id == 4
    assert upgraded.auto_renew is False


@pytest.mark.asyncio
async def test_process_renewal_extends_period_and_resets_usage(mock_db_session):
    subscription = _subscription()
    old_end = subscription.end_date
    package = SubscriptionPackage(id=2, name="Basic", price=Decimal("29"), duration_in_days=30, is_active=True)
    with patch(f"{REPO}.subscription_repository.get", new_callable=AsyncMock, return_value=subscription), \
         patch(f"{REPO}.package_repository.get", new_callable=AsyncMock, return_value=package), \
         patch(f"{REPO}.subscription_repository.reset_usage", new_callable=AsyncMock) as mock_reset:
        renewed = await subscription_service.process_renewal(mock_db_session, 1)

    assert renewed.start_date == old_end
    assert renewed.end_date == old_end + timedelta(days=30)
    assert renewed.last_payment_date is not None
    mock_reset.assert_awaited_once()


@pytest.mark.asyncio
async def test_process_renewal_rejects_cancelled(mock_db_session):
    cancelled = _subscription(status="Cancelled", auto_renew=False)
    with patch(f"{REPO}.subscription_repository.get", new_callable=AsyncMock, return_value=cancelled):
        with pytest.raises(ServiceError) as exc_info:
            await subscription_service.process_renewal(mock_db_session, 1)
    assert exc_info.value.code == "SUBSCRIPTION_RENEWAL_NOT_ALLOWED"


@pytest.mark.asyncio
async def test_process_expired_subscriptions(mock_db_session):
    renewing = _subscription(id=1, auto_renew=True)
    lapsing = _subscription(id=2, auto_renew=False)
    with patch(f"{REPO}.subscription_repository.get_expiring", new_callable=AsyncMock, return_value=[renewing, lapsing]), \
         patch.object(subscription_service, "process_renewal", new_callable=AsyncMock) as mock_renewal:
        renewed, expired = await subscription_service.process_expired_subscriptions(mock_db_session)

    assert (renewed, expired) == (1, 1)
    mock_renewal.assert_awaited_once_with(mock_db_session, 1)
    assert lapsing.status == "Expired"
    assert lapsing.is_active is False


@pytest.mark.asyncio
async def test_resolve_owner_id_prefers_clinic_owner(mock_db_session):
    ctx = ClinicContext(current_user_id=11, current_clinic_id=1, current_user_role="Receptionist")
    with patch(f"{REPO}.clinic_repository.get_owner_id", new_callable=AsyncMock, return_value=10):
        assert await subscription_service.resolve_owner_id(mock_db_session, ctx) == 10

    no_clinic = ClinicContext(current_user_id=12, current_user_role="ClinicManager")
    assert await subscription_service.resolve_owner_id(mock_db_session, no_clinic) == 12


@pytest.mark.asyncio
async def test_update_usage_without_subscription_is_noop(mock_db_session):
    with patch(f"{REPO}.subscription_repository.get_active_by_user", new_callable=AsyncMock, return_value=None), \
         patch(f"{REPO}.subscription_repository.get_usage", new_callable=AsyncMock) as mock_usage:
        await subscription_service.update_usage(mock_db_session, 10, "Patients", 1)

    mock_usage.assert_not_awaited()
    mock_db_session.add.assert_not_called()
    mock_db_session.commit.assert_not_awaited()


@pytest.mark.asyncio
async def test_update_usage_creates_missing_row(mock_db_session):
    with patch(f"{REPO}.subscription_repository.get_active_by_user", new_callable=AsyncMock, return_value=_subscription()), \
         patch(f"{REPO}.subscription_repository.get_usage", new_callable=AsyncMock, return_value=None):
        await subscription_service.update_usage(mock_db_session, 10, "Clinics", 1)
        await subscription_service.update_usage(mock_db_session, 10, "Staff", -1)

    created, released = [call.args[0] for call in mock_db_session.add.call_args_list]
    assert (created.resource_type, created.current_usage, created.subscription_id) == ("Clinics", 1, 1)
    assert (released.resource_type, released.current_usage) == ("Staff", 0)
    assert mock_db_session.commit.await_count == 2


@pytest.mark.asyncio
async def test_update_usage_increments_existing_row(mock_db_session):
    row = UsageTracking(id=7, subscription_id=1, resource_type="Clinics", current_usage=2)
    with patch(f"{REPO}.subscription_repository.get_active_by_user", new_callable=AsyncMock, return_value=_subscription()), \
         patch(f"{REPO}.subscription_repository.get_usage", new_callable=AsyncMock, return_value=row), \
         patch(f"{REPO}.subscription_repository.increment_usage", new_callable=AsyncMock) as mock_increment:
        await subscription_service.update_usage(mock_db_session, 10, "Clinics", -1)

    assert mock_increment.await_args.args[:3] == (mock_db_session, 7, -1)
    mock_db_session.add.assert_not_called()
    mock_db_session.commit.assert_awaited_once()


@pytest.mark.asyncio
async def test_increment_usage_is_single_clamped_update(mock_db_session):
    await subscription_repository.increment_usage(mock_db_session, 7, -1, utcnow())

    mock_db_session.execute.assert_awaited_once()
    statement = str(mock_db_session.execute.await_args.args[0]).lower()
    assert statement.startswith("update usage_tracking")
    assert "greatest(" in statement


@pytest.mark.asyncio
async def test_get_usage_reports_unlimited_as_none(mock_db_session):
    package = SubscriptionPackage(id=2, name="Professional", price=Decimal("79"), duration_in_days=30, is_active=True)
    package.limits = [
        PackageLimit(limit_type="Patients", limit_value=5000, is_active=True),
        PackageLimit(limit_type="Appointments", limit_value=-1, is_active=True),
    ]
    subscription = _subscription()
    subscription.package = package
    rows = [UsageTracking(resource_type="Patients", current_usage=12)]
    with patch(f"{REPO}.subscription_repository.get_active_by_user", new_callable=AsyncMock, return_value=subscription), \
         patch(f"{REPO}.subscription_repository.get_all_usage", new_callable=AsyncMock, return_value=rows):
        usage = {u.resource_type: u for u in await subscription_service.get_usage(mock_db_session, 10)}

    assert (usage["Patients"].current_usage, usage["Patients"].limit) == (12, 5000)
    assert (usage["Appointments"].current_usage, usage["Appointments"].limit) == (0, None)
    assert usage["Clinics"].limit is None
