import pytest
import pytest_asyncio

from core.db import create_schema, make_session_maker
from core.errors import NotFoundError, PermissionDeniedError, RoleChangeError
from models.alert import AlertCondition, Operator, TriggeredAlert
from models.enums import AlertType, Frequency, Role, Severity, SubscriptionType
from services.sql_store import SQLStore


@pytest_asyncio.fixture()
async def sql_store(tmp_path):
    engine, maker = make_session_maker(f"sqlite+aiosqlite:///{tmp_path / 'bot.db'}")
    await create_schema(engine)
    yield SQLStore(maker)
    await engine.dispose()


@pytest.mark.asyncio
async def test_register_is_idempotent_and_keeps_names(sql_store):
    await sql_store.register_user(7, username="olena", first_name="Olena", language="uk")
    user = await sql_store.register_user(7, first_name=None)
    assert user.username == "olena"
    assert user.first_name == "Olena"
    assert user.language == "uk"
    assert user.role == Role.USER


@pytest.mark.asyncio
async def test_missing_user_raises_not_found(sql_store):
    with pytest.raises(NotFoundError) as exc:
        await sql_store.get_user(404)
    assert exc.value.message_key == "error_user_not_found"


@pytest.mark.asyncio
async def test_location_settings_and_listing(sql_store):
    await sql_store.register_user(1)
    await sql_store.set_user_location(1, "Kyiv, UA", 50.45, 30.52, country="UA", city="Kyiv")
    await sql_store.update_user_settings(1, timezone="Europe/Kyiv", units="imperial")
    user = await sql_store.get_user(1)
    assert user.has_location and user.timezone == "Europe/Kyiv" and user.units == "imperial"
    assert [u.id for u in await sql_store.list_users_with_location()] == [1]

    await sql_store.clear_user_location(1)
    assert await sql_store.list_users_with_location() == []
    with pytest.raises(ValueError):
        await sql_store.update_user_settings(1, role=3)


@pytest.mark.asyncio
async def test_alert_lifecycle(sql_store):
    await sql_store.register_user(1)
    alert = await sql_store.create_alert(1, AlertType.WIND_SPEED, AlertCondition(operator=Operator.GTE, value=40))
    assert (await sql_store.get_alert(1, alert.id)).condition.operator == Operator.GTE

    updated = await sql_store.update_alert(1, alert.id, condition=AlertCondition(operator=Operator.GT, value=45), is_active=False)
    assert updated.threshold == 45 and updated.is_active is False

    with pytest.raises(NotFoundError):
        await sql_store.get_alert(2, alert.id)

    await sql_store.record_triggered_alert(TriggeredAlert(
        user_id=1, alert_type=AlertType.WIND_SPEED, severity=Severity.MEDIUM,
        title="Wind Speed Alert", description="Wind speed is 50.0 km/h", value=50, threshold=45,
    ))
    assert len(await sql_store.get_triggered_alerts(1)) == 1

    await sql_store.delete_alert(1, alert.id)
    assert await sql_store.get_user_alerts(1) == []


@pytest.mark.asyncio
async def test_subscriptions_and_active_listing(sql_store):
    await sql_store.register_user(1)
    sub = await sql_store.create_subscription(1, SubscriptionType.DAILY, Frequency.DAILY, "07:30")
    # no location yet
    assert await sql_store.get_active_subscriptions() == []

    await sql_store.set_user_location(1, "Kyiv, UA", 50.45, 30.52)
    pairs = await sql_store.get_active_subscriptions()
    assert [(s.id, u.id) for s, u in pairs] == [(sub.id, 1)]

    await sql_store.update_subscription(1, sub.id, is_active=False)
    assert await sql_store.get_active_subscriptions() == []

    await sql_store.delete_subscription(1, sub.id)
    with pytest.raises(NotFoundError):
        await sql_store.get_subscription(1, sub.id)


@pytest.mark.asyncio
async def test_role_change_guards(sql_store):
    await sql_store.register_user(1)
    await sql_store.register_user(2)
    await sql_store._set_role(1, Role.ADMIN)

    updated = await sql_store.change_user_role(1, 2, int(Role.MODERATOR))
    assert updated.role == Role.MODERATOR
    stats = await sql_store.user_statistics()
    assert stats.total_users == 2
    assert stats.role_counts == {"User": 0, "Moderator": 1, "Admin": 1}

    await sql_store._set_role(2, Role.ADMIN)
    await sql_store.change_user_role(2, 1, int(Role.MODERATOR))
    assert (await sql_store.get_user(1)).role == Role.MODERATOR
    with pytest.raises(PermissionDeniedError):
        await sql_store.change_user_role(1, 2, int(Role.USER))
    with pytest.raises(RoleChangeError) as exc:
        await sql_store.change_user_role(2, 2, int(Role.USER))
    assert exc.value.message_key == "error_role_own"


@pytest.mark.asyncio
async def test_ping(sql_store):
    assert await sql_store.ping() is True
