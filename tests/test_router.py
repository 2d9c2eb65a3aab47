import pytest

from bot.router import CallbackRouter, build_router
from core.errors import StoreError
from models.schemas import Reply


@pytest.mark.asyncio
async def test_unknown_action_is_ignored(ctx):
    router = build_router()
    assert await router.dispatch("legacy_button_1", ctx) is None


@pytest.mark.asyncio
async def test_unknown_sub_action_is_ignored(ctx):
    router = build_router()
    assert await router.dispatch("weather_somethingnew", ctx) is None


@pytest.mark.asyncio
async def test_malformed_payload_gets_an_error_reply(ctx):
    reply = await build_router().dispatch("weather", ctx)
    assert reply.text.startswith("❌")
    assert ctx.t("error_invalid_request") in reply.text
    assert reply.buttons == []


@pytest.mark.asyncio
async def test_flow_errors_become_localized_replies(ctx):
    reply = await build_router().dispatch("alerts_edit_does-not-exist", ctx)
    assert reply.text == "❌ " + ctx.t("error_alert_not_found")


@pytest.mark.asyncio
async def test_store_failures_reply_try_again(ctx):
    async def broken(token, ctx):
        raise StoreError("connection lost")

    router = CallbackRouter({"weather": broken})
    reply = await router.dispatch("weather_current", ctx)
    assert reply.text == "❌ " + ctx.t("error_failed_try_again")


@pytest.mark.asyncio
async def test_back_to_start_shows_main_menu(ctx):
    reply = await build_router().dispatch("back_to_start", ctx)
    assert isinstance(reply, Reply)
    assert "weather_current" in reply.button_data()


def test_every_menu_action_is_routed():
    actions = set(build_router().actions)
    for action in ("weather", "forecast", "air", "settings", "location", "timezone", "alert", "alerts",
                   "notifications", "subscriptions", "admin", "role", "export", "back"):
        assert action in actions
