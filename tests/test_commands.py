import pytest

from bot.commands import handle_shared_location, handle_text, run_command
from models.enums import Role


@pytest.mark.asyncio
async def test_start_greets_by_first_name(ctx):
    reply = await run_command(ctx, "start", [])
    assert "Test" in reply.text
    assert "weather_current" in reply.button_data()
    assert "export_menu" in reply.button_data()


@pytest.mark.asyncio
async def test_unknown_command_is_ignored(ctx):
    assert await run_command(ctx, "nope", []) is None


@pytest.mark.asyncio
async def test_weather_without_location_offers_to_set_one(ctx, weather):
    reply = await run_command(ctx, "weather", [])
    assert reply.text == ctx.t("error_no_location")
    assert "location_set" in reply.button_data()
    assert weather.calls == []


@pytest.mark.asyncio
async def test_weather_for_place_does_not_save_it(ctx, store, weather):
    reply = await run_command(ctx, "weather", ["Kyiv"])
    assert "21.5" in reply.text
    assert any(d.startswith("location_confirm_") for d in reply.button_data())
    assert ("geocode", "Kyiv") in weather.calls
    assert (await store.get_user(ctx.user_id)).has_location is False


@pytest.mark.asyncio
async def test_unknown_place_is_reported(ctx):
    reply = await run_command(ctx, "forecast", ["Atlantis"])
    assert reply.text.startswith("❌")
    assert reply.buttons == []


@pytest.mark.asyncio
async def test_role_commands_need_admin(ctx, make_ctx):
    reply = await run_command(ctx, "promote", ["5"])
    assert reply.text == "❌ " + ctx.t("error_insufficient_permissions")

    admin = await make_ctx(user_id=1, role=Role.ADMIN)
    assert (await run_command(admin, "promote", [])).text == admin.t("usage_promote")
    assert (await run_command(admin, "demote", ["abc"])).text == admin.t("usage_demote")


@pytest.mark.asyncio
async def test_free_text_is_only_proposed(ctx, store, weather):
    tz = await handle_text(ctx, "Europe/Kyiv")
    assert any(d.startswith("timezone_confirm_") for d in tz.button_data())

    place = await handle_text(ctx, "Kyiv")
    assert any(d.startswith("location_confirm_") for d in place.button_data())
    assert "location_ignore" in place.button_data()

    user = await store.get_user(ctx.user_id)
    assert user.has_location is False and user.timezone is None
    assert weather.calls == []
    assert await handle_text(ctx, "   ") is None


@pytest.mark.asyncio
async def test_shared_location_rejects_out_of_range(ctx):
    reply = await handle_shared_location(ctx, 95.0, 10.0)
    assert reply.text.startswith("❌")
