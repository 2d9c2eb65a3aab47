import pytest

from bot.commands import handle_text, run_command
from bot.router import build_router


@pytest.mark.asyncio
async def test_settimezone_proposes_then_saves_on_confirm(ctx, store):
    proposal = await run_command(ctx, "settimezone", ["America/New_York"])
    confirm, ignore = proposal.button_data()
    assert confirm == "timezone_confirm_America%2FNew%5FYork"
    assert ignore == "timezone_ignore"
    assert (await store.get_user(ctx.user_id)).timezone is None

    reply = await build_router().dispatch(confirm, ctx)
    assert (await store.get_user(ctx.user_id)).timezone == "America/New_York"
    assert "America/New_York" in reply.text


@pytest.mark.asyncio
async def test_ignore_keeps_the_old_timezone(ctx, store):
    await store.update_user_settings(ctx.user_id, timezone="Europe/Kyiv")
    reply = await build_router().dispatch("timezone_ignore", ctx)
    assert reply.text == ctx.t("timezone_ignored")
    assert (await store.get_user(ctx.user_id)).timezone == "Europe/Kyiv"


@pytest.mark.asyncio
async def test_invalid_timezone_is_rejected_before_proposing(ctx):
    reply = await handle_text(ctx, "Mars/Olympus")
    assert reply.buttons == []
    assert "Mars/Olympus" in reply.text


@pytest.mark.asyncio
async def test_forged_confirm_is_revalidated(ctx, store):
    reply = await build_router().dispatch("timezone_confirm_Mars%2FOlympus", ctx)
    assert reply.text.startswith("❌")
    assert (await store.get_user(ctx.user_id)).timezone is None


@pytest.mark.asyncio
async def test_picker_offers_common_zones(ctx):
    reply = await build_router().dispatch("timezone_list", ctx)
    assert "timezone_confirm_UTC" in reply.button_data()
    assert "settings_main" in reply.button_data()
