import pytest

from bot.commands import run_command
from bot.router import build_router
from models.enums import Role


@pytest.mark.asyncio
async def test_promote_proposal_then_confirm(make_ctx, store):
    await make_ctx(user_id=2, first_name="Olena")
    admin = await make_ctx(user_id=1, role=Role.ADMIN)

    proposal = await run_command(admin, "promote", ["2"])
    assert proposal.button_data() == ["role_confirm_promote_2_2", "role_cancel"]
    assert "User" in proposal.text and "Moderator" in proposal.text
    # nothing changes until the admin confirms
    assert (await store.get_user(2)).role == Role.USER

    result = await build_router().dispatch("role_confirm_promote_2_2", admin)
    assert (await store.get_user(2)).role == Role.MODERATOR
    assert "User" in result.text and "Moderator" in result.text


@pytest.mark.asyncio
async def test_cancel_leaves_role_unchanged(make_ctx, store):
    await make_ctx(user_id=2)
    admin = await make_ctx(user_id=1, role=Role.ADMIN)

    reply = await build_router().dispatch("role_cancel", admin)
    assert reply.text == admin.t("role_change_cancelled")
    assert (await store.get_user(2)).role == Role.USER


@pytest.mark.asyncio
async def test_promote_user_directly_to_admin_is_refused(make_ctx):
    await make_ctx(user_id=2)
    admin = await make_ctx(user_id=1, role=Role.ADMIN)

    reply = await run_command(admin, "promote", ["2", "admin"])
    assert reply.buttons == []
    assert "Promote to Moderator first" in reply.text


@pytest.mark.asyncio
async def test_demoting_an_admin_warns(make_ctx):
    await make_ctx(user_id=2, role=Role.ADMIN)
    admin = await make_ctx(user_id=1, role=Role.ADMIN)

    reply = await run_command(admin, "demote", ["2"])
    assert reply.button_data()[0] == "role_confirm_demote_2_2"
    assert admin.t("role_demote_admin_warning") in reply.text


@pytest.mark.asyncio
async def test_non_admin_cannot_propose_or_confirm(make_ctx, store):
    await make_ctx(user_id=2)
    moderator = await make_ctx(user_id=3, role=Role.MODERATOR)

    reply = await run_command(moderator, "promote", ["2"])
    assert reply.text == "❌ " + moderator.t("error_insufficient_permissions")

    forged = await build_router().dispatch("role_confirm_promote_2_2", moderator)
    assert forged.text == "❌ " + moderator.t("error_insufficient_permissions")
    assert (await store.get_user(2)).role == Role.USER


@pytest.mark.asyncio
async def test_usage_and_unknown_role(make_ctx):
    admin = await make_ctx(user_id=1, role=Role.ADMIN)
    assert (await run_command(admin, "promote", [])).text == admin.t("usage_promote")
    assert (await run_command(admin, "demote", ["abc"])).text == admin.t("usage_demote")
    reply = await run_command(admin, "promote", ["2", "wizard"])
    assert "wizard" in reply.text


@pytest.mark.asyncio
async def test_admin_cannot_target_themselves(make_ctx):
    admin = await make_ctx(user_id=1, role=Role.ADMIN)
    reply = await run_command(admin, "demote", ["1"])
    assert reply.text == "❌ " + admin.t("error_role_own")
