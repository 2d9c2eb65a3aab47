import pytest

from bot.commands import handle_shared_location, handle_text, run_command
from bot.flows.location import location_confirmation, parse_coordinates
from bot.router import build_router
from core.errors import InvalidLocationError
from models.weather import GeoLocation


def test_parse_coordinates():
    assert parse_coordinates("50.45, 30.52") == (50.45, 30.52)
    assert parse_coordinates(" -33.86 151.2 ") == (-33.86, 151.2)
    assert parse_coordinates("Kyiv") is None
    with pytest.raises(InvalidLocationError):
        parse_coordinates("95, 10")


@pytest.mark.asyncio
async def test_ignore_does_not_touch_the_store(ctx, store, weather):
    proposal = await handle_text(ctx, "50.45, 30.52")
    confirm, ignore = proposal.button_data()
    assert confirm == "location_confirm_coords_50.4500_30.5200"
    assert ignore == "location_ignore"

    reply = await build_router().dispatch(ignore, ctx)
    assert reply.text == ctx.t("location_ignored")
    assert not (await store.get_user(ctx.user_id)).has_location
    assert weather.calls == []


@pytest.mark.asyncio
async def test_confirming_coordinates_reverse_geocodes(ctx, store, weather):
    proposal = await handle_shared_location(ctx, 50.45, 30.52)
    reply = await build_router().dispatch(proposal.button_data()[0], ctx)

    user = await store.get_user(ctx.user_id)
    assert user.location_name == "Kyiv, UA"
    assert (user.latitude, user.longitude) == (50.45, 30.52)
    assert ("reverse_geocode", 50.45, 30.52) in weather.calls
    assert "Kyiv, UA" in reply.text


@pytest.mark.asyncio
async def test_place_name_is_geocoded_only_on_confirm(ctx, store, weather):
    proposal = await run_command(ctx, "setlocation", ["London"])
    assert weather.calls == []
    assert proposal.button_data()[0] == "location_confirm_name_London"

    await build_router().dispatch(proposal.button_data()[0], ctx)
    user = await store.get_user(ctx.user_id)
    assert user.location_name == "London, GB"
    assert user.country == "GB"


@pytest.mark.asyncio
async def test_unknown_place_is_reported_without_saving(ctx, store):
    reply = await build_router().dispatch("location_confirm_name_Atlantis", ctx)
    assert "Atlantis" in reply.text
    assert reply.text.startswith("❌")
    assert not (await store.get_user(ctx.user_id)).has_location


@pytest.mark.asyncio
async def test_resolved_candidate_keeps_its_name(ctx, store, weather):
    geo = GeoLocation(name="Lviv", latitude=49.8397, longitude=24.0297, country="UA")
    token = location_confirmation.candidate_token(geo)
    assert token.startswith("location_confirm_resolved_49.8397_24.0297_")

    await build_router().dispatch(token, ctx)
    assert (await store.get_user(ctx.user_id)).location_name == "Lviv, UA"
    assert weather.calls == []


def test_long_resolved_name_degrades_to_coordinates():
    geo = GeoLocation(name="Llanfairpwllgwyngyllgogerychwyrndrobwllllantysiliogogogoch", latitude=53.22, longitude=-4.2, country="GB")
    assert location_confirmation.candidate_token(geo) == "location_confirm_coords_53.2200_-4.2000"


@pytest.mark.asyncio
async def test_overlong_unknown_name_is_geocoded_up_front(ctx, store, weather):
    name = "a very long place name that cannot fit into a button at all"
    reply = await handle_text(ctx, name)
    assert ("geocode", name) in weather.calls
    assert reply.text == "❌ " + ctx.t("error_location_not_found", name=name)
    assert reply.buttons == []


@pytest.mark.asyncio
async def test_long_non_ascii_name_is_geocoded_before_proposing(ctx, store, weather):
    weather.places["миколаїв"] = GeoLocation(name="Миколаїв", latitude=46.975, longitude=31.9946, country="UA")
    proposal = await handle_text(ctx, "Миколаїв")
    confirm, ignore = proposal.button_data()
    assert confirm == "location_confirm_coords_46.9750_31.9946"
    assert "Миколаїв, UA" in proposal.text

    await build_router().dispatch(confirm, ctx)
    user = await store.get_user(ctx.user_id)
    assert (user.latitude, user.longitude) == (46.975, 31.9946)


@pytest.mark.asyncio
async def test_proposal_names_the_saved_location_and_offers_to_keep_it(ctx, store):
    await store.set_user_location(ctx.user_id, "Kyiv, UA", 50.45, 30.52)
    proposal = await handle_text(ctx, "London")
    assert proposal.text == ctx.t("location_confirm_change", current="Kyiv, UA", new="London")
    keep = proposal.buttons[0][1]
    assert keep.label == ctx.t("btn_keep_current")

    await build_router().dispatch(keep.data, ctx)
    assert (await store.get_user(ctx.user_id)).location_name == "Kyiv, UA"


@pytest.mark.asyncio
async def test_out_of_range_coordinates_are_refused(ctx):
    reply = await handle_shared_location(ctx, 123.0, 10.0)
    assert reply.text == "❌ " + ctx.t("error_coordinates_range")


@pytest.mark.asyncio
async def test_clear_location(ctx, store):
    await store.set_user_location(ctx.user_id, "Kyiv, UA", 50.45, 30.52)
    reply = await build_router().dispatch("location_clear", ctx)
    assert reply.text == ctx.t("location_cleared")
    assert not (await store.get_user(ctx.user_id)).has_location
