"""
Weather, forecast and air quality views.

    weather_current / forecast_current / air_current     saved location
    weather_coords_<lat>_<lon> (same for forecast, air)  explicit coordinates
"""
from typing import List, Optional

from bot.callback_codec import CallbackToken, encode, format_coord
from bot.context import FlowContext
from bot.flows.location import check_coordinates, location_confirmation
from bot.flows.navigation import back_button
from bot.formatting import format_air_quality, format_forecast, format_weather
from models.schemas import Button, Reply

VIEWS = ("weather", "forecast", "air")


def _no_location(ctx: FlowContext) -> Reply:
    return Reply(
        text=ctx.t("error_no_location"),
        buttons=[[Button(label=ctx.t("btn_set_location"), data=encode("location", "set"))], [back_button(ctx)]],
    )


def _view_buttons(ctx: FlowContext, lat: float, lon: float) -> List[Button]:
    la, lo = format_coord(lat), format_coord(lon)
    return [Button(label=ctx.t(f"btn_{view}"), data=encode(view, "coords", la, lo)) for view in VIEWS]


async def render_view(ctx: FlowContext, view: str, lat: float, lon: float, name: str, units: str = "metric") -> Reply:
    if view == "forecast":
        text = format_forecast(ctx, name, await ctx.weather.forecast(lat, lon), units)
    elif view == "air":
        text = format_air_quality(ctx, name, await ctx.weather.air_quality(lat, lon))
    else:
        text = format_weather(ctx, await ctx.weather.current_weather(lat, lon), name, units)
    return Reply(text=text, buttons=[_view_buttons(ctx, lat, lon), [back_button(ctx)]])


async def _handle_view(view: str, token: CallbackToken, ctx: FlowContext) -> Optional[Reply]:
    user = await ctx.current_user()
    if token.sub_action == "coords":
        lat, lon = check_coordinates(token.float_param(0), token.float_param(1))
        return await render_view(ctx, view, lat, lon, f"{format_coord(lat)}, {format_coord(lon)}", user.units)
    if token.sub_action == "current":
        if not user.has_location:
            return _no_location(ctx)
        return await render_view(ctx, view, user.latitude, user.longitude, user.location_name, user.units)
    return None


async def handle_weather(token: CallbackToken, ctx: FlowContext) -> Optional[Reply]:
    return await _handle_view("weather", token, ctx)


async def handle_forecast(token: CallbackToken, ctx: FlowContext) -> Optional[Reply]:
    return await _handle_view("forecast", token, ctx)


async def handle_air(token: CallbackToken, ctx: FlowContext) -> Optional[Reply]:
    return await _handle_view("air", token, ctx)


async def view_for_place(ctx: FlowContext, view: str, place: Optional[str] = None) -> Reply:
    """
    /weather, /forecast and /air. Without a place the saved location is used;
    with one, the place is geocoded and the reply offers to save it.
    """
    user = await ctx.current_user()
    if not place:
        if not user.has_location:
            return _no_location(ctx)
        return await render_view(ctx, view, user.latitude, user.longitude, user.location_name, user.units)

    geo = await ctx.weather.geocode(place)
    reply = await render_view(ctx, view, geo.latitude, geo.longitude, geo.display_name, user.units)
    reply.buttons.insert(1, [Button(label=ctx.t("btn_set_as_location"), data=location_confirmation.candidate_token(geo))])
    return reply
