"""
Location flow.

Candidates travel in the confirm token as an explicit tagged variant so the
confirm step never has to guess what it is looking at:

    location_confirm_coords_<lat>_<lon>             raw coordinates, reverse-geocoded on confirm
    location_confirm_resolved_<lat>_<lon>_<name>    name and coordinates already known
    location_confirm_name_<name>                    free text, geocoded on confirm

Names are percent-encoded. Provider calls happen on confirm, so a dismissed
proposal costs nothing; the one exception is a typed name too long to carry.
"""
import logging
import re
from enum import Enum
from html import escape
from typing import Optional, Tuple

from bot.callback_codec import CallbackToken, encode, format_coord, quote_text
from bot.confirmation import ConfirmationFlow
from bot.context import FlowContext
from bot.flows.navigation import back_button
from core.errors import CallbackDataTooLongError, InvalidLocationError, MalformedCallbackError
from models.schemas import Button, Reply
from models.weather import GeoLocation

logger = logging.getLogger(__name__)

COORDINATES_RE = re.compile(r"^\s*(-?\d+(?:\.\d+)?)\s*(?:,\s*|\s+)(-?\d+(?:\.\d+)?)\s*$")


class CandidateKind(str, Enum):
    COORDS = "coords"
    RESOLVED = "resolved"
    NAME = "name"


def check_coordinates(lat: float, lon: float) -> Tuple[float, float]:
    if not -90.0 <= lat <= 90.0 or not -180.0 <= lon <= 180.0:
        raise InvalidLocationError(
            f"coordinates out of range: {lat}, {lon}", message_key="error_coordinates_range", lat=lat, lon=lon
        )
    return lat, lon


def parse_coordinates(text: str) -> Optional[Tuple[float, float]]:
    """
    Parse "lat, lon" / "lat lon" text. Returns None when the text is not a
    coordinate pair; raises InvalidLocationError when it is but out of range.
    """
    match = COORDINATES_RE.match(text or "")
    if not match:
        return None
    return check_coordinates(float(match.group(1)), float(match.group(2)))


class LocationConfirmation(ConfirmationFlow):
    action = "location"
    ignored_message_key = "location_ignored"

    def coords_token(self, lat: float, lon: float) -> str:
        return self.confirm_token(CandidateKind.COORDS, format_coord(lat), format_coord(lon))

    def candidate_token(self, location: GeoLocation) -> str:
        """Confirm token for an already-resolved place, degrading to bare coordinates if the name does not fit."""
        try:
            return self.confirm_token(
                CandidateKind.RESOLVED,
                format_coord(location.latitude),
                format_coord(location.longitude),
                quote_text(location.display_name),
            )
        except CallbackDataTooLongError:
            logger.info("Location name %r too long for callback data; proposing coordinates", location.display_name)
            return self.coords_token(location.latitude, location.longitude)

    async def _offer(self, ctx: FlowContext, new_label: str, text: str, confirm_data: str) -> Reply:
        """With a location already saved, the proposal names both and the ignore button keeps the old one."""
        user = await ctx.current_user()
        if not user.has_location:
            return self.proposal(ctx, text, confirm_data)
        text = ctx.t("location_confirm_change", current=escape(user.location_name), new=new_label)
        return self.proposal(ctx, text, confirm_data, ignore_label_key="btn_keep_current")

    async def propose_coordinates(self, ctx: FlowContext, lat: float, lon: float) -> Reply:
        lat, lon = check_coordinates(lat, lon)
        la, lo = format_coord(lat), format_coord(lon)
        text = ctx.t("location_confirm_coords", lat=la, lon=lo)
        return await self._offer(ctx, f"{la}, {lo}", text, self.coords_token(lat, lon))

    async def propose_name(self, ctx: FlowContext, name: str) -> Reply:
        """
        Free text is carried as-is and geocoded on confirm. A name too long for
        callback data (non-ASCII names grow threefold when percent-encoded) is
        geocoded now and proposed as a resolved place instead.
        """
        name = name.strip()
        if not name:
            raise InvalidLocationError("empty location name")
        try:
            confirm_data = self.confirm_token(CandidateKind.NAME, quote_text(name))
        except CallbackDataTooLongError:
            logger.info("Location name %r too long for callback data; geocoding before proposing", name)
            geo = await ctx.weather.geocode(name)
            name, confirm_data = geo.display_name, self.candidate_token(geo)
        label = escape(name)
        return await self._offer(ctx, label, ctx.t("location_confirm_name", name=label), confirm_data)

    async def propose_text(self, ctx: FlowContext, text: str) -> Reply:
        """Hand free text off into the confirmation flow: coordinates first, place name otherwise."""
        coords = parse_coordinates(text)
        if coords is not None:
            return await self.propose_coordinates(ctx, *coords)
        return await self.propose_name(ctx, text)

    async def confirm(self, token: CallbackToken, ctx: FlowContext) -> Reply:
        kind = token.param(0)
        country = None
        if kind == CandidateKind.COORDS.value:
            lat, lon = check_coordinates(token.float_param(1), token.float_param(2))
            name = await ctx.weather.reverse_geocode(lat, lon)
        elif kind == CandidateKind.RESOLVED.value:
            lat, lon = check_coordinates(token.float_param(1), token.float_param(2))
            name = token.text_param(3)
        elif kind == CandidateKind.NAME.value:
            geo = await ctx.weather.geocode(token.text_param(1))
            lat, lon = check_coordinates(geo.latitude, geo.longitude)
            name, country = geo.display_name, geo.country
        else:
            raise MalformedCallbackError(f"unknown location candidate kind {kind!r}")

        await ctx.store.set_user_location(ctx.user_id, name, lat, lon, country=country, city=name.split(",")[0])
        logger.info("User %s set location %r (%.4f, %.4f)", ctx.user_id, name, lat, lon)
        return location_saved_reply(ctx, name)


location_confirmation = LocationConfirmation()


def location_saved_reply(ctx: FlowContext, name: str) -> Reply:
    return Reply(
        text=ctx.t("location_saved", name=escape(name)),
        buttons=[
            [Button(label=ctx.t("btn_weather"), data=encode("weather", "current"))],
            [back_button(ctx)],
        ],
    )


def location_prompt(ctx: FlowContext) -> Reply:
    return Reply(text=ctx.t("location_prompt"), buttons=[[back_button(ctx)]])


async def handle(token: CallbackToken, ctx: FlowContext) -> Optional[Reply]:
    if location_confirmation.handles(token):
        return await location_confirmation.resolve(token, ctx)

    if token.sub_action in ("add", "set"):
        return location_prompt(ctx)

    if token.sub_action == "clear":
        await ctx.store.clear_user_location(ctx.user_id)
        logger.info("User %s cleared location", ctx.user_id)
        return Reply(text=ctx.t("location_cleared"), buttons=[[back_button(ctx)]])

    if token.sub_action == "save":
        # location_save_<lat>_<lon>_<name>: already resolved, saved directly
        lat, lon = check_coordinates(token.float_param(0), token.float_param(1))
        name = token.text_param(2)
        await ctx.store.set_user_location(ctx.user_id, name, lat, lon, city=name.split(",")[0])
        logger.info("User %s saved location %r", ctx.user_id, name)
        return location_saved_reply(ctx, name)

    return None
