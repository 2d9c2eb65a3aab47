"""Settings menus plus the language and units switches."""
import logging
from html import escape
from typing import Optional

from bot.callback_codec import CallbackToken, encode
from bot.context import FlowContext
from bot.flows.navigation import back_button
from bot.flows.timezone import timezone_picker
from bot.formatting import format_profile
from core.errors import MalformedCallbackError
from models.schemas import Button, Reply

logger = logging.getLogger(__name__)

UNITS = ("metric", "imperial")


def _settings_back(ctx: FlowContext) -> Button:
    return Button(label=ctx.t("btn_back"), data=encode("settings", "main"))


async def settings_main(ctx: FlowContext) -> Reply:
    user = await ctx.current_user()
    return Reply(
        text=format_profile(ctx, user),
        buttons=[
            [
                Button(label=ctx.t("btn_location"), data=encode("settings", "location")),
                Button(label=ctx.t("btn_timezone"), data=encode("settings", "timezone")),
            ],
            [
                Button(label=ctx.t("btn_language"), data=encode("settings", "language")),
                Button(label=ctx.t("btn_units"), data=encode("settings", "units")),
            ],
            [Button(label=ctx.t("btn_notifications"), data=encode("notifications", "menu"))],
            [back_button(ctx)],
        ],
    )


def language_picker(ctx: FlowContext) -> Reply:
    rows = [
        [Button(label=ctx.i18n.language_name(code), data=encode("language", "set", code))]
        for code in ctx.i18n.supported_languages()
    ]
    rows.append([_settings_back(ctx)])
    return Reply(text=ctx.t("language_prompt"), buttons=rows)


def units_picker(ctx: FlowContext) -> Reply:
    rows = [[Button(label=ctx.t(f"units_{u}"), data=encode("settings", "units", "set", u))] for u in UNITS]
    rows.append([_settings_back(ctx)])
    return Reply(text=ctx.t("units_prompt"), buttons=rows)


async def location_settings(ctx: FlowContext) -> Reply:
    user = await ctx.current_user()
    rows = [[Button(label=ctx.t("btn_set_location"), data=encode("location", "set"))]]
    if user.has_location:
        rows.append([Button(label=ctx.t("btn_clear_location"), data=encode("location", "clear"))])
    rows.append([_settings_back(ctx)])
    current = escape(user.location_name) if user.location_name else ctx.t("value_not_set")
    return Reply(text=ctx.t("location_current", location=current), buttons=rows)


async def set_language(ctx: FlowContext, code: str) -> Reply:
    if not ctx.i18n.is_supported(code):
        raise MalformedCallbackError(f"unsupported language {code!r}")
    await ctx.store.update_user_settings(ctx.user_id, language=code)
    ctx.language = code
    logger.info("User %s switched language to %s", ctx.user_id, code)
    return Reply(text=ctx.t("language_saved", language=ctx.i18n.language_name(code)), buttons=[[_settings_back(ctx)]])


async def set_units(ctx: FlowContext, units: str) -> Reply:
    if units not in UNITS:
        raise MalformedCallbackError(f"unsupported units {units!r}")
    await ctx.store.update_user_settings(ctx.user_id, units=units)
    return Reply(text=ctx.t("units_saved", units=ctx.t(f"units_{units}")), buttons=[[_settings_back(ctx)]])


async def handle_settings(token: CallbackToken, ctx: FlowContext) -> Optional[Reply]:
    sub = token.sub_action
    if sub == "main":
        return await settings_main(ctx)
    if sub == "language":
        if token.params[:1] == ("set",):
            return await set_language(ctx, token.param(1))
        return language_picker(ctx)
    if sub == "units":
        if token.params[:1] == ("set",):
            return await set_units(ctx, token.param(1))
        return units_picker(ctx)
    if sub == "timezone":
        return timezone_picker(ctx)
    if sub == "location":
        return await location_settings(ctx)
    return None


async def handle_language(token: CallbackToken, ctx: FlowContext) -> Optional[Reply]:
    if token.sub_action == "set":
        return await set_language(ctx, token.param(0))
    return None
