"""
Slash commands and free-text input.

Commands that change something sensitive (location, timezone, roles) never
mutate directly: they compute a candidate and hand it to the matching
confirmation flow. Errors are translated to replies the same way the
callback router does it.
"""
import logging
from typing import Awaitable, Callable, Dict, List, Optional

from bot.context import FlowContext
from bot.flows import admin, alerts, export, settings, subscriptions, weather
from bot.flows.location import location_confirmation, location_prompt
from bot.flows.navigation import main_menu
from bot.flows.role import role_confirmation
from bot.flows.timezone import looks_like_timezone, timezone_confirmation, timezone_picker
from bot.router import error_reply
from core.errors import WeatherBotError
from models.enums import Role
from models.schemas import Reply
from rules.roles import Direction

logger = logging.getLogger(__name__)

CommandHandler = Callable[[FlowContext, List[str]], Awaitable[Reply]]


async def cmd_start(ctx: FlowContext, args: List[str]) -> Reply:
    user = await ctx.current_user()
    return main_menu(ctx, user.first_name or user.display_name)


async def cmd_help(ctx: FlowContext, args: List[str]) -> Reply:
    return Reply(text=ctx.t("help"))


async def cmd_weather(ctx: FlowContext, args: List[str]) -> Reply:
    return await weather.view_for_place(ctx, "weather", " ".join(args))


async def cmd_forecast(ctx: FlowContext, args: List[str]) -> Reply:
    return await weather.view_for_place(ctx, "forecast", " ".join(args))


async def cmd_air(ctx: FlowContext, args: List[str]) -> Reply:
    return await weather.view_for_place(ctx, "air", " ".join(args))


async def cmd_setlocation(ctx: FlowContext, args: List[str]) -> Reply:
    if not args:
        return location_prompt(ctx)
    return await location_confirmation.propose_text(ctx, " ".join(args))


async def cmd_settimezone(ctx: FlowContext, args: List[str]) -> Reply:
    if not args:
        return timezone_picker(ctx)
    return timezone_confirmation.propose_timezone(ctx, args[0])


async def cmd_subscribe(ctx: FlowContext, args: List[str]) -> Reply:
    return subscriptions.notifications_menu(ctx)


async def cmd_subscriptions(ctx: FlowContext, args: List[str]) -> Reply:
    return await subscriptions.subscriptions_list(ctx)


async def cmd_addalert(ctx: FlowContext, args: List[str]) -> Reply:
    return alerts.alert_menu(ctx)


async def cmd_alerts(ctx: FlowContext, args: List[str]) -> Reply:
    return await alerts.alerts_list(ctx)


async def cmd_settings(ctx: FlowContext, args: List[str]) -> Reply:
    return await settings.settings_main(ctx)


async def cmd_export(ctx: FlowContext, args: List[str]) -> Reply:
    return export.export_menu(ctx)


async def cmd_admin(ctx: FlowContext, args: List[str]) -> Reply:
    return await admin.admin_menu(ctx)


async def cmd_stats(ctx: FlowContext, args: List[str]) -> Reply:
    return await admin.admin_stats(ctx, detailed=bool(args and args[0] == "detailed"))


async def cmd_users(ctx: FlowContext, args: List[str]) -> Reply:
    return await admin.admin_users(ctx, args[0] if args else "recent")


async def _role_command(ctx: FlowContext, args: List[str], direction: Direction) -> Reply:
    await ctx.require_role(Role.ADMIN)
    usage = Reply(text=ctx.t(f"usage_{direction.value}"))
    if not args:
        return usage
    try:
        target_id = int(args[0])
    except ValueError:
        return usage
    requested: Optional[Role] = None
    if len(args) > 1:
        requested = Role.parse(args[1])
        if requested is None:
            return Reply(text=ctx.t("error_unknown_role", role=args[1]))
    return await role_confirmation.propose_change(ctx, target_id, direction, requested)


async def cmd_promote(ctx: FlowContext, args: List[str]) -> Reply:
    return await _role_command(ctx, args, Direction.PROMOTE)


async def cmd_demote(ctx: FlowContext, args: List[str]) -> Reply:
    return await _role_command(ctx, args, Direction.DEMOTE)


COMMANDS: Dict[str, CommandHandler] = {
    "start": cmd_start,
    "help": cmd_help,
    "weather": cmd_weather,
    "forecast": cmd_forecast,
    "air": cmd_air,
    "setlocation": cmd_setlocation,
    "settimezone": cmd_settimezone,
    "subscribe": cmd_subscribe,
    "subscriptions": cmd_subscriptions,
    "addalert": cmd_addalert,
    "alerts": cmd_alerts,
    "settings": cmd_settings,
    "export": cmd_export,
    "admin": cmd_admin,
    "stats": cmd_stats,
    "users": cmd_users,
    "promote": cmd_promote,
    "demote": cmd_demote,
}


async def run_command(ctx: FlowContext, name: str, args: List[str]) -> Optional[Reply]:
    handler = COMMANDS.get(name)
    if handler is None:
        return None
    try:
        return await handler(ctx, args)
    except WeatherBotError as e:
        return error_reply(ctx, e)


async def handle_text(ctx: FlowContext, text: str) -> Optional[Reply]:
    """Plain text: a timezone name or a place/coordinates, each handed to its confirmation flow."""
    text = (text or "").strip()
    if not text:
        return None
    try:
        if looks_like_timezone(text):
            return timezone_confirmation.propose_timezone(ctx, text)
        return await location_confirmation.propose_text(ctx, text)
    except WeatherBotError as e:
        return error_reply(ctx, e)


async def handle_shared_location(ctx: FlowContext, latitude: float, longitude: float) -> Reply:
    """A GPS pin: propose the raw coordinates, reverse-geocoding only if confirmed."""
    try:
        return await location_confirmation.propose_coordinates(ctx, latitude, longitude)
    except WeatherBotError as e:
        return error_reply(ctx, e)
