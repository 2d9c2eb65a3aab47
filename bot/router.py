"""
Callback router.

A static table maps the first token segment (the action) to the flow that
owns it. Each flow interprets its own sub-action and params; the router
only guarantees the two-segment minimum.

Unknown actions get no reply at all: Telegram keeps delivering taps on
buttons rendered by older bot versions, and those must not surface as
errors. Every WeatherBotError raised by a flow is turned into a localized
reply here, so no failure escapes to the transport.
"""
import logging
from typing import Awaitable, Callable, Dict, Mapping, Optional

from bot.callback_codec import CallbackToken, decode
from bot.context import FlowContext
from core.errors import (
    MalformedCallbackError,
    PermissionDeniedError,
    StoreError,
    WeatherBotError,
    WeatherProviderError,
)
from models.schemas import Reply

logger = logging.getLogger(__name__)

FlowHandler = Callable[[CallbackToken, FlowContext], Awaitable[Optional[Reply]]]


def error_reply(ctx: FlowContext, exc: WeatherBotError) -> Reply:
    """Translate a bot error into the user-visible reply (no buttons, no mutation)."""
    if isinstance(exc, (StoreError, WeatherProviderError)):
        logger.error("User %s: %s: %s", ctx.user_id, type(exc).__name__, exc)
    elif isinstance(exc, (MalformedCallbackError, PermissionDeniedError)):
        logger.warning("User %s: %s: %s", ctx.user_id, type(exc).__name__, exc)
    else:
        logger.info("User %s: %s: %s", ctx.user_id, type(exc).__name__, exc)
    return Reply(text=f"❌ {ctx.t(exc.message_key, **exc.params)}")


class CallbackRouter:
    def __init__(self, routes: Mapping[str, FlowHandler]):
        self._routes: Dict[str, FlowHandler] = dict(routes)

    @property
    def actions(self):
        return sorted(self._routes)

    async def dispatch(self, raw: Optional[str], ctx: FlowContext) -> Optional[Reply]:
        """Decode a raw callback payload and route it."""
        try:
            token = decode(raw)
        except MalformedCallbackError as e:
            return error_reply(ctx, e)
        return await self.route(token, ctx)

    async def route(self, token: CallbackToken, ctx: FlowContext) -> Optional[Reply]:
        handler = self._routes.get(token.action)
        if handler is None:
            logger.debug("Ignoring callback with unknown action %r", token.action)
            return None
        try:
            return await handler(token, ctx)
        except WeatherBotError as e:
            return error_reply(ctx, e)


def build_router() -> CallbackRouter:
    """The production action table."""
    from bot.flows import admin, alerts, export, location, navigation, role, settings, subscriptions, timezone, weather

    return CallbackRouter({
        "weather": weather.handle_weather,
        "forecast": weather.handle_forecast,
        "air": weather.handle_air,
        "settings": settings.handle_settings,
        "language": settings.handle_language,
        "location": location.handle,
        "timezone": timezone.handle,
        "alert": alerts.handle_alert,
        "alerts": alerts.handle_alerts,
        "subscribe": subscriptions.handle_subscribe,
        "unsubscribe": subscriptions.handle_unsubscribe,
        "sub": subscriptions.handle_subscriptions,
        "subscriptions": subscriptions.handle_subscriptions,
        "notifications": subscriptions.handle_notifications,
        "admin": admin.handle,
        "role": role.handle,
        "export": export.handle,
        "back": navigation.handle_back,
    })
