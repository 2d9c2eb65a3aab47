"""Timezone flow: timezone_confirm_<escaped IANA name> / timezone_ignore."""
import logging
import re
from datetime import datetime, timezone as dt_timezone
from html import escape
from typing import Optional

from bot.callback_codec import CallbackToken, encode, quote_text
from bot.confirmation import ConfirmationFlow
from bot.context import FlowContext
from bot.flows.navigation import back_button
from models.schemas import Button, Reply
from rules.schedule import load_timezone

logger = logging.getLogger(__name__)

TIMEZONE_RE = re.compile(r"^(?:UTC|GMT|[A-Za-z]+(?:/[A-Za-z0-9_+\-]+)+)$")

COMMON_TIMEZONES = [
    "UTC",
    "Europe/London",
    "Europe/Berlin",
    "Europe/Kyiv",
    "America/New_York",
    "America/Los_Angeles",
    "Asia/Tokyo",
    "Australia/Sydney",
]


def looks_like_timezone(text: str) -> bool:
    return bool(TIMEZONE_RE.match((text or "").strip()))


class TimezoneConfirmation(ConfirmationFlow):
    action = "timezone"
    ignored_message_key = "timezone_ignored"

    def propose_timezone(self, ctx: FlowContext, name: str) -> Reply:
        name = name.strip()
        tz = load_timezone(name)
        local = datetime.now(dt_timezone.utc).astimezone(tz)
        text = ctx.t("timezone_confirm", timezone=escape(name), time=local.strftime("%H:%M"))
        return self.propose(ctx, text, quote_text(name))

    async def confirm(self, token: CallbackToken, ctx: FlowContext) -> Reply:
        name = token.text_param(0)
        tz = load_timezone(name)
        await ctx.store.update_user_settings(ctx.user_id, timezone=name)
        logger.info("User %s set timezone %s", ctx.user_id, name)
        local = datetime.now(dt_timezone.utc).astimezone(tz)
        return Reply(
            text=ctx.t("timezone_saved", timezone=escape(name), time=local.strftime("%H:%M")),
            buttons=[[back_button(ctx)]],
        )


timezone_confirmation = TimezoneConfirmation()


def timezone_picker(ctx: FlowContext) -> Reply:
    """Common zones as one-tap confirm buttons; anything else goes through /settimezone."""
    rows, row = [], []
    for name in COMMON_TIMEZONES:
        row.append(Button(label=name, data=timezone_confirmation.confirm_token(quote_text(name))))
        if len(row) == 2:
            rows.append(row)
            row = []
    if row:
        rows.append(row)
    rows.append([Button(label=ctx.t("btn_back"), data=encode("settings", "main"))])
    return Reply(text=ctx.t("timezone_prompt"), buttons=rows)


async def handle(token: CallbackToken, ctx: FlowContext) -> Optional[Reply]:
    if timezone_confirmation.handles(token):
        return await timezone_confirmation.resolve(token, ctx)
    if token.sub_action == "list":
        return timezone_picker(ctx)
    return None
