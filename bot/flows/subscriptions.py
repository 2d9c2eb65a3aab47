"""
Subscription and notification flows.

    subscribe_<type>                         quick subscribe at 08:00
    unsubscribe_<id>
    subscriptions_list / sub_list
    notifications_menu
    notifications_add_<type>                 time picker
    notifications_create_<type>_<HH:MM>_<freq>
    notifications_manage
    notifications_toggle_<id> / notifications_delete_<id>
    notifications_info_display
"""
import logging
import re
from typing import Optional

from bot.callback_codec import CallbackToken, encode
from bot.context import FlowContext
from bot.flows.navigation import back_button
from bot.formatting import format_subscription_line
from core.errors import MalformedCallbackError
from models.enums import Frequency, SubscriptionType
from models.schemas import Button, Reply

logger = logging.getLogger(__name__)

TIME_OF_DAY_RE = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")
TIME_CHOICES = ["06:00", "08:00", "12:00", "18:00", "20:00", "22:00"]
DEFAULT_TIME = "08:00"


def _subscription_type(slug: str) -> SubscriptionType:
    try:
        return SubscriptionType.from_slug(slug)
    except KeyError as e:
        raise MalformedCallbackError(f"unknown subscription type {slug!r}") from e


def _frequency(slug: str) -> Frequency:
    try:
        return Frequency.from_slug(slug)
    except KeyError as e:
        raise MalformedCallbackError(f"unknown frequency {slug!r}") from e


def default_frequency(subscription_type: SubscriptionType) -> Frequency:
    return Frequency.WEEKLY if subscription_type == SubscriptionType.WEEKLY else Frequency.DAILY


async def create_subscription(
    ctx: FlowContext,
    subscription_type: SubscriptionType,
    time_of_day: str,
    frequency: Frequency,
) -> Reply:
    if not TIME_OF_DAY_RE.match(time_of_day):
        raise MalformedCallbackError(f"invalid time of day {time_of_day!r}")
    sub = await ctx.store.create_subscription(ctx.user_id, subscription_type, frequency, time_of_day)
    user = await ctx.current_user()
    text = ctx.t("subscription_created", subscription=format_subscription_line(sub), timezone=user.timezone or "UTC")
    if not user.has_location:
        text += "\n\n" + ctx.t("subscription_needs_location")
    return Reply(
        text=text,
        buttons=[[Button(label=ctx.t("btn_manage_notifications"), data=encode("notifications", "manage"))]],
    )


def notifications_menu(ctx: FlowContext) -> Reply:
    rows = [
        [Button(label=t.display_name, data=encode("notifications", "add", t.slug))]
        for t in SubscriptionType
    ]
    rows.append([Button(label=ctx.t("btn_manage_notifications"), data=encode("notifications", "manage"))])
    rows.append([Button(label=ctx.t("btn_info"), data=encode("notifications", "info", "display"))])
    rows.append([back_button(ctx)])
    return Reply(text=ctx.t("notifications_menu"), buttons=rows)


def time_picker(ctx: FlowContext, subscription_type: SubscriptionType) -> Reply:
    freq = default_frequency(subscription_type)
    rows = []
    for i in range(0, len(TIME_CHOICES), 3):
        rows.append([
            Button(label=t, data=encode("notifications", "create", subscription_type.slug, t, freq.slug))
            for t in TIME_CHOICES[i:i + 3]
        ])
    rows.append([Button(label=ctx.t("btn_back"), data=encode("notifications", "menu"))])
    return Reply(text=ctx.t("notifications_choose_time", type=subscription_type.display_name), buttons=rows)


async def subscriptions_list(ctx: FlowContext) -> Reply:
    subs = await ctx.store.get_user_subscriptions(ctx.user_id)
    if not subs:
        return Reply(
            text=ctx.t("subscriptions_empty"),
            buttons=[[Button(label=ctx.t("btn_add_notification"), data=encode("notifications", "menu"))], [back_button(ctx)]],
        )
    lines = [ctx.t("subscriptions_title"), ""]
    rows = []
    for sub in subs:
        lines.append(format_subscription_line(sub))
        rows.append([
            Button(
                label=f"{'⏸' if sub.is_active else '▶️'} {sub.subscription_type.display_name}",
                data=encode("notifications", "toggle", sub.id),
            ),
            Button(label="🗑", data=encode("notifications", "delete", sub.id)),
        ])
    rows.append([Button(label=ctx.t("btn_add_notification"), data=encode("notifications", "menu"))])
    rows.append([back_button(ctx)])
    return Reply(text="\n".join(lines), buttons=rows)


async def handle_subscribe(token: CallbackToken, ctx: FlowContext) -> Optional[Reply]:
    subscription_type = _subscription_type(token.sub_action)
    return await create_subscription(ctx, subscription_type, DEFAULT_TIME, default_frequency(subscription_type))


async def handle_unsubscribe(token: CallbackToken, ctx: FlowContext) -> Optional[Reply]:
    await ctx.store.delete_subscription(ctx.user_id, token.sub_action)
    logger.info("User %s removed subscription %s", ctx.user_id, token.sub_action)
    reply = await subscriptions_list(ctx)
    reply.text = f"{ctx.t('subscription_deleted')}\n\n{reply.text}"
    return reply


async def handle_subscriptions(token: CallbackToken, ctx: FlowContext) -> Optional[Reply]:
    if token.sub_action == "list":
        return await subscriptions_list(ctx)
    return None


async def handle_notifications(token: CallbackToken, ctx: FlowContext) -> Optional[Reply]:
    sub = token.sub_action
    if sub == "menu":
        return notifications_menu(ctx)
    if sub == "add":
        return time_picker(ctx, _subscription_type(token.param(0)))
    if sub == "create":
        return await create_subscription(
            ctx,
            _subscription_type(token.param(0)),
            token.param(1),
            _frequency(token.param(2)),
        )
    if sub == "manage":
        return await subscriptions_list(ctx)
    if sub == "toggle":
        current = await ctx.store.get_subscription(ctx.user_id, token.param(0))
        await ctx.store.update_subscription(ctx.user_id, current.id, is_active=not current.is_active)
        return await subscriptions_list(ctx)
    if sub == "delete":
        return await handle_unsubscribe(CallbackToken("unsubscribe", token.param(0)), ctx)
    if sub == "info":
        return Reply(
            text=ctx.t("notifications_info"),
            buttons=[[Button(label=ctx.t("btn_back"), data=encode("notifications", "menu"))]],
        )
    return None
