"""
Alert flows.

"alert" creates alerts from presets:
    alert_menu, alert_create_<type>, alert_<type>_<mode>_<value> (e.g. alert_temp_high_30)

"alerts" manages existing ones:
    alerts_list, alerts_edit_<id>, alerts_update_<id>_<value>,
    alerts_operator_<id>, alerts_setoperator_<id>_<op>,
    alerts_toggle_<id>, alerts_remove_<id>
"""
import logging
from typing import Dict, List, Optional, Tuple

from bot.callback_codec import CallbackToken, encode, format_number
from bot.context import FlowContext
from bot.flows.navigation import back_button
from bot.formatting import format_alert_line
from core.errors import MalformedCallbackError
from models.alert import AlertCondition, Operator
from models.enums import AlertType
from models.schemas import Button, Reply
from rules.thresholds import THRESHOLD_RANGES, threshold_options

logger = logging.getLogger(__name__)

# alert_<type>_<mode>_<value>: mode picks the comparison
PRESET_MODES: Dict[str, Operator] = {
    "high": Operator.GT,
    "low": Operator.LT,
    "moderate": Operator.GT,
    "unhealthy": Operator.GT,
    "hazardous": Operator.GT,
}

# (mode, value, label key) per alert type
PRESETS: Dict[AlertType, List[Tuple[str, float, str]]] = {
    AlertType.TEMPERATURE: [("high", 30, "preset_temp_high"), ("low", 0, "preset_temp_low")],
    AlertType.HUMIDITY: [("high", 80, "preset_humidity_high"), ("low", 30, "preset_humidity_low")],
    AlertType.PRESSURE: [("high", 1030, "preset_pressure_high"), ("low", 980, "preset_pressure_low")],
    AlertType.WIND_SPEED: [("high", 50, "preset_wind_high")],
    AlertType.UV_INDEX: [("high", 8, "preset_uv_high")],
    AlertType.AIR_QUALITY: [
        ("moderate", 100, "preset_air_moderate"),
        ("unhealthy", 150, "preset_air_unhealthy"),
        ("hazardous", 300, "preset_air_hazardous"),
    ],
}


def _alert_type(slug: str) -> AlertType:
    try:
        return AlertType.from_slug(slug)
    except KeyError as e:
        raise MalformedCallbackError(f"unknown alert type {slug!r}") from e


def alert_menu(ctx: FlowContext) -> Reply:
    rows = []
    for alert_type in PRESETS:
        rows.append([Button(label=alert_type.display_name, data=encode("alert", "create", alert_type.slug))])
    rows.append([back_button(ctx)])
    return Reply(text=ctx.t("alert_menu"), buttons=rows)


def preset_picker(ctx: FlowContext, alert_type: AlertType) -> Reply:
    rows = [
        [Button(label=ctx.t(label_key, value=format_number(value)), data=encode("alert", alert_type.slug, mode, value))]
        for mode, value, label_key in PRESETS.get(alert_type, [])
    ]
    rows.append([Button(label=ctx.t("btn_back"), data=encode("alert", "menu"))])
    return Reply(text=ctx.t("alert_choose_preset", type=alert_type.display_name), buttons=rows)


async def create_preset_alert(ctx: FlowContext, alert_type: AlertType, mode: str, value: float) -> Reply:
    operator = PRESET_MODES.get(mode)
    if operator is None:
        raise MalformedCallbackError(f"unknown preset mode {mode!r}")
    alert = await ctx.store.create_alert(ctx.user_id, alert_type, AlertCondition(operator=operator, value=value))
    logger.info("User %s created alert %s (%s)", ctx.user_id, alert.id, format_alert_line(alert))
    return Reply(
        text=ctx.t("alert_created", alert=format_alert_line(alert)),
        buttons=[
            [Button(label=ctx.t("btn_edit_threshold"), data=encode("alerts", "edit", alert.id))],
            [Button(label=ctx.t("btn_my_alerts"), data=encode("alerts", "list"))],
        ],
    )


async def handle_alert(token: CallbackToken, ctx: FlowContext) -> Optional[Reply]:
    if token.sub_action == "menu":
        return alert_menu(ctx)
    if token.sub_action == "create":
        return preset_picker(ctx, _alert_type(token.param(0)))
    if token.sub_action in (t.slug for t in AlertType):
        return await create_preset_alert(ctx, _alert_type(token.sub_action), token.param(0), token.float_param(1))
    return None


async def alerts_list(ctx: FlowContext) -> Reply:
    alerts = await ctx.store.get_user_alerts(ctx.user_id)
    if not alerts:
        return Reply(
            text=ctx.t("alerts_empty"),
            buttons=[[Button(label=ctx.t("btn_add_alert"), data=encode("alert", "menu"))], [back_button(ctx)]],
        )

    lines = [ctx.t("alerts_title"), ""]
    rows = []
    for alert in alerts:
        lines.append(format_alert_line(alert))
        rows.append([
            Button(label=f"✏️ {alert.alert_type.display_name}", data=encode("alerts", "edit", alert.id)),
            Button(label="⏸" if alert.is_active else "▶️", data=encode("alerts", "toggle", alert.id)),
            Button(label="🗑", data=encode("alerts", "remove", alert.id)),
        ])
    rows.append([Button(label=ctx.t("btn_add_alert"), data=encode("alert", "menu"))])
    rows.append([back_button(ctx)])
    return Reply(text="\n".join(lines), buttons=rows)


async def threshold_picker(ctx: FlowContext, alert_id: str) -> Reply:
    alert = await ctx.store.get_alert(ctx.user_id, alert_id)
    current = alert.condition.value
    rows, row = [], []
    for value in threshold_options(alert.alert_type, current):
        label = format_number(value)
        if abs(value - current) < 1e-9:
            label = f"• {label} •"
        row.append(Button(label=label, data=encode("alerts", "update", alert.id, value)))
        if len(row) == 4:
            rows.append(row)
            row = []
    if row:
        rows.append(row)
    rows.append([Button(label=ctx.t("btn_change_operator"), data=encode("alerts", "operator", alert.id))])
    rows.append([Button(label=ctx.t("btn_my_alerts"), data=encode("alerts", "list"))])
    return Reply(text=ctx.t("alert_edit", alert=format_alert_line(alert)), buttons=rows)


async def update_threshold(ctx: FlowContext, alert_id: str, value: float) -> Reply:
    alert = await ctx.store.get_alert(ctx.user_id, alert_id)
    rng = THRESHOLD_RANGES.get(alert.alert_type)
    if rng is not None and not rng.contains(value):
        raise MalformedCallbackError(f"threshold {value} outside {alert.alert_type.name} range")
    condition = AlertCondition(operator=alert.condition.operator, value=value)
    updated = await ctx.store.update_alert(ctx.user_id, alert_id, condition=condition)
    logger.info("User %s set alert %s threshold to %s", ctx.user_id, alert_id, value)
    return Reply(
        text=ctx.t("alert_updated", alert=format_alert_line(updated)),
        buttons=[[Button(label=ctx.t("btn_my_alerts"), data=encode("alerts", "list"))]],
    )


async def operator_picker(ctx: FlowContext, alert_id: str) -> Reply:
    alert = await ctx.store.get_alert(ctx.user_id, alert_id)
    rows = [[
        Button(label=op.symbol, data=encode("alerts", "setoperator", alert.id, op.value))
        for op in Operator
    ]]
    rows.append([Button(label=ctx.t("btn_back"), data=encode("alerts", "edit", alert.id))])
    return Reply(text=ctx.t("alert_choose_operator", alert=format_alert_line(alert)), buttons=rows)


async def set_operator(ctx: FlowContext, alert_id: str, raw_operator: str) -> Reply:
    try:
        operator = Operator(raw_operator)
    except ValueError as e:
        raise MalformedCallbackError(f"unknown operator {raw_operator!r}") from e
    alert = await ctx.store.get_alert(ctx.user_id, alert_id)
    condition = AlertCondition(operator=operator, value=alert.condition.value)
    updated = await ctx.store.update_alert(ctx.user_id, alert_id, condition=condition)
    return Reply(
        text=ctx.t("alert_updated", alert=format_alert_line(updated)),
        buttons=[[Button(label=ctx.t("btn_my_alerts"), data=encode("alerts", "list"))]],
    )


async def handle_alerts(token: CallbackToken, ctx: FlowContext) -> Optional[Reply]:
    sub = token.sub_action
    if sub == "list":
        return await alerts_list(ctx)
    if sub == "edit":
        return await threshold_picker(ctx, token.param(0))
    if sub == "update":
        return await update_threshold(ctx, token.param(0), token.float_param(1))
    if sub == "operator":
        return await operator_picker(ctx, token.param(0))
    if sub == "setoperator":
        return await set_operator(ctx, token.param(0), token.param(1))
    if sub == "toggle":
        alert = await ctx.store.get_alert(ctx.user_id, token.param(0))
        await ctx.store.update_alert(ctx.user_id, alert.id, is_active=not alert.is_active)
        return await alerts_list(ctx)
    if sub == "remove":
        await ctx.store.delete_alert(ctx.user_id, token.param(0))
        logger.info("User %s removed alert %s", ctx.user_id, token.param(0))
        reply = await alerts_list(ctx)
        reply.text = f"{ctx.t('alert_removed')}\n\n{reply.text}"
        return reply
    return None
