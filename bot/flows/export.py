"""
Export flow.

    export_menu
    export_<weather|alerts|subscriptions|all>         format picker
    export_format_<type>_<json|csv|txt>               document reply
"""
from typing import Optional

from bot.callback_codec import CallbackToken, encode
from bot.context import FlowContext
from bot.flows.navigation import back_button
from core.errors import MalformedCallbackError
from models.schemas import Button, Reply
from services.export_service import ExportFormat, ExportType, export_user_data


def _export_type(value: str) -> ExportType:
    try:
        return ExportType(value)
    except ValueError as e:
        raise MalformedCallbackError(f"unknown export type {value!r}") from e


def _export_format(value: str) -> ExportFormat:
    try:
        return ExportFormat(value)
    except ValueError as e:
        raise MalformedCallbackError(f"unknown export format {value!r}") from e


def export_menu(ctx: FlowContext) -> Reply:
    rows = [[Button(label=ctx.t(f"export_type_{t.value}"), data=encode("export", t.value))] for t in ExportType]
    rows.append([back_button(ctx)])
    return Reply(text=ctx.t("export_menu"), buttons=rows)


def format_picker(ctx: FlowContext, export_type: ExportType) -> Reply:
    row = [
        Button(label=f.value.upper(), data=encode("export", "format", export_type.value, f.value))
        for f in ExportFormat
    ]
    return Reply(
        text=ctx.t("export_choose_format", type=ctx.t(f"export_type_{export_type.value}")),
        buttons=[row, [Button(label=ctx.t("btn_back"), data=encode("export", "menu"))]],
    )


async def handle(token: CallbackToken, ctx: FlowContext) -> Optional[Reply]:
    if token.sub_action == "menu":
        return export_menu(ctx)
    if token.sub_action == "format":
        export_type = _export_type(token.param(0))
        export_format = _export_format(token.param(1))
        document = await export_user_data(ctx.store, ctx.weather, ctx.user_id, export_type, export_format)
        document.caption = ctx.t("export_ready")
        return Reply(text=ctx.t("export_ready"), document=document)
    if token.sub_action in {t.value for t in ExportType}:
        return format_picker(ctx, ExportType(token.sub_action))
    return None
