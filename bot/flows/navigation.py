"""Main menu and the back_to_start button."""
from html import escape
from typing import Optional

from bot.callback_codec import CallbackToken, encode
from bot.context import FlowContext
from models.schemas import Button, Reply


def back_button(ctx: FlowContext) -> Button:
    return Button(label=ctx.t("btn_back"), data=encode("back", "to", "start"))


def main_menu(ctx: FlowContext, name: str = "") -> Reply:
    return Reply(
        text=ctx.t("welcome", name=escape(name)) if name else ctx.t("main_menu"),
        buttons=[
            [
                Button(label=ctx.t("btn_weather"), data=encode("weather", "current")),
                Button(label=ctx.t("btn_forecast"), data=encode("forecast", "current")),
            ],
            [
                Button(label=ctx.t("btn_air"), data=encode("air", "current")),
                Button(label=ctx.t("btn_alerts"), data=encode("alerts", "list")),
            ],
            [
                Button(label=ctx.t("btn_notifications"), data=encode("notifications", "menu")),
                Button(label=ctx.t("btn_settings"), data=encode("settings", "main")),
            ],
            [Button(label=ctx.t("btn_export"), data=encode("export", "menu"))],
        ],
    )


async def handle_back(token: CallbackToken, ctx: FlowContext) -> Optional[Reply]:
    # back_to_start arrives as sub_action "to" with param "start"
    if token.sub_action == "to" and token.params[:1] == ("start",):
        return main_menu(ctx)
    return None
