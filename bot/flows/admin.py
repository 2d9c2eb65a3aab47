"""
Admin panel.

    admin_menu
    admin_stats / admin_stats_detailed           Moderator and above
    admin_users / admin_users_recent / admin_users_roles    Admin only
"""
from typing import Optional

from bot.callback_codec import CallbackToken, encode
from bot.context import FlowContext
from bot.flows.navigation import back_button
from bot.formatting import format_stats, format_user_line
from models.enums import Role
from models.schemas import Button, Reply

USER_LIST_LIMIT = 20


def _admin_back(ctx: FlowContext) -> Button:
    return Button(label=ctx.t("btn_back"), data=encode("admin", "menu"))


async def admin_menu(ctx: FlowContext) -> Reply:
    user = await ctx.require_role(Role.MODERATOR)
    rows = [[
        Button(label=ctx.t("btn_stats"), data=encode("admin", "stats")),
        Button(label=ctx.t("btn_stats_detailed"), data=encode("admin", "stats", "detailed")),
    ]]
    if user.role >= Role.ADMIN:
        rows.append([
            Button(label=ctx.t("btn_users_recent"), data=encode("admin", "users", "recent")),
            Button(label=ctx.t("btn_users_roles"), data=encode("admin", "users", "roles")),
        ])
    rows.append([back_button(ctx)])
    return Reply(text=ctx.t("admin_menu"), buttons=rows)


async def admin_stats(ctx: FlowContext, detailed: bool = False) -> Reply:
    await ctx.require_role(Role.MODERATOR)
    stats = await ctx.store.user_statistics()
    return Reply(text=format_stats(ctx, stats, detailed=detailed), buttons=[[_admin_back(ctx)]])


async def admin_users(ctx: FlowContext, view: str = "recent") -> Reply:
    await ctx.require_role(Role.ADMIN)
    users = await ctx.store.list_users(limit=USER_LIST_LIMIT)
    if view == "roles":
        # staff first, then by id
        users = sorted(users, key=lambda u: (-int(u.role), u.id))
    lines = [ctx.t("admin_users_title", count=len(users)), ""]
    lines += [format_user_line(u) for u in users] or [ctx.t("admin_users_empty")]
    lines += ["", ctx.t("admin_role_hint")]
    return Reply(text="\n".join(lines), buttons=[[_admin_back(ctx)]])


async def handle(token: CallbackToken, ctx: FlowContext) -> Optional[Reply]:
    if token.sub_action == "menu":
        return await admin_menu(ctx)
    if token.sub_action == "stats":
        return await admin_stats(ctx, detailed=token.params[:1] == ("detailed",))
    if token.sub_action == "users":
        return await admin_users(ctx, token.params[0] if token.params else "recent")
    return None
