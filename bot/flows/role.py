"""
Role change flow.

/promote and /demote compute the legal next role first, then propose it:

    role_confirm_<promote|demote>_<targetId>_<roleValue>
    role_cancel

On confirm only the acting admin's permission is re-checked; the target row
is re-read so the audit message shows the role it actually had. The ladder
itself is not re-validated, and a double tap applies the same value twice.
"""
import logging
from html import escape
from typing import Optional

from bot.callback_codec import CallbackToken
from bot.confirmation import ConfirmationFlow
from bot.context import FlowContext
from core.errors import MalformedCallbackError, RoleChangeError
from models.enums import Role
from models.schemas import Reply
from rules.roles import Direction, next_role

logger = logging.getLogger(__name__)


class RoleConfirmation(ConfirmationFlow):
    action = "role"
    ignore_sub_action = "cancel"
    ignore_label_key = "btn_cancel"
    ignored_message_key = "role_change_cancelled"

    async def propose_change(
        self,
        ctx: FlowContext,
        target_id: int,
        direction: Direction,
        requested: Optional[Role] = None,
    ) -> Reply:
        await ctx.require_role(Role.ADMIN)
        target = await ctx.store.get_user(target_id)
        if target.id == ctx.user_id:
            raise RoleChangeError("cannot change your own role", message_key="error_role_own")

        transition = next_role(target.role, direction, requested)
        text = ctx.t(
            f"role_confirm_{direction.value}",
            user=escape(target.display_name),
            current=transition.current.display_name,
            new=transition.new_role.display_name,
        )
        if transition.warning:
            text += "\n\n" + ctx.t("role_demote_admin_warning")
        return self.propose(ctx, text, direction.value, target.id, transition.new_role)

    async def confirm(self, token: CallbackToken, ctx: FlowContext) -> Reply:
        direction = token.param(0)
        if direction not in (Direction.PROMOTE.value, Direction.DEMOTE.value):
            raise MalformedCallbackError(f"unknown role direction {direction!r}")
        target_id = token.int_param(1)
        new_role = token.int_param(2)

        await ctx.require_role(Role.ADMIN)
        target = await ctx.store.get_user(target_id)
        updated = await ctx.store.change_user_role(ctx.user_id, target_id, new_role)

        logger.info(
            "Admin %s %sd user %s: %s -> %s",
            ctx.user_id, direction, target_id, target.role.display_name, updated.role.display_name,
        )
        return Reply(
            text=ctx.t(
                "role_changed",
                user=escape(target.display_name),
                old=target.role.display_name,
                new=updated.role.display_name,
            )
        )


role_confirmation = RoleConfirmation()


async def handle(token: CallbackToken, ctx: FlowContext) -> Optional[Reply]:
    if role_confirmation.handles(token):
        return await role_confirmation.resolve(token, ctx)
    return None
