"""
Two-step confirmation flow: propose -> confirm / ignore.

No server-side session is kept. A proposal renders two buttons whose
callback tokens carry everything needed to finish: the confirm token embeds
the full candidate value, the ignore token carries nothing. On confirm the
subclass re-validates the candidate before mutating the store; ignore never
touches the store.
"""
import logging
from typing import Any, Optional

from bot.callback_codec import CallbackToken, encode
from bot.context import FlowContext
from models.schemas import Button, Reply

logger = logging.getLogger(__name__)

CONFIRM = "confirm"


class ConfirmationFlow:
    action: str = ""
    ignore_sub_action: str = "ignore"
    confirm_label_key: str = "btn_confirm"
    ignore_label_key: str = "btn_ignore"
    ignored_message_key: str = "confirmation_ignored"

    def confirm_token(self, *candidate: Any) -> str:
        return encode(self.action, CONFIRM, *candidate)

    def ignore_token(self) -> str:
        return encode(self.action, self.ignore_sub_action)

    def propose(self, ctx: FlowContext, text: str, *candidate: Any) -> Reply:
        """Render the proposal; raises CallbackDataTooLongError if the candidate does not fit."""
        return self.proposal(ctx, text, self.confirm_token(*candidate))

    def proposal(self, ctx: FlowContext, text: str, confirm_data: str, ignore_label_key: Optional[str] = None) -> Reply:
        return Reply(
            text=text,
            buttons=[[
                Button(label=ctx.t(self.confirm_label_key), data=confirm_data),
                Button(label=ctx.t(ignore_label_key or self.ignore_label_key), data=self.ignore_token()),
            ]],
        )

    def handles(self, token: CallbackToken) -> bool:
        return token.sub_action in (CONFIRM, self.ignore_sub_action)

    async def resolve(self, token: CallbackToken, ctx: FlowContext) -> Optional[Reply]:
        if token.sub_action == CONFIRM:
            return await self.confirm(token, ctx)
        if token.sub_action == self.ignore_sub_action:
            logger.info("User %s dismissed %s proposal", ctx.user_id, self.action)
            return Reply(text=ctx.t(self.ignored_message_key))
        return None

    async def confirm(self, token: CallbackToken, ctx: FlowContext) -> Reply:
        raise NotImplementedError
