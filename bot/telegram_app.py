"""
python-telegram-bot adapter.

Turns Telegram updates into FlowContext calls (commands, callback taps,
free text, shared locations) and renders the resulting Reply back:
inline keyboards for buttons, message edits for callback taps, documents
for exports. Nothing here decides anything; all behaviour lives in the
flows.
"""
import logging
from typing import Optional

from telegram import InlineKeyboardButton, InlineKeyboardMarkup, Update
from telegram.error import BadRequest, TelegramError
from telegram.ext import (
    Application,
    ApplicationBuilder,
    CallbackQueryHandler,
    CommandHandler,
    ContextTypes,
    MessageHandler,
    filters,
)

from bot.commands import COMMANDS, handle_shared_location, handle_text, run_command
from bot.context import FlowContext, build_context
from bot.router import CallbackRouter, build_router
from config.settings import settings
from core.errors import WeatherBotError
from models.schemas import Reply
from services.localization_service import LocalizationService
from services.store import BaseStore
from services.weather_service import WeatherService

logger = logging.getLogger(__name__)


def to_markup(reply: Reply) -> Optional[InlineKeyboardMarkup]:
    if not reply.buttons:
        return None
    return InlineKeyboardMarkup([
        [InlineKeyboardButton(text=b.label, callback_data=b.data) for b in row]
        for row in reply.buttons
    ])


def command_name(text: str) -> str:
    """'/weather@my_bot Kyiv' -> 'weather'"""
    return text.split()[0][1:].split("@")[0].lower()


class TelegramBot:
    def __init__(
        self,
        store: BaseStore,
        weather: WeatherService,
        i18n: LocalizationService,
        router: Optional[CallbackRouter] = None,
    ):
        self.store = store
        self.weather = weather
        self.i18n = i18n
        self.router = router or build_router()

    def build_application(self, token: Optional[str] = None) -> Application:
        application = ApplicationBuilder().token(token or settings.TELEGRAM_BOT_TOKEN).build()
        application.add_handler(CommandHandler(list(COMMANDS), self.on_command))
        application.add_handler(CallbackQueryHandler(self.on_callback))
        application.add_handler(MessageHandler(filters.LOCATION, self.on_location))
        application.add_handler(MessageHandler(filters.TEXT & ~filters.COMMAND, self.on_text))
        application.add_error_handler(self.on_error)
        return application

    async def _context(self, update: Update) -> FlowContext:
        user = update.effective_user
        return await build_context(
            self.store,
            self.weather,
            self.i18n,
            user_id=user.id,
            chat_id=update.effective_chat.id,
            username=user.username,
            first_name=user.first_name,
            last_name=user.last_name,
            language_code=user.language_code,
        )

    async def _send(self, update: Update, context: ContextTypes.DEFAULT_TYPE, reply: Reply, edit: bool = False):
        chat_id = update.effective_chat.id
        if reply.document is not None:
            await context.bot.send_document(
                chat_id=chat_id,
                document=reply.document.content,
                filename=reply.document.filename,
                caption=reply.document.caption,
            )
            return
        markup = to_markup(reply)
        if edit and update.callback_query and update.callback_query.message:
            try:
                await update.callback_query.edit_message_text(
                    text=reply.text, parse_mode=reply.parse_mode, reply_markup=markup
                )
                return
            except BadRequest as e:
                if "not modified" in str(e).lower():
                    return
                logger.warning("Edit failed (%s), sending a new message instead", e)
        await context.bot.send_message(chat_id=chat_id, text=reply.text, parse_mode=reply.parse_mode, reply_markup=markup)

    async def _handle(self, update: Update, context: ContextTypes.DEFAULT_TYPE, produce, edit: bool = False):
        try:
            ctx = await self._context(update)
        except WeatherBotError as e:
            logger.error("Could not register user %s: %s", update.effective_user.id, e)
            language = self.i18n.normalize(update.effective_user.language_code)
            await self._send(update, context, Reply(text=f"❌ {self.i18n.t(language, e.message_key)}"))
            return
        reply = await produce(ctx)
        if reply is not None:
            await self._send(update, context, reply, edit=edit)

    async def on_command(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        name = command_name(update.effective_message.text or "")
        logger.info("Command /%s from %s", name, update.effective_user.id)
        await self._handle(update, context, lambda ctx: run_command(ctx, name, list(context.args or [])))

    async def on_callback(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        query = update.callback_query
        await query.answer()
        logger.debug("Callback %r from %s", query.data, update.effective_user.id)
        await self._handle(update, context, lambda ctx: self.router.dispatch(query.data, ctx), edit=True)

    async def on_text(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        text = update.effective_message.text
        await self._handle(update, context, lambda ctx: handle_text(ctx, text))

    async def on_location(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        location = update.effective_message.location
        await self._handle(
            update, context, lambda ctx: handle_shared_location(ctx, location.latitude, location.longitude)
        )

    async def on_error(self, update: object, context: ContextTypes.DEFAULT_TYPE):
        if isinstance(context.error, TelegramError):
            logger.warning("Telegram error: %s", context.error)
            return
        logger.error("Unhandled error while processing update", exc_info=context.error)
