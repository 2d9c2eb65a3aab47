"""
Bot entrypoint.

Responsibilities:
- Build the store (SQL or in-memory), weather provider, localization and Telegram application
- Start the scheduler worker next to update handling
- Long polling when BOT_WEBHOOK_URL is empty, otherwise serve the FastAPI webhook app under uvicorn

Run with: python main.py
"""
import asyncio
import logging
import signal
from typing import Optional

import uvicorn
from sqlalchemy.exc import SQLAlchemyError

from api.webhook import create_app
from bot.telegram_app import TelegramBot
from config.settings import settings
from core.db import create_schema, db_enabled
from core.logging import configure_logging
from infra.redis_client import redis_client
from services.localization_service import LocalizationService
from services.notification_service import notification_service
from services.store import build_store
from services.weather_service import WeatherService
from workers.scheduler_worker import SchedulerWorker

logger = logging.getLogger(__name__)


class BotRuntime:
    def __init__(self):
        self.store = build_store()
        self.weather = WeatherService()
        self.i18n = LocalizationService()
        self.bot = TelegramBot(self.store, self.weather, self.i18n)
        self.application = self.bot.build_application()
        self.scheduler = SchedulerWorker(self.store, self.weather, self.i18n)
        self._scheduler_task: Optional[asyncio.Task] = None

    @property
    def webhook_mode(self) -> bool:
        return bool(settings.BOT_WEBHOOK_URL)

    async def start(self):
        await redis_client.connect()
        if db_enabled():
            try:
                # development convenience; production schemas come from alembic
                await create_schema()
            except (SQLAlchemyError, OSError) as e:
                logger.warning("DB initialization failed on startup: %s", e)

        await self.application.initialize()
        notification_service.attach(self.application.bot)
        if self.webhook_mode:
            url = settings.BOT_WEBHOOK_URL.rstrip("/") + settings.BOT_WEBHOOK_PATH
            await self.application.bot.set_webhook(url=url, secret_token=settings.BOT_WEBHOOK_SECRET or None)
            logger.info("Webhook set to %s", url)
        else:
            await self.application.bot.delete_webhook()
            await self.application.updater.start_polling()
            logger.info("Long polling started")
        await self.application.start()
        self._scheduler_task = asyncio.create_task(self.scheduler.run())

    async def stop(self):
        self.scheduler.stop()
        if self._scheduler_task:
            await self._scheduler_task
        if self.application.updater and self.application.updater.running:
            await self.application.updater.stop()
        if self.application.running:
            await self.application.stop()
        await self.application.shutdown()
        await self.weather.close()
        await self.store.close()
        await redis_client.disconnect()
        logger.info("Bot stopped")


async def run_polling(runtime: BotRuntime):
    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, stop_event.set)
    await runtime.start()
    try:
        await stop_event.wait()
    finally:
        await runtime.stop()


async def run_webhook(runtime: BotRuntime):
    app = create_app(
        runtime.store,
        application=runtime.application,
        on_startup=runtime.start,
        on_shutdown=runtime.stop,
    )
    config = uvicorn.Config(app, host="0.0.0.0", port=settings.BOT_WEBHOOK_PORT, log_level=settings.LOG_LEVEL.lower())
    await uvicorn.Server(config).serve()


def main():
    configure_logging()
    if not settings.TELEGRAM_BOT_TOKEN:
        raise SystemExit("TELEGRAM_BOT_TOKEN is not set")
    runtime = BotRuntime()
    logger.info("Starting %s %s (%s mode)", settings.APP_NAME, settings.APP_VERSION,
                "webhook" if runtime.webhook_mode else "polling")
    if runtime.webhook_mode:
        asyncio.run(run_webhook(runtime))
    else:
        asyncio.run(run_polling(runtime))


if __name__ == "__main__":
    main()
