"""
Scheduled notification worker.

Purpose:
- Every minute, deliver the subscriptions that are due in each user's local time
- Periodically check weather alerts for users with a saved location
- Deliver through the Telegram bot attached to the notification service

Usage:
- started alongside the bot by main.py
- python -m workers.scheduler_worker (standalone, needs TELEGRAM_BOT_TOKEN)

The subscription predicate matches exact HH:MM, so the tick must not be
longer than a minute; a missed minute is not caught up.
"""
import asyncio
import logging
import time
from datetime import datetime, timezone
from typing import Optional

from bot.context import FlowContext
from bot.formatting import format_alert_line, format_forecast, format_weather
from config.settings import settings
from core.errors import WeatherBotError
from models.enums import SubscriptionType
from models.subscription import Subscription
from models.user import User
from rules.schedule import should_notify, user_local_time
from services.alert_service import AlertService
from services.localization_service import LocalizationService
from services.notification_service import (
    NotificationService,
    format_triggered_alert,
    notification_service,
)
from services.store import BaseStore
from services.weather_service import WeatherService

logger = logging.getLogger(__name__)


class SchedulerWorker:
    def __init__(
        self,
        store: BaseStore,
        weather: WeatherService,
        i18n: LocalizationService,
        notifier: Optional[NotificationService] = None,
        tick_seconds: Optional[int] = None,
        alert_interval_seconds: Optional[int] = None,
    ):
        self.store = store
        self.weather = weather
        self.i18n = i18n
        self.notifier = notifier or notification_service
        self.alerts = AlertService(store)
        self.tick_seconds = tick_seconds or settings.SCHEDULER_TICK_SECONDS
        self.alert_interval_seconds = alert_interval_seconds or settings.ALERT_CHECK_INTERVAL_SECONDS
        self._last_alert_check: Optional[datetime] = None
        self._stopping = asyncio.Event()
        self.sent = 0
        self.failed = 0

    def _context(self, user: User) -> FlowContext:
        return FlowContext(
            user_id=user.id,
            chat_id=user.id,
            store=self.store,
            weather=self.weather,
            i18n=self.i18n,
            language=self.i18n.normalize(user.language),
        )

    async def compose(self, subscription: Subscription, user: User) -> Optional[str]:
        """Build the message for a due subscription, or None when there is nothing to send."""
        ctx = self._context(user)
        kind = subscription.subscription_type
        if kind in (SubscriptionType.DAILY, SubscriptionType.WEEKLY):
            if not user.has_location:
                return ctx.t("subscription_needs_location")
            if kind == SubscriptionType.DAILY:
                current = await self.weather.current_weather(user.latitude, user.longitude)
                body = format_weather(ctx, current, user.location_name, user.units)
                return f"<b>{ctx.t('scheduled_daily_title')}</b>\n\n{body}"
            days = await self.weather.forecast(user.latitude, user.longitude)
            body = format_forecast(ctx, user.location_name, days, user.units)
            return f"<b>{ctx.t('scheduled_weekly_title')}</b>\n\n{body}"

        active = [a for a in await self.store.get_user_alerts(user.id) if a.is_active]
        lines = [f"<b>{ctx.t('scheduled_alerts_title')}</b>", ""]
        if not active:
            lines.append(ctx.t("scheduled_no_alerts"))
        lines += [format_alert_line(a) for a in active]
        return "\n".join(lines)

    async def run_subscriptions(self, now_utc: datetime) -> int:
        due = 0
        for subscription, user in await self.store.get_active_subscriptions():
            local_now = user_local_time(now_utc, user.timezone)
            if not should_notify(subscription, local_now):
                continue
            due += 1
            try:
                text = await self.compose(subscription, user)
            except WeatherBotError as e:
                logger.error("Subscription %s for user %s failed: %s", subscription.id, user.id, e)
                self.failed += 1
                continue
            if text:
                result = await self.notifier.notify(user.id, text)
                if result["delivered"]:
                    self.sent += 1
                else:
                    self.failed += 1
        if due:
            logger.info("Processed %d due subscriptions at %s", due, now_utc.strftime("%H:%M"))
        return due

    async def run_alert_checks(self, now_utc: datetime) -> int:
        triggered_total = 0
        naive_now = now_utc.astimezone(timezone.utc).replace(tzinfo=None)
        for user in await self.store.list_users_with_location():
            if not user.is_active:
                continue
            try:
                current = await self.weather.current_weather(user.latitude, user.longitude)
                triggered = await self.alerts.check_alerts(user.id, current, now=naive_now)
            except WeatherBotError as e:
                logger.error("Alert check for user %s failed: %s", user.id, e)
                continue
            language = self.i18n.normalize(user.language)
            for alert in triggered:
                await self.notifier.notify(user.id, format_triggered_alert(self.i18n, language, alert))
            triggered_total += len(triggered)
        return triggered_total

    def _alert_check_due(self, now_utc: datetime) -> bool:
        if self._last_alert_check is None:
            return True
        return (now_utc - self._last_alert_check).total_seconds() >= self.alert_interval_seconds

    async def tick(self, now_utc: Optional[datetime] = None) -> None:
        now_utc = now_utc or datetime.now(timezone.utc)
        await self.run_subscriptions(now_utc)
        if self._alert_check_due(now_utc):
            self._last_alert_check = now_utc
            await self.run_alert_checks(now_utc)

    def _seconds_to_next_tick(self) -> float:
        # aligned to wall-clock boundaries so no minute is skipped by drift
        return self.tick_seconds - (time.time() % self.tick_seconds)

    def stop(self) -> None:
        self._stopping.set()

    async def run(self):
        """Tick until stop() is called. A failing tick is logged and the loop continues."""
        logger.info("Scheduler worker started (tick=%ss)", self.tick_seconds)
        while not self._stopping.is_set():
            try:
                await self.tick()
            except Exception as e:
                logger.exception("Scheduler tick failed: %s", e)
            try:
                await asyncio.wait_for(self._stopping.wait(), timeout=self._seconds_to_next_tick())
            except asyncio.TimeoutError:
                pass
        logger.info("Scheduler worker stopped. Sent: %s, Failed: %s", self.sent, self.failed)


async def main():
    """Entry point for running the worker without the bot's update handling."""
    from telegram import Bot

    from services.store import build_store

    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    store = build_store()
    weather = WeatherService()
    bot = Bot(settings.TELEGRAM_BOT_TOKEN)
    notification_service.attach(bot)
    worker = SchedulerWorker(store, weather, LocalizationService())
    try:
        async with bot:
            await worker.run()
    finally:
        await weather.close()
        await store.close()


if __name__ == "__main__":
    asyncio.run(main())
