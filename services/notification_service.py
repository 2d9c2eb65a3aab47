# services/notification_service.py
import logging
from datetime import datetime
from html import escape
from typing import Any, Dict, List, Optional

from telegram import Bot
from telegram.error import TelegramError

from models.alert import TriggeredAlert
from services.localization_service import LocalizationService

logger = logging.getLogger(__name__)


def format_triggered_alert(i18n: LocalizationService, language: str, alert: TriggeredAlert) -> str:
    return i18n.t(
        language,
        "alert_triggered",
        emoji=alert.severity.emoji,
        title=escape(alert.title),
        description=escape(alert.description),
        threshold=f"{alert.threshold:g}",
        severity=alert.severity.display_name,
    )


class NotificationService:
    """
    Outbound messages that are not replies to a user action
    (scheduled summaries, triggered alerts).

    The bot is attached once the Telegram application is built; until then
    notifications are recorded as undelivered.
    """

    def __init__(self, bot: Optional[Bot] = None):
        self.bot = bot
        self.sent_notifications: List[Dict[str, Any]] = []

    def attach(self, bot: Bot) -> None:
        self.bot = bot

    async def notify(self, chat_id: int, text: str, parse_mode: str = "HTML") -> Dict[str, Any]:
        record: Dict[str, Any] = {
            "chat_id": chat_id,
            "message": text,
            "sent_at": datetime.utcnow().isoformat(),
            "delivered": False,
        }
        if self.bot is None:
            logger.warning("No bot attached, notification to %s not delivered", chat_id)
            self.sent_notifications.append(record)
            return record
        try:
            await self.bot.send_message(chat_id=chat_id, text=text, parse_mode=parse_mode)
            record["delivered"] = True
            logger.info("Notification sent to %s", chat_id)
        except TelegramError as e:
            logger.error("Notification to %s failed: %s", chat_id, e)
            record["error"] = str(e)
        self.sent_notifications.append(record)
        return record

    def recent_notifications(self) -> List[Dict[str, Any]]:
        """Return the last 20 notifications."""
        return self.sent_notifications[-20:]


# singleton
notification_service = NotificationService()
