"""
Subscription scheduler predicate.

should_notify is matched at minute granularity by exact "HH:MM" equality,
so the caller must evaluate it at least once in every minute; a missed
minute is not caught up later.
"""
import logging
from datetime import datetime, timezone
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from core.errors import InvalidTimezoneError
from models.enums import SubscriptionType
from models.subscription import Subscription

logger = logging.getLogger(__name__)

SUNDAY = 6  # datetime.weekday()


def should_notify(subscription: Subscription, now: datetime) -> bool:
    """Return True when ``subscription`` is due at ``now`` (already in the user's local time)."""
    if not subscription.is_active:
        return False
    if now.strftime("%H:%M") != subscription.time_of_day:
        return False
    if subscription.subscription_type == SubscriptionType.WEEKLY:
        return now.weekday() == SUNDAY
    return True


def load_timezone(name: str) -> ZoneInfo:
    """Resolve an IANA timezone name or raise InvalidTimezoneError."""
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError, OSError) as e:
        raise InvalidTimezoneError(f"unknown timezone {name!r}", timezone=name) from e


def is_valid_timezone(name: str) -> bool:
    try:
        load_timezone(name)
        return True
    except InvalidTimezoneError:
        return False


def user_local_time(now_utc: datetime, tz_name: Optional[str]) -> datetime:
    """Convert a UTC instant to the user's zone; unset or invalid zones fall back to UTC."""
    if now_utc.tzinfo is None:
        now_utc = now_utc.replace(tzinfo=timezone.utc)
    if not tz_name:
        return now_utc.astimezone(timezone.utc)
    try:
        return now_utc.astimezone(load_timezone(tz_name))
    except InvalidTimezoneError:
        logger.warning("Invalid timezone %s, using UTC", tz_name)
        return now_utc.astimezone(timezone.utc)
