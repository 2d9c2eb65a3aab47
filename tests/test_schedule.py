from datetime import datetime, timezone

import pytest

from core.errors import InvalidTimezoneError
from models.enums import Frequency, SubscriptionType
from models.subscription import Subscription
from rules.schedule import is_valid_timezone, load_timezone, should_notify, user_local_time


def make_sub(kind=SubscriptionType.DAILY, time_of_day="08:00", active=True):
    return Subscription(
        id="s1",
        user_id=1,
        subscription_type=kind,
        frequency=Frequency.WEEKLY if kind == SubscriptionType.WEEKLY else Frequency.DAILY,
        time_of_day=time_of_day,
        is_active=active,
    )


def test_daily_fires_only_on_the_exact_minute():
    sub = make_sub()
    assert should_notify(sub, datetime(2024, 6, 1, 8, 0, 59))
    assert not should_notify(sub, datetime(2024, 6, 1, 8, 1))
    assert not should_notify(sub, datetime(2024, 6, 1, 7, 59))


def test_inactive_never_fires():
    assert not should_notify(make_sub(active=False), datetime(2024, 6, 1, 8, 0))


def test_weekly_fires_on_sunday_only():
    sub = make_sub(SubscriptionType.WEEKLY)
    sunday = datetime(2024, 6, 2, 8, 0)
    saturday = datetime(2024, 6, 1, 8, 0)
    assert sunday.weekday() == 6
    assert should_notify(sub, sunday)
    assert not should_notify(sub, saturday)
    assert not should_notify(sub, datetime(2024, 6, 2, 8, 1))


def test_alert_digests_fire_daily():
    sub = make_sub(SubscriptionType.ALERTS, time_of_day="20:00")
    assert should_notify(sub, datetime(2024, 6, 4, 20, 0))


def test_user_local_time_converts_and_falls_back_to_utc():
    now = datetime(2024, 6, 1, 5, 0, tzinfo=timezone.utc)
    assert user_local_time(now, "Europe/Kyiv").strftime("%H:%M") == "08:00"
    assert user_local_time(now, None).strftime("%H:%M") == "05:00"
    assert user_local_time(now, "Not/AZone").strftime("%H:%M") == "05:00"
    assert user_local_time(datetime(2024, 6, 1, 5, 0), "Europe/Kyiv").hour == 8


def test_timezone_validation():
    assert is_valid_timezone("America/New_York")
    assert not is_valid_timezone("Mars/Olympus")
    with pytest.raises(InvalidTimezoneError) as exc:
        load_timezone("Mars/Olympus")
    assert exc.value.params == {"timezone": "Mars/Olympus"}
