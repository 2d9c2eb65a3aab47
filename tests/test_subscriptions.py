from datetime import datetime, timezone

import pytest

from bot.router import build_router
from models.alert import AlertCondition, Operator
from models.enums import AlertType, Frequency, SubscriptionType
from workers.scheduler_worker import SchedulerWorker


class RecordingNotifier:
    def __init__(self):
        self.sent = []

    async def notify(self, chat_id, text, parse_mode="HTML"):
        self.sent.append((chat_id, text))
        return {"chat_id": chat_id, "message": text, "delivered": True}


@pytest.mark.asyncio
async def test_create_toggle_delete_through_callbacks(ctx, store):
    router = build_router()

    picker = await router.dispatch("notifications_add_weekly", ctx)
    assert "notifications_create_weekly_08:00_weekly" in picker.button_data()

    reply = await router.dispatch("notifications_create_weekly_08:00_weekly", ctx)
    subs = await store.get_user_subscriptions(ctx.user_id)
    assert len(subs) == 1
    assert subs[0].subscription_type == SubscriptionType.WEEKLY
    assert subs[0].frequency == Frequency.WEEKLY
    assert subs[0].time_of_day == "08:00"
    # no location yet, so the reply nudges the user to set one
    assert ctx.t("subscription_needs_location") in reply.text

    await router.dispatch(f"notifications_toggle_{subs[0].id}", ctx)
    assert (await store.get_subscription(ctx.user_id, subs[0].id)).is_active is False

    reply = await router.dispatch(f"notifications_delete_{subs[0].id}", ctx)
    assert await store.get_user_subscriptions(ctx.user_id) == []
    assert ctx.t("subscription_deleted") in reply.text


@pytest.mark.asyncio
async def test_invalid_time_is_refused(ctx, store):
    reply = await build_router().dispatch("notifications_create_daily_25:00_daily", ctx)
    assert reply.text.startswith("❌")
    assert await store.get_user_subscriptions(ctx.user_id) == []


@pytest.mark.asyncio
async def test_quick_subscribe_defaults_to_eight(ctx, store):
    await build_router().dispatch("subscribe_daily", ctx)
    subs = await store.get_user_subscriptions(ctx.user_id)
    assert [(s.subscription_type, s.time_of_day) for s in subs] == [(SubscriptionType.DAILY, "08:00")]


async def _located_user(ctx, store):
    await store.set_user_location(ctx.user_id, "Kyiv, UA", 50.45, 30.52)
    await store.update_user_settings(ctx.user_id, timezone="Europe/Kyiv")


@pytest.mark.asyncio
async def test_worker_delivers_due_subscriptions_in_local_time(ctx, store, weather, i18n):
    await _located_user(ctx, store)
    await store.create_subscription(ctx.user_id, SubscriptionType.DAILY, Frequency.DAILY, "08:00")
    await store.create_subscription(ctx.user_id, SubscriptionType.WEEKLY, Frequency.WEEKLY, "08:00")
    await store.create_subscription(ctx.user_id, SubscriptionType.ALERTS, Frequency.DAILY, "09:00")
    notifier = RecordingNotifier()
    worker = SchedulerWorker(store, weather, i18n, notifier=notifier)

    # Sunday 05:00 UTC is 08:00 in Kyiv
    await worker.run_subscriptions(datetime(2024, 6, 2, 5, 0, tzinfo=timezone.utc))
    texts = [text for _, text in notifier.sent]
    assert len(texts) == 2
    assert any(i18n.t("en", "scheduled_daily_title") in t for t in texts)
    assert any(i18n.t("en", "scheduled_weekly_title") in t for t in texts)

    # Saturday: only the daily one
    notifier.sent.clear()
    await worker.run_subscriptions(datetime(2024, 6, 1, 5, 0, tzinfo=timezone.utc))
    assert len(notifier.sent) == 1


@pytest.mark.asyncio
async def test_worker_sends_triggered_alerts_once_per_interval(ctx, store, weather, i18n):
    await _located_user(ctx, store)
    await store.create_alert(ctx.user_id, AlertType.TEMPERATURE, AlertCondition(operator=Operator.GT, value=20))
    notifier = RecordingNotifier()
    worker = SchedulerWorker(store, weather, i18n, notifier=notifier, alert_interval_seconds=600)

    start = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)
    await worker.tick(start)
    assert len(notifier.sent) == 1
    assert "Temperature Alert" in notifier.sent[0][1]

    # next minute: no alert check yet
    await worker.tick(datetime(2024, 6, 1, 12, 1, tzinfo=timezone.utc))
    assert len(notifier.sent) == 1


@pytest.mark.asyncio
async def test_alert_digest_escapes_conditions_once(ctx, store, weather, i18n):
    await _located_user(ctx, store)
    await store.create_alert(ctx.user_id, AlertType.HUMIDITY, AlertCondition(operator=Operator.LT, value=30))
    sub = await store.create_subscription(ctx.user_id, SubscriptionType.ALERTS, Frequency.DAILY, "09:00")
    user = await store.get_user(ctx.user_id)

    text = await SchedulerWorker(store, weather, i18n, notifier=RecordingNotifier()).compose(sub, user)
    assert "&lt; 30" in text
    assert "&amp;lt;" not in text
