"""
In-memory store.

Used when DATABASE_URL is "disabled" (local runs, demos) and by the test
suite. Same contract and error behaviour as the SQL store; models are
copied on the way in and out so callers never share mutable state with
the store.
"""
import uuid
from datetime import datetime, timedelta
from typing import Dict, List, Optional, Tuple

from core.errors import NotFoundError
from models.alert import AlertCondition, AlertConfig, TriggeredAlert
from models.enums import AlertType, Frequency, Role, SubscriptionType
from models.subscription import Subscription
from models.user import User, UserStatistics
from services.store import USER_SETTING_FIELDS, BaseStore


class InMemoryStore(BaseStore):
    def __init__(self):
        self.users: Dict[int, User] = {}
        self.alerts: Dict[str, AlertConfig] = {}
        self.subscriptions: Dict[str, Subscription] = {}
        self.triggered: List[TriggeredAlert] = []

    # ---- helpers ----

    def _user(self, user_id: int) -> User:
        user = self.users.get(user_id)
        if user is None:
            raise NotFoundError(f"user {user_id} not found", message_key="error_user_not_found", user_id=user_id)
        return user

    def _save_user(self, user: User, **changes) -> User:
        updated = user.model_copy(update={**changes, "updated_at": datetime.utcnow()})
        self.users[user.id] = updated
        return updated.model_copy()

    def _owned_alert(self, user_id: int, alert_id: str) -> AlertConfig:
        alert = self.alerts.get(alert_id)
        if alert is None or alert.user_id != user_id:
            raise NotFoundError(f"alert {alert_id} not found", message_key="error_alert_not_found")
        return alert

    def _owned_subscription(self, user_id: int, subscription_id: str) -> Subscription:
        sub = self.subscriptions.get(subscription_id)
        if sub is None or sub.user_id != user_id:
            raise NotFoundError(f"subscription {subscription_id} not found", message_key="error_subscription_not_found")
        return sub

    # ---- users ----

    async def get_user(self, user_id: int) -> User:
        return self._user(user_id).model_copy()

    async def register_user(self, user_id, username=None, first_name=None, last_name=None, language=None) -> User:
        existing = self.users.get(user_id)
        if existing is None:
            now = datetime.utcnow()
            user = User(
                id=user_id,
                username=username,
                first_name=first_name,
                last_name=last_name,
                language=language or "en",
                created_at=now,
                updated_at=now,
            )
            self.users[user_id] = user
            return user.model_copy()
        profile = {"username": username, "first_name": first_name, "last_name": last_name}
        changes = {k: v for k, v in profile.items() if v is not None}
        if not changes:
            return existing.model_copy()
        return self._save_user(existing, **changes)

    async def update_user_settings(self, user_id: int, **fields) -> User:
        unknown = set(fields) - USER_SETTING_FIELDS
        if unknown:
            raise ValueError(f"unsupported user settings: {sorted(unknown)}")
        return self._save_user(self._user(user_id), **fields)

    async def set_user_location(self, user_id, name, latitude, longitude, country=None, city=None) -> User:
        return self._save_user(
            self._user(user_id),
            location_name=name,
            latitude=latitude,
            longitude=longitude,
            country=country,
            city=city,
        )

    async def clear_user_location(self, user_id: int) -> User:
        return self._save_user(
            self._user(user_id),
            location_name=None,
            latitude=None,
            longitude=None,
            country=None,
            city=None,
        )

    async def list_users(self, limit: int = 20) -> List[User]:
        users = sorted(self.users.values(), key=lambda u: u.created_at or datetime.min, reverse=True)
        return [u.model_copy() for u in users[:limit]]

    async def list_users_with_location(self) -> List[User]:
        return [u.model_copy() for u in self.users.values() if u.is_active and u.has_location]

    async def user_statistics(self) -> UserStatistics:
        day_ago = datetime.utcnow() - timedelta(days=1)
        users = list(self.users.values())
        role_counts = {role.display_name: 0 for role in Role}
        for u in users:
            role_counts[u.role.display_name] += 1
        return UserStatistics(
            total_users=len(users),
            active_users=sum(1 for u in users if u.is_active),
            new_users_24h=sum(1 for u in users if u.created_at and u.created_at >= day_ago),
            users_with_location=sum(1 for u in users if u.has_location),
            role_counts=role_counts,
            total_alerts=len(self.alerts),
            active_alerts=sum(1 for a in self.alerts.values() if a.is_active),
            total_subscriptions=len(self.subscriptions),
            active_subscriptions=sum(1 for s in self.subscriptions.values() if s.is_active),
        )

    async def count_admins(self) -> int:
        return sum(1 for u in self.users.values() if u.role == Role.ADMIN)

    async def _set_role(self, user_id: int, role: Role) -> User:
        return self._save_user(self._user(user_id), role=role)

    # ---- alerts ----

    async def create_alert(self, user_id: int, alert_type: AlertType, condition: AlertCondition) -> AlertConfig:
        self._user(user_id)
        now = datetime.utcnow()
        alert = AlertConfig(
            id=str(uuid.uuid4()),
            user_id=user_id,
            alert_type=alert_type,
            condition=condition,
            created_at=now,
            updated_at=now,
        )
        self.alerts[alert.id] = alert
        return alert.model_copy()

    async def get_user_alerts(self, user_id: int) -> List[AlertConfig]:
        alerts = [a for a in self.alerts.values() if a.user_id == user_id]
        return [a.model_copy() for a in sorted(alerts, key=lambda a: a.created_at or datetime.min)]

    async def get_alert(self, user_id: int, alert_id: str) -> AlertConfig:
        return self._owned_alert(user_id, alert_id).model_copy()

    async def update_alert(self, user_id, alert_id, condition=None, is_active=None, last_triggered=None) -> AlertConfig:
        alert = self._owned_alert(user_id, alert_id)
        changes = {"updated_at": datetime.utcnow()}
        if condition is not None:
            changes["condition"] = condition
        if is_active is not None:
            changes["is_active"] = is_active
        if last_triggered is not None:
            changes["last_triggered"] = last_triggered
        updated = alert.model_copy(update=changes)
        self.alerts[alert_id] = updated
        return updated.model_copy()

    async def delete_alert(self, user_id: int, alert_id: str) -> None:
        self._owned_alert(user_id, alert_id)
        del self.alerts[alert_id]

    async def record_triggered_alert(self, alert: TriggeredAlert) -> TriggeredAlert:
        stored = alert.model_copy(update={"id": alert.id or str(uuid.uuid4())})
        self.triggered.append(stored)
        return stored.model_copy()

    async def get_triggered_alerts(self, user_id: int, limit: int = 50) -> List[TriggeredAlert]:
        mine = [a for a in self.triggered if a.user_id == user_id]
        mine.sort(key=lambda a: a.created_at, reverse=True)
        return [a.model_copy() for a in mine[:limit]]

    # ---- subscriptions ----

    async def create_subscription(self, user_id, subscription_type, frequency=Frequency.DAILY, time_of_day="08:00") -> Subscription:
        self._user(user_id)
        now = datetime.utcnow()
        sub = Subscription(
            id=str(uuid.uuid4()),
            user_id=user_id,
            subscription_type=subscription_type,
            frequency=frequency,
            time_of_day=time_of_day,
            created_at=now,
            updated_at=now,
        )
        self.subscriptions[sub.id] = sub
        return sub.model_copy()

    async def get_user_subscriptions(self, user_id: int) -> List[Subscription]:
        subs = [s for s in self.subscriptions.values() if s.user_id == user_id]
        return [s.model_copy() for s in sorted(subs, key=lambda s: s.created_at or datetime.min)]

    async def get_subscription(self, user_id: int, subscription_id: str) -> Subscription:
        return self._owned_subscription(user_id, subscription_id).model_copy()

    async def update_subscription(self, user_id, subscription_id, is_active=None, time_of_day=None, frequency=None) -> Subscription:
        sub = self._owned_subscription(user_id, subscription_id)
        changes = {"updated_at": datetime.utcnow()}
        if is_active is not None:
            changes["is_active"] = is_active
        if time_of_day is not None:
            changes["time_of_day"] = time_of_day
        if frequency is not None:
            changes["frequency"] = frequency
        updated = sub.model_copy(update=changes)
        self.subscriptions[subscription_id] = updated
        return updated.model_copy()

    async def delete_subscription(self, user_id: int, subscription_id: str) -> None:
        self._owned_subscription(user_id, subscription_id)
        del self.subscriptions[subscription_id]

    async def get_active_subscriptions(self) -> List[Tuple[Subscription, User]]:
        result = []
        for sub in self.subscriptions.values():
            user = self.users.get(sub.user_id)
            if sub.is_active and user is not None and user.is_active and user.has_location:
                result.append((sub.model_copy(), user.model_copy()))
        return result
