"""
SQL store: the BaseStore contract over the per-table DB services.

Each operation runs in its own AsyncSession from the shared sessionmaker.
SQLAlchemy errors are rolled back, logged and re-raised as StoreError so
the router can reply with a generic "failed, try again" message.
"""
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, List, Tuple

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from core.errors import StoreError
from models.alert import AlertCondition, AlertConfig, TriggeredAlert
from models.enums import AlertType, Frequency, Role, SubscriptionType
from models.subscription import Subscription
from models.user import User, UserStatistics
from services.alert_db_service import AlertDBService
from services.store import USER_SETTING_FIELDS, BaseStore
from services.subscription_db_service import SubscriptionDBService
from services.user_db_service import UserDBService

logger = logging.getLogger(__name__)


class SQLStore(BaseStore):
    def __init__(self, session_maker: async_sessionmaker[AsyncSession]):
        self._session_maker = session_maker

    @asynccontextmanager
    async def _session(self) -> AsyncIterator[AsyncSession]:
        async with self._session_maker() as session:
            try:
                yield session
            except SQLAlchemyError as e:
                await session.rollback()
                logger.error("DB error: %s", e)
                raise StoreError(str(e)) from e

    # ---- users ----

    async def get_user(self, user_id: int) -> User:
        async with self._session() as s:
            return await UserDBService(s).get_user(user_id)

    async def register_user(self, user_id, username=None, first_name=None, last_name=None, language=None) -> User:
        async with self._session() as s:
            return await UserDBService(s).upsert_user(user_id, username, first_name, last_name, language)

    async def update_user_settings(self, user_id: int, **fields) -> User:
        unknown = set(fields) - USER_SETTING_FIELDS
        if unknown:
            raise ValueError(f"unsupported user settings: {sorted(unknown)}")
        async with self._session() as s:
            return await UserDBService(s).update_fields(user_id, **fields)

    async def set_user_location(self, user_id, name, latitude, longitude, country=None, city=None) -> User:
        async with self._session() as s:
            return await UserDBService(s).update_fields(
                user_id,
                location_name=name,
                latitude=latitude,
                longitude=longitude,
                country=country,
                city=city,
            )

    async def clear_user_location(self, user_id: int) -> User:
        async with self._session() as s:
            return await UserDBService(s).update_fields(
                user_id, location_name=None, latitude=None, longitude=None, country=None, city=None
            )

    async def list_users(self, limit: int = 20) -> List[User]:
        async with self._session() as s:
            return await UserDBService(s).list_users(limit)

    async def list_users_with_location(self) -> List[User]:
        async with self._session() as s:
            return await UserDBService(s).list_users_with_location()

    async def user_statistics(self) -> UserStatistics:
        async with self._session() as s:
            users = UserDBService(s)
            return UserStatistics(
                **(await users.counts()),
                role_counts=await users.role_counts(),
                **(await AlertDBService(s).counts()),
                **(await SubscriptionDBService(s).counts()),
            )

    async def count_admins(self) -> int:
        async with self._session() as s:
            return await UserDBService(s).count_admins()

    async def _set_role(self, user_id: int, role: Role) -> User:
        async with self._session() as s:
            return await UserDBService(s).update_fields(user_id, role=role)

    # ---- alerts ----

    async def create_alert(self, user_id: int, alert_type: AlertType, condition: AlertCondition) -> AlertConfig:
        async with self._session() as s:
            await UserDBService(s).get_user(user_id)
            return await AlertDBService(s).create_alert(user_id, alert_type, condition)

    async def get_user_alerts(self, user_id: int) -> List[AlertConfig]:
        async with self._session() as s:
            return await AlertDBService(s).list_alerts(user_id)

    async def get_alert(self, user_id: int, alert_id: str) -> AlertConfig:
        async with self._session() as s:
            return await AlertDBService(s).get_alert(user_id, alert_id)

    async def update_alert(self, user_id, alert_id, condition=None, is_active=None, last_triggered=None) -> AlertConfig:
        async with self._session() as s:
            return await AlertDBService(s).update_alert(user_id, alert_id, condition, is_active, last_triggered)

    async def delete_alert(self, user_id: int, alert_id: str) -> None:
        async with self._session() as s:
            await AlertDBService(s).delete_alert(user_id, alert_id)

    async def record_triggered_alert(self, alert: TriggeredAlert) -> TriggeredAlert:
        async with self._session() as s:
            return await AlertDBService(s).record_triggered(alert)

    async def get_triggered_alerts(self, user_id: int, limit: int = 50) -> List[TriggeredAlert]:
        async with self._session() as s:
            return await AlertDBService(s).list_triggered(user_id, limit)

    # ---- subscriptions ----

    async def create_subscription(self, user_id, subscription_type, frequency=Frequency.DAILY, time_of_day="08:00") -> Subscription:
        async with self._session() as s:
            await UserDBService(s).get_user(user_id)
            return await SubscriptionDBService(s).add_subscription(user_id, subscription_type, frequency, time_of_day)

    async def get_user_subscriptions(self, user_id: int) -> List[Subscription]:
        async with self._session() as s:
            return await SubscriptionDBService(s).list_subscriptions(user_id)

    async def get_subscription(self, user_id: int, subscription_id: str) -> Subscription:
        async with self._session() as s:
            return await SubscriptionDBService(s).get_subscription(user_id, subscription_id)

    async def update_subscription(self, user_id, subscription_id, is_active=None, time_of_day=None, frequency=None) -> Subscription:
        async with self._session() as s:
            return await SubscriptionDBService(s).update_subscription(
                user_id, subscription_id, is_active, time_of_day, frequency
            )

    async def delete_subscription(self, user_id: int, subscription_id: str) -> None:
        async with self._session() as s:
            await SubscriptionDBService(s).remove_subscription(user_id, subscription_id)

    async def get_active_subscriptions(self) -> List[Tuple[Subscription, User]]:
        async with self._session() as s:
            return await SubscriptionDBService(s).list_active_with_users()

    async def ping(self) -> bool:
        try:
            async with self._session_maker() as s:
                await s.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError as e:
            logger.error("DB ping failed: %s", e)
            return False
