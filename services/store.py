"""
Store contract shared by the SQL store and the in-memory fallback.

All operations are by-id lookups and single-row mutations keyed by the
Telegram user id (users) or a UUID string (alerts, subscriptions). Missing
rows raise NotFoundError; backend failures raise StoreError.
"""
import logging
from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional, Tuple

from models.alert import AlertCondition, AlertConfig, TriggeredAlert
from models.enums import AlertType, Frequency, Role, SubscriptionType
from models.subscription import Subscription
from models.user import User, UserStatistics
from rules.roles import check_role_change

logger = logging.getLogger(__name__)

USER_SETTING_FIELDS = {"language", "units", "timezone"}


class BaseStore(ABC):

    # ---- users ----

    @abstractmethod
    async def get_user(self, user_id: int) -> User: ...

    @abstractmethod
    async def register_user(
        self,
        user_id: int,
        username: Optional[str] = None,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        language: Optional[str] = None,
    ) -> User:
        """Create the user on first contact, refresh profile names afterwards."""

    @abstractmethod
    async def update_user_settings(self, user_id: int, **fields) -> User: ...

    @abstractmethod
    async def set_user_location(
        self,
        user_id: int,
        name: str,
        latitude: float,
        longitude: float,
        country: Optional[str] = None,
        city: Optional[str] = None,
    ) -> User: ...

    @abstractmethod
    async def clear_user_location(self, user_id: int) -> User: ...

    @abstractmethod
    async def list_users(self, limit: int = 20) -> List[User]:
        """Most recently created users first."""

    @abstractmethod
    async def list_users_with_location(self) -> List[User]: ...

    @abstractmethod
    async def user_statistics(self) -> UserStatistics: ...

    @abstractmethod
    async def count_admins(self) -> int: ...

    @abstractmethod
    async def _set_role(self, user_id: int, role: Role) -> User: ...

    async def change_user_role(self, acting_admin_id: int, target_id: int, new_role: int) -> User:
        """
        Apply a role change on behalf of an admin.

        Raises:
            PermissionDeniedError: acting user is not an Admin.
            NotFoundError: acting or target user does not exist.
            RoleChangeError: own role, invalid value, or last admin.
        """
        actor = await self.get_user(acting_admin_id)
        target = await self.get_user(target_id)
        role = check_role_change(actor, target, new_role, await self.count_admins())
        updated = await self._set_role(target_id, role)
        logger.info(
            "Role changed: admin=%s target=%s %s -> %s",
            acting_admin_id, target_id, target.role.display_name, role.display_name,
        )
        return updated

    # ---- alerts ----

    @abstractmethod
    async def create_alert(self, user_id: int, alert_type: AlertType, condition: AlertCondition) -> AlertConfig: ...

    @abstractmethod
    async def get_user_alerts(self, user_id: int) -> List[AlertConfig]: ...

    @abstractmethod
    async def get_alert(self, user_id: int, alert_id: str) -> AlertConfig: ...

    @abstractmethod
    async def update_alert(
        self,
        user_id: int,
        alert_id: str,
        condition: Optional[AlertCondition] = None,
        is_active: Optional[bool] = None,
        last_triggered: Optional[datetime] = None,
    ) -> AlertConfig: ...

    @abstractmethod
    async def delete_alert(self, user_id: int, alert_id: str) -> None: ...

    @abstractmethod
    async def record_triggered_alert(self, alert: TriggeredAlert) -> TriggeredAlert: ...

    @abstractmethod
    async def get_triggered_alerts(self, user_id: int, limit: int = 50) -> List[TriggeredAlert]: ...

    # ---- subscriptions ----

    @abstractmethod
    async def create_subscription(
        self,
        user_id: int,
        subscription_type: SubscriptionType,
        frequency: Frequency = Frequency.DAILY,
        time_of_day: str = "08:00",
    ) -> Subscription: ...

    @abstractmethod
    async def get_user_subscriptions(self, user_id: int) -> List[Subscription]: ...

    @abstractmethod
    async def get_subscription(self, user_id: int, subscription_id: str) -> Subscription: ...

    @abstractmethod
    async def update_subscription(
        self,
        user_id: int,
        subscription_id: str,
        is_active: Optional[bool] = None,
        time_of_day: Optional[str] = None,
        frequency: Optional[Frequency] = None,
    ) -> Subscription: ...

    @abstractmethod
    async def delete_subscription(self, user_id: int, subscription_id: str) -> None: ...

    @abstractmethod
    async def get_active_subscriptions(self) -> List[Tuple[Subscription, User]]:
        """Active subscriptions whose owner has a saved location."""

    async def ping(self) -> bool:
        return True

    async def close(self) -> None:
        return None


def build_store() -> BaseStore:
    """SQL store when a DB engine is configured, in-memory otherwise."""
    from core.db import async_session_maker

    if async_session_maker is not None:
        from services.sql_store import SQLStore

        return SQLStore(async_session_maker)

    from services.memory_store import InMemoryStore

    logger.warning("Using in-memory store; data will not survive a restart")
    return InMemoryStore()
