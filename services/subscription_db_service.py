"""
DB-backed subscription service using async SQLAlchemy.

- add_subscription     -> INSERT
- update_subscription  -> UPDATE is_active / time_of_day / frequency
- remove_subscription  -> DELETE (hard delete on explicit removal)
- list_*               -> SELECT scoped by user, or joined with users for the scheduler
"""

import uuid
from typing import Dict, List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from core.errors import NotFoundError
from models.db_models import Subscription as SubscriptionRow
from models.db_models import User as UserRow
from models.enums import Frequency, SubscriptionType
from models.subscription import Subscription
from models.user import User
from services.user_db_service import UserDBService
import logging

logger = logging.getLogger(__name__)


class SubscriptionDBService:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def _row(self, user_id: int, subscription_id: str) -> SubscriptionRow:
        stmt = (
            select(SubscriptionRow)
            .where(SubscriptionRow.id == subscription_id)
            .where(SubscriptionRow.user_id == user_id)
        )
        row = (await self.session.execute(stmt)).scalar_one_or_none()
        if row is None:
            raise NotFoundError(f"subscription {subscription_id} not found", message_key="error_subscription_not_found")
        return row

    async def add_subscription(
        self,
        user_id: int,
        subscription_type: SubscriptionType,
        frequency: Frequency = Frequency.DAILY,
        time_of_day: str = "08:00",
    ) -> Subscription:
        row = SubscriptionRow(
            id=str(uuid.uuid4()),
            user_id=user_id,
            subscription_type=int(subscription_type),
            frequency=int(frequency),
            time_of_day=time_of_day,
            is_active=True,
        )
        self.session.add(row)
        await self.session.commit()
        await self.session.refresh(row)
        logger.info("Subscription %s created for user %s (%s at %s)", row.id, user_id, subscription_type.name, time_of_day)
        return self._to_model(row)

    async def get_subscription(self, user_id: int, subscription_id: str) -> Subscription:
        return self._to_model(await self._row(user_id, subscription_id))

    async def update_subscription(
        self,
        user_id: int,
        subscription_id: str,
        is_active: Optional[bool] = None,
        time_of_day: Optional[str] = None,
        frequency: Optional[Frequency] = None,
    ) -> Subscription:
        row = await self._row(user_id, subscription_id)
        if is_active is not None:
            row.is_active = is_active
        if time_of_day is not None:
            row.time_of_day = time_of_day
        if frequency is not None:
            row.frequency = int(frequency)
        await self.session.commit()
        await self.session.refresh(row)
        return self._to_model(row)

    async def remove_subscription(self, user_id: int, subscription_id: str) -> None:
        row = await self._row(user_id, subscription_id)
        await self.session.delete(row)
        await self.session.commit()

    async def list_subscriptions(self, user_id: int) -> List[Subscription]:
        stmt = (
            select(SubscriptionRow)
            .where(SubscriptionRow.user_id == user_id)
            .order_by(SubscriptionRow.created_at)
        )
        result = await self.session.execute(stmt)
        return [self._to_model(s) for s in result.scalars().all()]

    async def list_active_with_users(self) -> List[Tuple[Subscription, User]]:
        """
        Equivalent to:
        SELECT ... FROM subscriptions JOIN users ON users.id = subscriptions.user_id
        WHERE subscriptions.is_active = 1 AND users.location_name <> ''
        """
        stmt = (
            select(SubscriptionRow, UserRow)
            .join(UserRow, UserRow.id == SubscriptionRow.user_id)
            .where(SubscriptionRow.is_active == True)  # noqa: E712
            .where(UserRow.is_active == True)  # noqa: E712
            .where(UserRow.location_name.is_not(None))
            .where(UserRow.location_name != "")
        )
        rows = (await self.session.execute(stmt)).all()
        return [(self._to_model(sub), UserDBService._to_model(user)) for sub, user in rows]

    async def counts(self) -> Dict[str, int]:
        total = (await self.session.execute(select(func.count()).select_from(SubscriptionRow))).scalar_one()
        active = (
            await self.session.execute(
                select(func.count()).select_from(SubscriptionRow).where(SubscriptionRow.is_active == True)  # noqa: E712
            )
        ).scalar_one()
        return {"total_subscriptions": int(total), "active_subscriptions": int(active)}

    @staticmethod
    def _to_model(sub: SubscriptionRow) -> Subscription:
        """Convert ORM Subscription to the pydantic Subscription model."""
        return Subscription(
            id=sub.id,
            user_id=sub.user_id,
            subscription_type=SubscriptionType(sub.subscription_type),
            frequency=Frequency(sub.frequency),
            time_of_day=sub.time_of_day,
            is_active=bool(sub.is_active),
            created_at=sub.created_at,
            updated_at=sub.updated_at,
        )
