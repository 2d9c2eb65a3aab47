"""
DB-backed user service using async SQLAlchemy.

- get_user            -> SELECT by primary key (Telegram id)
- upsert_user         -> INSERT on first contact, UPDATE profile names after
- update_fields       -> UPDATE a handful of columns on one row
- list/count helpers  -> admin panel and scheduler queries
"""

from datetime import datetime, timedelta
from typing import Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from core.errors import NotFoundError
from models.db_models import User as UserRow
from models.enums import Role
from models.user import User
import logging

logger = logging.getLogger(__name__)


class UserDBService:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def _row(self, user_id: int) -> UserRow:
        row = await self.session.get(UserRow, user_id)
        if row is None:
            raise NotFoundError(f"user {user_id} not found", message_key="error_user_not_found", user_id=user_id)
        return row

    async def get_user(self, user_id: int) -> User:
        return self._to_model(await self._row(user_id))

    async def upsert_user(
        self,
        user_id: int,
        username: Optional[str] = None,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        language: Optional[str] = None,
    ) -> User:
        row = await self.session.get(UserRow, user_id)
        if row is None:
            row = UserRow(
                id=user_id,
                username=username,
                first_name=first_name,
                last_name=last_name,
                language=language or "en",
                role=int(Role.USER),
                is_active=True,
            )
            self.session.add(row)
            logger.info("Registered new user %s", user_id)
        else:
            for field, value in (("username", username), ("first_name", first_name), ("last_name", last_name)):
                if value is not None:
                    setattr(row, field, value)
        await self.session.commit()
        await self.session.refresh(row)
        return self._to_model(row)

    async def update_fields(self, user_id: int, **fields) -> User:
        row = await self._row(user_id)
        for field, value in fields.items():
            setattr(row, field, int(value) if isinstance(value, Role) else value)
        await self.session.commit()
        await self.session.refresh(row)
        return self._to_model(row)

    async def list_users(self, limit: int = 20) -> List[User]:
        stmt = select(UserRow).order_by(UserRow.created_at.desc()).limit(limit)
        result = await self.session.execute(stmt)
        return [self._to_model(r) for r in result.scalars().all()]

    async def list_users_with_location(self) -> List[User]:
        stmt = (
            select(UserRow)
            .where(UserRow.is_active == True)  # noqa: E712
            .where(UserRow.location_name.is_not(None))
            .where(UserRow.location_name != "")
        )
        result = await self.session.execute(stmt)
        return [self._to_model(r) for r in result.scalars().all()]

    async def count_admins(self) -> int:
        stmt = select(func.count()).select_from(UserRow).where(UserRow.role == int(Role.ADMIN))
        return int((await self.session.execute(stmt)).scalar_one())

    async def counts(self) -> Dict[str, int]:
        """User-table counters for the admin statistics view."""
        day_ago = datetime.utcnow() - timedelta(days=1)

        async def count(*where) -> int:
            stmt = select(func.count()).select_from(UserRow)
            for clause in where:
                stmt = stmt.where(clause)
            return int((await self.session.execute(stmt)).scalar_one())

        return {
            "total_users": await count(),
            "active_users": await count(UserRow.is_active == True),  # noqa: E712
            "new_users_24h": await count(UserRow.created_at >= day_ago),
            "users_with_location": await count(UserRow.location_name.is_not(None), UserRow.location_name != ""),
        }

    async def role_counts(self) -> Dict[str, int]:
        stmt = select(UserRow.role, func.count()).group_by(UserRow.role)
        rows = (await self.session.execute(stmt)).all()
        counts = {role.display_name: 0 for role in Role}
        for role_value, n in rows:
            if role_value in Role._value2member_map_:
                counts[Role(role_value).display_name] = int(n)
        return counts

    @staticmethod
    def _to_model(row: UserRow) -> User:
        """Convert ORM User to the pydantic User model."""
        return User(
            id=row.id,
            username=row.username,
            first_name=row.first_name,
            last_name=row.last_name,
            language=row.language or "en",
            units=row.units or "metric",
            role=Role(row.role or Role.USER),
            is_active=bool(row.is_active),
            location_name=row.location_name,
            latitude=row.latitude,
            longitude=row.longitude,
            country=row.country,
            city=row.city,
            timezone=row.timezone,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )
