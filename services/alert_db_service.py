"""
DB-backed alert service using async SQLAlchemy.

Covers both the user's alert configurations (alert_configs) and the
history of alerts that fired (environmental_alerts). Every lookup is
scoped by user_id so one user can never read or mutate another's alerts.
"""

import uuid
from datetime import datetime
from typing import Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from core.errors import NotFoundError
from models.alert import AlertCondition, AlertConfig, TriggeredAlert
from models.db_models import AlertConfig as AlertConfigRow
from models.db_models import EnvironmentalAlert as EnvironmentalAlertRow
from models.enums import AlertType, Severity
import logging

logger = logging.getLogger(__name__)


class AlertDBService:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def _row(self, user_id: int, alert_id: str) -> AlertConfigRow:
        stmt = (
            select(AlertConfigRow)
            .where(AlertConfigRow.id == alert_id)
            .where(AlertConfigRow.user_id == user_id)
        )
        row = (await self.session.execute(stmt)).scalar_one_or_none()
        if row is None:
            raise NotFoundError(f"alert {alert_id} not found", message_key="error_alert_not_found")
        return row

    async def create_alert(self, user_id: int, alert_type: AlertType, condition: AlertCondition) -> AlertConfig:
        row = AlertConfigRow(
            id=str(uuid.uuid4()),
            user_id=user_id,
            alert_type=int(alert_type),
            condition=condition.to_json(),
            threshold=condition.value,
            is_active=True,
        )
        self.session.add(row)
        await self.session.commit()
        await self.session.refresh(row)
        return self._to_model(row)

    async def list_alerts(self, user_id: int) -> List[AlertConfig]:
        stmt = (
            select(AlertConfigRow)
            .where(AlertConfigRow.user_id == user_id)
            .order_by(AlertConfigRow.created_at)
        )
        result = await self.session.execute(stmt)
        return [self._to_model(r) for r in result.scalars().all()]

    async def get_alert(self, user_id: int, alert_id: str) -> AlertConfig:
        return self._to_model(await self._row(user_id, alert_id))

    async def update_alert(
        self,
        user_id: int,
        alert_id: str,
        condition: Optional[AlertCondition] = None,
        is_active: Optional[bool] = None,
        last_triggered: Optional[datetime] = None,
    ) -> AlertConfig:
        row = await self._row(user_id, alert_id)
        if condition is not None:
            row.condition = condition.to_json()
            row.threshold = condition.value
        if is_active is not None:
            row.is_active = is_active
        if last_triggered is not None:
            row.last_triggered = last_triggered
        await self.session.commit()
        await self.session.refresh(row)
        return self._to_model(row)

    async def delete_alert(self, user_id: int, alert_id: str) -> None:
        row = await self._row(user_id, alert_id)
        await self.session.delete(row)
        await self.session.commit()

    async def record_triggered(self, alert: TriggeredAlert) -> TriggeredAlert:
        row = EnvironmentalAlertRow(
            id=alert.id or str(uuid.uuid4()),
            user_id=alert.user_id,
            alert_type=int(alert.alert_type),
            severity=int(alert.severity),
            title=alert.title,
            description=alert.description,
            value=alert.value,
            threshold=alert.threshold,
            created_at=alert.created_at,
        )
        self.session.add(row)
        await self.session.commit()
        return alert.model_copy(update={"id": row.id})

    async def list_triggered(self, user_id: int, limit: int = 50) -> List[TriggeredAlert]:
        stmt = (
            select(EnvironmentalAlertRow)
            .where(EnvironmentalAlertRow.user_id == user_id)
            .order_by(EnvironmentalAlertRow.created_at.desc())
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return [
            TriggeredAlert(
                id=r.id,
                user_id=r.user_id,
                alert_type=AlertType(r.alert_type),
                severity=Severity(r.severity),
                title=r.title,
                description=r.description or "",
                value=r.value,
                threshold=r.threshold,
                created_at=r.created_at,
            )
            for r in result.scalars().all()
        ]

    async def counts(self) -> Dict[str, int]:
        total = (await self.session.execute(select(func.count()).select_from(AlertConfigRow))).scalar_one()
        active = (
            await self.session.execute(
                select(func.count()).select_from(AlertConfigRow).where(AlertConfigRow.is_active == True)  # noqa: E712
            )
        ).scalar_one()
        return {"total_alerts": int(total), "active_alerts": int(active)}

    @staticmethod
    def _to_model(row: AlertConfigRow) -> AlertConfig:
        """Convert ORM AlertConfig to the pydantic AlertConfig model."""
        return AlertConfig(
            id=row.id,
            user_id=row.user_id,
            alert_type=AlertType(row.alert_type),
            condition=AlertCondition.from_json(row.condition),
            is_active=bool(row.is_active),
            last_triggered=row.last_triggered,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )
