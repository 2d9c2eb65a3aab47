"""
Alert condition model and alert records.

AlertCondition is a pure value object: an (operator, value) pair that is
stored as a small JSON blob on AlertConfig rows and evaluated against the
current reading of the alert's domain.
"""
from datetime import datetime
from enum import Enum
from typing import Dict, Optional

from pydantic import BaseModel, Field

from models.enums import AlertType, Severity


class Operator(str, Enum):
    GT = "gt"
    GTE = "gte"
    LT = "lt"
    LTE = "lte"
    EQ = "eq"

    @property
    def symbol(self) -> str:
        return OPERATOR_SYMBOLS[self]

    def compare(self, current: float, threshold: float) -> bool:
        if self is Operator.GT:
            return current > threshold
        if self is Operator.GTE:
            return current >= threshold
        if self is Operator.LT:
            return current < threshold
        if self is Operator.LTE:
            return current <= threshold
        return current == threshold


OPERATOR_SYMBOLS: Dict[Operator, str] = {
    Operator.GT: ">",
    Operator.GTE: "≥",
    Operator.LT: "<",
    Operator.LTE: "≤",
    Operator.EQ: "=",
}


class AlertCondition(BaseModel):
    operator: Operator
    value: float

    def evaluate(self, current: float) -> bool:
        return self.operator.compare(current, self.value)

    def to_json(self) -> str:
        return self.model_dump_json()

    @classmethod
    def from_json(cls, raw: str) -> "AlertCondition":
        return cls.model_validate_json(raw)

    def describe(self) -> str:
        return f"{self.operator.symbol} {self.value:g}"


class AlertConfig(BaseModel):
    """A user's configured alert (mirrors the alert_configs table)."""
    id: str
    user_id: int
    alert_type: AlertType
    condition: AlertCondition
    is_active: bool = True
    last_triggered: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def threshold(self) -> float:
        return self.condition.value


class TriggeredAlert(BaseModel):
    """An alert that fired for a user (mirrors the environmental_alerts table)."""
    id: Optional[str] = None
    user_id: int
    alert_type: AlertType
    severity: Severity
    title: str
    description: str
    value: float
    threshold: float
    created_at: datetime = Field(default_factory=datetime.utcnow)


def calculate_severity(alert_type: AlertType, current: float, threshold: float) -> Severity:
    """
    Rate how bad a triggered alert is.

    Temperature is rated by distance from the threshold, air quality by the
    absolute AQI band; every other domain is reported as Medium.
    """
    if alert_type == AlertType.TEMPERATURE:
        deviation = abs(current - threshold)
        if deviation > 15:
            return Severity.CRITICAL
        if deviation > 10:
            return Severity.HIGH
        if deviation > 5:
            return Severity.MEDIUM
        return Severity.LOW
    if alert_type == AlertType.AIR_QUALITY:
        if current > 300:
            return Severity.CRITICAL
        if current > 200:
            return Severity.HIGH
        if current > 150:
            return Severity.MEDIUM
        return Severity.LOW
    return Severity.MEDIUM
