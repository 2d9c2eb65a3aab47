"""
SQLAlchemy ORM models.

Purpose:
- Define users, subscriptions, alert_configs and environmental_alerts tables
- Use SQLAlchemy async-compatible models
- Support migrations via Alembic

Enums (role, subscription type, frequency, alert type, severity) are stored
as their integer values; alert conditions are stored as a small JSON text
blob ({"operator": "gt", "value": 30}).
"""

from sqlalchemy import BigInteger, Boolean, Column, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from core.db import Base
from datetime import datetime


class User(Base):
    """
    A Telegram user of the bot.

    Columns:
    - id: Telegram user id (not autoincrement)
    - role: 1=User, 2=Moderator, 3=Admin
    - location_name/latitude/longitude/country/city: saved location, all NULL when unset
    - timezone: IANA name, NULL means UTC
    - language/units: display preferences
    """
    __tablename__ = "users"

    id = Column(BigInteger, primary_key=True, autoincrement=False)
    username = Column(String(255), nullable=True, index=True)
    first_name = Column(String(255), nullable=True)
    last_name = Column(String(255), nullable=True)
    language = Column(String(10), default="en")
    units = Column(String(20), default="metric")
    role = Column(Integer, default=1, index=True, nullable=False)
    is_active = Column(Boolean, default=True, index=True)
    location_name = Column(String(255), nullable=True)
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)
    country = Column(String(100), nullable=True)
    city = Column(String(255), nullable=True)
    timezone = Column(String(64), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    subscriptions = relationship("Subscription", back_populates="user", cascade="all, delete-orphan")
    alert_configs = relationship("AlertConfig", back_populates="user", cascade="all, delete-orphan")


class Subscription(Base):
    """
    Recurring notification preference.

    Columns:
    - id: UUID string
    - subscription_type: 1=daily, 2=weekly, 3=alerts, 4=extreme
    - frequency: 1=hourly .. 5=weekly
    - time_of_day: "HH:MM" in the owner's timezone
    - is_active: toggled off instead of deleted until the user removes it
    """
    __tablename__ = "subscriptions"

    id = Column(String(36), primary_key=True)
    user_id = Column(BigInteger, ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False)
    subscription_type = Column(Integer, nullable=False)
    frequency = Column(Integer, default=4, nullable=False)
    time_of_day = Column(String(5), default="08:00", nullable=False)
    is_active = Column(Boolean, default=True, index=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = relationship("User", back_populates="subscriptions")


class AlertConfig(Base):
    """
    A user-defined alert on one weather domain.

    Columns:
    - alert_type: 1=temperature .. 9=storm
    - condition: JSON text {"operator": ..., "value": ...}
    - threshold: copy of condition.value for querying/reporting
    - last_triggered: used for the anti-spam cooldown
    """
    __tablename__ = "alert_configs"

    id = Column(String(36), primary_key=True)
    user_id = Column(BigInteger, ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False)
    alert_type = Column(Integer, nullable=False)
    condition = Column(Text, nullable=False)
    threshold = Column(Float, nullable=False)
    is_active = Column(Boolean, default=True, index=True)
    last_triggered = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = relationship("User", back_populates="alert_configs")


class EnvironmentalAlert(Base):
    """History of alerts that fired for a user."""
    __tablename__ = "environmental_alerts"

    id = Column(String(36), primary_key=True)
    user_id = Column(BigInteger, ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False)
    alert_type = Column(Integer, nullable=False)
    severity = Column(Integer, nullable=False)
    title = Column(String(255), nullable=False)
    description = Column(String(500), nullable=True)
    value = Column(Float, nullable=False)
    threshold = Column(Float, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)
