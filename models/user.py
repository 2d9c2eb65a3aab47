# models/user.py
from datetime import datetime
from typing import Dict, Optional

from pydantic import BaseModel

from models.enums import Role


class User(BaseModel):
    id: int  # Telegram user id
    username: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    language: str = "en"
    units: str = "metric"
    role: Role = Role.USER
    is_active: bool = True
    location_name: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    country: Optional[str] = None
    city: Optional[str] = None
    timezone: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def has_location(self) -> bool:
        return bool(self.location_name) and self.latitude is not None and self.longitude is not None

    @property
    def display_name(self) -> str:
        if self.username:
            return f"@{self.username}"
        full = " ".join(p for p in (self.first_name, self.last_name) if p)
        return full or str(self.id)


class UserStatistics(BaseModel):
    total_users: int = 0
    active_users: int = 0
    new_users_24h: int = 0
    users_with_location: int = 0
    role_counts: Dict[str, int] = {}
    total_alerts: int = 0
    active_alerts: int = 0
    total_subscriptions: int = 0
    active_subscriptions: int = 0
