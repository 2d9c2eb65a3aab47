# models/subscription.py
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from models.enums import Frequency, SubscriptionType


class Subscription(BaseModel):
    id: str
    user_id: int
    subscription_type: SubscriptionType
    frequency: Frequency = Frequency.DAILY
    time_of_day: str = Field("08:00", pattern=r"^\d{2}:\d{2}$")  # HH:MM in the user's timezone
    is_active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
