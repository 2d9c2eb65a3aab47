"""
Closed enums shared by the store, the flows and the scheduler.

Integer values are what is persisted and what travels inside callback
tokens (e.g. role_confirm_promote_<id>_2), so they must never be renumbered.
Each enum maps to text through a table instead of per-case branching.
"""
from enum import IntEnum
from typing import Dict, Optional


class Role(IntEnum):
    USER = 1
    MODERATOR = 2
    ADMIN = 3

    @property
    def display_name(self) -> str:
        return ROLE_NAMES[self]

    @classmethod
    def parse(cls, value: str) -> Optional["Role"]:
        """Parse a role from a command argument ("mod", "admin", "2", ...)."""
        value = (value or "").strip().lower()
        if value in ROLE_ALIASES:
            return ROLE_ALIASES[value]
        if value.isdigit() and int(value) in cls._value2member_map_:
            return cls(int(value))
        return None


ROLE_NAMES: Dict[Role, str] = {
    Role.USER: "User",
    Role.MODERATOR: "Moderator",
    Role.ADMIN: "Admin",
}

ROLE_ALIASES: Dict[str, Role] = {
    "user": Role.USER,
    "moderator": Role.MODERATOR,
    "mod": Role.MODERATOR,
    "admin": Role.ADMIN,
}


class SubscriptionType(IntEnum):
    DAILY = 1
    WEEKLY = 2
    ALERTS = 3
    EXTREME = 4

    @property
    def display_name(self) -> str:
        return SUBSCRIPTION_TYPE_NAMES[self]

    @property
    def slug(self) -> str:
        return self.name.lower()

    @classmethod
    def from_slug(cls, slug: str) -> "SubscriptionType":
        return cls[slug.upper()]


SUBSCRIPTION_TYPE_NAMES: Dict[SubscriptionType, str] = {
    SubscriptionType.DAILY: "Daily Weather",
    SubscriptionType.WEEKLY: "Weekly Forecast",
    SubscriptionType.ALERTS: "Weather Alerts",
    SubscriptionType.EXTREME: "Extreme Weather",
}


class Frequency(IntEnum):
    HOURLY = 1
    EVERY_3_HOURS = 2
    EVERY_6_HOURS = 3
    DAILY = 4
    WEEKLY = 5

    @property
    def display_name(self) -> str:
        return FREQUENCY_NAMES[self]

    @property
    def slug(self) -> str:
        return FREQUENCY_SLUGS[self]

    @classmethod
    def from_slug(cls, slug: str) -> "Frequency":
        for freq, name in FREQUENCY_SLUGS.items():
            if name == slug:
                return freq
        raise KeyError(slug)


FREQUENCY_NAMES: Dict[Frequency, str] = {
    Frequency.HOURLY: "Hourly",
    Frequency.EVERY_3_HOURS: "Every 3 Hours",
    Frequency.EVERY_6_HOURS: "Every 6 Hours",
    Frequency.DAILY: "Daily",
    Frequency.WEEKLY: "Weekly",
}

# underscore-free so they can travel as a single token segment
FREQUENCY_SLUGS: Dict[Frequency, str] = {
    Frequency.HOURLY: "hourly",
    Frequency.EVERY_3_HOURS: "every3h",
    Frequency.EVERY_6_HOURS: "every6h",
    Frequency.DAILY: "daily",
    Frequency.WEEKLY: "weekly",
}


class AlertType(IntEnum):
    TEMPERATURE = 1
    HUMIDITY = 2
    PRESSURE = 3
    WIND_SPEED = 4
    UV_INDEX = 5
    AIR_QUALITY = 6
    RAIN = 7
    SNOW = 8
    STORM = 9

    @property
    def display_name(self) -> str:
        return ALERT_TYPE_NAMES[self]

    @property
    def slug(self) -> str:
        return ALERT_TYPE_SLUGS[self]

    @classmethod
    def from_slug(cls, slug: str) -> "AlertType":
        for alert_type, name in ALERT_TYPE_SLUGS.items():
            if name == slug:
                return alert_type
        raise KeyError(slug)


ALERT_TYPE_NAMES: Dict[AlertType, str] = {
    AlertType.TEMPERATURE: "Temperature",
    AlertType.HUMIDITY: "Humidity",
    AlertType.PRESSURE: "Pressure",
    AlertType.WIND_SPEED: "Wind Speed",
    AlertType.UV_INDEX: "UV Index",
    AlertType.AIR_QUALITY: "Air Quality",
    AlertType.RAIN: "Rain",
    AlertType.SNOW: "Snow",
    AlertType.STORM: "Storm",
}

ALERT_TYPE_SLUGS: Dict[AlertType, str] = {
    AlertType.TEMPERATURE: "temp",
    AlertType.HUMIDITY: "humidity",
    AlertType.PRESSURE: "pressure",
    AlertType.WIND_SPEED: "wind",
    AlertType.UV_INDEX: "uv",
    AlertType.AIR_QUALITY: "air",
    AlertType.RAIN: "rain",
    AlertType.SNOW: "snow",
    AlertType.STORM: "storm",
}


class Severity(IntEnum):
    LOW = 1
    MEDIUM = 2
    HIGH = 3
    CRITICAL = 4

    @property
    def display_name(self) -> str:
        return self.name.capitalize()

    @property
    def emoji(self) -> str:
        return SEVERITY_EMOJI[self]


SEVERITY_EMOJI: Dict[Severity, str] = {
    Severity.LOW: "🟢",
    Severity.MEDIUM: "🟡",
    Severity.HIGH: "🟠",
    Severity.CRITICAL: "🔴",
}
