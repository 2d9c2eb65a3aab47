# services/alert_service.py
import logging
from datetime import datetime, timedelta
from typing import Callable, Dict, List, Optional

from config.settings import settings
from models.alert import AlertConfig, TriggeredAlert, calculate_severity
from models.enums import AlertType
from models.weather import WeatherData
from services.store import BaseStore

logger = logging.getLogger(__name__)

# alert type -> (reading, description template)
READINGS: Dict[AlertType, tuple] = {
    AlertType.TEMPERATURE: (lambda w: w.temperature, "Temperature is {value:.1f}°C"),
    AlertType.HUMIDITY: (lambda w: float(w.humidity), "Humidity is {value:.0f}%"),
    AlertType.PRESSURE: (lambda w: w.pressure, "Pressure is {value:.0f} hPa"),
    AlertType.WIND_SPEED: (lambda w: w.wind_speed, "Wind speed is {value:.1f} km/h"),
    AlertType.UV_INDEX: (lambda w: w.uv_index, "UV index is {value:.1f}"),
    AlertType.AIR_QUALITY: (lambda w: float(w.aqi) if w.aqi is not None else None, "AQI is {value:.0f}"),
}


def current_value(alert_type: AlertType, weather: WeatherData) -> Optional[float]:
    entry = READINGS.get(alert_type)
    if entry is None:
        return None
    reader: Callable[[WeatherData], Optional[float]] = entry[0]
    return reader(weather)


def in_cooldown(alert: AlertConfig, now: datetime, cooldown_seconds: int) -> bool:
    if alert.last_triggered is None:
        return False
    return now - alert.last_triggered < timedelta(seconds=cooldown_seconds)


class AlertService:
    """Evaluates a user's active alert configs against a weather reading."""

    def __init__(self, store: BaseStore, cooldown_seconds: Optional[int] = None):
        self.store = store
        self.cooldown_seconds = (
            cooldown_seconds if cooldown_seconds is not None else settings.ALERT_COOLDOWN_SECONDS
        )

    async def check_alerts(
        self, user_id: int, weather: WeatherData, now: Optional[datetime] = None
    ) -> List[TriggeredAlert]:
        now = now or datetime.utcnow()
        triggered: List[TriggeredAlert] = []
        for alert in await self.store.get_user_alerts(user_id):
            if not alert.is_active:
                continue
            value = current_value(alert.alert_type, weather)
            if value is None:
                # no reading: rain/snow/storm, or UV/AQI the provider did not return
                continue
            if not alert.condition.evaluate(value):
                continue
            if in_cooldown(alert, now, self.cooldown_seconds):
                logger.debug("Alert %s for user %s still in cooldown", alert.id, user_id)
                continue

            description_template = READINGS[alert.alert_type][1]
            record = TriggeredAlert(
                user_id=user_id,
                alert_type=alert.alert_type,
                severity=calculate_severity(alert.alert_type, value, alert.threshold),
                title=f"{alert.alert_type.display_name} Alert",
                description=description_template.format(value=value),
                value=value,
                threshold=alert.threshold,
                created_at=now,
            )
            triggered.append(await self.store.record_triggered_alert(record))
            await self.store.update_alert(user_id, alert.id, last_triggered=now)
            logger.info(
                "Alert triggered user=%s type=%s value=%s threshold=%s",
                user_id, alert.alert_type.slug, value, alert.threshold,
            )
        return triggered
