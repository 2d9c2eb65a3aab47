"""
User data export.

Builds a downloadable document (JSON, CSV or plain text) from the user's
profile plus, depending on the export type, current weather at the saved
location, alert configurations with recent triggered alerts, and
subscriptions.
"""
import csv
import io
import json
import logging
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List

from core.errors import WeatherProviderError
from models.schemas import Document
from services.store import BaseStore
from services.weather_service import WeatherService

logger = logging.getLogger(__name__)


class ExportType(str, Enum):
    WEATHER = "weather"
    ALERTS = "alerts"
    SUBSCRIPTIONS = "subscriptions"
    ALL = "all"


class ExportFormat(str, Enum):
    JSON = "json"
    CSV = "csv"
    TXT = "txt"


async def collect_export_data(
    store: BaseStore,
    weather: WeatherService,
    user_id: int,
    export_type: ExportType,
) -> Dict[str, Any]:
    user = await store.get_user(user_id)
    data: Dict[str, Any] = {
        "exported_at": datetime.utcnow().isoformat(),
        "type": export_type.value,
        "user": user.model_dump(mode="json", include={"id", "username", "language", "units", "timezone", "location_name", "latitude", "longitude"}),
    }
    if export_type in (ExportType.WEATHER, ExportType.ALL):
        data["weather"] = None
        if user.has_location:
            try:
                current = await weather.current_weather(user.latitude, user.longitude)
                data["weather"] = current.model_dump(mode="json")
            except WeatherProviderError as e:
                if export_type == ExportType.WEATHER:
                    raise
                logger.warning("Export for %s without weather: %s", user_id, e)
    if export_type in (ExportType.ALERTS, ExportType.ALL):
        alerts = await store.get_user_alerts(user_id)
        data["alerts"] = [
            {
                "id": a.id,
                "type": a.alert_type.display_name,
                "operator": a.condition.operator.value,
                "value": a.condition.value,
                "active": a.is_active,
                "last_triggered": a.last_triggered.isoformat() if a.last_triggered else None,
            }
            for a in alerts
        ]
        data["triggered_alerts"] = [
            {
                "type": t.alert_type.display_name,
                "severity": t.severity.display_name,
                "title": t.title,
                "value": t.value,
                "threshold": t.threshold,
                "at": t.created_at.isoformat(),
            }
            for t in await store.get_triggered_alerts(user_id)
        ]
    if export_type in (ExportType.SUBSCRIPTIONS, ExportType.ALL):
        data["subscriptions"] = [
            {
                "id": s.id,
                "type": s.subscription_type.display_name,
                "frequency": s.frequency.display_name,
                "time_of_day": s.time_of_day,
                "active": s.is_active,
            }
            for s in await store.get_user_subscriptions(user_id)
        ]
    return data


def _section_rows(data: Dict[str, Any]) -> List[tuple]:
    sections = []
    if data.get("weather"):
        sections.append(("weather", [data["weather"]]))
    for key in ("alerts", "triggered_alerts", "subscriptions"):
        if data.get(key):
            sections.append((key, data[key]))
    return sections


def render_csv(data: Dict[str, Any]) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf)
    writer.writerow(["section", "field", "value"])
    for field, value in data["user"].items():
        writer.writerow(["user", field, value])
    for name, rows in _section_rows(data):
        writer.writerow([])
        writer.writerow([name] + list(rows[0].keys()))
        for row in rows:
            writer.writerow([name] + list(row.values()))
    return buf.getvalue()


def render_txt(data: Dict[str, Any]) -> str:
    lines = [f"Weather bot export ({data['type']})", f"Exported at: {data['exported_at']}", ""]
    lines += [f"{field}: {value}" for field, value in data["user"].items() if value is not None]
    for name, rows in _section_rows(data):
        lines += ["", name.replace("_", " ").title(), "-" * len(name)]
        for row in rows:
            lines.append(", ".join(f"{k}={v}" for k, v in row.items()))
    return "\n".join(lines) + "\n"


async def export_user_data(
    store: BaseStore,
    weather: WeatherService,
    user_id: int,
    export_type: ExportType,
    export_format: ExportFormat,
) -> Document:
    logger.info("Starting data export user=%s type=%s format=%s", user_id, export_type.value, export_format.value)
    data = await collect_export_data(store, weather, user_id, export_type)
    if export_format == ExportFormat.JSON:
        body = json.dumps(data, indent=2, ensure_ascii=False)
    elif export_format == ExportFormat.CSV:
        body = render_csv(data)
    else:
        body = render_txt(data)
    stamp = datetime.utcnow().strftime("%Y%m%d_%H%M%S")
    filename = f"weather_bot_{export_type.value}_{stamp}.{export_format.value}"
    content = body.encode("utf-8")
    logger.info("Data export completed user=%s file=%s size=%d", user_id, filename, len(content))
    return Document(filename=filename, content=content)
