"""
Message formatting helpers (HTML parse mode).

Pure template filling: every user-supplied string goes through html.escape.
"""
from html import escape
from typing import List

from bot.context import FlowContext
from models.alert import AlertConfig
from models.subscription import Subscription
from models.user import User, UserStatistics
from models.weather import AirQualityData, DailyForecast, WeatherData

AQI_BANDS = [
    (50, "aqi_good", "🟢"),
    (100, "aqi_moderate", "🟡"),
    (150, "aqi_sensitive", "🟠"),
    (200, "aqi_unhealthy", "🔴"),
    (300, "aqi_very_unhealthy", "🟣"),
]


def aqi_label(ctx: FlowContext, aqi: int) -> str:
    for upper, key, emoji in AQI_BANDS:
        if aqi <= upper:
            return f"{emoji} {ctx.t(key)}"
    return f"🟤 {ctx.t('aqi_hazardous')}"


def temperature(value: float, units: str = "metric") -> str:
    if units == "imperial":
        return f"{value * 9 / 5 + 32:.1f}°F"
    return f"{value:.1f}°C"


def wind_speed(value_kmh: float, units: str = "metric") -> str:
    if units == "imperial":
        return f"{value_kmh / 1.609:.1f} mph"
    return f"{value_kmh:.1f} km/h"


def format_weather(ctx: FlowContext, weather: WeatherData, location_name: str, units: str = "metric") -> str:
    lines = [
        f"🌤 <b>{escape(location_name or weather.location_name)}</b>",
        f"{escape(weather.description.capitalize())}",
        "",
        f"🌡 {ctx.t('label_temperature')}: {temperature(weather.temperature, units)}",
    ]
    if weather.feels_like is not None:
        lines.append(f"🤔 {ctx.t('label_feels_like')}: {temperature(weather.feels_like, units)}")
    lines += [
        f"💧 {ctx.t('label_humidity')}: {weather.humidity}%",
        f"🧭 {ctx.t('label_pressure')}: {weather.pressure:.0f} hPa",
        f"💨 {ctx.t('label_wind')}: {wind_speed(weather.wind_speed, units)}",
        f"👁 {ctx.t('label_visibility')}: {weather.visibility:.1f} km",
    ]
    if weather.uv_index is not None:
        lines.append(f"☀️ {ctx.t('label_uv_index')}: {weather.uv_index:.1f}")
    if weather.aqi is not None:
        lines.append(f"🌬 AQI: {weather.aqi} ({aqi_label(ctx, weather.aqi)})")
    return "\n".join(lines)


def format_forecast(ctx: FlowContext, location_name: str, days: List[DailyForecast], units: str = "metric") -> str:
    lines = [f"📅 <b>{ctx.t('forecast_title', location=escape(location_name))}</b>", ""]
    for d in days:
        rain = f" ☔ {d.precipitation_chance * 100:.0f}%" if d.precipitation_chance >= 0.2 else ""
        lines.append(
            f"<b>{d.day.strftime('%a %d %b')}</b>: {temperature(d.min_temp, units)} … "
            f"{temperature(d.max_temp, units)}, {escape(d.description)}{rain}"
        )
    return "\n".join(lines)


def format_air_quality(ctx: FlowContext, location_name: str, air: AirQualityData) -> str:
    return "\n".join([
        f"🌬 <b>{ctx.t('air_title', location=escape(location_name))}</b>",
        "",
        f"AQI: <b>{air.aqi}</b> ({aqi_label(ctx, air.aqi)})",
        f"PM2.5: {air.pm25:.1f} μg/m³",
        f"PM10: {air.pm10:.1f} μg/m³",
        f"O₃: {air.o3:.1f} μg/m³",
        f"NO₂: {air.no2:.1f} μg/m³",
        f"CO: {air.co:.1f} μg/m³",
    ])


def format_alert_line(alert: AlertConfig) -> str:
    state = "✅" if alert.is_active else "⏸"
    return f"{state} {alert.alert_type.display_name} {escape(alert.condition.describe())}"


def format_subscription_line(sub: Subscription) -> str:
    state = "✅" if sub.is_active else "⏸"
    return f"{state} {sub.subscription_type.display_name}, {sub.frequency.display_name} @ {sub.time_of_day}"


def format_user_line(user: User) -> str:
    location = f" 📍 {escape(user.location_name)}" if user.location_name else ""
    return f"• <code>{user.id}</code> {escape(user.display_name)} [{user.role.display_name}]{location}"


def format_profile(ctx: FlowContext, user: User) -> str:
    units = ctx.t(f"units_{user.units}")
    return "\n".join([
        f"⚙️ <b>{ctx.t('settings_title')}</b>",
        "",
        f"📍 {ctx.t('label_location')}: {escape(user.location_name or ctx.t('value_not_set'))}",
        f"🕐 {ctx.t('label_timezone')}: {escape(user.timezone or 'UTC')}",
        f"🌐 {ctx.t('label_language')}: {ctx.i18n.language_name(user.language)}",
        f"📏 {ctx.t('label_units')}: {units}",
        f"👤 {ctx.t('label_role')}: {user.role.display_name}",
    ])


def format_stats(ctx: FlowContext, stats: UserStatistics, detailed: bool = False) -> str:
    lines = [
        f"📊 <b>{ctx.t('stats_title')}</b>",
        "",
        f"👥 {ctx.t('stats_total_users')}: {stats.total_users}",
        f"✅ {ctx.t('stats_active_users')}: {stats.active_users}",
        f"🆕 {ctx.t('stats_new_users')}: {stats.new_users_24h}",
        f"📍 {ctx.t('stats_with_location')}: {stats.users_with_location}",
    ]
    if detailed:
        lines += [
            "",
            f"🔔 {ctx.t('stats_alerts')}: {stats.active_alerts}/{stats.total_alerts}",
            f"📬 {ctx.t('stats_subscriptions')}: {stats.active_subscriptions}/{stats.total_subscriptions}",
            "",
        ]
        lines += [f"• {role}: {count}" for role, count in stats.role_counts.items()]
    return "\n".join(lines)
