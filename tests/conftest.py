import os
import sys
from datetime import date
from pathlib import Path

# The in-memory store is used unless a test builds its own SQL engine
os.environ["DATABASE_URL"] = "disabled"
os.environ.setdefault("OPENWEATHER_API_KEY", "test-key")

# Ensure project root is on sys.path so `bot.*`, `services.*` imports work
ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

import pytest
import pytest_asyncio

# Explicitly enable pytest-asyncio plugin for async tests/fixtures
pytest_plugins = ("pytest_asyncio",)

from bot.context import FlowContext
from core.errors import InvalidLocationError
from models.enums import Role
from models.weather import AirQualityData, DailyForecast, GeoLocation, WeatherData
from services.localization_service import LocalizationService
from services.memory_store import InMemoryStore


class FakeWeather:
    """Stands in for WeatherService; records every provider call."""

    def __init__(self):
        self.calls = []
        self.current = WeatherData(
            location_name="Kyiv",
            temperature=21.5,
            feels_like=20.0,
            humidity=55,
            pressure=1012,
            wind_speed=12.0,
            visibility=10.0,
            description="clear sky",
            aqi=42,
        )
        self.places = {
            "kyiv": GeoLocation(name="Kyiv", latitude=50.45, longitude=30.52, country="UA"),
            "london": GeoLocation(name="London", latitude=51.5074, longitude=-0.1278, country="GB"),
        }

    async def geocode(self, name):
        self.calls.append(("geocode", name))
        geo = self.places.get(name.strip().lower())
        if geo is None:
            raise InvalidLocationError(f"{name} not found", message_key="error_location_not_found", name=name)
        return geo

    async def reverse_geocode(self, lat, lon):
        self.calls.append(("reverse_geocode", lat, lon))
        return "Kyiv, UA"

    async def current_weather(self, lat, lon):
        self.calls.append(("current_weather", lat, lon))
        return self.current

    async def forecast(self, lat, lon, days=5):
        self.calls.append(("forecast", lat, lon))
        return [DailyForecast(day=date(2024, 6, 2), min_temp=14.0, max_temp=25.0, description="light rain", precipitation_chance=0.6)]

    async def air_quality(self, lat, lon):
        self.calls.append(("air_quality", lat, lon))
        return AirQualityData(aqi=42, index=1, pm25=10.0, pm10=18.0)

    async def close(self):
        return None


@pytest.fixture()
def store():
    return InMemoryStore()


@pytest.fixture()
def weather():
    return FakeWeather()


@pytest.fixture()
def i18n():
    return LocalizationService()


@pytest_asyncio.fixture()
async def make_ctx(store, weather, i18n):
    """Factory: register a user with the given role and return their FlowContext."""

    async def _make(user_id=100, role=Role.USER, first_name="Test", username=None):
        await store.register_user(user_id, username=username, first_name=first_name, language="en")
        if role != Role.USER:
            await store._set_role(user_id, role)
        return FlowContext(user_id=user_id, chat_id=user_id, store=store, weather=weather, i18n=i18n, language="en")

    return _make


@pytest_asyncio.fixture()
async def ctx(make_ctx):
    return await make_ctx()
