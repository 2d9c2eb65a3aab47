import httpx
import pytest

from config.settings import settings
from services.weather_service import WeatherService


class NoCache:
    async def get_json(self, key):
        return None

    async def set_json(self, key, data, ttl=300):
        return True

    async def get(self, key):
        return None

    async def set(self, key, value, ttl=300):
        return True


WEATHER_PAYLOAD = {
    "name": "Kyiv",
    "main": {"temp": 18.2, "feels_like": 17.0, "humidity": 60, "pressure": 1015},
    "wind": {"speed": 5.0, "deg": 90},
    "visibility": 10000,
    "weather": [{"description": "few clouds", "icon": "02d"}],
}


def make_service(routes):
    def handler(request: httpx.Request) -> httpx.Response:
        status, body = routes.get(request.url.path, (404, {}))
        return httpx.Response(status, json=body)

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return WeatherService(api_key="k", base_url="https://owm.test", cache=NoCache(), client=client)


@pytest.mark.asyncio
async def test_missing_air_quality_and_uv_stay_unset():
    service = make_service({
        "/data/2.5/weather": (200, WEATHER_PAYLOAD),
        "/data/2.5/air_pollution": (500, {}),
    })
    weather = await service.current_weather(50.45, 30.52)
    await service.close()
    assert weather.temperature == 18.2
    assert weather.wind_speed == 18.0
    assert weather.aqi is None
    assert weather.uv_index is None


@pytest.mark.asyncio
async def test_readings_filled_when_provider_returns_them(monkeypatch):
    monkeypatch.setattr(settings, "OPENWEATHER_ONECALL_ENABLED", True)
    service = make_service({
        "/data/2.5/weather": (200, WEATHER_PAYLOAD),
        "/data/2.5/air_pollution": (200, {"list": [{"main": {"aqi": 2}, "components": {"pm2_5": 12.0}}]}),
        "/data/3.0/onecall": (200, {"current": {"uvi": 7.5}}),
    })
    weather = await service.current_weather(50.45, 30.52)
    await service.close()
    assert weather.aqi == 50
    assert weather.uv_index == 7.5


@pytest.mark.asyncio
async def test_onecall_failure_leaves_uv_unset(monkeypatch):
    monkeypatch.setattr(settings, "OPENWEATHER_ONECALL_ENABLED", True)
    service = make_service({"/data/3.0/onecall": (401, {"message": "Invalid API key"})})
    assert await service.uv_index(50.45, 30.52) is None
    await service.close()
