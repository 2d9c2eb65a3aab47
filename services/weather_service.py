"""
OpenWeatherMap client.

Provides:
- geocode(name) / reverse_geocode(lat, lon): used by the location confirmation flow
- current_weather(lat, lon): conditions plus air quality, normalized into WeatherData
- forecast(lat, lon, days): 3-hourly forecast aggregated into DailyForecast rows
- air_quality(lat, lon): pollutant readings with a US EPA AQI derived from PM2.5

Responses are cached in Redis when it is available. Provider failures raise
WeatherProviderError and are not retried here.
"""

import logging
from collections import Counter, OrderedDict
from datetime import datetime
from typing import Any, Dict, List, Optional

import httpx

from config.settings import settings
from core.errors import InvalidLocationError, WeatherProviderError
from infra.redis_client import RedisClient, redis_client
from models.weather import AirQualityData, DailyForecast, GeoLocation, WeatherData

logger = logging.getLogger(__name__)

# (concentration low, concentration high, index low, index high)
PM25_BREAKPOINTS = [
    (0.0, 12.0, 0, 50),
    (12.1, 35.4, 51, 100),
    (35.5, 55.4, 101, 150),
    (55.5, 150.4, 151, 200),
    (150.5, 250.4, 201, 300),
    (250.5, 350.4, 301, 400),
    (350.5, 500.4, 401, 500),
]


def us_aqi_from_pm25(pm25: float) -> int:
    """Linear interpolation over the EPA PM2.5 breakpoint table."""
    concentration = max(0.0, round(pm25, 1))
    for c_lo, c_hi, i_lo, i_hi in PM25_BREAKPOINTS:
        if concentration <= c_hi:
            return round((i_hi - i_lo) / (c_hi - c_lo) * (max(concentration, c_lo) - c_lo) + i_lo)
    return 500


def _normalize_weather_response(data: Dict[str, Any]) -> WeatherData:
    """Convert raw provider JSON into a WeatherData record."""
    weather_arr = data.get("weather") or [{}]
    w0 = weather_arr[0] or {}
    main = data.get("main") or {}
    wind = data.get("wind") or {}
    try:
        return WeatherData(
            location_name=data.get("name") or "",
            temperature=float(main["temp"]),
            feels_like=main.get("feels_like"),
            humidity=int(main.get("humidity") or 0),
            pressure=float(main.get("pressure") or 0.0),
            wind_speed=round(float(wind.get("speed") or 0.0) * 3.6, 1),  # m/s -> km/h
            wind_direction=int(wind.get("deg") or 0),
            visibility=round(float(data.get("visibility") or 0) / 1000.0, 1),
            description=w0.get("description") or "",
            icon=w0.get("icon") or "",
        )
    except (KeyError, TypeError, ValueError) as e:
        raise WeatherProviderError(f"unexpected weather payload: {e}") from e


def _aggregate_forecast(data: Dict[str, Any], days: int) -> List[DailyForecast]:
    buckets: "OrderedDict[Any, List[Dict[str, Any]]]" = OrderedDict()
    for entry in data.get("list") or []:
        day = datetime.utcfromtimestamp(entry.get("dt", 0)).date()
        buckets.setdefault(day, []).append(entry)

    result = []
    for day, entries in list(buckets.items())[:days]:
        temps = [float((e.get("main") or {}).get("temp", 0.0)) for e in entries]
        descriptions = Counter(((e.get("weather") or [{}])[0] or {}).get("description", "") for e in entries)
        result.append(
            DailyForecast(
                day=day,
                min_temp=min(temps),
                max_temp=max(temps),
                description=descriptions.most_common(1)[0][0],
                precipitation_chance=max(float(e.get("pop") or 0.0) for e in entries),
            )
        )
    return result


class WeatherService:
    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        cache: Optional[RedisClient] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.api_key = api_key if api_key is not None else settings.OPENWEATHER_API_KEY
        self.base_url = (base_url or settings.OPENWEATHER_BASE_URL).rstrip("/")
        self.cache = cache if cache is not None else redis_client
        self._client = client

    def _http(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=settings.WEATHER_HTTP_TIMEOUT)
        return self._client

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _get(self, path: str, params: Dict[str, Any]) -> Any:
        if not self.api_key:
            raise WeatherProviderError("OPENWEATHER_API_KEY is not configured")
        try:
            resp = await self._http().get(f"{self.base_url}{path}", params={**params, "appid": self.api_key})
            resp.raise_for_status()
            return resp.json()
        except httpx.HTTPError as e:
            logger.error(f"Weather API request {path} failed: {e}")
            raise WeatherProviderError(f"request to {path} failed") from e
        except ValueError as e:
            logger.error(f"Weather API returned invalid JSON for {path}: {e}")
            raise WeatherProviderError(f"invalid JSON from {path}") from e

    async def geocode(self, name: str) -> GeoLocation:
        """
        Resolve a place name to coordinates.

        Raises:
            InvalidLocationError: the provider knows no such place.
            WeatherProviderError: the request itself failed.
        """
        cache_key = f"geocode:{name.strip().lower()}"
        cached = await self.cache.get_json(cache_key)
        if cached:
            return GeoLocation.model_validate(cached)

        results = await self._get("/geo/1.0/direct", {"q": name, "limit": 1})
        if not results:
            raise InvalidLocationError(f"location {name!r} not found", message_key="error_location_not_found", name=name)
        first = results[0]
        location = GeoLocation(
            name=first.get("name") or name,
            latitude=float(first["lat"]),
            longitude=float(first["lon"]),
            country=first.get("country"),
            state=first.get("state"),
        )
        await self.cache.set_json(cache_key, location.model_dump(mode="json"), ttl=settings.GEOCODE_CACHE_TTL)
        return location

    async def reverse_geocode(self, lat: float, lon: float) -> str:
        """Name for a coordinate pair; falls back to "Location (lat, lon)" on any provider failure."""
        cache_key = f"reverse_geocode:{lat:.4f}:{lon:.4f}"
        cached = await self.cache.get(cache_key)
        if cached:
            return cached
        try:
            results = await self._get("/geo/1.0/reverse", {"lat": lat, "lon": lon, "limit": 1})
        except WeatherProviderError as e:
            logger.warning(f"Reverse geocoding failed for ({lat},{lon}): {e}")
            return f"Location ({lat:.4f}, {lon:.4f})"
        if not results:
            return f"Location ({lat:.4f}, {lon:.4f})"
        first = results[0]
        name = ", ".join(p for p in (first.get("name"), first.get("country")) if p)
        await self.cache.set(cache_key, name, ttl=settings.GEOCODE_CACHE_TTL)
        return name

    async def air_quality(self, lat: float, lon: float) -> AirQualityData:
        data = await self._get("/data/2.5/air_pollution", {"lat": lat, "lon": lon})
        entries = (data or {}).get("list") or []
        if not entries:
            raise WeatherProviderError("no air quality data available")
        entry = entries[0]
        components = entry.get("components") or {}
        pm25 = float(components.get("pm2_5") or 0.0)
        return AirQualityData(
            aqi=us_aqi_from_pm25(pm25),
            index=int((entry.get("main") or {}).get("aqi") or 0),
            co=float(components.get("co") or 0.0),
            no2=float(components.get("no2") or 0.0),
            o3=float(components.get("o3") or 0.0),
            pm25=pm25,
            pm10=float(components.get("pm10") or 0.0),
        )

    async def uv_index(self, lat: float, lon: float) -> Optional[float]:
        if not settings.OPENWEATHER_ONECALL_ENABLED:
            return None
        try:
            data = await self._get(
                "/data/3.0/onecall",
                {"lat": lat, "lon": lon, "exclude": "minutely,hourly,daily,alerts"},
            )
        except WeatherProviderError as e:
            logger.warning(f"UV index unavailable for ({lat},{lon}): {e}")
            return None
        uvi = ((data or {}).get("current") or {}).get("uvi")
        return float(uvi) if uvi is not None else None

    async def current_weather(self, lat: float, lon: float) -> WeatherData:
        """Current conditions with AQI and UV filled in when the provider has them; otherwise they stay None."""
        cache_key = f"weather:{lat:.4f}:{lon:.4f}"
        cached = await self.cache.get_json(cache_key)
        if cached:
            return WeatherData.model_validate(cached)

        data = await self._get("/data/2.5/weather", {"lat": lat, "lon": lon, "units": "metric"})
        weather = _normalize_weather_response(data)
        try:
            weather.aqi = (await self.air_quality(lat, lon)).aqi
        except WeatherProviderError as e:
            logger.warning(f"Air quality unavailable for ({lat},{lon}): {e}")
        weather.uv_index = await self.uv_index(lat, lon)

        await self.cache.set_json(cache_key, weather.model_dump(mode="json"), ttl=settings.WEATHER_CACHE_TTL)
        return weather

    async def forecast(self, lat: float, lon: float, days: int = 5) -> List[DailyForecast]:
        data = await self._get("/data/2.5/forecast", {"lat": lat, "lon": lon, "units": "metric"})
        forecast = _aggregate_forecast(data or {}, days)
        if not forecast:
            raise WeatherProviderError("empty forecast")
        return forecast
