# models/weather.py
from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field


class GeoLocation(BaseModel):
    name: str
    latitude: float
    longitude: float
    country: Optional[str] = None
    state: Optional[str] = None

    @property
    def display_name(self) -> str:
        return ", ".join(p for p in (self.name, self.country) if p)


class AirQualityData(BaseModel):
    aqi: int  # US EPA scale derived from PM2.5
    index: int  # provider's 1..5 index
    co: float = 0.0
    no2: float = 0.0
    o3: float = 0.0
    pm25: float = 0.0
    pm10: float = 0.0
    timestamp: datetime = Field(default_factory=datetime.utcnow)


class WeatherData(BaseModel):
    location_name: str = ""
    temperature: float
    feels_like: Optional[float] = None
    humidity: int = 0
    pressure: float = 0.0
    wind_speed: float = 0.0  # km/h
    wind_direction: int = 0
    visibility: float = 0.0  # km
    uv_index: Optional[float] = None  # None when the provider gave no reading
    description: str = ""
    icon: str = ""
    aqi: Optional[int] = None
    timestamp: datetime = Field(default_factory=datetime.utcnow)


class DailyForecast(BaseModel):
    day: date
    min_temp: float
    max_temp: float
    description: str = ""
    precipitation_chance: float = 0.0  # 0..1
