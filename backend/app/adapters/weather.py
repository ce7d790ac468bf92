"""Weather adapter using Open-Meteo API (keyless, free tier)."""

import httpx
from pydantic import BaseModel

from backend.app.models.common import Coordinates
from backend.app.models.query import WeatherSnapshot

RAIN_PROBABILITY_THRESHOLD = 50

# WMO weather interpretation codes -> condition label
_WMO_CONDITIONS: dict[int, str] = {
    0: "Clear",
    1: "Mainly Clear",
    2: "Partly Cloudy",
    3: "Overcast",
    45: "Fog",
    48: "Fog",
    51: "Drizzle",
    53: "Drizzle",
    55: "Drizzle",
    56: "Freezing Drizzle",
    57: "Freezing Drizzle",
    61: "Rain",
    63: "Rain",
    65: "Heavy Rain",
    66: "Freezing Rain",
    67: "Freezing Rain",
    71: "Snow",
    73: "Snow",
    75: "Heavy Snow",
    77: "Snow Grains",
    80: "Rain Showers",
    81: "Rain Showers",
    82: "Heavy Rain Showers",
    85: "Snow Showers",
    86: "Snow Showers",
    95: "Thunderstorm",
    96: "Thunderstorm",
    99: "Thunderstorm",
}


class OpenMeteoCurrent(BaseModel):
    temperature_2m: float | None = None
    relative_humidity_2m: float | None = None
    weather_code: int | None = None


class OpenMeteoHourly(BaseModel):
    precipitation_probability: list[float | None] = []


class OpenMeteoForecast(BaseModel):
    """Subset of the Open-Meteo forecast body this adapter reads."""

    current: OpenMeteoCurrent
    hourly: OpenMeteoHourly | None = None


def condition_for_code(code: int | None) -> str:
    if code is None:
        return "Unknown"
    return _WMO_CONDITIONS.get(code, "Unknown")


def default_weather() -> WeatherSnapshot:
    """Neutral snapshot used when live weather is unavailable."""
    return WeatherSnapshot(temperature_c=20.0, condition="Unknown", humidity=None, rain_next_hour=False)


async def fetch_current_weather(
    location: Coordinates,
    base_url: str = "https://api.open-meteo.com/v1/forecast",
    client: httpx.AsyncClient | None = None,
    timeout_seconds: float = 4.0,
) -> WeatherSnapshot:
    """Fetch current conditions and next-hour rain probability from Open-Meteo.

    Args:
        location: Geographic coordinates
        base_url: Open-Meteo API base URL
        client: Optional httpx client (for testing with mocks)
        timeout_seconds: Request timeout

    Returns:
        WeatherSnapshot for the location

    Raises:
        httpx.HTTPError: On network or HTTP errors
        ValueError: If the body is not JSON or does not match the forecast shape
            (pydantic ``ValidationError`` is a ``ValueError``)
    """
    # Docs: https://open-meteo.com/en/docs
    params: dict[str, str | float | int] = {
        "latitude": location.lat,
        "longitude": location.lon,
        "current": "temperature_2m,relative_humidity_2m,weather_code",
        "hourly": "precipitation_probability",
        "forecast_hours": 1,
        "timezone": "UTC",
    }

    close_client = False
    if client is None:
        client = httpx.AsyncClient(timeout=timeout_seconds)
        close_client = True

    try:
        response = await client.get(base_url, params=params)
        response.raise_for_status()
        # Response structure: {current: {...}, hourly: {time: [...], precipitation_probability: [...]}}
        forecast = OpenMeteoForecast.model_validate(response.json())
        current = forecast.current
        temperature = current.temperature_2m
        humidity = current.relative_humidity_2m

        rain_probs = forecast.hourly.precipitation_probability if forecast.hourly else []
        rain_next_hour = any(p is not None and p >= RAIN_PROBABILITY_THRESHOLD for p in rain_probs)

        return WeatherSnapshot(
            temperature_c=temperature if temperature is not None else 20.0,
            condition=condition_for_code(current.weather_code),
            # Open-Meteo humidity is 0-100, we want 0.0-1.0
            humidity=humidity / 100.0 if humidity is not None else None,
            rain_next_hour=rain_next_hour,
        )
    finally:
        if close_client:
            await client.aclose()
