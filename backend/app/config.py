"""Typed settings configuration - single source of truth."""

from functools import lru_cache

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Routing engines (empty URL = provider not configured)
    otp_transmodel_url: str = ""
    otp_plan_url: str = ""
    otp_client_name: str = "transit-planner-api"
    provider_timeout_seconds: float = 8.0
    provider_result_count: int = 3

    # Geocoding
    geocoding_url: str = "https://nominatim.openstreetmap.org/search"
    geocoding_user_agent: str = "transit-planner-api/0.1"
    geocoding_timeout_seconds: float = 5.0

    # Weather
    weather_url: str = "https://api.open-meteo.com/v1/forecast"
    weather_timeout_seconds: float = 4.0

    # Generative backend
    openai_api_key: SecretStr | None = None
    openai_model: str = "gpt-4o-mini"
    generative_timeout_seconds: float = 20.0
    ai_enhancement_enabled: bool = True
    generated_itineraries_min: int = 3
    generated_itineraries_max: int = 4

    # Fares
    per_leg_fare: float = 1.5

    # Origin used when the caller has no position (Av. Paulista, Sao Paulo)
    default_origin_lat: float = -23.5615
    default_origin_lon: float = -46.6559

    # Recent trips cache
    recent_trips_capacity: int = 10


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
