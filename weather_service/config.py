from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # App
    app_name: str = "weather-service"
    log_level: str = "INFO"

    # Provider
    openweather_api_key: str = ""
    openweather_base_url: str = "https://api.openweathermap.org/data/2.5"
    openweather_geo_url: str = "https://api.openweathermap.org/geo/1.0"
    http_timeout_seconds: float = 5.0

    # Cache store
    cache_backend: Literal["redis", "memory"] = "redis"
    redis_url: str = "redis://localhost:6379/0"

    # Cache tuning
    cache_ttl_city_search_seconds: int = 60 * 60
    cache_ttl_current_seconds: int = 30 * 60
    cache_ttl_forecast_seconds: int = 60 * 60
    cache_coord_round_decimals: int = 4

    # Forecast aggregation
    forecast_days: int = 3
    # Bucket intervals by the city's UTC offset instead of UTC.
    forecast_use_city_timezone: bool = False


settings = Settings()
