from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from typing import Optional

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # App
    app_name: str = Field(default="Flight Risk Dispatcher")
    env: str = Field(default="development")
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="console")  # console | json

    # Network safety
    http_timeout_seconds: float = Field(default=12.0)

    # Rate limiting (per instance)
    rate_limit_per_minute: int = Field(default=30)

    # Weather provider (OpenWeather current weather)
    weather_api_url: str = Field(default="https://api.openweathermap.org/data/2.5/weather")
    openweather_api_key: Optional[str] = None
    weather_lang: str = Field(default="en")

    # Observations older than this are refetched
    weather_cache_ttl_seconds: int = Field(default=600)

    # Flight history
    flights_path: str = Field(default="/tmp/flightrisk/flights.json")

    # Ephemeral map storage
    maps_dir: str = Field(default="/tmp/flightrisk_maps")
    map_ttl_seconds: int = Field(default=3600)

settings = Settings()
