"""Environment-driven configuration for the city insights service."""

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Upstream endpoints, credentials and tuning knobs."""

    model_config = SettingsConfigDict(env_prefix="CITY_INSIGHTS_", extra="ignore")

    log_level: str = "INFO"

    geodb_url: str = "https://wft-geo-db.p.rapidapi.com/v1/geo/cities"
    geodb_host: str = "wft-geo-db.p.rapidapi.com"
    geodb_api_key: str = ""

    countries_url: str = "https://restcountries.com/v3.1/alpha"

    openweather_url: str = "https://api.openweathermap.org/data/2.5/weather"
    openweather_api_key: str = ""
    openweather_units: str = "metric"

    exchange_url: str = "https://api.exchangerate.host/convert"
    exchange_api_key: str = ""
    exchange_target_currency: str = "USD"

    backend_url: str = "http://localhost:5000/api"
    backend_api_key: str = ""

    redis_host: str = "redis"
    redis_port: int = 6379
    redis_db: int = 0

    suggestion_limit: int = 5
    suggestion_min_chars: int = 2
    suggestion_debounce_s: float = 0.3
    recent_records_limit: int = 5

    @field_validator(
        "geodb_url", "countries_url", "openweather_url", "exchange_url", "backend_url",
        mode="after",
    )
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalize base URLs to avoid double slashes."""
        return str(v).rstrip("/")


settings = Settings()
