"""OpenWeather current conditions lookup."""

import httpx

from city_insights.errors import ExternalAPIError
from city_insights.logging_config import logger
from city_insights.models.city import City
from city_insights.models.weather import WeatherSnapshot
from city_insights.providers.http import get_json


class OpenWeatherClient:
    """Fetch current weather at a city's coordinates."""

    def __init__(
        self, client: httpx.AsyncClient, *, url: str, api_key: str, units: str = "metric"
    ):
        self._client = client
        self._url = url
        self._api_key = api_key
        self._units = units

    async def current(self, city: City) -> WeatherSnapshot:
        """Return the current conditions for ``city``.

        Raises:
            ExternalAPIError: If the lookup fails or the payload is malformed.
        """
        data = await get_json(
            self._client,
            url=self._url,
            params={
                "lat": city.latitude,
                "lon": city.longitude,
                "appid": self._api_key,
                "units": self._units,
            },
            event_prefix="WEATHER",
            log_context={"city": city.name},
            error_message="Weather lookup failed",
        )
        try:
            return WeatherSnapshot.from_api_response(data)
        except (TypeError, KeyError, IndexError, ValueError) as exc:
            logger.error("WEATHER_BAD_PAYLOAD", city=city.name, error=str(exc))
            raise ExternalAPIError("Weather lookup failed") from exc
