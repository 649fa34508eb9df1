"""GeoDB Cities lookup through RapidAPI."""

import httpx

from city_insights.errors import ExternalAPIError
from city_insights.logging_config import logger
from city_insights.models.city import City
from city_insights.providers.http import get_json


class GeoDBClient:
    """Resolve city names to ranked candidate cities."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        *,
        url: str,
        host: str,
        api_key: str,
        limit: int = 5,
    ):
        self._client = client
        self._url = url
        self._headers = {"X-RapidAPI-Key": api_key, "X-RapidAPI-Host": host}
        self.limit = limit

    async def search(self, name_prefix: str) -> list[City]:
        """Return up to ``limit`` cities whose name starts with ``name_prefix``.

        Args:
            name_prefix: Full or partial city name.

        Returns:
            Candidate cities in upstream relevance order, possibly empty.

        Raises:
            ExternalAPIError: If the lookup fails or the payload is invalid.
        """
        data = await get_json(
            self._client,
            url=self._url,
            params={"namePrefix": name_prefix, "limit": self.limit},
            headers=self._headers,
            event_prefix="CITY_LOOKUP",
            log_context={"city": name_prefix},
            error_message="City lookup failed",
        )
        try:
            return [City.from_api_response(entry) for entry in data.get("data") or []]
        except (AttributeError, TypeError, KeyError, ValueError) as exc:
            logger.error("CITY_LOOKUP_BAD_PAYLOAD", city=name_prefix, error=str(exc))
            raise ExternalAPIError("City lookup failed") from exc
