"""RestCountries lookup for country names and currencies."""

import httpx

from city_insights.errors import ExternalAPIError
from city_insights.logging_config import logger
from city_insights.models.country import Country
from city_insights.providers.http import get_json


class CountriesClient:
    """Resolve country codes to a country name and its first currency."""

    def __init__(self, client: httpx.AsyncClient, *, url: str):
        self._client = client
        self._url = url

    async def lookup(self, country_code: str) -> Country:
        """Fetch country details for ``country_code``.

        Raises:
            ExternalAPIError: If the lookup fails or lists no currency.
        """
        data = await get_json(
            self._client,
            url=f"{self._url}/{country_code}",
            params={},
            event_prefix="COUNTRY_LOOKUP",
            log_context={"country_code": country_code},
            error_message="Country lookup failed",
        )
        try:
            return Country.from_api_response(country_code, data)
        except (AttributeError, TypeError, KeyError, IndexError, ValueError) as exc:
            logger.error(
                "COUNTRY_LOOKUP_BAD_PAYLOAD", country_code=country_code, error=str(exc)
            )
            raise ExternalAPIError("Country lookup failed") from exc
