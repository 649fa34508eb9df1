"""exchangerate.host conversion lookup."""

import math

import httpx

from city_insights.errors import CityInsightsError, RateUnavailableError
from city_insights.logging_config import logger
from city_insights.models.exchange import ExchangeRate
from city_insights.providers.http import get_json


class ExchangeRateClient:
    """Fetch the value of one unit of a currency in the target currency."""

    def __init__(
        self, client: httpx.AsyncClient, *, url: str, api_key: str, target: str = "USD"
    ):
        self._client = client
        self._url = url
        self._api_key = api_key
        self.target = target

    async def rate(self, currency_code: str) -> ExchangeRate:
        """Return the conversion rate for ``currency_code``.

        Raises:
            RateUnavailableError: On any failure, including a ``success: false``
                body returned when the service denies the request.
        """
        try:
            data = await get_json(
                self._client,
                url=self._url,
                params={
                    "from": currency_code,
                    "to": self.target,
                    "amount": 1,
                    "access_key": self._api_key,
                },
                event_prefix="EXCHANGE_RATE",
                log_context={"currency": currency_code},
                error_message="Exchange rate lookup failed",
            )
        except CityInsightsError as exc:
            raise RateUnavailableError(str(exc)) from exc

        if not isinstance(data, dict) or data.get("success") is not True:
            error = data.get("error") if isinstance(data, dict) else None
            logger.warning("EXCHANGE_RATE_DENIED", currency=currency_code, error=error)
            raise RateUnavailableError("Exchange rate service denied the request")
        try:
            rate = float(data["result"])
        except (TypeError, KeyError, ValueError) as exc:
            logger.error("EXCHANGE_RATE_BAD_PAYLOAD", currency=currency_code, error=str(exc))
            raise RateUnavailableError("Exchange rate lookup failed") from exc
        if not math.isfinite(rate):
            logger.error("EXCHANGE_RATE_BAD_PAYLOAD", currency=currency_code, result=str(rate))
            raise RateUnavailableError("Exchange rate is not a finite number")
        return ExchangeRate(currency_code=currency_code, target=self.target, rate=rate)
