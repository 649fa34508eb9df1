"""Sequential aggregation of geo, country, weather and exchange rate lookups."""

from city_insights.aggregation.result import resolve, run_stage
from city_insights.errors import CityNotFoundError
from city_insights.logging_config import logger
from city_insights.models.exchange import ExchangeRate
from city_insights.models.record import AggregatedCityRecord
from city_insights.providers.countries import CountriesClient
from city_insights.providers.exchange_rate import ExchangeRateClient
from city_insights.providers.geodb import GeoDBClient
from city_insights.providers.openweather import OpenWeatherClient


class AggregationPipeline:
    """Build an AggregatedCityRecord from four dependent upstream calls.

    Stages run strictly in order geo -> country -> weather -> exchange. The
    first geo candidate and the first listed currency are always selected
    ("first-result-wins"). Only the exchange rate stage may fail softly.
    """

    def __init__(
        self,
        geo: GeoDBClient,
        countries: CountriesClient,
        weather: OpenWeatherClient,
        exchange: ExchangeRateClient,
    ):
        self.geo = geo
        self.countries = countries
        self.weather = weather
        self.exchange = exchange

    async def _first_city(self, city_name: str):
        candidates = await self.geo.search(city_name)
        if not candidates:
            logger.info("CITY_NOT_FOUND", city=city_name)
            raise CityNotFoundError(f"City not found: {city_name}")
        return candidates[0]

    async def aggregate(self, city_name: str) -> AggregatedCityRecord:
        """Return the aggregated record for ``city_name``.

        Args:
            city_name: City name to look up.

        Returns:
            A frozen AggregatedCityRecord. Its ``rate_to_usd`` is
            ``"Unavailable"`` when the exchange rate could not be fetched.

        Raises:
            ValueError: If ``city_name`` is blank.
            CityNotFoundError: If the geo lookup has no candidates.
            ExternalAPIError: If the geo, country or weather lookup fails.
        """
        city_name = city_name.strip()
        if not city_name:
            raise ValueError("City name must not be empty")

        city = resolve(await run_stage("geo", self._first_city(city_name)))
        country = resolve(
            await run_stage("country", self.countries.lookup(city.country_code))
        )
        weather = resolve(await run_stage("weather", self.weather.current(city)))
        currency_code = country.currency.code
        rate = resolve(
            await run_stage("exchange", self.exchange.rate(currency_code), soft=True),
            default=ExchangeRate.unavailable(currency_code, self.exchange.target),
        )

        record = AggregatedCityRecord.build(city, country, weather, rate)
        logger.info(
            "CITY_AGGREGATED",
            city=record.city,
            country=record.country,
            rate_to_usd=record.rate_to_usd,
        )
        return record
