"""Aggregated city record and the payload shapes exchanged with the backend."""

import math
from datetime import datetime

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from city_insights.models.city import City
from city_insights.models.country import Country
from city_insights.models.exchange import ExchangeRate
from city_insights.models.weather import WeatherSnapshot, weather_icon


def format_population(population: int) -> str:
    """Return the population with thousands separators, e.g. ``2,148,000``."""
    return f"{population:,}"


def round_half_up(value: float) -> int:
    """Round to the nearest integer, with halves rounded towards +inf."""
    return math.floor(value + 0.5)


class CamelModel(BaseModel):
    """Base model serialized with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AggregatedCityRecord(CamelModel):
    """Immutable merge of geo, country, weather and exchange rate lookups."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True
    )

    city: str
    country: str
    population: str
    raw_population: int
    weather: str
    temp: int
    feels_like: int
    humidity: int
    weather_main: str
    weather_icon: str
    currency_code: str
    currency_name: str
    rate_to_usd: str = Field(alias="rateToUSD")
    timezone: str | None = None
    latitude: float
    longitude: float

    @classmethod
    def build(
        cls,
        city: City,
        country: Country,
        weather: WeatherSnapshot,
        rate: ExchangeRate,
    ) -> "AggregatedCityRecord":
        """Merge the intermediate lookups into a display-ready record.

        Args:
            city: Selected geo lookup candidate.
            country: Country with its selected currency.
            weather: Current conditions at the city coordinates.
            rate: Exchange rate for the selected currency.

        Returns:
            A frozen AggregatedCityRecord.
        """
        return cls(
            city=city.name,
            country=country.name,
            population=format_population(city.population),
            raw_population=city.population,
            weather=weather.description,
            temp=round_half_up(weather.temperature),
            feels_like=round_half_up(weather.feels_like),
            humidity=weather.humidity,
            weather_main=weather.main,
            weather_icon=weather_icon(weather.main),
            currency_code=country.currency.code,
            currency_name=country.currency.name,
            rate_to_usd=rate.display,
            timezone=city.timezone,
            latitude=city.latitude,
            longitude=city.longitude,
        )


class WeatherPayload(CamelModel):
    description: str
    temperature: float
    feels_like: float
    humidity: int
    main: str


class CurrencyPayload(CamelModel):
    code: str
    name: str
    rate_to_usd: float = Field(default=0, alias="rateToUSD")


class Coordinates(CamelModel):
    latitude: float
    longitude: float


class CityRecordPayload(CamelModel):
    """Record shape accepted by the backend save endpoint."""

    city: str
    country: str
    population: int
    weather: WeatherPayload
    currency: CurrencyPayload
    coordinates: Coordinates
    timezone: str | None = None

    @classmethod
    def from_record(cls, record: AggregatedCityRecord) -> "CityRecordPayload":
        """Normalize a display record into numeric backend fields.

        The raw population is preferred over the formatted string, and an
        unavailable exchange rate is sent as 0.
        """
        population = record.raw_population or int(record.population.replace(",", ""))
        try:
            rate = float(record.rate_to_usd)
        except ValueError:
            rate = 0
        return cls(
            city=record.city,
            country=record.country,
            population=population,
            weather=WeatherPayload(
                description=record.weather,
                temperature=record.temp,
                feels_like=record.feels_like,
                humidity=record.humidity,
                main=record.weather_main,
            ),
            currency=CurrencyPayload(
                code=record.currency_code,
                name=record.currency_name,
                rate_to_usd=rate,
            ),
            coordinates=Coordinates(
                latitude=record.latitude, longitude=record.longitude
            ),
            timezone=record.timezone,
        )


class SavedRecord(CityRecordPayload):
    """A record as returned by the backend history endpoint."""

    id: str | None = Field(default=None, validation_alias=AliasChoices("id", "_id"))
    timestamp: datetime | None = None
