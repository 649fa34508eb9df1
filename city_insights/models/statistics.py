"""Usage statistics computed by the backend."""

from pydantic import Field

from city_insights.models.record import CamelModel


class StatisticsOverview(CamelModel):
    total_searches: int = 0
    unique_cities: int = 0
    avg_temperature: float | None = None
    unique_countries: int = 0


class PopularCity(CamelModel):
    name: str = Field(alias="_id")
    count: int = 0


class Statistics(CamelModel):
    """Aggregate usage figures relayed from the backend ``/stats`` endpoint."""

    overview: StatisticsOverview = Field(default_factory=StatisticsOverview)
    popular_cities: list[PopularCity] = Field(default_factory=list)
