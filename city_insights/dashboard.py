"""Search orchestration: aggregate, display, save and refresh history."""

from functools import lru_cache

import httpx
from pydantic import BaseModel, Field

from city_insights.aggregation.pipeline import AggregationPipeline
from city_insights.aggregation.suggest import SuggestionDebouncer, SuggestionFetcher
from city_insights.backend.client import BackendClient
from city_insights.backend.session import BackendSession
from city_insights.config import Settings, settings as default_settings
from city_insights.logging_config import logger
from city_insights.models.city import City
from city_insights.models.record import AggregatedCityRecord, SavedRecord
from city_insights.models.statistics import Statistics
from city_insights.providers.countries import CountriesClient
from city_insights.providers.exchange_rate import ExchangeRateClient
from city_insights.providers.geodb import GeoDBClient
from city_insights.providers.openweather import OpenWeatherClient
from city_insights.redis_store.store import token_store


class DashboardState(BaseModel):
    """What the dashboard currently shows."""

    current: AggregatedCityRecord | None = None
    statistics: Statistics | None = None
    recent: list[SavedRecord] = Field(default_factory=list)


class Dashboard:
    """Coordinate searches so that only the latest one is displayed.

    Every search gets a monotonically increasing sequence number. A result
    becomes ``current`` only if no newer search was issued while it ran.
    """

    def __init__(
        self,
        pipeline: AggregationPipeline,
        suggestions: SuggestionFetcher,
        backend: BackendClient,
        *,
        recent_limit: int = 5,
        debounce_s: float = 0.3,
        http_client: httpx.AsyncClient | None = None,
    ):
        self.pipeline = pipeline
        self.suggestions = suggestions
        self.backend = backend
        self.recent_limit = recent_limit
        self.debounce_s = debounce_s
        self._debouncers: dict[str, SuggestionDebouncer] = {}
        self.state = DashboardState()
        self._issued = 0
        self._http_client = http_client

    @property
    def latest_issued(self) -> int:
        return self._issued

    async def suggest(self, partial_name: str, caller: str) -> list[City]:
        """Debounced suggestions, one debounce window per caller.

        A caller's newer request supersedes its pending one; requests from
        other callers are unaffected.
        """
        debouncer = self._debouncers.get(caller)
        if debouncer is None:
            debouncer = SuggestionDebouncer(self.suggestions, delay_s=self.debounce_s)
            self._debouncers[caller] = debouncer
        try:
            return await debouncer.submit(partial_name)
        finally:
            if debouncer.idle and self._debouncers.get(caller) is debouncer:
                del self._debouncers[caller]

    async def search(self, city_name: str) -> AggregatedCityRecord:
        """Aggregate ``city_name`` and display it unless a newer search exists.

        Returns:
            The aggregated record, whether or not it was displayed.
        """
        self._issued += 1
        sequence = self._issued
        record = await self.pipeline.aggregate(city_name)
        if sequence == self._issued:
            self.state.current = record
        else:
            logger.info(
                "STALE_RESULT_DISCARDED",
                city=record.city,
                sequence=sequence,
                latest=self._issued,
            )
        return record

    async def persist(self, record: AggregatedCityRecord) -> bool:
        """Save ``record`` and refresh statistics when the save succeeds."""
        saved = await self.backend.save(record)
        if saved:
            await self.refresh()
        return saved

    async def refresh(self) -> DashboardState:
        """Reload statistics and the most recent saved records."""
        self.state.statistics = await self.backend.fetch_statistics()
        self.state.recent = await self.backend.fetch_records(1, self.recent_limit)
        return self.state

    async def aclose(self):
        if self._http_client is not None:
            await self._http_client.aclose()


def build_dashboard(
    settings: Settings | None = None, client: httpx.AsyncClient | None = None
) -> Dashboard:
    """Wire upstream clients, backend session and pipeline from settings."""
    settings = settings or default_settings
    client = client or httpx.AsyncClient()
    geo = GeoDBClient(
        client,
        url=settings.geodb_url,
        host=settings.geodb_host,
        api_key=settings.geodb_api_key,
        limit=settings.suggestion_limit,
    )
    pipeline = AggregationPipeline(
        geo=geo,
        countries=CountriesClient(client, url=settings.countries_url),
        weather=OpenWeatherClient(
            client,
            url=settings.openweather_url,
            api_key=settings.openweather_api_key,
            units=settings.openweather_units,
        ),
        exchange=ExchangeRateClient(
            client,
            url=settings.exchange_url,
            api_key=settings.exchange_api_key,
            target=settings.exchange_target_currency,
        ),
    )
    session = BackendSession(
        client,
        base_url=settings.backend_url,
        api_key=settings.backend_api_key,
        token_store=token_store(),
    )
    return Dashboard(
        pipeline,
        SuggestionFetcher(geo, min_chars=settings.suggestion_min_chars),
        BackendClient(session),
        recent_limit=settings.recent_records_limit,
        debounce_s=settings.suggestion_debounce_s,
        http_client=client,
    )


@lru_cache
def get_dashboard() -> Dashboard:
    """Return the process-wide dashboard."""
    return build_dashboard()
