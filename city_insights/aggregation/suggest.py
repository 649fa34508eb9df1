"""City name suggestions for autocomplete."""

import asyncio

from city_insights.errors import CityInsightsError
from city_insights.logging_config import logger
from city_insights.models.city import City
from city_insights.providers.geodb import GeoDBClient


class SuggestionFetcher:
    """Advisory autocomplete lookups that never raise to the caller."""

    def __init__(self, geo: GeoDBClient, *, min_chars: int = 2):
        self.geo = geo
        self.min_chars = min_chars

    async def suggest(self, partial_name: str) -> list[City]:
        """Return up to the geo client's limit of candidate cities.

        Inputs shorter than ``min_chars`` after trimming, and any upstream
        failure, yield an empty list.
        """
        query = partial_name.strip()
        if len(query) < self.min_chars:
            return []
        try:
            return await self.geo.search(query)
        except CityInsightsError as exc:
            logger.warning("SUGGESTIONS_FAILED", query=query, error=str(exc))
            return []


class SuggestionDebouncer:
    """Only forward a suggestion request after ``delay_s`` of inactivity.

    Each call supersedes the pending one; superseded calls resolve to an
    empty list without reaching the upstream service.
    """

    def __init__(self, fetcher: SuggestionFetcher, *, delay_s: float = 0.3):
        self.fetcher = fetcher
        self.delay_s = delay_s
        self._pending: asyncio.Task | None = None

    @property
    def idle(self) -> bool:
        return self._pending is None or self._pending.done()

    async def _delayed(self, partial_name: str) -> list[City]:
        await asyncio.sleep(self.delay_s)
        return await self.fetcher.suggest(partial_name)

    async def submit(self, partial_name: str) -> list[City]:
        if self._pending is not None and not self._pending.done():
            self._pending.cancel()
        task = asyncio.create_task(self._delayed(partial_name))
        self._pending = task
        try:
            return await task
        except asyncio.CancelledError:
            if self._pending is not task:
                return []
            raise
