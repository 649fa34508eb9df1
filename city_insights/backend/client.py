"""Backend persistence, statistics and history calls."""

from typing import Any

import httpx
from pydantic import ValidationError

from city_insights.backend.session import BackendSession
from city_insights.errors import CityInsightsError, ExternalAPIError, NetworkError
from city_insights.logging_config import logger
from city_insights.models.record import (
    AggregatedCityRecord,
    CityRecordPayload,
    SavedRecord,
)
from city_insights.models.statistics import Statistics


class BackendClient:
    """Talk to the city insights backend.

    Public methods never raise: failures are logged and reported as
    ``False``, ``None`` or an empty list.
    """

    def __init__(self, session: BackendSession):
        self.session = session

    async def _call(self, method: str, path: str, **kwargs) -> Any:
        """Send an authorized request and return the envelope's ``data``.

        Raises:
            AuthenticationError: If no token can be obtained.
            NetworkError: On transport failures.
            ExternalAPIError: On a non-JSON body or ``success`` not true.
        """
        token = await self.session.with_token()
        try:
            response = await self.session.client.request(
                method,
                f"{self.session.base_url}{path}",
                headers=self.session.headers(token),
                **kwargs,
            )
            body = response.json()
        except httpx.RequestError as exc:
            raise NetworkError(f"Backend request failed: {path}") from exc
        except ValueError as exc:
            raise ExternalAPIError(f"Backend returned invalid JSON: {path}") from exc

        if not isinstance(body, dict) or not body.get("success"):
            message = body.get("message") if isinstance(body, dict) else None
            raise ExternalAPIError(message or f"Backend call failed: {path}")
        return body.get("data")

    async def save(self, record: AggregatedCityRecord) -> bool:
        """Submit a record to the backend.

        No idempotency key is sent, so saving the same record twice creates
        two backend entries.

        Args:
            record: Aggregated record to persist.

        Returns:
            True if the backend acknowledged the save.
        """
        payload = CityRecordPayload.from_record(record)
        try:
            data = await self._call(
                "POST", "/saveData", json=payload.model_dump(by_alias=True, mode="json")
            )
        except CityInsightsError as exc:
            logger.error("BACKEND_SAVE_FAILED", city=record.city, error=str(exc))
            return False
        record_id = data.get("id") if isinstance(data, dict) else None
        logger.info("BACKEND_SAVED", city=record.city, record_id=record_id)
        return True

    async def fetch_statistics(self) -> Statistics | None:
        """Return backend usage statistics, or None if unavailable."""
        try:
            data = await self._call("GET", "/stats")
            return Statistics.model_validate(data) if data else None
        except (CityInsightsError, ValidationError) as exc:
            logger.error("BACKEND_STATS_FAILED", error=str(exc))
            return None

    async def fetch_records(self, page: int = 1, limit: int = 5) -> list[SavedRecord]:
        """Return saved records, most recent first.

        Args:
            page: 1-based page number.
            limit: Page size.

        Returns:
            The requested page, or an empty list on failure.
        """
        try:
            data = await self._call(
                "GET",
                "/records",
                params={
                    "page": page,
                    "limit": limit,
                    "sortBy": "timestamp",
                    "order": "desc",
                },
            )
            return [SavedRecord.model_validate(item) for item in data or []]
        except (CityInsightsError, ValidationError, TypeError) as exc:
            logger.error("BACKEND_RECORDS_FAILED", page=page, error=str(exc))
            return []
