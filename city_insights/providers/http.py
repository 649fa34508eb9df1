"""Shared request helper for upstream API calls."""

from typing import Any

import httpx

from city_insights.errors import ExternalAPIError, NetworkError
from city_insights.logging_config import logger


async def get_json(
    client: httpx.AsyncClient,
    *,
    url: str,
    params: dict,
    event_prefix: str,
    log_context: dict,
    error_message: str,
    headers: dict | None = None,
) -> Any:
    """Execute a single HTTP GET and decode the JSON body.

    There is no retry: a failed call is reported to the caller immediately.

    Args:
        client: Shared async HTTP client.
        url: The URL to call.
        params: Query parameters to include in the request.
        event_prefix: Log event prefix for consistent names.
        log_context: Extra log fields for all events.
        error_message: Error message to wrap in ExternalAPIError.
        headers: Optional request headers.

    Returns:
        The decoded JSON payload.

    Raises:
        NetworkError: When the request fails at the transport level.
        ExternalAPIError: On a non-success status or a non-JSON body.
    """
    try:
        response = await client.get(url, params=params, headers=headers)
        logger.info(
            f"{event_prefix}_RESPONSE", **log_context, status=response.status_code
        )
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        logger.error(
            f"{event_prefix}_BAD_STATUS",
            **log_context,
            status=exc.response.status_code,
        )
        raise ExternalAPIError(error_message) from exc
    except httpx.RequestError as exc:
        logger.error(f"{event_prefix}_REQUEST_FAILED", **log_context, error=str(exc))
        raise NetworkError(error_message) from exc

    try:
        return response.json()
    except ValueError as exc:
        logger.error(f"{event_prefix}_BAD_PAYLOAD", **log_context, error=str(exc))
        raise ExternalAPIError(error_message) from exc
