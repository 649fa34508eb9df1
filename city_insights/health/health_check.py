"""Health checks for Redis and the backend store."""

import httpx
from redis.exceptions import RedisError

from city_insights.config import settings
from city_insights.logging_config import logger
from city_insights.models.health import ServiceStatus
from city_insights.redis_store.store import redis_client


async def is_redis_available() -> ServiceStatus:
    """Check Redis connectivity."""
    try:
        await redis_client.ping()
        return ServiceStatus.available
    except (RedisError, OSError) as exc:
        logger.error("REDIS_UNAVAILABLE", error=str(exc))
        return ServiceStatus.not_available


async def is_backend_available() -> ServiceStatus:
    """Check that the backend answers HTTP requests without a server error."""
    try:
        async with httpx.AsyncClient(timeout=5) as client:
            response = await client.get(f"{settings.backend_url}/stats")
    except httpx.HTTPError as exc:
        logger.error("BACKEND_UNAVAILABLE", error=str(exc))
        return ServiceStatus.not_available
    if response.status_code >= 500:
        logger.error("BACKEND_UNAVAILABLE", status=response.status_code)
        return ServiceStatus.not_available
    return ServiceStatus.available
