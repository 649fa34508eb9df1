"""Redis-backed stores for the backend session token and favourite cities."""

import json
from functools import partial

from redis.asyncio import Redis
from redis.exceptions import RedisError

from city_insights.config import settings
from city_insights.logging_config import logger
from city_insights.models.favorite import FavoriteEntry

redis_client = Redis(
    host=settings.redis_host,
    port=settings.redis_port,
    db=settings.redis_db,
    decode_responses=True,
)

TOKEN_KEY = "city_insights:token"
FAVORITES_KEY = "city_insights:favorites"


class TokenStore:
    """Persist the backend session token across restarts."""

    def __init__(self, client):
        self.redis_client: Redis = client

    async def get_token(self) -> str | None:
        """Return the stored token, or None if absent or Redis is down."""
        try:
            return await self.redis_client.get(TOKEN_KEY)
        except RedisError as exc:
            logger.error("REDIS_GET_TOKEN_FAILED", error=str(exc))
            return None

    async def save_token(self, token: str):
        try:
            await self.redis_client.set(TOKEN_KEY, token)
        except RedisError as exc:
            logger.error("REDIS_SAVE_TOKEN_FAILED", error=str(exc))


class FavoritesStore:
    """Favourite cities, deduplicated by exact (city, country)."""

    def __init__(self, client):
        self.redis_client: Redis = client

    async def add(self, city: str, country: str) -> tuple[bool, FavoriteEntry]:
        """Add a favourite unless the same (city, country) is already saved.

        Args:
            city: City name.
            country: Country name.

        Returns:
            Whether the entry was added, and the stored entry.
        """
        entry = FavoriteEntry(city=city, country=country)
        try:
            added = bool(
                await self.redis_client.hsetnx(
                    FAVORITES_KEY, entry.key, entry.model_dump_json()
                )
            )
            if not added:
                existing = await self.redis_client.hget(FAVORITES_KEY, entry.key)
                if existing:
                    entry = FavoriteEntry(**json.loads(existing))
        except RedisError as exc:
            logger.error("REDIS_SAVE_FAVORITE_FAILED", city=city, error=str(exc))
            return False, entry
        logger.info("FAVORITE_SAVED" if added else "FAVORITE_EXISTS", city=city, country=country)
        return added, entry

    async def entries(self) -> list[FavoriteEntry]:
        """Return all favourites, oldest first."""
        try:
            raw = await self.redis_client.hvals(FAVORITES_KEY)
        except RedisError as exc:
            logger.error("REDIS_GET_FAVORITES_FAILED", error=str(exc))
            return []
        entries = [FavoriteEntry(**json.loads(item)) for item in raw]
        return sorted(entries, key=lambda entry: entry.saved_at)


token_store = partial(TokenStore, client=redis_client)
favorites_store = partial(FavoritesStore, client=redis_client)
