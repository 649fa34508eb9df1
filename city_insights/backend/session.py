"""Explicit backend session holding the auth token."""

import httpx

from city_insights.errors import AuthenticationError
from city_insights.logging_config import logger
from city_insights.redis_store.store import TokenStore


class BackendSession:
    """Token holder shared by every backend call.

    States are "no token" and "holding". A successful ``refresh`` moves to
    holding for good; a failed one leaves the session without a token so the
    next call tries again.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        *,
        base_url: str,
        api_key: str,
        token_store: TokenStore | None = None,
    ):
        self.client = client
        self.base_url = base_url
        self._api_key = api_key
        self._token_store = token_store
        self._token: str | None = None

    @property
    def token(self) -> str | None:
        return self._token

    def headers(self, token: str) -> dict:
        """Credential headers attached to every authorized backend call."""
        return {"Authorization": f"Bearer {token}", "X-API-Key": self._api_key}

    async def refresh(self) -> str:
        """Request a new token from the backend.

        Returns:
            The issued token.

        Raises:
            AuthenticationError: If the backend is unreachable or refuses.
        """
        try:
            response = await self.client.post(
                f"{self.base_url}/auth/token", json={"apiKey": self._api_key}
            )
            body = response.json()
        except httpx.RequestError as exc:
            logger.error("AUTH_REQUEST_FAILED", error=str(exc))
            raise AuthenticationError("Authentication request failed") from exc
        except ValueError as exc:
            logger.error("AUTH_BAD_PAYLOAD", status=response.status_code)
            raise AuthenticationError("Authentication response was not JSON") from exc

        if not isinstance(body, dict) or not body.get("success") or not body.get("token"):
            message = body.get("message") if isinstance(body, dict) else None
            logger.warning("AUTH_REFUSED", status=response.status_code, message=message)
            raise AuthenticationError(message or "Authentication refused")

        self._token = body["token"]
        if self._token_store is not None:
            await self._token_store.save_token(self._token)
        logger.info("AUTH_TOKEN_ISSUED")
        return self._token

    async def with_token(self) -> str:
        """Return the held token, loading or requesting one when absent."""
        if self._token is None and self._token_store is not None:
            self._token = await self._token_store.get_token()
        if self._token is None:
            return await self.refresh()
        return self._token
