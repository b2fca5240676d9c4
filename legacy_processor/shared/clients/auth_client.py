"""Machine-to-machine token provider."""

import time
from typing import Any

import httpx

from legacy_processor.challenges.exceptions import UpstreamLookupError
from legacy_processor.config import Settings, get_settings
from legacy_processor.shared.utils.logging import get_logger

logger = get_logger(__name__)


class M2MTokenProvider:
    """
    Fetches client-credentials tokens and caches them.

    A cached token is reused until ``token_cache_time`` seconds have
    passed since it was acquired. When a proxy URL is configured the
    grant is posted to the proxy, which forwards it to ``auth0_url``.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        self._settings = settings or get_settings()
        self._client = client
        self._token: str | None = None
        self._token_acquired_at: float = 0.0

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._settings.request_timeout)
        return self._client

    def is_token_expired(self) -> bool:
        if not self._token:
            return True
        return time.monotonic() - self._token_acquired_at >= self._settings.token_cache_time

    async def get_token(self) -> str:
        """Get a valid M2M token, refreshing it when the cache expired."""
        if self.is_token_expired():
            await self.refresh_token()
        return self._token

    async def refresh_token(self) -> str:
        """Force refresh the token."""
        settings = self._settings
        payload: dict[str, Any] = {
            "grant_type": "client_credentials",
            "client_id": settings.auth0_client_id,
            "client_secret": settings.auth0_client_secret,
            "audience": settings.auth0_audience,
        }
        url = settings.auth0_url
        if settings.auth0_proxy_server_url:
            payload["auth0_url"] = settings.auth0_url
            url = settings.auth0_proxy_server_url

        client = await self._get_client()
        response = await client.post(url, json=payload)
        response.raise_for_status()

        try:
            body = response.json()
        except ValueError as e:
            raise UpstreamLookupError("Auth service returned a non-JSON token response.") from e
        token = body.get("access_token") if isinstance(body, dict) else None
        if not token:
            raise UpstreamLookupError("No access_token returned from the auth service.")

        self._token = token
        self._token_acquired_at = time.monotonic()
        logger.info("m2m_token_refreshed")
        return token

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
