"""Challenge API client for challenge-type metadata."""

from typing import Any

import httpx

from legacy_processor.config import get_settings
from legacy_processor.shared.utils.logging import get_logger

logger = get_logger(__name__)


class ChallengeApiClient:
    """
    Client for the v5 challenge-type endpoint.

    Non-2xx responses raise ``httpx.HTTPStatusError`` so callers can
    read the structured error body.
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        settings = get_settings()
        self._base_url = (base_url or settings.v5_challenge_type_api_url).rstrip("/")
        self._timeout = timeout or settings.request_timeout
        self._client = client

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout)
        return self._client

    async def get_challenge_type(self, type_id: str, token: str) -> dict[str, Any]:
        """
        Fetch a challenge type.

        Args:
            type_id: Challenge type id
            token: M2M bearer token

        Returns:
            The challenge type body, including its ``name``
        """
        client = await self._get_client()
        response = await client.get(
            f"{self._base_url}/{type_id}",
            headers={"Authorization": f"Bearer {token}"},
        )
        response.raise_for_status()
        logger.debug("challenge_type_fetched", type_id=type_id)
        return response.json()

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
