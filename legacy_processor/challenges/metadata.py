"""Metadata lookups used while transforming a payload."""

from typing import Any

from legacy_processor.challenges.exceptions import upstream_lookup
from legacy_processor.repositories.legacy_repository import LegacyRepository, LookupEntry
from legacy_processor.shared.clients.challenge_api_client import ChallengeApiClient


class MetadataResolver:
    """Challenge-type lookups over HTTP, technology and platform lookups from the legacy store."""

    def __init__(self, challenge_api: ChallengeApiClient, repository: LegacyRepository):
        self._challenge_api = challenge_api
        self._repository = repository

    async def lookup_type(self, type_id: str, token: str) -> dict[str, Any]:
        with upstream_lookup():
            return await self._challenge_api.get_challenge_type(type_id, token)

    async def list_technologies(self) -> list[LookupEntry]:
        return await self._repository.get_technologies()

    async def list_platforms(self) -> list[LookupEntry]:
        return await self._repository.get_platforms()
