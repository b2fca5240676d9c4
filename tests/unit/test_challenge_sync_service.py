"""Unit tests for ChallengeSyncService guards that run before any database work."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from legacy_processor.challenges.exceptions import (
    EventValidationError,
    UnknownTrackError,
    UpstreamLookupError,
)
from legacy_processor.challenges.service import ChallengeSyncService
from tests.factories import ChallengeMessageFactory, CountingIdAllocator


@pytest.fixture
def session_factory() -> MagicMock:
    return MagicMock(name="session_factory")


@pytest.fixture
def token_provider() -> AsyncMock:
    provider = AsyncMock()
    provider.get_token = AsyncMock(return_value="m2m-token")
    return provider


@pytest.fixture
def service(session_factory, token_provider) -> ChallengeSyncService:
    return ChallengeSyncService(
        session_factory=session_factory,
        id_allocator=CountingIdAllocator(),
        challenge_api=AsyncMock(),
        token_provider=token_provider,
    )


class TestCreateGuards:

    @pytest.mark.asyncio
    async def test_invalid_message_opens_no_session(self, service, session_factory, token_provider):
        message = ChallengeMessageFactory.create_message()
        del message["payload"]["name"]

        with pytest.raises(EventValidationError):
            await service.process_create(message)

        token_provider.get_token.assert_not_awaited()
        session_factory.assert_not_called()

    @pytest.mark.asyncio
    async def test_unknown_track_rejected(self, service, session_factory):
        with pytest.raises(UnknownTrackError):
            await service.process_create(ChallengeMessageFactory.create_message(track="QUANTUM"))

        session_factory.assert_not_called()

    @pytest.mark.asyncio
    async def test_token_failure_opens_no_session(self, service, session_factory, token_provider):
        request = httpx.Request("POST", "https://auth.example.com/oauth/token")
        token_provider.get_token.side_effect = httpx.HTTPStatusError(
            "unauthorized",
            request=request,
            response=httpx.Response(401, json={"message": "Invalid client"}, request=request),
        )

        with pytest.raises(UpstreamLookupError) as exc_info:
            await service.process_create(ChallengeMessageFactory.create_message())

        assert exc_info.value.message == "Invalid client"
        session_factory.assert_not_called()


class TestUpdateGuards:

    @pytest.mark.asyncio
    async def test_missing_legacy_id_rejected(self, service, session_factory):
        message = ChallengeMessageFactory.update_message(1)
        del message["payload"]["legacyId"]

        with pytest.raises(EventValidationError):
            await service.process_update(message)

        session_factory.assert_not_called()

    @pytest.mark.asyncio
    async def test_unknown_track_rejected(self, service, session_factory):
        with pytest.raises(UnknownTrackError):
            await service.process_update(ChallengeMessageFactory.update_message(1, track="QUANTUM"))

        session_factory.assert_not_called()


class TestClose:

    @pytest.mark.asyncio
    async def test_close_releases_http_clients(self, token_provider):
        challenge_api = AsyncMock()
        service = ChallengeSyncService(
            session_factory=MagicMock(),
            id_allocator=CountingIdAllocator(),
            challenge_api=challenge_api,
            token_provider=token_provider,
        )

        await service.close()

        challenge_api.close.assert_awaited_once()
        token_provider.close.assert_awaited_once()
