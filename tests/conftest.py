"""Global pytest fixtures for the legacy challenge processor.

This module provides shared fixtures for testing including:
- A file-backed legacy database (aiosqlite) seeded with lookup rows
- Mock HTTP collaborators (challenge-type API, M2M token provider)
- A ChallengeSyncService wired to both
"""

from collections.abc import AsyncGenerator
from pathlib import Path
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from legacy_processor.challenges.service import ChallengeSyncService
from legacy_processor.infrastructure.database.models import (
    Base,
    IdSequence,
    ProjectPlatform,
    TechnologyType,
)
from legacy_processor.repositories.id_generator import (
    COMP_CATEGORY_SEQ,
    COMP_TECH_SEQ,
    COMP_VERSION_DATES_SEQ,
    COMP_VERSION_SEQ,
    COMPONENT_SEQ,
    SequenceIdAllocator,
)
from tests.factories import CountingIdAllocator

TECHNOLOGIES = [
    (1, "Java", 1),
    (2, "Python", 1),
    (3, "Node.js", 1),
    (4, "Retired Tech", 0),
]

PLATFORMS = [
    (1, "AWS"),
    (2, "Heroku"),
]

ID_SEQUENCES = [
    (COMPONENT_SEQ, 1000),
    (COMP_CATEGORY_SEQ, 2000),
    (COMP_VERSION_SEQ, 3000),
    (COMP_VERSION_DATES_SEQ, 4000),
    (COMP_TECH_SEQ, 5000),
]


# ===========================================
# DATABASE FIXTURES
# ===========================================


@pytest_asyncio.fixture
async def legacy_engine(tmp_path: Path) -> AsyncGenerator[AsyncEngine, None]:
    """Create a file-backed legacy database; every session gets its own connection."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'legacy.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    factory = async_sessionmaker(engine, expire_on_commit=False)
    async with factory() as session:
        session.add_all(
            TechnologyType(technology_type_id=tid, technology_name=name, status_id=status)
            for tid, name, status in TECHNOLOGIES
        )
        session.add_all(ProjectPlatform(project_platform_id=pid, name=name) for pid, name in PLATFORMS)
        await session.commit()

    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(legacy_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(legacy_engine, expire_on_commit=False)


# ===========================================
# COLLABORATOR MOCKS
# ===========================================


@pytest.fixture
def id_allocator() -> CountingIdAllocator:
    return CountingIdAllocator()


@pytest_asyncio.fixture
async def sequence_allocator(session_factory) -> SequenceIdAllocator:
    """Block-reserving allocator over seeded ``id_sequences`` rows."""
    async with session_factory() as session:
        session.add_all(
            IdSequence(name=name, next_block_start=start, block_size=3, exhausted=0)
            for name, start in ID_SEQUENCES
        )
        await session.commit()
    return SequenceIdAllocator(session_factory)


@pytest.fixture
def mock_challenge_api() -> AsyncMock:
    """Challenge-type API that resolves every type to "Code"."""
    api = AsyncMock()
    api.get_challenge_type = AsyncMock(return_value={"id": "type-1", "name": "Code"})
    return api


@pytest.fixture
def mock_token_provider() -> AsyncMock:
    provider = AsyncMock()
    provider.get_token = AsyncMock(return_value="m2m-token")
    return provider


@pytest.fixture
def sync_service(session_factory, id_allocator, mock_challenge_api, mock_token_provider):
    return ChallengeSyncService(
        session_factory=session_factory,
        id_allocator=id_allocator,
        challenge_api=mock_challenge_api,
        token_provider=mock_token_provider,
    )
