"""Tests for LegacyRepository and LegacyUnitOfWork against an in-memory legacy store."""

import pytest

from legacy_processor.infrastructure.database.models import CompCatalog
from legacy_processor.repositories.exceptions import EntityNotFoundError, PersistenceError
from legacy_processor.repositories.legacy_repository import LegacyRepository, LookupEntry
from legacy_processor.repositories.unit_of_work import LegacyUnitOfWork
from tests.factories import count_rows, fetch_all, seed_legacy_challenge


def _catalog_row(component_id: int, name: str = "Component") -> dict:
    return {
        "component_id": component_id,
        "current_version": 1,
        "component_name": name,
        "status_id": 102,
    }


class TestLookups:

    @pytest.mark.asyncio
    async def test_only_active_technologies_listed(self, session_factory):
        async with session_factory() as session:
            technologies = await LegacyRepository(session).get_technologies()

        assert LookupEntry(1, "Java") in technologies
        assert all(t.name != "Retired Tech" for t in technologies)

    @pytest.mark.asyncio
    async def test_platforms_listed(self, session_factory):
        async with session_factory() as session:
            platforms = await LegacyRepository(session).get_platforms()

        assert sorted(platforms, key=lambda p: p.id) == [LookupEntry(1, "AWS"), LookupEntry(2, "Heroku")]

    @pytest.mark.asyncio
    async def test_challenge_chain_resolved(self, session_factory):
        await seed_legacy_challenge(session_factory, 30054163, 39, component_id=7000, component_version_id=7100)

        async with session_factory() as session:
            repo = LegacyRepository(session)
            challenge = await repo.get_challenge_by_id(30054163)
            version_id = await repo.get_component_version_id(30054163)
            component_id = await repo.get_component_id(version_id)

        assert challenge.project_category_id == 39
        assert version_id == 7100
        assert component_id == 7000

    @pytest.mark.asyncio
    async def test_missing_challenge_raises(self, session_factory):
        async with session_factory() as session:
            with pytest.raises(EntityNotFoundError) as exc_info:
                await LegacyRepository(session).get_challenge_by_id(404)

        assert exc_info.value.error_type == "not_found"

    @pytest.mark.asyncio
    async def test_missing_component_version_raises(self, session_factory):
        async with session_factory() as session:
            repo = LegacyRepository(session)
            with pytest.raises(EntityNotFoundError):
                await repo.get_component_version_id(404)
            with pytest.raises(EntityNotFoundError):
                await repo.get_component_id(404)


class TestRowPrimitives:

    @pytest.mark.asyncio
    async def test_insert_update_delete(self, session_factory):
        async with session_factory() as session:
            repo = LegacyRepository(session)
            await repo.insert_record("comp_catalog", _catalog_row(1))
            await repo.insert_record("comp_catalog", _catalog_row(2))
            updated = await repo.update_record("comp_catalog", {"component_name": "Renamed"}, {"component_id": 1})
            deleted = await repo.delete_records("comp_catalog", {"component_id": 2})
            await session.commit()

        assert updated == 1
        assert deleted == 1
        rows = await fetch_all(session_factory, CompCatalog)
        assert [(r.component_id, r.component_name) for r in rows] == [(1, "Renamed")]

    @pytest.mark.asyncio
    async def test_unconditional_delete_refused(self, session_factory):
        async with session_factory() as session:
            with pytest.raises(PersistenceError):
                await LegacyRepository(session).delete_records("comp_technology", {})

    @pytest.mark.asyncio
    async def test_unknown_table_refused(self, session_factory):
        async with session_factory() as session:
            with pytest.raises(PersistenceError) as exc_info:
                await LegacyRepository(session).insert_record("no_such_table", {"id": 1})

        assert exc_info.value.table == "no_such_table"

    @pytest.mark.asyncio
    async def test_constraint_violation_wrapped(self, session_factory):
        async with session_factory() as session:
            repo = LegacyRepository(session)
            await repo.insert_record("comp_catalog", _catalog_row(1))
            with pytest.raises(PersistenceError) as exc_info:
                await repo.insert_record("comp_catalog", _catalog_row(1))

        assert exc_info.value.original_error is not None


class TestLegacyUnitOfWork:

    @pytest.mark.asyncio
    async def test_commit_persists(self, session_factory):
        async with LegacyUnitOfWork(session_factory) as uow:
            await uow.legacy.insert_record("comp_catalog", _catalog_row(1))
            await uow.commit()

        assert await count_rows(session_factory, CompCatalog) == 1

    @pytest.mark.asyncio
    async def test_exit_without_commit_rolls_back(self, session_factory):
        async with LegacyUnitOfWork(session_factory) as uow:
            await uow.legacy.insert_record("comp_catalog", _catalog_row(1))

        assert await count_rows(session_factory, CompCatalog) == 0

    @pytest.mark.asyncio
    async def test_exception_rolls_back_and_propagates(self, session_factory):
        with pytest.raises(ValueError):
            async with LegacyUnitOfWork(session_factory) as uow:
                await uow.legacy.insert_record("comp_catalog", _catalog_row(1))
                raise ValueError("boom")

        assert await count_rows(session_factory, CompCatalog) == 0

    def test_session_requires_context(self, session_factory):
        with pytest.raises(RuntimeError):
            LegacyUnitOfWork(session_factory).session
