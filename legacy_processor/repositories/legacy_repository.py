"""Legacy repository for component-schema operations.

Provides the row primitives (insert / update / delete by table name)
and the metadata lookups the challenge synchronization relies on.
All SQLAlchemy failures surface as :class:`PersistenceError`.
"""

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any

from sqlalchemy import Table, and_, delete, insert, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from legacy_processor.infrastructure.database.models import (
    Base,
    CompVersion,
    Project,
    ProjectInfo,
    ProjectPlatform,
    TechnologyType,
)
from legacy_processor.repositories.exceptions import EntityNotFoundError, PersistenceError
from legacy_processor.shared.utils.logging import get_logger

logger = get_logger(__name__)

# project_info type holding the component version id of a challenge
COMPONENT_VERSION_INFO_TYPE_ID = 1
ACTIVE_TECHNOLOGY_STATUS_ID = 1


@dataclass(frozen=True)
class LookupEntry:
    """An id/name pair from a legacy lookup table."""

    id: int
    name: str


@contextmanager
def _translate_errors(operation: str, table: str) -> Iterator[None]:
    try:
        yield
    except SQLAlchemyError as e:
        raise PersistenceError(f"Failed to {operation} {table}", table=table, original_error=e) from e


class LegacyRepository:
    """Data access for the legacy component tables.

    Every method runs on the session it was built with, so all calls made
    while handling one event share a single transaction.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    @staticmethod
    def _table(table_name: str) -> Table:
        try:
            return Base.metadata.tables[table_name]
        except KeyError:
            raise PersistenceError(f"Unknown legacy table {table_name}", table=table_name) from None

    @staticmethod
    def _where(table: Table, criteria: dict[str, Any]) -> Any:
        if not criteria:
            raise PersistenceError(f"Refusing unconditional statement on {table.name}", table=table.name)
        return and_(*(table.c[column] == value for column, value in criteria.items()))

    # ===========================================
    # ROW PRIMITIVES
    # ===========================================

    async def insert_record(self, table_name: str, column_values: dict[str, Any]) -> None:
        """Insert one row into the given table."""
        table = self._table(table_name)
        with _translate_errors("insert into", table_name):
            await self.session.execute(insert(table).values(**column_values))
        logger.debug("legacy_record_inserted", table=table_name)

    async def update_record(
        self,
        table_name: str,
        column_values: dict[str, Any],
        where: dict[str, Any],
    ) -> int:
        """Update the rows matching ``where`` (column equality) and return the row count."""
        table = self._table(table_name)
        with _translate_errors("update", table_name):
            result = await self.session.execute(
                update(table).where(self._where(table, where)).values(**column_values)
            )
        logger.debug("legacy_record_updated", table=table_name, rows=result.rowcount)
        return result.rowcount

    async def delete_records(self, table_name: str, where: dict[str, Any]) -> int:
        """Delete the rows matching ``where`` (column equality) and return the row count."""
        table = self._table(table_name)
        with _translate_errors("delete from", table_name):
            result = await self.session.execute(delete(table).where(self._where(table, where)))
        logger.debug("legacy_records_deleted", table=table_name, rows=result.rowcount)
        return result.rowcount

    # ===========================================
    # LOOKUPS
    # ===========================================

    async def get_technologies(self) -> list[LookupEntry]:
        """Get all active technology types."""
        query = select(TechnologyType.technology_type_id, TechnologyType.technology_name).where(
            TechnologyType.status_id == ACTIVE_TECHNOLOGY_STATUS_ID
        )
        with _translate_errors("query", TechnologyType.__tablename__):
            result = await self.session.execute(query)
        return [LookupEntry(id=int(row[0]), name=row[1]) for row in result.all()]

    async def get_platforms(self) -> list[LookupEntry]:
        """Get all platforms."""
        query = select(ProjectPlatform.project_platform_id, ProjectPlatform.name)
        with _translate_errors("query", ProjectPlatform.__tablename__):
            result = await self.session.execute(query)
        return [LookupEntry(id=int(row[0]), name=row[1]) for row in result.all()]

    async def get_challenge_by_id(self, challenge_id: int) -> Project:
        """Get the legacy challenge record.

        Raises:
            EntityNotFoundError: If no such challenge exists
        """
        with _translate_errors("query", Project.__tablename__):
            result = await self.session.execute(
                select(Project).where(Project.project_id == challenge_id)
            )
        challenge = result.scalar_one_or_none()
        if challenge is None:
            raise EntityNotFoundError("Challenge", challenge_id)
        return challenge

    async def get_component_version_id(self, challenge_id: int) -> int:
        """Get the component version id linked to a legacy challenge.

        Raises:
            EntityNotFoundError: If the challenge has no component version
        """
        query = select(ProjectInfo.value).where(
            ProjectInfo.project_id == challenge_id,
            ProjectInfo.project_info_type_id == COMPONENT_VERSION_INFO_TYPE_ID,
        )
        with _translate_errors("query", ProjectInfo.__tablename__):
            result = await self.session.execute(query)
        value = result.scalar_one_or_none()
        if value is None:
            raise EntityNotFoundError("Component version", challenge_id=challenge_id)
        return int(value)

    async def get_component_id(self, component_version_id: int) -> int:
        """Get the component owning a component version.

        Raises:
            EntityNotFoundError: If the component version does not exist
        """
        with _translate_errors("query", CompVersion.__tablename__):
            result = await self.session.execute(
                select(CompVersion.component_id).where(CompVersion.comp_vers_id == component_version_id)
            )
        component_id = result.scalar_one_or_none()
        if component_id is None:
            raise EntityNotFoundError("Component version", component_version_id)
        return int(component_id)


__all__ = [
    "LegacyRepository",
    "LookupEntry",
]
