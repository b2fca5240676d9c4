"""Unit of Work for legacy store writes.

One Unit of Work wraps the session used to project a single event,
so every row written for that event commits or rolls back together.
"""

from __future__ import annotations

from typing import Any, Callable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from legacy_processor.repositories.exceptions import PersistenceError
from legacy_processor.repositories.legacy_repository import LegacyRepository
from legacy_processor.shared.utils.logging import get_logger

logger = get_logger(__name__)


class LegacyUnitOfWork:
    """Transaction boundary for the rows of one event.

    Usage:
        async with LegacyUnitOfWork(session_factory) as uow:
            await uow.legacy.insert_record("comp_catalog", {...})
            await uow.commit()

    If an exception occurs, or the block exits without ``commit()``, the
    transaction is rolled back. The session is always closed on exit.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession] | Callable[[], AsyncSession],
    ) -> None:
        self._session_factory = session_factory
        self._session: AsyncSession | None = None
        self._legacy: LegacyRepository | None = None
        self._committed = False

    @property
    def session(self) -> AsyncSession:
        """Get the current database session.

        Raises:
            RuntimeError: If the Unit of Work has not been entered
        """
        if self._session is None:
            raise RuntimeError("Unit of Work not started. Use 'async with' context manager.")
        return self._session

    @property
    def legacy(self) -> LegacyRepository:
        """Get the legacy repository bound to this transaction."""
        if self._legacy is None:
            self._legacy = LegacyRepository(self.session)
        return self._legacy

    async def __aenter__(self) -> LegacyUnitOfWork:
        self._session = self._session_factory()
        self._committed = False
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        if self._session is None:
            return

        try:
            if exc_type is not None:
                await self.rollback()
                logger.info("transaction_rolled_back", exception_type=exc_type.__name__)
            elif not self._committed:
                # explicit commit required
                await self.rollback()
        finally:
            await self._session.close()
            self._session = None
            self._legacy = None

    async def commit(self) -> None:
        """Commit the current transaction.

        Raises:
            PersistenceError: If the commit fails
        """
        if self._session is None:
            raise RuntimeError("Unit of Work not started")

        try:
            await self._session.commit()
        except SQLAlchemyError as e:
            raise PersistenceError("Failed to commit transaction", original_error=e) from e
        self._committed = True
        logger.debug("transaction_committed")

    async def rollback(self) -> None:
        """Roll back the current transaction."""
        if self._session is not None:
            try:
                await self._session.rollback()
            except SQLAlchemyError as e:
                # the original failure is what the caller must see
                logger.error("transaction_rollback_failed", error=str(e))


__all__ = ["LegacyUnitOfWork"]
