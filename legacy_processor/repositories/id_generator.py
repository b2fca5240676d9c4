"""Surrogate id allocation backed by the legacy ``id_sequences`` table.

Ids are reserved in blocks. Each reservation runs in its own short
transaction and is committed at once, so a reserved block belongs to
this process even if the event transaction that asked for the id is
rolled back. Unused ids of a block are simply lost.
"""

import asyncio
from typing import Callable, Protocol

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from legacy_processor.infrastructure.database.models import IdSequence
from legacy_processor.repositories.exceptions import IdAllocationError
from legacy_processor.shared.utils.logging import get_logger

logger = get_logger(__name__)

COMPONENT_SEQ = "COMPONENT_SEQ"
COMP_CATEGORY_SEQ = "COMPCATEGORY_SEQ"
COMP_VERSION_SEQ = "COMPVERSION_SEQ"
COMP_VERSION_DATES_SEQ = "COMPVERSIONDATES_SEQ"
COMP_TECH_SEQ = "COMPTECH_SEQ"


class IdAllocator(Protocol):
    """Anything able to hand out unique ids per sequence name."""

    async def next_id(self, sequence_name: str) -> int:
        ...


class IdGenerator:
    """Hands out ids of one sequence from reserved blocks."""

    def __init__(
        self,
        sequence_name: str,
        session_factory: async_sessionmaker[AsyncSession] | Callable[[], AsyncSession],
    ) -> None:
        self.sequence_name = sequence_name
        self._session_factory = session_factory
        self._lock = asyncio.Lock()
        self._next_id = 0
        self._block_end = 0

    async def get_next_id(self) -> int:
        """Return the next unused id, reserving a new block when needed."""
        async with self._lock:
            if self._next_id >= self._block_end:
                await self._reserve_block()
            value = self._next_id
            self._next_id += 1
            return value

    async def _reserve_block(self) -> None:
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    result = await session.execute(
                        select(IdSequence)
                        .where(IdSequence.name == self.sequence_name)
                        .with_for_update()
                    )
                    sequence = result.scalar_one_or_none()
                    if sequence is None:
                        raise IdAllocationError(self.sequence_name, "sequence does not exist")
                    if sequence.exhausted:
                        raise IdAllocationError(self.sequence_name, "sequence is exhausted")
                    if sequence.block_size <= 0:
                        raise IdAllocationError(self.sequence_name, "block size must be positive")

                    start = int(sequence.next_block_start)
                    size = int(sequence.block_size)
                    sequence.next_block_start = start + size
        except SQLAlchemyError as e:
            raise IdAllocationError(self.sequence_name, str(e)) from e

        self._next_id = start
        self._block_end = start + size
        logger.debug(
            "id_block_reserved",
            sequence=self.sequence_name,
            block_start=start,
            block_size=size,
        )


class SequenceIdAllocator:
    """Routes ``next_id`` calls to one :class:`IdGenerator` per sequence."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession] | Callable[[], AsyncSession],
    ) -> None:
        self._session_factory = session_factory
        self._generators: dict[str, IdGenerator] = {}

    async def next_id(self, sequence_name: str) -> int:
        generator = self._generators.get(sequence_name)
        if generator is None:
            generator = IdGenerator(sequence_name, self._session_factory)
            self._generators[sequence_name] = generator
        return await generator.get_next_id()


__all__ = [
    "COMPONENT_SEQ",
    "COMP_CATEGORY_SEQ",
    "COMP_VERSION_SEQ",
    "COMP_VERSION_DATES_SEQ",
    "COMP_TECH_SEQ",
    "IdAllocator",
    "IdGenerator",
    "SequenceIdAllocator",
]
