"""Repository layer exceptions.

Provides a typed exception hierarchy for legacy store operations,
enabling precise error handling and better debugging.
"""

from typing import Any


class RepositoryError(Exception):
    """Base exception for all repository errors."""

    error_type = "repository_error"

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} - {self.details}"
        return self.message


class EntityNotFoundError(RepositoryError):
    """Raised when an expected legacy row does not exist."""

    error_type = "not_found"

    def __init__(
        self,
        entity_type: str,
        entity_id: int | str | None = None,
        **lookup_params: Any,
    ) -> None:
        details: dict[str, Any] = {"entity_type": entity_type}
        if entity_id is not None:
            details["entity_id"] = entity_id
        details.update(lookup_params)

        message = f"{entity_type} not found"
        if entity_id is not None:
            message = f"{entity_type} with id '{entity_id}' not found"

        super().__init__(message, details)
        self.entity_type = entity_type
        self.entity_id = entity_id


class PersistenceError(RepositoryError):
    """Raised when a row operation or transaction step fails."""

    error_type = "persistence_error"

    def __init__(
        self,
        message: str,
        table: str | None = None,
        original_error: Exception | None = None,
    ) -> None:
        details: dict[str, Any] = {}
        if table:
            details["table"] = table
        if original_error is not None:
            details["original_error"] = str(original_error)
            details["error_type"] = type(original_error).__name__

        super().__init__(message, details)
        self.table = table
        self.original_error = original_error


class IdAllocationError(PersistenceError):
    """Raised when a surrogate id sequence cannot supply a value."""

    error_type = "id_allocation_error"

    def __init__(self, sequence_name: str, reason: str) -> None:
        super().__init__(f"Cannot allocate id from sequence {sequence_name}: {reason}", table="id_sequences")
        self.sequence_name = sequence_name
        self.reason = reason


__all__ = [
    "RepositoryError",
    "EntityNotFoundError",
    "PersistenceError",
    "IdAllocationError",
]
