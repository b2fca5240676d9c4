"""Custom exceptions for challenge event processing."""

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import httpx


class ProcessorError(Exception):
    """Base exception for challenge processing errors."""

    def __init__(self, message: str, error_type: str = "processor_error"):
        self.message = message
        self.error_type = error_type
        super().__init__(message)


class EventValidationError(ProcessorError):
    """Raised when an event message does not match its schema."""

    def __init__(self, message: str, errors: list[dict[str, Any]] | None = None):
        super().__init__(message, "validation_error")
        self.errors = errors or []


class UnknownTrackError(EventValidationError):
    """Raised when a track has no legacy project category."""

    def __init__(self, track: str):
        super().__init__(f"Unknown challenge track: {track}")
        self.track = track


class UpstreamLookupError(ProcessorError):
    """Raised when a metadata or auth service call fails."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message, "upstream_lookup_error")
        self.status_code = status_code


class DomainRuleViolation(ProcessorError):
    """Raised when an event breaks a legacy business rule."""

    def __init__(self, message: str, error_type: str = "domain_rule_violation"):
        super().__init__(message, error_type)


class MultiplePrizeSetError(DomainRuleViolation):
    """Raised when more than one non-checkpoint prize set is supplied."""

    def __init__(self, count: int):
        super().__init__("Challenge prize information is invalid.", "multiple_prize_sets")
        self.count = count


class ChallengeTypeChangeError(DomainRuleViolation):
    """Raised when an update would move a challenge to another category."""

    def __init__(self, legacy_id: int, current_category: str, requested_track: str):
        super().__init__("You can't change challenge type", "immutable_challenge_type")
        self.legacy_id = legacy_id
        self.current_category = current_category
        self.requested_track = requested_track


def extract_upstream_message(error: httpx.HTTPError) -> str:
    """Return the ``message`` of a structured error body, else the raw error text."""
    if isinstance(error, httpx.HTTPStatusError):
        try:
            body = error.response.json()
        except ValueError:
            body = None
        if isinstance(body, dict) and body.get("message"):
            return str(body["message"])
    return str(error)


@contextmanager
def upstream_lookup() -> Iterator[None]:
    """Turn HTTP failures of metadata/auth calls into :class:`UpstreamLookupError`."""
    try:
        yield
    except httpx.HTTPStatusError as e:
        raise UpstreamLookupError(extract_upstream_message(e), status_code=e.response.status_code) from e
    except httpx.HTTPError as e:
        raise UpstreamLookupError(extract_upstream_message(e)) from e
