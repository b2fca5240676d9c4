"""Test data factories for the legacy challenge processor."""

from tests.factories.challenge_factory import ChallengeMessageFactory, CountingIdAllocator
from tests.factories.legacy_factory import count_rows, fetch_all, seed_legacy_challenge

__all__ = [
    "ChallengeMessageFactory",
    "CountingIdAllocator",
    "count_rows",
    "fetch_all",
    "seed_legacy_challenge",
]
