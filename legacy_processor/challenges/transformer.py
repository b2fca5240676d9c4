"""Transform challenge notification payloads into draft contests.

A draft contest is the legacy-facing view of a challenge: the same
shape the legacy challenge API used when saving a draft contest.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Protocol

import markdown

from legacy_processor.challenges.constants import (
    CONFIDENTIALITY_PUBLIC,
    DEFAULT_MILESTONE_ID,
    SUBMISSION_GUIDELINES,
    PhaseType,
    PrizeSetType,
)
from legacy_processor.challenges.exceptions import MultiplePrizeSetError
from legacy_processor.challenges.schemas import ChallengePayload, Phase, PrizeSet
from legacy_processor.repositories.legacy_repository import LookupEntry
from legacy_processor.shared.utils.datetime_utils import add_milliseconds, utcnow
from legacy_processor.shared.utils.logging import get_logger

logger = get_logger(__name__)


class MetadataLookup(Protocol):
    """Lookups needed to resolve names in a payload."""

    async def lookup_type(self, type_id: str, token: str) -> dict[str, Any]:
        ...

    async def list_technologies(self) -> list[LookupEntry]:
        ...

    async def list_platforms(self) -> list[LookupEntry]:
        ...


@dataclass
class DraftContest:
    """Normalized challenge data, ready to be projected onto legacy rows.

    Fields left as ``None`` were not present in the payload.
    """

    sub_track: str | None = None
    track: str | None = None
    name: str | None = None
    review_type: str | None = None
    project_id: int | None = None
    forum_id: int | None = None

    # creation only
    confidentiality_type: str | None = None
    submission_guidelines: str | None = None
    submission_visibility: bool | None = None
    milestone_id: int | None = None

    detailed_requirements: str | None = None

    registration_starts_at: datetime | None = None
    registration_ends_at: datetime | None = None
    submission_ends_at: datetime | None = None
    checkpoint_submission_starts_at: datetime | None = None
    checkpoint_submission_ends_at: datetime | None = None

    number_of_checkpoint_prizes: int | None = None
    checkpoint_prize: float | None = None
    prizes: list[float] | None = None

    technologies: list[LookupEntry] | None = None
    platforms: list[LookupEntry] | None = None


def render_description(description: str, is_markdown: bool | None) -> str:
    """Return the description as HTML when it is markdown, else unchanged."""
    if is_markdown:
        return markdown.markdown(description)
    return description


def _find_phase(phases: list[Phase], phase_type: PhaseType) -> Phase | None:
    return next((p for p in phases if p.name.lower() == phase_type.value), None)


def apply_phases(data: DraftContest, phases: list[Phase], now: datetime) -> None:
    """Derive registration, submission and checkpoint dates from the phases.

    Registration and submission phases are assumed present; the message
    schemas are where their absence must be rejected.
    """
    registration = _find_phase(phases, PhaseType.REGISTRATION)
    submission = _find_phase(phases, PhaseType.SUBMISSION)
    data.registration_starts_at = now
    data.registration_ends_at = add_milliseconds(now, registration.duration)
    data.submission_ends_at = add_milliseconds(now, submission.duration)

    # Only Design can have checkpoint phase and checkpoint prizes
    checkpoint = _find_phase(phases, PhaseType.CHECKPOINT)
    if checkpoint is not None:
        data.checkpoint_submission_starts_at = now
        data.checkpoint_submission_ends_at = add_milliseconds(now, checkpoint.duration)
    else:
        data.checkpoint_submission_starts_at = None
        data.checkpoint_submission_ends_at = None


def apply_prize_sets(data: DraftContest, prize_sets: list[PrizeSet]) -> None:
    """Derive checkpoint prizes and the sorted challenge prizes.

    Raises:
        MultiplePrizeSetError: If more than one non-checkpoint prize set is given
    """
    checkpoint = next((p for p in prize_sets if p.type == PrizeSetType.CHECKPOINT), None)
    if checkpoint is not None:
        # every checkpoint winner gets the same prize
        data.number_of_checkpoint_prizes = len(checkpoint.prizes)
        data.checkpoint_prize = checkpoint.prizes[0].value
    else:
        data.number_of_checkpoint_prizes = 0
        data.checkpoint_prize = 0

    # Code, First to Finish or Marathon Match
    challenge_prizes = [p for p in prize_sets if p.type != PrizeSetType.CHECKPOINT]
    if len(challenge_prizes) > 1:
        raise MultiplePrizeSetError(len(challenge_prizes))
    if not challenge_prizes:
        # learning challenges carry no prizes
        data.prizes = [0]
    else:
        data.prizes = sorted((prize.value for prize in challenge_prizes[0].prizes), reverse=True)


def match_tags(entries: list[LookupEntry], tags: list[str]) -> list[LookupEntry]:
    """Keep the lookup entries whose name is one of the tags (exact match)."""
    wanted = set(tags)
    return [entry for entry in entries if entry.name in wanted]


async def parse_payload(
    payload: ChallengePayload,
    m2m_token: str,
    lookup: MetadataLookup,
    is_created: bool = True,
    now: datetime | None = None,
) -> DraftContest:
    """
    Build the draft contest for a create or update payload.

    Args:
        payload: Validated message payload
        m2m_token: Bearer token for the challenge-type lookup
        lookup: Metadata lookups (challenge type, technologies, platforms)
        is_created: Whether the draft is used to create the challenge
        now: Reference time for phase dates, defaults to the current UTC time

    Returns:
        The draft contest

    Raises:
        UpstreamLookupError: If the challenge-type lookup fails
        MultiplePrizeSetError: If more than one non-checkpoint prize set is given
    """
    now = now or utcnow()
    data = DraftContest(
        sub_track=payload.track,
        name=payload.name,
        review_type=payload.review_type,
        project_id=payload.project_id,
        forum_id=payload.forum_id,
    )

    if is_created:
        # required by the legacy draft contest model
        data.confidentiality_type = CONFIDENTIALITY_PUBLIC
        data.submission_guidelines = SUBMISSION_GUIDELINES
        data.submission_visibility = True
        data.milestone_id = DEFAULT_MILESTONE_ID

    if payload.type_id:
        challenge_type = await lookup.lookup_type(payload.type_id, m2m_token)
        data.track = challenge_type.get("name")

    if payload.description:
        data.detailed_requirements = render_description(payload.description, payload.markdown)

    if payload.phases:
        apply_phases(data, payload.phases, now)

    if payload.prize_sets:
        apply_prize_sets(data, payload.prize_sets)

    if payload.tags:
        data.technologies = match_tags(await lookup.list_technologies(), payload.tags)
        data.platforms = match_tags(await lookup.list_platforms(), payload.tags)

    logger.debug(
        "draft_contest_parsed",
        is_created=is_created,
        track=data.track,
        technologies=len(data.technologies or []),
        prizes=data.prizes,
    )
    return data


__all__ = [
    "DraftContest",
    "MetadataLookup",
    "apply_phases",
    "apply_prize_sets",
    "match_tags",
    "parse_payload",
    "render_description",
]
