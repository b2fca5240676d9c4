"""Tests for the draft contest transformer."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

import pytest

from legacy_processor.challenges.exceptions import MultiplePrizeSetError
from legacy_processor.challenges.schemas import (
    CreateChallengePayload,
    Phase,
    PrizeSet,
    UpdateChallengePayload,
)
from legacy_processor.challenges.transformer import (
    DraftContest,
    apply_phases,
    apply_prize_sets,
    match_tags,
    parse_payload,
    render_description,
)
from legacy_processor.repositories.legacy_repository import LookupEntry
from tests.factories import ChallengeMessageFactory
from tests.factories.challenge_factory import DAY_MS

NOW = datetime(2026, 10, 19, 12, 0, 0, tzinfo=timezone.utc)


def _prize_set(set_type: str, *values: float) -> PrizeSet:
    return PrizeSet.model_validate({"type": set_type, "prizes": [{"value": v} for v in values]})


@pytest.fixture
def lookup() -> AsyncMock:
    lookup = AsyncMock()
    lookup.lookup_type = AsyncMock(return_value={"id": "type-1", "name": "Code"})
    lookup.list_technologies = AsyncMock(return_value=[
        LookupEntry(1, "Java"),
        LookupEntry(2, "Python"),
        LookupEntry(3, "Node.js"),
    ])
    lookup.list_platforms = AsyncMock(return_value=[LookupEntry(1, "AWS"), LookupEntry(2, "Heroku")])
    return lookup


class TestApplyPrizeSets:
    """Tests for checkpoint and challenge prize derivation."""

    def test_checkpoint_and_code_prizes(self):
        data = DraftContest()
        apply_prize_sets(data, [
            _prize_set("CheckPoint", 150, 200),
            _prize_set("Code", 500, 1000),
        ])

        assert data.number_of_checkpoint_prizes == 2
        assert data.checkpoint_prize == 150
        assert data.prizes == [1000, 500]

    def test_no_checkpoint_set_defaults_to_zero(self):
        data = DraftContest()
        apply_prize_sets(data, [_prize_set("First to Finish", 100)])

        assert data.number_of_checkpoint_prizes == 0
        assert data.checkpoint_prize == 0
        assert data.prizes == [100]

    def test_empty_prize_sets_give_single_zero_prize(self):
        data = DraftContest()
        apply_prize_sets(data, [])

        assert data.prizes == [0]

    def test_checkpoint_only_gives_single_zero_prize(self):
        data = DraftContest()
        apply_prize_sets(data, [_prize_set("CheckPoint", 50)])

        assert data.number_of_checkpoint_prizes == 1
        assert data.prizes == [0]

    def test_multiple_challenge_prize_sets_rejected(self):
        with pytest.raises(MultiplePrizeSetError) as exc_info:
            apply_prize_sets(DraftContest(), [
                _prize_set("Code", 500),
                _prize_set("Marathon Match", 300),
            ])

        assert exc_info.value.count == 2
        assert exc_info.value.message == "Challenge prize information is invalid."


class TestApplyPhases:
    """Tests for phase date derivation."""

    def test_dates_offset_from_now(self):
        data = DraftContest()
        apply_phases(data, [
            Phase(name="Registration", duration=2 * DAY_MS),
            Phase(name="Submission", duration=5 * DAY_MS),
        ], NOW)

        assert data.registration_starts_at == NOW
        assert data.registration_ends_at == NOW + timedelta(days=2)
        assert data.submission_ends_at == NOW + timedelta(days=5)
        assert data.checkpoint_submission_starts_at is None
        assert data.checkpoint_submission_ends_at is None

    def test_checkpoint_phase_matched_case_insensitively(self):
        data = DraftContest()
        apply_phases(data, [
            Phase(name="REGISTRATION", duration=DAY_MS),
            Phase(name="submission", duration=3 * DAY_MS),
            Phase(name="Checkpoint Submission", duration=1500),
        ], NOW)

        assert data.checkpoint_submission_starts_at == NOW
        assert data.checkpoint_submission_ends_at == NOW + timedelta(milliseconds=1500)


class TestHelpers:

    def test_markdown_description_rendered_to_html(self):
        assert render_description("Build the **thing**", True) == "<p>Build the <strong>thing</strong></p>"

    def test_plain_description_unchanged(self):
        assert render_description("Build the **thing**", False) == "Build the **thing**"
        assert render_description("Build the **thing**", None) == "Build the **thing**"

    def test_match_tags_is_exact(self):
        entries = [LookupEntry(1, "Java"), LookupEntry(2, "JavaScript")]

        assert match_tags(entries, ["Java", "java", "Cobol"]) == [LookupEntry(1, "Java")]


class TestParsePayload:
    """Tests for parse_payload."""

    @pytest.mark.asyncio
    async def test_create_payload(self, lookup):
        payload = CreateChallengePayload.model_validate(ChallengeMessageFactory.create_payload())

        draft = await parse_payload(payload, "token", lookup, now=NOW)

        lookup.lookup_type.assert_awaited_once_with(payload.type_id, "token")
        assert draft.track == "Code"
        assert draft.sub_track == "CODE"
        assert draft.name == "Legacy sync challenge"
        assert draft.confidentiality_type == "public"
        assert draft.submission_guidelines == "Please read above"
        assert draft.submission_visibility is True
        assert draft.milestone_id == 1
        assert draft.detailed_requirements == "<p>Build the <strong>thing</strong></p>"
        assert draft.registration_starts_at == NOW
        assert draft.prizes == [1000, 500]
        assert draft.checkpoint_prize == 0
        assert [t.name for t in draft.technologies] == ["Java", "Python"]
        assert [p.name for p in draft.platforms] == ["AWS"]

    @pytest.mark.asyncio
    async def test_update_payload_leaves_absent_fields_unset(self, lookup):
        payload = UpdateChallengePayload.model_validate({"legacyId": 30054163, "name": "Renamed"})

        draft = await parse_payload(payload, "token", lookup, is_created=False, now=NOW)

        lookup.lookup_type.assert_not_awaited()
        lookup.list_technologies.assert_not_awaited()
        assert draft.name == "Renamed"
        assert draft.confidentiality_type is None
        assert draft.milestone_id is None
        assert draft.track is None
        assert draft.registration_starts_at is None
        assert draft.prizes is None
        assert draft.technologies is None

    @pytest.mark.asyncio
    async def test_unmatched_tags_give_empty_technologies(self, lookup):
        payload = UpdateChallengePayload.model_validate({"legacyId": 1, "tags": ["Cobol"]})

        draft = await parse_payload(payload, "token", lookup, is_created=False)

        assert draft.technologies == []
        assert draft.platforms == []

    @pytest.mark.asyncio
    async def test_multiple_prize_sets_propagate(self, lookup):
        payload = CreateChallengePayload.model_validate(ChallengeMessageFactory.create_payload(
            prizeSets=[
                {"type": "Code", "prizes": [{"value": 500}]},
                {"type": "First to Finish", "prizes": [{"value": 100}]},
            ],
        ))

        with pytest.raises(MultiplePrizeSetError):
            await parse_payload(payload, "token", lookup, now=NOW)
