"""ChallengeSyncService: projects challenge notifications onto the legacy component tables."""

from typing import Any, Callable, Protocol

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from legacy_processor.challenges.categories import (
    CategoryAssignment,
    get_category,
    get_project_category,
    is_studio_category,
)
from legacy_processor.challenges.constants import (
    COMPONENT_PHASE_NEW,
    COMPONENT_STATUS_IN_DRAFT,
    COMPONENT_VERSION_LEVEL,
    DUMMY_DATE,
    DUMMY_PHASE_TIME,
    DUMMY_POSTING_DATE,
    NO_TECHNOLOGY_CATEGORY_NAMES,
    NO_TECHNOLOGY_TRACKS,
    PLACEHOLDER_DESCRIPTION,
    find_project_category,
)
from legacy_processor.challenges.exceptions import ChallengeTypeChangeError, upstream_lookup
from legacy_processor.challenges.metadata import MetadataResolver
from legacy_processor.challenges.schemas import (
    CreateChallengeMessage,
    UpdateChallengeMessage,
    parse_message,
)
from legacy_processor.challenges.transformer import DraftContest, parse_payload
from legacy_processor.repositories.exceptions import EntityNotFoundError
from legacy_processor.repositories.id_generator import (
    COMP_CATEGORY_SEQ,
    COMP_TECH_SEQ,
    COMP_VERSION_DATES_SEQ,
    COMP_VERSION_SEQ,
    COMPONENT_SEQ,
    IdAllocator,
)
from legacy_processor.repositories.legacy_repository import LegacyRepository, LookupEntry
from legacy_processor.repositories.unit_of_work import LegacyUnitOfWork
from legacy_processor.shared.clients.challenge_api_client import ChallengeApiClient
from legacy_processor.shared.utils.datetime_utils import date_part
from legacy_processor.shared.utils.logging import get_logger

logger = get_logger(__name__)


class TokenProvider(Protocol):
    async def get_token(self) -> str:
        ...

    async def close(self) -> None:
        ...


class ChallengeSyncService:
    """Keeps the legacy component of a challenge in line with its notifications.

    Each call handles one message inside one transaction: every row it
    plans to write is committed together, or nothing is.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession] | Callable[[], AsyncSession],
        id_allocator: IdAllocator,
        challenge_api: ChallengeApiClient,
        token_provider: TokenProvider,
    ):
        self._session_factory = session_factory
        self._ids = id_allocator
        self._challenge_api = challenge_api
        self._token_provider = token_provider

    async def _get_m2m_token(self) -> str:
        with upstream_lookup():
            return await self._token_provider.get_token()

    async def close(self) -> None:
        """Release the HTTP clients of the metadata and auth collaborators."""
        await self._challenge_api.close()
        await self._token_provider.close()

    # ===========================================
    # CREATE
    # ===========================================

    async def process_create(self, message: dict[str, Any]) -> int:
        """
        Create the legacy component of a new challenge.

        Args:
            message: Raw create notification

        Returns:
            The new component id

        Raises:
            EventValidationError: If the message is malformed or the track unknown
            UpstreamLookupError: If the auth or challenge-type lookup fails
            DomainRuleViolation: If the prize sets break the legacy rules
            RepositoryError: If a row operation fails
        """
        event = parse_message(CreateChallengeMessage, message)
        payload = event.payload
        track = payload.track
        is_studio = is_studio_category(get_project_category(track))
        category = get_category(track, is_studio)

        logger.info("challenge_create_started", challenge_id=payload.id, track=track)
        m2m_token = await self._get_m2m_token()

        async with LegacyUnitOfWork(self._session_factory) as uow:
            resolver = MetadataResolver(self._challenge_api, uow.legacy)
            draft = await parse_payload(payload, m2m_token, resolver)
            component_id = await self._create_component(uow.legacy, draft, track, is_studio, category)
            await uow.commit()

        logger.info(
            "legacy_component_created",
            challenge_id=payload.id,
            component_id=component_id,
        )
        return component_id

    async def _create_component(
        self,
        repo: LegacyRepository,
        draft: DraftContest,
        track: str,
        is_studio: bool,
        category: CategoryAssignment,
    ) -> int:
        with_technologies = track not in NO_TECHNOLOGY_TRACKS and not is_studio and bool(draft.technologies)
        technologies = draft.technologies if with_technologies else []

        # every id is reserved before the first write of the event
        component_id = await self._ids.next_id(COMPONENT_SEQ)
        comp_categories_id = await self._ids.next_id(COMP_CATEGORY_SEQ)
        component_version_id = await self._ids.next_id(COMP_VERSION_SEQ)
        comp_version_dates_id = await self._ids.next_id(COMP_VERSION_DATES_SEQ)
        tech_ids = await self._reserve_tech_ids(technologies)

        await repo.insert_record("comp_catalog", {
            "component_id": component_id,
            "current_version": 1,
            "short_desc": PLACEHOLDER_DESCRIPTION,
            "component_name": draft.name,
            "description": PLACEHOLDER_DESCRIPTION,
            "function_desc": PLACEHOLDER_DESCRIPTION,
            "status_id": COMPONENT_STATUS_IN_DRAFT,
            "root_category_id": category.root_category.id,
        })

        await repo.insert_record("comp_categories", {
            "comp_categories_id": comp_categories_id,
            "component_id": component_id,
            "category_id": category.category.id,
        })

        await repo.insert_record("comp_versions", {
            "comp_vers_id": component_version_id,
            "component_id": component_id,
            "version": 1,
            "version_text": "1.0",
            "phase_id": COMPONENT_PHASE_NEW,
            "phase_time": DUMMY_PHASE_TIME,
            "price": 0,
        })

        await repo.insert_record("comp_version_dates", {
            "comp_version_dates_id": comp_version_dates_id,
            "comp_vers_id": component_version_id,
            "phase_id": COMPONENT_PHASE_NEW,
            "total_submissions": 0,
            "level_id": COMPONENT_VERSION_LEVEL,
            "posting_date": DUMMY_POSTING_DATE,
            "aggregation_complete_date": DUMMY_DATE,
            "estimated_dev_date": DUMMY_DATE,
            "initial_submission_date": DUMMY_DATE,
            "phase_complete_date": DUMMY_DATE,
            "screening_complete_date": DUMMY_DATE,
            "review_complete_date": DUMMY_DATE,
            "winner_announced_date": DUMMY_DATE,
            "final_submission_date": DUMMY_DATE,
            "production_date": date_part(draft.registration_starts_at),
        })

        await self._insert_technologies(repo, component_version_id, technologies, tech_ids)

        return component_id

    async def _reserve_tech_ids(self, technologies: list[LookupEntry]) -> list[int]:
        return [await self._ids.next_id(COMP_TECH_SEQ) for _ in technologies]

    async def _insert_technologies(
        self,
        repo: LegacyRepository,
        component_version_id: int,
        technologies: list[LookupEntry],
        tech_ids: list[int],
    ) -> None:
        for tech_id, technology in zip(tech_ids, technologies, strict=True):
            await repo.insert_record("comp_technology", {
                "comp_tech_id": tech_id,
                "comp_vers_id": component_version_id,
                "technology_type_id": technology.id,
            })

    # ===========================================
    # UPDATE
    # ===========================================

    async def process_update(self, message: dict[str, Any]) -> None:
        """
        Apply a challenge update to its legacy component.

        Only the component name and the technologies of the active
        version are synchronized; the challenge category never changes.

        Args:
            message: Raw update notification

        Raises:
            EventValidationError: If the message is malformed or the track unknown
            UpstreamLookupError: If the auth or challenge-type lookup fails
            DomainRuleViolation: If the prize sets are invalid or the track changes
            EntityNotFoundError: If the legacy challenge or its component is missing
            RepositoryError: If a row operation fails
        """
        event = parse_message(UpdateChallengeMessage, message)
        payload = event.payload
        requested_category = get_project_category(payload.track) if payload.track else None

        logger.info("challenge_update_started", legacy_id=payload.legacy_id)
        m2m_token = await self._get_m2m_token()

        async with LegacyUnitOfWork(self._session_factory) as uow:
            repo = uow.legacy
            resolver = MetadataResolver(self._challenge_api, repo)
            draft = await parse_payload(payload, m2m_token, resolver, is_created=False)

            challenge = await repo.get_challenge_by_id(payload.legacy_id)
            category = find_project_category(int(challenge.project_category_id))
            if category is None:
                raise EntityNotFoundError("Project category", int(challenge.project_category_id))
            is_studio = is_studio_category(category)

            if requested_category is not None and requested_category.id != category.id:
                raise ChallengeTypeChangeError(payload.legacy_id, category.name, payload.track)

            update_technologies = (
                category.name not in NO_TECHNOLOGY_CATEGORY_NAMES
                and not is_studio
                and draft.technologies is not None
            )

            if payload.name or update_technologies:
                component_version_id = await repo.get_component_version_id(int(challenge.project_id))
                tech_ids = await self._reserve_tech_ids(draft.technologies) if update_technologies else []

                if payload.name:
                    component_id = await repo.get_component_id(component_version_id)
                    await repo.update_record(
                        "comp_catalog",
                        {"component_name": payload.name},
                        {"component_id": component_id},
                    )

                if update_technologies:
                    # full replacement of the version technologies
                    await repo.delete_records("comp_technology", {"comp_vers_id": component_version_id})
                    await self._insert_technologies(repo, component_version_id, draft.technologies, tech_ids)

            await uow.commit()

        logger.info(
            "legacy_component_updated",
            legacy_id=payload.legacy_id,
            name_updated=bool(payload.name),
            technologies_updated=update_technologies,
        )
