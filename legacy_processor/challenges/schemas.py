"""Pydantic v2 schemas for challenge notification messages."""

from datetime import datetime
from typing import Annotated, Any, TypeVar

from pydantic import AfterValidator, BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from legacy_processor.challenges.constants import PhaseType, PrizeSetType
from legacy_processor.challenges.exceptions import EventValidationError

NonEmptyStr = Annotated[str, Field(min_length=1)]
PositiveInt = Annotated[int, Field(gt=0)]


class BaseSchema(BaseModel):
    """Base schema: camelCase aliases on the wire, unknown keys kept."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")


class Phase(BaseSchema):
    name: NonEmptyStr
    # milliseconds
    duration: float = Field(gt=0)


def _require_core_phases(phases: list[Phase]) -> list[Phase]:
    names = {phase.name.lower() for phase in phases}
    for required in (PhaseType.REGISTRATION, PhaseType.SUBMISSION):
        if required.value not in names:
            raise ValueError(f"{required.value} phase is required")
    return phases


PhaseList = Annotated[list[Phase], Field(min_length=1), AfterValidator(_require_core_phases)]


class Prize(BaseSchema):
    value: float = Field(gt=0)


class PrizeSet(BaseSchema):
    type: PrizeSetType
    prizes: list[Prize] = Field(min_length=1)


PrizeSetList = Annotated[list[PrizeSet], Field(min_length=1)]
TagList = Annotated[list[NonEmptyStr], Field(min_length=1)]


class CreateChallengePayload(BaseSchema):
    """Payload of a challenge creation notification. Every field is required."""

    id: NonEmptyStr
    type_id: NonEmptyStr = Field(alias="typeId")
    track: NonEmptyStr
    name: NonEmptyStr
    description: NonEmptyStr
    phases: PhaseList
    prize_sets: PrizeSetList = Field(alias="prizeSets")
    review_type: NonEmptyStr = Field(alias="reviewType")
    markdown: bool
    tags: TagList
    project_id: PositiveInt = Field(alias="projectId")
    forum_id: PositiveInt = Field(alias="forumId")


class UpdateChallengePayload(BaseSchema):
    """Payload of a challenge update notification. Only ``legacyId`` is required."""

    legacy_id: PositiveInt = Field(alias="legacyId")
    type_id: NonEmptyStr | None = Field(default=None, alias="typeId")
    track: NonEmptyStr | None = None
    name: NonEmptyStr | None = None
    description: NonEmptyStr | None = None
    phases: PhaseList | None = None
    prize_sets: PrizeSetList | None = Field(default=None, alias="prizeSets")
    review_type: NonEmptyStr | None = Field(default=None, alias="reviewType")
    markdown: bool | None = None
    tags: TagList | None = None
    project_id: PositiveInt | None = Field(default=None, alias="projectId")
    forum_id: PositiveInt | None = Field(default=None, alias="forumId")


ChallengePayload = CreateChallengePayload | UpdateChallengePayload


class CreateChallengeMessage(BaseSchema):
    topic: NonEmptyStr
    originator: NonEmptyStr
    timestamp: datetime
    mime_type: NonEmptyStr = Field(alias="mime-type")
    payload: CreateChallengePayload


class UpdateChallengeMessage(BaseSchema):
    topic: NonEmptyStr
    originator: NonEmptyStr
    timestamp: datetime
    mime_type: NonEmptyStr = Field(alias="mime-type")
    payload: UpdateChallengePayload


MessageT = TypeVar("MessageT", CreateChallengeMessage, UpdateChallengeMessage)


def parse_message(schema: type[MessageT], message: dict[str, Any]) -> MessageT:
    """Validate a raw message against ``schema``.

    Raises:
        EventValidationError: If the message does not match
    """
    try:
        return schema.model_validate(message)
    except PydanticValidationError as e:
        errors = e.errors(include_url=False, include_context=False)
        fields = ", ".join(".".join(str(loc) for loc in err["loc"]) for err in errors)
        raise EventValidationError(
            f"Invalid {schema.__name__}: {fields}",
            errors=[{"loc": list(err["loc"]), "msg": err["msg"]} for err in errors],
        ) from e
