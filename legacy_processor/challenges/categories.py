"""Component category rules for legacy challenges."""

from dataclasses import dataclass

from legacy_processor.challenges.constants import (
    PROJECT_CATEGORIES,
    UNCATEGORIZED_TRACKS,
    ComponentCategories,
    ComponentCategory,
    ProjectCategory,
    ProjectType,
)
from legacy_processor.challenges.exceptions import UnknownTrackError


@dataclass(frozen=True)
class CategoryAssignment:
    root_category: ComponentCategory
    category: ComponentCategory


def get_category(track: str, is_studio: bool) -> CategoryAssignment:
    """Get the component root category and category of a challenge track.

    Everything is "Not Set" except non-studio tracks outside Marathon
    Match, Design and Development, which land in Application / Business Layer.
    """
    if track not in UNCATEGORIZED_TRACKS and not is_studio:
        return CategoryAssignment(
            root_category=ComponentCategories.APPLICATION,
            category=ComponentCategories.BUSINESS_LAYER,
        )
    return CategoryAssignment(
        root_category=ComponentCategories.NOT_SET_PARENT,
        category=ComponentCategories.NOT_SET,
    )


def get_project_category(track: str) -> ProjectCategory:
    """Get the legacy project category of a track key.

    Raises:
        UnknownTrackError: If the track has no legacy category
    """
    try:
        return PROJECT_CATEGORIES[track]
    except KeyError:
        raise UnknownTrackError(track) from None


def is_studio_category(category: ProjectCategory) -> bool:
    return category.project_type == ProjectType.STUDIO
