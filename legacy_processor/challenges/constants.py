"""Fixed legacy identifiers used when projecting challenges."""

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Final


class ProjectType(str, Enum):
    """Legacy project types."""

    APPLICATION = "Application"
    STUDIO = "Studio"


class PrizeSetType(str, Enum):
    """Prize set types carried by challenge events."""

    CODE = "Code"
    FIRST_TO_FINISH = "First to Finish"
    CHECKPOINT = "CheckPoint"
    MARATHON_MATCH = "Marathon Match"


class PhaseType(str, Enum):
    """Phase names the processor looks for, compared lower-cased."""

    REGISTRATION = "registration"
    SUBMISSION = "submission"
    CHECKPOINT = "checkpoint submission"


@dataclass(frozen=True)
class ComponentCategory:
    id: int
    name: str


@dataclass(frozen=True)
class ProjectCategory:
    id: int
    name: str
    project_type: ProjectType


class ComponentCategories:
    NOT_SET_PARENT: Final = ComponentCategory(id=27202915, name="Not Set")
    NOT_SET: Final = ComponentCategory(id=27202916, name="Not Set")
    APPLICATION: Final = ComponentCategory(id=9926572, name="Application")
    BUSINESS_LAYER: Final = ComponentCategory(id=9926575, name="Business Layer")


# Track key -> legacy project category
PROJECT_CATEGORIES: Final[dict[str, ProjectCategory]] = {
    # Application
    "DESIGN": ProjectCategory(1, "Design", ProjectType.APPLICATION),
    "DEVELOPMENT": ProjectCategory(2, "Development", ProjectType.APPLICATION),
    "SPECIFICATION": ProjectCategory(6, "Specification", ProjectType.APPLICATION),
    "ARCHITECTURE": ProjectCategory(7, "Architecture", ProjectType.APPLICATION),
    "BUG_HUNT": ProjectCategory(9, "Bug Hunt", ProjectType.APPLICATION),
    "TEST_SUITES": ProjectCategory(13, "Test Suites", ProjectType.APPLICATION),
    "ASSEMBLY_COMPETITION": ProjectCategory(14, "Assembly Competition", ProjectType.APPLICATION),
    "UI_PROTOTYPE_COMPETITION": ProjectCategory(19, "UI Prototype Competition", ProjectType.APPLICATION),
    "CONCEPTUALIZATION": ProjectCategory(23, "Conceptualization", ProjectType.APPLICATION),
    "RIA_BUILD_COMPETITION": ProjectCategory(24, "RIA Build Competition", ProjectType.APPLICATION),
    "RIA_COMPONENT_COMPETITION": ProjectCategory(25, "RIA Component Competition", ProjectType.APPLICATION),
    "TEST_SCENARIOS": ProjectCategory(26, "Test Scenarios", ProjectType.APPLICATION),
    "COPILOT_POSTING": ProjectCategory(29, "Copilot Posting", ProjectType.APPLICATION),
    "CONTENT_CREATION": ProjectCategory(35, "Content Creation", ProjectType.APPLICATION),
    "REPORTING": ProjectCategory(36, "Reporting", ProjectType.APPLICATION),
    "MARATHON_MATCH": ProjectCategory(37, "Marathon Match", ProjectType.APPLICATION),
    "FIRST_2_FINISH": ProjectCategory(38, "First2Finish", ProjectType.APPLICATION),
    "CODE": ProjectCategory(39, "Code", ProjectType.APPLICATION),
    # Studio
    "BANNERS_OR_ICONS": ProjectCategory(16, "Banners/Icons", ProjectType.STUDIO),
    "WEB_DESIGNS": ProjectCategory(17, "Web Design", ProjectType.STUDIO),
    "WIREFRAMES": ProjectCategory(18, "Wireframes", ProjectType.STUDIO),
    "LOGO_DESIGN": ProjectCategory(20, "Logo Design", ProjectType.STUDIO),
    "PRINT_OR_PRESENTATION": ProjectCategory(21, "Print/Presentation", ProjectType.STUDIO),
    "IDEA_GENERATION": ProjectCategory(22, "Idea Generation", ProjectType.STUDIO),
    "WIDGET_OR_MOBILE_SCREEN_DESIGN": ProjectCategory(30, "Widget or Mobile Screen Design", ProjectType.STUDIO),
    "FRONT_END_FLASH": ProjectCategory(31, "Front-End Flash", ProjectType.STUDIO),
    "APPLICATION_FRONT_END_DESIGN": ProjectCategory(32, "Application Front-End Design", ProjectType.STUDIO),
    "STUDIO_OTHER": ProjectCategory(34, "Studio Other", ProjectType.STUDIO),
    "DESIGN_FIRST_2_FINISH": ProjectCategory(40, "Design First2Finish", ProjectType.STUDIO),
}


def find_project_category(category_id: int) -> ProjectCategory | None:
    """Look up a project category by its legacy id."""
    for category in PROJECT_CATEGORIES.values():
        if category.id == category_id:
            return category
    return None


# Tracks (event keys) whose component stays uncategorized
UNCATEGORIZED_TRACKS: Final[frozenset[str]] = frozenset({"MARATHON_MATCH", "DESIGN", "DEVELOPMENT"})

# Tracks (event keys) that never get technology links on creation
NO_TECHNOLOGY_TRACKS: Final[frozenset[str]] = frozenset(
    {"MARATHON_MATCH", "CONCEPTUALIZATION", "SPECIFICATION"}
)

# Project category names that never get technology links on update
NO_TECHNOLOGY_CATEGORY_NAMES: Final[frozenset[str]] = frozenset(
    {"Marathon Match", "Conceptualization", "Specification"}
)

# Component rows
COMPONENT_STATUS_IN_DRAFT: Final = 102
COMPONENT_PHASE_NEW: Final = 112
COMPONENT_VERSION_LEVEL: Final = 100
PLACEHOLDER_DESCRIPTION: Final = "NA"

# Legacy dummy dates, no meaning beyond satisfying NOT NULL columns
DUMMY_PHASE_TIME: Final = datetime(1976, 5, 4, 0, 0, 0)
DUMMY_POSTING_DATE: Final = date(1976, 5, 4)
DUMMY_DATE: Final = date(2000, 1, 1)

# Draft contest defaults
CONFIDENTIALITY_PUBLIC: Final = "public"
SUBMISSION_GUIDELINES: Final = "Please read above"
DEFAULT_MILESTONE_ID: Final = 1
