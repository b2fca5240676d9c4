"""SQLAlchemy ORM models for the legacy component schema.

Only the columns the processor reads or writes are declared. Primary
keys come from the ``id_sequences`` table, never from the database.
"""

from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import (
    DECIMAL,
    BigInteger,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all legacy ORM models."""


# ===========================================
# PROJECT TABLES (owned by upstream systems)
# ===========================================


class Project(Base):
    """Legacy challenge record."""

    __tablename__ = "project"

    project_id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=False)
    project_status_id: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    project_category_id: Mapped[int] = mapped_column(Integer, nullable=False)


class ProjectInfo(Base):
    """Key/value attributes of a legacy challenge."""

    __tablename__ = "project_info"

    project_id: Mapped[int] = mapped_column(
        ForeignKey("project.project_id"), primary_key=True, autoincrement=False
    )
    project_info_type_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    value: Mapped[str] = mapped_column(String(4000), nullable=False)


# ===========================================
# LOOKUP TABLES
# ===========================================


class TechnologyType(Base):
    """Technology lookup."""

    __tablename__ = "technology_types"

    technology_type_id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=False)
    technology_name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(String(254))
    status_id: Mapped[int] = mapped_column(Integer, nullable=False, default=1)


class ProjectPlatform(Base):
    """Platform lookup."""

    __tablename__ = "project_platform_lu"

    project_platform_id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)


class IdSequence(Base):
    """Block-reserved surrogate key sequences."""

    __tablename__ = "id_sequences"

    name: Mapped[str] = mapped_column(String(254), primary_key=True)
    next_block_start: Mapped[int] = mapped_column(BigInteger, nullable=False)
    block_size: Mapped[int] = mapped_column(Integer, nullable=False)
    exhausted: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


# ===========================================
# COMPONENT TABLES
# ===========================================


class CompCatalog(Base):
    """Component: the legacy representation of one challenge."""

    __tablename__ = "comp_catalog"

    component_id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=False)
    current_version: Mapped[int] = mapped_column(Integer, nullable=False)
    short_desc: Mapped[str | None] = mapped_column(Text)
    component_name: Mapped[str] = mapped_column(String(254), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    function_desc: Mapped[str | None] = mapped_column(Text)
    status_id: Mapped[int] = mapped_column(Integer, nullable=False)
    root_category_id: Mapped[int | None] = mapped_column(BigInteger)


class CompCategory(Base):
    """Link between a component and its category."""

    __tablename__ = "comp_categories"

    comp_categories_id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=False)
    component_id: Mapped[int] = mapped_column(ForeignKey("comp_catalog.component_id"), nullable=False)
    category_id: Mapped[int] = mapped_column(BigInteger, nullable=False)

    __table_args__ = (Index("idx_comp_categories_component", "component_id"),)


class CompVersion(Base):
    """One version of a component."""

    __tablename__ = "comp_versions"

    comp_vers_id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=False)
    component_id: Mapped[int] = mapped_column(ForeignKey("comp_catalog.component_id"), nullable=False)
    version: Mapped[int] = mapped_column(Integer, nullable=False)
    version_text: Mapped[str] = mapped_column(String(20), nullable=False)
    phase_id: Mapped[int] = mapped_column(Integer, nullable=False)
    phase_time: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    price: Mapped[Decimal] = mapped_column(DECIMAL(10, 2), nullable=False)

    __table_args__ = (Index("idx_comp_versions_component", "component_id"),)


class CompVersionDates(Base):
    """Lifecycle dates of a component version."""

    __tablename__ = "comp_version_dates"

    comp_version_dates_id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=False)
    comp_vers_id: Mapped[int] = mapped_column(ForeignKey("comp_versions.comp_vers_id"), nullable=False)
    phase_id: Mapped[int] = mapped_column(Integer, nullable=False)
    total_submissions: Mapped[int] = mapped_column(Integer, nullable=False)
    level_id: Mapped[int] = mapped_column(Integer, nullable=False)
    posting_date: Mapped[date] = mapped_column(Date, nullable=False)
    aggregation_complete_date: Mapped[date | None] = mapped_column(Date)
    estimated_dev_date: Mapped[date | None] = mapped_column(Date)
    initial_submission_date: Mapped[date] = mapped_column(Date, nullable=False)
    phase_complete_date: Mapped[date | None] = mapped_column(Date)
    screening_complete_date: Mapped[date] = mapped_column(Date, nullable=False)
    review_complete_date: Mapped[date] = mapped_column(Date, nullable=False)
    winner_announced_date: Mapped[date] = mapped_column(Date, nullable=False)
    final_submission_date: Mapped[date] = mapped_column(Date, nullable=False)
    production_date: Mapped[date | None] = mapped_column(Date)


class CompTechnology(Base):
    """Technology tag of a component version."""

    __tablename__ = "comp_technology"

    comp_tech_id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=False)
    comp_vers_id: Mapped[int] = mapped_column(ForeignKey("comp_versions.comp_vers_id"), nullable=False)
    technology_type_id: Mapped[int] = mapped_column(BigInteger, nullable=False)

    __table_args__ = (Index("idx_comp_technology_version", "comp_vers_id"),)
