"""Pydantic schemas for board YAML data and sequencing payloads."""

from __future__ import annotations

from datetime import date
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from .models import (
    Project,
    RagStatus,
    new_project_id,
    split_dependencies,
    split_multi_value,
)


def _coerce_date(v: Any) -> Any:
    # Data built in code (or read by a date-resolving YAML loader) may carry dates
    if isinstance(v, date):
        return v.isoformat()
    return v


def _as_text_or_items(v: Any) -> Any:
    if v is None or isinstance(v, str):
        return v
    if isinstance(v, list):
        return [str(item) for item in v]  # type: ignore[misc]
    return str(v)


class ProjectSchema(BaseModel):
    """Schema for one project in a board file.

    The camelCase names and field aliases used by the original board
    (revopsTeam, owner, impact, ...) are accepted alongside the Python names.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str | None = None
    name: str = Field(min_length=1)
    epic_number: str = Field(validation_alias=AliasChoices("epic_number", "epicNumber"))
    team: str = Field(validation_alias=AliasChoices("team", "revopsTeam", "revops_team"))
    start_date: str = Field(validation_alias=AliasChoices("start_date", "startDate"))
    end_date: str = Field(validation_alias=AliasChoices("end_date", "endDate"))
    function: list[str] = Field(
        default_factory=list[str], validation_alias=AliasChoices("function", "impact")
    )
    assignee: list[str] = Field(
        default_factory=list[str],
        validation_alias=AliasChoices("assignee", "owner", "resources"),
    )
    support: list[str] = Field(default_factory=list[str])
    dependencies: list[str] = Field(default_factory=list[str])
    progress: int | None = Field(default=None, ge=0, le=100)
    rag_status: RagStatus | None = Field(
        default=None, validation_alias=AliasChoices("rag_status", "ragStatus")
    )

    @field_validator("id", "name", "epic_number", "team", mode="before")
    @classmethod
    def coerce_scalar_to_string(cls, v: Any) -> Any:
        """Accept numbers where YAML parsed a label like 1234 as an int."""
        if isinstance(v, int | float) and not isinstance(v, bool):
            return str(v)
        return v

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def coerce_date_to_string(cls, v: Any) -> Any:
        """Convert date objects to ISO strings; malformed strings are kept as-is."""
        return _coerce_date(v)

    @field_validator("function", "assignee", "support", mode="before")
    @classmethod
    def ensure_list(cls, v: Any) -> list[str]:
        """Accept either a list or a comma-delimited string."""
        return list(split_multi_value(_as_text_or_items(v)))

    @field_validator("dependencies", mode="before")
    @classmethod
    def ensure_dependency_list(cls, v: Any) -> list[str]:
        """Accept either a list or a comma-delimited string; "None" means empty."""
        return list(split_dependencies(_as_text_or_items(v)))

    @field_validator("rag_status", mode="before")
    @classmethod
    def parse_rag_status(cls, v: Any) -> RagStatus | None:
        """Match RAG status case-insensitively."""
        return RagStatus.parse(v)

    def to_project(self) -> Project:
        """Convert to the domain model, minting an ID when none was stored."""
        return Project(
            id=self.id or new_project_id(),
            name=self.name,
            epic_number=self.epic_number,
            team=self.team,
            start_date=self.start_date,
            end_date=self.end_date,
            function=tuple(self.function),
            assignee=tuple(self.assignee),
            support=tuple(self.support),
            dependencies=tuple(self.dependencies),
            progress=self.progress,
            rag_status=self.rag_status,
        )

    @classmethod
    def from_project(cls, project: Project) -> ProjectSchema:
        """Build a schema instance from a domain project."""
        return cls(
            id=project.id,
            name=project.name,
            epic_number=project.epic_number,
            team=project.team,
            start_date=project.start_date,
            end_date=project.end_date,
            function=list(project.function),
            assignee=list(project.assignee),
            support=list(project.support),
            dependencies=list(project.dependencies),
            progress=project.progress,
            rag_status=project.rag_status,
        )


class BoardMetadataSchema(BaseModel):
    """Schema for board metadata."""

    title: str = "Project Roadmap"
    display_year: int | None = None


class BoardSchema(BaseModel):
    """Schema for an entire board YAML file."""

    metadata: BoardMetadataSchema = Field(default_factory=BoardMetadataSchema)
    projects: list[ProjectSchema] = Field(default_factory=list[ProjectSchema])


class SequencingProject(BaseModel):
    """Project as sent to the sequencing service (original camelCase names)."""

    name: str
    epicNumber: str  # noqa: N815 - wire format
    revopsTeam: str  # noqa: N815 - wire format
    function: str | None = None
    startDate: str  # noqa: N815 - wire format
    endDate: str  # noqa: N815 - wire format
    assignee: str | None = None
    support: str | None = None
    dependencies: str | None = None
    progress: int | None = None


class SequencingRequest(BaseModel):
    """Request payload for the sequencing service."""

    projects: list[SequencingProject]
    teamAvailability: str  # noqa: N815 - wire format


class SequencingResponse(BaseModel):
    """Response payload of the sequencing service."""

    optimalSequence: list[str]  # noqa: N815 - wire format
    reasoning: str
