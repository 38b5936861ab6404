"""Multi-field project filtering and the facet values offered to users."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from pydantic import BaseModel, Field

from .models import Project


def _matches_any(selected: set[str], values: Iterable[str]) -> bool:
    return not selected or any(value in selected for value in values)


class ProjectFilter(BaseModel):
    """Selected values per facet.

    An empty facet matches every project. Multi-value facets match when any
    of the project's values is selected. Facets are combined with AND.
    """

    teams: set[str] = Field(default_factory=set[str])
    assignees: set[str] = Field(default_factory=set[str])
    functions: set[str] = Field(default_factory=set[str])
    support: set[str] = Field(default_factory=set[str])
    dependencies: set[str] = Field(default_factory=set[str])

    @property
    def is_active(self) -> bool:
        """Whether any facet has a selection."""
        return bool(
            self.teams or self.assignees or self.functions or self.support or self.dependencies
        )

    def matches(self, project: Project) -> bool:
        """Check a single project against every facet."""
        return (
            (not self.teams or project.team in self.teams)
            and _matches_any(self.assignees, project.assignee)
            and _matches_any(self.functions, project.function)
            and _matches_any(self.support, project.support)
            and _matches_any(self.dependencies, project.dependencies)
        )

    def apply(self, projects: Sequence[Project]) -> list[Project]:
        """Return the matching projects in their original order."""
        if not self.is_active:
            return list(projects)
        return [p for p in projects if self.matches(p)]


class FilterOptions(BaseModel):
    """Sorted distinct values available for each facet."""

    teams: list[str] = Field(default_factory=list[str])
    assignees: list[str] = Field(default_factory=list[str])
    functions: list[str] = Field(default_factory=list[str])
    support: list[str] = Field(default_factory=list[str])
    dependencies: list[str] = Field(default_factory=list[str])

    @classmethod
    def from_projects(cls, projects: Sequence[Project]) -> FilterOptions:
        """Collect facet values from a set of projects."""
        return cls(
            teams=sorted({p.team for p in projects if p.team}),
            assignees=sorted({a for p in projects for a in p.assignee}),
            functions=sorted({f for p in projects for f in p.function}),
            support=sorted({s for p in projects for s in p.support}),
            dependencies=sorted({d for p in projects for d in p.dependencies}),
        )
