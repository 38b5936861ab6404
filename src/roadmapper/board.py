"""In-memory board session.

The board owns the working list of projects for one session. Every mutation
builds a new list and swaps it in; records themselves are never modified.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Sequence
from typing import Any

from .csv_io import import_projects
from .exceptions import ProjectNotFoundError, SequencingServiceError
from .filters import ProjectFilter
from .logger import get_logger
from .models import Project, RagStatus, split_dependencies, split_multi_value
from .reschedule import DragGesture, resolve_reschedule, shift_project
from .sequencing import SequenceSuggestion, SequencingClient, reconcile_sequence

logger = get_logger()

MULTI_VALUE_FIELDS = ("function", "assignee", "support")


class Board:
    """A roadmap board: a titled, ordered collection of projects."""

    def __init__(
        self,
        projects: Sequence[Project] | None = None,
        *,
        title: str = "Project Roadmap",
        display_year: int | None = None,
    ) -> None:
        self._projects: tuple[Project, ...] = tuple(projects or ())
        self.title = title
        self.display_year = display_year

    @property
    def projects(self) -> list[Project]:
        """Snapshot of the current project list."""
        return list(self._projects)

    def _replace(self, projects: Sequence[Project]) -> None:
        self._projects = tuple(projects)

    def __len__(self) -> int:
        return len(self._projects)

    def get_project(self, project_id: str) -> Project:
        """Look up a project by ID.

        Raises:
            ProjectNotFoundError: If no project has this ID
        """
        for project in self._projects:
            if project.id == project_id:
                return project
        raise ProjectNotFoundError(f"Unknown project: {project_id}")

    def find_by_name(self, name: str) -> Project | None:
        """First project with the given name, if any."""
        return next((p for p in self._projects if p.name == name), None)

    def add_project(self, project: Project) -> Project:
        """Append a project."""
        self._replace([*self._projects, project])
        logger.changes(f"Added project '{project.name}' ({project.id})")
        return project

    def update_project(self, project_id: str, **changes: Any) -> Project:
        """Replace fields of one project, keeping its ID.

        Multi-value fields accept either a sequence or a comma-delimited string.

        Raises:
            ProjectNotFoundError: If no project has this ID
            ValueError: If a change tries to alter the ID
        """
        if "id" in changes:
            raise ValueError("Project IDs are immutable")
        for name in MULTI_VALUE_FIELDS:
            if name in changes:
                changes[name] = split_multi_value(changes[name])
        if "dependencies" in changes:
            changes["dependencies"] = split_dependencies(changes["dependencies"])
        if "rag_status" in changes:
            changes["rag_status"] = RagStatus.parse(changes["rag_status"])

        current = self.get_project(project_id)
        updated = dataclasses.replace(current, **changes)
        self._replace([updated if p.id == project_id else p for p in self._projects])
        logger.changes(f"Updated project '{updated.name}' ({project_id})")
        return updated

    def delete_project(self, project_id: str) -> None:
        """Remove one project.

        Raises:
            ProjectNotFoundError: If no project has this ID
        """
        project = self.get_project(project_id)
        self._replace([p for p in self._projects if p.id != project_id])
        logger.changes(f"Deleted project '{project.name}' ({project_id})")

    def delete_all(self) -> None:
        """Remove every project."""
        self._replace([])
        logger.changes("Deleted all projects")

    def import_csv(self, text: str) -> list[Project]:
        """Append every project of a CSV file, or none if any row is bad."""
        imported = import_projects(text)
        self._replace([*self._projects, *imported])
        return imported

    def move_project(self, project_id: str, display_year: int, gesture: DragGesture) -> Project:
        """Apply a drag gesture to one project."""
        moved = resolve_reschedule(self.get_project(project_id), display_year, gesture)
        self._replace([moved if p.id == project_id else p for p in self._projects])
        return moved

    def shift_project(self, project_id: str, day_delta: int) -> Project:
        """Move one project by a whole number of days, keeping its duration.

        Raises:
            ProjectNotFoundError: If no project has this ID
            DateParseError: If the project dates are malformed
        """
        moved = shift_project(self.get_project(project_id), day_delta)
        self._replace([moved if p.id == project_id else p for p in self._projects])
        logger.changes(f"{moved.name}: shifted {day_delta:+d} days")
        return moved

    def sequencing_candidates(self, project_filter: ProjectFilter | None = None) -> list[Project]:
        """Projects an AI sequencing call would reorder.

        Raises:
            SequencingServiceError: If no project matches
        """
        candidates = project_filter.apply(self._projects) if project_filter else self.projects
        if not candidates:
            raise SequencingServiceError(
                "No projects to optimize. Add some projects or adjust filters."
            )
        return candidates

    def optimize(
        self,
        client: SequencingClient,
        team_availability: str,
        project_filter: ProjectFilter | None = None,
    ) -> SequenceSuggestion:
        """Reorder the board by an AI-suggested sequence.

        With an active filter only the matching projects are sent and
        reordered; the rest keep their order at the end of the list. If the
        call fails the board is left untouched.

        Raises:
            SequencingServiceError: If there is nothing to sequence or the call fails
        """
        projects = self._projects
        candidates = self.sequencing_candidates(project_filter)
        suggestion = client.suggest_sequence(candidates, team_availability)
        self._replace(reconcile_sequence(projects, candidates, suggestion.optimal_sequence))
        logger.changes(f"Applied AI sequence to {len(candidates)} projects")
        return suggestion
