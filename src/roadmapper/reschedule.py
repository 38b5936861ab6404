"""Drag-to-reschedule: turning a horizontal drag into new project dates."""

from __future__ import annotations

import dataclasses
from collections.abc import Sequence
from dataclasses import dataclass

from .exceptions import DateParseError
from .intervals import add_days, day_offset, days_in_year, pixels_to_days, year_start
from .logger import get_logger
from .models import Project

logger = get_logger()


@dataclass(frozen=True)
class DragGesture:
    """Pixel measurements of one drag-and-drop on the yearly timeline.

    Attributes:
        viewport_width: Width of the timeline viewport for the display year
        grab_offset_x: Pointer distance from the bar's left edge, captured at drag start
        drop_x: Pointer position at drop, relative to the viewport's left edge
    """

    viewport_width: float
    grab_offset_x: float
    drop_x: float


def shift_project(project: Project, day_delta: int) -> Project:
    """Move both dates of a project by `day_delta` days, keeping its duration.

    Raises:
        DateParseError: If the project dates are malformed
    """
    start, end = project.parsed_dates()
    return dataclasses.replace(
        project,
        start_date=add_days(start, day_delta).isoformat(),
        end_date=add_days(end, day_delta).isoformat(),
    )


def resolve_reschedule(project: Project, display_year: int, gesture: DragGesture) -> Project:
    """Compute the project's dates after it is dropped at a new position.

    The drop position gives the new start as a day of the display year. The
    delta is taken against the project's current start as a day of its own
    calendar year and applied to both dates. No other project is touched and
    overlaps are allowed. On malformed dates or an unusable viewport the
    project is returned unchanged.
    """
    if gesture.viewport_width <= 0:
        logger.warning(f"Ignoring move of '{project.name}': viewport width is not positive")
        return project

    try:
        start, _ = project.parsed_dates()
    except DateParseError as e:
        logger.warning(f"Ignoring move of '{project.name}': {e}")
        return project

    total_days = days_in_year(display_year)
    new_start_day = pixels_to_days(
        gesture.drop_x - gesture.grab_offset_x, gesture.viewport_width, total_days
    )
    original_start_day = day_offset(start, year_start(start.year))
    day_delta = new_start_day - original_start_day

    try:
        moved = shift_project(project, day_delta)
    except OverflowError:
        logger.warning(f"Ignoring move of '{project.name}': dates out of range")
        return project
    logger.changes(
        f"{project.name}: {project.start_date}..{project.end_date} -> "
        f"{moved.start_date}..{moved.end_date} ({day_delta:+d} days)"
    )
    return moved


def move_project(
    projects: Sequence[Project], project_id: str, display_year: int, gesture: DragGesture
) -> list[Project]:
    """Return a new project list with one project rescheduled by a drag."""
    return [
        resolve_reschedule(p, display_year, gesture) if p.id == project_id else p for p in projects
    ]
