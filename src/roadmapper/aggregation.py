"""Monthly resource load: how many projects each assignee carries per month."""

from __future__ import annotations

import calendar
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import date

from .exceptions import DateParseError
from .intervals import ranges_overlap
from .logger import get_logger
from .models import Project

logger = get_logger()

MONTHS_PER_YEAR = 12


@dataclass(frozen=True)
class MonthLoad:
    """Project counts per assignee for one calendar month."""

    month: date  # First day of the month
    counts: dict[str, int] = field(default_factory=dict[str, int])

    @property
    def label(self) -> str:
        """Short month name, e.g. 'Jan'."""
        return self.month.strftime("%b")

    @property
    def total(self) -> int:
        """Sum of all assignee counts."""
        return sum(self.counts.values())


def month_bounds(year: int, month: int) -> tuple[date, date]:
    """First and last day of a month."""
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def default_display_year(projects: Sequence[Project], today: date | None = None) -> int:
    """Year of the first project with a usable start date, else the current year."""
    for project in projects:
        try:
            start, _ = project.parsed_dates()
        except DateParseError:
            continue
        return start.year
    return (today or date.today()).year  # noqa: DTZ011


def monthly_load(
    projects: Sequence[Project], year: int, assignees: Sequence[str] | None = None
) -> list[MonthLoad]:
    """Count, for each month of `year`, the projects overlapping it per assignee.

    Args:
        projects: Projects to aggregate
        year: Display year
        assignees: Restrict the result to these assignees; None or empty means all

    Returns:
        Twelve MonthLoad entries, January first. Every displayed assignee has
        an entry in each month, zero when idle.
    """
    all_assignees = sorted({a for p in projects for a in p.assignee})
    shown = [a for a in all_assignees if a in set(assignees)] if assignees else all_assignees

    spans: list[tuple[Project, date, date]] = []
    for project in projects:
        try:
            start, end = project.parsed_dates()
        except DateParseError as e:
            logger.warning(f"Invalid date for project '{project.name}': {e}")
            continue
        spans.append((project, start, end))

    result: list[MonthLoad] = []
    for month in range(1, MONTHS_PER_YEAR + 1):
        month_start, month_end = month_bounds(year, month)
        counts = dict.fromkeys(shown, 0)
        for project, start, end in spans:
            if not ranges_overlap(start, end, month_start, month_end):
                continue
            for assignee in project.assignee:
                if assignee in counts:
                    counts[assignee] += 1
        result.append(MonthLoad(month=month_start, counts=counts))
    return result
