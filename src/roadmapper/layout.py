"""Timeline layout: packing projects into non-overlapping rows.

Projects visible in the display year are sorted by start date and placed
greedily into the first row whose last project ends on or before the new
project's start. This is first-fit interval graph coloring; the heuristic is
kept exactly (rather than an optimal coloring) so row assignment is stable
for a given input order.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import date

from .exceptions import DateParseError
from .intervals import VisibleInterval, visible_interval
from .logger import checks_enabled, get_logger
from .models import Project

logger = get_logger()

# HSL colors assigned to teams in alphabetical order
TEAM_COLORS = [
    "hsl(210 90% 55%)",  # Bright Blue
    "hsl(340 85% 60%)",  # Bright Red-Pink
    "hsl(145 70% 45%)",  # Strong Green
    "hsl(35 95% 55%)",  # Bright Orange
    "hsl(265 80% 65%)",  # Vibrant Purple
    "hsl(190 85% 50%)",  # Teal
    "hsl(50 100% 55%)",  # Gold
    "hsl(280 70% 60%)",  # Indigo
    "hsl(0 80% 60%)",  # Strong Red
    "hsl(170 75% 45%)",  # Sea Green
    "hsl(300 80% 65%)",  # Magenta
    "hsl(25 90% 50%)",  # Brownish Orange
]


@dataclass(frozen=True)
class RowLayout:
    """Result of row packing for one display year."""

    rows: dict[str, int] = field(default_factory=dict[str, int])  # project id -> row index
    row_count: int = 0
    skipped: tuple[str, ...] = ()  # IDs excluded because their dates are unusable

    def row_of(self, project_id: str) -> int | None:
        """Row index of a project, or None when it is not on this year's timeline."""
        return self.rows.get(project_id)


@dataclass(slots=True)
class _Row:
    index: int
    last_end: date


def pack_rows(projects: Sequence[Project], year: int) -> RowLayout:
    """Assign each project visible in `year` to the lowest row it fits in.

    A project fits a row when the row's last end date is <= its start date,
    so back-to-back projects share a row. Projects with malformed dates or an
    end before their start are excluded and reported in `skipped`; one bad
    project never prevents the others from being laid out.
    """
    visible: list[tuple[Project, date, date]] = []
    skipped: list[str] = []

    for project in projects:
        try:
            start, end = project.parsed_dates()
        except DateParseError as e:
            logger.warning(f"Skipping project '{project.name}' ({project.id}): {e}")
            skipped.append(project.id)
            continue

        if not start.year <= year <= end.year:
            if checks_enabled():
                logger.checks(f"  {project.name}: outside {year}, not shown")
            continue

        if end < start:
            logger.warning(
                f"Skipping project '{project.name}' ({project.id}): "
                f"end date {project.end_date} is before start date {project.start_date}"
            )
            skipped.append(project.id)
            continue

        visible.append((project, start, end))

    # sorted() is stable: equal start dates keep their input order
    visible.sort(key=lambda item: item[1])

    rows: list[_Row] = []
    assignments: dict[str, int] = {}
    for project, start, end in visible:
        placed = None
        for row in rows:
            if checks_enabled():
                logger.checks(
                    f"  {project.name}: row {row.index} ends {row.last_end}, starts {start}"
                )
            if row.last_end <= start:
                placed = row
                break

        if placed is None:
            placed = _Row(index=len(rows), last_end=end)
            rows.append(placed)
        else:
            placed.last_end = end

        assignments[project.id] = placed.index
        logger.changes(f"{project.name} -> row {placed.index}")

    return RowLayout(rows=assignments, row_count=len(rows), skipped=tuple(skipped))


def team_colors(projects: Sequence[Project], palette: Sequence[str] | None = None) -> dict[str, str]:
    """Map each distinct team (alphabetical) to a palette color, cycling as needed."""
    colors = list(palette) if palette else TEAM_COLORS
    teams = sorted({p.team for p in projects if p.team})
    return {team: colors[i % len(colors)] for i, team in enumerate(teams)}


@dataclass(frozen=True)
class TimelineBar:
    """A project bar positioned on the timeline."""

    project: Project
    row: int
    interval: VisibleInterval
    color: str


@dataclass(frozen=True)
class Timeline:
    """Renderable timeline for one display year."""

    year: int
    bars: list[TimelineBar]
    row_count: int
    skipped: tuple[str, ...] = ()

    def bars_in_row(self, row: int) -> list[TimelineBar]:
        """Bars in one row, left to right."""
        return [bar for bar in self.bars if bar.row == row]


def build_timeline(
    projects: Sequence[Project], year: int, palette: Sequence[str] | None = None
) -> Timeline:
    """Pack rows and compute bar geometry and colors for every visible project."""
    layout = pack_rows(projects, year)
    colors = team_colors(projects, palette)
    default_color = (list(palette) if palette else TEAM_COLORS)[0]

    bars: list[TimelineBar] = []
    for project in projects:
        row = layout.row_of(project.id)
        if row is None:
            continue
        # Dates were validated by pack_rows
        start, end = project.parsed_dates()
        interval = visible_interval(start, end, year)
        if interval is None:
            continue
        bars.append(
            TimelineBar(
                project=project,
                row=row,
                interval=interval,
                color=colors.get(project.team, default_color),
            )
        )

    bars.sort(key=lambda bar: (bar.row, bar.interval.start_offset))
    return Timeline(year=year, bars=bars, row_count=layout.row_count, skipped=layout.skipped)
