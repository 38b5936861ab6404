"""Rendering of a packed timeline as a text lane chart or a Mermaid gantt chart."""

from __future__ import annotations

import math
import re
from datetime import date

from .intervals import add_days, day_offset, days_in_year, year_start
from .layout import Timeline, TimelineBar

BAR_CHAR = "#"
EMPTY_CHAR = "."
QUARTER_START_MONTHS = (1, 4, 7, 10)
MONTHS_PER_YEAR = 12

_MERMAID_ID_UNSAFE = re.compile(r"[^A-Za-z0-9_]")
_MERMAID_LABEL_UNSAFE = re.compile(r"[:#;]")


def lane_label(row: int) -> str:
    """Human-facing 1-based lane name."""
    return f"Lane {row + 1}"


def _columns(bar: TimelineBar, width: int) -> tuple[int, int]:
    start = math.floor(bar.interval.left * width)
    end = math.ceil((bar.interval.left + bar.interval.width) * width)
    return start, max(start + 1, min(width, end))


def _month_ruler(year: int, width: int, gutter: int) -> str:
    total_days = days_in_year(year)
    ruler = [" "] * width
    for month in range(1, MONTHS_PER_YEAR + 1):
        first = date(year, month, 1)
        col = math.floor(day_offset(first, year_start(year)) / total_days * width)
        label = first.strftime("%b")
        # Skip labels that would run into the previous one
        if all(ruler[c] == " " for c in range(col, min(width, col + len(label) + 1))):
            for i, char in enumerate(label):
                if col + i < width:
                    ruler[col + i] = char
    return " " * gutter + "".join(ruler).rstrip()


def render_lanes(timeline: Timeline, width: int = 72) -> str:
    """Draw each timeline row as a line of bars across the year.

    Below the chart every lane lists its projects with their full dates.
    """
    labels = [lane_label(row) for row in range(timeline.row_count)]
    gutter = max((len(label) for label in labels), default=0) + 2
    lines = [f"{timeline.year}", _month_ruler(timeline.year, width, gutter)]

    for row, label in enumerate(labels):
        cells = [EMPTY_CHAR] * width
        for bar in timeline.bars_in_row(row):
            start, end = _columns(bar, width)
            for col in range(start, end):
                cells[col] = BAR_CHAR
        lines.append(f"{label.ljust(gutter)}{''.join(cells)}")

    if not timeline.bars:
        lines.append("(no projects in this year)")

    lines.append("")
    for row, label in enumerate(labels):
        lines.append(f"{label}:")
        for bar in timeline.bars_in_row(row):
            p = bar.project
            lines.append(f"  {p.name} [{p.team}] {p.start_date} .. {p.end_date}")

    if timeline.skipped:
        lines.append("")
        lines.append(f"Skipped (unusable dates): {', '.join(timeline.skipped)}")

    return "\n".join(lines)


def mermaid_id(project_id: str) -> str:
    """Make a project ID safe for use as a Mermaid task ID."""
    return _MERMAID_ID_UNSAFE.sub("_", project_id)


def _mermaid_label(name: str) -> str:
    return _MERMAID_LABEL_UNSAFE.sub(" ", name).strip() or "(unnamed)"


def _theme_css(timeline: Timeline) -> list[str]:
    return [f"#{mermaid_id(bar.project.id)} {{ fill: {bar.color} }}" for bar in timeline.bars]


def render_mermaid(
    timeline: Timeline, title: str = "Project Roadmap", *, quarters: bool = True
) -> str:
    """Render the timeline as a Mermaid gantt chart with one section per lane.

    Bars are clamped to the display year, matching the yearly timeline.
    """
    origin = year_start(timeline.year)
    lines: list[str] = []

    css = _theme_css(timeline)
    if css:
        lines.extend(["---", "config:", '    themeCSS: "'])
        lines.extend(f"        {rule}  \\n" for rule in css)
        lines.extend(['    "', "---"])

    lines.extend(
        [
            "gantt",
            f"    title {title}",
            "    dateFormat YYYY-MM-DD",
            "    axisFormat %b",
        ]
    )

    if quarters:
        lines.append("")
        for index, month in enumerate(QUARTER_START_MONTHS, start=1):
            lines.append(
                f"    Q{index} : vert, q{index}_{timeline.year}, "
                f"{date(timeline.year, month, 1).isoformat()}, 0d"
            )

    for row in range(timeline.row_count):
        lines.append("")
        lines.append(f"    section {lane_label(row)}")
        for bar in timeline.bars_in_row(row):
            start = add_days(origin, bar.interval.start_offset)
            lines.append(
                f"    {_mermaid_label(bar.project.name)} :{mermaid_id(bar.project.id)}, "
                f"{start.isoformat()}, {bar.interval.days}d"
            )

    return "\n".join(lines)
