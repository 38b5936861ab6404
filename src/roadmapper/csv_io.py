"""CSV import and export of roadmap projects.

Import is positional so that both the original column layout (Team, Impact,
Owner) and the later one (RevOps Team, Function, Assignee, Progress, RAG
Status) load the same way. A header row is optional and recognized by
keyword. Import is all-or-nothing: the first bad row aborts the whole file.
"""

from __future__ import annotations

import csv
import io
import re
from collections.abc import Sequence
from datetime import date, datetime
from pathlib import Path

from .exceptions import CsvImportError, ImportRowError
from .logger import get_logger
from .models import (
    Project,
    RagStatus,
    join_multi_value,
    new_project_id,
    split_dependencies,
    split_multi_value,
)

logger = get_logger()

EXPORT_COLUMNS = [
    "Project Name",
    "Epic Number",
    "RevOps Team",
    "Function",
    "Assignee",
    "Support",
    "Dependencies",
    "Start Date",
    "End Date",
    "Progress",
    "RAG Status",
]

HEADER_KEYWORDS = re.compile(
    r"project name|epic number|(revops )?team|impact|function|assignee|owner", re.IGNORECASE
)

# Accepted input date formats; output is always ISO
DATE_FORMATS = ("%Y-%m-%d", "%Y/%m/%d", "%m/%d/%Y")

MAX_PROGRESS = 100


def _is_header(row: Sequence[str]) -> bool:
    return any(HEADER_KEYWORDS.fullmatch(cell.strip()) for cell in row)


def _parse_date(value: str) -> date | None:
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(value.strip(), fmt).date()  # noqa: DTZ007 - date only
        except ValueError:
            continue
    return None


def _cell(row: Sequence[str], index: int) -> str:
    return row[index].strip() if index < len(row) else ""


def _parse_progress(value: str, row_number: int) -> int | None:
    if not value:
        return None
    try:
        progress = int(float(value))
    except (ValueError, OverflowError):
        raise ImportRowError(
            row_number, f"Invalid progress '{value}' in row {row_number}. Use a number 0-100."
        ) from None
    if not 0 <= progress <= MAX_PROGRESS:
        raise ImportRowError(
            row_number, f"Progress {progress} in row {row_number} is outside 0-100."
        )
    return progress


def _parse_row(row: Sequence[str], row_number: int) -> Project:
    name = _cell(row, 0)
    epic_number = _cell(row, 1)
    team = _cell(row, 2)
    start_text = _cell(row, 7)
    end_text = _cell(row, 8)

    if not (name and epic_number and team and start_text and end_text):
        raise ImportRowError(
            row_number,
            f"Row {row_number} is incomplete. Project Name, Epic Number, Team, "
            "Start Date, and End Date are required.",
        )

    start = _parse_date(start_text)
    end = _parse_date(end_text)
    if start is None or end is None:
        raise ImportRowError(
            row_number,
            f"Invalid date format in row {row_number}. "
            "Please use a valid date format (e.g., YYYY-MM-DD).",
        )

    try:
        rag_status = RagStatus.parse(_cell(row, 10))
    except ValueError as e:
        raise ImportRowError(row_number, f"Row {row_number}: {e}") from e

    return Project(
        id=new_project_id(),
        name=name,
        epic_number=epic_number,
        team=team,
        start_date=start.isoformat(),
        end_date=end.isoformat(),
        function=split_multi_value(_cell(row, 3)),
        assignee=split_multi_value(_cell(row, 4)),
        support=split_multi_value(_cell(row, 5)),
        dependencies=split_dependencies(_cell(row, 6)),
        progress=_parse_progress(_cell(row, 9), row_number),
        rag_status=rag_status,
    )


def import_projects(text: str) -> list[Project]:
    """Parse CSV text into new projects with fresh IDs.

    Raises:
        CsvImportError: If the file has no data rows
        ImportRowError: If any row is incomplete or has invalid values
    """
    rows = [row for row in csv.reader(io.StringIO(text)) if any(cell.strip() for cell in row)]
    if not rows:
        raise CsvImportError("CSV file is empty or contains only a header.")

    has_header = _is_header(rows[0])
    data_rows = rows[1:] if has_header else rows
    if not data_rows:
        raise CsvImportError("CSV file is empty or contains only a header.")

    first_row_number = 2 if has_header else 1
    projects = [
        _parse_row(row, index + first_row_number) for index, row in enumerate(data_rows)
    ]
    logger.changes(f"Imported {len(projects)} projects from CSV")
    return projects


def read_csv_text(path: Path | str) -> str:
    """Read a CSV file from disk for import."""
    path = Path(path)
    if not path.exists():
        raise CsvImportError(f"File not found: {path}")
    # utf-8-sig strips the BOM spreadsheet tools like to add
    return path.read_text(encoding="utf-8-sig")


def export_projects(projects: Sequence[Project]) -> str:
    """Serialize projects to CSV text with the export header order."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(EXPORT_COLUMNS)
    for p in projects:
        writer.writerow(
            [
                p.name,
                p.epic_number,
                p.team,
                join_multi_value(p.function),
                join_multi_value(p.assignee),
                join_multi_value(p.support),
                join_multi_value(p.dependencies),
                p.start_date,
                p.end_date,
                p.progress or 0,
                p.rag_status.value if p.rag_status else "",
            ]
        )
    return buffer.getvalue()


def write_csv_file(path: Path | str, projects: Sequence[Project]) -> None:
    """Export projects to a CSV file on disk."""
    Path(path).write_text(export_projects(projects), encoding="utf-8")
