"""Data models for Roadmapper."""

from __future__ import annotations

import uuid
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date
from enum import Enum

from .intervals import parse_iso_date

MULTI_VALUE_SEPARATOR = ","
MULTI_VALUE_JOINER = ", "

# Placeholder the original board wrote into empty dependency fields
NO_DEPENDENCY = "none"


class RagStatus(str, Enum):
    """Red/Amber/Green health flag of a project."""

    RED = "Red"
    AMBER = "Amber"
    GREEN = "Green"

    @classmethod
    def parse(cls, value: str | RagStatus | None) -> RagStatus | None:
        """Parse a RAG status case-insensitively; blank values mean no status.

        Raises:
            ValueError: If the value is not one of Red, Amber, Green
        """
        if value is None or isinstance(value, RagStatus):
            return value
        text = value.strip()
        if not text:
            return None
        for status in cls:
            if status.value.lower() == text.lower():
                return status
        raise ValueError(f"Invalid RAG status '{value}'. Must be Red, Amber, or Green")


def split_multi_value(value: str | Iterable[str] | None) -> tuple[str, ...]:
    """Split a comma-delimited field into trimmed, non-empty entries.

    Already-split iterables are trimmed and filtered the same way.
    """
    if value is None:
        return ()
    parts = value.split(MULTI_VALUE_SEPARATOR) if isinstance(value, str) else value
    return tuple(part.strip() for part in parts if part and part.strip())


def split_dependencies(value: str | Iterable[str] | None) -> tuple[str, ...]:
    """Split a dependency field, dropping the "None" placeholder."""
    return tuple(name for name in split_multi_value(value) if name.lower() != NO_DEPENDENCY)


def join_multi_value(values: Iterable[str]) -> str:
    """Join multi-value entries back into their delimited storage form."""
    return MULTI_VALUE_JOINER.join(values)


def new_project_id() -> str:
    """Mint a fresh opaque project ID."""
    return f"proj-{uuid.uuid4().hex[:12]}"


def _empty() -> tuple[str, ...]:
    return ()


@dataclass(frozen=True)
class Project:
    """A single roadmap project.

    Records are immutable; every edit produces a new instance with the same
    ID via dataclasses.replace(). Dates are kept as ISO strings exactly as
    entered so that a malformed date only affects this project when it is
    laid out, never the loading of the board.
    """

    id: str
    name: str
    epic_number: str
    team: str
    start_date: str
    end_date: str
    function: tuple[str, ...] = field(default_factory=_empty)
    assignee: tuple[str, ...] = field(default_factory=_empty)
    support: tuple[str, ...] = field(default_factory=_empty)
    dependencies: tuple[str, ...] = field(default_factory=_empty)  # Project names
    progress: int | None = None
    rag_status: RagStatus | None = None

    @classmethod
    def create(  # noqa: PLR0913 - mirrors the project form fields
        cls,
        name: str,
        epic_number: str,
        team: str,
        start_date: str | date,
        end_date: str | date,
        *,
        function: str | Iterable[str] | None = None,
        assignee: str | Iterable[str] | None = None,
        support: str | Iterable[str] | None = None,
        dependencies: str | Iterable[str] | None = None,
        progress: int | None = None,
        rag_status: str | RagStatus | None = None,
    ) -> Project:
        """Create a new project with a freshly minted ID."""
        return cls(
            id=new_project_id(),
            name=name,
            epic_number=epic_number,
            team=team,
            start_date=_iso(start_date),
            end_date=_iso(end_date),
            function=split_multi_value(function),
            assignee=split_multi_value(assignee),
            support=split_multi_value(support),
            dependencies=split_dependencies(dependencies),
            progress=progress,
            rag_status=RagStatus.parse(rag_status),
        )

    def parsed_dates(self) -> tuple[date, date]:
        """Return (start, end) as dates.

        Raises:
            DateParseError: If either date is malformed
        """
        return parse_iso_date(self.start_date), parse_iso_date(self.end_date)


def _iso(value: str | date) -> str:
    return value.isoformat() if isinstance(value, date) else value
