"""Sorting for the tabular project view."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import fields
from enum import Enum
from typing import Any

from .models import Project, RagStatus, join_multi_value


class SortDirection(str, Enum):
    """Table sort direction."""

    ASCENDING = "ascending"
    DESCENDING = "descending"


SORTABLE_COLUMNS = frozenset(f.name for f in fields(Project)) - {"id"}


def _sort_value(value: Any) -> Any:
    if isinstance(value, RagStatus):
        return value.value.lower()
    if isinstance(value, tuple):
        return join_multi_value(value).lower()  # type: ignore[arg-type]
    if isinstance(value, str):
        return value.lower()
    return value


def _is_missing(value: Any) -> bool:
    return value is None or value in ("", ())


def sort_projects(
    projects: Sequence[Project],
    key: str,
    direction: SortDirection = SortDirection.ASCENDING,
) -> list[Project]:
    """Sort projects by one column.

    Strings compare case-insensitively and multi-value fields by their joined
    text. Projects without a value sort last in both directions. The sort is
    stable.

    Raises:
        ValueError: If `key` is not a sortable column
    """
    if key not in SORTABLE_COLUMNS:
        raise ValueError(
            f"Cannot sort by '{key}'. Valid columns: {', '.join(sorted(SORTABLE_COLUMNS))}"
        )

    present = [p for p in projects if not _is_missing(getattr(p, key))]
    missing = [p for p in projects if _is_missing(getattr(p, key))]
    present.sort(
        key=lambda p: _sort_value(getattr(p, key)),
        reverse=direction == SortDirection.DESCENDING,
    )
    return present + missing
