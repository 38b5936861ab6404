"""Pytest configuration and fixtures for roadmapper tests."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

import pytest

from roadmapper import context
from roadmapper.logger import reset_logger
from roadmapper.models import Project, RagStatus, split_dependencies, split_multi_value

FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture(autouse=True)
def isolate_global_state() -> None:
    """Reset the logger and CLI config path before each test for isolation."""
    reset_logger()
    context.set_config_path(None)


@pytest.fixture
def fixtures_dir() -> Path:
    """Get the fixtures directory."""
    return FIXTURES_DIR


def make_project(  # noqa: PLR0913 - mirrors the Project fields
    project_id: str,
    start_date: str,
    end_date: str,
    *,
    name: str | None = None,
    team: str = "Sales Ops",
    epic_number: str = "EPIC-1",
    function: str | Iterable[str] | None = None,
    assignee: str | Iterable[str] | None = None,
    support: str | Iterable[str] | None = None,
    dependencies: str | Iterable[str] | None = None,
    progress: int | None = None,
    rag_status: RagStatus | None = None,
) -> Project:
    """Create a Project with a fixed ID for tests.

    Example:
        make_project("a", "2024-01-01", "2024-01-31", team="Marketing Ops")
    """
    return Project(
        id=project_id,
        name=name or project_id.upper(),
        epic_number=epic_number,
        team=team,
        start_date=start_date,
        end_date=end_date,
        function=split_multi_value(function),
        assignee=split_multi_value(assignee),
        support=split_multi_value(support),
        dependencies=split_dependencies(dependencies),
        progress=progress,
        rag_status=rag_status,
    )
