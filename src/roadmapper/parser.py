"""YAML reading and writing of roadmap board files."""

from __future__ import annotations

from contextlib import suppress
from datetime import date
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError as PydanticValidationError
from ruamel.yaml import YAML
from ruamel.yaml.comments import CommentedMap, CommentedSeq
from ruamel.yaml.constructor import RoundTripConstructor

from .board import Board
from .exceptions import ParseError, ValidationError
from .models import join_multi_value
from .schemas import BoardSchema, ProjectSchema

# Keys the original board used for some fields; written back under the key already present
FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "epic_number": ("epic_number", "epicNumber"),
    "team": ("team", "revopsTeam", "revops_team"),
    "start_date": ("start_date", "startDate"),
    "end_date": ("end_date", "endDate"),
    "function": ("function", "impact"),
    "assignee": ("assignee", "owner", "resources"),
    "rag_status": ("rag_status", "ragStatus"),
}

TIMESTAMP_TAG = "tag:yaml.org,2002:timestamp"


class BoardLoader(yaml.SafeLoader):
    """SafeLoader that leaves date-like scalars as strings.

    Project dates are validated when the timeline is laid out, so an
    impossible date such as 2024-02-30 must not stop the board from loading.
    """


BoardLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag != TIMESTAMP_TAG]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


class BoardConstructor(RoundTripConstructor):
    """Round-trip constructor that keeps impossible dates as plain text."""

    def construct_yaml_timestamp(self, node: Any, values: Any = None) -> Any:
        try:
            return super().construct_yaml_timestamp(node, values)
        except ValueError:
            return self.construct_scalar(node)


BoardConstructor.add_constructor(TIMESTAMP_TAG, BoardConstructor.construct_yaml_timestamp)


class BoardParser:
    """Parser for board YAML files."""

    def parse_file(self, file_path: Path | str) -> Board:
        """Parse a YAML file into a Board."""
        path = Path(file_path)
        if not path.exists():
            raise ParseError(f"File not found: {file_path}")

        try:
            with path.open(encoding="utf-8") as f:
                data: Any = yaml.load(f, Loader=BoardLoader)
        except yaml.YAMLError as e:
            raise ParseError(f"Failed to parse YAML: {e}") from e

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ParseError("YAML must contain a dictionary at the root level")

        return self.parse_data(data)  # type: ignore[arg-type]

    def parse_data(self, data: dict[str, Any]) -> Board:
        """Validate loaded YAML data and convert it into a Board."""
        try:
            schema = BoardSchema(**data)
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid board structure: {e}") from e

        return Board(
            projects=[p.to_project() for p in schema.projects],
            title=schema.metadata.title,
            display_year=schema.metadata.display_year,
        )


def load_board(path: Path | str) -> Board:
    """Load a board file."""
    return BoardParser().parse_file(path)


def _project_fields(schema: ProjectSchema) -> dict[str, Any]:
    data = schema.model_dump(mode="json")
    return {key: value for key, value in data.items() if value not in (None, [])}


def _existing_key(node: CommentedMap, field_name: str) -> str:
    for key in FIELD_ALIASES.get(field_name, (field_name,)):
        if key in node:
            return key
    return field_name


def _update_project_in_place(node: CommentedMap, fields: dict[str, Any]) -> None:
    """Write changed fields into an existing YAML mapping, keeping its key style."""
    for name in ProjectSchema.model_fields:
        key = _existing_key(node, name)
        if name not in fields:
            if key in node:
                del node[key]
            continue
        value = fields[name]
        current = node.get(key)
        # Keep comma-delimited strings as strings and unquoted dates as dates
        if isinstance(value, list) and isinstance(current, str):
            value = join_multi_value(value)  # type: ignore[arg-type]
        elif isinstance(current, date) and isinstance(value, str):
            with suppress(ValueError):
                value = date.fromisoformat(value)
        if current != value:
            node[key] = value


def write_board(path: Path | str, board: Board) -> None:
    """Write a board to YAML.

    An existing file is updated with ruamel.yaml round-tripping so comments,
    key order and the field naming style of each project survive.
    """
    path = Path(path)
    yaml_rt = YAML()
    yaml_rt.Constructor = BoardConstructor

    data: Any = None
    if path.exists():
        with path.open(encoding="utf-8") as f:
            data = yaml_rt.load(f)  # type: ignore[no-untyped-call]
    if not isinstance(data, CommentedMap):
        data = CommentedMap()

    metadata = data.get("metadata")
    if not isinstance(metadata, CommentedMap):
        metadata = CommentedMap()
        data.insert(0, "metadata", metadata)
    metadata["title"] = board.title
    if board.display_year is not None:
        metadata["display_year"] = board.display_year
    elif "display_year" in metadata:
        del metadata["display_year"]

    existing: dict[str, CommentedMap] = {}
    old_projects = data.get("projects")
    if isinstance(old_projects, list):
        for node in old_projects:  # type: ignore[reportUnknownVariableType]
            if isinstance(node, CommentedMap) and "id" in node:
                existing[str(node["id"])] = node

    projects = CommentedSeq()
    for project in board.projects:
        fields = _project_fields(ProjectSchema.from_project(project))
        node = existing.get(project.id)
        if node is None:
            node = CommentedMap(fields)
        else:
            _update_project_in_place(node, fields)
        projects.append(node)
    data["projects"] = projects

    with path.open("w", encoding="utf-8") as f:
        yaml_rt.dump(data, f)  # type: ignore[no-untyped-call]
