"""Configuration loader for roadmapper_config.yaml.

All sections are optional; a missing file means defaults everywhere.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator

from . import context
from .layout import TEAM_COLORS

CONFIG_FILE_NAME = "roadmapper_config.yaml"

DEFAULT_MODEL = "gpt-4o-mini"


class TimelineConfig(BaseModel):
    """Configuration for timeline layout and rendering."""

    display_year: int | None = None  # None: board metadata, then first project's year
    palette: list[str] = Field(default_factory=lambda: list(TEAM_COLORS))
    chart_width: int = Field(default=72, ge=12)  # Characters for the text lane chart

    @field_validator("palette")
    @classmethod
    def palette_not_empty(cls, v: list[str]) -> list[str]:
        """A palette needs at least one color."""
        if not v:
            raise ValueError("timeline.palette must contain at least one color")
        return v


class SequencingConfig(BaseModel):
    """Configuration for the AI sequencing service."""

    model: str = DEFAULT_MODEL
    temperature: float = Field(default=0.1, ge=0.0, le=2.0)
    base_url: str | None = None  # OpenAI-compatible endpoint; None uses the SDK default
    api_key_env: str = "OPENAI_API_KEY"
    timeout_seconds: float = Field(default=60.0, gt=0)


class CsvConfig(BaseModel):
    """Configuration for CSV export."""

    export_file_name: str = "projects.csv"


class RoadmapperConfig(BaseModel):
    """Top-level configuration."""

    timeline: TimelineConfig = Field(default_factory=TimelineConfig)
    sequencing: SequencingConfig = Field(default_factory=SequencingConfig)
    csv: CsvConfig = Field(default_factory=CsvConfig)


def load_config(config_path: Path | str) -> RoadmapperConfig:
    """Load configuration from a YAML file.

    Raises:
        FileNotFoundError: If the config file doesn't exist
        ValueError: If the config is invalid
    """
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with config_path.open(encoding="utf-8") as f:
        data: Any = yaml.safe_load(f)

    if data is None:
        return RoadmapperConfig()
    if not isinstance(data, dict):
        raise ValueError("Config must contain a dictionary at the root level")

    # pydantic's ValidationError is a ValueError
    return RoadmapperConfig.model_validate(data)


def discover_config(
    board_path: Path | str | None = None, config_path: Path | None = None
) -> RoadmapperConfig:
    """Find and load the configuration, falling back to defaults.

    Search order:
    1. Explicit config_path argument
    2. Global context (set via CLI --config)
    3. Board file directory / roadmapper_config.yaml
    4. Current directory / roadmapper_config.yaml
    """
    if config_path:
        return load_config(config_path)

    ctx_config = context.get_config_path()
    if ctx_config:
        return load_config(ctx_config)

    if board_path is not None:
        dir_config = Path(board_path).parent / CONFIG_FILE_NAME
        if dir_config.exists():
            return load_config(dir_config)

    cwd_config = Path(CONFIG_FILE_NAME)
    if cwd_config.exists():
        return load_config(cwd_config)

    return RoadmapperConfig()
