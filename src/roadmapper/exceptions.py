"""Custom exceptions for Roadmapper."""

from __future__ import annotations


class RoadmapperError(Exception):
    """Base exception for all Roadmapper errors."""

    pass


class ValidationError(RoadmapperError):
    """Raised when validation fails."""

    pass


class ProjectNotFoundError(ValidationError):
    """Raised when a project ID does not exist on the board."""

    pass


class ParseError(RoadmapperError):
    """Raised when YAML parsing fails."""

    pass


class DateParseError(RoadmapperError):
    """Raised when a project date is not a valid calendar date."""

    def __init__(self, value: object, message: str | None = None) -> None:
        self.value = value
        super().__init__(message or f"Invalid date: {value!r}. Use YYYY-MM-DD")


class CsvImportError(RoadmapperError):
    """Raised when a CSV file cannot be imported."""

    pass


class ImportRowError(CsvImportError):
    """Raised when a single CSV row is incomplete or invalid.

    The row number is 1-based and counts non-blank rows only, including
    the header line when present. Blank lines are skipped before numbering.
    """

    def __init__(self, row_number: int, message: str) -> None:
        self.row_number = row_number
        super().__init__(message)


class SequencingServiceError(RoadmapperError):
    """Raised when the AI sequencing call fails or returns an unusable reply."""

    pass
