"""Calendar interval arithmetic for the yearly timeline.

All functions are pure. Offsets are whole days relative to Jan 1 of the
display year; end dates of projects are inclusive, so a project running
from Jan 1 to Jan 1 covers offsets [0, 1).
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, timedelta

from .exceptions import DateParseError

DAYS_IN_COMMON_YEAR = 365
DAYS_IN_LEAP_YEAR = 366


def is_leap_year(year: int) -> bool:
    """Gregorian leap rule."""
    return year % 4 == 0 and (year % 100 != 0 or year % 400 == 0)


def days_in_year(year: int) -> int:
    """Number of days in a calendar year (365 or 366)."""
    return DAYS_IN_LEAP_YEAR if is_leap_year(year) else DAYS_IN_COMMON_YEAR


def year_start(year: int) -> date:
    """Jan 1 of the given year."""
    return date(year, 1, 1)


def parse_iso_date(value: object) -> date:
    """Parse an ISO-8601 date string (YYYY-MM-DD).

    Raises:
        DateParseError: If the value is not a valid calendar date
    """
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise DateParseError(value)
    try:
        return date.fromisoformat(value.strip())
    except ValueError as e:
        raise DateParseError(value) from e


def day_offset(day: date, start: date) -> int:
    """Whole calendar days from `start` to `day` (negative when before)."""
    return (day - start).days


def add_days(day: date, days: int) -> date:
    """Shift a date by a whole number of days."""
    return day + timedelta(days=days)


def clamp_to_year(
    start_offset: int, end_offset_exclusive: int, total_days: int
) -> tuple[int, int] | None:
    """Clamp a [start, end) offset range into [0, total_days].

    Returns:
        The clamped bounds, or None when nothing of the range is visible
    """
    clamped_start = max(0, start_offset)
    clamped_end = min(total_days, end_offset_exclusive)
    if clamped_end - clamped_start <= 0:
        return None
    return clamped_start, clamped_end


def to_fraction(offset: float, total_days: int) -> float:
    """Horizontal position of an offset as a fraction of the year width."""
    return min(1.0, max(0.0, offset / total_days))


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves going up (JavaScript Math.round)."""
    return math.floor(value + 0.5)


def pixels_to_days(pixels: float, viewport_width: float, total_days: int) -> int:
    """Convert a horizontal pixel position into a whole day-of-year offset."""
    return round_half_up(pixels / viewport_width * total_days)


def ranges_overlap(a_start: date, a_end: date, b_start: date, b_end: date) -> bool:
    """Inclusive overlap test of two date ranges."""
    return a_start <= b_end and a_end >= b_start


@dataclass(frozen=True)
class VisibleInterval:
    """The part of a project that falls inside the display year."""

    start_offset: int
    end_offset: int  # Exclusive
    total_days: int

    @property
    def days(self) -> int:
        """Number of visible days."""
        return self.end_offset - self.start_offset

    @property
    def left(self) -> float:
        """Left edge as a fraction of the year width."""
        return to_fraction(self.start_offset, self.total_days)

    @property
    def width(self) -> float:
        """Width as a fraction of the year width."""
        return to_fraction(self.days, self.total_days)


def visible_interval(start: date, end: date, year: int) -> VisibleInterval | None:
    """Clamp an inclusive [start, end] date range to the display year.

    Returns None when the range does not intersect the year or is degenerate
    (end before start), so callers never draw a negative-width bar.
    """
    total_days = days_in_year(year)
    origin = year_start(year)
    start_offset = day_offset(start, origin)
    duration = day_offset(end, start) + 1
    clamped = clamp_to_year(start_offset, start_offset + duration, total_days)
    if clamped is None:
        return None
    return VisibleInterval(start_offset=clamped[0], end_offset=clamped[1], total_days=total_days)
