"""Tests for calendar interval arithmetic."""

from datetime import date

import pytest

from roadmapper.exceptions import DateParseError
from roadmapper.intervals import (
    clamp_to_year,
    day_offset,
    days_in_year,
    is_leap_year,
    parse_iso_date,
    pixels_to_days,
    ranges_overlap,
    round_half_up,
    visible_interval,
)


class TestLeapYears:
    """Test the Gregorian leap year rule."""

    @pytest.mark.parametrize(
        ("year", "expected"),
        [(2024, True), (2023, False), (1900, False), (2000, True), (2100, False)],
    )
    def test_is_leap_year(self, year: int, expected: bool) -> None:
        """Divisible by 4, except centuries not divisible by 400."""
        assert is_leap_year(year) is expected

    def test_days_in_year(self) -> None:
        """Leap years have 366 days."""
        assert days_in_year(2024) == 366
        assert days_in_year(2025) == 365


class TestParseIsoDate:
    """Test date parsing."""

    def test_valid_date(self) -> None:
        """A well-formed date parses."""
        assert parse_iso_date("2024-03-01") == date(2024, 3, 1)

    def test_date_object_passes_through(self) -> None:
        """Date objects are accepted unchanged."""
        assert parse_iso_date(date(2024, 3, 1)) == date(2024, 3, 1)

    @pytest.mark.parametrize("value", ["", "2024-02-30", "03/01/2024", "soon", None, 20240301])
    def test_invalid_date_raises(self, value: object) -> None:
        """Anything that is not a real calendar date is rejected."""
        with pytest.raises(DateParseError) as exc_info:
            parse_iso_date(value)
        assert exc_info.value.value == value


class TestClampToYear:
    """Test clamping of offset ranges to the display year."""

    def test_inside_year_unchanged(self) -> None:
        """A range fully inside the year is returned as-is."""
        assert clamp_to_year(10, 20, 365) == (10, 20)

    def test_straddling_start_is_clamped(self) -> None:
        """A range starting before Jan 1 begins at offset 0."""
        assert clamp_to_year(-5, 10, 365) == (0, 10)

    def test_straddling_end_is_clamped(self) -> None:
        """A range running past Dec 31 ends at the year length."""
        assert clamp_to_year(360, 400, 365) == (360, 365)

    def test_entirely_outside_returns_none(self) -> None:
        """Nothing visible means no interval."""
        assert clamp_to_year(-40, -10, 365) is None
        assert clamp_to_year(365, 370, 365) is None

    def test_degenerate_range_returns_none(self) -> None:
        """An empty or negative range is never drawn."""
        assert clamp_to_year(10, 10, 365) is None
        assert clamp_to_year(10, 5, 365) is None


class TestVisibleInterval:
    """Test clamping of inclusive date ranges to a display year."""

    def test_single_day_project(self) -> None:
        """End dates are inclusive, so one day is one day wide."""
        interval = visible_interval(date(2024, 1, 1), date(2024, 1, 1), 2024)
        assert interval is not None
        assert (interval.start_offset, interval.end_offset) == (0, 1)
        assert interval.days == 1

    def test_full_leap_year(self) -> None:
        """A whole leap year spans the full width."""
        interval = visible_interval(date(2024, 1, 1), date(2024, 12, 31), 2024)
        assert interval is not None
        assert interval.days == 366
        assert interval.left == 0.0
        assert interval.width == 1.0

    def test_cross_year_project_clamped(self) -> None:
        """Only the portion inside the display year is kept."""
        interval = visible_interval(date(2023, 12, 1), date(2024, 1, 10), 2024)
        assert interval is not None
        assert interval.start_offset == 0
        assert interval.end_offset == 10

    def test_outside_year(self) -> None:
        """A project in another year has no interval."""
        assert visible_interval(date(2023, 2, 1), date(2023, 3, 1), 2024) is None

    def test_end_before_start(self) -> None:
        """Degenerate ranges never produce a negative width."""
        assert visible_interval(date(2024, 5, 10), date(2024, 5, 1), 2024) is None

    def test_fractions_are_bounded(self) -> None:
        """Left and width always lie in [0, 1]."""
        interval = visible_interval(date(2024, 7, 1), date(2025, 6, 30), 2024)
        assert interval is not None
        assert 0.0 <= interval.left <= 1.0
        assert 0.0 <= interval.left + interval.width <= 1.0


class TestPixelConversion:
    """Test conversion of drag positions into day offsets."""

    def test_round_half_up(self) -> None:
        """Halves round toward positive infinity."""
        assert round_half_up(2.5) == 3
        assert round_half_up(-2.5) == -2
        assert round_half_up(2.49) == 2

    def test_pixels_to_days(self) -> None:
        """Pixels scale to days by the viewport width."""
        assert pixels_to_days(500, 1000, 366) == 183
        assert pixels_to_days(0, 1000, 365) == 0


class TestDateHelpers:
    """Test small date helpers."""

    def test_day_offset(self) -> None:
        """March 1 is day 60 of a leap year."""
        assert day_offset(date(2024, 3, 1), date(2024, 1, 1)) == 60

    def test_ranges_overlap_inclusive(self) -> None:
        """Touching ranges overlap because both ends are inclusive."""
        assert ranges_overlap(
            date(2024, 1, 1), date(2024, 1, 31), date(2024, 1, 31), date(2024, 2, 5)
        )
        assert not ranges_overlap(
            date(2024, 1, 1), date(2024, 1, 30), date(2024, 1, 31), date(2024, 2, 5)
        )
