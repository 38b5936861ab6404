"""Tests for timeline row packing and bar geometry."""

from datetime import date

from roadmapper.layout import TEAM_COLORS, build_timeline, pack_rows, team_colors
from tests.conftest import make_project


class TestPackRows:
    """Test greedy first-fit row assignment."""

    def test_basic_packing(self) -> None:
        """Overlapping projects get separate rows; later ones reuse free rows."""
        projects = [
            make_project("a", "2024-01-01", "2024-01-10"),
            make_project("b", "2024-01-05", "2024-01-15"),
            make_project("c", "2024-01-11", "2024-01-20"),
        ]

        layout = pack_rows(projects, 2024)

        assert layout.rows == {"a": 0, "b": 1, "c": 0}
        assert layout.row_count == 2
        assert layout.skipped == ()

    def test_back_to_back_projects_share_row(self) -> None:
        """A project starting on the day the previous one ends fits the same row."""
        projects = [
            make_project("a", "2024-02-01", "2024-02-10"),
            make_project("b", "2024-02-10", "2024-02-20"),
        ]

        layout = pack_rows(projects, 2024)

        assert layout.row_of("a") == 0
        assert layout.row_of("b") == 0
        assert layout.row_count == 1

    def test_input_order_does_not_matter_for_distinct_starts(self) -> None:
        """Projects are sorted by start date before packing."""
        projects = [
            make_project("c", "2024-01-11", "2024-01-20"),
            make_project("b", "2024-01-05", "2024-01-15"),
            make_project("a", "2024-01-01", "2024-01-10"),
        ]

        layout = pack_rows(projects, 2024)

        assert layout.rows == {"a": 0, "b": 1, "c": 0}

    def test_identical_starts_get_separate_rows(self) -> None:
        """Projects starting together each need their own row, in input order."""
        projects = [
            make_project("x", "2024-04-01", "2024-04-30"),
            make_project("y", "2024-04-01", "2024-04-15"),
            make_project("z", "2024-04-01", "2024-04-10"),
        ]

        layout = pack_rows(projects, 2024)

        assert layout.rows == {"x": 0, "y": 1, "z": 2}
        assert layout.row_count == 3

    def test_zero_duration_project_shares_row(self) -> None:
        """A one-day project ending on another's start day leaves the row free."""
        projects = [
            make_project("milestone", "2024-04-01", "2024-04-01"),
            make_project("work", "2024-04-01", "2024-04-15"),
        ]

        layout = pack_rows(projects, 2024)

        assert layout.rows == {"milestone": 0, "work": 0}

    def test_empty_input(self) -> None:
        """No projects means no rows."""
        layout = pack_rows([], 2024)

        assert layout.rows == {}
        assert layout.row_count == 0

    def test_projects_outside_year_are_excluded(self) -> None:
        """Only projects intersecting the display year get a row."""
        projects = [
            make_project("last_year", "2023-03-01", "2023-06-30"),
            make_project("this_year", "2024-03-01", "2024-06-30"),
            make_project("next_year", "2025-03-01", "2025-06-30"),
        ]

        layout = pack_rows(projects, 2024)

        assert layout.rows == {"this_year": 0}
        assert layout.row_of("last_year") is None
        assert layout.skipped == ()

    def test_cross_year_project_is_included(self) -> None:
        """A project spanning the year boundary is on both years' timelines."""
        project = make_project("span", "2023-11-01", "2024-02-28")

        assert pack_rows([project], 2023).row_of("span") == 0
        assert pack_rows([project], 2024).row_of("span") == 0

    def test_malformed_date_is_skipped_without_affecting_others(self) -> None:
        """One bad project never prevents the rest from being laid out."""
        projects = [
            make_project("good1", "2024-01-01", "2024-01-31"),
            make_project("bad", "2024-13-01", "2024-12-31"),
            make_project("good2", "2024-01-15", "2024-02-15"),
        ]

        layout = pack_rows(projects, 2024)

        assert layout.rows == {"good1": 0, "good2": 1}
        assert layout.skipped == ("bad",)

    def test_end_before_start_is_skipped(self) -> None:
        """Degenerate projects are reported rather than packed."""
        projects = [
            make_project("backwards", "2024-05-10", "2024-05-01"),
            make_project("ok", "2024-05-02", "2024-05-05"),
        ]

        layout = pack_rows(projects, 2024)

        assert layout.rows == {"ok": 0}
        assert layout.skipped == ("backwards",)

    def test_no_two_projects_in_a_row_overlap(self) -> None:
        """Within a row, every project ends on or before the next one starts."""
        projects = [
            make_project(
                f"p{i}", f"2024-{month:02d}-{day:02d}", f"2024-{month + 2:02d}-{day:02d}"
            )
            for i, (month, day) in enumerate(
                [(1, 1), (1, 15), (2, 1), (3, 10), (3, 11), (4, 1), (6, 20), (7, 1), (9, 9)]
            )
        ]

        layout = pack_rows(projects, 2024)

        by_id = {p.id: p for p in projects}
        for row in range(layout.row_count):
            members = sorted(
                (by_id[pid] for pid, r in layout.rows.items() if r == row),
                key=lambda p: p.start_date,
            )
            for earlier, later in zip(members, members[1:]):
                assert earlier.parsed_dates()[1] <= later.parsed_dates()[0]

    def test_first_fit_uses_lowest_free_row(self) -> None:
        """A project goes to the lowest-index row it fits, not the most recent one."""
        projects = [
            make_project("a", "2024-01-01", "2024-01-05"),
            make_project("b", "2024-01-02", "2024-01-20"),
            make_project("c", "2024-01-03", "2024-01-04"),
            make_project("d", "2024-01-06", "2024-01-10"),
        ]

        layout = pack_rows(projects, 2024)

        assert layout.rows == {"a": 0, "b": 1, "c": 2, "d": 0}

    def test_packing_is_deterministic(self) -> None:
        """The same input always yields the same layout."""
        projects = [
            make_project("a", "2024-03-01", "2024-03-31"),
            make_project("b", "2024-03-01", "2024-04-30"),
            make_project("c", "2024-04-01", "2024-04-30"),
        ]

        assert pack_rows(projects, 2024) == pack_rows(list(projects), 2024)

    def test_project_overlapping_every_row_opens_one_new_row(self) -> None:
        """A late project that overlaps the end of every row adds exactly one row."""
        projects = [
            make_project("a", "2024-01-01", "2024-01-31"),
            make_project("b", "2024-01-10", "2024-02-15"),
            make_project("c", "2024-02-01", "2024-02-28"),
        ]
        before = pack_rows(projects, 2024)
        assert before.row_count == 2

        after = pack_rows([*projects, make_project("d", "2024-02-10", "2024-03-15")], 2024)

        assert after.row_count == before.row_count + 1
        assert after.row_of("d") == before.row_count
        assert {pid: after.rows[pid] for pid in before.rows} == before.rows


class TestTeamColors:
    """Test palette assignment to teams."""

    def test_alphabetical_assignment(self) -> None:
        """Teams get palette entries in alphabetical order."""
        projects = [
            make_project("a", "2024-01-01", "2024-01-02", team="Sales Ops"),
            make_project("b", "2024-01-01", "2024-01-02", team="Marketing Ops"),
            make_project("c", "2024-01-01", "2024-01-02", team="Sales Ops"),
        ]

        colors = team_colors(projects)

        assert colors == {"Marketing Ops": TEAM_COLORS[0], "Sales Ops": TEAM_COLORS[1]}

    def test_palette_cycles(self) -> None:
        """More teams than colors wrap around the palette."""
        projects = [
            make_project(t, "2024-01-01", "2024-01-02", team=t) for t in ("A", "B", "C")
        ]

        colors = team_colors(projects, ["red", "blue"])

        assert colors == {"A": "red", "B": "blue", "C": "red"}


class TestBuildTimeline:
    """Test the combined layout and geometry."""

    def test_bars_carry_rows_and_geometry(self) -> None:
        """Each visible project becomes one bar with its clamped interval."""
        projects = [
            make_project("a", "2024-01-01", "2024-01-10"),
            make_project("b", "2024-01-05", "2024-01-15"),
            make_project("c", "2023-12-20", "2024-01-03", team="Finance"),
        ]

        timeline = build_timeline(projects, 2024)

        assert timeline.year == 2024
        bars = {bar.project.id: bar for bar in timeline.bars}
        assert set(bars) == {"a", "b", "c"}
        assert bars["c"].interval.start_offset == 0
        assert bars["c"].interval.end_offset == 3
        assert bars["a"].interval.days == 10
        assert bars["c"].color == TEAM_COLORS[0]
        assert bars["a"].color == TEAM_COLORS[1]

    def test_bars_sorted_by_row_then_start(self) -> None:
        """Bars come out lane by lane, left to right."""
        projects = [
            make_project("a", "2024-01-01", "2024-01-10"),
            make_project("b", "2024-01-05", "2024-01-15"),
            make_project("c", "2024-01-11", "2024-01-20"),
        ]

        timeline = build_timeline(projects, 2024)

        assert [bar.project.id for bar in timeline.bars] == ["a", "c", "b"]
        assert [bar.project.id for bar in timeline.bars_in_row(0)] == ["a", "c"]
        assert timeline.row_count == 2

    def test_skipped_projects_are_reported(self) -> None:
        """Projects with unusable dates are listed and not drawn."""
        projects = [
            make_project("good", "2024-06-01", "2024-06-30"),
            make_project("bad", "not a date", "2024-06-30"),
        ]

        timeline = build_timeline(projects, 2024)

        assert [bar.project.id for bar in timeline.bars] == ["good"]
        assert timeline.skipped == ("bad",)

    def test_bar_fractions_within_unit_range(self) -> None:
        """Bar position and width stay inside the timeline."""
        projects = [make_project("long", "2023-06-01", "2025-06-01")]

        timeline = build_timeline(projects, 2024)

        (bar,) = timeline.bars
        assert bar.interval.left == 0.0
        assert bar.interval.width == 1.0
        assert bar.interval.days == (date(2025, 1, 1) - date(2024, 1, 1)).days
