"""Command-line interface for Roadmapper."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Annotated

import typer

from . import context
from .aggregation import default_display_year, monthly_load
from .board import Board
from .config import RoadmapperConfig, discover_config
from .csv_io import read_csv_text, write_csv_file
from .exceptions import ProjectNotFoundError, RoadmapperError
from .filters import FilterOptions, ProjectFilter
from .layout import build_timeline
from .logger import changes_enabled, checks_enabled, setup_logger
from .models import Project, join_multi_value
from .parser import load_board, write_board
from .render import render_lanes, render_mermaid
from .reschedule import DragGesture
from .sequencing import SequencingClient
from .table import SortDirection, sort_projects

app = typer.Typer(
    name="roadmapper",
    help="Roadmapper - plan projects on a yearly timeline",
    add_completion=False,
)


class TimelineFormat(str, Enum):
    """Output formats for the timeline command."""

    TEXT = "text"
    MERMAID = "mermaid"


BoardArgument = Annotated[Path, typer.Argument(help="Path to the board YAML file")]
TeamOption = Annotated[
    list[str] | None, typer.Option("--team", help="Only projects of this team (repeatable)")
]
AssigneeOption = Annotated[
    list[str] | None, typer.Option("--assignee", help="Only projects with this assignee")
]
FunctionOption = Annotated[
    list[str] | None, typer.Option("--function", help="Only projects with this function")
]
SupportOption = Annotated[
    list[str] | None, typer.Option("--support", help="Only projects with this support")
]
DependencyOption = Annotated[
    list[str] | None, typer.Option("--dependency", help="Only projects with this dependency")
]
YearOption = Annotated[
    int | None, typer.Option("--year", "-y", help="Display year (default: from config or board)")
]


@app.callback()
def main_callback(
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose",
            "-v",
            help="Verbosity level: 0=silent (default), 1=show changes, 2=show all checks, 3=debug",
            min=0,
            max=3,
        ),
    ] = 0,
    config: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to config file (default: roadmapper_config.yaml)",
        ),
    ] = None,
) -> None:
    """Global options for roadmapper commands."""
    setup_logger(verbose)
    context.set_config_path(config)


def _build_filter(  # noqa: PLR0913 - one argument per facet
    teams: list[str] | None,
    assignees: list[str] | None,
    functions: list[str] | None,
    support: list[str] | None,
    dependencies: list[str] | None,
) -> ProjectFilter:
    return ProjectFilter(
        teams=set(teams or ()),
        assignees=set(assignees or ()),
        functions=set(functions or ()),
        support=set(support or ()),
        dependencies=set(dependencies or ()),
    )


def _resolve_year(year: int | None, config: RoadmapperConfig, board: Board) -> int:
    """Pick the display year: CLI option, config, board metadata, then the projects."""
    if year is not None:
        return year
    if config.timeline.display_year is not None:
        return config.timeline.display_year
    if board.display_year is not None:
        return board.display_year
    return default_display_year(board.projects)


def _resolve_project(board: Board, reference: str) -> Project:
    """Find a project by ID, falling back to its name."""
    try:
        return board.get_project(reference)
    except ProjectNotFoundError:
        project = board.find_by_name(reference)
        if project is None:
            raise
        return project


def _fail(message: str) -> typer.Exit:
    typer.echo(f"Error: {message}", err=True)
    return typer.Exit(1)


@app.command()
def timeline(  # noqa: PLR0913 - CLI command needs multiple options
    file: BoardArgument,
    *,
    year: YearOption = None,
    output_format: Annotated[
        TimelineFormat, typer.Option("--format", "-f", help="Output format")
    ] = TimelineFormat.TEXT,
    output: Annotated[Path | None, typer.Option("--output", "-o", help="Output file path")] = None,
    width: Annotated[
        int | None, typer.Option("--width", help="Chart width in characters (text format)", min=12)
    ] = None,
    team: TeamOption = None,
    assignee: AssigneeOption = None,
    function: FunctionOption = None,
    support: SupportOption = None,
    dependency: DependencyOption = None,
) -> None:
    """Lay out projects on the yearly timeline, packed into non-overlapping lanes."""
    try:
        board = load_board(file)
        config = discover_config(file)
    except (RoadmapperError, FileNotFoundError, ValueError) as e:
        raise _fail(str(e)) from None

    display_year = _resolve_year(year, config, board)
    project_filter = _build_filter(team, assignee, function, support, dependency)
    layout = build_timeline(
        project_filter.apply(board.projects), display_year, config.timeline.palette
    )

    if output_format == TimelineFormat.MERMAID:
        result = render_mermaid(layout, board.title)
    else:
        result = render_lanes(layout, width or config.timeline.chart_width)

    if output:
        output.write_text(result + "\n", encoding="utf-8")
        typer.echo(f"Timeline written to {output}")
    else:
        typer.echo(result)


@app.command()
def move(  # noqa: PLR0913 - CLI command needs multiple options
    file: BoardArgument,
    project: Annotated[str, typer.Argument(help="Project ID or name")],
    *,
    days: Annotated[
        int | None, typer.Option("--days", "-d", help="Shift by this many days")
    ] = None,
    drop_x: Annotated[
        float | None, typer.Option("--drop-x", help="Pointer x position at drop (pixels)")
    ] = None,
    grab_offset: Annotated[
        float, typer.Option("--grab-offset", help="Pointer offset inside the bar (pixels)")
    ] = 0.0,
    viewport_width: Annotated[
        float, typer.Option("--viewport-width", help="Timeline width (pixels)")
    ] = 1000.0,
    year: YearOption = None,
) -> None:
    """Reschedule a project, keeping its duration.

    Either shift by --days, or replay a drag gesture with --drop-x.
    """
    if (days is None) == (drop_x is None):
        raise _fail("Specify exactly one of --days or --drop-x")

    try:
        board = load_board(file)
        config = discover_config(file)
        target = _resolve_project(board, project)
        if drop_x is not None:
            gesture = DragGesture(
                viewport_width=viewport_width, grab_offset_x=grab_offset, drop_x=drop_x
            )
            moved = board.move_project(target.id, _resolve_year(year, config, board), gesture)
        else:
            moved = board.shift_project(target.id, days or 0)
        write_board(file, board)
    except (RoadmapperError, FileNotFoundError, ValueError, OverflowError) as e:
        raise _fail(str(e)) from None

    if moved == target:
        typer.echo(f"{target.name}: unchanged ({target.start_date} .. {target.end_date})")
        return
    typer.echo(f"{moved.name}: {moved.start_date} .. {moved.end_date}")
    if changes_enabled():
        typer.echo(f"  was {target.start_date} .. {target.end_date}")


@app.command(name="import-csv")
def import_csv(
    csv_file: Annotated[Path, typer.Argument(help="CSV file to import")],
    file: Annotated[
        Path, typer.Option("--board", "-b", help="Board YAML file to add the projects to")
    ] = Path("roadmap.yaml"),
) -> None:
    """Append the projects of a CSV file to a board. Nothing is added if any row is bad."""
    try:
        board = load_board(file) if file.exists() else Board()
        imported = board.import_csv(read_csv_text(csv_file))
        write_board(file, board)
    except (RoadmapperError, ValueError) as e:
        raise _fail(str(e)) from None

    typer.echo(f"Imported {len(imported)} projects into {file}")
    if checks_enabled():
        for project in imported:
            typer.echo(f"  {project.id}: {project.name}")


@app.command(name="export-csv")
def export_csv(
    file: BoardArgument,
    output: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Output CSV path (default: from config)"),
    ] = None,
) -> None:
    """Write every project of a board to CSV."""
    try:
        board = load_board(file)
        config = discover_config(file)
        target = output or Path(config.csv.export_file_name)
        write_csv_file(target, board.projects)
    except (RoadmapperError, FileNotFoundError, ValueError) as e:
        raise _fail(str(e)) from None

    typer.echo(f"Exported {len(board)} projects to {target}")


def _table_row(project: Project) -> list[str]:
    return [
        project.name,
        project.epic_number,
        project.team,
        project.start_date,
        project.end_date,
        join_multi_value(project.assignee),
        "" if project.progress is None else f"{project.progress}%",
        project.rag_status.value if project.rag_status else "",
    ]


def _format_table(header: list[str], rows: list[list[str]]) -> str:
    widths = [max(len(row[i]) for row in [header, *rows]) for i in range(len(header))]
    lines = [
        "  ".join(cell.ljust(w) for cell, w in zip(row, widths, strict=True)).rstrip()
        for row in [header, *rows]
    ]
    lines.insert(1, "  ".join("-" * w for w in widths))
    return "\n".join(lines)


@app.command(name="list")
def list_projects(  # noqa: PLR0913 - CLI command needs multiple options
    file: BoardArgument,
    *,
    sort_by: Annotated[
        str | None, typer.Option("--sort-by", "-s", help="Column to sort by (e.g. start_date)")
    ] = None,
    descending: Annotated[bool, typer.Option("--descending", help="Sort descending")] = False,
    facets: Annotated[
        bool, typer.Option("--facets", help="List the values available for each filter")
    ] = False,
    team: TeamOption = None,
    assignee: AssigneeOption = None,
    function: FunctionOption = None,
    support: SupportOption = None,
    dependency: DependencyOption = None,
) -> None:
    """Show the board's projects as a table."""
    try:
        board = load_board(file)
    except RoadmapperError as e:
        raise _fail(str(e)) from None

    if facets:
        options = FilterOptions.from_projects(board.projects)
        for name, values in options.model_dump().items():
            typer.echo(f"{name}: {', '.join(values) or '-'}")
        return

    projects = _build_filter(team, assignee, function, support, dependency).apply(board.projects)
    if sort_by:
        direction = SortDirection.DESCENDING if descending else SortDirection.ASCENDING
        try:
            projects = sort_projects(projects, sort_by, direction)
        except ValueError as e:
            raise _fail(str(e)) from None

    if not projects:
        typer.echo("No projects found.")
        return

    header = ["Name", "Epic", "Team", "Start", "End", "Assignee", "Progress", "RAG"]
    typer.echo(_format_table(header, [_table_row(p) for p in projects]))


@app.command()
def load(
    file: BoardArgument,
    year: YearOption = None,
    assignee: Annotated[
        list[str] | None, typer.Option("--assignee", "-a", help="Only show these assignees")
    ] = None,
) -> None:
    """Show how many projects each assignee carries per month."""
    try:
        board = load_board(file)
        config = discover_config(file)
    except (RoadmapperError, FileNotFoundError, ValueError) as e:
        raise _fail(str(e)) from None

    display_year = _resolve_year(year, config, board)
    months = monthly_load(board.projects, display_year, assignee)
    names = list(months[0].counts)
    if not names:
        typer.echo(f"No assignees to show for {display_year}.")
        return

    header = ["Month", *names, "Total"]
    rows = [
        [m.label, *(str(m.counts[name]) for name in names), str(m.total)] for m in months
    ]
    typer.echo(f"Resource load {display_year}")
    typer.echo(_format_table(header, rows))


@app.command()
def sequence(  # noqa: PLR0913 - CLI command needs multiple options
    file: BoardArgument,
    *,
    availability: Annotated[
        str, typer.Option("--availability", "-a", help="Free-text team availability")
    ] = "",
    apply: Annotated[
        bool, typer.Option("--apply", help="Reorder the board file by the suggestion")
    ] = False,
    team: TeamOption = None,
    assignee: AssigneeOption = None,
    function: FunctionOption = None,
    support: SupportOption = None,
    dependency: DependencyOption = None,
) -> None:
    """Ask the AI sequencing service for an execution order of the projects."""
    try:
        board = load_board(file)
        config = discover_config(file)
        project_filter = _build_filter(team, assignee, function, support, dependency)
        # Fail on an empty selection before the API key is looked up
        board.sequencing_candidates(project_filter)
        client = SequencingClient(config.sequencing)
        suggestion = board.optimize(client, availability, project_filter)
        if apply:
            write_board(file, board)
    except (RoadmapperError, FileNotFoundError, ValueError) as e:
        raise _fail(str(e)) from None

    typer.echo("Suggested sequence:")
    for index, name in enumerate(suggestion.optimal_sequence, start=1):
        typer.echo(f"  {index}. {name}")
    if suggestion.reasoning:
        typer.echo(f"\nReasoning: {suggestion.reasoning}")
    if apply:
        typer.echo(f"\n✓ Board reordered in {file}")


def main() -> int:
    """Main entry point."""
    # Typer handles sys.exit() internally
    app()
    return 0


if __name__ == "__main__":
    main()
