"""CLI entry point for the classsync scheduler."""

import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .exceptions import SchedulerError
from .scheduler import (
    ClassCompleteness,
    ConfigLoader,
    GeneratedSchedule,
    QualityLabel,
    QualityScorer,
    ScheduleConflict,
    ScheduleGenerator,
    ScheduleValidator,
    Severity,
    export_schedule_json,
    load_schedule_sessions,
)
from .scheduler.constants import WEEKDAYS

app = typer.Typer(
    name="classsync",
    help="Generate weekly lecture and seminar timetables",
    add_completion=False,
)
console = Console()

SEVERITY_STYLES = {
    Severity.CRITICAL: "red",
    Severity.WARNING: "yellow",
    Severity.SUGGESTION: "blue",
}

LABEL_STYLES = {
    QualityLabel.EXCELLENT: "bold green",
    QualityLabel.GOOD: "green",
    QualityLabel.ACCEPTABLE: "yellow",
    QualityLabel.POOR: "bold red",
}


def _configure_logging(verbose: bool) -> None:
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=console, show_path=False)],
        )


def _load_config(config_dir: Path):
    try:
        return ConfigLoader(config_dir).load()
    except SchedulerError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


def _print_conflicts(conflicts: Iterable[ScheduleConflict], verbose: bool) -> None:
    conflicts = list(conflicts)
    counts_table = Table(title="Conflicts by Severity")
    counts_table.add_column("Severity", style="cyan")
    counts_table.add_column("Count", style="green")
    for severity in Severity:
        count = sum(1 for c in conflicts if c.severity == severity)
        counts_table.add_row(severity.value, str(count))
    console.print(counts_table)

    shown = [c for c in conflicts if verbose or c.severity == Severity.CRITICAL]
    for conflict in shown[:20]:
        style = SEVERITY_STYLES[conflict.severity]
        console.print(f"  [{style}]• {conflict.message}[/{style}]")
    if len(shown) > 20:
        console.print(f"  [dim]... and {len(shown) - 20} more[/dim]")


def _print_schedule(schedule: GeneratedSchedule, verbose: bool) -> None:
    metadata = schedule.metadata

    overview_table = Table(title="Overview", show_header=False)
    overview_table.add_column("Metric", style="cyan")
    overview_table.add_column("Value", style="green")
    overview_table.add_row("Sessions", f"{metadata.total_sessions} / {metadata.expected_sessions}")
    overview_table.add_row("Teaching hours", f"{metadata.total_hours}h/week")
    overview_table.add_row("Room utilization", f"{metadata.utilization_rate:.1f}%")
    overview_table.add_row("Manual assignments", str(metadata.manual_assignments))
    overview_table.add_row("Automatic assignments", str(metadata.automatic_assignments))
    console.print(overview_table)

    day_table = Table(title="Sessions by Day")
    day_table.add_column("Day", style="cyan")
    day_table.add_column("Sessions", style="green")
    for day in WEEKDAYS:
        day_table.add_row(day.label, str(metadata.by_day.get(day.name.lower(), 0)))
    console.print(day_table)

    if verbose and schedule.sessions:
        sessions_table = Table(title="Sessions")
        sessions_table.add_column("Day", style="cyan")
        sessions_table.add_column("Time", style="blue")
        sessions_table.add_column("Class", style="magenta")
        sessions_table.add_column("Course", max_width=40)
        sessions_table.add_column("Type", style="green")
        sessions_table.add_column("Teacher", style="yellow")
        sessions_table.add_column("Room")
        ordered = sorted(
            schedule.sessions, key=lambda s: (s.time_slot.day.value, s.time_slot.start, s.class_name)
        )
        for session in ordered:
            slot = session.time_slot
            sessions_table.add_row(
                slot.day.label,
                f"{slot.start}:00-{slot.end}:00",
                session.class_name,
                session.course_name,
                session.session_type.value,
                session.teacher_name,
                session.room_name,
            )
        console.print(sessions_table)

    _print_conflicts(schedule.conflicts, verbose)
    _print_score(schedule.score)


def _print_completeness(rows: list[ClassCompleteness]) -> None:
    table = Table(title="Class Completeness")
    table.add_column("Class", style="cyan")
    table.add_column("Expected", style="blue")
    table.add_column("Lectures", style="green")
    table.add_column("Seminars", style="green")
    table.add_column("Status")
    for row in rows:
        status = "[green]complete[/green]" if row.is_complete else "[red]incomplete[/red]"
        table.add_row(
            row.class_name, str(row.expected), str(row.lectures), str(row.seminars), status
        )
    console.print(table)

    valid = sum(1 for row in rows if row.is_complete)
    console.print(f"  Valid classes: {valid}/{len(rows)}")


def _print_score(score: int) -> None:
    label = QualityLabel.from_score(score)
    style = LABEL_STYLES[label]
    console.print(f"\n[bold]Quality score:[/bold] [{style}]{score}/100 ({label.value})[/{style}]")


@app.command()
def generate(
    config_dir: Annotated[
        Path,
        typer.Argument(
            help="Directory with catalog.json and optional constraints.json",
            exists=True,
            file_okay=False,
        ),
    ],
    output: Annotated[
        Path,
        typer.Option("-o", "--output", help="Output JSON file path"),
    ] = Path("schedule.json"),
    verbose: Annotated[
        bool,
        typer.Option("-v", "--verbose", help="Show detailed output and debug logs"),
    ] = False,
) -> None:
    """Generate a weekly schedule from a configuration directory."""
    _configure_logging(verbose)
    constraints, catalog = _load_config(config_dir)

    console.print(f"\n[bold]Schedule Generation for:[/bold] {config_dir}")
    console.print(
        f"  Classes: {len(catalog.classes)}, courses: {len(catalog.courses)}, "
        f"teachers: {len(catalog.teachers)}, rooms: {len(catalog.rooms)}"
    )

    with console.status("[bold green]Generating schedule..."):
        try:
            schedule = ScheduleGenerator(constraints, catalog).generate()
        except SchedulerError as e:
            console.print(f"[bold red]Error:[/bold red] {e}")
            raise typer.Exit(1)

    _print_schedule(schedule, verbose)

    with console.status(f"[bold green]Exporting to {output}..."):
        export_schedule_json(schedule, output)
    console.print(f"\n[bold green]✓[/bold green] Schedule exported to: {output}")


@app.command()
def check(
    schedule_file: Annotated[
        Path,
        typer.Argument(help="Schedule JSON exported by 'generate'", exists=True, dir_okay=False),
    ],
    config_dir: Annotated[
        Path,
        typer.Argument(
            help="Directory with catalog.json and optional constraints.json",
            exists=True,
            file_okay=False,
        ),
    ],
    verbose: Annotated[
        bool,
        typer.Option("-v", "--verbose", help="Show all conflicts, not only critical ones"),
    ] = False,
) -> None:
    """Re-validate an exported schedule against a configuration directory."""
    _configure_logging(verbose)
    constraints, catalog = _load_config(config_dir)

    try:
        sessions = load_schedule_sessions(schedule_file)
    except (KeyError, TypeError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] Invalid schedule file {schedule_file}: {e}")
        raise typer.Exit(1)

    with console.status("[bold green]Validating schedule..."):
        validator = ScheduleValidator(catalog, constraints)
        log = validator.validate(sessions)
        completeness = validator.class_completeness(sessions)
        quality = QualityScorer(catalog, constraints).score(sessions, log.conflicts)

    console.print(f"\n[bold]Validation Results for:[/bold] {schedule_file.name}")
    console.print(f"  Sessions: {len(sessions)}")

    _print_completeness(completeness)
    _print_conflicts(log.conflicts, verbose)
    _print_score(quality.score)

    critical = log.count(Severity.CRITICAL)
    if critical:
        console.print(f"\n[bold red]✗ {critical} critical conflict(s)[/bold red]")
        raise typer.Exit(1)
    console.print("\n[bold green]✓ No critical conflicts[/bold green]")


if __name__ == "__main__":
    app()
