"""CLI for the compliance engine.

Developer CLI that runs the same code path as an embedding service, against
local JSON/markdown files instead of a database:

- score-week: match and score a week bundle (workouts, activities, zones, streams)
- import-plan: parse a markdown training plan table into planned workouts
"""

import asyncio
import json
from datetime import date
from pathlib import Path
from typing import Any, NoReturn

import typer
from loguru import logger
from pydantic import BaseModel, Field, ValidationError
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from compliance_engine.core.logger import setup_logger
from compliance_engine.plans.table_parser import convert_to_planned_workouts, parse_training_plan_table
from compliance_engine.workouts.compliance_service import StreamPayload, WeekEvaluation, evaluate_week
from compliance_engine.workouts.types import HeartRateZone, PlannedWorkout, RecordedActivity

console = Console()

app = typer.Typer(
    name="compliance-cli",
    help="Training compliance CLI - score planned vs recorded workouts offline",
    add_completion=False,
)


class WeekBundle(BaseModel):
    """Input file for ``score-week``.

    Attributes:
        zones: Athlete HR zones, zone 1 first (Strava ``{"min", "max"}`` shape)
        workouts: Planned workouts for the week
        activities: Recorded activities for the week
        streams: Activity ID -> Strava streams payload
    """

    zones: list[HeartRateZone] | None = None
    workouts: list[PlannedWorkout] = Field(default_factory=list)
    activities: list[RecordedActivity] = Field(default_factory=list)
    streams: dict[str, dict[str, Any]] = Field(default_factory=dict)


def _fail(title: str, detail: str) -> NoReturn:
    console.print(Panel(Text(title, style="bold red"), subtitle=Text(detail), border_style="red"))
    raise typer.Exit(1)


def load_bundle(path: Path) -> WeekBundle:
    """Load and validate a week bundle file.

    Raises:
        OSError: If the file cannot be read
        json.JSONDecodeError: If the file is not JSON
        ValidationError: If the content does not match the bundle shape
    """
    raw = json.loads(path.read_text(encoding="utf-8"))
    return WeekBundle.model_validate(raw)


def _stream_fetcher(bundle: WeekBundle):
    async def fetch_stream(activity_id: int | str) -> StreamPayload:
        return bundle.streams.get(str(activity_id))

    return fetch_stream


def _score_style(score: int) -> str:
    if score >= 80:
        return "green"
    if score >= 50:
        return "yellow"
    return "red"


def _render_week(evaluation: WeekEvaluation) -> None:
    table = Table(title="Weekly compliance")
    table.add_column("Date")
    table.add_column("Session")
    table.add_column("Activity")
    table.add_column("Score", justify="right")
    table.add_column("Duration", justify="right")
    table.add_column("HR zone", justify="right")
    table.add_column("Intervals", justify="right")

    for entry in evaluation.workouts:
        breakdown = entry.compliance.breakdown
        activity = entry.matched_activity
        intervals = breakdown.intervals
        table.add_row(
            entry.workout.workout_date.isoformat(),
            entry.workout.session_name,
            f"{activity.id} ({activity.activity_type})" if activity else "-",
            Text(str(entry.compliance.score), style=_score_style(entry.compliance.score)) if activity else Text("-"),
            "-" if breakdown.duration is None else str(breakdown.duration),
            "-" if breakdown.hr_zone is None else str(breakdown.hr_zone),
            "-" if intervals is None else f"{intervals.completed}/{intervals.expected} ({intervals.score})",
        )

    console.print(table)

    average = evaluation.average_score
    console.print(f"Average score: [bold]{'-' if average is None else average}[/bold]")
    if evaluation.unmatched_activities:
        unmatched = ", ".join(str(activity.id) for activity in evaluation.unmatched_activities)
        console.print(f"[yellow]Unmatched activities:[/yellow] {unmatched}")


@app.command("score-week")
def score_week(
    bundle_path: Path = typer.Argument(..., help="JSON bundle with zones, workouts, activities and streams"),
    as_json: bool = typer.Option(False, "--json", help="Print raw JSON instead of a table"),
    debug: bool = typer.Option(False, "--debug", help="Enable debug logging"),
    log_file: Path | None = typer.Option(None, "--log-file", help="Also write logs to this file"),
) -> None:
    """Match activities to planned workouts and score compliance."""
    setup_logger(level="DEBUG" if debug else None, log_file=log_file)

    try:
        bundle = load_bundle(bundle_path)
    except OSError as e:
        _fail("Could not read bundle", str(e))
    except json.JSONDecodeError as e:
        _fail("Bundle is not valid JSON", str(e))
    except ValidationError as e:
        _fail("Bundle does not match the expected shape", f"{e.error_count()} validation error(s)")

    logger.info(f"Scoring {len(bundle.workouts)} workout(s) against {len(bundle.activities)} activity(ies)")
    evaluation = asyncio.run(evaluate_week(bundle.workouts, bundle.activities, bundle.zones, _stream_fetcher(bundle)))

    if as_json:
        payload = evaluation.model_dump(mode="json")
        payload["average_score"] = evaluation.average_score
        typer.echo(json.dumps(payload, indent=2))
        return

    _render_week(evaluation)


@app.command("import-plan")
def import_plan(
    plan_path: Path = typer.Argument(..., help="Markdown file with the plan table"),
    reference_date: str = typer.Option(..., "--reference-date", "-r", help="Monday of the plan week (YYYY-MM-DD)"),
    as_json: bool = typer.Option(False, "--json", help="Print raw JSON instead of a table"),
    debug: bool = typer.Option(False, "--debug", help="Enable debug logging"),
) -> None:
    """Parse a markdown training plan table into planned workouts."""
    setup_logger(level="DEBUG" if debug else None)

    try:
        reference = date.fromisoformat(reference_date)
    except ValueError as e:
        _fail("Invalid --reference-date", str(e))

    try:
        markdown = plan_path.read_text(encoding="utf-8")
    except OSError as e:
        _fail("Could not read plan", str(e))

    plan = parse_training_plan_table(markdown)
    if not plan.workouts:
        _fail("No workouts found in table", "; ".join(plan.errors) or "empty table")

    workouts = convert_to_planned_workouts(plan, reference)

    if as_json:
        typer.echo(json.dumps({"workouts": [w.model_dump(mode="json") for w in workouts], "errors": plan.errors}, indent=2))
        return

    table = Table(title=f"Imported plan ({len(workouts)} workouts)")
    table.add_column("Date")
    table.add_column("Session")
    table.add_column("Minutes", justify="right")
    table.add_column("Intensity")
    table.add_column("Notes")
    for workout in workouts:
        table.add_row(
            workout.workout_date.isoformat(),
            workout.session_name,
            "-" if workout.duration_target_minutes is None else f"{workout.duration_target_minutes:g}",
            workout.intensity_target or "-",
            workout.notes or "-",
        )
    console.print(table)

    for error in plan.errors:
        console.print(f"[yellow]Skipped:[/yellow] {error}")


if __name__ == "__main__":
    app()
