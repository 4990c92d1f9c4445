"""Training plan markdown table parser.

Parses a week plan written as a pipe-separated markdown table:

    | Day   | Session          | Duration  | Intensity | Notes        |
    |-------|------------------|-----------|-----------|--------------|
    | Mon 5 | Off              |           |           |              |
    | Tue 6 | Tempo 3x10min    | 1:00-1:15 | Z3        | flat route   |

Header cells containing "day", "session", "duration", "intensity" and "note"
select the columns; the first such row is the header, even below a title row.
Columns the header does not name, and every column of a headerless table,
follow the order above.
Rows whose day cell cannot be parsed are reported in ``errors``, not raised.
"""

from __future__ import annotations

import re
from datetime import date

from loguru import logger
from pydantic import BaseModel, Field

from compliance_engine.workouts.types import PlannedWorkout

DAY_OFFSET_MAP: dict[str, int] = {
    "mon": 0,
    "tue": 1,
    "wed": 2,
    "thu": 3,
    "fri": 4,
    "sat": 5,
    "sun": 6,
}

DEFAULT_COLUMNS: dict[str, int] = {"day": 0, "session": 1, "duration": 2, "intensity": 3, "notes": 4}

# (substring in header cell, column key)
_HEADER_KEYWORDS: tuple[tuple[str, str], ...] = (
    ("day", "day"),
    ("session", "session"),
    ("duration", "duration"),
    ("intensity", "intensity"),
    ("note", "notes"),
)

_DURATION_RANGE = re.compile(r"(\d+):(\d+)\s*[-–]\s*(\d+):(\d+)")
_DURATION_SINGLE = re.compile(r"(\d+):(\d+)")
_PLAIN_MINUTES = re.compile(r"^\s*(\d+)")
_DAY_CELL = re.compile(r"^([A-Za-z]{3})\s+(\d{1,2})$")
_SEPARATOR_ROW = re.compile(r"^\|?\s*[-:]+\s*\|")


class ParsedPlanRow(BaseModel):
    """One row of the plan table, before its date is resolved."""

    day_of_week: str
    day_number: int
    session_name: str
    duration_minutes: int | None = None
    duration_raw: str | None = None
    intensity_target: str | None = None
    notes: str | None = None


class ParsedPlan(BaseModel):
    workouts: list[ParsedPlanRow] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)


def parse_duration(duration_str: str | None) -> int | None:
    """Parse a duration cell into minutes.

    Ranges ("1:00-1:15") resolve to their upper end. "H:MM" and plain minutes
    ("45") are accepted.

    Args:
        duration_str: Duration cell text

    Returns:
        Duration in minutes, or None for empty, "off" or unparseable cells
    """
    if not duration_str or not duration_str.strip() or duration_str.strip().lower() == "off":
        return None

    cleaned = duration_str.strip()

    range_match = _DURATION_RANGE.search(cleaned)
    if range_match:
        return int(range_match.group(3)) * 60 + int(range_match.group(4))

    single_match = _DURATION_SINGLE.search(cleaned)
    if single_match:
        return int(single_match.group(1)) * 60 + int(single_match.group(2))

    plain_match = _PLAIN_MINUTES.match(cleaned)
    if plain_match:
        return int(plain_match.group(1))

    return None


def parse_day(day_str: str) -> tuple[str, int] | None:
    """Parse a day cell like "Mon 5" into ("Mon", 5)."""
    match = _DAY_CELL.match(day_str.strip())
    if not match:
        return None
    return (match.group(1), int(match.group(2)))


def _safe_date(year: int, month: int, day: int) -> date | None:
    try:
        return date(year, month, day)
    except ValueError:
        return None


def resolve_date_from_day(day_of_week: str, day_number: int, reference_date: date) -> date | None:
    """Resolve "Mon 5" to a calendar date.

    Looks through every month of the reference year for a date with that day
    of month falling on that weekday, and returns the one closest to the
    reference date. Falls back to that day in the reference month when the
    weekday is unknown or no month matches.

    Args:
        day_of_week: Three-letter weekday ("Mon")
        day_number: Day of month
        reference_date: Usually the Monday of the week being imported

    Returns:
        Resolved date, or None when the day number is invalid for the fallback month
    """
    expected_weekday = DAY_OFFSET_MAP.get(day_of_week.lower())
    fallback = _safe_date(reference_date.year, reference_date.month, day_number)

    if expected_weekday is None:
        return fallback

    candidates = [
        candidate
        for month in range(1, 13)
        if (candidate := _safe_date(reference_date.year, month, day_number)) is not None
        and candidate.weekday() == expected_weekday
    ]
    if not candidates:
        return fallback

    return min(candidates, key=lambda candidate: abs((candidate - reference_date).days))


def _split_row(row: str) -> list[str]:
    cleaned = row.strip()
    if "|" not in cleaned:
        return []
    cells = [cell.strip() for cell in cleaned.split("|")]
    # Drop the empty cells produced by leading/trailing pipes
    if cleaned.startswith("|"):
        cells = cells[1:]
    if cleaned.endswith("|"):
        cells = cells[:-1]
    return cells


def _is_separator_row(row: str) -> bool:
    return bool(_SEPARATOR_ROW.match(row.strip()))


def _map_header(cells: list[str]) -> dict[str, int]:
    columns: dict[str, int] = {}
    for index, cell in enumerate(cells):
        lower = cell.lower()
        for keyword, column in _HEADER_KEYWORDS:
            if keyword in lower:
                columns.setdefault(column, index)
                break
    return columns


def _cell(cells: list[str], columns: dict[str, int], column: str) -> str:
    position = columns.get(column, DEFAULT_COLUMNS[column])
    if position >= len(cells):
        return ""
    return cells[position]


def parse_training_plan_table(markdown: str) -> ParsedPlan:
    """Parse a markdown plan table into rows.

    Args:
        markdown: Markdown text containing the table

    Returns:
        ParsedPlan with parsed rows and per-row error messages
    """
    lines = [line for line in markdown.splitlines() if line.strip()]
    plan = ParsedPlan()

    header_index = -1
    columns = dict(DEFAULT_COLUMNS)

    for index, line in enumerate(lines):
        if _is_separator_row(line):
            continue
        cells = _split_row(line)
        if not cells:
            continue
        lower_cells = [cell.lower() for cell in cells]
        if any("day" in cell for cell in lower_cells) or any("session" in cell for cell in lower_cells):
            header_index = index
            columns = _map_header(cells)
            break

    for line in lines[header_index + 1 :]:
        if _is_separator_row(line):
            continue
        cells = _split_row(line)
        if not cells:
            continue

        day_cell = _cell(cells, columns, "day")
        parsed_day = parse_day(day_cell)
        if parsed_day is None:
            if day_cell:
                plan.errors.append(f'Could not parse day: "{day_cell}"')
            continue

        duration_cell = _cell(cells, columns, "duration")
        day_of_week, day_number = parsed_day
        plan.workouts.append(
            ParsedPlanRow(
                day_of_week=day_of_week,
                day_number=day_number,
                session_name=_cell(cells, columns, "session") or "Workout",
                duration_minutes=parse_duration(duration_cell),
                duration_raw=duration_cell or None,
                intensity_target=_cell(cells, columns, "intensity") or None,
                notes=_cell(cells, columns, "notes") or None,
            )
        )

    logger.debug(f"Parsed plan table: {len(plan.workouts)} row(s), {len(plan.errors)} error(s)")
    return plan


def convert_to_planned_workouts(
    plan: ParsedPlan,
    reference_date: date,
    first_id: int = 1,
) -> list[PlannedWorkout]:
    """Convert parsed rows into PlannedWorkouts with resolved dates.

    Rows whose date cannot be resolved are skipped with a warning.

    Args:
        plan: Parsed plan
        reference_date: Monday of the imported week
        first_id: ID assigned to the first workout, incremented per row

    Returns:
        Planned workouts in table order
    """
    workouts: list[PlannedWorkout] = []
    next_id = first_id

    for row in plan.workouts:
        workout_date = resolve_date_from_day(row.day_of_week, row.day_number, reference_date)
        if workout_date is None:
            logger.warning(f"Skipping row '{row.day_of_week} {row.day_number}': no such date near {reference_date}")
            continue
        workouts.append(
            PlannedWorkout(
                id=next_id,
                workout_date=workout_date,
                session_name=row.session_name,
                duration_target_minutes=row.duration_minutes,
                intensity_target=row.intensity_target,
                notes=row.notes,
            )
        )
        next_id += 1

    return workouts
