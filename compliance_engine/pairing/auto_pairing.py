"""Auto-pairing of planned workouts with recorded activities.

Pairing rules:
- Same calendar day (activity local start date == workout date)
- A manual link always wins, even when the linked activity is on another day
- Session name decides which activity types are acceptable
- Among candidates, type match, duration proximity and length are scored;
  the highest score wins and ties keep the first candidate

Pure: nothing is persisted and the inputs are not modified.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable, Sequence
from datetime import date

from loguru import logger

from compliance_engine.config.settings import settings
from compliance_engine.workouts.types import ActivityType, PlannedWorkout, RecordedActivity

_RIDES = [ActivityType.RIDE, ActivityType.VIRTUAL_RIDE]
_STRENGTH = [ActivityType.WEIGHT_TRAINING, ActivityType.WORKOUT, ActivityType.CROSSFIT]

# First keyword found in the session name wins. An empty list marks a rest day.
SESSION_TYPE_MAP: tuple[tuple[str, list[ActivityType]], ...] = (
    ("endurance", [ActivityType.RIDE, ActivityType.VIRTUAL_RIDE, ActivityType.EBIKE_RIDE]),
    ("long ride", _RIDES),
    ("easy trainer", [ActivityType.VIRTUAL_RIDE, ActivityType.RIDE]),
    ("trainer", [ActivityType.VIRTUAL_RIDE, ActivityType.RIDE]),
    ("controlled effort", _RIDES),
    ("tempo", _RIDES),
    ("intervals", _RIDES),
    ("cadence drills", _RIDES),
    ("strength", _STRENGTH),
    ("gym", _STRENGTH),
    ("off", []),
    ("rest", []),
    ("travel day", []),
    ("recovery", [ActivityType.WALK, ActivityType.YOGA]),
)

DEFAULT_ACTIVITY_TYPES: list[ActivityType] = [
    ActivityType.RIDE,
    ActivityType.VIRTUAL_RIDE,
    ActivityType.RUN,
    ActivityType.WALK,
    ActivityType.WEIGHT_TRAINING,
    ActivityType.WORKOUT,
]


def get_matching_activity_types(session_name: str | None) -> list[ActivityType]:
    """Get acceptable activity types for a session name.

    Args:
        session_name: Planned session name (e.g., "Long ride 3h", "Gym")

    Returns:
        Ordered list of acceptable types; empty for rest days
    """
    lower = (session_name or "").lower()

    for keyword, types in SESSION_TYPE_MAP:
        if keyword in lower:
            return list(types)

    return list(DEFAULT_ACTIVITY_TYPES)


def score_candidate(workout: PlannedWorkout, activity: RecordedActivity, expected_types: Sequence[ActivityType]) -> float:
    """Score how well an activity fits a planned workout.

    - type in the acceptable list: +10
    - moving time within 70-130% of the duration target: +5
    - up to +2 for length (one point per hour), so the main session beats a short spin

    Args:
        workout: Planned workout
        activity: Candidate activity from the same day
        expected_types: Acceptable types for the workout

    Returns:
        Candidate score (higher is better)
    """
    score = 0.0

    if activity.activity_type and activity.activity_type in expected_types:
        score += settings.match_type_bonus

    if workout.duration_target_minutes and activity.moving_time_sec:
        ratio = (activity.moving_time_sec / 60.0) / workout.duration_target_minutes
        low, high = settings.match_duration_band
        if low <= ratio <= high:
            score += settings.match_duration_bonus

    if activity.moving_time_sec:
        score += min(activity.moving_time_sec / 3600.0, settings.match_max_length_bonus_hours)

    return score


def match_day(workout: PlannedWorkout, day_activities: Sequence[RecordedActivity]) -> RecordedActivity | None:
    """Pick the best activity for a workout among that day's candidates.

    Args:
        workout: Planned workout
        day_activities: Activities recorded on the workout's day, in evaluation order

    Returns:
        Best-scoring activity, or None for rest days or days without activities
    """
    if not day_activities:
        return None

    expected_types = get_matching_activity_types(workout.session_name)
    if not expected_types:
        logger.debug(f"Workout {workout.id} ({workout.session_name!r}) is a rest day, not matching")
        return None

    best_match: RecordedActivity | None = None
    best_score = -1.0

    for activity in day_activities:
        score = score_candidate(workout, activity, expected_types)
        if score > best_score:
            best_score = score
            best_match = activity

    if best_match is not None:
        logger.debug(f"Workout {workout.id} matched activity {best_match.id} (score={best_score:.2f}, candidates={len(day_activities)})")
    return best_match


def _group_by_day(activities: Iterable[RecordedActivity]) -> dict[date, list[RecordedActivity]]:
    by_day: dict[date, list[RecordedActivity]] = defaultdict(list)
    for activity in activities:
        day = activity.local_day
        if day is None:
            continue
        by_day[day].append(activity)
    return by_day


def match_activities(
    workouts: Sequence[PlannedWorkout],
    activities: Sequence[RecordedActivity],
) -> dict[int | str, RecordedActivity | None]:
    """Match each planned workout to at most one recorded activity.

    Manually linked workouts keep their link (None if the linked activity is
    not among the candidates). Everything else is auto-matched per day.

    Args:
        workouts: Planned workouts
        activities: Candidate activities (typically one week's worth)

    Returns:
        Mapping of workout ID to matched activity (or None)
    """
    by_day = _group_by_day(activities)
    by_id = {activity.id: activity for activity in activities}
    matches: dict[int | str, RecordedActivity | None] = {}

    for workout in workouts:
        if workout.is_manually_linked and workout.matched_activity_id is not None:
            linked = by_id.get(workout.matched_activity_id)
            if linked is None:
                logger.debug(f"Workout {workout.id} is manually linked to missing activity {workout.matched_activity_id}")
            matches[workout.id] = linked
            continue

        matches[workout.id] = match_day(workout, by_day.get(workout.workout_date, []))

    return matches
