"""Manual link/unlink of activities to planned workouts.

A manual link overrides auto-matching until it is removed. Workouts are
immutable, so both operations return an updated copy.
"""

from __future__ import annotations

from loguru import logger

from compliance_engine.workouts.types import PlannedWorkout


def link_activity(workout: PlannedWorkout, activity_id: int | str) -> PlannedWorkout:
    """Manually link an activity, replacing any existing link.

    Args:
        workout: Planned workout
        activity_id: Activity to link

    Returns:
        Copy of the workout with the manual link set
    """
    if workout.matched_activity_id is not None and workout.matched_activity_id != activity_id:
        logger.info(f"Workout {workout.id}: replacing link {workout.matched_activity_id} -> {activity_id}")
    return workout.model_copy(update={"matched_activity_id": activity_id, "is_manually_linked": True})


def unlink_activity(workout: PlannedWorkout) -> PlannedWorkout:
    """Remove any link so the workout goes back to auto-matching."""
    return workout.model_copy(update={"matched_activity_id": None, "is_manually_linked": False})
