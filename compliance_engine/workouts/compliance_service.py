"""Compliance service: the I/O edge around the pure scorer.

This module:
1. Fetches the HR stream through an injected async callable, only when the
   workout has an interval structure worth detecting
2. Treats any fetch or payload failure as "no stream" and keeps scoring
3. Evaluates a whole week: auto-match, then score every workout concurrently
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Mapping, Sequence
from typing import Any

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from compliance_engine.pairing.auto_pairing import match_activities
from compliance_engine.workouts.compliance import score_compliance, wants_interval_stream
from compliance_engine.workouts.math_utils import round_half_up
from compliance_engine.workouts.types import ActivityStream, ComplianceResult, PlannedWorkout, RecordedActivity
from compliance_engine.workouts.zones import ZoneTable

StreamPayload = ActivityStream | Mapping[str, Any] | None
StreamFetcher = Callable[[int | str], Awaitable[StreamPayload]]


class WorkoutEvaluation(BaseModel):
    """One planned workout with its match and score."""

    model_config = ConfigDict(frozen=True)

    workout: PlannedWorkout
    matched_activity: RecordedActivity | None = None
    compliance: ComplianceResult


class WeekEvaluation(BaseModel):
    """Evaluation of a week of planned workouts.

    Attributes:
        workouts: Per-workout evaluations, in input order
        unmatched_activities: Activities not matched to any workout, for manual linking
    """

    workouts: list[WorkoutEvaluation] = Field(default_factory=list)
    unmatched_activities: list[RecordedActivity] = Field(default_factory=list)

    @property
    def average_score(self) -> int | None:
        """Mean score over workouts that have a matched activity."""
        scores = [entry.compliance.score for entry in self.workouts if entry.matched_activity is not None]
        if not scores:
            return None
        return round_half_up(sum(scores) / len(scores))


async def fetch_stream_safely(fetch_stream: StreamFetcher, activity_id: int | str) -> ActivityStream | None:
    """Fetch and parse an activity stream, returning None on any failure.

    The fetcher talks to an external, rate-limited API; a failure there only
    costs the interval component of one score.
    """
    try:
        payload = await fetch_stream(activity_id)
    except asyncio.CancelledError:
        raise
    except Exception as e:
        logger.warning(f"Stream fetch failed for activity {activity_id}: {type(e).__name__}: {e}")
        return None

    if payload is None or isinstance(payload, ActivityStream):
        return payload

    try:
        return ActivityStream.from_payload(payload)
    except (ValidationError, TypeError, AttributeError) as e:
        logger.warning(f"Unusable stream payload for activity {activity_id}: {e}")
        return None


async def compute_compliance(
    workout: PlannedWorkout,
    activity: RecordedActivity | None,
    zone_table: ZoneTable | None,
    fetch_stream: StreamFetcher | None = None,
) -> ComplianceResult:
    """Compute compliance, fetching the HR stream if interval scoring needs it.

    Args:
        workout: Planned workout
        activity: Matched activity, or None
        zone_table: Athlete HR zones, or None
        fetch_stream: Async callable returning the stream for an activity ID

    Returns:
        ComplianceResult
    """
    stream: ActivityStream | None = None
    if (
        activity is not None
        and (activity.stream is None or not activity.stream.has_samples)
        and fetch_stream is not None
        and wants_interval_stream(workout, zone_table) is not None
    ):
        stream = await fetch_stream_safely(fetch_stream, activity.id)

    return score_compliance(workout, activity, zone_table, stream=stream)


async def evaluate_week(
    workouts: Sequence[PlannedWorkout],
    activities: Sequence[RecordedActivity],
    zone_table: ZoneTable | None,
    fetch_stream: StreamFetcher | None = None,
) -> WeekEvaluation:
    """Match and score a week of planned workouts.

    Scoring runs concurrently per workout; evaluations share no state, so the
    result does not depend on completion order.

    Args:
        workouts: Planned workouts for the week
        activities: Activities recorded during the week
        zone_table: Athlete HR zones, or None
        fetch_stream: Async stream fetcher, or None to skip interval scoring

    Returns:
        WeekEvaluation with per-workout results and unmatched activities
    """
    matches = match_activities(workouts, activities)

    results = await asyncio.gather(
        *(compute_compliance(workout, matches.get(workout.id), zone_table, fetch_stream) for workout in workouts)
    )

    evaluations = [
        WorkoutEvaluation(workout=workout, matched_activity=matches.get(workout.id), compliance=result)
        for workout, result in zip(workouts, results)
    ]

    matched_ids = {entry.matched_activity.id for entry in evaluations if entry.matched_activity is not None}
    unmatched = [activity for activity in activities if activity.id not in matched_ids]

    logger.info(f"Evaluated {len(evaluations)} workout(s): {len(matched_ids)} matched, {len(unmatched)} unmatched activities")
    return WeekEvaluation(workouts=evaluations, unmatched_activities=unmatched)
