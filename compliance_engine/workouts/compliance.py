"""Pure scoring functions for workout compliance.

Deterministic comparison between a planned workout and the activity matched
to it. No I/O: the HR stream, when interval scoring needs one, is passed in
by the caller (see ``compliance_service.compute_compliance``).

Component weights:
- With interval compliance: intervals 50%, duration 20%, HR zone 10%, activity recorded 20%
- Without: duration 40%, HR zone 40%, activity recorded 20%

Weights of absent components are dropped and the rest renormalized.
"""

from __future__ import annotations

from loguru import logger

from compliance_engine.config.settings import settings
from compliance_engine.workouts.interval_detection import detect_intervals
from compliance_engine.workouts.math_utils import clamp_score, round_half_up
from compliance_engine.workouts.text_parsing import parse_hr_range, parse_intensity_to_zone, parse_interval_structure
from compliance_engine.workouts.types import (
    ActivityStream,
    ComplianceBreakdown,
    ComplianceResult,
    DetectedInterval,
    HrDetails,
    HrDirection,
    IntervalCompliance,
    IntervalResult,
    IntervalStatus,
    IntervalStructure,
    PlannedWorkout,
    RecordedActivity,
    Zone,
)
from compliance_engine.workouts.zones import ZoneTable, get_zone, has_full_table

ACTIVITY_RECORDED_SCORE = 100

INTERVAL_WEIGHT = 0.5
DURATION_WEIGHT_WITH_INTERVALS = 0.2
HR_ZONE_WEIGHT_WITH_INTERVALS = 0.1
DURATION_WEIGHT = 0.4
HR_ZONE_WEIGHT = 0.4
ACTIVITY_RECORDED_WEIGHT = 0.2


def _in_band(ratio: float, band: tuple[float, float]) -> bool:
    low, high = band
    return low <= ratio <= high


def score_duration(target_minutes: float | None, moving_time_sec: float | None) -> tuple[int | None, float | None]:
    """Score actual moving time against the planned duration.

    Args:
        target_minutes: Planned duration in minutes
        moving_time_sec: Actual moving time in seconds

    Returns:
        Tuple of (score, ratio); both None when either input is missing or zero
    """
    if not target_minutes or not moving_time_sec:
        return (None, None)

    ratio = (moving_time_sec / 60.0) / target_minutes

    if _in_band(ratio, settings.duration_full_band):
        score = 100
    elif _in_band(ratio, settings.duration_partial_band):
        score = 70
    elif ratio >= settings.duration_floor_ratio:
        score = 40
    else:
        score = 20

    return (score, ratio)


def _direction(avg_hr: float, target_min: float, target_max: float, *, inclusive_max: bool) -> HrDirection:
    if avg_hr < target_min:
        return "too_low"
    if avg_hr > target_max or (not inclusive_max and avg_hr == target_max):
        return "too_high"
    return "on_target"


def score_hr_zone(
    intensity_target: str | None,
    average_heartrate: float | None,
    zone_table: ZoneTable | None,
) -> tuple[int | None, HrDetails | None]:
    """Score average heart rate against the intensity target.

    An explicit "130-150 bpm" range is scored literally (100 inside, 70 within
    the tolerance, else 30). Otherwise the text is resolved to a zone and scored
    against the athlete's zone table (100 inside, 60 in an adjacent zone,
    else 30); that path needs a full five-zone table.

    Returns:
        Tuple of (score, details); (None, None) when no target can be resolved
    """
    if not intensity_target or not average_heartrate:
        return (None, None)

    avg_hr = average_heartrate
    actual_avg = round_half_up(avg_hr)

    bpm_range = parse_hr_range(intensity_target)
    if bpm_range is not None:
        target_min, target_max = bpm_range
        tolerance = settings.bpm_range_tolerance
        if target_min <= avg_hr <= target_max:
            score = 100
        elif target_min - tolerance <= avg_hr <= target_max + tolerance:
            score = 70
        else:
            score = 30
        details = HrDetails(
            actual_avg=actual_avg,
            target_zone=None,
            target_min=target_min,
            target_max=target_max,
            direction=_direction(avg_hr, target_min, target_max, inclusive_max=True),
        )
        return (score, details)

    if not has_full_table(zone_table):
        return (None, None)

    target_zone = parse_intensity_to_zone(intensity_target)
    if target_zone is None:
        return (None, None)

    zone = get_zone(zone_table, target_zone)
    if zone is None:
        return (None, None)

    if zone.contains(avg_hr):
        score = 100
    else:
        margin = settings.adjacent_zone_margin_bpm
        below = get_zone(zone_table, target_zone - 1)
        above = get_zone(zone_table, target_zone + 1)
        lower_bound = below.min_hr if below is not None else zone.min_hr - margin
        upper_bound = above.upper_bound if above is not None else zone.upper_bound + margin
        score = 60 if lower_bound <= avg_hr < upper_bound else 30

    details = HrDetails(
        actual_avg=actual_avg,
        target_zone=target_zone,
        target_min=zone.min_hr,
        target_max=zone.max_hr if zone.max_hr > 0 else None,
        direction=_direction(avg_hr, zone.min_hr, zone.upper_bound, inclusive_max=False),
    )
    return (score, details)


def _classify_repeat(detected: DetectedInterval, structure: IntervalStructure, target_zone: Zone) -> tuple[IntervalStatus, int]:
    ratio = detected.duration_sec / structure.duration_sec
    zone_match = detected.zone == target_zone
    zone_close = abs(detected.zone - target_zone) == 1
    low, high = settings.interval_duration_band

    if zone_match and low <= ratio <= high:
        return ("completed", 100)

    off_zone_score = 50 if zone_close else 30
    if ratio < low:
        return ("too_short", 70 if zone_match else off_zone_score)
    if ratio > high:
        return ("too_long", 70 if zone_match else off_zone_score)
    return ("wrong_zone", off_zone_score)


def score_intervals(
    structure: IntervalStructure,
    stream: ActivityStream,
    zone_table: ZoneTable,
) -> IntervalCompliance:
    """Score detected intervals against the planned repeat structure.

    Detected intervals are paired with planned repeats by position only; extra
    detections are ignored and missing ones score 0.

    Args:
        structure: Parsed interval structure
        stream: Activity HR/time stream
        zone_table: Ordered five-zone table

    Returns:
        IntervalCompliance with per-repeat results
    """
    target_zone = structure.target_zone if structure.target_zone is not None else settings.default_interval_zone
    detected = detect_intervals(stream.time, stream.heartrate, zone_table, target_zone, structure.duration_sec)

    results: list[IntervalResult] = []
    for position in range(structure.count):
        if position >= len(detected):
            results.append(
                IntervalResult(
                    index=position + 1,
                    duration_sec=0,
                    target_duration_sec=structure.duration_sec,
                    avg_hr=0,
                    zone=None,
                    target_zone=target_zone,
                    status="missing",
                    score=0,
                )
            )
            continue

        interval = detected[position]
        status, repeat_score = _classify_repeat(interval, structure, target_zone)
        results.append(
            IntervalResult(
                index=position + 1,
                duration_sec=interval.duration_sec,
                target_duration_sec=structure.duration_sec,
                avg_hr=interval.avg_hr,
                zone=interval.zone,
                target_zone=target_zone,
                status=status,
                score=repeat_score,
            )
        )

    total = sum(result.score for result in results)
    return IntervalCompliance(
        expected=structure.count,
        completed=sum(1 for result in results if result.status == "completed"),
        score=clamp_score(total / structure.count),
        target_duration_sec=structure.duration_sec,
        target_zone=target_zone,
        intervals=results,
    )


def wants_interval_stream(workout: PlannedWorkout, zone_table: ZoneTable | None) -> IntervalStructure | None:
    """Return the parsed structure when interval scoring could run, else None.

    Callers use this to skip the stream fetch for steady sessions.
    """
    if not has_full_table(zone_table):
        return None
    return parse_interval_structure(workout.session_name, workout.notes, workout.intensity_target)


def _weighted_total(
    duration_score: int | None,
    hr_zone_score: int | None,
    intervals: IntervalCompliance | None,
) -> int:
    components: list[tuple[int, float]] = []
    if intervals is not None:
        components.append((intervals.score, INTERVAL_WEIGHT))
        if duration_score is not None:
            components.append((duration_score, DURATION_WEIGHT_WITH_INTERVALS))
        if hr_zone_score is not None:
            components.append((hr_zone_score, HR_ZONE_WEIGHT_WITH_INTERVALS))
    else:
        if duration_score is not None:
            components.append((duration_score, DURATION_WEIGHT))
        if hr_zone_score is not None:
            components.append((hr_zone_score, HR_ZONE_WEIGHT))
    components.append((ACTIVITY_RECORDED_SCORE, ACTIVITY_RECORDED_WEIGHT))

    total_weight = sum(weight for _, weight in components)
    if total_weight <= 0:
        return 0
    weighted_sum = sum(score * weight for score, weight in components)
    return clamp_score(weighted_sum / total_weight)


def score_compliance(
    workout: PlannedWorkout,
    activity: RecordedActivity | None,
    zone_table: ZoneTable | None,
    stream: ActivityStream | None = None,
) -> ComplianceResult:
    """Compute the compliance score for a workout-activity pair.

    Args:
        workout: Planned workout
        activity: Matched activity, or None if nothing was recorded
        zone_table: Athlete HR zones (zone 1 first), or None
        stream: HR/time stream for interval scoring; falls back to the
            activity's inline stream. Streams without samples are ignored.

    Returns:
        ComplianceResult; score 0 with an empty breakdown when no activity matched
    """
    if activity is None:
        return ComplianceResult(score=0, breakdown=ComplianceBreakdown(activity_recorded=False))

    duration_score, duration_ratio = score_duration(workout.duration_target_minutes, activity.moving_time_sec)
    hr_zone_score, hr_details = score_hr_zone(workout.intensity_target, activity.average_heartrate, zone_table)

    intervals: IntervalCompliance | None = None
    structure = wants_interval_stream(workout, zone_table)
    interval_stream = next((candidate for candidate in (stream, activity.stream) if candidate is not None and candidate.has_samples), None)
    if structure is not None and interval_stream is not None and zone_table is not None:
        intervals = score_intervals(structure, interval_stream, zone_table)

    score = _weighted_total(duration_score, hr_zone_score, intervals)
    logger.debug(
        f"Workout {workout.id} vs activity {activity.id}: score={score} "
        f"(duration={duration_score}, hr_zone={hr_zone_score}, intervals={intervals.score if intervals else None})"
    )

    return ComplianceResult(
        score=score,
        breakdown=ComplianceBreakdown(
            duration=duration_score,
            duration_ratio=duration_ratio,
            hr_zone=hr_zone_score,
            hr_details=hr_details,
            intervals=intervals,
            activity_recorded=True,
        ),
    )
