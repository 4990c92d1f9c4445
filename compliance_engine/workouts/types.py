"""Input and output models for compliance analysis.

This module defines the data structures for:
- Planned workouts and recorded activities (caller-supplied inputs)
- Heart-rate zones and activity streams
- Parsed interval structures and detected intervals
- Compliance results and their breakdown
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import date, datetime
from enum import StrEnum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

Zone = int
HrDirection = Literal["on_target", "too_low", "too_high"]
IntervalStatus = Literal["completed", "too_short", "too_long", "wrong_zone", "missing"]


class ActivityType(StrEnum):
    """Strava sport types the matcher knows about."""

    RIDE = "Ride"
    VIRTUAL_RIDE = "VirtualRide"
    EBIKE_RIDE = "EBikeRide"
    RUN = "Run"
    WALK = "Walk"
    HIKE = "Hike"
    SWIM = "Swim"
    YOGA = "Yoga"
    WEIGHT_TRAINING = "WeightTraining"
    WORKOUT = "Workout"
    CROSSFIT = "Crossfit"


class PlannedWorkout(BaseModel):
    """A single day's planned session.

    Attributes:
        id: Workout identifier
        workout_date: Calendar day the session is planned for
        session_name: Free-text session name (e.g., "Tempo 3x10min")
        duration_target_minutes: Target duration in minutes
        intensity_target: Free-text intensity (e.g., "Z3", "130-150 bpm")
        notes: Free-text coach notes
        matched_activity_id: Linked activity ID, if any
        is_manually_linked: True when the link was made by hand, not auto-matched
    """

    model_config = ConfigDict(frozen=True)

    id: int | str
    workout_date: date
    session_name: str = "Workout"
    duration_target_minutes: float | None = None
    intensity_target: str | None = None
    notes: str | None = None
    matched_activity_id: int | str | None = None
    is_manually_linked: bool = False


class ActivityStream(BaseModel):
    """Parallel elapsed-time and heart-rate samples for one activity."""

    model_config = ConfigDict(frozen=True)

    time: list[float] = Field(default_factory=list)
    heartrate: list[float] = Field(default_factory=list)

    @property
    def has_samples(self) -> bool:
        """True when both series carry data; an empty stream counts as no stream."""
        return bool(self.time) and bool(self.heartrate)

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> ActivityStream | None:
        """Build a stream from a Strava-style streams payload.

        Accepts either ``{"time": {"data": [...]}, "heartrate": {"data": [...]}}``
        or flat ``{"time": [...], "heartrate": [...]}``. Returns None when either
        series is missing.
        """
        series: dict[str, Any] = {}
        for key in ("time", "heartrate"):
            value = payload.get(key)
            if isinstance(value, Mapping):
                value = value.get("data")
            if not value:
                return None
            series[key] = value
        return cls(**series)


class RecordedActivity(BaseModel):
    """A recorded activity as synced from the tracking platform.

    Attributes:
        id: Activity identifier
        activity_type: Strava sport type (see ActivityType)
        moving_time_sec: Moving time in seconds
        average_heartrate: Average heart rate in bpm
        max_heartrate: Max heart rate in bpm
        start_date_local: Local start time, used to group candidates by day
        stream: Optional inline HR/time stream
    """

    model_config = ConfigDict(frozen=True)

    id: int | str
    activity_type: str | None = None
    moving_time_sec: float | None = None
    average_heartrate: float | None = None
    max_heartrate: float | None = None
    start_date_local: datetime | None = None
    stream: ActivityStream | None = None

    @property
    def local_day(self) -> date | None:
        if self.start_date_local is None:
            return None
        return self.start_date_local.date()


class HeartRateZone(BaseModel):
    """One heart-rate zone, covering ``[min_hr, max_hr)``.

    Strava marks the open-ended top zone with ``max = -1``; any non-positive
    max is treated as unbounded.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    min_hr: float = Field(validation_alias="min")
    max_hr: float = Field(validation_alias="max")

    @property
    def upper_bound(self) -> float:
        return self.max_hr if self.max_hr > 0 else float("inf")

    def contains(self, hr: float) -> bool:
        return self.min_hr <= hr < self.upper_bound


class IntervalStructure(BaseModel):
    """Repeated-effort structure parsed from workout text.

    Attributes:
        count: Number of repeats (1-20)
        duration_sec: Per-repeat duration in seconds (10-3600)
        target_zone: Target HR zone (1-5), None if unresolved
        raw_text: The matched text span, kept for diagnostics
    """

    model_config = ConfigDict(frozen=True)

    count: int = Field(ge=1, le=20)
    duration_sec: int = Field(ge=10, le=3600)
    target_zone: Zone | None = Field(default=None, ge=1, le=5)
    raw_text: str


class DetectedInterval(BaseModel):
    """A sustained effort bout found in a HR stream."""

    model_config = ConfigDict(frozen=True)

    start_sec: float
    end_sec: float
    duration_sec: float
    avg_hr: int
    max_hr: float
    zone: Zone = Field(ge=1, le=5)


class IntervalResult(BaseModel):
    """Outcome for one expected repeat, paired by position with a detection."""

    index: int
    duration_sec: float
    target_duration_sec: int
    avg_hr: int
    zone: Zone | None = None
    target_zone: Zone
    status: IntervalStatus
    score: int = Field(ge=0, le=100)


class IntervalCompliance(BaseModel):
    expected: int
    completed: int
    score: int = Field(ge=0, le=100)
    target_duration_sec: int
    target_zone: Zone
    source: Literal["hr_detection"] = "hr_detection"
    intervals: list[IntervalResult] = Field(default_factory=list)


class HrDetails(BaseModel):
    """How the average heart rate compared with the intensity target.

    ``target_zone`` is None when the target was an explicit bpm range.
    """

    actual_avg: int
    target_zone: Zone | None = None
    target_min: float
    target_max: float | None = None
    direction: HrDirection


class ComplianceBreakdown(BaseModel):
    duration: int | None = Field(default=None, ge=0, le=100)
    duration_ratio: float | None = None
    hr_zone: int | None = Field(default=None, ge=0, le=100)
    hr_details: HrDetails | None = None
    intervals: IntervalCompliance | None = None
    activity_recorded: bool = False


class ComplianceResult(BaseModel):
    """Overall adherence score (0-100) with the breakdown that produced it."""

    score: int = Field(ge=0, le=100)
    breakdown: ComplianceBreakdown = Field(default_factory=ComplianceBreakdown)
