"""Root conftest for all tests.

Shared zone tables, workouts, activities and stream builders.
"""

from collections.abc import Sequence
from datetime import date, datetime

import pytest
from loguru import logger

from compliance_engine.workouts.types import ActivityStream, HeartRateZone, PlannedWorkout, RecordedActivity

WEEK_MONDAY = date(2024, 3, 4)

RECOVERY_HR = 100.0


@pytest.fixture(autouse=True)
def reset_logger():
    """Drop sinks added by CLI tests so they do not outlive the captured streams."""
    yield
    logger.remove()


def make_zone_table() -> list[HeartRateZone]:
    """Five-zone table in Strava's shape (top zone open-ended)."""
    raw = [
        {"min": 0, "max": 120},
        {"min": 120, "max": 140},
        {"min": 140, "max": 155},
        {"min": 155, "max": 170},
        {"min": 170, "max": -1},
    ]
    return [HeartRateZone.model_validate(zone) for zone in raw]


def make_interval_stream(
    efforts: Sequence[tuple[float, float, float]],
    total_sec: int,
    base_hr: float = RECOVERY_HR,
) -> ActivityStream:
    """Build a 1 Hz stream at ``base_hr`` with efforts laid on top.

    Args:
        efforts: (start_sec, duration_sec, hr) per effort
        total_sec: Stream length in samples
        base_hr: Heart rate outside efforts
    """
    time_data = [float(second) for second in range(total_sec)]
    hr_data = [base_hr] * total_sec
    for start_sec, duration_sec, hr in efforts:
        for second in range(int(start_sec), min(int(start_sec + duration_sec), total_sec)):
            hr_data[second] = hr
    return ActivityStream(time=time_data, heartrate=hr_data)


@pytest.fixture
def zone_table():
    return make_zone_table()


@pytest.fixture
def tempo_workout():
    """Tuesday tempo session with a 3x10min structure."""
    return PlannedWorkout(
        id=2,
        workout_date=date(2024, 3, 5),
        session_name="Tempo 3x10min",
        duration_target_minutes=60,
        intensity_target="Z3",
    )


@pytest.fixture
def endurance_workout():
    return PlannedWorkout(
        id=1,
        workout_date=WEEK_MONDAY,
        session_name="Endurance ride",
        duration_target_minutes=90,
        intensity_target="Z2",
    )


@pytest.fixture
def endurance_ride():
    """Monday ride that hits the endurance workout exactly."""
    return RecordedActivity(
        id=101,
        activity_type="Ride",
        moving_time_sec=90 * 60,
        average_heartrate=130,
        max_heartrate=150,
        start_date_local=datetime(2024, 3, 4, 8, 0),
    )


@pytest.fixture
def tempo_stream():
    """Three clean 10-minute efforts at 150 bpm after the warm-up."""
    efforts = [(400, 600, 150), (1300, 600, 150), (2200, 600, 150)]
    return make_interval_stream(efforts, total_sec=3300)


@pytest.fixture
def build_stream():
    return make_interval_stream
