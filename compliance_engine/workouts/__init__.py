"""Workout parsing, interval detection and compliance scoring.

The async service layer lives in ``compliance_service`` and is imported from
there, since it depends on the pairing package.
"""

from compliance_engine.workouts.compliance import score_compliance
from compliance_engine.workouts.interval_detection import detect_intervals
from compliance_engine.workouts.text_parsing import parse_hr_range, parse_intensity_to_zone, parse_interval_structure
from compliance_engine.workouts.types import (
    ActivityStream,
    ActivityType,
    ComplianceBreakdown,
    ComplianceResult,
    DetectedInterval,
    HeartRateZone,
    IntervalCompliance,
    IntervalStructure,
    PlannedWorkout,
    RecordedActivity,
)

__all__ = [
    "ActivityStream",
    "ActivityType",
    "ComplianceBreakdown",
    "ComplianceResult",
    "DetectedInterval",
    "HeartRateZone",
    "IntervalCompliance",
    "IntervalStructure",
    "PlannedWorkout",
    "RecordedActivity",
    "detect_intervals",
    "parse_hr_range",
    "parse_intensity_to_zone",
    "parse_interval_structure",
    "score_compliance",
]
