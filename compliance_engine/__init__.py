"""Training compliance engine.

Scores how closely recorded activities followed a planned training week:
free-text workout parsing, activity auto-matching, HR interval detection and
weighted compliance scoring. Pure functions over caller-supplied data; the
only I/O is an optional, injected HR stream fetch.
"""

from compliance_engine.pairing import link_activity, match_activities, unlink_activity
from compliance_engine.plans import convert_to_planned_workouts, parse_training_plan_table
from compliance_engine.workouts import (
    ActivityStream,
    ComplianceResult,
    DetectedInterval,
    HeartRateZone,
    IntervalStructure,
    PlannedWorkout,
    RecordedActivity,
    detect_intervals,
    parse_intensity_to_zone,
    parse_interval_structure,
    score_compliance,
)
from compliance_engine.workouts.compliance_service import WeekEvaluation, compute_compliance, evaluate_week

__version__ = "0.1.0"

__all__ = [
    "ActivityStream",
    "ComplianceResult",
    "DetectedInterval",
    "HeartRateZone",
    "IntervalStructure",
    "PlannedWorkout",
    "RecordedActivity",
    "WeekEvaluation",
    "compute_compliance",
    "convert_to_planned_workouts",
    "detect_intervals",
    "evaluate_week",
    "link_activity",
    "match_activities",
    "parse_intensity_to_zone",
    "parse_interval_structure",
    "parse_training_plan_table",
    "score_compliance",
    "unlink_activity",
]
