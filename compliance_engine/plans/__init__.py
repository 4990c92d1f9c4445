"""Training plan import."""

from compliance_engine.plans.table_parser import ParsedPlan, convert_to_planned_workouts, parse_training_plan_table

__all__ = ["ParsedPlan", "convert_to_planned_workouts", "parse_training_plan_table"]
