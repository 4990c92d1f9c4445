"""Planned workout <-> recorded activity pairing."""

from compliance_engine.pairing.auto_pairing import get_matching_activity_types, match_activities, match_day
from compliance_engine.pairing.manual_linking import link_activity, unlink_activity

__all__ = [
    "get_matching_activity_types",
    "link_activity",
    "match_activities",
    "match_day",
    "unlink_activity",
]
