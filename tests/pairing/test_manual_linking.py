"""Tests for manual link/unlink."""

from datetime import date

import pytest

from compliance_engine.pairing.manual_linking import link_activity, unlink_activity
from compliance_engine.workouts.types import PlannedWorkout


@pytest.fixture
def workout():
    return PlannedWorkout(id=5, workout_date=date(2024, 3, 8), session_name="Intervals 5x4min")


class TestLinkActivity:
    def test_link_sets_manual_flag(self, workout):
        linked = link_activity(workout, 777)

        assert linked.matched_activity_id == 777
        assert linked.is_manually_linked is True

    def test_original_is_unchanged(self, workout):
        link_activity(workout, 777)

        assert workout.matched_activity_id is None
        assert workout.is_manually_linked is False

    def test_relink_replaces_previous_link(self, workout):
        relinked = link_activity(link_activity(workout, 777), "abc")

        assert relinked.matched_activity_id == "abc"
        assert relinked.is_manually_linked is True


class TestUnlinkActivity:
    def test_unlink_clears_link(self, workout):
        unlinked = unlink_activity(link_activity(workout, 777))

        assert unlinked.matched_activity_id is None
        assert unlinked.is_manually_linked is False
        assert unlinked == workout
