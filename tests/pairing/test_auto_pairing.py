"""Unit tests for auto-pairing.

Tests cover:
- Session name -> acceptable activity types
- Rest days never match
- Type match outweighs length; duration proximity breaks same-type choices
- Ties keep the first candidate
- Activities on other days are never auto-matched
- Manual links win, even across days
"""

from datetime import date, datetime

import pytest

from compliance_engine.pairing.auto_pairing import (
    DEFAULT_ACTIVITY_TYPES,
    get_matching_activity_types,
    match_activities,
    match_day,
    score_candidate,
)
from compliance_engine.workouts.types import ActivityType, PlannedWorkout, RecordedActivity

MONDAY_MORNING = datetime(2024, 3, 4, 8, 0)


def _activity(activity_id, activity_type, minutes, start=MONDAY_MORNING):
    return RecordedActivity(
        id=activity_id,
        activity_type=activity_type,
        moving_time_sec=minutes * 60,
        start_date_local=start,
    )


class TestGetMatchingActivityTypes:
    """Test the session keyword table."""

    @pytest.mark.parametrize(
        ("session_name", "expected"),
        [
            ("Endurance ride", [ActivityType.RIDE, ActivityType.VIRTUAL_RIDE, ActivityType.EBIKE_RIDE]),
            ("Long ride 3h", [ActivityType.RIDE, ActivityType.VIRTUAL_RIDE]),
            ("Easy trainer spin", [ActivityType.VIRTUAL_RIDE, ActivityType.RIDE]),
            ("Tempo 3x10min", [ActivityType.RIDE, ActivityType.VIRTUAL_RIDE]),
            ("Gym", [ActivityType.WEIGHT_TRAINING, ActivityType.WORKOUT, ActivityType.CROSSFIT]),
            ("Recovery walk", [ActivityType.WALK, ActivityType.YOGA]),
        ],
    )
    def test_keywords(self, session_name, expected):
        assert get_matching_activity_types(session_name) == expected

    @pytest.mark.parametrize("session_name", ["Off", "Rest day", "Travel day"])
    def test_rest_days(self, session_name):
        assert get_matching_activity_types(session_name) == []

    @pytest.mark.parametrize("session_name", ["Run", "Workout", "", None])
    def test_default_list(self, session_name):
        assert get_matching_activity_types(session_name) == DEFAULT_ACTIVITY_TYPES

    def test_returns_a_copy(self):
        types = get_matching_activity_types("Gym")
        types.clear()

        assert get_matching_activity_types("Gym") != []


class TestMatchDay:
    """Test candidate selection within a day."""

    @pytest.fixture
    def endurance(self):
        return PlannedWorkout(id=1, workout_date=date(2024, 3, 4), session_name="Endurance ride", duration_target_minutes=90)

    @pytest.mark.parametrize("session_name", ["Off", "Rest", "Travel day"])
    def test_rest_day_never_matches(self, session_name):
        workout = PlannedWorkout(id=1, workout_date=date(2024, 3, 4), session_name=session_name)

        assert match_day(workout, [_activity(1, "Ride", 60)]) is None

    def test_no_candidates(self, endurance):
        assert match_day(endurance, []) is None

    def test_type_match_beats_longer_activity(self, endurance):
        run = _activity(10, "Run", 180)
        ride = _activity(11, "Ride", 30)

        assert match_day(endurance, [run, ride]) == ride

    def test_duration_proximity_breaks_same_type(self, endurance):
        commute = _activity(10, "Ride", 20)
        main = _activity(11, "Ride", 95)

        assert match_day(endurance, [commute, main]) == main

    def test_tie_keeps_first_candidate(self, endurance):
        first = _activity(10, "Ride", 90)
        second = _activity(11, "Ride", 90)

        assert match_day(endurance, [first, second]) == first
        assert match_day(endurance, [second, first]) == second

    def test_wrong_type_still_matches_when_alone(self, endurance):
        walk = _activity(12, "Walk", 40)

        assert match_day(endurance, [walk]) == walk

    def test_candidate_score(self, endurance):
        ride = _activity(11, "Ride", 90)

        # type (+10), duration within band (+5), 1.5 h length
        assert score_candidate(endurance, ride, [ActivityType.RIDE]) == pytest.approx(16.5)

    def test_length_bonus_is_capped(self):
        workout = PlannedWorkout(id=1, workout_date=date(2024, 3, 4), session_name="Long ride")
        ride = _activity(11, "Ride", 300)

        assert score_candidate(workout, ride, [ActivityType.RIDE]) == pytest.approx(12.0)


class TestMatchActivities:
    """Test matching a set of workouts against a set of activities."""

    @pytest.fixture
    def workouts(self):
        return [
            PlannedWorkout(id=1, workout_date=date(2024, 3, 4), session_name="Endurance ride", duration_target_minutes=90),
            PlannedWorkout(id=2, workout_date=date(2024, 3, 5), session_name="Gym", duration_target_minutes=45),
            PlannedWorkout(id=3, workout_date=date(2024, 3, 6), session_name="Off"),
        ]

    def test_groups_by_local_day(self, workouts):
        ride = _activity(10, "Ride", 90)
        gym = _activity(20, "WeightTraining", 45, start=datetime(2024, 3, 5, 18, 0))
        walk = _activity(30, "Walk", 30, start=datetime(2024, 3, 6, 12, 0))

        matches = match_activities(workouts, [ride, gym, walk])

        assert matches == {1: ride, 2: gym, 3: None}

    def test_activity_on_other_day_not_matched(self, workouts):
        friday_ride = _activity(10, "Ride", 90, start=datetime(2024, 3, 8, 8, 0))

        matches = match_activities(workouts, [friday_ride])

        assert matches == {1: None, 2: None, 3: None}

    def test_activity_without_start_date_not_auto_matched(self, workouts):
        undated = RecordedActivity(id=10, activity_type="Ride", moving_time_sec=5400)

        assert match_activities(workouts, [undated])[1] is None

    def test_manual_link_wins_across_days(self, workouts):
        ride = _activity(10, "Ride", 90)
        friday_gym = _activity(20, "WeightTraining", 45, start=datetime(2024, 3, 8, 18, 0))
        linked = workouts[1].model_copy(update={"matched_activity_id": 20, "is_manually_linked": True})

        matches = match_activities([workouts[0], linked], [ride, friday_gym])

        assert matches[2] == friday_gym
        assert matches[1] == ride

    def test_manual_link_on_rest_day(self, workouts):
        walk = _activity(30, "Walk", 30, start=datetime(2024, 3, 6, 12, 0))
        linked = workouts[2].model_copy(update={"matched_activity_id": 30, "is_manually_linked": True})

        assert match_activities([linked], [walk]) == {3: walk}

    def test_manual_link_to_missing_activity(self, workouts):
        ride = _activity(10, "Ride", 90)
        linked = workouts[0].model_copy(update={"matched_activity_id": 999, "is_manually_linked": True})

        assert match_activities([linked], [ride]) == {1: None}

    def test_inputs_are_not_modified(self, workouts):
        ride = _activity(10, "Ride", 90)
        before = [workout.model_copy() for workout in workouts]

        match_activities(workouts, [ride])

        assert workouts == before
