"""Tests for free-text workout parsing.

Tests cover:
- Explicit zones win over keywords
- Keyword table order ("very easy" before "easy")
- Interval patterns: minutes, primes, seconds, double primes
- Zone from the token after the match, falling back to the intensity target
- Out-of-range structures are skipped and the search continues
- bpm ranges
"""

import pytest

from compliance_engine.workouts.text_parsing import parse_hr_range, parse_intensity_to_zone, parse_interval_structure


class TestParseIntensityToZone:
    """Test zone resolution from intensity text."""

    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("Z3", 3),
            ("z1 spin", 1),
            ("Zone 4 threshold", 4),
            ("zone5", 5),
            ("Z2 endurance ride", 2),
        ],
    )
    def test_explicit_zone(self, text, expected):
        assert parse_intensity_to_zone(text) == expected

    def test_explicit_zone_beats_keywords(self):
        assert parse_intensity_to_zone("easy Z4 finish") == 4

    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("recovery spin", 1),
            ("very easy", 1),
            ("Easy", 2),
            ("endurance", 2),
            ("tempo", 3),
            ("moderate", 3),
            ("Controlled effort", 3),
            ("Threshold", 4),
            ("sweet spot", 4),
            ("VO2", 5),
            ("max effort", 5),
        ],
    )
    def test_keywords(self, text, expected):
        assert parse_intensity_to_zone(text) == expected

    def test_very_easy_resolves_before_easy(self):
        assert parse_intensity_to_zone("very easy spin") == 1

    def test_declaration_order_not_text_order(self):
        """The first keyword in the table wins, wherever it sits in the text."""
        assert parse_intensity_to_zone("threshold then easy") == 2

    def test_out_of_range_explicit_zone_falls_through_to_keywords(self):
        assert parse_intensity_to_zone("z7 hard") == 4

    @pytest.mark.parametrize("text", [None, "", "whatever feels right", "z9"])
    def test_unrecognised(self, text):
        assert parse_intensity_to_zone(text) is None


class TestParseIntervalStructure:
    """Test repeat structure parsing."""

    def test_minutes_with_zone_from_intensity(self):
        structure = parse_interval_structure("Tempo 3x10min", None, "Z3")

        assert structure is not None
        assert structure.count == 3
        assert structure.duration_sec == 600
        assert structure.target_zone == 3
        assert structure.raw_text == "3x10min"

    def test_zone_from_keyword_after_match(self):
        structure = parse_interval_structure("3x10min tempo", None, None)

        assert structure is not None
        assert (structure.count, structure.duration_sec, structure.target_zone) == (3, 600, 3)

    def test_spaced_plural_minutes(self):
        structure = parse_interval_structure("4 x 8 mins", None, None)

        assert structure is not None
        assert structure.count == 4
        assert structure.duration_sec == 480
        assert structure.target_zone is None

    def test_prime_minutes_with_keyword_suffix(self):
        structure = parse_interval_structure("6x1' hard", None, "Z2")

        assert structure is not None
        assert structure.count == 6
        assert structure.duration_sec == 60
        assert structure.target_zone == 4

    def test_seconds_with_at_zone_suffix(self):
        structure = parse_interval_structure("8x30sec @ Z5", None, None)

        assert structure is not None
        assert structure.count == 8
        assert structure.duration_sec == 30
        assert structure.target_zone == 5

    def test_double_prime_seconds(self):
        structure = parse_interval_structure('10x20" max', None, None)

        assert structure is not None
        assert structure.duration_sec == 20
        assert structure.target_zone == 5

    def test_multiplication_sign(self):
        structure = parse_interval_structure("5×3min", None, "threshold")

        assert structure is not None
        assert structure.count == 5
        assert structure.duration_sec == 180
        assert structure.target_zone == 4

    def test_notes_searched_after_session_name(self):
        structure = parse_interval_structure("Tempo ride", "3x8min tempo", None)

        assert structure is not None
        assert structure.count == 3
        assert structure.duration_sec == 480
        assert structure.target_zone == 3

    def test_out_of_range_count_continues_search(self):
        structure = parse_interval_structure("25x1min", "4x5min z4", None)

        assert structure is not None
        assert structure.count == 4
        assert structure.duration_sec == 300
        assert structure.target_zone == 4

    def test_too_long_repeat_is_rejected(self):
        assert parse_interval_structure("2x90min", None, "Z2") is None

    def test_too_short_repeat_is_rejected(self):
        assert parse_interval_structure('4x5"', None, None) is None

    @pytest.mark.parametrize("session_name", ["Endurance ride", "Gym", ""])
    def test_no_structure(self, session_name):
        assert parse_interval_structure(session_name, None, "Z2") is None

    def test_all_inputs_missing(self):
        assert parse_interval_structure(None, None, None) is None


class TestParseHrRange:
    def test_hyphen_range(self):
        assert parse_hr_range("130-150 bpm") == (130, 150)

    def test_en_dash_and_reversed_bounds(self):
        assert parse_hr_range("150–130 BPM") == (130, 150)

    @pytest.mark.parametrize("text", [None, "", "Z3", "130-150"])
    def test_not_a_range(self, text):
        assert parse_hr_range(text) is None
