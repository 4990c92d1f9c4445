"""Free-text parsing for planned workouts.

Turns coach-written intensity and session text into:
1. A target heart-rate zone (1-5)
2. An interval structure (repeats x duration @ zone)
3. An explicit bpm range, when the intensity is written as one

Nothing here raises on unrecognised text: every parser returns None when it
finds nothing usable.
"""

from __future__ import annotations

import re

from compliance_engine.workouts.types import IntervalStructure, Zone

MIN_REPEATS = 1
MAX_REPEATS = 20
MIN_REPEAT_DURATION_SEC = 10
MAX_REPEAT_DURATION_SEC = 3600

_EXPLICIT_ZONE = re.compile(r"z(?:one\s*)?(\d)")

# First declared keyword found in the text wins, regardless of where it appears.
INTENSITY_KEYWORD_TO_ZONE: tuple[tuple[str, Zone], ...] = (
    ("recovery", 1),
    ("very easy", 1),
    ("easy", 2),
    ("endurance", 2),
    ("aerobic", 2),
    ("tempo", 3),
    ("moderate", 3),
    ("controlled", 3),
    ("threshold", 4),
    ("hard", 4),
    ("lactate", 4),
    ("sweet spot", 4),
    ("vo2", 5),
    ("vo2max", 5),
    ("max", 5),
    ("anaerobic", 5),
)

_REPEAT_PREFIX = r"(?P<count>\d+)\s*[x×]\s*(?P<duration>\d+)\s*"
_INTENSITY_SUFFIX = r"\s*(?:@\s*)?(?P<suffix>\S+)?"

# (pattern, seconds per duration unit), tried in this order for every text
_INTERVAL_PATTERNS: tuple[tuple[re.Pattern[str], int], ...] = (
    (re.compile(_REPEAT_PREFIX + r"min(?:ute)?s?" + _INTENSITY_SUFFIX, re.IGNORECASE), 60),
    (re.compile(_REPEAT_PREFIX + r"['′]" + _INTENSITY_SUFFIX, re.IGNORECASE), 60),
    (re.compile(_REPEAT_PREFIX + r"sec(?:ond)?s?" + _INTENSITY_SUFFIX, re.IGNORECASE), 1),
    (re.compile(_REPEAT_PREFIX + r"[\"″]" + _INTENSITY_SUFFIX, re.IGNORECASE), 1),
)

_BPM_RANGE = re.compile(r"(\d+)\s*[-–]\s*(\d+)\s*bpm", re.IGNORECASE)


def parse_intensity_to_zone(text: str | None) -> Zone | None:
    """Map free-text intensity to a heart-rate zone.

    An explicit zone ("z3", "Zone 4") takes priority over keywords. Keywords
    are checked in declaration order, so "very easy" resolves to zone 1 even
    though it also contains "easy".

    Args:
        text: Intensity text (e.g., "Z2 endurance ride", "sweet spot")

    Returns:
        Zone 1-5, or None if nothing recognisable was found
    """
    if not text:
        return None

    lower = text.lower()

    explicit = _EXPLICIT_ZONE.search(lower)
    if explicit:
        zone = int(explicit.group(1))
        if 1 <= zone <= 5:
            return zone

    for keyword, zone in INTENSITY_KEYWORD_TO_ZONE:
        if keyword in lower:
            return zone

    return None


def parse_interval_structure(
    session_name: str | None,
    notes: str | None,
    intensity_target: str | None,
) -> IntervalStructure | None:
    """Parse a repeat structure such as "3x10min tempo" or "6x1' hard".

    Session name, notes and intensity target are searched in that order, each
    against the minute, prime, second and double-prime patterns. The target
    zone comes from the token right after the match ("@ Z4", "tempo") and
    falls back to the intensity target. Matches with an implausible repeat
    count or duration are skipped and the search continues.

    Args:
        session_name: Session name
        notes: Coach notes
        intensity_target: Intensity text

    Returns:
        First structurally valid IntervalStructure, or None
    """
    texts = [text for text in (session_name, notes, intensity_target) if text]

    for text in texts:
        for pattern, unit_seconds in _INTERVAL_PATTERNS:
            match = pattern.search(text)
            if not match:
                continue

            count = int(match.group("count"))
            duration_sec = int(match.group("duration")) * unit_seconds

            if not (MIN_REPEATS <= count <= MAX_REPEATS and MIN_REPEAT_DURATION_SEC <= duration_sec <= MAX_REPEAT_DURATION_SEC):
                continue

            target_zone = parse_intensity_to_zone(match.group("suffix"))
            if target_zone is None:
                target_zone = parse_intensity_to_zone(intensity_target)

            return IntervalStructure(
                count=count,
                duration_sec=duration_sec,
                target_zone=target_zone,
                raw_text=match.group(0).strip(),
            )

    return None


def parse_hr_range(text: str | None) -> tuple[int, int] | None:
    """Extract an explicit "<min>-<max> bpm" range (hyphen or en dash)."""
    if not text:
        return None
    match = _BPM_RANGE.search(text)
    if not match:
        return None
    low, high = int(match.group(1)), int(match.group(2))
    return (min(low, high), max(low, high))
