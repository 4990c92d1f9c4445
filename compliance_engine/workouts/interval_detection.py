"""Interval detection over heart-rate streams.

Finds sustained effort bouts relative to a target zone using a two-threshold
(hysteresis) state machine:

- Entry threshold: target zone minimum - 5 bpm, held for 10 samples
- Exit threshold: target zone minimum - 10 bpm, held for 10 samples
- The first 5 minutes are treated as warm-up and ignored
- Bouts shorter than half the planned repeat duration are dropped

Detection does not know how many repeats were planned; reconciling detected
bouts with the plan is the scorer's job.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum

from loguru import logger

from compliance_engine.config.settings import settings
from compliance_engine.workouts.math_utils import round_half_up
from compliance_engine.workouts.types import DetectedInterval, Zone
from compliance_engine.workouts.zones import ZoneTable, get_zone, zone_for_hr


class DetectorMode(Enum):
    SEARCHING = "searching"
    IN_INTERVAL = "in_interval"


@dataclass
class _DetectorState:
    """Mutable scan state, local to one ``detect_intervals`` call."""

    mode: DetectorMode = DetectorMode.SEARCHING
    consecutive_above: int = 0
    consecutive_below: int = 0
    hr_sum: float = 0.0
    hr_count: int = 0
    max_hr: float = 0.0
    start_sec: float = 0.0

    def open(self, start_sec: float, hr: float, dwell_samples: int) -> None:
        # Dwell samples are assumed to sit at the current HR
        self.mode = DetectorMode.IN_INTERVAL
        self.start_sec = start_sec
        self.hr_sum = hr * dwell_samples
        self.hr_count = dwell_samples
        self.max_hr = hr
        self.consecutive_below = 0

    def accumulate(self, hr: float) -> None:
        self.hr_sum += hr
        self.hr_count += 1
        self.max_hr = max(self.max_hr, hr)

    def reset(self) -> None:
        self.mode = DetectorMode.SEARCHING
        self.consecutive_above = 0
        self.consecutive_below = 0
        self.hr_sum = 0.0
        self.hr_count = 0
        self.max_hr = 0.0


def _close_interval(
    state: _DetectorState,
    end_sec: float,
    zone_table: ZoneTable,
    min_duration_sec: float,
) -> DetectedInterval | None:
    """Build the detected interval, or None if it is too short to keep."""
    duration_sec = end_sec - state.start_sec
    if duration_sec < min_duration_sec * settings.min_interval_fraction:
        logger.debug(f"Dropping {duration_sec:.0f}s bout starting at {state.start_sec:.0f}s (below minimum)")
        return None

    avg_hr = round_half_up(state.hr_sum / state.hr_count)
    return DetectedInterval(
        start_sec=state.start_sec,
        end_sec=end_sec,
        duration_sec=duration_sec,
        avg_hr=avg_hr,
        max_hr=state.max_hr,
        zone=zone_for_hr(avg_hr, zone_table),
    )


def detect_intervals(
    time_data: Sequence[float],
    hr_data: Sequence[float],
    zone_table: ZoneTable,
    target_zone: Zone,
    min_duration_sec: float,
) -> list[DetectedInterval]:
    """Detect sustained efforts at or above a target zone.

    Single left-to-right pass. Samples are treated as one second apart for the
    dwell counters, which matches 1 Hz recordings.

    Args:
        time_data: Elapsed seconds per sample, non-decreasing
        hr_data: Heart rate per sample, same length as time_data
        zone_table: Ordered zone table, zone 1 first
        target_zone: Target zone (1-5)
        min_duration_sec: Planned repeat duration; bouts under half of it are dropped

    Returns:
        Detected intervals, earliest first. Empty for mismatched or empty input,
        or when the target zone is not in the table.
    """
    if len(time_data) != len(hr_data) or not time_data:
        return []

    target = get_zone(zone_table, target_zone)
    if target is None:
        return []

    entry_threshold = target.min_hr - settings.entry_margin_bpm
    exit_threshold = target.min_hr - settings.exit_margin_bpm
    entry_dwell = settings.entry_dwell_samples
    exit_dwell = settings.exit_dwell_samples

    intervals: list[DetectedInterval] = []
    state = _DetectorState()

    for time_sec, hr in zip(time_data, hr_data):
        if time_sec < settings.warmup_exclusion_sec:
            continue

        if state.mode is DetectorMode.SEARCHING:
            if hr >= entry_threshold:
                state.consecutive_above += 1
                if state.consecutive_above >= entry_dwell:
                    state.open(start_sec=time_sec - entry_dwell, hr=hr, dwell_samples=entry_dwell)
            else:
                state.consecutive_above = 0
            continue

        state.accumulate(hr)
        if hr < exit_threshold:
            state.consecutive_below += 1
            if state.consecutive_below >= exit_dwell:
                interval = _close_interval(state, time_sec - exit_dwell, zone_table, min_duration_sec)
                if interval is not None:
                    intervals.append(interval)
                state.reset()
        else:
            state.consecutive_below = 0

    if state.mode is DetectorMode.IN_INTERVAL and state.hr_count > 0:
        interval = _close_interval(state, time_data[-1], zone_table, min_duration_sec)
        if interval is not None:
            intervals.append(interval)

    logger.debug(f"Detected {len(intervals)} interval(s) targeting zone {target_zone} (entry>={entry_threshold:.0f}, exit<{exit_threshold:.0f})")
    return intervals
