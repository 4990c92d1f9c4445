"""Heart rate zone lookups.

Zone tables come from the athlete's tracking platform as an ordered list of
(min, max) pairs, zone 1 first. These helpers are the only place that turns a
1-based zone number into a table index.
"""

from collections.abc import Sequence

from compliance_engine.workouts.types import HeartRateZone, Zone

FULL_ZONE_TABLE_SIZE = 5

ZoneTable = Sequence[HeartRateZone]


def has_full_table(zone_table: ZoneTable | None) -> bool:
    return zone_table is not None and len(zone_table) >= FULL_ZONE_TABLE_SIZE


def get_zone(zone_table: ZoneTable, zone: Zone) -> HeartRateZone | None:
    """Get the zone definition for a 1-based zone number, None if out of range."""
    index = zone - 1
    if index < 0 or index >= len(zone_table):
        return None
    return zone_table[index]


def zone_for_hr(hr: float, zone_table: ZoneTable) -> Zone:
    """Map heart rate to a zone number.

    Scans from the highest zone down and takes the first zone whose minimum
    the heart rate meets, defaulting to zone 1.

    Args:
        hr: Heart rate in bpm
        zone_table: Ordered zone table, zone 1 first

    Returns:
        Zone number, 1 to 5 (tables longer than five zones cap at 5)
    """
    for index in range(len(zone_table) - 1, -1, -1):
        if hr >= zone_table[index].min_hr:
            return min(index + 1, FULL_ZONE_TABLE_SIZE)
    return 1
