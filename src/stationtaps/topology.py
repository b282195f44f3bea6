"""Narrow GTFS stops to stations with tap data and their child stops."""

import logging
from typing import List, Mapping, Optional, Sequence

from .models import TapRecord, TopologyRow
from .naming import StationNameMatcher

logger = logging.getLogger(__name__)

PLATFORM_MARKER = "Platform"
SUB_ID_DELIMITER = "_"  # Alternate platform records, e.g. "2000331_1"
NON_RAIL_PREFIX = "G"  # Light rail / ferry station ids
STATION_LOCATION_TYPE = "1"


def is_platform_name(stop_name: str) -> bool:
    return PLATFORM_MARKER in stop_name


def is_tapped_station(
    row: TopologyRow,
    tap_records: Mapping[str, TapRecord],
    matcher: StationNameMatcher,
) -> bool:
    """Whether a stop row is a rail station that appears in tap data."""
    if matcher.is_alias(row.stop_name):
        return True
    return (
        matcher.normalize(row.stop_name) in tap_records
        and row.location_type == STATION_LOCATION_TYPE
        and not row.stop_id.startswith(NON_RAIL_PREFIX)
    )


def filter_stations_and_stops(
    rows: Sequence[TopologyRow],
    tap_records: Mapping[str, TapRecord],
    matcher: Optional[StationNameMatcher] = None,
) -> List[TopologyRow]:
    """
    Keep stations found in tap data, then their platforms, then their other stops.

    Stations always come first so that the linker sees every parent before
    its children.

    Args:
        rows: All rows of stops.txt.
        tap_records: Output of combine_entries_and_exits.
        matcher: Station name matcher; defaults to StationNameMatcher().

    Returns:
        Station rows, platform rows and non-platform rows, in that order.
    """
    matcher = matcher or StationNameMatcher()

    stations = [row for row in rows if is_tapped_station(row, tap_records, matcher)]
    station_ids = {row.stop_id for row in stations}

    children = [
        row for row in rows
        if row.parent_station in station_ids
        and SUB_ID_DELIMITER not in row.stop_id
        and row.stop_id not in station_ids
    ]
    platforms = [row for row in children if is_platform_name(row.stop_name)]
    non_platforms = [row for row in children if not is_platform_name(row.stop_name)]

    logger.info(
        f"Filtered {len(stations)} stations, {len(platforms)} platforms "
        f"and {len(non_platforms)} other stops"
    )
    return stations + platforms + non_platforms
