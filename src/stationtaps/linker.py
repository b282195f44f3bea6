"""Build the station graph from filtered stops and tap records."""

import logging
from typing import Iterable, Mapping, Optional

from .models import (
    Platform,
    Station,
    StationGraph,
    Stop,
    StructuralConsistencyError,
    TapRecord,
    TopologyRow,
)
from .naming import StationNameMatcher
from .topology import is_platform_name

logger = logging.getLogger(__name__)


def link_stations(
    tap_records: Mapping[str, TapRecord],
    rows: Iterable[TopologyRow],
    matcher: Optional[StationNameMatcher] = None,
    strict: bool = True,
) -> StationGraph:
    """
    Classify filtered stop rows into stations, platforms and other stops.

    Rows must be ordered with every station before its children, as returned
    by filter_stations_and_stops.

    Args:
        tap_records: Tap records keyed by normalized station name.
        rows: Filtered stop rows.
        matcher: Station name matcher; defaults to StationNameMatcher().
        strict: If True, raise on the first structural error. If False, skip
            the offending row and keep the error on StationGraph.errors.

    Returns:
        StationGraph with stations, child indexes and zeroed counters.

    Raises:
        StructuralConsistencyError: In strict mode, when a child's parent
            station was never created, a stop_id repeats, or an airport
            station has no tap record.
    """
    matcher = matcher or StationNameMatcher()
    graph = StationGraph()

    for row in rows:
        try:
            _link_row(graph, row, tap_records, matcher)
        except StructuralConsistencyError as e:
            if strict:
                raise
            logger.warning(f"Skipping stop row: {e}")
            graph.errors.append(e)

    logger.info(
        f"Linked {len(graph.stations)} stations, {len(graph.platform_station_ids)} platforms "
        f"and {len(graph.stop_station_ids)} other stops"
    )
    return graph


def _link_row(
    graph: StationGraph,
    row: TopologyRow,
    tap_records: Mapping[str, TapRecord],
    matcher: StationNameMatcher,
) -> None:
    if row.stop_id in graph.stations or row.stop_id in graph.children:
        raise StructuralConsistencyError(row.stop_id, "Duplicate stop_id")

    # Only top-level rows can be stations
    if not row.parent_station:
        tap_key = matcher.tap_key(row.stop_name, tap_records)
        if tap_key is not None:
            record = tap_records.get(tap_key)
            if record is None:
                raise StructuralConsistencyError(
                    row.stop_id, f"No tap data under {tap_key!r} for {row.stop_name!r}"
                )
            graph.stations[row.stop_id] = Station(
                id=row.stop_id,
                name=tap_key,
                entries=record.entries,
                exits=record.exits,
            )
            return

    station = graph.stations.get(row.parent_station)
    if station is None:
        raise StructuralConsistencyError(
            row.stop_id, f"Parent station {row.parent_station!r} was never created"
        )

    if is_platform_name(row.stop_name):
        platform = Platform(id=row.stop_id, name=row.stop_name, station_id=station.id)
        station.platforms.append(platform)
        graph.platform_station_ids[row.stop_id] = station.id
        graph.children[row.stop_id] = platform
    else:
        stop = Stop(id=row.stop_id, name=row.stop_name, station_id=station.id)
        station.non_platforms.append(stop)
        graph.stop_station_ids[row.stop_id] = station.id
        graph.children[row.stop_id] = stop
