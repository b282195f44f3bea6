"""Console and CSV reports for a counted station graph."""

import logging
from pathlib import Path
from typing import List, Tuple

import pandas as pd

from .models import Station, StationGraph

logger = logging.getLogger(__name__)

SUMMARY_COLUMNS = [
    "station_id",
    "station",
    "entries",
    "exits",
    "total_taps",
    "platforms",
    "non_platforms",
    "platform_stop_times",
    "non_platform_stop_times",
]


def child_stop_time_lines(graph: StationGraph, include_non_platforms: bool = True) -> List[str]:
    """One line per platform (and optionally per other stop) with its stop time count."""
    lines = []
    for station in graph.stations.values():
        children = list(station.platforms)
        if include_non_platforms:
            children.extend(station.non_platforms)
        for child in children:
            lines.append(f"{child.name} has {child.stop_time_count}")
    return lines


def station_summary_lines(graph: StationGraph) -> List[str]:
    lines = []
    for station in graph.stations.values():
        lines.append(
            f"{station.name} ({station.id}): {station.entries or '-'} entries, "
            f"{station.exits or '-'} exits, "
            f"{station.total_platform_stop_time_count} platform stop times, "
            f"{station.total_non_platform_stop_time_count} other stop times"
        )
    return lines


def low_ratio_stations(graph: StationGraph, threshold: float = 1.0) -> List[Tuple[Station, float]]:
    """
    Find stations with fewer taps than platform stop times.

    Assumes the stop times cover the same period for every station, so the
    ratio is only meaningful relative to other stations.

    Args:
        graph: Counted station graph.
        threshold: Report stations whose taps / platform stop times ratio is
            strictly between 0 and this value.

    Returns:
        List of (station, ratio) in graph order.
    """
    results = []
    for station in graph.stations.values():
        if station.total_platform_stop_time_count == 0:
            continue
        try:
            taps = station.total_taps()
        except ValueError:
            logger.warning(f"Unreadable trip counts for {station.name}: {station.entries!r}, {station.exits!r}")
            continue
        ratio = taps / station.total_platform_stop_time_count
        if 0 < ratio < threshold:
            results.append((station, ratio))
    return results


def low_ratio_lines(graph: StationGraph, threshold: float = 1.0) -> List[str]:
    return [
        f"{station.name} has a ratio of {ratio} total taps to trains stopping"
        for station, ratio in low_ratio_stations(graph, threshold)
    ]


def stations_frame(graph: StationGraph) -> pd.DataFrame:
    """One row per station with tap and stop time totals."""
    records = []
    for station in graph.stations.values():
        try:
            total_taps = station.total_taps()
        except ValueError:
            total_taps = None
        records.append({
            "station_id": station.id,
            "station": station.name,
            "entries": station.entries,
            "exits": station.exits,
            "total_taps": total_taps,
            "platforms": len(station.platforms),
            "non_platforms": len(station.non_platforms),
            "platform_stop_times": station.total_platform_stop_time_count,
            "non_platform_stop_times": station.total_non_platform_stop_time_count,
        })
    return pd.DataFrame.from_records(records, columns=SUMMARY_COLUMNS)


def write_station_summary(graph: StationGraph, path: str) -> None:
    Path(path).parent.mkdir(parents=True, exist_ok=True)
    stations_frame(graph).to_csv(path, index=False)
    logger.info(f"Saved {len(graph.stations)} stations to {path}")
