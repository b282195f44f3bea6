"""Count scheduled stop times against the station graph."""

import logging
from pathlib import Path
from typing import Iterable, Optional

from .models import Platform, StationGraph, Stop, StructuralConsistencyError
from .sources import DEFAULT_CHUNKSIZE, iter_stop_time_chunks

logger = logging.getLogger(__name__)


def count_stop_times(stop_ids: Iterable[str], graph: StationGraph) -> int:
    """
    Add one stop time per event to the matching platform or stop and its station.

    Events at stops outside the graph are ignored.

    Args:
        stop_ids: stop_id of each stop_times.txt row.
        graph: Linked station graph, updated in place.

    Returns:
        Number of events that matched a platform or stop.

    Raises:
        StructuralConsistencyError: If an index entry points at a station or
            child that is not in the graph.
    """
    matched = 0
    platform_station_ids = graph.platform_station_ids
    stop_station_ids = graph.stop_station_ids

    for stop_id in stop_ids:
        if stop_id in platform_station_ids:
            station = graph.get_station(platform_station_ids[stop_id])
            station.record_platform_stop_time(_get_child(graph, stop_id, Platform))
        elif stop_id in stop_station_ids:
            station = graph.get_station(stop_station_ids[stop_id])
            station.record_non_platform_stop_time(_get_child(graph, stop_id, Stop))
        else:
            continue
        matched += 1

    return matched


def _get_child(graph: StationGraph, stop_id: str, kind: type) -> Stop:
    child = graph.get_child(stop_id)
    if child is None or type(child) is not kind:
        raise StructuralConsistencyError(stop_id, f"No {kind.__name__.lower()} indexed")
    return child


def reduce_stop_time_file(
    path: str,
    graph: StationGraph,
    subset_path: Optional[str] = None,
    chunksize: int = DEFAULT_CHUNKSIZE,
) -> int:
    """
    Stream a stop_times file once, counting stop times into the graph.

    Args:
        path: stop_times.txt, or a subset previously written here.
        graph: Linked station graph, updated in place.
        subset_path: If given, rows whose stop_id is a station, platform or
            stop of the graph are also written to this CSV with the same
            columns.
        chunksize: Rows read per chunk.

    Returns:
        Number of events that matched a platform or stop.
    """
    known_ids = graph.all_stop_ids()
    total_rows = 0
    kept_rows = 0
    matched = 0
    wrote_header = False

    if subset_path:
        subset = Path(subset_path)
        subset.parent.mkdir(parents=True, exist_ok=True)
        # A subset from an earlier run must not outlive a failed read
        if subset.exists() and subset.resolve() != Path(path).resolve():
            logger.info(f"Removing previous stop time subset {subset_path}")
            subset.unlink()

    for chunk in iter_stop_time_chunks(path, chunksize=chunksize):
        if "stop_id" not in chunk.columns:
            logger.error(f"No stop_id column in {path}")
            return matched

        total_rows += len(chunk)
        kept = chunk[chunk["stop_id"].isin(known_ids)]
        kept_rows += len(kept)
        matched += count_stop_times(kept["stop_id"], graph)

        if subset_path:
            kept.to_csv(subset_path, mode="a" if wrote_header else "w", header=not wrote_header, index=False)
            wrote_header = True

    logger.info(f"Read {total_rows} stop times, {kept_rows} at linked stops, {matched} counted")
    if subset_path and wrote_header:
        logger.info(f"Saved {kept_rows} stop times to {subset_path}")
    return matched
