"""Main station tap pipeline."""

import logging
import os
from typing import Dict, List, Optional

from .linker import link_stations
from .models import StationGraph, TapRecord, TopologyRow
from .naming import StationNameMatcher
from .sources import DEFAULT_CHUNKSIZE, load_stop_rows
from .stop_times import reduce_stop_time_file
from .tap_data import load_tap_data
from .topology import filter_stations_and_stops

logger = logging.getLogger(__name__)

# Default input and output files, relative to the working directory
DEFAULT_TAP_PATH = "data/train-station-entries-and-exits-data_july-2025.csv"
DEFAULT_STOPS_PATH = "data/full_greater_sydney_gtfs_static_0/stops.txt"
DEFAULT_STOP_TIMES_PATH = "data/full_greater_sydney_gtfs_static_0/stop_times.txt"
DEFAULT_SUBSET_PATH = "data/stop-times-for-matching-stops.csv"
DEFAULT_SUMMARY_PATH = "data/station-summary.csv"
DEFAULT_PERIOD = "Jun-25"


class StationTapPipeline:
    """
    Links tap data, GTFS stops and GTFS stop times into a station graph.

    Each stage runs to completion before the next one starts:
    - combine tap rows for one period into records per station
    - keep the stops.txt rows for those stations and their children
    - link stations, platforms and other stops
    - count stop times per platform, stop and station
    """

    def __init__(
        self,
        tap_path: str = DEFAULT_TAP_PATH,
        stops_path: str = DEFAULT_STOPS_PATH,
        stop_times_path: str = DEFAULT_STOP_TIMES_PATH,
        subset_path: Optional[str] = DEFAULT_SUBSET_PATH,
        period: str = DEFAULT_PERIOD,
        chunksize: int = DEFAULT_CHUNKSIZE,
        strict: bool = True,
        reuse_subset: bool = False,
        matcher: Optional[StationNameMatcher] = None,
    ):
        """
        Initialize the pipeline.

        Args:
            tap_path: Station entries and exits CSV.
            stops_path: GTFS stops.txt.
            stop_times_path: GTFS stop_times.txt.
            subset_path: Where to save stop times at linked stops. None disables it.
            period: MonthYear value to keep from the tap data.
            chunksize: Rows per chunk when streaming stop times.
            strict: Abort on structural errors instead of skipping and reporting them.
            reuse_subset: Count from an existing subset_path instead of the full
                stop_times file. The subset must come from the same inputs.
            matcher: Station name matcher shared by the filter and linker.
        """
        self.tap_path = tap_path
        self.stops_path = stops_path
        self.stop_times_path = stop_times_path
        self.subset_path = subset_path
        self.period = period
        self.chunksize = chunksize
        self.strict = strict
        self.reuse_subset = reuse_subset
        self.matcher = matcher or StationNameMatcher()

    def load_taps(self) -> Dict[str, TapRecord]:
        taps = load_tap_data(self.tap_path, self.period)
        if not taps:
            logger.warning(f"No tap data for {self.period}; nothing will be linked")
        return taps

    def load_stations_and_stops(self, taps: Dict[str, TapRecord]) -> List[TopologyRow]:
        rows = load_stop_rows(self.stops_path)
        if not rows:
            logger.warning(f"No stop data in {self.stops_path}; nothing will be linked")
        return filter_stations_and_stops(rows, taps, self.matcher)

    def link(self, taps: Dict[str, TapRecord], rows: List[TopologyRow]) -> StationGraph:
        return link_stations(taps, rows, matcher=self.matcher, strict=self.strict)

    def count_stop_times(self, graph: StationGraph) -> int:
        """
        Count stop times into the graph, saving the matching subset on the way.

        Returns:
            Number of stop times counted at platforms and stops.
        """
        if self.reuse_subset and self.subset_path and os.path.exists(self.subset_path):
            logger.info(f"Counting stop times from existing subset {self.subset_path}")
            return reduce_stop_time_file(self.subset_path, graph, chunksize=self.chunksize)

        return reduce_stop_time_file(
            self.stop_times_path,
            graph,
            subset_path=self.subset_path,
            chunksize=self.chunksize,
        )

    def run(self) -> StationGraph:
        """
        Run every stage and return the counted station graph.

        Raises:
            StructuralConsistencyError: In strict mode, if the stops do not
                form a consistent station hierarchy.
        """
        taps = self.load_taps()
        if not taps:
            return StationGraph()
        rows = self.load_stations_and_stops(taps)
        graph = self.link(taps, rows)
        if graph.errors:
            logger.warning(f"Skipped {len(graph.errors)} stop rows with structural errors")
        self.count_stop_times(graph)
        return graph
