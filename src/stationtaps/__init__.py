"""StationTaps - Link station tap counts to GTFS platforms and scheduled stop times."""

__version__ = "0.1.0"

from .models import (
    Platform,
    Station,
    StationGraph,
    Stop,
    StructuralConsistencyError,
    TapRecord,
    TopologyRow,
)
from .naming import StationNameMatcher, normalize_station_name
from .tap_data import combine_entries_and_exits, load_tap_data
from .topology import filter_stations_and_stops
from .linker import link_stations
from .stop_times import count_stop_times, reduce_stop_time_file
from .pipeline import StationTapPipeline

__all__ = [
    "StationTapPipeline",
    "StationNameMatcher",
    "normalize_station_name",
    "combine_entries_and_exits",
    "load_tap_data",
    "filter_stations_and_stops",
    "link_stations",
    "count_stop_times",
    "reduce_stop_time_file",
    "Station",
    "Platform",
    "Stop",
    "StationGraph",
    "TapRecord",
    "TopologyRow",
    "StructuralConsistencyError",
]
