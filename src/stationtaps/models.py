"""Data models for the station tap linker."""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

# Trip count published in place of small values
BELOW_THRESHOLD = "Less than 50"
BELOW_THRESHOLD_VALUE = 50


class StructuralConsistencyError(ValueError):
    """Raised when the station graph references an entity that was never created."""

    def __init__(self, stop_id: str, message: str):
        super().__init__(f"{message} (stop_id={stop_id})")
        self.stop_id = stop_id


def parse_trip_count(value: str) -> int:
    """Convert a published trip count to an int; the sentinel counts as its threshold."""
    value = (value or "").strip()
    if not value:
        return 0
    if value == BELOW_THRESHOLD:
        return BELOW_THRESHOLD_VALUE
    return int(value.replace(",", ""))


@dataclass(frozen=True)
class TapRecord:
    """Entry and exit taps for one station in one reporting period."""
    station_name: str
    entries: str = ""  # Raw trip count, may be BELOW_THRESHOLD
    exits: str = ""

    def entry_count(self) -> int:
        return parse_trip_count(self.entries)

    def exit_count(self) -> int:
        return parse_trip_count(self.exits)

    def total_taps(self) -> int:
        return self.entry_count() + self.exit_count()


@dataclass(frozen=True)
class TopologyRow:
    """One row of GTFS stops.txt."""
    stop_id: str
    stop_name: str
    location_type: str = ""
    parent_station: str = ""
    stop_code: str = ""
    stop_lat: str = ""
    stop_lon: str = ""
    wheelchair_boarding: str = ""
    level_id: str = ""
    platform_code: str = ""

    @classmethod
    def from_dict(cls, row: Dict[str, str]) -> "TopologyRow":
        return cls(
            stop_id=(row.get("stop_id") or "").strip(),
            stop_name=row.get("stop_name") or "",
            location_type=(row.get("location_type") or "").strip(),
            parent_station=(row.get("parent_station") or "").strip(),
            stop_code=row.get("stop_code") or "",
            stop_lat=row.get("stop_lat") or "",
            stop_lon=row.get("stop_lon") or "",
            wheelchair_boarding=row.get("wheelchair_boarding") or "",
            level_id=row.get("level_id") or "",
            platform_code=row.get("platform_code") or "",
        )


@dataclass
class Stop:
    """A child of a station that is not a platform (bus stand, wharf, light rail stop)."""
    id: str
    name: str
    station_id: str  # Owning station, lookup only
    stop_time_count: int = 0


@dataclass
class Platform(Stop):
    """A boarding platform of a station."""


@dataclass
class Station:
    """A station with tap counts and the stop times scheduled at its children."""
    id: str
    name: str
    entries: str = ""
    exits: str = ""
    platforms: List[Platform] = field(default_factory=list)
    non_platforms: List[Stop] = field(default_factory=list)
    total_platform_stop_time_count: int = 0
    total_non_platform_stop_time_count: int = 0

    def record_platform_stop_time(self, platform: Platform) -> None:
        """Count one scheduled stop at a platform of this station."""
        platform.stop_time_count += 1
        self.total_platform_stop_time_count += 1

    def record_non_platform_stop_time(self, stop: Stop) -> None:
        """Count one scheduled stop at a non-platform child of this station."""
        stop.stop_time_count += 1
        self.total_non_platform_stop_time_count += 1

    def total_taps(self) -> int:
        return TapRecord(self.name, self.entries, self.exits).total_taps()


@dataclass
class StationGraph:
    """Stations keyed by stop_id plus the child indexes used to count stop times."""
    stations: Dict[str, Station] = field(default_factory=dict)
    platform_station_ids: Dict[str, str] = field(default_factory=dict)  # platform_id -> station_id
    stop_station_ids: Dict[str, str] = field(default_factory=dict)  # stop_id -> station_id
    children: Dict[str, Stop] = field(default_factory=dict)  # child stop_id -> Platform/Stop
    errors: List[StructuralConsistencyError] = field(default_factory=list)

    def get_station(self, station_id: str) -> Station:
        """Get station by stop_id."""
        if station_id not in self.stations:
            raise StructuralConsistencyError(station_id, "Station not found")
        return self.stations[station_id]

    def get_child(self, stop_id: str) -> Optional[Stop]:
        return self.children.get(stop_id)

    def all_stop_ids(self) -> set:
        """Every station, platform and non-platform stop id in the graph."""
        return set(self.stations) | set(self.platform_station_ids) | set(self.stop_station_ids)
