"""Tests for tap aggregation, stop filtering and station linking."""

import dataclasses
import sys
import unittest
from pathlib import Path

# Add src to path so we can import stationtaps
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from stationtaps.linker import link_stations
from stationtaps.models import StructuralConsistencyError, TapRecord, TopologyRow
from stationtaps.naming import StationNameMatcher, normalize_station_name
from stationtaps.tap_data import combine_entries_and_exits
from stationtaps.topology import filter_stations_and_stops


def tap_row(period, station, direction, trips):
    return {
        "MonthYear": period,
        "Station": station,
        "Station_Type": "Heavy Rail",
        "Entry_Exit": direction,
        "Trip": trips,
    }


def stop(stop_id, name, location_type="", parent=""):
    return TopologyRow(stop_id=stop_id, stop_name=name, location_type=location_type, parent_station=parent)


CENTRAL_TAPS = [
    tap_row("Jun-25", "Central Station", "Entry", "10000"),
    tap_row("Jun-25", "Central Station", "Exit", "9500"),
]

STOPS = [
    stop("10101", "Central Station", "1"),
    stop("10101P1", "Central Platform 1", "0", "10101"),
    stop("10101P2", "Central Platform 2", "0", "10101"),
    stop("10101P1_1", "Central Platform 1", "0", "10101"),
    stop("200060", "Central Station, Stand A", "0", "10101"),
    stop("10101E1", "Central Station", "2", "10101"),
    stop("G10101", "Central Station", "1"),
    stop("G10101P1", "Central Light Rail Platform 1", "0", "G10101"),
    stop("2016", "Redfern Station", "1"),
    stop("2016P1", "Redfern Platform 1", "0", "2016"),
    stop("202030", "Sydney Domestic Airport Station", "1"),
    stop("202030P1", "Sydney Domestic Airport Platform 1", "0", "202030"),
    stop("202020", "Sydney International Airport Station", "1"),
    stop("202020P1", "Sydney International Airport Platform 1", "0", "202020"),
]


def central_taps():
    taps = combine_entries_and_exits(CENTRAL_TAPS[:2], period="Jun-25")
    # Airport stations are keyed by terminal name only
    taps["Domestic"] = TapRecord("Domestic", entries="4000", exits="Less than 50")
    taps["International"] = TapRecord("International", entries="6000", exits="5800")
    return taps


class TestNormalizeStationName(unittest.TestCase):
    """Test station name normalization."""

    def test_strips_station_suffix(self):
        self.assertEqual(normalize_station_name("Central Station"), "Central")

    def test_case_insensitive_and_trimmed(self):
        self.assertEqual(normalize_station_name("  Wynyard station "), "Wynyard")
        self.assertEqual(normalize_station_name("TOWN HALL STATION"), "TOWN HALL")

    def test_name_without_station_unchanged(self):
        self.assertEqual(normalize_station_name("Museum"), "Museum")

    def test_matcher_alias_checked_after_name(self):
        matcher = StationNameMatcher()
        taps = {"Central": TapRecord("Central")}
        self.assertEqual(matcher.tap_key("Central Station", taps), "Central")
        self.assertEqual(matcher.tap_key("Sydney International Airport Station", taps), "International")
        self.assertIsNone(matcher.tap_key("Redfern Station", taps))

    def test_custom_alias_table(self):
        matcher = StationNameMatcher(aliases={"Olympic Park Station": "Olympic Park"})
        self.assertTrue(matcher.is_alias("Olympic Park Station"))
        self.assertFalse(matcher.is_alias("Sydney Domestic Airport Station"))


class TestCombineEntriesAndExits(unittest.TestCase):
    """Test folding tap rows into TapRecords."""

    def test_entries_and_exits_combined(self):
        taps = combine_entries_and_exits(CENTRAL_TAPS[:2], period="Jun-25")
        self.assertEqual(list(taps), ["Central"])
        record = taps["Central"]
        self.assertEqual(record.station_name, "Central")
        self.assertEqual(record.entries, "10000")
        self.assertEqual(record.exits, "9500")

    def test_filters_to_period(self):
        rows = [
            tap_row("May-25", "Central Station", "Entry", "1"),
            tap_row(" Jun-25 ", "Wynyard Station", "Entry", "2"),
        ]
        taps = combine_entries_and_exits(rows, period="Jun-25")
        self.assertEqual(list(taps), ["Wynyard"])

    def test_last_row_wins_per_direction(self):
        rows = [
            tap_row("Jun-25", "Central Station", "Entry", "100"),
            tap_row("Jun-25", "Central Station", "Exit", "90"),
            tap_row("Jun-25", "Central Station", "Entry", "200"),
        ]
        record = combine_entries_and_exits(rows, period="Jun-25")["Central"]
        self.assertEqual(record.entries, "200")
        self.assertEqual(record.exits, "90")

    def test_unknown_direction_sets_nothing(self):
        rows = [tap_row("Jun-25", "Central Station", "Transfer", "100")]
        record = combine_entries_and_exits(rows, period="Jun-25")["Central"]
        self.assertEqual(record.entries, "")
        self.assertEqual(record.exits, "")

    def test_records_are_immutable(self):
        record = combine_entries_and_exits(CENTRAL_TAPS[:2], period="Jun-25")["Central"]
        with self.assertRaises(dataclasses.FrozenInstanceError):
            record.entries = "0"

    def test_total_taps_counts_sentinel_as_threshold(self):
        record = TapRecord("Domestic", entries="Less than 50", exits="120")
        self.assertEqual(record.total_taps(), 170)
        self.assertEqual(TapRecord("Empty").total_taps(), 0)


class TestFilterStationsAndStops(unittest.TestCase):
    """Test narrowing stops.txt to tapped stations and their children."""

    def setUp(self):
        self.rows = filter_stations_and_stops(STOPS, central_taps())
        self.ids = [row.stop_id for row in self.rows]

    def test_keeps_tapped_stations_first(self):
        self.assertEqual(self.ids[:3], ["10101", "202030", "202020"])

    def test_platforms_before_other_stops(self):
        self.assertEqual(self.ids[3:7], ["10101P1", "10101P2", "202030P1", "202020P1"])
        self.assertEqual(self.ids[7:], ["200060", "10101E1"])

    def test_excludes_non_rail_and_untapped_stations(self):
        for stop_id in ["G10101", "G10101P1", "2016", "2016P1"]:
            self.assertNotIn(stop_id, self.ids)

    def test_excludes_sub_id_platforms(self):
        self.assertNotIn("10101P1_1", self.ids)

    def test_airport_kept_without_tap_data(self):
        rows = filter_stations_and_stops(STOPS, {})
        self.assertEqual([row.stop_id for row in rows], ["202030", "202020", "202030P1", "202020P1"])

    def test_no_tap_data_and_no_airports_keeps_nothing(self):
        rows = filter_stations_and_stops(STOPS[:-4], {})
        self.assertEqual(rows, [])


class TestLinkStations(unittest.TestCase):
    """Test building the station graph."""

    def setUp(self):
        self.taps = central_taps()
        self.rows = filter_stations_and_stops(STOPS, self.taps)
        self.graph = link_stations(self.taps, self.rows)

    def test_station_copies_tap_counts(self):
        station = self.graph.stations["10101"]
        self.assertEqual(station.name, "Central")
        self.assertEqual(station.entries, "10000")
        self.assertEqual(station.exits, "9500")
        self.assertEqual(station.total_platform_stop_time_count, 0)
        self.assertEqual(station.total_non_platform_stop_time_count, 0)

    def test_platforms_and_stops_attached(self):
        station = self.graph.stations["10101"]
        self.assertEqual([p.id for p in station.platforms], ["10101P1", "10101P2"])
        self.assertEqual([s.id for s in station.non_platforms], ["200060", "10101E1"])
        self.assertEqual(self.graph.platform_station_ids["10101P1"], "10101")
        self.assertEqual(self.graph.stop_station_ids["200060"], "10101")
        self.assertIs(self.graph.get_child("10101P1"), station.platforms[0])

    def test_airport_station_uses_terminal_key(self):
        station = self.graph.stations["202030"]
        self.assertEqual(station.name, "Domestic")
        self.assertEqual(station.entries, "4000")
        self.assertEqual(station.exits, "Less than 50")
        self.assertEqual([p.id for p in station.platforms], ["202030P1"])

    def test_international_airport_station_uses_terminal_key(self):
        station = self.graph.stations["202020"]
        self.assertEqual(station.name, "International")
        self.assertEqual(station.entries, "6000")
        self.assertEqual(station.exits, "5800")
        self.assertEqual([p.id for p in station.platforms], ["202020P1"])
        self.assertEqual(self.graph.platform_station_ids["202020P1"], "202020")

    def test_classification_is_partition(self):
        stations = set(self.graph.stations)
        platforms = set(self.graph.platform_station_ids)
        stops = set(self.graph.stop_station_ids)
        self.assertFalse(stations & platforms)
        self.assertFalse(stations & stops)
        self.assertFalse(platforms & stops)
        self.assertEqual(stations | platforms | stops, {row.stop_id for row in self.rows})

    def test_linking_is_idempotent(self):
        again = link_stations(self.taps, filter_stations_and_stops(STOPS, self.taps))
        self.assertEqual(again, self.graph)

    def test_missing_airport_tap_data_raises(self):
        taps = combine_entries_and_exits(CENTRAL_TAPS[:2], period="Jun-25")
        rows = filter_stations_and_stops(STOPS, taps)
        with self.assertRaises(StructuralConsistencyError) as ctx:
            link_stations(taps, rows)
        self.assertEqual(ctx.exception.stop_id, "202030")

    def test_child_before_parent_raises(self):
        rows = [stop("10101P1", "Central Platform 1", "0", "10101"), stop("10101", "Central Station", "1")]
        with self.assertRaises(StructuralConsistencyError) as ctx:
            link_stations(self.taps, rows)
        self.assertEqual(ctx.exception.stop_id, "10101P1")

    def test_non_strict_collects_errors(self):
        rows = [
            stop("10101", "Central Station", "1"),
            stop("9999P1", "Nowhere Platform 1", "0", "9999"),
            stop("10101P1", "Central Platform 1", "0", "10101"),
        ]
        graph = link_stations(self.taps, rows, strict=False)
        self.assertEqual([e.stop_id for e in graph.errors], ["9999P1"])
        self.assertIn("10101P1", graph.platform_station_ids)
        self.assertNotIn("9999P1", graph.children)

    def test_duplicate_stop_id_raises(self):
        rows = [stop("10101", "Central Station", "1"), stop("10101", "Central Station", "1")]
        with self.assertRaises(StructuralConsistencyError):
            link_stations(self.taps, rows)


if __name__ == "__main__":
    unittest.main()
