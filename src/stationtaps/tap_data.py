"""Fold station entry/exit tap rows into one record per station."""

import logging
from dataclasses import replace
from typing import Callable, Dict, Iterable, Mapping, Optional

from .models import TapRecord
from .naming import normalize_station_name
from .sources import load_tap_rows

logger = logging.getLogger(__name__)

ENTRY = "Entry"
EXIT = "Exit"


def combine_entries_and_exits(
    rows: Iterable[Mapping[str, str]],
    period: Optional[str] = None,
    normalizer: Callable[[str], str] = normalize_station_name,
) -> Dict[str, TapRecord]:
    """
    Build TapRecords keyed by normalized station name.

    The source holds at most one row per (station, direction, period), so a
    later row for the same direction replaces the earlier count instead of
    adding to it.

    Args:
        rows: Tap rows with MonthYear, Station, Entry_Exit and Trip columns.
        period: Reporting period to keep (e.g. "Jun-25"). None keeps every row.
        normalizer: Station name normalizer.

    Returns:
        Dictionary of {normalized_station_name: TapRecord}.
    """
    records: Dict[str, TapRecord] = {}

    for row in rows:
        if period is not None and (row.get("MonthYear") or "").strip() != period:
            continue

        station = normalizer(row.get("Station") or "")
        direction = row.get("Entry_Exit")
        trips = row.get("Trip") or ""

        record = records.setdefault(station, TapRecord(station_name=station))

        if direction == ENTRY:
            records[station] = replace(record, entries=trips)
        elif direction == EXIT:
            records[station] = replace(record, exits=trips)
        else:
            logger.debug(f"Ignoring tap row for {station} with direction {direction!r}")

    return records


def load_tap_data(path: str, period: str) -> Dict[str, TapRecord]:
    """
    Load the tap file and combine the rows for one reporting period.

    An unreadable file gives an empty dictionary, which callers treat as
    "no data for this run".
    """
    rows = load_tap_rows(path)
    records = combine_entries_and_exits(rows, period=period)
    logger.info(f"Combined tap data for {len(records)} stations in {period}")
    return records
