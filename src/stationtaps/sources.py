"""CSV loaders for tap data, GTFS stops and GTFS stop times."""

import csv
import io
import logging
from typing import Dict, Iterator, List, Optional, Sequence

import pandas as pd

from .models import TopologyRow

logger = logging.getLogger(__name__)

TAP_COLUMNS = ["MonthYear", "Station", "Station_Type", "Entry_Exit", "Trip"]
STOP_COLUMNS = ["stop_id", "stop_name", "location_type", "parent_station"]

# Rows per chunk when streaming stop_times.txt
DEFAULT_CHUNKSIZE = 500_000


def parse_csv_rows(csv_content: str, required_columns: Sequence[str], label: str) -> List[Dict[str, str]]:
    """
    Parse CSV text into dict rows, dropping malformed rows.

    Args:
        csv_content: Full CSV text including the header.
        required_columns: Columns the header must contain.
        label: Dataset name used in log messages.

    Returns:
        Parsed rows, or an empty list if the header or the file is unusable.
    """
    reader = csv.DictReader(io.StringIO(csv_content))
    if reader.fieldnames is None:
        logger.error(f"No header found in {label} data")
        return []

    missing = [c for c in required_columns if c not in reader.fieldnames]
    if missing:
        logger.error(f"{label} data is missing columns: {', '.join(missing)}")
        return []

    rows: List[Dict[str, str]] = []
    dropped = 0
    try:
        for row in reader:
            # Short rows fill with None, long rows add a None key
            if None in row or any(row[c] is None for c in required_columns):
                dropped += 1
                logger.debug(f"Dropping malformed {label} row at line {reader.line_num}")
                continue
            rows.append(row)
    except csv.Error as e:
        logger.error(f"CSV parse error in {label} data at line {reader.line_num}: {e}")
        return []

    if dropped:
        logger.warning(f"Dropped {dropped} malformed {label} rows")
    return rows


def read_csv_rows(path: str, required_columns: Sequence[str], label: str) -> List[Dict[str, str]]:
    """Read a CSV file into dict rows; an unreadable file yields an empty list."""
    try:
        with open(path, "r", encoding="utf-8-sig", newline="") as f:
            csv_content = f.read()
    except (OSError, UnicodeDecodeError) as e:
        logger.error(f"Error reading {label} data from {path}: {e}")
        return []
    rows = parse_csv_rows(csv_content, required_columns, label)
    logger.info(f"Loaded {len(rows)} {label} rows from {path}")
    return rows


def load_tap_rows(path: str) -> List[Dict[str, str]]:
    """Load station entry/exit rows (MonthYear, Station, Station_Type, Entry_Exit, Trip)."""
    return read_csv_rows(path, TAP_COLUMNS, "tap")


def load_stop_rows(path: str) -> List[TopologyRow]:
    """Load GTFS stops.txt as TopologyRow objects."""
    rows = read_csv_rows(path, STOP_COLUMNS, "stop")
    return [TopologyRow.from_dict(row) for row in rows]


def iter_stop_time_chunks(
    path: str,
    chunksize: int = DEFAULT_CHUNKSIZE,
    usecols: Optional[Sequence[str]] = None,
) -> Iterator[pd.DataFrame]:
    """
    Stream stop_times.txt as DataFrame chunks of string columns.

    Malformed lines are skipped with a pandas ParserWarning. A missing or
    unreadable file is logged and yields nothing.

    Args:
        path: Path to stop_times.txt (or a subset written by this package).
        chunksize: Rows per chunk.
        usecols: Optional subset of columns to read.
    """
    try:
        with pd.read_csv(
            path,
            dtype=str,
            keep_default_na=False,
            chunksize=chunksize,
            usecols=usecols,
            on_bad_lines="warn",
        ) as reader:
            for chunk in reader:
                yield chunk
    except (OSError, ValueError) as e:
        # ParserError and EmptyDataError are ValueError subclasses
        logger.error(f"Error reading stop time data from {path}: {e}")
