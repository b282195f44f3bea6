"""Example usage of StationTapPipeline."""

import logging
import sys
from pathlib import Path

# Add src to path so we can import stationtaps
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from stationtaps.models import StructuralConsistencyError
from stationtaps.pipeline import DEFAULT_SUMMARY_PATH, StationTapPipeline
from stationtaps.report import (
    child_stop_time_lines,
    low_ratio_lines,
    station_summary_lines,
    write_station_summary,
)

# Set up logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
# pandas reports skipped stop_times lines as warnings
logging.captureWarnings(True)

logger = logging.getLogger(__name__)


def print_station_report():
    """Run the pipeline on the default data files and print the results."""
    pipeline = StationTapPipeline()

    try:
        graph = pipeline.run()
    except StructuralConsistencyError as e:
        logger.error(f"Station hierarchy is inconsistent: {e}")
        sys.exit(1)

    print(f"\n{'='*70}")
    print(f"Stations with tap data for {pipeline.period}: {len(graph.stations)}")
    print(f"{'='*70}\n")

    for line in station_summary_lines(graph):
        print(line)

    print("\n" + "=" * 70)
    print("STOP TIMES BY PLATFORM AND STOP:")
    print("-" * 70)
    for line in child_stop_time_lines(graph):
        print(f"  {line}")

    print("\n" + "=" * 70)
    print("FEWER TAPS THAN TRAINS STOPPING:")
    print("-" * 70)
    lines = low_ratio_lines(graph)
    if lines:
        for line in lines:
            print(f"  {line}")
    else:
        print("  None")

    write_station_summary(graph, DEFAULT_SUMMARY_PATH)


if __name__ == "__main__":
    print_station_report()
