"""Station name matching between tap data and GTFS stops.

Tap data and stops.txt share no identifier, so stations are joined on a
normalized display name. The filter and the linker both resolve names
through StationNameMatcher, which takes the normalizer and alias table.
"""

import re
from typing import Callable, Dict, Mapping, Optional

_STATION_WORD = re.compile("station", re.IGNORECASE)

DOMESTIC_AIRPORT_STOP_NAME = "Sydney Domestic Airport Station"
INTERNATIONAL_AIRPORT_STOP_NAME = "Sydney International Airport Station"

# stops.txt names whose tap data key differs from the normalized name
AIRPORT_ALIASES: Dict[str, str] = {
    DOMESTIC_AIRPORT_STOP_NAME: "Domestic",
    INTERNATIONAL_AIRPORT_STOP_NAME: "International",
}


def normalize_station_name(name: str) -> str:
    """Remove the word "station" (any case) and surrounding whitespace.

    >>> normalize_station_name("Central Station ")
    'Central'
    """
    return _STATION_WORD.sub("", name or "").strip()


class StationNameMatcher:
    """Resolves stops.txt names to tap data station keys."""

    def __init__(
        self,
        normalizer: Callable[[str], str] = normalize_station_name,
        aliases: Optional[Mapping[str, str]] = None,
    ):
        """
        Args:
            normalizer: Function applied to both tap and stop names.
            aliases: Exact stop names mapped to a tap key, checked only when the
                normalized name has no match. Defaults to the airport stations.
        """
        self.normalizer = normalizer
        self.aliases: Dict[str, str] = dict(AIRPORT_ALIASES if aliases is None else aliases)

    def normalize(self, name: str) -> str:
        return self.normalizer(name)

    def is_alias(self, stop_name: str) -> bool:
        return stop_name in self.aliases

    def tap_key(self, stop_name: str, tap_keys: Mapping) -> Optional[str]:
        """
        Find the tap data key for a stop name.

        Args:
            stop_name: Raw stop_name from stops.txt.
            tap_keys: Mapping keyed by normalized tap station names.

        Returns:
            The matching key, the alias key for an aliased name (whether or not
            it is present in tap_keys), or None.
        """
        normalized = self.normalize(stop_name)
        if normalized in tap_keys:
            return normalized
        return self.aliases.get(stop_name)
