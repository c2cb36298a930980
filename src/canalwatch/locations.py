"""
Resolution of free-form location names to canonical location keys.

The monitoring service reports locations by display name ("Dow's Lake",
"Fifth Avenue", "NAC"). UI bindings and chart colors are keyed by a stable
canonical key instead. Resolution order:

1. A stable identifier supplied by the service, when it is a canonical key.
2. An exact, case-insensitive match against the canonical display names.
3. Ordered substring rules: "dow", then "fifth", then "nac". The first rule
   that matches wins, regardless of where the substring occurs.
4. Fallback: lowercase the name and drop everything outside ``a-z``.

Steps 3 and 4 are heuristics. Two differently named locations can collide on
the same key; only a service-supplied identifier removes that ambiguity.
"""

import re
from typing import Dict, Iterable, List, Optional, Tuple

from .config import CANONICAL_LOCATIONS, CanonicalLocation

# (substring, canonical key), checked in order
SUBSTRING_RULES: List[Tuple[str, str]] = [
    ("dow", "dowslake"),
    ("fifth", "fifthave"),
    ("nac", "nac"),
]

_NON_LOWER_ALPHA = re.compile(r"[^a-z]")


def sanitize_location_name(name: str) -> str:
    """Lowercase ``name`` and strip every character outside ``a-z``."""
    return _NON_LOWER_ALPHA.sub("", name.lower())


class LocationKeyResolver:
    """Maps location names (and optional stable ids) to canonical keys."""

    def __init__(
        self,
        locations: Iterable[CanonicalLocation] = CANONICAL_LOCATIONS,
        substring_rules: Optional[List[Tuple[str, str]]] = None,
    ):
        self.locations = list(locations)
        self.substring_rules = list(
            SUBSTRING_RULES if substring_rules is None else substring_rules
        )
        self._keys = {location.key for location in self.locations}
        self._by_display_name: Dict[str, str] = {
            location.display_name.lower(): location.key for location in self.locations
        }

    def resolve(self, name: Optional[str], location_id: Optional[str] = None) -> str:
        """
        Resolve a location to its canonical key.

        Args:
            name: Free-form location name from the service
            location_id: Stable identifier, if the service supplied one

        Returns:
            The canonical key, a sanitized fallback key for unknown names,
            or an empty string when no name is given
        """
        if location_id and location_id.lower() in self._keys:
            return location_id.lower()

        if not name:
            return ""

        lowered = name.lower()

        exact = self._by_display_name.get(lowered.strip())
        if exact:
            return exact

        for substring, key in self.substring_rules:
            if substring in lowered:
                return key

        return sanitize_location_name(lowered)

    def is_canonical(self, key: str) -> bool:
        return key in self._keys


_default_resolver = LocationKeyResolver()


def get_location_key(name: Optional[str], location_id: Optional[str] = None) -> str:
    """Resolve ``name`` with the default canonical location table."""
    return _default_resolver.resolve(name, location_id)
