"""Static name -> coordinate lookups for cities and national parks.

Every coordinate pair is ``(longitude, latitude)`` so it can be dropped straight
into GeoJSON or a map projection. Lookup is two-stage: an exact match on the
lower-cased, trimmed name, then a substring match in either direction. Operators
type names inconsistently ("Ngorongoro Crater" vs "Ngorongoro") and substring
matching absorbs that without fuzzy scoring.
"""
from __future__ import annotations

from types import MappingProxyType
from typing import Iterable, Mapping, Optional, Tuple

from proposal_press.schemas import Coordinates, Location

KIGALI: Coordinates = (30.0619, -1.9441)

# key -> (display label, coordinates). Aliases point at the same place.
CITY_TABLE: Mapping[str, Tuple[str, Coordinates]] = MappingProxyType({
    # Rwanda
    "kigali": ("Kigali", KIGALI),
    "kigali-airport": ("Kigali International Airport", (30.1395, -1.9686)),
    "kgl": ("Kigali International Airport", (30.1395, -1.9686)),
    # Tanzania
    "arusha": ("Arusha", (36.683, -3.367)),
    "kilimanjaro-airport": ("Kilimanjaro International Airport", (37.0745, -3.4294)),
    "jro": ("Kilimanjaro International Airport", (37.0745, -3.4294)),
    "dar-es-salaam": ("Dar es Salaam", (39.2083, -6.7924)),
    "dar es salaam": ("Dar es Salaam", (39.2083, -6.7924)),
    "jnia": ("Julius Nyerere International Airport", (39.2026, -6.8781)),
    "mwanza": ("Mwanza", (32.9, -2.5167)),
    "dodoma": ("Dodoma", (35.7516, -6.163)),
    # Botswana
    "maun": ("Maun", (23.4167, -19.9833)),
    "maun-airport": ("Maun Airport", (23.4311, -19.9726)),
    "kasane": ("Kasane", (25.1625, -17.8283)),
    "gaborone": ("Gaborone", (25.9201, -24.6282)),
    "gaberones": ("Gaborone", (25.9201, -24.6282)),
    # Kenya
    "nairobi": ("Nairobi", (36.8219, -1.2921)),
    "jkia": ("Jomo Kenyatta International Airport", (36.9275, -1.3192)),
    "wilson-airport": ("Wilson Airport", (36.8186, -1.3214)),
    "mombasa": ("Mombasa", (39.6682, -4.0435)),
    # Uganda
    "entebbe": ("Entebbe", (32.4633, 0.0467)),
    "entebbe-airport": ("Entebbe International Airport", (32.4433, 0.0467)),
    "kampala": ("Kampala", (32.5825, 0.3476)),
})

PARK_TABLE: Mapping[str, Coordinates] = MappingProxyType({
    # Rwanda
    "volcanoes": (29.5333, -1.4667),
    "akagera": (30.7333, -1.8833),
    "nyungwe": (29.2167, -2.4833),
    "nyungwe forest": (29.2167, -2.4833),
    "gishwati-mukura": (29.35, -1.8167),
    "lake kivu": (29.25, -2.0),
    # Tanzania
    "serengeti": (34.8333, -2.3333),
    "ngorongoro": (35.5877, -3.2416),
    "tarangire": (36.0, -3.8333),
    "lake manyara": (35.8167, -3.5833),
    "kilimanjaro": (37.3556, -3.0674),
    "ruaha": (34.9, -7.5),
    "nyerere": (38.0, -8.5),
    "selous": (38.0, -8.5),
    "mikumi": (37.1, -7.4),
    "zanzibar": (39.1925, -6.1659),
    # Botswana
    "chobe": (24.5, -18.6),
    "okavango delta": (22.9, -19.3),
    "okavango": (22.9, -19.3),
    "moremi": (23.4, -19.2),
    "central kalahari": (23.5, -22.0),
    "makgadikgadi": (25.0, -20.7),
    "nxai pan": (24.8, -19.9),
})

# Capital-city proxies used when a park is missing from the table.
COUNTRY_DEFAULTS: Mapping[str, Coordinates] = MappingProxyType({
    "rwanda": KIGALI,
    "tanzania": (35.7516, -6.163),
    "botswana": (25.9201, -24.6282),
})


def _longest_first(keys: Iterable[str]) -> list[str]:
    return sorted(keys, key=len, reverse=True)


# Shorter inputs only match keys that they contain, never keys that contain them.
MIN_PARTIAL_INPUT = 3


def _partial_match(needle: str, candidate: str) -> bool:
    return candidate in needle or (len(needle) >= MIN_PARTIAL_INPUT and needle in candidate)


def _substring_match(needle: str, keys: Iterable[str]) -> Optional[str]:
    for key in _longest_first(keys):
        if _partial_match(needle, key):
            return key
    return None


class Gazetteer:
    """Resolves operator-entered place names against injected static tables."""

    def __init__(
        self,
        cities: Mapping[str, Tuple[str, Coordinates]] = CITY_TABLE,
        parks: Mapping[str, Coordinates] = PARK_TABLE,
        country_defaults: Mapping[str, Coordinates] = COUNTRY_DEFAULTS,
        fallback: Coordinates = KIGALI,
    ) -> None:
        self.cities = cities
        self.parks = parks
        self.country_defaults = country_defaults
        self.fallback = fallback

    def resolve_city(self, name: Optional[str]) -> Optional[Location]:
        if not name:
            return None
        needle = name.lower().strip()
        if not needle:
            return None

        entry = self.cities.get(needle)
        if entry is None:
            entry = next(
                (value for value in self.cities.values() if value[0].lower() == needle),
                None,
            )
        if entry is None:
            key = _substring_match(needle, self.cities.keys())
            if key is None:
                key = next(
                    (
                        k
                        for k in _longest_first(self.cities.keys())
                        if _partial_match(needle, self.cities[k][0].lower())
                    ),
                    None,
                )
            entry = self.cities[key] if key is not None else None
        if entry is None:
            return None

        label, coordinates = entry
        return Location(name=label, coordinates=coordinates)

    def resolve_park_coordinates(self, name: Optional[str], fallback_country: Optional[str]) -> Coordinates:
        needle = (name or "").lower().strip()
        if needle:
            if needle in self.parks:
                return self.parks[needle]
            key = _substring_match(needle, self.parks.keys())
            if key is not None:
                return self.parks[key]
        return self.country_defaults.get((fallback_country or "").lower(), self.fallback)
