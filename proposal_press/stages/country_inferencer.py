"""Classify a free-text destination into one of the supported countries."""
from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple

from proposal_press.schemas import Coordinates

DEFAULT_COUNTRY = "rwanda"

# Checked in insertion order; the first country with a matching keyword wins.
COUNTRY_KEYWORDS: Mapping[str, Tuple[str, ...]] = MappingProxyType({
    "tanzania": (
        "tanzania",
        "serengeti",
        "ngorongoro",
        "tarangire",
        "manyara",
        "kilimanjaro",
        "zanzibar",
        "arusha",
        "ruaha",
        "selous",
        "nyerere",
        "mikumi",
        "dodoma",
    ),
    "botswana": (
        "botswana",
        "chobe",
        "okavango",
        "moremi",
        "kalahari",
        "makgadikgadi",
        "nxai",
        "savuti",
        "linyanti",
        "maun",
        "kasane",
        "gaborone",
    ),
})


def _polygon(name: str, ring: Tuple[Coordinates, ...]) -> Dict[str, Any]:
    return {
        "type": "FeatureCollection",
        "features": [
            {
                "type": "Feature",
                "properties": {"name": name},
                "geometry": {"type": "Polygon", "coordinates": [[list(point) for point in ring]]},
            }
        ],
    }


@dataclass(frozen=True)
class CountryProfile:
    """Map framing shared by every day of a document."""

    display_name: str
    capital: str
    capital_coordinates: Coordinates
    scale: float
    rotate: Tuple[float, float, float]
    boundary: Dict[str, Any] = field(default_factory=dict, hash=False, compare=False)


COUNTRY_PROFILES: Mapping[str, CountryProfile] = MappingProxyType({
    "rwanda": CountryProfile(
        display_name="Rwanda",
        capital="Kigali",
        capital_coordinates=(30.0619, -1.9441),
        scale=12000,
        rotate=(-29.9, 1.95, 0.0),
        boundary=_polygon("Rwanda", (
            (29.02, -1.06), (29.83, -1.32), (30.47, -1.06), (30.89, -1.68),
            (30.82, -2.41), (30.47, -2.42), (29.93, -2.35), (29.64, -2.8),
            (29.02, -2.74), (28.86, -2.25), (29.15, -1.62), (29.02, -1.06),
        )),
    ),
    "tanzania": CountryProfile(
        display_name="Tanzania",
        capital="Dodoma",
        capital_coordinates=(35.7516, -6.163),
        scale=2200,
        rotate=(-34.9, 6.4, 0.0),
        boundary=_polygon("Tanzania", (
            (29.34, -4.5), (30.74, -1.0), (33.9, -1.0), (37.7, -3.1),
            (39.2, -4.68), (39.45, -6.85), (39.3, -8.0), (40.44, -10.48),
            (37.8, -11.56), (34.56, -11.52), (33.2, -9.6), (31.16, -8.6),
            (30.74, -8.34), (29.34, -4.5),
        )),
    ),
    "botswana": CountryProfile(
        display_name="Botswana",
        capital="Gaborone",
        capital_coordinates=(25.9201, -24.6282),
        scale=2600,
        rotate=(-24.7, 22.3, 0.0),
        boundary=_polygon("Botswana", (
            (20.0, -22.0), (20.0, -18.3), (23.2, -17.9), (25.26, -17.74),
            (26.4, -19.3), (27.3, -20.5), (29.37, -22.2), (28.0, -22.8),
            (26.5, -24.6), (25.0, -25.7), (23.0, -25.3), (21.6, -26.7),
            (20.0, -24.8), (20.0, -22.0),
        )),
    ),
})


class CountryInferencer:
    def __init__(
        self,
        keywords: Mapping[str, Tuple[str, ...]] = COUNTRY_KEYWORDS,
        default: str = DEFAULT_COUNTRY,
        profiles: Mapping[str, CountryProfile] = COUNTRY_PROFILES,
    ) -> None:
        self.keywords = keywords
        self.default = default
        self.profiles = profiles

    def infer(self, text: Optional[str]) -> str:
        """Return the first country whose keyword appears in ``text``."""
        if not text:
            return self.default
        lowered = text.lower()
        for country, words in self.keywords.items():
            if any(word in lowered for word in words):
                return country
        return self.default

    def profile(self, country: Optional[str]) -> CountryProfile:
        return self.profiles.get(country or "", self.profiles[self.default])
