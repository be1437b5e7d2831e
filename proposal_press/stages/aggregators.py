"""Cross-day aggregation: accommodations, map markers, pricing and park aliases."""
from __future__ import annotations

import logging
import os
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Iterable, List, Mapping, Optional, Set

from proposal_press.schemas import (
    Accommodation,
    DayInput,
    ExtraOption,
    Location,
    NationalParkInfo,
    PricingRow,
    PricingSummary,
    TravelerGroup,
)
from proposal_press.stages.country_inferencer import CountryProfile
from proposal_press.stages.day_normalizer import capitalize, strip_park_suffix
from proposal_press.tools.gazetteer import Gazetteer

logger = logging.getLogger(__name__)
if not logger.handlers:
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("[%(levelname)s] %(name)s: %(message)s"))
    logger.addHandler(handler)
_level = os.getenv("PROPOSAL_PRESS_LOG_LEVEL", "INFO").upper()
logger.setLevel(getattr(logging, _level, logging.INFO))
logger.propagate = False

STOCK_ACCOMMODATION_IMAGE = (
    "https://images.unsplash.com/photo-1542314831-068cd1dbfeeb?q=80&w=2670&auto=format&fit=crop"
)
CURRENCY = "USD"


def collect_accommodations(days: Iterable[DayInput], location_label: str) -> List[Accommodation]:
    """One entry per accommodation id, first occurrence wins."""
    seen: Dict[str, Accommodation] = {}
    for day in days:
        park_name = day.national_park.name if day.national_park else None
        for ref in day.accommodations:
            if ref.id in seen:
                continue
            where = park_name or location_label
            seen[ref.id] = Accommodation(
                id=ref.id,
                name=ref.name,
                image=ref.images[0] if ref.images else STOCK_ACCOMMODATION_IMAGE,
                images=list(ref.images) or None,
                description=ref.overview or f"Luxury accommodation in {where}",
                location=where,
            )
    return list(seen.values())


def collect_map_markers(
    days: Iterable[DayInput],
    country: str,
    profile: CountryProfile,
    gazetteer: Gazetteer,
) -> List[Location]:
    markers: List[Location] = []
    seen_parks: Set[str] = set()
    for day in days:
        park = day.national_park
        if park is None or park.id in seen_parks:
            continue
        seen_parks.add(park.id)
        markers.append(
            Location(name=park.name or park.id, coordinates=gazetteer.resolve_park_coordinates(park.name, country))
        )
    if not markers:
        markers.append(Location(name=profile.capital, coordinates=profile.capital_coordinates))
    return markers


def _round_half_up(value: float) -> int:
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def format_usd(value: float) -> str:
    return f"${_round_half_up(value):,}"


def calculate_pricing(
    pricing_rows: Iterable[PricingRow],
    extras: Iterable[ExtraOption],
    traveler_groups: Iterable[TravelerGroup],
) -> PricingSummary:
    total = sum(row.count * row.unit_price for row in pricing_rows)
    total += sum(extra.price for extra in extras if extra.selected)
    travelers = sum(group.count for group in traveler_groups)
    per_person = total / travelers if travelers > 0 else 0
    return PricingSummary(total=format_usd(total), per_person=format_usd(per_person), currency=CURRENCY)


def park_aliases(name: str) -> List[str]:
    if not name.strip():
        return []
    lowered = name.lower()
    short = strip_park_suffix(lowered)
    return [lowered, short, f"{short}-np"]


def build_national_park_index(
    days: Iterable[DayInput],
    featured_images: Optional[Mapping[str, Optional[str]]] = None,
) -> Dict[str, NationalParkInfo]:
    """Register each park under its id and three name-derived aliases.

    A later day's park takes over an alias already claimed by a different park;
    every such takeover is logged. Canonical id keys are never taken over.
    """
    featured_images = featured_images or {}
    index: Dict[str, NationalParkInfo] = {}
    canonical_ids: Set[str] = set()

    for day in days:
        park = day.national_park
        if park is None:
            continue
        info = NationalParkInfo(
            id=park.id,
            name=park.name,
            park_overview=park.park_overview,
            featured_image_url=featured_images.get(park.page_id) if park.page_id else None,
        )
        index[park.id] = info
        canonical_ids.add(park.id)

        for alias in park_aliases(park.name):
            if not alias or alias == park.id:
                continue
            if alias in canonical_ids:
                logger.warning("Alias '%s' for park %s matches another park id; skipping", alias, park.id)
                continue
            existing = index.get(alias)
            if existing is not None and existing.id != park.id:
                logger.warning(
                    "Park alias collision on '%s': %s replaces %s", alias, park.id, existing.id
                )
            index[alias] = info
    return index


def collect_destinations(days: Iterable[DayInput]) -> List[str]:
    names: List[str] = []
    for day in days:
        if day.national_park is None or not day.national_park.name:
            continue
        name = capitalize(day.national_park.name)
        if name not in names:
            names.append(name)
    return names
