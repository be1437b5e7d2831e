# proposal_press/assembler.py
from __future__ import annotations

import copy
import logging
import os
from datetime import date
from typing import Any, Dict, List, Mapping, Optional

from proposal_press.schemas import (
    DEFAULT_THEME,
    THEMES,
    DayInput,
    ImportantNotes,
    MapData,
    PresentationDay,
    PresentationDocument,
    ProposalInput,
    TravelDates,
    TripOverview,
)
from proposal_press.stages.aggregators import (
    build_national_park_index,
    calculate_pricing,
    collect_accommodations,
    collect_destinations,
    collect_map_markers,
)
from proposal_press.stages.country_inferencer import CountryInferencer
from proposal_press.stages.day_normalizer import DayNormalizer, parse_start_date
from proposal_press.stages.hero_image import collect_page_ids, resolve_hero_image
from proposal_press.tools.gazetteer import Gazetteer
from proposal_press.tools.page_lookup import HttpPageLookup, PageLookup

logger = logging.getLogger(__name__)
if not logger.handlers:
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("[%(levelname)s] %(name)s: %(message)s"))
    logger.addHandler(handler)
_level = os.getenv("PROPOSAL_PRESS_LOG_LEVEL", "INFO").upper()
logger.setLevel(getattr(logging, _level, logging.INFO))
logger.propagate = False

DEFAULT_TITLE = "Safari Adventure"
IMPORTANT_NOTES = ImportantNotes(
    description=(
        "This itinerary has been carefully curated to offer you the best experience. "
        "Please review all details and contact us with any questions."
    ),
    points=[
        "Prices are subject to availability",
        "Booking confirmation required",
        "Travel insurance recommended",
    ],
)


class ProposalAssembler:
    """Turns a hydrated proposal graph into a render-ready presentation document.

    The only awaited step is the page-image lookup, performed at most once per
    call and only when some day links a national park to a content page. A
    failing lookup or a day that cannot be normalized degrades to fallbacks
    instead of aborting the whole document.
    """

    def __init__(
        self,
        *,
        gazetteer: Optional[Gazetteer] = None,
        inferencer: Optional[CountryInferencer] = None,
        page_lookup: Optional[PageLookup] = None,
        day_normalizer: Optional[DayNormalizer] = None,
    ) -> None:
        self.gazetteer = gazetteer or Gazetteer()
        self.inferencer = inferencer or CountryInferencer()
        self.page_lookup = page_lookup or HttpPageLookup()
        self.day_normalizer = day_normalizer or DayNormalizer()

    async def assemble(self, proposal: ProposalInput) -> PresentationDocument:
        days = proposal.days
        start = parse_start_date(proposal.start_date)
        title = proposal.tour_title or proposal.name or DEFAULT_TITLE
        logger.info("Assembling proposal %s: %d day(s), theme=%s", proposal.id, len(days), proposal.theme)

        # Country framing is decided once, from the first day only.
        first_destination = DayNormalizer.destination(days[0]) if days else None
        country = self.inferencer.infer(first_destination)
        profile = self.inferencer.profile(country)
        location = _location_label(proposal.countries) or profile.display_name
        logger.debug("Inferred country %s from %r", country, first_destination)

        itinerary = self._normalize_days(days, start)

        accommodations = collect_accommodations(days, location)
        markers = collect_map_markers(days, country, profile, self.gazetteer)
        pricing = calculate_pricing(proposal.pricing_rows, proposal.extras, proposal.traveler_groups)

        page_images = await self._fetch_page_images(days)
        park_index = build_national_park_index(days, page_images)
        hero_image = resolve_hero_image(proposal, page_images)

        start_location = self.gazetteer.resolve_city(proposal.start_city)
        end_location = self.gazetteer.resolve_city(proposal.end_city)
        travelers = sum(group.count for group in proposal.traveler_groups)

        trip_overview = TripOverview(
            tour_type=proposal.tour_type,
            country=profile.display_name,
            traveler_count=travelers if travelers > 0 else None,
            travel_dates=TravelDates(start=itinerary[0].date, end=itinerary[-1].date) if itinerary else None,
            start_city=start_location.name if start_location else proposal.start_city or None,
            end_city=end_location.name if end_location else proposal.end_city or None,
            destinations=collect_destinations(days),
        )
        transportation = [day.transportation for day in itinerary if day.transportation]

        duration = f"{len(days)} Days"
        flavour = "Gorilla Trekking Safari" if "Gorilla" in title else "Safari Adventure"

        document = PresentationDocument(
            id=proposal.id,
            title=title,
            subtitle=f"{duration} {flavour}",
            client_name=proposal.client.name if proposal.client else "",
            duration=duration,
            location=location,
            hero_image=hero_image,
            theme=_theme(proposal.theme),
            organization=proposal.organization,
            trip_overview=trip_overview,
            itinerary=itinerary,
            accommodations=accommodations,
            national_parks=park_index or None,
            transportation=transportation or None,
            pricing=pricing,
            included_items=list(proposal.inclusions),
            excluded_items=list(proposal.exclusions),
            important_notes=IMPORTANT_NOTES.model_copy(deep=True),
            map_data=MapData(
                geojson=copy.deepcopy(profile.boundary),
                locations=markers,
                scale=profile.scale,
                rotate=profile.rotate,
                start_location=start_location,
                end_location=end_location,
            ),
        )
        logger.info(
            "Assembled proposal %s: %d accommodation(s), %d marker(s), total %s",
            proposal.id,
            len(accommodations),
            len(markers),
            pricing.total,
        )
        return document

    def _normalize_days(self, days: List[DayInput], start: Optional[date]) -> List[PresentationDay]:
        itinerary: List[PresentationDay] = []
        total = len(days)
        for index, day in enumerate(days):
            try:
                itinerary.append(self.day_normalizer.normalize(day, index, total, start))
            except Exception:
                logger.warning("Day %d could not be normalized; using placeholder", index + 1, exc_info=True)
                itinerary.append(self.day_normalizer.fallback(index, total, start))
        return itinerary

    async def _fetch_page_images(self, days: List[DayInput]) -> Mapping[str, Optional[str]]:
        page_ids = collect_page_ids(days)
        if not page_ids:
            return {}
        try:
            images = await self.page_lookup(page_ids)
        except Exception:
            logger.warning("Page image lookup failed for %d page(s); using fallbacks", len(page_ids), exc_info=True)
            return {}
        logger.debug("Page image lookup returned %d of %d page(s)", len(images or {}), len(page_ids))
        return images or {}


def _location_label(countries: List[str]) -> str:
    names = [c.strip() for c in countries if c and c.strip()]
    return " & ".join(name[:1].upper() + name[1:].lower() for name in names)


def _theme(requested: Optional[str]) -> str:
    if requested in THEMES:
        return requested
    if requested:
        logger.warning("Unknown theme %r; rendering with %s", requested, DEFAULT_THEME)
    return DEFAULT_THEME


async def assemble(
    proposal: ProposalInput | Dict[str, Any],
    fetch_page_images: Optional[PageLookup] = None,
) -> PresentationDocument:
    """Entry point used by the preview page, the share link and the PDF/email renderers."""
    if not isinstance(proposal, ProposalInput):
        proposal = ProposalInput.model_validate(proposal)
    return await ProposalAssembler(page_lookup=fetch_page_images).assemble(proposal)
