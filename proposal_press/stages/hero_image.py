from __future__ import annotations

from typing import Iterable, Mapping, Optional, Set

from proposal_press.schemas import DayInput, ProposalInput
from proposal_press.stages.day_normalizer import first_defined

STOCK_HERO_IMAGE = (
    "https://images.unsplash.com/photo-1516426122078-c23e76319801?q=80&w=2000&auto=format&fit=crop"
)


def collect_page_ids(days: Iterable[DayInput]) -> Set[str]:
    """Content-page ids linked from any day's national park."""
    return {day.national_park.page_id for day in days if day.national_park and day.national_park.page_id}


def first_park_page_id(days: Iterable[DayInput]) -> Optional[str]:
    first = next(iter(days), None)
    if first is None or first.national_park is None:
        return None
    return first.national_park.page_id


def resolve_hero_image(proposal: ProposalInput, page_images: Mapping[str, Optional[str]]) -> str:
    page_id = first_park_page_id(proposal.days)
    return first_defined([
        lambda: proposal.hero_image,
        lambda: page_images.get(page_id) if page_id else None,
    ]) or STOCK_HERO_IMAGE
