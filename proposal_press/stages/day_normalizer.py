"""Per-day field derivation for the presentation document."""
from __future__ import annotations

import re
from datetime import date, datetime, timedelta
from typing import Callable, Dict, Iterable, Optional

from proposal_press.schemas import (
    ActivityInput,
    DayActivity,
    DayInput,
    PresentationDay,
    TransferInput,
    Transportation,
)
from proposal_press.tools.sanitizer import sanitize_location

MOMENT_TO_TIME: Dict[str, str] = {
    "Morning": "08:00",
    "Afternoon": "14:00",
    "Evening": "18:00",
    "Half Day": "09:00",
    "Full Day": "08:00",
    "Night": "20:00",
}
DEFAULT_ACTIVITY_TIME = "09:00"

TRANSPORT_MODE_LABELS: Dict[str, str] = {
    "road_4x4": "4WD Safari Vehicle",
    "road_shuttle": "Shuttle/Minibus",
    "road_bus": "Coach Bus",
    "flight_domestic": "Domestic Flight",
    "flight_bush": "Bush/Charter Flight",
}

LAST_DAY_ACCOMMODATION = "Last day, no accommodation"
UNCONFIRMED_ACCOMMODATION = "To be confirmed"
NO_MEALS = "None"

_PARK_SUFFIX_RE = re.compile(r"\s+national\s+park\s*$", re.IGNORECASE)

Attempt = Callable[[], Optional[str]]


def first_defined(attempts: Iterable[Attempt]) -> Optional[str]:
    """Run attempts in order and return the first non-empty result."""
    for attempt in attempts:
        value = attempt()
        if value:
            return value
    return None


def capitalize(value: str) -> str:
    return value[:1].upper() + value[1:] if value else value


def strip_park_suffix(name: str) -> str:
    return _PARK_SUFFIX_RE.sub("", name).strip()


def park_title(name: str) -> Optional[str]:
    short = strip_park_suffix(name)
    return f"{capitalize(short)} National Park" if short else None


def format_long_date(value: date) -> str:
    return f"{value:%B} {value.day}, {value.year}"


def format_duration(minutes: Optional[int]) -> Optional[str]:
    if not minutes:
        return None
    hours, mins = divmod(minutes, 60)
    if hours == 0:
        return f"{mins} min"
    if mins == 0:
        return f"{hours}h"
    return f"{hours}h {mins}min"


def to_transportation(transfer: TransferInput) -> Transportation:
    return Transportation(
        id=transfer.id,
        origin_name=transfer.origin_name,
        destination_name=transfer.destination_name,
        mode=transfer.mode,
        mode_label=TRANSPORT_MODE_LABELS.get(transfer.mode, transfer.mode),
        duration_formatted=format_duration(transfer.duration_minutes),
        distance_km=transfer.distance_km,
        notes=transfer.notes,
    )


def parse_start_date(value: Optional[str]) -> Optional[date]:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value).date()
    except ValueError:
        try:
            return datetime.strptime(value[:10], "%Y-%m-%d").date()
        except ValueError:
            return None


def day_date(start: Optional[date], index: int) -> str:
    # Without a start date the current date stands in as a placeholder.
    current = start + timedelta(days=index) if start else date.today()
    return format_long_date(current)


def activity_time(activity: ActivityInput) -> str:
    return activity.time or MOMENT_TO_TIME.get(activity.moment or "", DEFAULT_ACTIVITY_TIME)


def meals_label(day: DayInput) -> str:
    meals = day.meals
    if meals is None:
        return NO_MEALS
    names = [
        label
        for label, served in (("Breakfast", meals.breakfast), ("Lunch", meals.lunch), ("Dinner", meals.dinner))
        if served
    ]
    return ", ".join(names) or NO_MEALS


class DayNormalizer:
    def __init__(self, sanitize: Callable[[Optional[str]], Optional[str]] = sanitize_location) -> None:
        self.sanitize = sanitize

    def normalize(self, day: DayInput, index: int, total: int, start: Optional[date]) -> PresentationDay:
        day_number = index + 1
        activities = [self._activity(act) for act in day.activities]
        park = day.national_park

        title = first_defined([
            lambda: (day.title or "").strip(),
            lambda: park_title(park.name) if park else None,
            lambda: activities[0].activity if activities else None,
        ]) or f"Day {day_number}"

        accommodation = first_defined([
            lambda: day.accommodations[0].name if day.accommodations else None,
            lambda: LAST_DAY_ACCOMMODATION if index == total - 1 else None,
        ]) or UNCONFIRMED_ACCOMMODATION

        return PresentationDay(
            day=day_number,
            date=day_date(start, index),
            title=title,
            description=day.description or None,
            destination=self.destination(day),
            national_park_id=park.id if park else None,
            activities=activities,
            accommodation=accommodation,
            meals=meals_label(day),
            preview_image=day.preview_image or None,
            transportation=to_transportation(day.transportation[0]) if day.transportation else None,
        )

    def fallback(self, index: int, total: int, start: Optional[date]) -> PresentationDay:
        """Placeholder day used when a record cannot be normalized."""
        return PresentationDay(
            day=index + 1,
            date=day_date(start, index),
            title=f"Day {index + 1}",
            accommodation=LAST_DAY_ACCOMMODATION if index == total - 1 else UNCONFIRMED_ACCOMMODATION,
            meals=NO_MEALS,
        )

    @staticmethod
    def destination(day: DayInput) -> Optional[str]:
        if day.national_park and day.national_park.name.strip():
            return capitalize(day.national_park.name.strip())
        return day.title or None

    def _activity(self, activity: ActivityInput) -> DayActivity:
        return DayActivity(
            time=activity_time(activity),
            activity=capitalize(activity.name),
            description=activity.description or "",
            location=self.sanitize(activity.location),
            moment=activity.moment,
            image=activity.image_url,
        )
