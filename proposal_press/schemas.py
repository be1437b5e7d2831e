import logging
import os
from datetime import date, datetime
from typing import Any, Dict, List, Literal, Optional, Tuple, get_args

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

logger = logging.getLogger(__name__)
if not logger.handlers:
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("[%(levelname)s] %(name)s: %(message)s"))
    logger.addHandler(handler)
_level = os.getenv("PROPOSAL_PRESS_LOG_LEVEL", "INFO").upper()
logger.setLevel(getattr(logging, _level, logging.INFO))
logger.propagate = False

ThemeType = Literal["minimalistic", "safari-portal", "kudu", "discovery"]
THEMES: Tuple[str, ...] = get_args(ThemeType)
DEFAULT_THEME: ThemeType = "minimalistic"
Coordinates = Tuple[float, float]  # [longitude, latitude]


def _blank_if_missing(value: Any) -> Any:
    return "" if value is None else value


class _CamelModel(BaseModel):
    # The builder app stores camelCase JSON; Python code works in snake_case.
    model_config = ConfigDict(extra="ignore", populate_by_name=True, alias_generator=to_camel)


# ------- Input models (hydrated by the persistence layer) -------
class ParkOverviewBlock(_CamelModel):
    title: Optional[str] = None
    name: Optional[str] = None
    description: str = ""


class NationalPark(_CamelModel):
    id: str
    name: str = ""
    page_id: Optional[str] = None
    park_overview: Optional[List[ParkOverviewBlock]] = None

    @field_validator("name", mode="before")
    @classmethod
    def blank_missing_name(cls, value: Any) -> Any:
        return _blank_if_missing(value)


class AccommodationRef(_CamelModel):
    id: str
    name: str = ""
    overview: Optional[str] = None
    images: List[str] = Field(default_factory=list)

    @field_validator("name", mode="before")
    @classmethod
    def blank_missing_name(cls, value: Any) -> Any:
        return _blank_if_missing(value)


class ActivityInput(_CamelModel):
    name: str = ""
    description: Optional[str] = None
    location: Optional[str] = None
    moment: Optional[str] = None
    time: Optional[str] = None
    image_url: Optional[str] = None

    @field_validator("name", mode="before")
    @classmethod
    def blank_missing_name(cls, value: Any) -> Any:
        return _blank_if_missing(value)


class Meals(_CamelModel):
    breakfast: bool = False
    lunch: bool = False
    dinner: bool = False


class TransferInput(_CamelModel):
    id: str = ""
    origin_name: str = ""
    destination_name: str = ""
    # Unknown modes pass through; renderers show the raw value as the label.
    mode: str = ""
    duration_minutes: Optional[int] = None
    distance_km: Optional[float] = None
    notes: Optional[str] = None

    @field_validator("id", "origin_name", "destination_name", "mode", mode="before")
    @classmethod
    def blank_missing_text(cls, value: Any) -> Any:
        return _blank_if_missing(value)


class DayInput(_CamelModel):
    day_number: Optional[int] = None
    title: Optional[str] = None
    description: Optional[str] = None
    preview_image: Optional[str] = None
    national_park: Optional[NationalPark] = None
    accommodations: List[AccommodationRef] = Field(default_factory=list)
    activities: List[ActivityInput] = Field(default_factory=list)
    meals: Optional[Meals] = None
    transportation: List[TransferInput] = Field(default_factory=list)


class TravelerGroup(_CamelModel):
    count: int = 0
    type: str = "adult"


class PricingRow(_CamelModel):
    count: int = 0
    unit_price: float = 0.0
    type: str = ""


class ExtraOption(_CamelModel):
    name: str = ""
    price: float = 0.0
    selected: bool = False


class ClientRef(_CamelModel):
    name: str = ""


class OrganizationInfo(_CamelModel):
    name: str
    logo_url: Optional[str] = None
    about_description: Optional[str] = None
    payment_terms: Optional[str] = None


class ProposalInput(_CamelModel):
    id: str
    tour_title: Optional[str] = None
    name: Optional[str] = None
    theme: Optional[str] = None
    start_date: Optional[str] = None
    client: Optional[ClientRef] = None
    traveler_groups: List[TravelerGroup] = Field(default_factory=list)
    pricing_rows: List[PricingRow] = Field(default_factory=list)
    extras: List[ExtraOption] = Field(default_factory=list)
    inclusions: List[str] = Field(default_factory=list)
    exclusions: List[str] = Field(default_factory=list)
    countries: List[str] = Field(default_factory=list)
    tour_type: Optional[str] = None
    start_city: Optional[str] = None
    end_city: Optional[str] = None
    hero_image: Optional[str] = None
    organization: Optional[OrganizationInfo] = None
    days: List[DayInput] = Field(default_factory=list)

    @field_validator("start_date", mode="before")
    @classmethod
    def coerce_start_date(cls, value: Any) -> Any:
        # Drivers hand back date objects; the builder UI sends ISO strings.
        if isinstance(value, (date, datetime)):
            return value.isoformat()
        # Anything else that is not a string is treated as a missing date.
        return value if isinstance(value, str) else None

    @field_validator("theme", mode="before")
    @classmethod
    def drop_non_text_theme(cls, value: Any) -> Any:
        return value if isinstance(value, str) else None

    @field_validator("days", mode="before")
    @classmethod
    def tolerate_malformed_days(cls, value: Any) -> Any:
        """Swap a day record that fails validation for an empty day.

        The empty day keeps its position so numbering and dates stay aligned,
        and normalizes to the same placeholder a failing day gets later on.
        """
        if not isinstance(value, list):
            return value
        days: List[Any] = []
        for position, raw in enumerate(value, start=1):
            if isinstance(raw, DayInput):
                days.append(raw)
                continue
            try:
                days.append(DayInput.model_validate(raw))
            except ValidationError as exc:
                logger.warning(
                    "Day %d failed validation; using an empty day: %s", position, exc.errors(include_url=False)
                )
                days.append(DayInput())
        return days


# ------- Output models (consumed by theme renderers) -------
class DayActivity(_CamelModel):
    time: str
    activity: str
    description: str = ""
    location: Optional[str] = None
    moment: Optional[str] = None
    image: Optional[str] = None


class Transportation(_CamelModel):
    id: str
    origin_name: str
    destination_name: str
    mode: str
    mode_label: str
    duration_formatted: Optional[str] = None
    distance_km: Optional[float] = None
    notes: Optional[str] = None


class PresentationDay(_CamelModel):
    day: int
    date: str
    title: str
    description: Optional[str] = None
    destination: Optional[str] = None
    national_park_id: Optional[str] = None
    activities: List[DayActivity] = Field(default_factory=list)
    accommodation: str
    meals: str
    preview_image: Optional[str] = None
    transportation: Optional[Transportation] = None


class Location(_CamelModel):
    name: str
    coordinates: Coordinates


class Accommodation(_CamelModel):
    id: str
    name: str
    image: str
    images: Optional[List[str]] = None
    description: str
    location: str


class NationalParkInfo(_CamelModel):
    id: str
    name: str
    park_overview: Optional[List[ParkOverviewBlock]] = None
    featured_image_url: Optional[str] = None


class PricingSummary(_CamelModel):
    total: str
    per_person: str
    currency: str = "USD"


class ImportantNotes(_CamelModel):
    description: str
    points: List[str] = Field(default_factory=list)


class MapData(_CamelModel):
    geojson: Dict[str, Any]
    locations: List[Location] = Field(default_factory=list)
    scale: float
    rotate: Tuple[float, float, float]
    start_location: Optional[Location] = None
    end_location: Optional[Location] = None


class TravelDates(_CamelModel):
    start: str
    end: str


class TripOverview(_CamelModel):
    tour_type: Optional[str] = None
    country: Optional[str] = None
    traveler_count: Optional[int] = None
    travel_dates: Optional[TravelDates] = None
    start_city: Optional[str] = None
    end_city: Optional[str] = None
    destinations: List[str] = Field(default_factory=list)


class PresentationDocument(_CamelModel):
    id: str
    title: str
    subtitle: str
    client_name: str = ""
    duration: str
    location: str
    hero_image: str
    theme: ThemeType = DEFAULT_THEME
    organization: Optional[OrganizationInfo] = None
    trip_overview: TripOverview = Field(default_factory=TripOverview)
    itinerary: List[PresentationDay] = Field(default_factory=list)
    accommodations: List[Accommodation] = Field(default_factory=list)
    national_parks: Optional[Dict[str, NationalParkInfo]] = None
    transportation: Optional[List[Transportation]] = None
    pricing: PricingSummary
    included_items: List[str] = Field(default_factory=list)
    excluded_items: List[str] = Field(default_factory=list)
    important_notes: ImportantNotes
    map_data: MapData
