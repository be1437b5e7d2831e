import asyncio
from unittest.mock import AsyncMock

from proposal_press.assembler import ProposalAssembler, assemble
from proposal_press.schemas import ProposalInput
from proposal_press.stages.day_normalizer import DayNormalizer
from proposal_press.stages.hero_image import STOCK_HERO_IMAGE


def _sample_payload() -> dict:
    return {
        "id": "prop-42",
        "tourTitle": "Rwanda Gorilla Expedition",
        "theme": "safari-portal",
        "startDate": "2025-07-10",
        "client": {"name": "Jane Doe"},
        "travelerGroups": [{"count": 2, "type": "adult"}, {"count": 1, "type": "child"}],
        "pricingRows": [{"count": 3, "unitPrice": 100, "type": "adult"}],
        "extras": [
            {"name": "Airport Transfer", "price": 50, "selected": True},
            {"name": "Visa Fee", "price": 20, "selected": False},
        ],
        "inclusions": ["Park fees"],
        "exclusions": ["International flights"],
        "startCity": "Kigali",
        "endCity": "kigali-airport",
        "tourType": "Private",
        "organization": {"name": "Makisala Safaris", "logoUrl": "https://cdn/logo.png"},
        "days": [
            {
                "dayNumber": 4,
                "title": "Arrival in Kigali",
                "activities": [{"name": "city tour", "moment": "Afternoon"}],
                "meals": {"breakfast": False, "lunch": True, "dinner": True},
            },
            {
                "dayNumber": 9,
                "nationalPark": {"id": "p-volcanoes", "name": "Volcanoes National Park", "pageId": "page-1"},
                "accommodations": [{"id": "a1", "name": "Bisate Lodge", "images": ["https://cdn/bisate.jpg"]}],
                "activities": [
                    {"name": "gorilla trekking", "moment": "Full Day", "location": "550e8400-e29b-41d4-a716-446655440000"}
                ],
                "transportation": [
                    {
                        "id": "t1",
                        "originName": "Kigali",
                        "destinationName": "Musanze",
                        "mode": "road_4x4",
                        "durationMinutes": 150,
                    }
                ],
            },
            {
                "dayNumber": 2,
                "nationalPark": {"id": "p-volcanoes", "name": "Volcanoes National Park", "pageId": "page-1"},
                "accommodations": [{"id": "a1", "name": "Bisate Lodge"}],
            },
            {"nationalPark": {"id": "p-akagera", "name": "Akagera National Park", "pageId": "page-2"}},
        ],
    }


def _assemble(payload: dict, lookup=None):
    lookup = lookup or AsyncMock(return_value={})
    proposal = ProposalInput.model_validate(payload)
    return asyncio.run(ProposalAssembler(page_lookup=lookup).assemble(proposal)), lookup


def test_assembles_full_document():
    lookup = AsyncMock(return_value={"page-1": "https://cdn/volcanoes.jpg", "page-2": None})
    document, _ = _assemble(_sample_payload(), lookup)

    assert [day.day for day in document.itinerary] == [1, 2, 3, 4]
    assert document.itinerary[0].date == "July 10, 2025"
    assert document.itinerary[0].meals == "Lunch, Dinner"
    assert document.itinerary[1].activities[0].location is None
    assert document.itinerary[1].activities[0].time == "08:00"
    assert document.itinerary[3].title == "Akagera National Park"
    assert document.itinerary[3].accommodation == "Last day, no accommodation"
    assert document.itinerary[0].accommodation == "To be confirmed"

    assert document.title == "Rwanda Gorilla Expedition"
    assert document.subtitle == "4 Days Gorilla Trekking Safari"
    assert document.duration == "4 Days"
    assert document.client_name == "Jane Doe"
    assert document.theme == "safari-portal"
    assert document.location == "Rwanda"
    assert document.organization is not None and document.organization.name == "Makisala Safaris"

    assert document.pricing.total == "$350"
    assert document.pricing.per_person == "$117"
    assert [a.id for a in document.accommodations] == ["a1"]

    assert [m.name for m in document.map_data.locations] == ["Volcanoes National Park", "Akagera National Park"]
    assert document.map_data.start_location is not None
    assert document.map_data.start_location.name == "Kigali"
    assert document.map_data.end_location is not None
    assert document.map_data.end_location.name == "Kigali International Airport"

    assert document.national_parks is not None
    assert document.national_parks["volcanoes-np"].featured_image_url == "https://cdn/volcanoes.jpg"
    assert document.national_parks["p-akagera"].featured_image_url is None

    assert document.transportation is not None
    assert [t.id for t in document.transportation] == ["t1"]
    assert document.transportation[0].duration_formatted == "2h 30min"

    overview = document.trip_overview
    assert overview.traveler_count == 3
    assert overview.country == "Rwanda"
    assert overview.tour_type == "Private"
    assert overview.travel_dates is not None
    assert overview.travel_dates.start == "July 10, 2025"
    assert overview.travel_dates.end == "July 13, 2025"
    assert overview.destinations == ["Volcanoes National Park", "Akagera National Park"]
    assert document.important_notes.points[0] == "Prices are subject to availability"


def test_page_lookup_runs_once_with_every_page_id():
    document, lookup = _assemble(_sample_payload(), AsyncMock(return_value={"page-1": "https://cdn/v.jpg"}))

    lookup.assert_awaited_once()
    assert lookup.await_args.args[0] == {"page-1", "page-2"}
    # The first day has no park, so the first day's page cannot supply a hero image.
    assert document.hero_image == STOCK_HERO_IMAGE


def test_hero_image_from_first_park_page():
    payload = _sample_payload()
    payload["days"] = payload["days"][1:]
    document, _ = _assemble(payload, AsyncMock(return_value={"page-1": "https://cdn/v.jpg"}))
    assert document.hero_image == "https://cdn/v.jpg"


def test_explicit_hero_image_beats_page_image():
    payload = _sample_payload()
    payload["days"] = payload["days"][1:]
    payload["heroImage"] = "https://cdn/hero.jpg"
    document, _ = _assemble(payload, AsyncMock(return_value={"page-1": "https://cdn/v.jpg"}))
    assert document.hero_image == "https://cdn/hero.jpg"


def test_failed_page_lookup_falls_back_silently():
    payload = _sample_payload()
    payload["days"] = payload["days"][1:]
    lookup = AsyncMock(side_effect=RuntimeError("page service down"))

    document, _ = _assemble(payload, lookup)

    lookup.assert_awaited_once()
    assert document.hero_image == STOCK_HERO_IMAGE
    assert document.national_parks is not None
    assert document.national_parks["p-volcanoes"].featured_image_url is None


def test_no_page_ids_skips_lookup():
    payload = _sample_payload()
    payload["days"] = [payload["days"][0]]
    document, lookup = _assemble(payload)

    lookup.assert_not_awaited()
    assert document.national_parks is None
    assert document.transportation is None


def test_country_is_inferred_from_first_day_only():
    payload = _sample_payload()
    payload["tourTitle"] = "Northern Circuit"
    payload["days"] = [
        {"nationalPark": {"id": "p-serengeti", "name": "Serengeti National Park"}},
        {"nationalPark": {"id": "p-chobe", "name": "Chobe National Park"}},
    ]
    document, _ = _assemble(payload)

    assert document.location == "Tanzania"
    assert document.map_data.rotate == (-34.9, 6.4, 0.0)
    assert document.map_data.geojson["features"][0]["properties"]["name"] == "Tanzania"
    assert document.subtitle == "2 Days Safari Adventure"
    # Chobe is still in the table, so its marker resolves on its own.
    assert document.map_data.locations[1].coordinates == (24.5, -18.6)


def test_countries_list_drives_location_label():
    payload = _sample_payload()
    payload["countries"] = ["rwanda", "TANZANIA"]
    document, _ = _assemble(payload)
    assert document.location == "Rwanda & Tanzania"


def test_empty_proposal_degrades_to_defaults():
    document, lookup = _assemble({"id": "empty"})

    lookup.assert_not_awaited()
    assert document.title == "Safari Adventure"
    assert document.duration == "0 Days"
    assert document.itinerary == []
    assert document.pricing.per_person == "$0"
    assert document.hero_image == STOCK_HERO_IMAGE
    assert [m.name for m in document.map_data.locations] == ["Kigali"]
    assert document.trip_overview.travel_dates is None
    assert document.trip_overview.traveler_count is None
    assert document.theme == "minimalistic"


def test_failing_day_becomes_placeholder():
    class FlakyNormalizer(DayNormalizer):
        def normalize(self, day, index, total, start):
            if index == 1:
                raise ValueError("corrupt day")
            return super().normalize(day, index, total, start)

    proposal = ProposalInput.model_validate(_sample_payload())
    assembler = ProposalAssembler(page_lookup=AsyncMock(return_value={}), day_normalizer=FlakyNormalizer())
    document = asyncio.run(assembler.assemble(proposal))

    assert [day.day for day in document.itinerary] == [1, 2, 3, 4]
    assert document.itinerary[1].title == "Day 2"
    assert document.itinerary[1].accommodation == "To be confirmed"


def test_module_level_assemble_accepts_raw_payload():
    lookup = AsyncMock(return_value={})
    document = asyncio.run(assemble(_sample_payload(), fetch_page_images=lookup))

    dumped = document.model_dump(mode="json", by_alias=True)
    assert dumped["itinerary"][1]["nationalParkId"] == "p-volcanoes"
    assert dumped["pricing"]["perPerson"] == "$117"
    assert dumped["mapData"]["locations"][0]["coordinates"] == [29.5333, -1.4667]


def test_malformed_graph_still_produces_document():
    payload = {
        "id": "prop-loose",
        "theme": "classic",
        "startDate": {"not": "a date"},
        "days": [
            {
                "nationalPark": {"id": "p-unnamed", "name": None},
                "accommodations": [{"id": "a-unnamed", "name": None}],
                "transportation": [
                    {"id": "t1", "originName": "Kasane", "destinationName": "Chobe", "mode": "boat", "durationMinutes": 45}
                ],
            },
            {"nationalPark": {"name": "Missing id"}},
            {"title": "Departure"},
        ],
    }
    lookup = AsyncMock(return_value={})

    document = asyncio.run(assemble(payload, fetch_page_images=lookup))

    assert document.theme == "minimalistic"
    assert [day.day for day in document.itinerary] == [1, 2, 3]

    first = document.itinerary[0]
    assert first.title == "Day 1"
    assert first.accommodation == "To be confirmed"
    assert first.national_park_id == "p-unnamed"
    assert first.transportation is not None
    assert first.transportation.mode == "boat"
    assert first.transportation.mode_label == "boat"
    assert first.transportation.duration_formatted == "45 min"

    assert document.itinerary[1].title == "Day 2"
    assert document.itinerary[2].accommodation == "Last day, no accommodation"

    assert [m.name for m in document.map_data.locations] == ["p-unnamed"]
    assert document.national_parks is not None
    assert list(document.national_parks) == ["p-unnamed"]
    assert document.trip_overview.destinations == []
