from datetime import date

from proposal_press.schemas import ProposalInput

SAMPLE_PAYLOAD = {
    "id": "prop-1",
    "tourTitle": "Gorillas & Savannah",
    "startDate": "2025-07-10",
    "travelerGroups": [{"count": 2, "type": "adult"}],
    "pricingRows": [{"count": 2, "unitPrice": 3200.5, "type": "adult"}],
    "extras": [{"name": "Gorilla Permit", "price": 1500, "selected": True}],
    "heroImage": None,
    "unknownColumn": "ignored",
    "days": [
        {
            "dayNumber": 1,
            "nationalPark": {
                "id": "p1",
                "name": "Volcanoes National Park",
                "pageId": "page-1",
                "parkOverview": [{"title": "Wildlife", "description": "Mountain gorillas"}],
            },
            "activities": [{"name": "Gorilla trekking", "moment": "Full Day", "imageUrl": "https://cdn/g.jpg"}],
        }
    ],
}


def test_camel_case_payload_validates():
    proposal = ProposalInput.model_validate(SAMPLE_PAYLOAD)

    assert proposal.tour_title == "Gorillas & Savannah"
    assert proposal.pricing_rows[0].unit_price == 3200.5
    assert proposal.days[0].national_park is not None
    assert proposal.days[0].national_park.page_id == "page-1"
    assert proposal.days[0].national_park.park_overview[0].title == "Wildlife"
    assert proposal.days[0].activities[0].image_url == "https://cdn/g.jpg"


def test_snake_case_field_names_are_accepted():
    proposal = ProposalInput.model_validate({"id": "prop-2", "tour_title": "Okavango", "start_city": "Maun"})
    assert proposal.tour_title == "Okavango"
    assert proposal.start_city == "Maun"


def test_start_date_objects_are_stringified():
    proposal = ProposalInput.model_validate({"id": "prop-3", "startDate": date(2025, 7, 10)})
    assert proposal.start_date == "2025-07-10"


def test_round_trip_dump_uses_aliases():
    dumped = ProposalInput.model_validate(SAMPLE_PAYLOAD).model_dump(mode="json", by_alias=True)
    assert dumped["tourTitle"] == "Gorillas & Savannah"
    assert dumped["days"][0]["nationalPark"]["pageId"] == "page-1"
    assert "unknownColumn" not in dumped


def test_unknown_theme_and_transfer_mode_pass_validation():
    proposal = ProposalInput.model_validate(
        {
            "id": "prop-4",
            "theme": "neon",
            "days": [
                {
                    "transportation": [
                        {"id": "t1", "originName": "Kasane", "destinationName": "Chobe", "mode": "boat"}
                    ]
                }
            ],
        }
    )

    assert proposal.theme == "neon"
    assert proposal.days[0].transportation[0].mode == "boat"


def test_missing_names_become_blank():
    proposal = ProposalInput.model_validate(
        {
            "id": "prop-5",
            "days": [
                {
                    "nationalPark": {"id": "p1", "name": None},
                    "accommodations": [{"id": "a1", "name": None}],
                    "activities": [{"name": None}],
                    "transportation": [{"originName": None, "mode": None}],
                }
            ],
        }
    )

    day = proposal.days[0]
    assert day.national_park is not None and day.national_park.name == ""
    assert day.accommodations[0].name == ""
    assert day.activities[0].name == ""
    assert day.transportation[0].origin_name == ""
    assert day.transportation[0].mode == ""


def test_non_text_start_date_and_theme_are_dropped():
    proposal = ProposalInput.model_validate({"id": "prop-6", "startDate": 20250710, "theme": 3})
    assert proposal.start_date is None
    assert proposal.theme is None


def test_malformed_day_is_replaced_in_place():
    proposal = ProposalInput.model_validate(
        {
            "id": "prop-7",
            "days": [
                {"title": "Arrival"},
                {"nationalPark": {"name": "No id here"}, "meals": "all of them"},
                "not a day",
                {"title": "Departure"},
            ],
        }
    )

    assert [day.title for day in proposal.days] == ["Arrival", None, None, "Departure"]
    assert proposal.days[1].national_park is None
    assert proposal.days[2].meals is None
