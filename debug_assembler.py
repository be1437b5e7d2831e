# debug_assembler.py
import asyncio
import json

from proposal_press.assembler import assemble


async def fake_page_images(page_ids):
    return {page_id: f"https://images.example.com/{page_id}.jpg" for page_id in page_ids}


async def main():
    payload = {
        "id": "debug-proposal",
        "tourTitle": "Classic Rwanda Gorilla Safari",
        "theme": "minimalistic",
        "startDate": "2025-10-10",
        "client": {"name": "Debug Client"},
        "travelerGroups": [{"count": 2, "type": "adult"}],
        "pricingRows": [{"count": 2, "unitPrice": 4200, "type": "adult"}],
        "extras": [{"name": "Gorilla Permit", "price": 1500, "selected": True}],
        "startCity": "Kigali",
        "endCity": "Kigali International Airport",
        "days": [
            {
                "title": "Arrival in Kigali",
                "activities": [{"name": "Kigali city tour", "moment": "Afternoon", "location": "Kimironko Market"}],
                "meals": {"dinner": True},
            },
            {
                "nationalPark": {"id": "volcanoes-np", "name": "Volcanoes National Park", "pageId": "page-volcanoes"},
                "accommodations": [{"id": "bisate", "name": "Bisate Lodge"}],
                "activities": [{"name": "gorilla trekking", "moment": "Full Day"}],
                "meals": {"breakfast": True, "lunch": True, "dinner": True},
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
            {"nationalPark": {"id": "akagera-np", "name": "Akagera National Park"}},
        ],
    }

    document = await assemble(payload, fetch_page_images=fake_page_images)
    print("➡️ Assembler returned:\n")
    print(json.dumps(document.model_dump(mode="json", by_alias=True), indent=2))


if __name__ == "__main__":
    asyncio.run(main())
