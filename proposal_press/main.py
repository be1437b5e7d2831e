from __future__ import annotations

import os
from typing import Any, Dict

from dotenv import load_dotenv
from fastapi import Body, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import ValidationError

from proposal_press.assembler import assemble
from proposal_press.schemas import ProposalInput
from proposal_press.tools.page_lookup import HttpPageLookup

load_dotenv()

app = FastAPI(title="Proposal Presentation API")

# The builder app and the PDF/email workers call this service from their own
# origins. Operators can scope this via PROPOSAL_PRESS_ALLOWED_ORIGINS.
raw_origins = os.getenv("PROPOSAL_PRESS_ALLOWED_ORIGINS") or "*"
allowed_origins = [origin.strip() for origin in raw_origins.split(",") if origin.strip()]
if not allowed_origins:
    allowed_origins = ["*"]
app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

page_lookup = HttpPageLookup()


@app.get("/healthz", include_in_schema=False)
async def healthz() -> Dict[str, str]:
    return {"status": "ok"}


@app.post("/api/proposals/presentation")
async def api_presentation(payload: Dict[str, Any] = Body(...)) -> Dict[str, Any]:
    """Validate a hydrated proposal and return its presentation document."""
    try:
        proposal = ProposalInput.model_validate(payload)
    except ValidationError as exc:
        raise HTTPException(status_code=422, detail=exc.errors(include_url=False)) from exc

    document = await assemble(proposal, page_lookup)
    return document.model_dump(mode="json", by_alias=True)
