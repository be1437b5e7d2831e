from typing import Awaitable, Callable, Dict, Iterable, Optional, Set
import logging
import os

import httpx
from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)
if not logger.handlers:
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("[%(levelname)s] %(name)s: %(message)s"))
    logger.addHandler(handler)
_level = os.getenv("PROPOSAL_PRESS_LOG_LEVEL", "INFO").upper()
logger.setLevel(getattr(logging, _level, logging.INFO))
logger.propagate = False

PageLookup = Callable[[Set[str]], Awaitable[Dict[str, Optional[str]]]]


class HttpPageLookup:
    """
    Fetches featured images for content pages from the CMS page service.
    Calling the instance is the ``fetch_page_images`` collaborator of the assembler.
    """

    def __init__(self, base_url: Optional[str] = None, *, timeout: Optional[float] = None):
        self.base_url = (base_url or os.getenv("PROPOSAL_PRESS_PAGES_URL") or "").rstrip("/")
        self.timeout = timeout or float(os.getenv("PROPOSAL_PRESS_PAGES_TIMEOUT", "10"))

    async def __call__(self, page_ids: Set[str]) -> Dict[str, Optional[str]]:
        return await self.fetch_page_images(page_ids)

    async def fetch_page_images(self, page_ids: Set[str]) -> Dict[str, Optional[str]]:
        """Return ``{page_id: featured_image_url}`` for the requested ids.

        Transport and HTTP errors propagate; the assembler decides how to
        degrade. Ids the service does not know are simply absent.
        """
        if not page_ids:
            return {}
        if not self.base_url:
            logger.warning("PROPOSAL_PRESS_PAGES_URL not set; skipping page image lookup")
            return {}

        params = {"ids": ",".join(sorted(page_ids))}
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.get(f"{self.base_url}/pages", params=params)
            response.raise_for_status()
            data = response.json()

        rows: Iterable[Dict] = data.get("pages", []) if isinstance(data, dict) else data
        return self._index(rows, page_ids)

    @staticmethod
    def _index(rows: Iterable[Dict], page_ids: Set[str]) -> Dict[str, Optional[str]]:
        images: Dict[str, Optional[str]] = {}
        for row in rows:
            if not isinstance(row, dict):
                continue
            page_id = row.get("id")
            if not page_id or page_id not in page_ids:
                continue
            images[page_id] = row.get("featured_image_url") or row.get("featuredImageUrl")
        return images
