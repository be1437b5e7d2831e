import re
from typing import Optional

_UUID_RE = re.compile(r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$", re.IGNORECASE)
_SLUG_RE = re.compile(r"^[a-z0-9-]+$")


def sanitize_location(value: Optional[str]) -> Optional[str]:
    """Drop values that look like database ids leaking into a display field."""
    if not value:
        return None
    if _UUID_RE.fullmatch(value):
        return None
    # Long hyphenated slugs are record keys, not place names.
    if len(value) > 20 and _SLUG_RE.fullmatch(value) and "-" in value:
        return None
    return value
