"""Shared helper functions for detectors."""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Optional

from ...references import ReferenceResolver
from ...scanning.models import ScanResult

# Compact CMS timestamp: yyyyMMddTHHmmss with an optional trailing Z
_COMPACT_TIMESTAMP = re.compile(r"^(\d{8}T\d{6})(Z?)$")

# Calendar formats accepted for date-typed fields besides ISO-8601
_CALENDAR_FORMATS = (
    "%m/%d/%Y",
    "%m/%d/%Y %H:%M",
    "%m/%d/%Y %H:%M:%S",
    "%d.%m.%Y",
    "%Y/%m/%d",
    "%b %d %Y",
    "%b %d, %Y",
    "%B %d %Y",
    "%B %d, %Y",
    "%d %b %Y",
    "%d %B %Y",
)


def label_for(scan: ScanResult, item_id: str) -> tuple[str, Optional[str]]:
    """Display name and path for an item id (id and None when not indexed)."""
    item = scan.items.get(item_id)
    if item is None:
        return item_id, None
    return item.name, item.path


def resolver_for(scan: ScanResult) -> ReferenceResolver:
    return ReferenceResolver(scan.items, scan.media, scan.templates)


def parse_timestamp(value: str) -> Optional[datetime]:
    """Parse a compact or ISO-8601 timestamp into an aware UTC datetime.

    Returns None when the value is empty or not a real timestamp.
    """
    if not value:
        return None
    text = value.strip()

    match = _COMPACT_TIMESTAMP.match(text)
    if match:
        try:
            parsed = datetime.strptime(match.group(1), "%Y%m%dT%H%M%S")
        except ValueError:
            return None
        return parsed.replace(tzinfo=timezone.utc)

    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def is_valid_date(value: str) -> bool:
    """Whether a date-typed field value is a real date in a known format."""
    if parse_timestamp(value) is not None:
        return True
    text = value.strip()
    for fmt in _CALENDAR_FORMATS:
        try:
            datetime.strptime(text, fmt)
            return True
        except ValueError:
            continue
    return False
