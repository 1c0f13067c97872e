"""GUID reference scanning over opaque field text.

Field values carry no schema, so references are inferred by pattern: any
8-4-4-4-12 hex run, with or without surrounding braces. Ids are compared in
canonical form (upper case, no braces) so ``{abc...}`` in a field matches an
item stored as ``ABC...``.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Iterator, Mapping
from typing import Optional

_GUID_BODY = r"[0-9A-Fa-f]{8}-[0-9A-Fa-f]{4}-[0-9A-Fa-f]{4}-[0-9A-Fa-f]{4}-[0-9A-Fa-f]{12}"

# Lookarounds keep us from matching inside longer hex runs; hyphens and other
# separators around a GUID do not block a match
GUID_PATTERN = re.compile(r"(?<![0-9A-Fa-f])\{?(" + _GUID_BODY + r")\}?(?![0-9A-Fa-f])")

_BARE_GUID = re.compile(r"^\{?" + _GUID_BODY + r"\}?$")


def canonical_id(value: str) -> str:
    """Canonical comparison form of an id: stripped, no braces, upper case."""
    return value.strip().strip("{}").upper()


def is_guid(value: str) -> bool:
    """True when the whole value is one GUID (braces optional)."""
    return bool(_BARE_GUID.match(value.strip()))


def find_guids(text: str) -> list[str]:
    """Return every GUID in ``text`` in canonical form, in order of appearance."""
    if not text:
        return []
    return [match.group(1).upper() for match in GUID_PATTERN.finditer(text)]


def build_id_index(*collections: Iterable[str]) -> dict[str, str]:
    """Map canonical ids to the ids as stored (first collection wins)."""
    index: dict[str, str] = {}
    for ids in collections:
        for stored in ids:
            index.setdefault(canonical_id(stored), stored)
    return index


class ReferenceResolver:
    """Resolves GUID text against the ids known to a scan."""

    def __init__(
        self,
        items: Mapping[str, object],
        media: Mapping[str, object],
        templates: Mapping[str, object],
    ) -> None:
        self.items = build_id_index(items)
        self.media = build_id_index(media)
        self.templates = build_id_index(templates)

    def item(self, raw: Optional[str]) -> Optional[str]:
        """Stored item id for ``raw`` (a GUID or a literal id), if indexed."""
        if not raw:
            return None
        return self.items.get(canonical_id(raw))

    def media_id(self, raw: str) -> Optional[str]:
        return self.media.get(canonical_id(raw))

    def template(self, raw: str) -> Optional[str]:
        return self.templates.get(canonical_id(raw))

    def is_known(self, guid: str) -> bool:
        key = canonical_id(guid)
        return key in self.items or key in self.media or key in self.templates

    def references(self, texts: Iterable[str]) -> Iterator[tuple[str, Optional[str], str]]:
        """Yield ``(guid, stored_id, kind)`` for every GUID found in ``texts``.

        ``kind`` is ``"item"``, ``"media"``, ``"template"`` or ``"unknown"``;
        ``stored_id`` is None for unknown targets.
        """
        for text in texts:
            for guid in find_guids(text):
                if guid in self.items:
                    yield guid, self.items[guid], "item"
                elif guid in self.media:
                    yield guid, self.media[guid], "media"
                elif guid in self.templates:
                    yield guid, self.templates[guid], "template"
                else:
                    yield guid, None, "unknown"


def item_references(resolver: ReferenceResolver, owner_id: str, texts: Iterable[str]) -> list[str]:
    """Indexed item ids referenced from ``texts``, in order, without repeats.

    References back to ``owner_id`` itself are dropped.
    """
    targets: list[str] = []
    for _guid, stored, kind in resolver.references(texts):
        if kind == "item" and stored != owner_id and stored not in targets:
            targets.append(stored)
    return targets
