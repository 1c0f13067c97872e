"""In-memory content source, loadable from a JSON export.

Document layout::

    {
      "name": "staging",
      "base_url": "https://cms.example.com",
      "items": [{"id": "...", "name": "...", "path": "/content/home", ...}],
      "templates": [{"id": "...", "name": "...", "path": "...", "base_template_ids": []}],
      "media": [{"id": "...", "name": "...", "path": "...", "size": 123, "extension": "jpg"}],
      "renderings": [{"id": "...", "name": "...", "path": "..."}],
      "deep": {"<item id>": {"fields": [...], "renderings": [...], "security": "..."}}
    }

Children of a path are the items whose parent path equals it. ``parent_id``
and ``has_children`` are derived from the tree when an item omits them.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional

from ..exceptions import ContentXrayError
from ..scanning.models import parent_path
from .base import (
    DeepItem,
    PageOptions,
    SourceField,
    SourceItem,
    SourceMedia,
    SourcePageRendering,
    SourceRendering,
    SourceTemplate,
)


class InMemoryContentSource:
    """Serves a fixed content tree from memory."""

    def __init__(
        self,
        items: Optional[list[SourceItem]] = None,
        templates: Optional[list[SourceTemplate]] = None,
        media: Optional[list[SourceMedia]] = None,
        renderings: Optional[list[SourceRendering]] = None,
        deep: Optional[dict[str, DeepItem]] = None,
        name: str = "memory",
        base_url: str = "",
    ) -> None:
        self.name = name
        self.base_url = base_url
        self._templates = list(templates or [])
        self._media = list(media or [])
        self._renderings = list(renderings or [])
        self._deep = dict(deep or {})
        self._children: dict[str, list[SourceItem]] = {}
        self.request_count = 0

        by_path = {item.path.rstrip("/"): item for item in items or []}
        for item in items or []:
            parent = parent_path(item.path)
            if item.parent_id is None and parent in by_path:
                item.parent_id = by_path[parent].id
            self._children.setdefault(parent, []).append(item)
        for item in items or []:
            if item.has_children is None:
                item.has_children = bool(self._children.get(item.path.rstrip("/")))

    # ── ContentSource ──────────────────────────────────────────────

    async def list_children(self, path: str, page: PageOptions) -> list[SourceItem]:
        self.request_count += 1
        children = self._children.get(path.rstrip("/"), [])
        return children[page.offset : page.offset + page.limit]

    async def list_templates(self) -> list[SourceTemplate]:
        self.request_count += 1
        return list(self._templates)

    async def list_media(self, page: PageOptions) -> list[SourceMedia]:
        self.request_count += 1
        return self._media[page.offset : page.offset + page.limit]

    async def list_renderings(self) -> list[SourceRendering]:
        self.request_count += 1
        return list(self._renderings)

    async def get_deep_item(self, item_id: str, language: str) -> Optional[DeepItem]:
        self.request_count += 1
        return self._deep.get(item_id)

    # ── Loading ────────────────────────────────────────────────────

    @classmethod
    def from_dict(cls, document: dict[str, Any], name: Optional[str] = None) -> InMemoryContentSource:
        """Build a source from a parsed JSON document.

        Raises:
            ContentXrayError: If a record is missing a required key
        """
        try:
            items = [SourceItem(**record) for record in document.get("items", [])]
            templates = [SourceTemplate(**record) for record in document.get("templates", [])]
            media = [SourceMedia(**record) for record in document.get("media", [])]
            renderings = [SourceRendering(**record) for record in document.get("renderings", [])]
            deep = {
                item_id: DeepItem(
                    fields=[SourceField(**f) for f in record.get("fields", [])],
                    page_renderings=[
                        SourcePageRendering(**r) for r in record.get("renderings", [])
                    ],
                    security=record.get("security"),
                )
                for item_id, record in document.get("deep", {}).items()
            }
        except TypeError as e:
            raise ContentXrayError(f"Invalid content document: {e}")

        return cls(
            items=items,
            templates=templates,
            media=media,
            renderings=renderings,
            deep=deep,
            name=name or document.get("name", "memory"),
            base_url=document.get("base_url", ""),
        )

    @classmethod
    def from_json_file(cls, path: Path, name: Optional[str] = None) -> InMemoryContentSource:
        """Load a source from a JSON export on disk."""
        try:
            with open(path, encoding="utf-8") as f:
                document = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ContentXrayError(f"Cannot load content document '{path}': {e}")
        if not isinstance(document, dict):
            raise ContentXrayError(f"Content document '{path}' must be a JSON object")
        return cls.from_dict(document, name=name or Path(path).stem)
