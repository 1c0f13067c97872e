"""Content source capability consumed by the scan orchestrator.

Any backend (REST, GraphQL, an exported dump) implements :class:`ContentSource`.
The engine never depends on a concrete vendor type; it only awaits these five
narrow operations and reads the record types below.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Protocol, runtime_checkable


@dataclass(frozen=True)
class PageOptions:
    """Paging window for listing calls."""

    offset: int = 0
    limit: int = 100
    language: str = "en"
    database: str = "master"

    def next(self) -> PageOptions:
        return PageOptions(
            offset=self.offset + self.limit,
            limit=self.limit,
            language=self.language,
            database=self.database,
        )


@dataclass
class SourceItem:
    """A content node as reported by the source."""

    id: str
    name: str
    path: str
    template_id: str = ""
    template_name: str = ""
    parent_id: Optional[str] = None
    has_children: Optional[bool] = None
    updated_at: Optional[str] = None
    language: Optional[str] = None


@dataclass
class SourceTemplate:
    id: str
    name: str
    path: str
    base_template_ids: list[str] = field(default_factory=list)


@dataclass
class SourceMedia:
    id: str
    name: str
    path: str
    size: int = 0
    extension: str = ""


@dataclass
class SourceRendering:
    id: str
    name: str
    path: str


@dataclass
class SourceField:
    name: str
    value: str
    type: Optional[str] = None


@dataclass
class SourcePageRendering:
    uid: str
    rendering_id: str
    placeholder: str
    data_source_id: Optional[str] = None


@dataclass
class DeepItem:
    """Full field values and page layout of one item."""

    fields: list[SourceField] = field(default_factory=list)
    page_renderings: list[SourcePageRendering] = field(default_factory=list)
    security: Optional[str] = None


@runtime_checkable
class ContentSource(Protocol):
    """Fetch capability the scan orchestrator depends on.

    Every method is a coroutine and may raise; the orchestrator records the
    failure and carries on with the rest of the scan.
    """

    name: str

    async def list_children(self, path: str, page: PageOptions) -> list[SourceItem]: ...

    async def list_templates(self) -> list[SourceTemplate]: ...

    async def list_media(self, page: PageOptions) -> list[SourceMedia]: ...

    async def list_renderings(self) -> list[SourceRendering]: ...

    async def get_deep_item(self, item_id: str, language: str) -> Optional[DeepItem]: ...
