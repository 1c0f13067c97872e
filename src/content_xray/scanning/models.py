"""Data models for scan state.

Tier 1 records (``IndexedItem`` and friends) hold identity and structure
only, roughly a hundred bytes per node, so a scan can index hundreds of
thousands of nodes. Tier 2 records (``DeepItemData``) carry full field
values and page layout and are fetched for a bounded subset.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from ..config import ScanConfig
from ..exceptions import ErrorCode


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ScanStatus(str, Enum):
    PENDING = "pending"
    SCANNING = "scanning"
    COMPLETE = "complete"
    FAILED = "failed"


class ScanPhase(str, Enum):
    ITEMS = "items"
    TEMPLATES = "templates"
    MEDIA = "media"
    RENDERINGS = "renderings"
    DEEP = "deep"
    RELATIONSHIPS = "relationships"
    COMPLETE = "complete"


# ── Tier 1: lightweight index ──────────────────────────────────────


@dataclass(frozen=True)
class IndexedItem:
    id: str
    name: str
    path: str
    template_id: str
    template_name: str
    parent_id: str = ""
    has_children: bool = False
    updated_at: str = ""
    language: str = ""

    @property
    def depth(self) -> int:
        """Number of non-empty path segments."""
        return path_depth(self.path)


@dataclass(frozen=True)
class IndexedTemplate:
    id: str
    name: str
    path: str
    base_template_ids: tuple[str, ...] = ()


@dataclass(frozen=True)
class IndexedMedia:
    id: str
    name: str
    path: str
    size_bytes: int = 0
    extension: str = ""


@dataclass(frozen=True)
class IndexedRendering:
    id: str
    name: str
    path: str


# ── Tier 2: deep data ──────────────────────────────────────────────


@dataclass(frozen=True)
class ItemField:
    name: str
    value: str
    type: Optional[str] = None


@dataclass(frozen=True)
class PageRendering:
    uid: str
    rendering_id: str
    placeholder: str
    data_source_id: Optional[str] = None


@dataclass(frozen=True)
class DeepItemData:
    id: str
    fields: tuple[ItemField, ...] = ()
    renderings: tuple[PageRendering, ...] = ()
    security: Optional[str] = None

    def field_values(self) -> list[str]:
        return [f.value for f in self.fields]


# ── Scan state ─────────────────────────────────────────────────────


@dataclass(frozen=True)
class ScanError:
    path: str
    message: str
    code: ErrorCode
    timestamp: datetime = field(default_factory=utc_now)


@dataclass
class ScanProgress:
    phase: ScanPhase = ScanPhase.ITEMS
    items_scanned: int = 0
    current_path: str = ""
    started_at: datetime = field(default_factory=utc_now)
    errors: list[ScanError] = field(default_factory=list)

    def snapshot(self) -> ScanProgress:
        """Copy safe to hand to callers while the scan keeps running."""
        return replace(self, errors=list(self.errors))

    @property
    def truncated(self) -> bool:
        return any(e.code is ErrorCode.XR101 for e in self.errors)


@dataclass
class ScanResult:
    """Aggregate root of one scan. Mutated only by the orchestrator."""

    scan_id: str
    config: ScanConfig
    source_name: str = ""
    status: ScanStatus = ScanStatus.PENDING
    progress: ScanProgress = field(default_factory=ScanProgress)

    # Tier 1 index (insertion ordered)
    items: dict[str, IndexedItem] = field(default_factory=dict)
    templates: dict[str, IndexedTemplate] = field(default_factory=dict)
    media: dict[str, IndexedMedia] = field(default_factory=dict)
    renderings: dict[str, IndexedRendering] = field(default_factory=dict)

    # Relationship maps (built after traversal)
    children_map: dict[str, list[str]] = field(default_factory=dict)
    template_usage: dict[str, list[str]] = field(default_factory=dict)
    rendering_usage: dict[str, list[str]] = field(default_factory=dict)
    references: dict[str, list[str]] = field(default_factory=dict)

    # Tier 2 deep data
    deep_data: dict[str, DeepItemData] = field(default_factory=dict)

    started_at: datetime = field(default_factory=utc_now)
    completed_at: Optional[datetime] = None
    aborted: bool = False

    @property
    def is_finished(self) -> bool:
        return self.status in (ScanStatus.COMPLETE, ScanStatus.FAILED)

    @property
    def duration_seconds(self) -> float:
        end = self.completed_at or utc_now()
        return max(0.0, (end - self.started_at).total_seconds())


def path_depth(path: str) -> int:
    return len([part for part in path.split("/") if part])


def parent_path(path: str) -> str:
    """Return the parent of a slash-separated path ('' for top level)."""
    head, _sep, _tail = path.rstrip("/").rpartition("/")
    return head
