"""Tiered scan of a content tree.

- Tier 1: breadth-first index crawl (identity and structure only)
- Tier 2: deep scan of page-like items (fields + layout)
- Tier 3: deep scan of every item in the (focused) subtree

The scan is one sequential pipeline. Every request to the source is followed
by ``request_delay_ms`` of sleep; fetch failures are recorded in
``progress.errors`` and never stop the crawl.
"""

from __future__ import annotations

import asyncio
import time
import uuid
from collections import deque
from typing import Callable, Optional

from ..config import ScanConfig
from ..exceptions import ErrorCode
from ..logging_config import ScanLogAdapter, get_logger
from ..references import ReferenceResolver, item_references
from ..source.base import ContentSource, DeepItem, PageOptions, SourceItem
from .models import (
    DeepItemData,
    IndexedItem,
    IndexedMedia,
    IndexedRendering,
    IndexedTemplate,
    ItemField,
    PageRendering,
    ScanError,
    ScanPhase,
    ScanProgress,
    ScanResult,
    ScanStatus,
    utc_now,
)

logger = get_logger(__name__)

ProgressCallback = Optional[Callable[[ScanProgress], None]]

# Template-name fragments that mark an item as a page worth deep scanning
PAGE_TEMPLATE_MARKERS = ("page", "article", "landing", "home", "content page")


def generate_scan_id() -> str:
    return f"xray-{int(time.time() * 1000)}-{uuid.uuid4().hex[:9]}"


class ScanOrchestrator:
    """Runs one scan against one content source."""

    def __init__(
        self,
        source: ContentSource,
        config: Optional[ScanConfig] = None,
        scan_id: Optional[str] = None,
    ) -> None:
        self.source = source
        self.config = config or ScanConfig()
        self.result = ScanResult(
            scan_id=scan_id or generate_scan_id(),
            config=self.config,
            source_name=getattr(source, "name", ""),
        )
        self._aborted = False
        self._on_progress: ProgressCallback = None
        self.log = ScanLogAdapter(
            logger, self.result.scan_id, lambda: self.result.progress.phase.value
        )

    def abort(self) -> None:
        """Ask the scan to stop at the next checkpoint."""
        self._aborted = True

    @property
    def aborted(self) -> bool:
        return self._aborted

    async def scan(self, on_progress: ProgressCallback = None) -> ScanResult:
        """Run the scan for the configured tier.

        Always returns the result object. Only an error escaping the phase
        handlers marks the scan as failed.
        """
        self._on_progress = on_progress
        result = self.result
        result.status = ScanStatus.SCANNING
        result.started_at = utc_now()
        result.progress.started_at = result.started_at

        self.log.info(
            f"Started: source={result.source_name} "
            f"root={self.config.root_path} tier={self.config.tier}"
        )

        try:
            await self._scan_items()

            if self.config.include_templates and not self._aborted:
                await self._scan_templates()
            if self.config.include_media and not self._aborted:
                await self._scan_media()
            if self.config.include_renderings and not self._aborted:
                await self._scan_renderings()

            if self.config.tier >= 2 and not self._aborted:
                await self._deep_scan()

            self._build_relationships()

            if self._aborted:
                result.aborted = True
                self._record_error(result.progress.current_path, "Scan aborted", ErrorCode.XR102)

            result.status = ScanStatus.COMPLETE
            result.progress.phase = ScanPhase.COMPLETE
        except Exception as e:
            self.log.error(f"Failed: {e}")
            result.status = ScanStatus.FAILED
            self._record_error(result.progress.current_path, str(e), ErrorCode.XR199)
        finally:
            result.completed_at = utc_now()
            self._report()

        self.log.info(
            f"Finished {result.status.value}: {len(result.items)} items, "
            f"{len(result.deep_data)} deep, {len(result.progress.errors)} errors"
        )
        return result

    # ── Tier 1 ─────────────────────────────────────────────────────

    async def _scan_items(self) -> None:
        progress = self.result.progress
        progress.phase = ScanPhase.ITEMS

        queue: deque[tuple[str, int]] = deque([(self.config.root_path, 0)])
        queued = {self.config.root_path}

        while queue and not self._aborted:
            path, depth = queue.popleft()
            progress.current_path = path

            try:
                children = await self._fetch_children(path)
            except Exception as e:
                self.log.warning(f"Failed to list children of {path}: {e}")
                self._record_error(path, str(e), ErrorCode.XR100)
                self._report()
                continue

            for child in children:
                if self._aborted:
                    break

                if len(self.result.items) >= self.config.max_items:
                    self.log.warning(
                        f"Max items limit reached ({self.config.max_items}), scan truncated"
                    )
                    self._record_error(
                        path,
                        f"Max items limit reached ({self.config.max_items}). Scan truncated.",
                        ErrorCode.XR101,
                    )
                    return

                # First write wins; a repeated id is neither re-indexed nor re-queued
                if child.id in self.result.items:
                    continue

                self.result.items[child.id] = self._index_item(child)
                progress.items_scanned += 1

                if child.has_children and self._within_depth(depth + 1):
                    if child.path not in queued:
                        queued.add(child.path)
                        queue.append((child.path, depth + 1))

            self._report()

    async def _fetch_children(self, path: str) -> list[SourceItem]:
        """Fetch every page of children, pacing after each request."""
        page = PageOptions(
            offset=0,
            limit=self.config.page_size,
            language=self.config.language,
            database=self.config.database,
        )
        children: list[SourceItem] = []
        while not self._aborted:
            batch = await self.source.list_children(path, page)
            await self._pace()
            children.extend(batch)
            if len(batch) < page.limit:
                break
            page = page.next()
        return children

    def _index_item(self, item: SourceItem) -> IndexedItem:
        return IndexedItem(
            id=item.id,
            name=item.name,
            path=item.path,
            template_id=item.template_id or "",
            template_name=item.template_name or "",
            parent_id=item.parent_id or "",
            has_children=bool(item.has_children),
            updated_at=item.updated_at or "",
            language=item.language or self.config.language,
        )

    def _within_depth(self, depth: int) -> bool:
        """Whether items at ``depth`` may have their children listed."""
        if self.config.max_depth == -1:
            return True
        return depth < self.config.max_depth

    # ── Independent passes ─────────────────────────────────────────

    async def _scan_templates(self) -> None:
        self.result.progress.phase = ScanPhase.TEMPLATES
        self.result.progress.current_path = "templates"
        try:
            templates = await self.source.list_templates()
            await self._pace()
            for template in templates:
                if self._aborted:
                    break
                self.result.templates.setdefault(
                    template.id,
                    IndexedTemplate(
                        id=template.id,
                        name=template.name,
                        path=template.path,
                        base_template_ids=tuple(b for b in template.base_template_ids if b),
                    ),
                )
        except Exception as e:
            self.log.warning(f"Template pass failed: {e}")
            self._record_error("templates", str(e), ErrorCode.XR103)
        self._report()

    async def _scan_media(self) -> None:
        self.result.progress.phase = ScanPhase.MEDIA
        self.result.progress.current_path = "media"
        page = PageOptions(
            offset=0,
            limit=self.config.page_size,
            language=self.config.language,
            database=self.config.database,
        )
        try:
            while not self._aborted:
                batch = await self.source.list_media(page)
                await self._pace()
                for media in batch:
                    self.result.media.setdefault(
                        media.id,
                        IndexedMedia(
                            id=media.id,
                            name=media.name,
                            path=media.path,
                            size_bytes=int(media.size or 0),
                            extension=media.extension or "",
                        ),
                    )
                if len(batch) < page.limit:
                    break
                page = page.next()
        except Exception as e:
            self.log.warning(f"Media pass failed: {e}")
            self._record_error("media", str(e), ErrorCode.XR103)
        self._report()

    async def _scan_renderings(self) -> None:
        self.result.progress.phase = ScanPhase.RENDERINGS
        self.result.progress.current_path = "renderings"
        try:
            renderings = await self.source.list_renderings()
            await self._pace()
            for rendering in renderings:
                if self._aborted:
                    break
                self.result.renderings.setdefault(
                    rendering.id,
                    IndexedRendering(id=rendering.id, name=rendering.name, path=rendering.path),
                )
        except Exception as e:
            self.log.warning(f"Rendering pass failed: {e}")
            self._record_error("renderings", str(e), ErrorCode.XR103)
        self._report()

    # ── Tier 2 / 3 ─────────────────────────────────────────────────

    def deep_scan_candidates(self) -> list[str]:
        """Item ids to deep scan, in index order, capped at deep_scan_limit."""
        if self.config.tier >= 3:
            candidates = list(self.result.items)
        else:
            candidates = [
                item_id
                for item_id, item in self.result.items.items()
                if is_page_like(item.template_name)
            ]
        return candidates[: self.config.deep_scan_limit]

    async def _deep_scan(self) -> None:
        progress = self.result.progress
        progress.phase = ScanPhase.DEEP

        candidates = self.deep_scan_candidates()
        self.log.info(f"Deep scanning {len(candidates)} items")

        for item_id in candidates:
            if self._aborted:
                break
            progress.current_path = self.result.items[item_id].path
            try:
                deep = await self.source.get_deep_item(item_id, self.config.language)
                await self._pace()
            except Exception as e:
                self.log.warning(f"Deep fetch failed for {item_id}: {e}")
                self._record_error(item_id, str(e), ErrorCode.XR104)
                continue
            if deep is not None:
                self.result.deep_data[item_id] = self._project_deep(item_id, deep)

        self._report()

    @staticmethod
    def _project_deep(item_id: str, deep: DeepItem) -> DeepItemData:
        return DeepItemData(
            id=item_id,
            fields=tuple(
                ItemField(name=f.name, value="" if f.value is None else str(f.value), type=f.type)
                for f in deep.fields
            ),
            renderings=tuple(
                PageRendering(
                    uid=r.uid,
                    rendering_id=r.rendering_id,
                    placeholder=r.placeholder,
                    data_source_id=r.data_source_id or None,
                )
                for r in deep.page_renderings
            ),
            security=deep.security or None,
        )

    # ── Relationships ──────────────────────────────────────────────

    def _build_relationships(self) -> None:
        result = self.result
        result.progress.phase = ScanPhase.RELATIONSHIPS

        for item_id, item in result.items.items():
            if item.parent_id:
                result.children_map.setdefault(item.parent_id, []).append(item_id)
            result.template_usage.setdefault(item.template_id, []).append(item_id)

        for page_id, deep in result.deep_data.items():
            for rendering in deep.renderings:
                result.rendering_usage.setdefault(rendering.rendering_id, []).append(page_id)

        resolver = ReferenceResolver(result.items, result.media, result.templates)
        for item_id, deep in result.deep_data.items():
            targets = item_references(resolver, item_id, deep.field_values())
            if targets:
                result.references[item_id] = targets

    # ── Helpers ────────────────────────────────────────────────────

    async def _pace(self) -> None:
        if self.config.request_delay_ms > 0:
            await asyncio.sleep(self.config.request_delay_seconds)

    def _record_error(self, path: str, message: str, code: ErrorCode) -> None:
        self.result.progress.errors.append(ScanError(path=path, message=message, code=code))

    def _report(self) -> None:
        if self._on_progress is None:
            return
        try:
            self._on_progress(self.result.progress.snapshot())
        except Exception as e:
            self.log.warning(f"Progress callback failed: {e}")


def is_page_like(template_name: str) -> bool:
    lowered = template_name.lower()
    return any(marker in lowered for marker in PAGE_TEMPLATE_MARKERS)


async def run_scan(
    source: ContentSource,
    config: Optional[ScanConfig] = None,
    on_progress: ProgressCallback = None,
) -> ScanResult:
    """Create an orchestrator and run it to completion."""
    return await ScanOrchestrator(source, config).scan(on_progress)
