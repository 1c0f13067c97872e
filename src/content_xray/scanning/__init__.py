"""Tiered content-tree scanning."""

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
    parent_path,
    path_depth,
)
from .orchestrator import ScanOrchestrator, generate_scan_id, is_page_like, run_scan

__all__ = [
    "DeepItemData",
    "IndexedItem",
    "IndexedMedia",
    "IndexedRendering",
    "IndexedTemplate",
    "ItemField",
    "PageRendering",
    "ScanError",
    "ScanOrchestrator",
    "ScanPhase",
    "ScanProgress",
    "ScanResult",
    "ScanStatus",
    "generate_scan_id",
    "is_page_like",
    "parent_path",
    "path_depth",
    "run_scan",
]
