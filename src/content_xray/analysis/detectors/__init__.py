"""Detector implementations: read a finished ScanResult and produce Issues.

Twelve detectors, one per issue category. Registry order is the order in
which issues are merged and numbered.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from ...config import ThresholdConfig
from .broken_link import BrokenLinkDetector
from .circular_reference import CircularReferenceDetector, find_cycles
from .deep_nesting import DeepNestingDetector
from .duplicate import DuplicateDetector
from .empty_container import EmptyContainerDetector
from .invalid_field import InvalidFieldDetector
from .large_media import LargeMediaDetector
from .orphan import OrphanDetector
from .security import SecurityDetector
from .stale_content import StaleContentDetector
from .unused_rendering import UnusedRenderingDetector
from .unused_template import UnusedTemplateDetector


def get_default_detectors(
    thresholds: Optional[ThresholdConfig] = None,
    now: Optional[datetime] = None,
) -> list:
    """Return all twelve detectors in registry order."""
    return [
        OrphanDetector(),
        UnusedTemplateDetector(),
        UnusedRenderingDetector(),
        BrokenLinkDetector(),
        DuplicateDetector(),
        SecurityDetector(),
        DeepNestingDetector(thresholds),
        LargeMediaDetector(thresholds),
        StaleContentDetector(thresholds, now),
        CircularReferenceDetector(),
        EmptyContainerDetector(),
        InvalidFieldDetector(),
    ]


__all__ = [
    "BrokenLinkDetector",
    "CircularReferenceDetector",
    "DeepNestingDetector",
    "DuplicateDetector",
    "EmptyContainerDetector",
    "InvalidFieldDetector",
    "LargeMediaDetector",
    "OrphanDetector",
    "SecurityDetector",
    "StaleContentDetector",
    "UnusedRenderingDetector",
    "UnusedTemplateDetector",
    "find_cycles",
    "get_default_detectors",
]
