"""Data models for the analysis engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional


class Severity(str, Enum):
    CRITICAL = "critical"
    WARNING = "warning"
    INFO = "info"


class IssueCategory(str, Enum):
    ORPHAN = "orphan"
    UNUSED_TEMPLATE = "unused-template"
    UNUSED_RENDERING = "unused-rendering"
    BROKEN_LINK = "broken-link"
    DUPLICATE = "duplicate"
    SECURITY = "security"
    DEEP_NESTING = "deep-nesting"
    LARGE_MEDIA = "large-media"
    STALE_CONTENT = "stale-content"
    CIRCULAR_REFERENCE = "circular-reference"
    EMPTY_CONTAINER = "empty-container"
    INVALID_FIELD = "invalid-field"


@dataclass
class Issue:
    """A single data-quality problem found by a detector.

    ``id`` is left empty by detectors and assigned by the analyzer after all
    detector output has been merged.
    """

    severity: Severity
    category: IssueCategory
    title: str
    description: str
    item_id: Optional[str] = None
    item_path: Optional[str] = None
    recommendation: Optional[str] = None
    metadata: dict[str, Any] = field(default_factory=dict)
    id: str = ""


@dataclass
class AnalysisStats:
    total_items: int = 0
    total_templates: int = 0
    total_media: int = 0
    total_renderings: int = 0
    issues_by_category: dict[str, int] = field(default_factory=dict)
    issues_by_severity: dict[str, int] = field(default_factory=dict)
    avg_depth: float = 0.0
    max_depth: int = 0
    items_per_template: dict[str, int] = field(default_factory=dict)


@dataclass
class AnalysisResult:
    scan_id: str
    analyzed_at: datetime
    health_score: int
    health_grade: str
    issues: list[Issue] = field(default_factory=list)
    stats: AnalysisStats = field(default_factory=AnalysisStats)

    def issues_of(self, category: IssueCategory) -> list[Issue]:
        return [i for i in self.issues if i.category is category]

    def count(self, severity: Severity) -> int:
        return sum(1 for i in self.issues if i.severity is severity)


# Inclusive lower bounds, highest first
GRADE_BOUNDS = (
    (90, "A"),
    (80, "B"),
    (70, "C"),
    (60, "D"),
)


def health_grade(score: int) -> str:
    """Letter grade for a health score."""
    for bound, grade in GRADE_BOUNDS:
        if score >= bound:
            return grade
    return "F"
