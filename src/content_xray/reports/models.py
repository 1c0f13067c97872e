"""Report and recommendation models."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from ..analysis.models import AnalysisStats, Issue


class Priority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class Effort(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


PRIORITY_ORDER = {Priority.HIGH: 0, Priority.MEDIUM: 1, Priority.LOW: 2}


@dataclass(frozen=True)
class Recommendation:
    priority: Priority
    title: str
    description: str
    impact: str
    effort: Effort
    affected_items: int


@dataclass
class Report:
    """An analysis plus recommendations and instance metadata."""

    scan_id: str
    generated_at: datetime
    source_name: str
    instance_url: str
    health_score: int
    health_grade: str
    scan_duration: float
    stats: AnalysisStats
    issues: list[Issue] = field(default_factory=list)
    recommendations: list[Recommendation] = field(default_factory=list)
