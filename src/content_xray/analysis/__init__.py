"""Issue detection, statistics and health scoring over finished scans."""

from .detectors import get_default_detectors
from .engine import Analyzer, analyze_scan, compute_health_score, compute_stats
from .models import (
    AnalysisResult,
    AnalysisStats,
    Issue,
    IssueCategory,
    Severity,
    health_grade,
)
from .protocols import Detector

__all__ = [
    "AnalysisResult",
    "AnalysisStats",
    "Analyzer",
    "Detector",
    "Issue",
    "IssueCategory",
    "Severity",
    "analyze_scan",
    "compute_health_score",
    "compute_stats",
    "get_default_detectors",
    "health_grade",
]
