"""Analyzer — runs the detectors over a finished scan and scores it."""

from __future__ import annotations

import concurrent.futures
import math
from datetime import datetime
from typing import Optional

import numpy as np

from ..config import DEFAULT_THRESHOLDS, ThresholdConfig
from ..exceptions import ErrorCode
from ..logging_config import get_logger
from ..scanning.models import ScanResult, utc_now
from .detectors import get_default_detectors
from .models import (
    AnalysisResult,
    AnalysisStats,
    Issue,
    IssueCategory,
    Severity,
    health_grade,
)

logger = get_logger(__name__)

# Categories whose absence earns a bonus
BONUS_CATEGORIES = (
    IssueCategory.ORPHAN,
    IssueCategory.BROKEN_LINK,
    IssueCategory.UNUSED_TEMPLATE,
    IssueCategory.SECURITY,
)
BONUS_POINTS = 5

# (points per issue, maximum deduction)
DEDUCTIONS = {
    Severity.CRITICAL: (5.0, 40.0),
    Severity.WARNING: (2.0, 30.0),
    Severity.INFO: (0.5, 10.0),
}


class Analyzer:
    """Run the detector registry over a ScanResult.

    Detectors only read the scan, so with ``parallel=True`` they run in a
    thread pool. Results are always merged in registry order.
    """

    def __init__(
        self,
        thresholds: Optional[ThresholdConfig] = None,
        parallel: bool = False,
        workers: Optional[int] = None,
        now: Optional[datetime] = None,
        detectors: Optional[list] = None,
    ) -> None:
        self.thresholds = thresholds or DEFAULT_THRESHOLDS
        self.parallel = parallel
        self.workers = workers
        self.now = now
        self.detectors = detectors

    def analyze(self, scan: ScanResult) -> AnalysisResult:
        detectors = self.detectors
        if detectors is None:
            detectors = get_default_detectors(self.thresholds, self.now or utc_now())

        if self.parallel and len(detectors) > 1:
            per_detector = self._run_parallel(detectors, scan)
        else:
            per_detector = [self._run_one(d, scan) for d in detectors]

        issues: list[Issue] = []
        for found in per_detector:
            issues.extend(found)
        for n, issue in enumerate(issues, start=1):
            issue.id = f"issue-{n}"

        stats = compute_stats(scan, issues)
        score = compute_health_score(issues)

        logger.info(
            f"Analysis of {scan.scan_id}: {len(issues)} issues, "
            f"score {score} ({health_grade(score)})"
        )

        return AnalysisResult(
            scan_id=scan.scan_id,
            analyzed_at=utc_now(),
            health_score=score,
            health_grade=health_grade(score),
            issues=issues,
            stats=stats,
        )

    def _run_parallel(self, detectors: list, scan: ScanResult) -> list[list[Issue]]:
        with concurrent.futures.ThreadPoolExecutor(max_workers=self.workers) as executor:
            futures = [executor.submit(self._run_one, d, scan) for d in detectors]
            return [f.result() for f in futures]

    @staticmethod
    def _run_one(detector, scan: ScanResult) -> list[Issue]:
        try:
            return list(detector.detect(scan))
        except Exception as e:
            logger.warning(f"[{ErrorCode.XR200.value}] Detector {detector.name} failed: {e}")
            return []


def compute_health_score(issues: list[Issue]) -> int:
    """Score in [0, 100] from capped severity deductions plus bonuses."""
    counts = {severity: 0 for severity in Severity}
    present: set[IssueCategory] = set()
    for issue in issues:
        counts[issue.severity] += 1
        present.add(issue.category)

    score = 100.0
    for severity, (points, cap) in DEDUCTIONS.items():
        score -= min(points * counts[severity], cap)
    score += BONUS_POINTS * sum(1 for c in BONUS_CATEGORIES if c not in present)

    # Round half up, then clamp
    return max(0, min(100, math.floor(score + 0.5)))


def compute_stats(scan: ScanResult, issues: list[Issue]) -> AnalysisStats:
    by_category = {category.value: 0 for category in IssueCategory}
    by_severity = {severity.value: 0 for severity in Severity}
    for issue in issues:
        by_category[issue.category.value] += 1
        by_severity[issue.severity.value] += 1

    depths = np.fromiter((item.depth for item in scan.items.values()), dtype=np.int64)
    avg_depth = float(depths.mean()) if depths.size else 0.0
    max_depth = int(depths.max()) if depths.size else 0

    items_per_template: dict[str, int] = {}
    for template_id, usage in scan.template_usage.items():
        template = scan.templates.get(template_id)
        label = template.name if template else template_id
        items_per_template[label] = items_per_template.get(label, 0) + len(usage)

    return AnalysisStats(
        total_items=len(scan.items),
        total_templates=len(scan.templates),
        total_media=len(scan.media),
        total_renderings=len(scan.renderings),
        issues_by_category=by_category,
        issues_by_severity=by_severity,
        avg_depth=round(avg_depth, 2),
        max_depth=max_depth,
        items_per_template=items_per_template,
    )


def analyze_scan(
    scan: ScanResult,
    thresholds: Optional[ThresholdConfig] = None,
    parallel: bool = False,
) -> AnalysisResult:
    """Analyze a scan with the default detectors."""
    return Analyzer(thresholds=thresholds, parallel=parallel).analyze(scan)
