"""DEEP_NESTING — items buried too many path segments below the root."""

from __future__ import annotations

from typing import Optional

from ...config import DEFAULT_THRESHOLDS, ThresholdConfig
from ...scanning.models import ScanResult
from ..models import Issue, IssueCategory, Severity


class DeepNestingDetector:
    name = "deep_nesting"
    category = IssueCategory.DEEP_NESTING

    def __init__(self, thresholds: Optional[ThresholdConfig] = None) -> None:
        self.thresholds = thresholds or DEFAULT_THRESHOLDS

    def detect(self, scan: ScanResult) -> list[Issue]:
        critical = self.thresholds.nesting_critical_depth
        warning = self.thresholds.nesting_warning_depth
        issues: list[Issue] = []

        for item_id, item in scan.items.items():
            depth = item.depth
            if depth > critical:
                issues.append(
                    Issue(
                        severity=Severity.CRITICAL,
                        category=self.category,
                        title=f"Critically deep: {item.name}",
                        description=(
                            f"Item is {depth} levels deep. Performance degrades "
                            f"significantly past {critical} levels."
                        ),
                        item_id=item_id,
                        item_path=item.path,
                        recommendation="Restructure content to reduce nesting depth.",
                        metadata={"depth": depth},
                    )
                )
            elif depth > warning:
                issues.append(
                    Issue(
                        severity=Severity.WARNING,
                        category=self.category,
                        title=f"Deeply nested: {item.name}",
                        description=f"Item is {depth} levels deep. Consider flattening the structure.",
                        item_id=item_id,
                        item_path=item.path,
                        recommendation="Consider restructuring to improve performance.",
                        metadata={"depth": depth},
                    )
                )

        return issues
