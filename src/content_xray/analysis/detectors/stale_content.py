"""STALE_CONTENT — items not updated for a long time.

Ages are measured against a reference instant fixed when the detector is
built, so one analysis run uses a single "now". Missing or unparseable
timestamps are skipped.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Optional

from ...config import DEFAULT_THRESHOLDS, ThresholdConfig
from ...scanning.models import ScanResult, utc_now
from ..models import Issue, IssueCategory, Severity
from .helpers import parse_timestamp


class StaleContentDetector:
    name = "stale_content"
    category = IssueCategory.STALE_CONTENT

    def __init__(
        self,
        thresholds: Optional[ThresholdConfig] = None,
        now: Optional[datetime] = None,
    ) -> None:
        self.thresholds = thresholds or DEFAULT_THRESHOLDS
        self.now = now or utc_now()

    def detect(self, scan: ScanResult) -> list[Issue]:
        warning_cutoff = self.now - timedelta(days=self.thresholds.stale_warning_days)
        info_cutoff = self.now - timedelta(days=self.thresholds.stale_info_days)
        issues: list[Issue] = []

        for item_id, item in scan.items.items():
            updated = parse_timestamp(item.updated_at)
            if updated is None:
                continue

            if updated < warning_cutoff:
                issues.append(
                    Issue(
                        severity=Severity.WARNING,
                        category=self.category,
                        title=f"Very stale: {item.name}",
                        description=(
                            f"Item hasn't been updated in over "
                            f"{self.thresholds.stale_warning_days} days."
                        ),
                        item_id=item_id,
                        item_path=item.path,
                        recommendation="Review for accuracy or consider archiving.",
                        metadata={"last_updated": item.updated_at},
                    )
                )
            elif updated < info_cutoff:
                issues.append(
                    Issue(
                        severity=Severity.INFO,
                        category=self.category,
                        title=f"Stale content: {item.name}",
                        description=(
                            f"Item hasn't been updated in over "
                            f"{self.thresholds.stale_info_days} days."
                        ),
                        item_id=item_id,
                        item_path=item.path,
                        recommendation="Review for accuracy.",
                        metadata={"last_updated": item.updated_at},
                    )
                )

        return issues
