"""UNUSED_RENDERING — renderings placed on no deep-scanned page."""

from __future__ import annotations

from ...references import canonical_id
from ...scanning.models import ScanResult
from ..models import Issue, IssueCategory, Severity


class UnusedRenderingDetector:
    name = "unused_rendering"
    category = IssueCategory.UNUSED_RENDERING

    def detect(self, scan: ScanResult) -> list[Issue]:
        used = {canonical_id(rid) for rid, pages in scan.rendering_usage.items() if pages}

        issues: list[Issue] = []
        for rendering_id, rendering in scan.renderings.items():
            if canonical_id(rendering_id) in used:
                continue
            issues.append(
                Issue(
                    severity=Severity.INFO,
                    category=self.category,
                    title=f"Unused rendering: {rendering.name}",
                    description="Rendering is not used on any scanned pages.",
                    item_id=rendering_id,
                    item_path=rendering.path,
                    recommendation="Consider removing this rendering if it's no longer needed.",
                    metadata={"usage_count": 0},
                )
            )
        return issues
