"""EMPTY_CONTAINER — folder-like items without children."""

from __future__ import annotations

from ...scanning.models import ScanResult
from ..models import Issue, IssueCategory, Severity

CONTAINER_MARKERS = ("folder", "bucket", "container")


class EmptyContainerDetector:
    name = "empty_container"
    category = IssueCategory.EMPTY_CONTAINER

    def detect(self, scan: ScanResult) -> list[Issue]:
        issues: list[Issue] = []

        for item_id, item in scan.items.items():
            template_name = item.template_name.lower()
            if item.has_children or not any(m in template_name for m in CONTAINER_MARKERS):
                continue
            issues.append(
                Issue(
                    severity=Severity.INFO,
                    category=self.category,
                    title=f"Empty folder: {item.name}",
                    description="Folder has no child items.",
                    item_id=item_id,
                    item_path=item.path,
                    recommendation="Add content or remove this empty folder.",
                    metadata={"template_name": item.template_name},
                )
            )

        return issues
