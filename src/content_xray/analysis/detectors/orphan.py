"""ORPHAN — items whose parent is missing, or whose name drifts from its path.

An item whose ``parent_id`` points at nothing in the index is a warning,
unless its path has no parent segment (a top-level item). An item whose
last path segment differs from its name is informational.
"""

from __future__ import annotations

from ...scanning.models import ScanResult, parent_path
from ..models import Issue, IssueCategory, Severity


class OrphanDetector:
    """Detects items detached from the indexed tree."""

    name = "orphan"
    category = IssueCategory.ORPHAN

    def detect(self, scan: ScanResult) -> list[Issue]:
        issues: list[Issue] = []

        for item_id, item in scan.items.items():
            if (
                item.parent_id
                and item.parent_id not in scan.items
                and parent_path(item.path)
            ):
                issues.append(
                    Issue(
                        severity=Severity.WARNING,
                        category=self.category,
                        title=f"Orphaned item: {item.name}",
                        description=(
                            f"Item's parent ({item.parent_id}) was not found in the scanned content."
                        ),
                        item_id=item_id,
                        item_path=item.path,
                        recommendation="Verify the parent item exists or move this item to a valid location.",
                        metadata={"parent_id": item.parent_id},
                    )
                )

            segments = [part for part in item.path.split("/") if part]
            if segments and segments[-1] != item.name:
                issues.append(
                    Issue(
                        severity=Severity.INFO,
                        category=self.category,
                        title=f"Path mismatch: {item.name}",
                        description=(
                            f'Item name "{item.name}" doesn\'t match path segment "{segments[-1]}".'
                        ),
                        item_id=item_id,
                        item_path=item.path,
                        recommendation="Consider renaming the item to match its URL path.",
                        metadata={"path_segment": segments[-1]},
                    )
                )

        return issues
