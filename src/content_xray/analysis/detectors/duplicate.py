"""DUPLICATE — items sharing a template and a case-insensitive name."""

from __future__ import annotations

from ...scanning.models import ScanResult
from ..models import Issue, IssueCategory, Severity


class DuplicateDetector:
    """Groups items by (template id, lowercase name) and reports groups > 1."""

    name = "duplicate"
    category = IssueCategory.DUPLICATE

    def detect(self, scan: ScanResult) -> list[Issue]:
        groups: dict[tuple[str, str], list[str]] = {}
        for item_id, item in scan.items.items():
            groups.setdefault((item.template_id, item.name.lower()), []).append(item_id)

        issues: list[Issue] = []
        for (template_id, _key), item_ids in groups.items():
            if len(item_ids) < 2:
                continue
            first = scan.items[item_ids[0]]
            issues.append(
                Issue(
                    severity=Severity.INFO,
                    category=self.category,
                    title=f"Duplicate items: {first.name}",
                    description=f"{len(item_ids)} items with same name and template found.",
                    item_id=first.id,
                    item_path=first.path,
                    recommendation=(
                        "Review these items - they may be intentional (multisite) "
                        "or accidental duplicates."
                    ),
                    metadata={
                        "count": len(item_ids),
                        "template_id": template_id,
                        "paths": [scan.items[i].path for i in item_ids],
                        "item_ids": list(item_ids),
                    },
                )
            )
        return issues
