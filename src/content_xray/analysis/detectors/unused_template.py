"""UNUSED_TEMPLATE — templates with no instances that nothing inherits from."""

from __future__ import annotations

from ...references import canonical_id
from ...scanning.models import ScanResult
from ..models import Issue, IssueCategory, Severity


class UnusedTemplateDetector:
    """Detects templates no indexed item is built from."""

    name = "unused_template"
    category = IssueCategory.UNUSED_TEMPLATE

    def detect(self, scan: ScanResult) -> list[Issue]:
        used = {canonical_id(tid) for tid, usage in scan.template_usage.items() if usage}
        bases = {
            canonical_id(base)
            for template in scan.templates.values()
            for base in template.base_template_ids
        }

        issues: list[Issue] = []
        for template_id, template in scan.templates.items():
            key = canonical_id(template_id)
            if key in used or key in bases:
                continue
            issues.append(
                Issue(
                    severity=Severity.INFO,
                    category=self.category,
                    title=f"Unused template: {template.name}",
                    description="Template has no content items using it.",
                    item_id=template_id,
                    item_path=template.path,
                    recommendation="Consider removing this template if it's no longer needed.",
                    metadata={"usage_count": 0},
                )
            )
        return issues
