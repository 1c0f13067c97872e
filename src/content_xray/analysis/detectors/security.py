"""SECURITY — permissive or convoluted access rules on deep-scanned items.

The security string is opaque apart from two markers:

- a role grant to "everyone" or "*" combined with ":write" is critical
- nested rule markers ("ar|" together with "|pd|") are flagged for review
"""

from __future__ import annotations

from ...scanning.models import ScanResult
from ..models import Issue, IssueCategory, Severity
from .helpers import label_for


class SecurityDetector:
    name = "security"
    category = IssueCategory.SECURITY

    def detect(self, scan: ScanResult) -> list[Issue]:
        issues: list[Issue] = []

        for item_id, deep in scan.deep_data.items():
            if not deep.security:
                continue
            name, path = label_for(scan, item_id)
            rules = deep.security.lower()

            if ("everyone" in rules or "*" in rules) and ":write" in rules:
                issues.append(
                    Issue(
                        severity=Severity.CRITICAL,
                        category=self.category,
                        title=f"Overly permissive: {name}",
                        description="Item grants write access to Everyone role.",
                        item_id=item_id,
                        item_path=path,
                        recommendation="Restrict write access to specific roles.",
                        metadata={"security": deep.security},
                    )
                )

            if "ar|" in rules and "|pd|" in rules:
                issues.append(
                    Issue(
                        severity=Severity.INFO,
                        category=self.category,
                        title=f"Complex security: {name}",
                        description="Item has complex security rules that may need review.",
                        item_id=item_id,
                        item_path=path,
                        recommendation="Review security configuration for correctness.",
                        metadata={"security": deep.security},
                    )
                )

        return issues
