"""BROKEN_LINK — references in deep data that resolve to nothing.

Two sources of references are checked:

- GUIDs embedded anywhere in a field value, which must match a known item,
  media or template
- rendering data sources, which must match a known item
"""

from __future__ import annotations

from ...scanning.models import ScanResult
from ..models import Issue, IssueCategory, Severity
from .helpers import label_for, resolver_for


class BrokenLinkDetector:
    """Detects field and data-source references to missing entities."""

    name = "broken_link"
    category = IssueCategory.BROKEN_LINK

    def detect(self, scan: ScanResult) -> list[Issue]:
        resolver = resolver_for(scan)
        issues: list[Issue] = []

        for item_id, deep in scan.deep_data.items():
            name, path = label_for(scan, item_id)

            for item_field in deep.fields:
                seen: set[str] = set()
                for guid, _stored, kind in resolver.references([item_field.value]):
                    if kind != "unknown" or guid in seen:
                        continue
                    seen.add(guid)
                    issues.append(
                        Issue(
                            severity=Severity.WARNING,
                            category=self.category,
                            title=f"Broken link in: {name}",
                            description=(
                                f'Field "{item_field.name}" references non-existent item {guid}.'
                            ),
                            item_id=item_id,
                            item_path=path,
                            recommendation="Update or remove the broken reference.",
                            metadata={"field": item_field.name, "target_id": guid},
                        )
                    )

            for rendering in deep.renderings:
                if not rendering.data_source_id or resolver.item(rendering.data_source_id):
                    continue
                issues.append(
                    Issue(
                        severity=Severity.WARNING,
                        category=self.category,
                        title=f"Broken data source on: {name}",
                        description=f"Rendering data source {rendering.data_source_id} not found.",
                        item_id=item_id,
                        item_path=path,
                        recommendation="Update the rendering data source or remove the rendering.",
                        metadata={
                            "rendering_id": rendering.rendering_id,
                            "data_source_id": rendering.data_source_id,
                        },
                    )
                )

        return issues
