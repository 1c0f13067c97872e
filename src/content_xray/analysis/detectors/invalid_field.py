"""INVALID_FIELD — deep field values that do not fit their declared shape.

Three checks per field:

- date-typed values must be a compact ``yyyyMMddTHHmmss[Z]`` timestamp, an
  ISO-8601 date, or a common calendar date (warning)
- link-typed values must be an http(s) URL, an absolute path, a GUID or a
  ``<link ...>`` element (info)
- values wrapped in braces that are not a GUID (or GUID list) must parse as JSON
  (warning)
"""

from __future__ import annotations

import json

from ...references import is_guid
from ...scanning.models import ScanResult
from ..models import Issue, IssueCategory, Severity
from .helpers import is_valid_date, label_for

_LINK_PREFIXES = ("http://", "https://", "/")


def is_valid_link(value: str) -> bool:
    text = value.strip()
    if "<link" in text.lower():
        return True
    if is_guid(text):
        return True
    return text.startswith(_LINK_PREFIXES)


def is_guid_list(value: str) -> bool:
    """Pipe-separated GUIDs, as multi-select reference fields store them."""
    return all(is_guid(part) for part in value.split("|"))


def is_valid_json_object(value: str) -> bool:
    try:
        json.loads(value)
    except ValueError:
        return False
    return True


class InvalidFieldDetector:
    name = "invalid_field"
    category = IssueCategory.INVALID_FIELD

    def detect(self, scan: ScanResult) -> list[Issue]:
        issues: list[Issue] = []

        for item_id, deep in scan.deep_data.items():
            name, path = label_for(scan, item_id)

            for item_field in deep.fields:
                value = item_field.value
                field_type = (item_field.type or "").lower()

                if "date" in field_type and value and not is_valid_date(value):
                    issues.append(
                        Issue(
                            severity=Severity.WARNING,
                            category=self.category,
                            title=f"Invalid date: {name}",
                            description=f'Field "{item_field.name}" has invalid date value.',
                            item_id=item_id,
                            item_path=path,
                            recommendation="Correct the date format.",
                            metadata={"field": item_field.name, "value": value},
                        )
                    )

                if "link" in field_type and value and not is_valid_link(value):
                    issues.append(
                        Issue(
                            severity=Severity.INFO,
                            category=self.category,
                            title=f"Malformed link: {name}",
                            description=f'Field "{item_field.name}" has malformed link value.',
                            item_id=item_id,
                            item_path=path,
                            recommendation="Review and correct the link field.",
                            metadata={"field": item_field.name, "value": value[:100]},
                        )
                    )

                text = value.strip()
                if (
                    text.startswith("{")
                    and text.endswith("}")
                    and not is_guid_list(text)
                    and not is_valid_json_object(text)
                ):
                    issues.append(
                        Issue(
                            severity=Severity.WARNING,
                            category=self.category,
                            title=f"Invalid JSON: {name}",
                            description=f'Field "{item_field.name}" appears to contain invalid JSON.',
                            item_id=item_id,
                            item_path=path,
                            recommendation="Fix the JSON syntax.",
                            metadata={"field": item_field.name},
                        )
                    )

        return issues
