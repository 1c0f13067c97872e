"""LARGE_MEDIA — media files over the size thresholds (exclusive bounds)."""

from __future__ import annotations

from typing import Optional

from ...config import DEFAULT_THRESHOLDS, MB, ThresholdConfig
from ...scanning.models import ScanResult
from ..models import Issue, IssueCategory, Severity


class LargeMediaDetector:
    name = "large_media"
    category = IssueCategory.LARGE_MEDIA

    def __init__(self, thresholds: Optional[ThresholdConfig] = None) -> None:
        self.thresholds = thresholds or DEFAULT_THRESHOLDS

    def detect(self, scan: ScanResult) -> list[Issue]:
        critical = self.thresholds.media_critical_bytes
        warning = self.thresholds.media_warning_bytes
        issues: list[Issue] = []

        for media_id, media in scan.media.items():
            size_mb = media.size_bytes / MB
            metadata = {"size_bytes": media.size_bytes, "size_mb": round(size_mb, 2)}

            if media.size_bytes > critical:
                issues.append(
                    Issue(
                        severity=Severity.CRITICAL,
                        category=self.category,
                        title=f"Very large file: {media.name}",
                        description=(
                            f"Media file is {size_mb:.1f}MB. Files over "
                            f"{critical / MB:.0f}MB significantly impact performance."
                        ),
                        item_id=media_id,
                        item_path=media.path,
                        recommendation="Compress or move to external storage (CDN, blob storage).",
                        metadata=metadata,
                    )
                )
            elif media.size_bytes > warning:
                issues.append(
                    Issue(
                        severity=Severity.WARNING,
                        category=self.category,
                        title=f"Large file: {media.name}",
                        description=f"Media file is {size_mb:.1f}MB.",
                        item_id=media_id,
                        item_path=media.path,
                        recommendation="Consider compressing this file.",
                        metadata=metadata,
                    )
                )

        return issues
