"""Error codes attached to scan progress errors.

Error Code Convention:
    XR1xx - Scanning errors
    XR2xx - Analysis errors
    XR3xx - Graph errors
    XR4xx - Service errors
"""

from __future__ import annotations

from enum import Enum


class ErrorCode(Enum):
    """Structured error codes for observability and debugging."""

    # Scanning errors (XR1xx)
    XR100 = "XR100"  # Child listing fetch failed
    XR101 = "XR101"  # Max items reached, scan truncated
    XR102 = "XR102"  # Scan aborted by caller
    XR103 = "XR103"  # Template/media/rendering pass failed
    XR104 = "XR104"  # Deep item fetch failed
    XR199 = "XR199"  # Unhandled error, scan failed

    # Analysis errors (XR2xx)
    XR200 = "XR200"  # Detector raised unexpectedly

    # Graph errors (XR3xx)
    XR300 = "XR300"  # Focal entity not found

    # Service errors (XR4xx)
    XR400 = "XR400"  # Scan task crashed outside the orchestrator

    @property
    def is_fatal(self) -> bool:
        """Whether the code marks a scan as failed rather than partial."""
        return self in (ErrorCode.XR199, ErrorCode.XR400)
