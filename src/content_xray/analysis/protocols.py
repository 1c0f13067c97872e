"""Protocol class for detector plugins."""

from typing import Protocol

from ..scanning.models import ScanResult
from .models import Issue, IssueCategory


class Detector(Protocol):
    """Detectors read a finished scan (NEVER write) and return issues."""

    name: str
    category: IssueCategory

    def detect(self, scan: ScanResult) -> list[Issue]: ...
