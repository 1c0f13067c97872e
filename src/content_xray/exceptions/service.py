"""Service-level exceptions raised to callers of XRayService."""

from .base import ContentXrayError


class ServiceError(ContentXrayError):
    """Base class for errors raised by the scan service."""

    pass


class ScanNotFoundError(ServiceError):
    """Raised when a scan id is not registered."""

    def __init__(self, scan_id: str):
        super().__init__(f"Scan not found: {scan_id}", details={"scan_id": scan_id})
        self.scan_id = scan_id


class ScanNotReadyError(ServiceError):
    """Raised when a report or graph is requested before the scan completed."""

    def __init__(self, scan_id: str, status: str):
        super().__init__(
            f"Scan {scan_id} is not complete",
            details={"scan_id": scan_id, "status": status},
        )
        self.scan_id = scan_id
        self.status = status


class UnknownSourceError(ServiceError):
    """Raised when no content source is registered under the given name."""

    def __init__(self, source_name: str, available: list[str]):
        super().__init__(
            f"Unknown content source: {source_name}",
            details={"source": source_name, "available": ", ".join(available)},
        )
        self.source_name = source_name
        self.available = available
