"""Exception hierarchy for Content X-Ray."""

from .base import ContentXrayError
from .config import ConfigurationError, InvalidConfigError
from .service import (
    ScanNotFoundError,
    ScanNotReadyError,
    ServiceError,
    UnknownSourceError,
)
from .taxonomy import ErrorCode

__all__ = [
    "ContentXrayError",
    "ConfigurationError",
    "InvalidConfigError",
    "ServiceError",
    "ScanNotFoundError",
    "ScanNotReadyError",
    "UnknownSourceError",
    "ErrorCode",
]
