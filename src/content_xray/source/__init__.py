"""Content source capability and the in-memory implementation."""

from .base import (
    ContentSource,
    DeepItem,
    PageOptions,
    SourceField,
    SourceItem,
    SourceMedia,
    SourcePageRendering,
    SourceRendering,
    SourceTemplate,
)
from .memory import InMemoryContentSource

__all__ = [
    "ContentSource",
    "DeepItem",
    "InMemoryContentSource",
    "PageOptions",
    "SourceField",
    "SourceItem",
    "SourceMedia",
    "SourcePageRendering",
    "SourceRendering",
    "SourceTemplate",
]
