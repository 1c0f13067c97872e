"""Plain-data serialization of reports, graphs and scan state.

Every public model is a dataclass; ``to_dict`` walks it with
``dataclasses.asdict`` and converts enums to their values and datetimes to
ISO-8601 strings so the output can go straight to ``json.dumps``.
"""

from __future__ import annotations

import json
from dataclasses import asdict, is_dataclass
from datetime import datetime
from enum import Enum
from typing import Any

from .graph.models import KnowledgeGraph
from .reports.models import Report
from .scanning.models import ScanResult


def _plain(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, dict):
        return {str(_plain(k)): _plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [_plain(v) for v in value]
    return value


def to_dict(obj: Any) -> Any:
    """Convert a dataclass instance (or container of them) to plain data."""
    if is_dataclass(obj) and not isinstance(obj, type):
        return _plain(asdict(obj))
    return _plain(obj)


def report_to_dict(report: Report) -> dict[str, Any]:
    return to_dict(report)


def graph_to_dict(graph: KnowledgeGraph) -> dict[str, Any]:
    return to_dict(graph)


def scan_summary(scan: ScanResult) -> dict[str, Any]:
    """Headline view of a scan without the per-entity maps."""
    return {
        "scan_id": scan.scan_id,
        "source": scan.source_name,
        "status": scan.status.value,
        "aborted": scan.aborted,
        "truncated": scan.progress.truncated,
        "items": len(scan.items),
        "templates": len(scan.templates),
        "media": len(scan.media),
        "renderings": len(scan.renderings),
        "deep_scanned": len(scan.deep_data),
        "errors": [to_dict(e) for e in scan.progress.errors],
        "started_at": scan.started_at.isoformat(),
        "completed_at": scan.completed_at.isoformat() if scan.completed_at else None,
    }


def dumps(obj: Any, indent: int = 2) -> str:
    return json.dumps(to_dict(obj), indent=indent)
