"""Process-wide table of scans and the caller-facing operations.

Each scan runs as an asyncio task registered under its scan id. Status,
report and graph calls read the table; the table itself is guarded by a
re-entrant lock so status reads are safe from other threads. Finished scans
stay registered until the caller forgets them.
"""

from __future__ import annotations

import asyncio
import threading
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any, Optional, Union

from .analysis.engine import Analyzer
from .analysis.models import AnalysisResult, Severity
from .config import ScanConfig, XRaySettings, scan_config_with
from .exceptions import (
    ErrorCode,
    ScanNotFoundError,
    ScanNotReadyError,
    UnknownSourceError,
)
from .graph.builder import build_knowledge_graph
from .graph.models import GraphOptions, KnowledgeGraph
from .logging_config import get_logger
from .reports.models import Report
from .reports.recommendations import filter_issues
from .reports.summary import generate_report
from .scanning.models import ScanError, ScanResult, ScanStatus, utc_now
from .scanning.orchestrator import ScanOrchestrator
from .source.base import ContentSource

logger = get_logger(__name__)

NO_SCAN_YET = "no scan yet"


@dataclass
class ScanHandle:
    """Registry entry for one scan."""

    scan_id: str
    source_name: str
    orchestrator: ScanOrchestrator
    task: Optional[asyncio.Task] = None
    analysis: Optional[AnalysisResult] = None

    @property
    def result(self) -> ScanResult:
        return self.orchestrator.result


class XRayService:
    """Start scans against named content sources and query their results."""

    def __init__(
        self,
        sources: Union[Mapping[str, ContentSource], Iterable[ContentSource]],
        settings: Optional[XRaySettings] = None,
    ) -> None:
        if isinstance(sources, Mapping):
            self._sources: dict[str, ContentSource] = dict(sources)
        else:
            self._sources = {source.name: source for source in sources}
        self.settings = settings or XRaySettings()
        self._lock = threading.RLock()
        self._scans: dict[str, ScanHandle] = {}

    # ── Sources ────────────────────────────────────────────────────

    @property
    def source_names(self) -> list[str]:
        with self._lock:
            return sorted(self._sources)

    def register_source(self, source: ContentSource, name: Optional[str] = None) -> None:
        with self._lock:
            self._sources[name or source.name] = source

    def _source(self, source_name: str) -> ContentSource:
        with self._lock:
            source = self._sources.get(source_name)
        if source is None:
            raise UnknownSourceError(source_name, self.source_names)
        return source

    # ── Scans ──────────────────────────────────────────────────────

    async def start_scan(
        self,
        source_name: str,
        config: Optional[ScanConfig] = None,
        **overrides: Any,
    ) -> dict[str, str]:
        """Schedule a scan and return immediately.

        Raises:
            UnknownSourceError: If no source is registered under ``source_name``
        """
        source = self._source(source_name)
        scan_config = scan_config_with(config or self.settings.scan, **overrides)

        orchestrator = ScanOrchestrator(source, scan_config)
        orchestrator.result.status = ScanStatus.SCANNING
        handle = ScanHandle(
            scan_id=orchestrator.result.scan_id,
            source_name=source_name,
            orchestrator=orchestrator,
        )

        with self._lock:
            self._scans[handle.scan_id] = handle
            handle.task = asyncio.get_running_loop().create_task(
                orchestrator.scan(), name=f"content-xray-scan-{handle.scan_id}"
            )
        handle.task.add_done_callback(lambda task: self._on_task_done(handle, task))

        logger.info(f"Started scan {handle.scan_id} on source {source_name}")
        return {"scan_id": handle.scan_id, "status": ScanStatus.SCANNING.value}

    def _on_task_done(self, handle: ScanHandle, task: asyncio.Task) -> None:
        if task.cancelled():
            reason = "Scan task was cancelled"
        elif task.exception() is not None:
            reason = f"Scan task crashed: {task.exception()}"
        else:
            return

        logger.error(f"[{ErrorCode.XR400.value}] {reason} ({handle.scan_id})")
        with self._lock:
            result = handle.result
            result.status = ScanStatus.FAILED
            result.completed_at = result.completed_at or utc_now()
            result.progress.errors.append(
                ScanError(path=result.progress.current_path, message=reason, code=ErrorCode.XR400)
            )

    async def wait_for_scan(self, scan_id: str) -> ScanResult:
        """Wait until the scan task has finished and return its result."""
        handle = self._handle(scan_id)
        if handle.task is not None and not handle.task.done():
            await asyncio.wait({handle.task})
        return handle.result

    def abort_scan(self, scan_id: str) -> bool:
        """Request cooperative abort. Returns False if the scan already finished."""
        handle = self._handle(scan_id)
        if handle.result.is_finished:
            return False
        handle.orchestrator.abort()
        logger.info(f"Abort requested for scan {scan_id}")
        return True

    def forget_scan(self, scan_id: str) -> None:
        """Drop a scan from the table, aborting it first if still running."""
        handle = self._handle(scan_id)
        if not handle.result.is_finished:
            handle.orchestrator.abort()
        with self._lock:
            self._scans.pop(scan_id, None)

    def list_scans(self) -> list[dict[str, Any]]:
        with self._lock:
            handles = list(self._scans.values())
        return [
            {
                "scan_id": h.scan_id,
                "source": h.source_name,
                "status": h.result.status.value,
                "started_at": h.result.started_at.isoformat(),
                "items": len(h.result.items),
            }
            for h in handles
        ]

    def _handle(self, scan_id: str) -> ScanHandle:
        with self._lock:
            handle = self._scans.get(scan_id)
        if handle is None:
            raise ScanNotFoundError(scan_id)
        return handle

    # ── Queries ────────────────────────────────────────────────────

    def get_status(self, scan_id: str) -> dict[str, Any]:
        handle = self._handle(scan_id)
        with self._lock:
            return {
                "scan_id": scan_id,
                "status": handle.result.status.value,
                "progress": handle.result.progress.snapshot(),
            }

    def get_analysis(self, scan_id: str) -> AnalysisResult:
        """Analysis of a completed scan, computed on first request and cached."""
        handle = self._completed(scan_id)
        with self._lock:
            if handle.analysis is None:
                analyzer = Analyzer(
                    thresholds=self.settings.thresholds,
                    parallel=self.settings.parallel_detectors,
                    workers=self.settings.detector_workers,
                )
                handle.analysis = analyzer.analyze(handle.result)
            return handle.analysis

    def get_report(
        self,
        scan_id: str,
        category: Optional[str] = None,
        severity: Optional[str] = None,
    ) -> Report:
        """Report for a completed scan; filters narrow the issue list only.

        Raises:
            ScanNotFoundError: If the scan id is not registered
            ScanNotReadyError: If the scan has not completed
        """
        handle = self._completed(scan_id)
        analysis = self.get_analysis(scan_id)
        source = self._sources.get(handle.source_name)

        report = generate_report(
            analysis,
            source_name=handle.source_name,
            instance_url=getattr(source, "base_url", "") or "",
            scan_duration=handle.result.duration_seconds,
        )
        if category or severity:
            report.issues = filter_issues(report.issues, category, severity)
        return report

    def get_graph(
        self,
        scan_id: str,
        node_types: Optional[Iterable[str]] = None,
        max_nodes: Optional[int] = None,
        center_on: Optional[str] = None,
    ) -> KnowledgeGraph:
        handle = self._completed(scan_id)
        options = GraphOptions(
            node_types=tuple(node_types) if node_types else GraphOptions().node_types,
            max_nodes=max_nodes or self.settings.graph_max_nodes,
            center_on=center_on,
            center_depth=self.settings.graph_center_depth,
        )
        return build_knowledge_graph(handle.result, options)

    def get_quick_health(self, source_name: str) -> Union[dict[str, Any], str]:
        """Headline health of the latest completed scan of a source."""
        self._source(source_name)
        with self._lock:
            completed = [
                h
                for h in self._scans.values()
                if h.source_name == source_name and h.result.status is ScanStatus.COMPLETE
            ]
        if not completed:
            return NO_SCAN_YET

        latest = max(completed, key=lambda h: h.result.completed_at or h.result.started_at)
        analysis = self.get_analysis(latest.scan_id)
        return {
            "score": analysis.health_score,
            "last_scan_at": (latest.result.completed_at or latest.result.started_at).isoformat(),
            "critical_issues": analysis.count(Severity.CRITICAL),
            "top_issue": _top_issue_title(analysis),
        }

    def _completed(self, scan_id: str) -> ScanHandle:
        handle = self._handle(scan_id)
        status = handle.result.status
        if status is not ScanStatus.COMPLETE:
            raise ScanNotReadyError(scan_id, status.value)
        return handle


def _top_issue_title(analysis: AnalysisResult) -> Optional[str]:
    for severity in (Severity.CRITICAL, Severity.WARNING, Severity.INFO):
        for issue in analysis.issues:
            if issue.severity is severity:
                return issue.title
    return None
