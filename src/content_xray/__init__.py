"""
Content X-Ray - audit and knowledge-graph engine for hierarchical content trees

Crawls a content tree through a pluggable content source into a compact
index, deep-inspects the pages that matter, runs twelve data-quality
detectors, scores the result and projects it into a size-limited
relationship graph.
"""

__version__ = "0.1.0"

from .analysis import AnalysisResult, Analyzer, Issue, IssueCategory, Severity, analyze_scan
from .config import ScanConfig, ThresholdConfig, XRaySettings, load_settings
from .graph import GraphOptions, KnowledgeGraph, build_knowledge_graph
from .reports import Report, generate_report, generate_summary
from .scanning import ScanOrchestrator, ScanResult, ScanStatus, run_scan
from .service import XRayService
from .source import ContentSource, InMemoryContentSource

__all__ = [
    "XRayService",  # Main entry point (scan registry)
    "ScanOrchestrator",  # Direct scan access
    "run_scan",
    "Analyzer",
    "analyze_scan",
    "build_knowledge_graph",
    "generate_report",
    "generate_summary",
    "ContentSource",
    "InMemoryContentSource",
    "ScanConfig",
    "ThresholdConfig",
    "XRaySettings",
    "load_settings",
    "AnalysisResult",
    "GraphOptions",
    "Issue",
    "IssueCategory",
    "KnowledgeGraph",
    "Report",
    "ScanResult",
    "ScanStatus",
    "Severity",
]
