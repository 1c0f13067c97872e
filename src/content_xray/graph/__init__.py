"""Knowledge-graph projection of scan results."""

from .builder import GraphBuilder, build_knowledge_graph, compute_graph_stats
from .models import (
    EdgeType,
    GraphEdge,
    GraphNode,
    GraphOptions,
    GraphStats,
    KnowledgeGraph,
    NodeType,
)

__all__ = [
    "EdgeType",
    "GraphBuilder",
    "GraphEdge",
    "GraphNode",
    "GraphOptions",
    "GraphStats",
    "KnowledgeGraph",
    "NodeType",
    "build_knowledge_graph",
    "compute_graph_stats",
]
