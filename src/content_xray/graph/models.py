"""Data models for the content knowledge graph.

Nodes are content entities (items, templates, media, renderings) plus
synthetic placeholder nodes. Edges are directed and typed; the node set is
closed, so every edge endpoint is a node of the same graph.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional

from ..exceptions import InvalidConfigError


class NodeType(str, Enum):
    ITEM = "item"
    TEMPLATE = "template"
    MEDIA = "media"
    RENDERING = "rendering"
    PLACEHOLDER = "placeholder"


class EdgeType(str, Enum):
    PARENT_OF = "parent-of"
    INSTANCE_OF = "instance-of"
    INHERITS = "inherits"
    USES_RENDERING = "uses-rendering"
    HAS_PLACEHOLDER = "has-placeholder"
    DATASOURCE = "datasource"
    REFERENCES = "references"
    USES_MEDIA = "uses-media"


# Higher survives eviction first
NODE_PRIORITY = {
    NodeType.ITEM: 5,
    NodeType.TEMPLATE: 4,
    NodeType.RENDERING: 3,
    NodeType.MEDIA: 2,
    NodeType.PLACEHOLDER: 1,
}


@dataclass(frozen=True)
class GraphNode:
    id: str
    type: NodeType
    label: str
    path: Optional[str] = None
    metadata: dict[str, Any] = field(default_factory=dict, compare=False, hash=False)


@dataclass(frozen=True)
class GraphEdge:
    source: str
    target: str
    type: EdgeType
    metadata: dict[str, Any] = field(default_factory=dict, compare=False, hash=False)

    @property
    def key(self) -> tuple[str, str, EdgeType]:
        return (self.source, self.target, self.type)


@dataclass
class GraphStats:
    node_count: int = 0
    edge_count: int = 0
    nodes_by_type: dict[str, int] = field(default_factory=dict)
    edges_by_type: dict[str, int] = field(default_factory=dict)


@dataclass
class KnowledgeGraph:
    scan_id: str
    generated_at: datetime
    nodes: list[GraphNode] = field(default_factory=list)
    edges: list[GraphEdge] = field(default_factory=list)
    stats: GraphStats = field(default_factory=GraphStats)

    def node(self, node_id: str) -> Optional[GraphNode]:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None


@dataclass(frozen=True)
class GraphOptions:
    """What to project and how much of it."""

    node_types: tuple[NodeType, ...] = tuple(NodeType)
    max_nodes: int = 1000
    center_on: Optional[str] = None
    center_depth: int = 3
    include_edges: bool = True

    def __post_init__(self) -> None:
        # Accept plain strings ("item") as well as NodeType members
        try:
            node_types = tuple(NodeType(t) for t in self.node_types)
        except ValueError:
            raise InvalidConfigError(
                "node_types",
                list(self.node_types),
                f"must be drawn from {[t.value for t in NodeType]}",
            )
        object.__setattr__(self, "node_types", node_types)
        if self.max_nodes < 1:
            raise InvalidConfigError("max_nodes", self.max_nodes, "must be >= 1")
        if self.center_depth < 0:
            raise InvalidConfigError("center_depth", self.center_depth, "must be >= 0")
