"""Project a finished scan into a size-limited knowledge graph.

Two modes:

- full: every entity of the requested node types, with all known edges
- centered: bounded BFS from one focal entity (item, template, rendering or
  media) out to ``center_depth`` hops, stopping once the node budget is hit

Either way the result is de-duplicated, trimmed to ``max_nodes`` by type
priority then degree, and closed: edges with a missing endpoint are dropped.
"""

from __future__ import annotations

from collections import Counter, deque
from typing import Any, Optional

from ..exceptions import ErrorCode
from ..logging_config import get_logger
from ..references import ReferenceResolver, build_id_index, canonical_id
from ..scanning.models import IndexedItem, ScanResult, utc_now
from .models import (
    NODE_PRIORITY,
    EdgeType,
    GraphEdge,
    GraphNode,
    GraphOptions,
    GraphStats,
    KnowledgeGraph,
    NodeType,
)

logger = get_logger(__name__)

PLACEHOLDER_PREFIX = "ph:"


class GraphBuilder:
    """Builds one KnowledgeGraph from one ScanResult. Never mutates the scan."""

    def __init__(self, scan: ScanResult, options: Optional[GraphOptions] = None) -> None:
        self.scan = scan
        self.options = options or GraphOptions()
        self.resolver = ReferenceResolver(scan.items, scan.media, scan.templates)
        self.renderings = build_id_index(scan.renderings)
        self._nodes: dict[str, GraphNode] = {}
        self._edges: dict[tuple[str, str, EdgeType], GraphEdge] = {}

    def build(self) -> KnowledgeGraph:
        if self.options.center_on:
            self._build_centered(self.options.center_on)
        else:
            self._build_full()

        nodes = self._limit_nodes(list(self._nodes.values()))
        kept = {node.id for node in nodes}
        edges = [e for e in self._edges.values() if e.source in kept and e.target in kept]
        if not self.options.include_edges:
            edges = []

        return KnowledgeGraph(
            scan_id=self.scan.scan_id,
            generated_at=utc_now(),
            nodes=nodes,
            edges=edges,
            stats=compute_graph_stats(nodes, edges),
        )

    # ── Full mode ──────────────────────────────────────────────────

    def _build_full(self) -> None:
        scan = self.scan

        for item in scan.items.values():
            self._add_item(item)
            if item.parent_id in scan.items:
                self._add_edge(item.parent_id, item.id, EdgeType.PARENT_OF)
            template_id = self.resolver.template(item.template_id)
            if template_id:
                self._add_edge(item.id, template_id, EdgeType.INSTANCE_OF)

        for template in scan.templates.values():
            self._add_template(template.id)
            for base_id in template.base_template_ids:
                stored = self.resolver.template(base_id)
                if stored:
                    self._add_edge(template.id, stored, EdgeType.INHERITS)

        for media_id in scan.media:
            self._add_media(media_id)

        for rendering_id in scan.renderings:
            self._add_rendering(rendering_id)

        for page_id in scan.deep_data:
            self._add_layout(page_id)
            self._add_references(page_id)

    # ── Centered mode ──────────────────────────────────────────────

    def _build_centered(self, center_on: str) -> None:
        kind, focal = self._locate(center_on)
        if focal is None:
            logger.warning(f"[{ErrorCode.XR300.value}] Graph focal entity not found: {center_on}")
            return

        max_depth = self.options.center_depth
        budget = self.options.max_nodes
        queue: deque[tuple[str, str, int]] = deque([(kind, focal, 0)])
        visited: set[str] = set()

        while queue and len(self._nodes) < budget:
            kind, entity_id, depth = queue.popleft()
            if entity_id in visited:
                continue
            visited.add(entity_id)
            expand = depth < max_depth

            if kind == "item":
                neighbors = self._expand_item(entity_id)
            elif kind == "template":
                neighbors = self._expand_template(entity_id)
            elif kind == "rendering":
                self._add_rendering(entity_id)
                neighbors = [("item", page) for page in self._pages_using(entity_id)]
            else:
                self._add_media(entity_id)
                neighbors = []

            if expand:
                for next_kind, next_id in neighbors:
                    if next_id not in visited:
                        queue.append((next_kind, next_id, depth + 1))

    def _locate(self, raw: str) -> tuple[str, Optional[str]]:
        stored = self.resolver.item(raw)
        if stored:
            return "item", stored
        stored = self.resolver.template(raw)
        if stored:
            return "template", stored
        stored = self.renderings.get(canonical_id(raw))
        if stored:
            return "rendering", stored
        stored = self.resolver.media_id(raw)
        if stored:
            return "media", stored
        return "", None

    def _expand_item(self, item_id: str) -> list[tuple[str, str]]:
        """Add an item's node and edges; return its neighbors for the BFS."""
        scan = self.scan
        item = scan.items[item_id]
        self._add_item(item)
        neighbors: list[tuple[str, str]] = []

        template_id = self.resolver.template(item.template_id)
        if template_id:
            self._add_template(template_id)
            self._add_edge(item_id, template_id, EdgeType.INSTANCE_OF)

        if item.parent_id in scan.items:
            self._add_edge(item.parent_id, item_id, EdgeType.PARENT_OF)
            neighbors.append(("item", item.parent_id))

        for child_id in scan.children_map.get(item_id, []):
            self._add_edge(item_id, child_id, EdgeType.PARENT_OF)
            neighbors.append(("item", child_id))

        neighbors.extend(("item", ds) for ds in self._add_layout(item_id))
        neighbors.extend(("item", ref) for ref in self._add_references(item_id))
        return neighbors

    def _expand_template(self, template_id: str) -> list[tuple[str, str]]:
        self._add_template(template_id)
        neighbors: list[tuple[str, str]] = []

        template = self.scan.templates[template_id]
        for base_id in template.base_template_ids:
            stored = self.resolver.template(base_id)
            if stored:
                self._add_edge(template_id, stored, EdgeType.INHERITS)
                neighbors.append(("template", stored))

        for tid, usage in self.scan.template_usage.items():
            if self.resolver.template(tid) != template_id:
                continue
            for item_id in usage:
                self._add_edge(item_id, template_id, EdgeType.INSTANCE_OF)
                neighbors.append(("item", item_id))
        return neighbors

    def _pages_using(self, rendering_id: str) -> list[str]:
        pages: list[str] = []
        for rid, usage in self.scan.rendering_usage.items():
            if self.renderings.get(canonical_id(rid)) == rendering_id:
                pages.extend(p for p in usage if p not in pages)
        for page in pages:
            self._add_edge(page, rendering_id, EdgeType.USES_RENDERING)
        return pages

    # ── Shared edge derivation ─────────────────────────────────────

    def _add_layout(self, page_id: str) -> list[str]:
        """Add rendering, placeholder and data-source edges for a page.

        Returns the data-source item ids found.
        """
        deep = self.scan.deep_data.get(page_id)
        if deep is None:
            return []

        data_sources: list[str] = []
        for placed in deep.renderings:
            rendering_id = self.renderings.get(canonical_id(placed.rendering_id))
            if rendering_id is None:
                continue
            self._add_rendering(rendering_id)
            self._add_edge(page_id, rendering_id, EdgeType.USES_RENDERING)

            if placed.placeholder:
                placeholder_id = f"{PLACEHOLDER_PREFIX}{placed.placeholder}"
                self._add_node(
                    GraphNode(
                        id=placeholder_id,
                        type=NodeType.PLACEHOLDER,
                        label=placed.placeholder,
                    )
                )
                self._add_edge(rendering_id, placeholder_id, EdgeType.HAS_PLACEHOLDER)

            data_source = self.resolver.item(placed.data_source_id)
            if data_source:
                self._add_edge(rendering_id, data_source, EdgeType.DATASOURCE, page_id=page_id)
                data_sources.append(data_source)

        return data_sources

    def _add_references(self, item_id: str) -> list[str]:
        """Add reference and media-usage edges; return referenced item ids."""
        deep = self.scan.deep_data.get(item_id)
        if deep is None:
            return []

        referenced: list[str] = []
        for _guid, stored, kind in self.resolver.references(deep.field_values()):
            if kind == "item" and stored != item_id:
                self._add_edge(item_id, stored, EdgeType.REFERENCES)
                referenced.append(stored)
            elif kind == "media":
                self._add_media(stored)
                self._add_edge(item_id, stored, EdgeType.USES_MEDIA)
        return referenced

    # ── Node and edge registration ─────────────────────────────────

    def _add_item(self, item: IndexedItem) -> None:
        self._add_node(
            GraphNode(
                id=item.id,
                type=NodeType.ITEM,
                label=item.name,
                path=item.path,
                metadata={"template_name": item.template_name},
            )
        )

    def _add_template(self, template_id: str) -> None:
        template = self.scan.templates[template_id]
        self._add_node(
            GraphNode(id=template.id, type=NodeType.TEMPLATE, label=template.name, path=template.path)
        )

    def _add_media(self, media_id: str) -> None:
        media = self.scan.media[media_id]
        self._add_node(
            GraphNode(
                id=media.id,
                type=NodeType.MEDIA,
                label=media.name,
                path=media.path,
                metadata={"size_bytes": media.size_bytes, "extension": media.extension},
            )
        )

    def _add_rendering(self, rendering_id: str) -> None:
        rendering = self.scan.renderings[rendering_id]
        self._add_node(
            GraphNode(
                id=rendering.id,
                type=NodeType.RENDERING,
                label=rendering.name,
                path=rendering.path,
            )
        )

    def _add_node(self, node: GraphNode) -> None:
        if node.type in self.options.node_types:
            self._nodes.setdefault(node.id, node)

    def _add_edge(self, source: str, target: str, edge_type: EdgeType, **metadata: Any) -> None:
        key = (source, target, edge_type)
        if key not in self._edges:
            self._edges[key] = GraphEdge(source, target, edge_type, metadata)

    # ── Size limiting ──────────────────────────────────────────────

    def _limit_nodes(self, nodes: list[GraphNode]) -> list[GraphNode]:
        limit = self.options.max_nodes
        if len(nodes) <= limit:
            return nodes

        present = {node.id for node in nodes}
        degree: Counter[str] = Counter()
        for edge in self._edges.values():
            if edge.source in present and edge.target in present:
                degree[edge.source] += 1
                degree[edge.target] += 1

        ranked = sorted(nodes, key=lambda n: (-NODE_PRIORITY[n.type], -degree[n.id]))
        kept = {node.id for node in ranked[:limit]}
        logger.debug(f"Graph trimmed from {len(nodes)} to {limit} nodes")
        return [node for node in nodes if node.id in kept]


def compute_graph_stats(nodes: list[GraphNode], edges: list[GraphEdge]) -> GraphStats:
    nodes_by_type = {t.value: 0 for t in NodeType}
    for node in nodes:
        nodes_by_type[node.type.value] += 1
    edges_by_type = {t.value: 0 for t in EdgeType}
    for edge in edges:
        edges_by_type[edge.type.value] += 1
    return GraphStats(
        node_count=len(nodes),
        edge_count=len(edges),
        nodes_by_type=nodes_by_type,
        edges_by_type=edges_by_type,
    )


def build_knowledge_graph(scan: ScanResult, options: Optional[GraphOptions] = None) -> KnowledgeGraph:
    """Build a knowledge graph for a scan."""
    return GraphBuilder(scan, options).build()
