"""Tests for graph/builder.py - full and centered projections, size limits."""

import logging

import pytest

from content_xray.exceptions import InvalidConfigError
from content_xray.graph import (
    EdgeType,
    GraphOptions,
    NodeType,
    build_knowledge_graph,
)
from content_xray.source import InMemoryContentSource, SourceItem


def node_ids(graph):
    return {node.id for node in graph.nodes}


def assert_closed(graph):
    ids = node_ids(graph)
    for edge in graph.edges:
        assert edge.source in ids
        assert edge.target in ids


@pytest.fixture
def large_scan(guid, run_scan):
    """20 sections with 99 pages each: 2000 items."""
    items = []
    for s in range(20):
        items.append(SourceItem(guid(20_000 + s), f"s{s}", f"/content/s{s}"))
        for p in range(99):
            n = 30_000 + s * 100 + p
            items.append(SourceItem(guid(n), f"p{p}", f"/content/s{s}/p{p}"))
    return run_scan(InMemoryContentSource(items=items, name="large"))


class TestFullGraph:
    def test_every_entity_becomes_a_node(self, sample_scan):
        graph = build_knowledge_graph(sample_scan)

        assert graph.stats.node_count == 17
        assert graph.stats.nodes_by_type == {
            "item": 7,
            "template": 5,
            "media": 2,
            "rendering": 2,
            "placeholder": 1,
        }
        assert graph.node("ph:main").type is NodeType.PLACEHOLDER
        assert graph.scan_id == sample_scan.scan_id

    def test_edges_by_type(self, sample_scan):
        graph = build_knowledge_graph(sample_scan)

        assert graph.stats.edge_count == 18
        assert graph.stats.edges_by_type == {
            "parent-of": 5,
            "instance-of": 7,
            "inherits": 1,
            "uses-rendering": 1,
            "has-placeholder": 1,
            "datasource": 1,
            "references": 1,
            "uses-media": 1,
        }
        assert_closed(graph)

    def test_specific_edges(self, sample_scan, site):
        graph = build_knowledge_graph(sample_scan)
        keys = {edge.key for edge in graph.edges}

        assert (site.home, site.about, EdgeType.PARENT_OF) in keys
        assert (site.t_page, site.t_base, EdgeType.INHERITS) in keys
        assert (site.home, site.about, EdgeType.REFERENCES) in keys
        assert (site.about, site.m_logo, EdgeType.USES_MEDIA) in keys
        assert (site.r_hero, "ph:main", EdgeType.HAS_PLACEHOLDER) in keys

        datasource = [e for e in graph.edges if e.type is EdgeType.DATASOURCE][0]
        assert (datasource.source, datasource.target) == (site.r_hero, site.promo)
        assert datasource.metadata == {"page_id": site.home}

    def test_edges_are_unique(self, sample_scan):
        graph = build_knowledge_graph(sample_scan)
        keys = [edge.key for edge in graph.edges]
        assert len(keys) == len(set(keys))

    def test_node_type_filter(self, sample_scan):
        graph = build_knowledge_graph(sample_scan, GraphOptions(node_types=("item",)))

        assert graph.stats.node_count == 7
        assert {e.type for e in graph.edges} == {EdgeType.PARENT_OF, EdgeType.REFERENCES}
        assert_closed(graph)

    def test_without_edges(self, sample_scan):
        graph = build_knowledge_graph(sample_scan, GraphOptions(include_edges=False))
        assert graph.stats.node_count == 17
        assert graph.edges == []
        assert graph.stats.edge_count == 0

    def test_does_not_mutate_scan(self, sample_scan):
        before = dict(sample_scan.children_map)
        build_knowledge_graph(sample_scan)
        assert sample_scan.children_map == before


class TestSizeLimit:
    def test_large_scan_trimmed_to_max_nodes(self, large_scan):
        assert len(large_scan.items) == 2000
        graph = build_knowledge_graph(large_scan, GraphOptions(max_nodes=100))

        assert len(graph.nodes) == 100
        assert graph.stats.node_count == 100
        assert_closed(graph)

    def test_high_degree_nodes_survive(self, large_scan, guid):
        graph = build_knowledge_graph(large_scan, GraphOptions(max_nodes=100))
        # Section nodes have 99 children each
        for s in range(20):
            assert graph.node(guid(20_000 + s)) is not None

    def test_items_outrank_other_types(self, sample_scan):
        graph = build_knowledge_graph(sample_scan, GraphOptions(max_nodes=7))
        assert {n.type for n in graph.nodes} == {NodeType.ITEM}

    def test_trim_keeps_insertion_order(self, sample_scan):
        full = build_knowledge_graph(sample_scan)
        trimmed = build_knowledge_graph(sample_scan, GraphOptions(max_nodes=10))
        full_order = [n.id for n in full.nodes]
        trimmed_order = [n.id for n in trimmed.nodes]
        assert trimmed_order == [i for i in full_order if i in set(trimmed_order)]


class TestCenteredGraph:
    def test_centered_on_item(self, sample_scan, site):
        graph = build_knowledge_graph(sample_scan, GraphOptions(center_on=site.article))

        assert node_ids(graph) == {
            site.article,
            site.news,
            site.home,
            site.about,
            site.empty,
            site.promo,
            site.r_hero,
            "ph:main",
            site.m_logo,
            site.t_page,
            site.t_folder,
            site.t_promo,
        }
        assert site.data not in node_ids(graph)
        assert_closed(graph)

    def test_center_id_matched_case_insensitively(self, sample_scan, site, braced):
        options = GraphOptions(center_on=braced(site.article).lower(), center_depth=0)
        graph = build_knowledge_graph(sample_scan, options)
        assert node_ids(graph) == {site.article, site.t_page}
        assert [e.type for e in graph.edges] == [EdgeType.INSTANCE_OF]

    def test_centered_on_rendering(self, sample_scan, site):
        options = GraphOptions(center_on=site.r_hero, center_depth=1)
        graph = build_knowledge_graph(sample_scan, options)

        assert node_ids(graph) == {site.r_hero, site.home, site.t_page, "ph:main"}
        assert_closed(graph)

    def test_centered_on_unused_template(self, sample_scan, site):
        graph = build_knowledge_graph(sample_scan, GraphOptions(center_on=site.t_unused))
        assert node_ids(graph) == {site.t_unused}
        assert graph.edges == []

    def test_centered_on_media(self, sample_scan, site):
        graph = build_knowledge_graph(sample_scan, GraphOptions(center_on=site.m_logo))
        assert node_ids(graph) == {site.m_logo}

    def test_centered_respects_budget(self, sample_scan, site):
        graph = build_knowledge_graph(
            sample_scan, GraphOptions(center_on=site.article, max_nodes=3)
        )
        assert len(graph.nodes) <= 3
        assert site.article in node_ids(graph)
        assert_closed(graph)

    def test_unknown_center_gives_empty_graph(self, sample_scan, caplog, guid):
        with caplog.at_level(logging.WARNING):
            graph = build_knowledge_graph(sample_scan, GraphOptions(center_on=guid(4242)))

        assert graph.nodes == []
        assert graph.edges == []
        assert graph.stats.node_count == 0
        assert "XR300" in caplog.text


class TestGraphOptions:
    def test_strings_coerced_to_node_types(self):
        options = GraphOptions(node_types=["item", "media"])
        assert options.node_types == (NodeType.ITEM, NodeType.MEDIA)

    def test_unknown_node_type_rejected(self):
        with pytest.raises(InvalidConfigError):
            GraphOptions(node_types=("widget",))

    def test_max_nodes_must_be_positive(self):
        with pytest.raises(InvalidConfigError):
            GraphOptions(max_nodes=0)
