"""
powermap/tests/test_statistics.py — Tests for the Network Statistics Calculator.

Tests verify:
- Band counts (high influence, supporters, opposition, neutral) on the
  sample network.
- Means rounded to 2 decimals, density as a percentage rounded to 1 decimal.
- Empty and single-node graphs produce zeros, never a division error.
- Density is capped at 100 when parallel edges outnumber node pairs.
- Thresholds come from PowerMapConfig.
"""

import pytest

from powermap.config import PowerMapConfig
from powermap.graph.builder import assemble_network
from powermap.metrics.statistics import compute_network_stats, network_density
from powermap.models import FilterCriteria, NetworkGraph


def test_sample_network_stats(sample_store):
    graph = assemble_network(sample_store, FilterCriteria(group_id=10))
    stats = compute_network_stats(graph)
    assert stats == {
        "total": 7,
        "high_influence": 3,
        "supporters": 3,
        "opposition": 3,
        "neutral": 1,
        "avg_influence": 3.0,
        "avg_support": 2.86,
        "network_density": 23.8,
        "total_relationships": 5,
        "strong_relationships": 3,
    }


def test_counts_partition_the_nodes(sample_store):
    stats = compute_network_stats(assemble_network(sample_store, FilterCriteria(group_id=10)))
    assert stats["supporters"] + stats["opposition"] + stats["neutral"] == stats["total"]


def test_empty_graph():
    stats = compute_network_stats(NetworkGraph())
    assert stats["total"] == 0
    assert stats["avg_influence"] == 0.0
    assert stats["avg_support"] == 0.0
    assert stats["network_density"] == 0.0
    assert stats["strong_relationships"] == 0


def test_single_node_density_is_zero(make_graph):
    stats = compute_network_stats(make_graph([(1, 5)], []))
    assert stats["total"] == 1
    assert stats["network_density"] == 0.0
    assert stats["avg_influence"] == 5.0


def test_complete_pair_density(make_graph):
    stats = compute_network_stats(make_graph([("A", 5), ("B", 3)], [("A", "B", 2)]))
    assert stats["network_density"] == 100.0
    assert stats["strong_relationships"] == 0


def test_density_capped_with_parallel_edges(make_graph):
    graph = make_graph([(1, 3), (2, 3)], [(1, 2), (1, 2), (2, 1)])
    assert network_density(2, 3) == pytest.approx(3.0)
    assert compute_network_stats(graph)["network_density"] == 100.0


def test_network_density_fraction():
    assert network_density(0, 0) == 0.0
    assert network_density(1, 0) == 0.0
    assert network_density(4, 3) == pytest.approx(0.5)


def test_thresholds_from_config(make_graph):
    graph = make_graph([(1, 3), (2, 5)], [(1, 2, 2)])
    relaxed = PowerMapConfig(high_influence_min=3, strong_strength_min=2)
    assert compute_network_stats(graph)["high_influence"] == 1
    assert compute_network_stats(graph, relaxed)["high_influence"] == 2
    assert compute_network_stats(graph, relaxed)["strong_relationships"] == 1


def test_stats_are_deterministic(sample_store):
    graph = assemble_network(sample_store, FilterCriteria(group_id=10))
    assert compute_network_stats(graph) == compute_network_stats(graph)
