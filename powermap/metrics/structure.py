"""
powermap/metrics/structure.py — Paths, clustering, diameter and communities.

All functions operate on the undirected simple-graph projection of an
assembled NetworkGraph (parallel relationships merged, uniform edge weight 1).

Known simplifications, kept for compatibility with the dashboard:
    - network_diameter() ignores disconnected pairs. On a disconnected graph
      it reports the largest component diameter, which understates the true
      (infinite) diameter.
    - detect_communities() defaults to connected components, not a
      modularity partition. community_method="louvain" opts into Louvain.
"""

import logging
from typing import Any

import networkx as nx

from powermap.config import DEFAULT_CONFIG, PowerMapConfig
from powermap.graph.builder import to_networkx
from powermap.metrics.statistics import network_density
from powermap.models import NetworkGraph

logger = logging.getLogger(__name__)


def _as_nx(graph: NetworkGraph | nx.Graph) -> nx.Graph:
    return graph if isinstance(graph, nx.Graph) else to_networkx(graph)


def shortest_path(
    graph: NetworkGraph | nx.Graph,
    source: int,
    target: int,
) -> list[int]:
    """
    Node ids from source to target inclusive along a shortest path.

    Dijkstra with every edge weighing 1. Returns [source] when source ==
    target and the node exists, and [] when either endpoint is missing or
    target is unreachable.
    """
    G = _as_nx(graph)
    if source not in G or target not in G:
        return []
    try:
        return list(nx.dijkstra_path(G, source, target))
    except nx.NetworkXNoPath:
        return []


def clustering_coefficients(graph: NetworkGraph | nx.Graph) -> dict[int, float]:
    """
    Local clustering coefficient for every node with at least 2 neighbours.

    Nodes with fewer than 2 neighbours are omitted rather than scored 0.
    Each value is in [0, 1].
    """
    G = _as_nx(graph)
    eligible = [n for n in G.nodes if G.degree(n) >= 2]
    if not eligible:
        return {}
    return {node: float(c) for node, c in nx.clustering(G, eligible).items()}


def average_clustering(graph: NetworkGraph | nx.Graph) -> float:
    """Mean of clustering_coefficients(); 0.0 when no node qualifies."""
    coefficients = clustering_coefficients(graph)
    if not coefficients:
        return 0.0
    return sum(coefficients.values()) / len(coefficients)


def network_diameter(graph: NetworkGraph | nx.Graph) -> int:
    """
    Longest shortest-path edge count over all connected node pairs.

    Pairs with no path are skipped, so the result is the maximum diameter of
    any connected component (0 for graphs without edges).
    """
    G = _as_nx(graph)
    diameter = 0
    for component in nx.connected_components(G):
        if len(component) < 2:
            continue
        diameter = max(diameter, nx.diameter(G.subgraph(component)))
    return diameter


def detect_communities(
    graph: NetworkGraph | nx.Graph,
    config: PowerMapConfig = DEFAULT_CONFIG,
) -> list[list[int]]:
    """
    Partition the nodes into communities.

    "components" (default): depth-first traversal from each unvisited node in
    node order; each traversal yields one community in visit order. Isolated
    stakeholders form singleton communities.

    "louvain": nx.community.louvain_communities seeded with
    config.community_seed; each community is sorted, communities are ordered
    by size (largest first).
    """
    G = _as_nx(graph)

    if config.community_method == "louvain":
        if G.number_of_edges() == 0:
            return [[n] for n in G.nodes]
        parts = nx.community.louvain_communities(G, seed=config.community_seed)
        return sorted((sorted(p) for p in parts), key=len, reverse=True)

    if config.community_method != "components":
        logger.warning(
            "Unknown community_method '%s'; using connected components.",
            config.community_method,
        )

    visited: set = set()
    communities: list[list[int]] = []
    for node in G.nodes:
        if node in visited:
            continue
        community = list(nx.dfs_preorder_nodes(G, node))
        visited.update(community)
        communities.append(community)
    return communities


def compute_network_statistics(
    graph: NetworkGraph,
    config: PowerMapConfig = DEFAULT_CONFIG,
) -> dict[str, Any]:
    """
    Structural statistics for the analysis bundle.

    Returns:
        Dict with total_nodes, total_edges, density (fraction, 4 decimals),
        average_degree (2|E|/|V|), clustering_coefficient (4 decimals),
        diameter, community_count and communities.
    """
    G = to_networkx(graph)
    node_count = graph.node_count
    edge_count = graph.edge_count
    communities = detect_communities(G, config)

    stats = {
        "total_nodes": node_count,
        "total_edges": edge_count,
        "density": round(network_density(node_count, edge_count), 4),
        "average_degree": round(2 * edge_count / node_count, 4) if node_count else 0.0,
        "clustering_coefficient": round(average_clustering(G), 4),
        "diameter": network_diameter(G),
        "community_count": len(communities),
        "communities": communities,
    }
    logger.debug(
        "Structure: %d nodes, %d edges, diameter %d, %d communities.",
        node_count,
        edge_count,
        stats["diameter"],
        len(communities),
    )
    return stats
