"""
powermap/metrics/centrality.py — Degree, betweenness and closeness centrality.

Degree counts raw incident relationships (parallel edges count separately).
Betweenness and closeness run on the undirected simple-graph projection from
powermap.graph.builder.to_networkx().

Betweenness has two modes (PowerMapConfig.betweenness_method):

    "approximate"  A coarse bridging heuristic, NOT Brandes betweenness.
                   A node is credited with every ordered pair (s, t) of its
                   neighbours that has no direct edge: the 2-hop path through
                   the node beats the missing 1-hop link. Paths longer than
                   two hops are never considered, so values only reflect
                   local brokerage inside the node's ego network.

    "exact"        Brandes' algorithm via nx.betweenness_centrality
                   (unnormalized, so values count shortest-path pairs).
"""

import logging

import networkx as nx

from powermap.config import DEFAULT_CONFIG, PowerMapConfig
from powermap.graph.builder import to_networkx
from powermap.models import NetworkGraph

logger = logging.getLogger(__name__)


def degree_centrality(graph: NetworkGraph) -> dict[int, int]:
    """Number of incident relationships per node. O(V + E)."""
    degree = {node_id: 0 for node_id in graph.nodes}
    for rel in graph.edges:
        degree[rel.source] = degree.get(rel.source, 0) + 1
        degree[rel.target] = degree.get(rel.target, 0) + 1
    return degree


def approximate_betweenness(G: nx.Graph) -> dict[int, int]:
    """
    Local bridging count per node (see module docstring).

    For a node with k neighbours and m edges among them, the count is
    k·(k-1) - 2·m: every ordered neighbour pair minus the adjacent ones.
    """
    scores: dict[int, int] = {}
    for node in G.nodes:
        neighbours = [n for n in G.neighbors(node) if n != node]
        k = len(neighbours)
        if k < 2:
            scores[node] = 0
            continue
        linked = G.subgraph(neighbours).number_of_edges()
        scores[node] = k * (k - 1) - 2 * linked
    return scores


def exact_betweenness(G: nx.Graph) -> dict[int, float]:
    """Brandes betweenness (unnormalized), rounded to 4 decimals."""
    raw = nx.betweenness_centrality(G, normalized=False)
    return {node: round(float(value), 4) for node, value in raw.items()}


def betweenness_centrality(
    graph: NetworkGraph,
    config: PowerMapConfig = DEFAULT_CONFIG,
    G: nx.Graph | None = None,
) -> dict[int, int | float]:
    """Betweenness per node using the method selected in config."""
    G = G if G is not None else to_networkx(graph)
    if config.betweenness_method == "exact":
        return exact_betweenness(G)
    if config.betweenness_method != "approximate":
        logger.warning(
            "Unknown betweenness_method '%s'; using 'approximate'.",
            config.betweenness_method,
        )
    return approximate_betweenness(G)


def closeness_centrality(graph: NetworkGraph, G: nx.Graph | None = None) -> dict[int, float]:
    """Closeness per node (networkx, Wasserman-Faust scaling), 4 decimals."""
    G = G if G is not None else to_networkx(graph)
    return {node: round(float(v), 4) for node, v in nx.closeness_centrality(G).items()}


def compute_centrality_measures(
    graph: NetworkGraph,
    config: PowerMapConfig = DEFAULT_CONFIG,
) -> dict[int, dict[str, int | float]]:
    """
    All centrality measures for every node in one pass.

    Returns:
        {node_id: {"degree": int, "betweenness": int | float, "closeness": float}}
        Empty dict for an empty graph. Recomputed on every call.
    """
    if not graph.nodes:
        return {}

    G = to_networkx(graph)
    degree = degree_centrality(graph)
    betweenness = betweenness_centrality(graph, config, G)
    closeness = closeness_centrality(graph, G)

    measures = {
        node_id: {
            "degree": degree.get(node_id, 0),
            "betweenness": betweenness.get(node_id, 0),
            "closeness": closeness.get(node_id, 0.0),
        }
        for node_id in graph.nodes
    }
    logger.debug(
        "Centrality computed for %d nodes (betweenness=%s). Max degree: %d.",
        len(measures),
        config.betweenness_method,
        max(degree.values(), default=0),
    )
    return measures
