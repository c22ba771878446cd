"""
powermap/metrics/statistics.py — Network Statistics Calculator.

Dashboard summary of an assembled graph: stakeholder counts by influence and
support band, mean ratings, density and strong-relationship count. Pure
function of the graph; calling it twice on the same graph gives the same dict.
"""

import logging

import numpy as np

from powermap.config import DEFAULT_CONFIG, PowerMapConfig
from powermap.models import NetworkGraph

logger = logging.getLogger(__name__)


def network_density(node_count: int, edge_count: int) -> float:
    """|E| / (|V|·(|V|-1)/2) as a fraction, 0.0 when |V| < 2."""
    if node_count < 2:
        return 0.0
    return edge_count / (node_count * (node_count - 1) / 2)


def compute_network_stats(
    graph: NetworkGraph,
    config: PowerMapConfig = DEFAULT_CONFIG,
) -> dict[str, int | float]:
    """
    Summary statistics for the network dashboard.

    Returns:
        Dict with keys:
            total                 node count
            high_influence        influence >= config.high_influence_min
            supporters            support >= config.supporter_min
            opposition            support <= config.opposition_max
            neutral               total - supporters - opposition
            avg_influence         mean influence, 2 decimals (0 when empty)
            avg_support           mean support, 2 decimals (0 when empty)
            network_density       density as a percentage, 1 decimal
            total_relationships   edge count
            strong_relationships  edges with strength >= config.strong_strength_min

    Notes:
        Density counts raw edges, so parallel relationships between the same
        pair can push it above 100 in principle. It is capped at 100.
    """
    nodes = list(graph.nodes.values())
    total = len(nodes)

    influence = np.array([n.influence for n in nodes], dtype=float)
    support = np.array([n.support for n in nodes], dtype=float)

    supporters = int((support >= config.supporter_min).sum())
    opposition = int((support <= config.opposition_max).sum())

    density_pct = min(100.0, network_density(total, graph.edge_count) * 100.0)

    stats = {
        "total": total,
        "high_influence": int((influence >= config.high_influence_min).sum()),
        "supporters": supporters,
        "opposition": opposition,
        "neutral": total - supporters - opposition,
        "avg_influence": round(float(influence.mean()), 2) if total else 0.0,
        "avg_support": round(float(support.mean()), 2) if total else 0.0,
        "network_density": round(density_pct, 1),
        "total_relationships": graph.edge_count,
        "strong_relationships": sum(
            1 for e in graph.edges if e.strength >= config.strong_strength_min
        ),
    }
    logger.debug("Network stats: %s", stats)
    return stats
