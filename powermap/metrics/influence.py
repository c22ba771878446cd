"""
powermap/metrics/influence.py — Composite influence score and key influencers.

The influence score blends four factors with weights from
PowerMapConfig.influence_weights (defaults 0.3 / 0.4 / 0.2 / 0.1):

    degree      incident relationships of the node (its ego-network degree)
    influence   the stakeholder's own influence level (1–5)
    strength    mean strength of incident relationships (2.0 with none)
    category    Individual 1.0, Organization 1.5, Household 0.8, else 1.0

score = Σ weight·factor, rounded to 2 decimals and clamped to [1, 5].
"""

import logging
from dataclasses import asdict, dataclass

import numpy as np

from powermap.config import DEFAULT_CONFIG, PowerMapConfig
from powermap.metrics.centrality import degree_centrality
from powermap.models import NetworkGraph

logger = logging.getLogger(__name__)


@dataclass
class KeyInfluencer:
    """One row of the key-influencer ranking."""
    contact_id: int
    name: str
    influence_score: float
    connections: int

    def to_dict(self) -> dict:
        return asdict(self)


def category_weight(category: str, config: PowerMapConfig = DEFAULT_CONFIG) -> float:
    return config.category_weights.get(category, config.default_category_weight)


def mean_incident_strength(
    graph: NetworkGraph,
    node_id: int,
    config: PowerMapConfig = DEFAULT_CONFIG,
) -> float:
    strengths = [e.strength for e in graph.incident_edges(node_id)]
    if not strengths:
        return config.default_mean_strength
    return float(np.mean(strengths))


def compute_influence_score(
    graph: NetworkGraph,
    node_id: int,
    config: PowerMapConfig = DEFAULT_CONFIG,
    degrees: dict[int, int] | None = None,
) -> float:
    """
    Composite influence score for one stakeholder.

    Args:
        graph:   Assembled NetworkGraph.
        node_id: Stakeholder id. Unknown ids score the floor value 1.0.
        config:  PowerMapConfig with weights and category table.
        degrees: Precomputed degree_centrality(graph), to avoid an O(E) pass
                 per node when ranking the whole graph.
    """
    node = graph.nodes.get(node_id)
    if node is None:
        return 1.0

    if degrees is None:
        degrees = degree_centrality(graph)

    w_degree, w_influence, w_strength, w_category = config.influence_weights
    score = (
        w_degree * degrees.get(node_id, 0)
        + w_influence * node.influence
        + w_strength * mean_incident_strength(graph, node_id, config)
        + w_category * category_weight(node.category, config)
    )
    return min(5.0, max(1.0, round(score, 2)))


def compute_influence_scores(
    graph: NetworkGraph,
    config: PowerMapConfig = DEFAULT_CONFIG,
) -> dict[int, float]:
    """Influence score for every node, keyed by id in node order."""
    degrees = degree_centrality(graph)
    return {
        node_id: compute_influence_score(graph, node_id, config, degrees)
        for node_id in graph.nodes
    }


def rank_key_influencers(
    graph: NetworkGraph,
    limit: int | None = None,
    config: PowerMapConfig = DEFAULT_CONFIG,
) -> list[KeyInfluencer]:
    """
    Top `limit` stakeholders by influence score, highest first.

    Ties keep graph node order (stable sort). Returns exactly
    min(len(graph.nodes), limit) entries; a non-positive limit returns [].
    """
    limit = config.key_influencer_limit if limit is None else limit
    if limit <= 0:
        return []

    degrees = degree_centrality(graph)
    scores = compute_influence_scores(graph, config)

    ranked = sorted(
        (
            KeyInfluencer(
                contact_id=node_id,
                name=graph.nodes[node_id].name,
                influence_score=score,
                connections=degrees.get(node_id, 0),
            )
            for node_id, score in scores.items()
        ),
        key=lambda k: k.influence_score,
        reverse=True,
    )
    logger.debug("Ranked %d stakeholders by influence score.", len(ranked))
    return ranked[:limit]
