"""
powermap/config.py — All tunable parameters for the stakeholder power map.

Attribute names, defaults, classification thresholds and scoring weights live
here so that calibration changes are a single-file diff. No metric module
hardcodes a threshold.
"""

from dataclasses import dataclass, field


def _default_category_weights() -> dict[str, float]:
    return {
        "Individual": 1.0,
        "Organization": 1.5,
        "Household": 0.8,
    }


@dataclass(frozen=True)
class PowerMapConfig:
    """
    Immutable configuration for graph assembly and network analytics.

    Override by constructing a new PowerMapConfig with the desired values.
    """

    # ── Attribute names (logical names resolved through the store schema) ────
    influence_attribute: str = "influence_level"
    support_attribute: str = "support_level"
    strength_attribute: str = "relationship_strength"
    notes_attribute: str = "powermap_notes"

    # ── Attribute defaults ────────────────────────────────────────────────────
    default_influence_level: int = 1
    default_support_level: int = 1
    default_strength_level: int = 1
    # All three ratings default to the bottom of their scale when unset.

    # ── Assembly ──────────────────────────────────────────────────────────────
    fallback_entity_id: int = 1
    # Base id set used when neither ids nor a group are given, or when the
    # group lookup fails or is empty.

    contact_limit: int = 1000
    # Maximum stakeholder records requested from the store per fetch.

    default_relationship_label: str = "Related to"

    # ── Statistics thresholds ─────────────────────────────────────────────────
    high_influence_min: int = 4
    supporter_min: int = 4
    opposition_max: int = 2
    strong_strength_min: int = 3

    # ── Influence score ───────────────────────────────────────────────────────
    influence_weights: tuple[float, float, float, float] = (0.3, 0.4, 0.2, 0.1)
    # (degree, influence attribute, mean incident strength, category weight)

    category_weights: dict[str, float] = field(default_factory=_default_category_weights)
    default_category_weight: float = 1.0
    default_mean_strength: float = 2.0
    # Mean incident edge strength assumed for nodes without edges.

    key_influencer_limit: int = 10

    # ── Algorithm selection ───────────────────────────────────────────────────
    betweenness_method: str = "approximate"
    # "approximate": coarse neighbour-pair bridging count (legacy behaviour).
    # "exact":       Brandes' algorithm via networkx (unnormalized).

    community_method: str = "components"
    # "components": connected components (legacy behaviour).
    # "louvain":    modularity-optimized partition via networkx.

    community_seed: int = 41
    # Seed for Louvain so repeated runs yield the same partition.


# Singleton default — import this everywhere instead of constructing anew.
DEFAULT_CONFIG = PowerMapConfig()
