"""
powermap/pipeline.py — Entry points consumed by the presentation layer.

    get_network_data(store, params)      graph + dashboard stats + metadata
    get_network_analysis(store, params)  network data + centrality, key
                                         influencers and structural statistics
    export_network_rows(store, params)   spreadsheet rows for CSV download
    validate_network(store)              data-quality report
    list_relationship_types(store)       active relationship types

Every entry point returns a complete, well-formed payload. Store failures
degrade to documented fallbacks (demo graph, empty metric sections) and are
logged, never raised. Serialization (JSON, CSV text) is left to the caller.

Usage:
    from powermap.pipeline import get_network_analysis
    result = get_network_analysis(store, {"group_id": 4, "influence_min": 3})
"""

import logging
from datetime import datetime
from typing import Any, Callable, Mapping, TypeVar

from powermap.config import DEFAULT_CONFIG, PowerMapConfig
from powermap.graph.attributes import AttributeResolver
from powermap.graph.builder import assemble_network
from powermap.metrics.centrality import compute_centrality_measures
from powermap.metrics.influence import rank_key_influencers
from powermap.metrics.statistics import compute_network_stats
from powermap.metrics.structure import compute_network_statistics
from powermap.metrics.validation import validate_store
from powermap.models import FilterCriteria, NetworkGraph
from powermap.reports.export import export_rows
from powermap.store import AuditableContactStore, ContactStore

logger = logging.getLogger(__name__)

T = TypeVar("T")

Params = Mapping[str, Any] | FilterCriteria | None


def _criteria(params: Params) -> FilterCriteria:
    if isinstance(params, FilterCriteria):
        return params
    return FilterCriteria.from_params(params)


def _guarded(section: str, compute: Callable[[], T], empty: T) -> T:
    """Run one metric section; on failure log and return its empty shape."""
    try:
        return compute()
    except Exception as exc:
        logger.warning("Metric section '%s' failed (%s); returning empty result.", section, exc)
        return empty


def build_network(
    store: ContactStore,
    params: Params = None,
    config: PowerMapConfig = DEFAULT_CONFIG,
    resolver: AttributeResolver | None = None,
) -> NetworkGraph:
    """Assemble the graph for request parameters or a FilterCriteria."""
    return assemble_network(store, _criteria(params), config, resolver)


def network_payload(
    graph: NetworkGraph,
    config: PowerMapConfig = DEFAULT_CONFIG,
) -> dict[str, Any]:
    """{nodes, edges, stats, metadata} for an already assembled graph."""
    payload = graph.to_dict()
    payload["stats"] = compute_network_stats(graph, config)
    payload["metadata"] = dict(graph.metadata)
    return payload


def get_network_data(
    store: ContactStore,
    params: Params = None,
    config: PowerMapConfig = DEFAULT_CONFIG,
    resolver: AttributeResolver | None = None,
) -> dict[str, Any]:
    """
    Primary graph-assembly entry point.

    Returns:
        {"nodes": [...], "edges": [...], "stats": {...}, "metadata": {...}}
        metadata.is_demo_data is True when the store was unavailable.
    """
    graph = build_network(store, params, config, resolver)
    return network_payload(graph, config)


def get_network_analysis(
    store: ContactStore,
    params: Params = None,
    config: PowerMapConfig = DEFAULT_CONFIG,
    resolver: AttributeResolver | None = None,
    influencer_limit: int | None = None,
) -> dict[str, Any]:
    """
    Full analytics bundle over one assembled graph.

    Each metric section is computed independently; a failing section is
    replaced by its empty shape so the response always has every key:

        network_data         as get_network_data()
        centrality_measures  {node_id: {degree, betweenness, closeness}}
        key_influencers      [{contact_id, name, influence_score, connections}]
        network_statistics   {total_nodes, total_edges, density, ...}
        analysis_metadata    {analysis_date, total_nodes_analyzed, ...}
    """
    logger.info("Network analysis starting.")
    graph = build_network(store, params, config, resolver)

    network_data = network_payload(graph, config)
    centrality = _guarded(
        "centrality_measures",
        lambda: compute_centrality_measures(graph, config),
        {},
    )
    influencers = _guarded(
        "key_influencers",
        lambda: [k.to_dict() for k in rank_key_influencers(graph, influencer_limit, config)],
        [],
    )
    structure = _guarded(
        "network_statistics",
        lambda: compute_network_statistics(graph, config),
        {},
    )

    logger.info(
        "Network analysis complete: %d nodes, %d edges, %d influencers ranked.",
        graph.node_count,
        graph.edge_count,
        len(influencers),
    )
    return {
        "network_data": network_data,
        "centrality_measures": centrality,
        "key_influencers": influencers,
        "network_statistics": structure,
        "analysis_metadata": {
            "analysis_date": datetime.now().strftime("%Y-%m-%d %H:%M:%S"),
            "total_nodes_analyzed": graph.node_count,
            "total_edges_analyzed": graph.edge_count,
            "filters_applied": graph.metadata.get("filters_applied", {}),
            "is_demo_data": graph.is_demo,
        },
    }


def export_network_rows(
    store: ContactStore,
    params: Params = None,
    config: PowerMapConfig = DEFAULT_CONFIG,
    resolver: AttributeResolver | None = None,
) -> list[list[Any]]:
    """Header row plus one row per stakeholder of the assembled graph."""
    graph = build_network(store, params, config, resolver)
    return export_rows(graph, config)


def validate_network(
    store: AuditableContactStore,
    config: PowerMapConfig = DEFAULT_CONFIG,
    resolver: AttributeResolver | None = None,
) -> dict[str, Any]:
    return validate_store(store, resolver, config).to_dict()


def list_relationship_types(store: AuditableContactStore) -> list[dict[str, Any]]:
    """Active relationship types, or [] when the store cannot be read."""
    try:
        return list(store.list_relationship_types())
    except Exception as exc:
        logger.warning("Could not list relationship types: %s", exc)
        return []
