"""
powermap/graph/builder.py — Graph Assembly Pipeline.

Turns a FilterCriteria into a NetworkGraph: stakeholders with resolved
attributes plus the active relationships between them.

Algorithm:
    1. Resolve the base id set: explicit ids, else group members, else the
       configured fallback singleton. Group lookup failures fall back softly.
    2. Fetch the base stakeholders, resolve influence / support / strength /
       notes, and apply the influence_min / support_min thresholds.
    3. Fetch active relationships touching any base id (thresholded or not), apply
       the relationship-type allowlist, drop self-relationships.
    4. Resolve edge endpoints outside the base id set in exactly one extra
       round (immediate neighbours only, same thresholds).
    5. Keep an edge only if both endpoints are in the node set; its strength
       is max(strength(source), strength(target)).
    6. With relationship_only, drop nodes not touched by any kept edge.

A failure fetching the base set degrades to the static demonstration graph.

to_networkx() projects the result onto an undirected simple nx.Graph for the
analytics modules.
"""

import logging
from datetime import datetime
from typing import Any, Iterable, Mapping

import networkx as nx

from powermap.config import DEFAULT_CONFIG, PowerMapConfig
from powermap.graph.attributes import AttributeResolver, coerce_int
from powermap.graph.demo import demo_network
from powermap.models import (
    INFLUENCE_SCALE,
    STRENGTH_SCALE,
    SUPPORT_SCALE,
    FilterCriteria,
    NetworkGraph,
    Relationship,
    Stakeholder,
    clamp,
    contained_edges,
)
from powermap.store import ContactStore

logger = logging.getLogger(__name__)


def assemble_network(
    store: ContactStore,
    criteria: FilterCriteria | None = None,
    config: PowerMapConfig = DEFAULT_CONFIG,
    resolver: AttributeResolver | None = None,
) -> NetworkGraph:
    """
    Assemble the stakeholder graph for one request.

    Args:
        store:    ContactStore to read stakeholders and relationships from.
        criteria: FilterCriteria. None means "no restriction".
        config:   PowerMapConfig with attribute names and defaults.
        resolver: AttributeResolver to reuse (and its schema cache). A new one
                  bound to `store` is created when omitted.

    Returns:
        NetworkGraph with metadata keys total_contacts, total_relationships,
        filters_applied, generated_at and is_demo_data.

    Notes:
        - An explicitly empty id list yields an empty graph, not an error.
        - Never raises for store failures; see the module docstring.
    """
    criteria = criteria or FilterCriteria()
    resolver = resolver or AttributeResolver(store)
    filters_applied = criteria.to_dict()

    base_ids = _resolve_base_ids(store, criteria, config)
    if not base_ids:
        logger.info("Empty base id set; returning empty graph.")
        return _finish(NetworkGraph(), filters_applied)

    # ── Steps 2–3: base stakeholders and their relationships ─────────────────
    try:
        nodes = _fetch_stakeholders(store, resolver, base_ids, criteria, config)
        # Keyed on every base id, including those excluded by threshold.
        raw_relationships = store.get_relationships(
            base_ids, list(criteria.relationship_types) or None
        )
    except Exception as exc:
        logger.warning(
            "Contact store unavailable for base id set (%s); returning demo graph.",
            exc,
        )
        return demo_network(filters_applied)

    logger.info(
        "Resolved %d of %d base stakeholders; %d candidate relationships.",
        len(nodes),
        len(base_ids),
        len(raw_relationships),
    )

    candidates = _candidate_relationships(raw_relationships, criteria, config)

    # ── Step 4: one extra round for neighbours outside the base set ──────────
    base_set = set(base_ids)
    neighbour_ids = sorted(
        {
            endpoint
            for rel in candidates
            for endpoint in (rel.source, rel.target)
            if endpoint not in base_set and endpoint not in nodes
        }
    )
    if neighbour_ids:
        try:
            neighbours = _fetch_stakeholders(store, resolver, neighbour_ids, criteria, config)
        except Exception as exc:
            logger.warning(
                "Could not resolve %d neighbour stakeholders (%s); "
                "their relationships are dropped.",
                len(neighbour_ids),
                exc,
            )
            neighbours = {}
        nodes.update(neighbours)
        logger.debug("Added %d neighbour stakeholders.", len(neighbours))

    # ── Step 5: containment check and derived strength ───────────────────────
    edges = contained_edges(nodes, candidates)

    # ── Step 6: relationship-only mode ────────────────────────────────────────
    if criteria.relationship_only:
        touched = {endpoint for e in edges for endpoint in (e.source, e.target)}
        nodes = {nid: node for nid, node in nodes.items() if nid in touched}

    graph = NetworkGraph(nodes=nodes, edges=edges)
    logger.info(
        "Assembly complete: %d nodes, %d edges.", graph.node_count, graph.edge_count
    )
    return _finish(graph, filters_applied)


def _finish(graph: NetworkGraph, filters_applied: dict[str, Any]) -> NetworkGraph:
    graph.metadata.update(
        {
            "total_contacts": graph.node_count,
            "total_relationships": graph.edge_count,
            "filters_applied": filters_applied,
            "generated_at": datetime.now().strftime("%Y-%m-%d %H:%M:%S"),
            "is_demo_data": False,
        }
    )
    return graph


def _resolve_base_ids(
    store: ContactStore,
    criteria: FilterCriteria,
    config: PowerMapConfig,
) -> list[int]:
    """Explicit ids take precedence, then group members, then the fallback id."""
    if criteria.entity_ids is not None:
        return list(dict.fromkeys(criteria.entity_ids))

    if criteria.group_id is not None:
        try:
            members = store.list_members(criteria.group_id)
        except Exception as exc:
            logger.warning(
                "Group %s lookup failed (%s); using fallback entity %s.",
                criteria.group_id,
                exc,
                config.fallback_entity_id,
            )
            return [config.fallback_entity_id]
        ids = [i for i in (coerce_int(m) for m in members) if i is not None]
        if ids:
            return list(dict.fromkeys(ids))
        logger.info(
            "Group %s has no members; using fallback entity %s.",
            criteria.group_id,
            config.fallback_entity_id,
        )

    return [config.fallback_entity_id]


def _fetch_stakeholders(
    store: ContactStore,
    resolver: AttributeResolver,
    ids: Iterable[int],
    criteria: FilterCriteria,
    config: PowerMapConfig,
) -> dict[int, Stakeholder]:
    """Fetch, coerce and threshold-filter stakeholders. Store errors propagate."""
    locators = resolver.locators(
        [
            config.influence_attribute,
            config.support_attribute,
            config.strength_attribute,
            config.notes_attribute,
        ]
    )
    records = store.get_entities(list(ids), list(locators.values()), limit=config.contact_limit)

    stakeholders: dict[int, Stakeholder] = {}
    for record in records:
        node = stakeholder_from_record(record, resolver, config)
        if node is None:
            continue
        if node.influence < criteria.influence_min or node.support < criteria.support_min:
            continue
        stakeholders[node.id] = node
    return stakeholders


def stakeholder_from_record(
    record: Mapping[str, Any],
    resolver: AttributeResolver,
    config: PowerMapConfig = DEFAULT_CONFIG,
) -> Stakeholder | None:
    """Coerce one entity record; None if it carries no usable id."""
    entity_id = coerce_int(record.get("id"))
    if entity_id is None:
        logger.debug("Skipping entity record without an id: %s", record)
        return None

    influence = resolver.extract(record, config.influence_attribute)
    support = resolver.extract(record, config.support_attribute)
    strength = resolver.extract(record, config.strength_attribute)

    return Stakeholder(
        id=entity_id,
        name=str(record.get("display_name") or "").strip() or f"Contact {entity_id}",
        category=str(record.get("category") or "").strip() or "Individual",
        sub_category=_sub_category(record.get("sub_category")),
        influence=clamp(influence or config.default_influence_level, INFLUENCE_SCALE),
        support=clamp(support or config.default_support_level, SUPPORT_SCALE),
        strength=clamp(strength or config.default_strength_level, STRENGTH_SCALE),
        notes=resolver.extract_text(record, config.notes_attribute) or "",
    )


def _sub_category(raw: Any) -> str:
    # Stores may return multi-valued sub-types as a list.
    if isinstance(raw, (list, tuple)):
        return ", ".join(str(v) for v in raw if v)
    return str(raw or "").strip()


def _candidate_relationships(
    records: Iterable[Mapping[str, Any]],
    criteria: FilterCriteria,
    config: PowerMapConfig,
) -> list[Relationship]:
    """Coerce relationship records; drop inactive, disallowed and self edges."""
    candidates: list[Relationship] = []
    for record in records:
        source = coerce_int(record.get("source_id"))
        target = coerce_int(record.get("target_id"))
        if source is None or target is None:
            continue
        if source == target:
            continue
        if record.get("is_active") is False:
            continue
        type_id = coerce_int(record.get("type_id"))
        label = str(record.get("type_label") or "").strip() or config.default_relationship_label
        if not criteria.allows_type(type_id, label):
            continue
        candidates.append(
            Relationship(
                id=coerce_int(record.get("id")) or 0,
                source=source,
                target=target,
                type_label=label,
                type_id=type_id,
            )
        )
    return candidates


def to_networkx(graph: NetworkGraph) -> nx.Graph:
    """
    Undirected simple-graph view of an assembled NetworkGraph.

    Every stakeholder becomes a node (isolated ones included) carrying its
    fields as attributes. Parallel relationships between the same pair are
    merged into one edge; the merged edge records `multiplicity` and the
    maximum `strength`. The raw edge list on `graph` is left untouched.
    """
    G = nx.Graph()
    for node in graph.nodes.values():
        G.add_node(
            node.id,
            name=node.name,
            category=node.category,
            influence=node.influence,
            support=node.support,
            strength=node.strength,
        )
    for rel in graph.edges:
        if G.has_edge(rel.source, rel.target):
            data = G.edges[rel.source, rel.target]
            data["multiplicity"] += 1
            data["strength"] = max(data["strength"], rel.strength)
        else:
            G.add_edge(
                rel.source,
                rel.target,
                multiplicity=1,
                strength=rel.strength,
                type_label=rel.type_label,
            )
    return G
