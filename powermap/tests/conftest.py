"""
powermap/tests/conftest.py — Shared pytest fixtures for the power map test suite.

Fixtures:
    sample_store       — InMemoryContactStore with a small, fully known network
                         (group 10 = stakeholders 1, 2, 3, 4, 5, 7).
    unreachable_store  — Store whose every call raises StoreUnavailableError.
    make_graph         — Factory building a NetworkGraph from plain tuples.
    typed_sample_store — Factory: sample store with an explicit relationship-type table.

Sample network (relationship id: endpoints, type, state):
    r1: 1–2 Colleague   r2: 2–3 Advisor    r3: 1–3 Colleague
    r4: 3–6 Member      r5: 4–4 self       r6: 1–4 Advisor (inactive)
    r7: 1–2 Colleague (duplicate of r1)    r8: 5–99 Member (99 unknown)
"""

import pytest

from powermap.models import NetworkGraph, Relationship, Stakeholder
from powermap.store import InMemoryContactStore, StoreUnavailableError


SAMPLE_ENTITIES = [
    {"id": 1, "display_name": "Alice Moreno", "category": "Individual", "sub_category": "",
     "influence_level": 5, "support_level": 4, "relationship_strength": 2,
     "powermap_notes": "Board chair"},
    {"id": 2, "display_name": "Bob Tran", "category": "Individual", "sub_category": "Staff",
     "influence_level": 3, "support_level": 2, "relationship_strength": 1,
     "powermap_notes": None},
    {"id": 3, "display_name": "Acme Corp", "category": "Organization", "sub_category": "",
     "influence_level": 4, "support_level": 1, "relationship_strength": 3,
     "powermap_notes": "Main employer"},
    {"id": 4, "display_name": "Dana Household", "category": "Household", "sub_category": "",
     "influence_level": 2, "support_level": 5, "relationship_strength": None,
     "powermap_notes": None},
    {"id": 5, "display_name": "", "category": "Individual", "sub_category": "",
     "influence_level": None, "support_level": None, "relationship_strength": None,
     "powermap_notes": None},
    {"id": 6, "display_name": "Harbor Union", "category": "Organization", "sub_category": "",
     "influence_level": 2, "support_level": 3, "relationship_strength": 2,
     "powermap_notes": None},
    {"id": 7, "display_name": "Gina Park", "category": "Individual", "sub_category": "",
     "influence_level": 4, "support_level": 4, "relationship_strength": 1,
     "powermap_notes": None},
]

SAMPLE_RELATIONSHIPS = [
    {"id": 1, "source_id": 1, "target_id": 2, "type_id": 1, "type_label": "Colleague", "is_active": True},
    {"id": 2, "source_id": 2, "target_id": 3, "type_id": 2, "type_label": "Advisor", "is_active": True},
    {"id": 3, "source_id": 1, "target_id": 3, "type_id": 1, "type_label": "Colleague", "is_active": True},
    {"id": 4, "source_id": 3, "target_id": 6, "type_id": 3, "type_label": "Member", "is_active": True},
    {"id": 5, "source_id": 4, "target_id": 4, "type_id": 1, "type_label": "Colleague", "is_active": True},
    {"id": 6, "source_id": 1, "target_id": 4, "type_id": 2, "type_label": "Advisor", "is_active": False},
    {"id": 7, "source_id": 1, "target_id": 2, "type_id": 1, "type_label": "Colleague", "is_active": True},
    {"id": 8, "source_id": 5, "target_id": 99, "type_id": 3, "type_label": "Member", "is_active": True},
]

SAMPLE_GROUPS = {10: [1, 2, 3, 4, 5, 7]}


class UnreachableStore:
    """Every capability fails as if the CRM were down."""

    def _fail(self, *args, **kwargs):
        raise StoreUnavailableError("connection refused")

    list_members = _fail
    get_entities = _fail
    get_relationships = _fail
    resolve_attribute_schema = _fail
    all_entities = _fail
    all_relationships = _fail
    list_relationship_types = _fail


@pytest.fixture
def sample_store() -> InMemoryContactStore:
    return InMemoryContactStore.from_records(
        SAMPLE_ENTITIES, SAMPLE_RELATIONSHIPS, SAMPLE_GROUPS
    )


@pytest.fixture
def unreachable_store() -> UnreachableStore:
    return UnreachableStore()


def _build_graph(nodes, edges) -> NetworkGraph:
    """
    nodes: iterable of (id, influence) or (id, influence, category) tuples.
    edges: iterable of (source, target) or (source, target, strength) tuples.
    """
    graph = NetworkGraph()
    for entry in nodes:
        node_id, influence = entry[0], entry[1]
        category = entry[2] if len(entry) > 2 else "Individual"
        graph.nodes[node_id] = Stakeholder(
            id=node_id, name=f"Node {node_id}", category=category, influence=influence,
        )
    for i, entry in enumerate(edges, start=1):
        source, target = entry[0], entry[1]
        strength = entry[2] if len(entry) > 2 else 1
        graph.edges.append(Relationship(i, source, target, "Related to", strength=strength))
    return graph


@pytest.fixture
def make_graph():
    return _build_graph


@pytest.fixture
def typed_sample_store():
    """Factory: the sample store with an explicit relationship-type table."""
    def _build(relationship_types):
        return InMemoryContactStore.from_records(
            SAMPLE_ENTITIES, SAMPLE_RELATIONSHIPS, SAMPLE_GROUPS, relationship_types
        )
    return _build
