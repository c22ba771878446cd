"""
powermap/graph/demo.py — Static demonstration graph.

Returned by the assembly pipeline whenever the base stakeholder fetch fails,
so the visualization always has a well-formed graph to render. Five
stakeholders, five relationships.
"""

from dataclasses import replace
from datetime import datetime

from powermap.models import NetworkGraph, Relationship, Stakeholder, contained_edges

_DEMO_NODES = [
    Stakeholder(1, "John Smith", "Individual", "", 5, 4, strength=2, notes="Key decision maker"),
    Stakeholder(2, "Mary Johnson", "Individual", "", 4, 5, strength=2, notes="Strong supporter"),
    Stakeholder(3, "Tech Corporation", "Organization", "", 3, 2, strength=3,
                notes="Potential opposition"),
    Stakeholder(4, "Community Group", "Organization", "", 2, 5, strength=1,
                notes="Grassroots support"),
    Stakeholder(5, "City Council", "Organization", "", 5, 3, strength=2,
                notes="Regulatory authority"),
]

# Strengths are derived from the endpoints by contained_edges().
_DEMO_EDGES = [
    Relationship(1, 1, 2, "Colleague"),
    Relationship(2, 2, 3, "Advisor"),
    Relationship(3, 1, 4, "Member"),
    Relationship(4, 3, 5, "Reports To"),
    Relationship(5, 4, 5, "Advocate"),
]


def demo_network(filters_applied: dict | None = None) -> NetworkGraph:
    """Fresh copy of the demonstration graph (callers may mutate it)."""
    nodes = {n.id: replace(n) for n in _DEMO_NODES}
    edges = contained_edges(nodes, [replace(e) for e in _DEMO_EDGES])
    return NetworkGraph(
        nodes=nodes,
        edges=edges,
        metadata={
            "total_contacts": len(nodes),
            "total_relationships": len(edges),
            "filters_applied": filters_applied or {},
            "generated_at": datetime.now().strftime("%Y-%m-%d %H:%M:%S"),
            "is_demo_data": True,
        },
    )
