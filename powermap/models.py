"""
powermap/models.py — Value types shared by assembly, analytics and export.

Records coming back from the contact store are loosely shaped dicts. They are
coerced into these types exactly once, at the assembly boundary, so every
downstream module works with typed fields instead of string-keyed maps.

Types:
    Stakeholder     — a node: person, organization or household.
    Relationship    — an edge between two stakeholders with a derived strength.
    FilterCriteria  — the assembly filter (group, ids, thresholds, types).
    NetworkGraph    — node map + edge list + metadata for one assembly pass.
"""

from dataclasses import asdict, dataclass, field
from typing import Any, Iterable, Mapping

INFLUENCE_SCALE = (1, 5)
SUPPORT_SCALE = (1, 5)
STRENGTH_SCALE = (1, 3)


def clamp(value: int, scale: tuple[int, int]) -> int:
    """Clamp an integer rating into its inclusive (low, high) scale."""
    low, high = scale
    return max(low, min(high, int(value)))


def influence_group(influence: int) -> str:
    """Bucket an influence level into 'high' (>= 4), 'medium' (3) or 'low'."""
    if influence >= 4:
        return "high"
    if influence >= 3:
        return "medium"
    return "low"


@dataclass
class Stakeholder:
    """
    A stakeholder node.

    Fields:
        id:            Identifier assigned by the contact store.
        name:          Display name; "Contact <id>" when the store has none.
        category:      "Individual" | "Organization" | "Household" | other.
        sub_category:  Optional sub-type label ("" when absent).
        influence:     Influence level 1–5.
        support:       Support level 1–5.
        strength:      Relationship-strength rating 1–3, used to derive the
                       strength of every edge touching this node.
        notes:         Free-text notes ("" when absent).
    """
    id: int
    name: str
    category: str = "Individual"
    sub_category: str = ""
    influence: int = 1
    support: int = 1
    strength: int = 1
    notes: str = ""

    @property
    def group(self) -> str:
        return influence_group(self.influence)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "type": self.category,
            "subtype": self.sub_category,
            "influence": self.influence,
            "support": self.support,
            "group": self.group,
            "notes": self.notes,
        }


@dataclass
class Relationship:
    """
    An edge between two stakeholders.

    Stored with source/target orientation; analytics treat it as undirected.
    `strength` is always max(strength(source), strength(target)) as computed
    by the assembly pipeline, never a value read from the store.
    """
    id: int
    source: int
    target: int
    type_label: str
    strength: int = 1
    type_id: int | None = None

    def touches(self, node_id: int) -> bool:
        return self.source == node_id or self.target == node_id

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "source": self.source,
            "target": self.target,
            "type": self.type_label,
            "type_id": self.type_id,
            "strength": self.strength,
        }


def contained_edges(
    nodes: Mapping[int, Stakeholder],
    relationships: Iterable[Relationship],
) -> list[Relationship]:
    """
    Relationships whose endpoints are both in `nodes`, in input order.

    Sets each kept edge's strength to max(strength(source), strength(target)).
    """
    edges: list[Relationship] = []
    for rel in relationships:
        if rel.source not in nodes or rel.target not in nodes:
            continue
        rel.strength = max(nodes[rel.source].strength, nodes[rel.target].strength)
        edges.append(rel)
    return edges


def _parse_int_list(value: Any) -> list[int]:
    """Accept a list, a comma-separated string or a scalar; keep positive ints."""
    if value is None or value == "":
        return []
    if isinstance(value, str):
        items: Iterable[Any] = value.split(",")
    elif isinstance(value, (list, tuple, set)):
        items = value
    else:
        items = [value]

    parsed: list[int] = []
    for item in items:
        try:
            number = int(str(item).strip())
        except ValueError:
            continue
        if number > 0:
            parsed.append(number)
    return parsed


def _parse_type_list(value: Any) -> list[int | str]:
    """Relationship types may be given as numeric ids or as labels."""
    if value is None or value == "":
        return []
    if isinstance(value, str):
        items: Iterable[Any] = value.split(",")
    elif isinstance(value, (list, tuple, set)):
        items = value
    else:
        items = [value]

    parsed: list[int | str] = []
    for item in items:
        text = str(item).strip()
        if not text:
            continue
        parsed.append(int(text) if text.isdigit() else text)
    return parsed


def _parse_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


@dataclass(frozen=True)
class FilterCriteria:
    """
    Filter applied by the assembly pipeline.

    Fields:
        group_id:            Restrict the base set to members of this group.
        entity_ids:          Explicit base id set; takes precedence over
                             group_id. None means "not given"; an empty tuple
                             means "given, but empty" and yields an empty graph.
        influence_min:       Minimum influence level (1 = no filtering).
        support_min:         Minimum support level (1 = no filtering).
        relationship_types:  Allowlist of relationship type ids or labels.
                             Empty means every type is allowed.
        relationship_only:   Drop nodes not touched by any assembled edge.
    """
    group_id: int | None = None
    entity_ids: tuple[int, ...] | None = None
    influence_min: int = 1
    support_min: int = 1
    relationship_types: tuple[int | str, ...] = ()
    relationship_only: bool = False

    @classmethod
    def from_params(cls, params: Mapping[str, Any] | None = None) -> "FilterCriteria":
        """
        Build criteria from request-style parameters.

        Recognized keys: group_id, contact_id (or entity_ids), influence_min,
        support_min, relationship_types, only_relationship (or
        relationship_only). Lists may be given as Python sequences or as
        comma-separated strings; unparseable entries are dropped.
        """
        params = params or {}

        group_ids = _parse_int_list(params.get("group_id"))
        ids = _parse_int_list(params.get("contact_id", params.get("entity_ids")))

        def _int_or_default(key: str) -> int:
            try:
                return int(params.get(key) or 1)
            except (TypeError, ValueError):
                return 1

        return cls(
            group_id=group_ids[0] if group_ids else None,
            entity_ids=tuple(ids) if ids else None,
            influence_min=_int_or_default("influence_min"),
            support_min=_int_or_default("support_min"),
            relationship_types=tuple(_parse_type_list(params.get("relationship_types"))),
            relationship_only=_parse_bool(
                params.get("only_relationship", params.get("relationship_only", False))
            ),
        )

    def allows_type(self, type_id: int | None, type_label: str) -> bool:
        if not self.relationship_types:
            return True
        return type_id in self.relationship_types or type_label in self.relationship_types

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["entity_ids"] = list(self.entity_ids) if self.entity_ids is not None else []
        data["relationship_types"] = list(self.relationship_types)
        return data


@dataclass
class NetworkGraph:
    """
    Output of one assembly pass.

    `nodes` is keyed by stakeholder id. `edges` may contain several edges
    between the same pair; analytics merge them for adjacency but the raw
    list is kept for counting.
    """
    nodes: dict[int, Stakeholder] = field(default_factory=dict)
    edges: list[Relationship] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def node_count(self) -> int:
        return len(self.nodes)

    @property
    def edge_count(self) -> int:
        return len(self.edges)

    @property
    def is_demo(self) -> bool:
        return bool(self.metadata.get("is_demo_data", False))

    def incident_edges(self, node_id: int) -> list[Relationship]:
        return [e for e in self.edges if e.touches(node_id)]

    def to_dict(self) -> dict[str, Any]:
        return {
            "nodes": [n.to_dict() for n in self.nodes.values()],
            "edges": [e.to_dict() for e in self.edges],
        }
