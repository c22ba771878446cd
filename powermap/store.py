"""
powermap/store.py — The contact & relationship store boundary.

The core never talks to a CRM directly. It consumes any object satisfying the
ContactStore protocol below. Record shapes returned by a store:

    entity:        {"id", "display_name", "category", "sub_category",
                    <storage locator>: <raw attribute value>, ...}
    relationship:  {"id", "source_id", "target_id", "type_id", "type_label",
                    "is_active"}
    relationship type: {"id", "label", "reverse_label", "name"}

InMemoryContactStore is a pandas-backed implementation used by the CLI (CSV
extracts) and the test suite.
"""

import logging
from typing import Any, Iterable, Mapping, Protocol, Sequence

import pandas as pd

logger = logging.getLogger(__name__)


class StoreUnavailableError(RuntimeError):
    """The store could not be reached or returned malformed data."""


class ContactStore(Protocol):
    """Capabilities the core requires from a contact & relationship store."""

    def list_members(self, group_id: int) -> list[int]:
        ...

    def get_entities(
        self,
        ids: Sequence[int],
        attribute_locators: Sequence[str],
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        ...

    def get_relationships(
        self,
        entity_ids: Sequence[int],
        relationship_types: Sequence[int | str] | None = None,
    ) -> list[dict[str, Any]]:
        ...

    def resolve_attribute_schema(self, attribute_name: str) -> str | None:
        ...


class AuditableContactStore(ContactStore, Protocol):
    """Extra capabilities used by data-quality validation and type listing."""

    def all_entities(self, attribute_locators: Sequence[str]) -> list[dict[str, Any]]:
        ...

    def all_relationships(self) -> list[dict[str, Any]]:
        ...

    def list_relationship_types(self) -> list[dict[str, Any]]:
        ...


_ENTITY_COLUMNS = ("id", "display_name", "category", "sub_category")
_RELATIONSHIP_COLUMNS = ("id", "source_id", "target_id", "type_id", "type_label", "is_active")


def _clean(value: Any) -> Any:
    """Map pandas missing markers to None and numpy scalars to Python ones."""
    if value is None:
        return None
    try:
        if pd.isna(value):
            return None
    except (TypeError, ValueError):
        return value
    if hasattr(value, "item"):
        return value.item()
    return value


class InMemoryContactStore:
    """
    ContactStore over pandas DataFrames.

    Args:
        entities:            One row per stakeholder. Required column 'id';
                             optional 'display_name', 'category',
                             'sub_category' and any number of attribute
                             columns. An attribute is "defined" in the schema
                             iff a column with its name exists.
        relationships:       One row per relationship with the columns listed
                             in _RELATIONSHIP_COLUMNS ('type_id', 'type_label'
                             and 'is_active' are optional).
        memberships:         Optional (group_id, contact_id) rows.
        relationship_types:  Optional (id, label, reverse_label, name, is_active)
                             rows. Derived from `relationships` when omitted.
    """

    def __init__(
        self,
        entities: pd.DataFrame,
        relationships: pd.DataFrame | None = None,
        memberships: pd.DataFrame | None = None,
        relationship_types: pd.DataFrame | None = None,
    ):
        self._entities = self._normalize_entities(entities)
        self._relationships = self._normalize_relationships(relationships)
        self._memberships = (
            memberships.copy()
            if memberships is not None
            else pd.DataFrame(columns=["group_id", "contact_id"])
        )
        self._relationship_types = (
            relationship_types.copy()
            if relationship_types is not None
            else self._derive_relationship_types(self._relationships)
        )

    # ── Construction helpers ──────────────────────────────────────────────────

    @classmethod
    def from_records(
        cls,
        entities: Iterable[Mapping[str, Any]],
        relationships: Iterable[Mapping[str, Any]] = (),
        groups: Mapping[int, Iterable[int]] | None = None,
        relationship_types: Iterable[Mapping[str, Any]] | None = None,
    ) -> "InMemoryContactStore":
        memberships = pd.DataFrame(
            [
                {"group_id": group_id, "contact_id": contact_id}
                for group_id, members in (groups or {}).items()
                for contact_id in members
            ],
            columns=["group_id", "contact_id"],
        )
        return cls(
            entities=pd.DataFrame(list(entities)),
            relationships=pd.DataFrame(list(relationships)),
            memberships=memberships,
            relationship_types=(
                pd.DataFrame(list(relationship_types))
                if relationship_types is not None
                else None
            ),
        )

    @classmethod
    def from_csv(
        cls,
        entities_path: str,
        relationships_path: str | None = None,
        memberships_path: str | None = None,
    ) -> "InMemoryContactStore":
        """Load a store from CSV extracts (column names as in the class docstring)."""
        logger.info("Loading stakeholders from: %s", entities_path)
        entities = pd.read_csv(entities_path)
        relationships = None
        if relationships_path:
            logger.info("Loading relationships from: %s", relationships_path)
            relationships = pd.read_csv(relationships_path)
        memberships = None
        if memberships_path:
            logger.info("Loading group memberships from: %s", memberships_path)
            memberships = pd.read_csv(memberships_path)
        return cls(entities, relationships, memberships)

    @staticmethod
    def _normalize_entities(df: pd.DataFrame) -> pd.DataFrame:
        df = df.copy()
        if "id" not in df.columns:
            df["id"] = pd.Series(dtype="int64")
        for col in _ENTITY_COLUMNS[1:]:
            if col not in df.columns:
                df[col] = None
        df["id"] = pd.to_numeric(df["id"], errors="coerce")
        df = df.dropna(subset=["id"])
        df["id"] = df["id"].astype("int64")
        return df

    @staticmethod
    def _normalize_relationships(df: pd.DataFrame | None) -> pd.DataFrame:
        if df is None or df.empty:
            return pd.DataFrame(columns=list(_RELATIONSHIP_COLUMNS))
        df = df.copy()
        if "id" not in df.columns:
            df["id"] = range(1, len(df) + 1)
        if "type_id" not in df.columns:
            df["type_id"] = None
        if "type_label" not in df.columns:
            df["type_label"] = None
        if "is_active" not in df.columns:
            df["is_active"] = True
        df["is_active"] = df["is_active"].fillna(True).astype(bool)
        return df

    @staticmethod
    def _derive_relationship_types(relationships: pd.DataFrame) -> pd.DataFrame:
        rows = (
            relationships[["type_id", "type_label"]]
            .dropna(subset=["type_id"])
            .drop_duplicates(subset=["type_id"])
        )
        return pd.DataFrame(
            {
                "id": rows["type_id"].tolist(),
                "label": rows["type_label"].tolist(),
                "reverse_label": rows["type_label"].tolist(),
                "name": rows["type_label"].tolist(),
                "is_active": [True] * len(rows),
            }
        )

    # ── ContactStore protocol ─────────────────────────────────────────────────

    def list_members(self, group_id: int) -> list[int]:
        if self._memberships.empty:
            return []
        rows = self._memberships[self._memberships["group_id"] == group_id]
        return [int(v) for v in rows["contact_id"].tolist()]

    def get_entities(
        self,
        ids: Sequence[int],
        attribute_locators: Sequence[str],
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        rows = self._entities[self._entities["id"].isin(list(ids))]
        if limit is not None:
            rows = rows.head(limit)
        return self._entity_records(rows, attribute_locators)

    def get_relationships(
        self,
        entity_ids: Sequence[int],
        relationship_types: Sequence[int | str] | None = None,
    ) -> list[dict[str, Any]]:
        df = self._relationships
        if df.empty:
            return []
        ids = list(entity_ids)
        mask = df["is_active"] & (df["source_id"].isin(ids) | df["target_id"].isin(ids))
        if relationship_types:
            allowed = list(relationship_types)
            mask &= df["type_id"].isin(allowed) | df["type_label"].isin(allowed)
        return self._relationship_records(df[mask])

    def resolve_attribute_schema(self, attribute_name: str) -> str | None:
        return attribute_name if attribute_name in self._entities.columns else None

    # ── Auditing capabilities ─────────────────────────────────────────────────

    def all_entities(self, attribute_locators: Sequence[str]) -> list[dict[str, Any]]:
        return self._entity_records(self._entities, attribute_locators)

    def all_relationships(self) -> list[dict[str, Any]]:
        return self._relationship_records(self._relationships)

    def list_relationship_types(self) -> list[dict[str, Any]]:
        df = self._relationship_types
        if "is_active" in df.columns:
            df = df[df["is_active"].fillna(True).astype(bool)]
        return [
            {
                "id": _clean(row.get("id")),
                "label": _clean(row.get("label")) or "",
                "reverse_label": _clean(row.get("reverse_label")) or "",
                "name": _clean(row.get("name")) or "",
            }
            for row in df.to_dict("records")
        ]

    # ── Record shaping ────────────────────────────────────────────────────────

    @staticmethod
    def _entity_records(
        rows: pd.DataFrame, attribute_locators: Sequence[str]
    ) -> list[dict[str, Any]]:
        records: list[dict[str, Any]] = []
        for row in rows.to_dict("records"):
            record = {col: _clean(row.get(col)) for col in _ENTITY_COLUMNS}
            for locator in attribute_locators:
                if locator in row:
                    record[locator] = _clean(row[locator])
            records.append(record)
        return records

    @staticmethod
    def _relationship_records(rows: pd.DataFrame) -> list[dict[str, Any]]:
        return [
            {col: _clean(row.get(col)) for col in _RELATIONSHIP_COLUMNS}
            for row in rows.to_dict("records")
        ]
