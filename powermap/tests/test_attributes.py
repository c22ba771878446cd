"""
powermap/tests/test_attributes.py — Tests for the Attribute Resolver.

Tests verify:
- Schema locators are looked up once per attribute and cached, including
  "not defined" answers.
- Failed schema lookups are not cached and do not raise.
- Values are coerced to int; blanks, zero and junk are absent.
- resolve() falls back to the caller default on absence and store failure.
"""

import pytest

from powermap.graph.attributes import AttributeResolver, SchemaCache, coerce_int
from powermap.store import StoreUnavailableError


class CountingStore:
    """Minimal store that records schema lookups."""

    def __init__(self, schema=None, entities=None, fail_schema=False):
        self.schema = schema or {}
        self.entities = entities or {}
        self.fail_schema = fail_schema
        self.schema_calls = []

    def resolve_attribute_schema(self, name):
        self.schema_calls.append(name)
        if self.fail_schema:
            raise StoreUnavailableError("schema service down")
        return self.schema.get(name)

    def get_entities(self, ids, locators, limit=None):
        return [self.entities[i] for i in ids if i in self.entities]


# ── coerce_int ───────────────────────────────────────────────────────────────

@pytest.mark.parametrize(
    "raw, expected",
    [(3, 3), ("4", 4), (2.0, 2), ("5.0", 5), (None, None), ("", None),
     ("high", None), (0, None), (True, None)],
)
def test_coerce_int(raw, expected):
    assert coerce_int(raw) == expected


# ── SchemaCache ──────────────────────────────────────────────────────────────

def test_schema_cache_loads_once():
    cache = SchemaCache()
    calls = []

    def loader(name):
        calls.append(name)
        return "custom_12"

    assert cache.get_or_load("influence_level", loader) == "custom_12"
    assert cache.get_or_load("influence_level", loader) == "custom_12"
    assert calls == ["influence_level"]
    assert "influence_level" in cache
    assert len(cache) == 1


def test_schema_cache_remembers_absent_attribute():
    cache = SchemaCache()
    calls = []

    def loader(name):
        calls.append(name)
        return None

    assert cache.get_or_load("support_level", loader) is None
    assert cache.get_or_load("support_level", loader) is None
    assert len(calls) == 1


def test_schema_cache_does_not_store_failures():
    cache = SchemaCache()

    def loader(name):
        raise StoreUnavailableError("down")

    with pytest.raises(StoreUnavailableError):
        cache.get_or_load("x", loader)
    assert "x" not in cache


# ── AttributeResolver ────────────────────────────────────────────────────────

def test_locator_lookup_is_cached_per_resolver():
    store = CountingStore(schema={"influence_level": "custom_7"})
    resolver = AttributeResolver(store)
    assert resolver.locator("influence_level") == "custom_7"
    assert resolver.locator("influence_level") == "custom_7"
    assert store.schema_calls == ["influence_level"]


def test_shared_cache_spans_resolvers():
    store = CountingStore(schema={"influence_level": "custom_7"})
    cache = SchemaCache()
    AttributeResolver(store, cache).locator("influence_level")
    AttributeResolver(store, cache).locator("influence_level")
    assert store.schema_calls == ["influence_level"]


def test_locator_failure_returns_none_and_retries():
    store = CountingStore(fail_schema=True)
    resolver = AttributeResolver(store)
    assert resolver.locator("influence_level") is None
    assert resolver.locator("influence_level") is None
    assert len(store.schema_calls) == 2


def test_locators_omit_undefined_attributes():
    store = CountingStore(schema={"influence_level": "custom_7"})
    resolver = AttributeResolver(store)
    assert resolver.locators(["influence_level", "support_level"]) == {
        "influence_level": "custom_7"
    }


def test_extract_reads_through_locator():
    store = CountingStore(schema={"influence_level": "custom_7"})
    resolver = AttributeResolver(store)
    assert resolver.extract({"custom_7": "4"}, "influence_level") == 4
    assert resolver.extract({"custom_7": ""}, "influence_level") is None
    assert resolver.extract({"custom_7": 4}, "support_level") is None


def test_extract_text_strips_and_blanks_to_none():
    store = CountingStore(schema={"powermap_notes": "custom_9"})
    resolver = AttributeResolver(store)
    assert resolver.extract_text({"custom_9": "  Key ally "}, "powermap_notes") == "Key ally"
    assert resolver.extract_text({"custom_9": "   "}, "powermap_notes") is None


def test_resolve_returns_value():
    store = CountingStore(
        schema={"influence_level": "custom_7"},
        entities={12: {"id": 12, "custom_7": 5}},
    )
    assert AttributeResolver(store).resolve(12, "influence_level", default=1) == 5


def test_resolve_defaults_when_attribute_undefined():
    store = CountingStore(entities={12: {"id": 12}})
    assert AttributeResolver(store).resolve(12, "influence_level", default=3) == 3


def test_resolve_defaults_when_entity_missing():
    store = CountingStore(schema={"influence_level": "custom_7"})
    assert AttributeResolver(store).resolve(404, "influence_level", default=2) == 2


def test_resolve_defaults_when_store_unreachable(unreachable_store):
    assert AttributeResolver(unreachable_store).resolve(1, "influence_level", default=1) == 1


def test_resolve_against_in_memory_store(sample_store):
    resolver = AttributeResolver(sample_store)
    assert resolver.resolve(3, "relationship_strength", default=1) == 3
    assert resolver.resolve(4, "relationship_strength", default=1) == 1
