"""
powermap/graph/attributes.py — Attribute Resolver.

Maps a logical stakeholder attribute ("influence_level", "support_level", ...)
to a value for a given contact record. Two layers:

    SchemaCache        Write-once map from attribute name to the storage
                       locator that backs it in the store (e.g. a custom-field
                       column). Owned by a resolver instance and injected, so
                       callers decide its lifetime. Safe for concurrent reads
                       once populated; population is guarded by a lock.

    AttributeResolver  Looks locators up through the cache and extracts
                       typed values from entity records. An attribute that is
                       not defined, not set, or not an integer is *absent*
                       (None), which is an expected condition and never an
                       error. Only store-connectivity failures are logged.

Per-entity values are never cached: they may change between calls.
"""

import logging
import threading
from typing import Any, Callable, Mapping, Sequence

from powermap.store import ContactStore

logger = logging.getLogger(__name__)


class SchemaCache:
    """Append-only attribute-name → storage-locator map."""

    def __init__(self) -> None:
        self._locators: dict[str, str | None] = {}
        self._lock = threading.Lock()

    def __contains__(self, attribute_name: str) -> bool:
        return attribute_name in self._locators

    def __len__(self) -> int:
        return len(self._locators)

    def get_or_load(
        self,
        attribute_name: str,
        loader: Callable[[str], str | None],
    ) -> str | None:
        """
        Return the cached locator, calling `loader` on first use only.

        A locator of None ("attribute not defined in the schema") is cached
        like any other answer. If `loader` raises, nothing is cached and the
        exception propagates so a later call can retry.
        """
        if attribute_name in self._locators:
            return self._locators[attribute_name]
        with self._lock:
            if attribute_name not in self._locators:
                self._locators[attribute_name] = loader(attribute_name)
            return self._locators[attribute_name]


def coerce_int(raw: Any) -> int | None:
    """
    Coerce a raw store value to int, or None when absent.

    Empty strings, None, zero and non-numeric values are all absent: a rating
    of 0 is outside every scale the store holds.
    """
    if raw is None or isinstance(raw, bool):
        return None
    try:
        value = int(float(raw))
    except (TypeError, ValueError):
        return None
    return value or None


class AttributeResolver:
    """
    Resolve logical attribute names against a contact store.

    Args:
        store: Any ContactStore.
        cache: SchemaCache to use. A fresh one is created when omitted; pass a
               shared instance to reuse schema lookups across requests.
    """

    def __init__(self, store: ContactStore, cache: SchemaCache | None = None):
        self.store = store
        self.cache = cache if cache is not None else SchemaCache()

    def locator(self, attribute_name: str) -> str | None:
        """Storage locator backing `attribute_name`, or None if unavailable."""
        try:
            return self.cache.get_or_load(attribute_name, self.store.resolve_attribute_schema)
        except Exception as exc:
            logger.warning(
                "Schema lookup for attribute '%s' failed (%s); treating as absent.",
                attribute_name,
                exc,
            )
            return None

    def locators(self, attribute_names: Sequence[str]) -> dict[str, str]:
        """Locators for every attribute that is defined; undefined ones are omitted."""
        found: dict[str, str] = {}
        for name in attribute_names:
            loc = self.locator(name)
            if loc is not None:
                found[name] = loc
        return found

    def extract(self, record: Mapping[str, Any], attribute_name: str) -> int | None:
        """Integer value of `attribute_name` in an entity record, or None."""
        loc = self.locator(attribute_name)
        if loc is None:
            return None
        return coerce_int(record.get(loc))

    def extract_text(self, record: Mapping[str, Any], attribute_name: str) -> str | None:
        loc = self.locator(attribute_name)
        if loc is None:
            return None
        raw = record.get(loc)
        if raw is None:
            return None
        text = str(raw).strip()
        return text or None

    def resolve(self, entity_id: int, attribute_name: str, default: int) -> int:
        """
        Value of `attribute_name` for one entity, or `default` when absent.

        Single-entity form of the resolver: one store round trip per call.
        Assembly resolves whole batches instead, fetching records with
        locators() and reading them with extract().

        Never raises: a store failure is logged and answered with `default`.
        """
        loc = self.locator(attribute_name)
        if loc is None:
            return default
        try:
            records = self.store.get_entities([entity_id], [loc], limit=1)
        except Exception as exc:
            logger.warning(
                "Could not fetch '%s' for entity %s (%s); using default %s.",
                attribute_name,
                entity_id,
                exc,
                default,
            )
            return default
        if not records:
            return default
        value = coerce_int(records[0].get(loc))
        return default if value is None else value
