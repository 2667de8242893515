"""Cache store interface and in-memory reference implementation.

Production stores (populated by an external indexer) only need to satisfy
``CacheStore``. ``InMemoryCacheStore`` implements the same contract over
dictionaries and is used by tests and embedded deployments.
"""

from __future__ import annotations

import fnmatch
from collections.abc import Iterable
from typing import Protocol, runtime_checkable

from rescache.cache.keys import Namespace, decode
from rescache.cache.records import CacheRecord
from rescache.observability.logging import get_logger

_logger = get_logger("cache.store")


@runtime_checkable
class CacheStore(Protocol):
    """Read interface of a namespaced key-value cache with glob enumeration."""

    def get(self, namespace: Namespace, key: str) -> CacheRecord | None: ...

    def get_all(self, namespace: Namespace, keys: Iterable[str]) -> list[CacheRecord]: ...

    def filter_identifiers(self, namespace: Namespace, glob: str) -> list[str]: ...


class InMemoryCacheStore:
    """Dictionary-backed ``CacheStore``.

    Records are stored under their encoded id. ``filter_identifiers`` matches
    with ``fnmatch.fnmatchcase`` (``*``, ``?``, ``[...]``) over encoded keys
    and returns them sorted.
    """

    def __init__(self, records: Iterable[CacheRecord] = ()) -> None:
        self._store: dict[Namespace, dict[str, CacheRecord]] = {ns: {} for ns in Namespace}
        for record in records:
            self.put(record)

    def put(self, record: CacheRecord) -> None:
        self._store[record.id.namespace][record.id.encode()] = record

    def evict(self, namespace: Namespace, key: str) -> None:
        self._store[namespace].pop(key, None)

    def get(self, namespace: Namespace, key: str) -> CacheRecord | None:
        return self._store[namespace].get(key)

    def get_all(self, namespace: Namespace, keys: Iterable[str]) -> list[CacheRecord]:
        """Return records for ``keys`` in the given order, skipping absent ones."""
        bucket = self._store[namespace]
        return [bucket[key] for key in keys if key in bucket]

    def filter_identifiers(self, namespace: Namespace, glob: str) -> list[str]:
        matches = sorted(key for key in self._store[namespace] if fnmatch.fnmatchcase(key, glob))
        _logger.debug("filter_identifiers", namespace=namespace.value, glob=glob, matches=len(matches))
        return matches

    def __len__(self) -> int:
        return sum(len(bucket) for bucket in self._store.values())

    @classmethod
    def from_keys(cls, edges: Iterable[tuple[str, Iterable[str]]]) -> InMemoryCacheStore:
        """Build a store from ``(key, related_keys)`` string pairs.

        Related keys are filed under their own decoded namespace. Convenient
        for loading fixtures exported from another store.
        """
        store = cls()
        for key, related in edges:
            record_key = decode(key)
            grouped: dict[Namespace, list] = {}
            for other in related:
                other_key = decode(other)
                grouped.setdefault(other_key.namespace, []).append(other_key)
            store.put(CacheRecord(id=record_key, relationships={ns: tuple(v) for ns, v in grouped.items()}))
        return store
