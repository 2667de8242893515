"""Cache layer for rescache.

Submodules:
    keys     -- Composite key codec (namespace-scoped, separator-escaped).
    records  -- CacheRecord with a closed per-namespace relationship schema.
    store    -- CacheStore protocol and in-memory reference store.
"""

from rescache.cache.keys import CacheKey, Namespace, decode, encode, glob_pattern
from rescache.cache.records import CacheRecord
from rescache.cache.store import CacheStore, InMemoryCacheStore

__all__ = [
    "CacheKey",
    "CacheRecord",
    "CacheStore",
    "InMemoryCacheStore",
    "Namespace",
    "decode",
    "encode",
    "glob_pattern",
]
