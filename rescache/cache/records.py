"""Cache record type with a closed relationship schema."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from rescache.cache.keys import CacheKey, Namespace

# Namespaces each record namespace may hold edges into.
ALLOWED_RELATIONSHIPS: dict[Namespace, frozenset[Namespace]] = {
    Namespace.IMAGE: frozenset({Namespace.NAMED_IMAGE, Namespace.INSTANCE}),
    Namespace.NAMED_IMAGE: frozenset({Namespace.IMAGE}),
    Namespace.INSTANCE: frozenset({Namespace.IMAGE, Namespace.LOAD_BALANCER}),
    Namespace.LOAD_BALANCER: frozenset({Namespace.INSTANCE}),
}


@dataclass(frozen=True)
class CacheRecord:
    """One cached item plus its edges into other namespaces.

    Relationship keys must be in ``ALLOWED_RELATIONSHIPS[id.namespace]`` and
    every related key must belong to the namespace it is filed under.
    Related keys keep their insertion order with duplicates dropped.
    """

    id: CacheKey
    attributes: Mapping[str, Any] = field(default_factory=dict)
    relationships: Mapping[Namespace, tuple[CacheKey, ...]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        allowed = ALLOWED_RELATIONSHIPS[self.id.namespace]
        normalized: dict[Namespace, tuple[CacheKey, ...]] = {}
        for namespace, keys in self.relationships.items():
            if namespace not in allowed:
                raise ValueError(f"{self.id.namespace} records cannot relate to {namespace}")
            related = tuple(dict.fromkeys(keys))
            for key in related:
                if key.namespace != namespace:
                    raise ValueError(f"{key} filed under {namespace} relationships")
            if related:
                normalized[Namespace(namespace)] = related
        object.__setattr__(self, "relationships", MappingProxyType(normalized))
        object.__setattr__(self, "attributes", MappingProxyType(dict(self.attributes)))

    @classmethod
    def build(
        cls,
        key: CacheKey,
        attributes: Mapping[str, Any] | None = None,
        **related: Iterable[CacheKey],
    ) -> CacheRecord:
        """Build a record using namespace names as keyword arguments.

        ``CacheRecord.build(key, named_image=[...])`` files keys under
        ``Namespace.NAMED_IMAGE``.
        """
        relationships = {Namespace(name.replace("_", "-")): tuple(keys) for name, keys in related.items()}
        return cls(id=key, attributes=attributes or {}, relationships=relationships)

    def related(self, namespace: Namespace) -> tuple[CacheKey, ...]:
        """Return keys related in ``namespace``; empty when there are none."""
        if namespace not in ALLOWED_RELATIONSHIPS[self.id.namespace]:
            raise ValueError(f"{self.id.namespace} records cannot relate to {namespace}")
        return self.relationships.get(namespace, ())
