"""Composite cache key codec.

Key format: ``{namespace}:{field_1}:{field_2}...``

Fields appear in a fixed order per namespace (see ``KEY_FIELDS``). Field
values are percent-escaped so the ``:`` separator never appears inside a
value:

- ``%`` -> ``%25``
- ``:`` -> ``%3A``

Glob metacharacters are never escaped, so ``glob_pattern`` can build search
patterns for ``CacheStore.filter_identifiers`` from the same schema.
"""

from __future__ import annotations

import re
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from enum import StrEnum

from rescache.errors import MalformedKeyError

SEPARATOR = ":"

_INVALID_ESCAPE = re.compile(r"%(?!25|3A)")


class Namespace(StrEnum):
    """Logical partitions of the cache, each with its own key schema."""

    IMAGE = "image"
    NAMED_IMAGE = "named-image"
    INSTANCE = "instance"
    LOAD_BALANCER = "load-balancer"


KEY_FIELDS: dict[Namespace, tuple[str, ...]] = {
    Namespace.IMAGE: ("account", "region", "image_id"),
    Namespace.NAMED_IMAGE: ("account", "image_name"),
    Namespace.INSTANCE: ("account", "region", "instance_id"),
    Namespace.LOAD_BALANCER: ("account", "region", "name"),
}


def _escape(value: str) -> str:
    return value.replace("%", "%25").replace(SEPARATOR, "%3A")


def _unescape(value: str) -> str:
    return value.replace("%3A", SEPARATOR).replace("%25", "%")


@dataclass(frozen=True)
class CacheKey:
    """Structured form of a cache key.

    ``values`` follow the namespace's field order; use ``fields`` or item
    access (``key["region"]``) to read them by name.
    """

    namespace: Namespace
    values: tuple[str, ...]

    def __post_init__(self) -> None:
        expected = len(KEY_FIELDS[self.namespace])
        if len(self.values) != expected:
            raise ValueError(f"{self.namespace} keys take {expected} fields, got {len(self.values)}")

    @classmethod
    def of(cls, namespace: Namespace, fields: Mapping[str, str]) -> CacheKey:
        """Build a key from a field-name mapping, rejecting missing or unknown names."""
        names = KEY_FIELDS[namespace]
        unknown = sorted(set(fields) - set(names))
        if unknown:
            raise ValueError(f"Unknown {namespace} key fields: {', '.join(unknown)}")
        missing = [name for name in names if name not in fields]
        if missing:
            raise ValueError(f"Missing {namespace} key fields: {', '.join(missing)}")
        return cls(namespace, tuple(fields[name] for name in names))

    @property
    def fields(self) -> dict[str, str]:
        return dict(zip(KEY_FIELDS[self.namespace], self.values, strict=True))

    def __getitem__(self, name: str) -> str:
        try:
            index = KEY_FIELDS[self.namespace].index(name)
        except ValueError:
            raise KeyError(name) from None
        return self.values[index]

    def __iter__(self) -> Iterator[str]:
        return iter(self.values)

    def encode(self) -> str:
        return SEPARATOR.join([self.namespace.value, *(_escape(v) for v in self.values)])

    def __str__(self) -> str:
        return self.encode()


def encode(namespace: Namespace, fields: Mapping[str, str]) -> str:
    """Encode ``fields`` into the flat key string for ``namespace``."""
    return CacheKey.of(namespace, fields).encode()


def decode(key: str) -> CacheKey:
    """Decode a flat key string.

    Raises:
        MalformedKeyError: unknown namespace prefix, wrong field count, or an
            escape sequence ``encode`` never produces.
    """
    prefix, _, rest = key.partition(SEPARATOR)
    try:
        namespace = Namespace(prefix)
    except ValueError:
        raise MalformedKeyError(key, f"unknown namespace {prefix!r}") from None

    raw = rest.split(SEPARATOR) if rest or key.endswith(SEPARATOR) else []
    arity = len(KEY_FIELDS[namespace])
    if len(raw) != arity:
        raise MalformedKeyError(key, f"{namespace} keys take {arity} fields, found {len(raw)}")
    if any(_INVALID_ESCAPE.search(value) for value in raw):
        raise MalformedKeyError(key, "invalid escape sequence")
    return CacheKey(namespace, tuple(_unescape(value) for value in raw))


def glob_pattern(namespace: Namespace, fields: Mapping[str, str]) -> str:
    """Build a glob over ``namespace`` keys; absent fields match anything."""
    names = KEY_FIELDS[namespace]
    unknown = sorted(set(fields) - set(names))
    if unknown:
        raise ValueError(f"Unknown {namespace} key fields: {', '.join(unknown)}")
    parts = [_escape(fields[name]) if name in fields else "*" for name in names]
    return SEPARATOR.join([namespace.value, *parts])


def image_key(account: str, region: str, image_id: str) -> CacheKey:
    return CacheKey(Namespace.IMAGE, (account, region, image_id))


def named_image_key(account: str, image_name: str) -> CacheKey:
    return CacheKey(Namespace.NAMED_IMAGE, (account, image_name))


def instance_key(account: str, region: str, instance_id: str) -> CacheKey:
    return CacheKey(Namespace.INSTANCE, (account, region, instance_id))


def load_balancer_key(account: str, region: str, name: str) -> CacheKey:
    return CacheKey(Namespace.LOAD_BALANCER, (account, region, name))
