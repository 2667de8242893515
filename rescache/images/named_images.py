"""Named-image lookup over the ``image`` and ``named-image`` namespaces.

A named image is never stored directly. It is reassembled per query by
joining ``named-image`` records (keyed by account + name, related to the
images carrying that name) with ``image`` records (keyed by account +
region + id, related to their owning named image).
"""

from __future__ import annotations

import sys
from collections.abc import Iterable
from dataclasses import dataclass, field

from rescache.cache.keys import CacheKey, Namespace, glob_pattern, image_key
from rescache.cache.records import ALLOWED_RELATIONSHIPS, CacheRecord
from rescache.cache.store import CacheStore
from rescache.errors import InvalidQueryError, NotFoundError
from rescache.observability.logging import get_logger
from rescache.observability.metrics import cache_lookups_total

_logger = get_logger("images.named_images")

MIN_QUERY_LENGTH = 2

_GLOB_CHARS = ("*", "?", "[", "\\")

# Rank for names that do not contain the query term at all.
_NOT_FOUND_RANK = sys.maxsize


class NamedImageNotFoundError(NotFoundError):
    resource_label = "Named images"


@dataclass
class NamedImage:
    """Aggregate view of every image sharing a name across accounts and regions."""

    image_name: str
    accounts: set[str] = field(default_factory=set)
    amis: dict[str, set[str]] = field(default_factory=dict)

    def add_image(self, region: str, image_id: str) -> None:
        self.amis.setdefault(region, set()).add(image_id)


def to_glob(term: str) -> str:
    """Wrap ``term`` in ``*`` unless it already contains glob metacharacters."""
    if any(char in term for char in _GLOB_CHARS):
        return term
    return f"*{term}*"


def _rank(view: NamedImage, term: str | None) -> tuple[int, str]:
    if not term:
        return (0, view.image_name)
    index = view.image_name.find(term)
    return (index if index >= 0 else _NOT_FOUND_RANK, view.image_name)


class NamedImageLookup:
    """Read-only named-image queries against a ``CacheStore``."""

    def __init__(self, cache: CacheStore, min_query_length: int = MIN_QUERY_LENGTH) -> None:
        self._cache = cache
        self._min_query_length = min_query_length

    def get_by_exact_id(self, namespace: Namespace, key: CacheKey, required: Namespace) -> CacheRecord:
        """Return the record for ``key`` if it relates into ``required``.

        An absent record and a record without such relationships are both
        reported as not found.

        Raises:
            ValueError: ``namespace`` records can never relate into ``required``.
                Checked before the cache is read, so the outcome does not
                depend on whether the record exists.
            NotFoundError: the record is absent or has no such relationships.
        """
        if required not in ALLOWED_RELATIONSHIPS[namespace]:
            raise ValueError(f"{namespace} records cannot relate to {required}")
        record = self._cache.get(namespace, key.encode())
        if record is None or not record.related(required):
            cache_lookups_total.labels(namespace=namespace.value, result="miss").inc()
            _logger.info(
                "cache_record_not_found",
                namespace=namespace.value,
                key=key.encode(),
                present=record is not None,
            )
            raise NotFoundError([key.encode()])
        cache_lookups_total.labels(namespace=namespace.value, result="hit").inc()
        return record

    def get_by_image_id(self, account: str, region: str, image_id: str) -> list[NamedImage]:
        """Return the named image(s) owning one exact image."""
        record = self.get_by_exact_id(Namespace.IMAGE, image_key(account, region, image_id), Namespace.NAMED_IMAGE)
        named_keys = [key.encode() for key in record.related(Namespace.NAMED_IMAGE)]
        named_records = self._cache.get_all(Namespace.NAMED_IMAGE, named_keys)
        views = self._render(named_records, ())
        if not views:
            raise NamedImageNotFoundError([image_id], detail=f"No named image in {account}/{region}.")
        return views

    def search(self, q: str | None, account: str | None = None, region: str | None = None) -> list[NamedImage]:
        """Find named images whose name or image id matches ``q``.

        Raises:
            InvalidQueryError: ``q`` is missing or shorter than the minimum.
            NotFoundError: nothing matched, or nothing survived the region filter.
        """
        if q is None or len(q) < self._min_query_length:
            raise InvalidQueryError(
                f"Minimum of {self._min_query_length} characters required to filter named images"
            )

        glob = to_glob(q)
        named_search = glob_pattern(Namespace.NAMED_IMAGE, {"account": account or "*", "image_name": glob})
        image_search = glob_pattern(
            Namespace.IMAGE,
            {"account": account or "*", "region": region or "*", "image_id": glob},
        )

        named_ids = self._cache.filter_identifiers(Namespace.NAMED_IMAGE, named_search)
        image_ids = self._cache.filter_identifiers(Namespace.IMAGE, image_search)
        matches_by_name = self._cache.get_all(Namespace.NAMED_IMAGE, named_ids)
        matches_by_image_id = self._cache.get_all(Namespace.IMAGE, image_ids)

        _logger.debug(
            "named_image_search",
            q=q,
            glob=glob,
            named_matches=len(matches_by_name),
            image_matches=len(matches_by_image_id),
        )

        if not matches_by_name and not matches_by_image_id:
            raise NamedImageNotFoundError([q])

        views = self._render(matches_by_name, matches_by_image_id, requested_name=q, required_region=region)
        if not views:
            raise NamedImageNotFoundError([q], detail=f"No match in region {region}.")
        return views

    def _render(
        self,
        named_images: Iterable[CacheRecord],
        images: Iterable[CacheRecord],
        requested_name: str | None = None,
        required_region: str | None = None,
    ) -> list[NamedImage]:
        by_name: dict[str, NamedImage] = {}

        def view_for(name: str) -> NamedImage:
            return by_name.setdefault(name, NamedImage(image_name=name))

        for record in named_images:
            view = view_for(record.id["image_name"])
            view.accounts.add(record.id["account"])
            for related in record.related(Namespace.IMAGE):
                view.add_image(related["region"], related["image_id"])

        for record in images:
            owners = record.related(Namespace.NAMED_IMAGE)
            if not owners:
                _logger.warning("image_without_named_image", key=record.id.encode())
                continue
            view = view_for(owners[0]["image_name"])
            view.accounts.add(record.id["account"])
            view.add_image(record.id["region"], record.id["image_id"])

        results = [view for view in by_name.values() if not required_region or required_region in view.amis]
        return sorted(results, key=lambda view: _rank(view, requested_name))
