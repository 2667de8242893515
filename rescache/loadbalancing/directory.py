"""Load balancer directory interface and its cache-backed implementation."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from rescache.cache.keys import Namespace, glob_pattern
from rescache.cache.store import CacheStore
from rescache.loadbalancing.models import LoadBalancerType, LoadBalancerView


class LoadBalancerProvider(Protocol):
    def application_load_balancers(self, application: str) -> Sequence[LoadBalancerView]:
        """Return load balancers visible to ``application`` ("" for all)."""
        ...


class CachedLoadBalancerProvider:
    """Reads load balancers from the ``load-balancer`` cache namespace.

    Load balancers belong to an application by name prefix
    (``<application>-...``), following the deployment naming convention.
    """

    def __init__(self, cache: CacheStore, account: str | None = None) -> None:
        self._cache = cache
        self._account = account

    def application_load_balancers(self, application: str) -> list[LoadBalancerView]:
        name_glob = f"{application}-*" if application else "*"
        pattern = glob_pattern(Namespace.LOAD_BALANCER, {"account": self._account or "*", "name": name_glob})
        keys = self._cache.filter_identifiers(Namespace.LOAD_BALANCER, pattern)
        return [
            LoadBalancerView(
                name=record.id["name"],
                load_balancer_type=LoadBalancerType(record.attributes.get("type", LoadBalancerType.NETWORK)),
                account=record.id["account"],
                region=record.id["region"],
            )
            for record in self._cache.get_all(Namespace.LOAD_BALANCER, keys)
        ]
