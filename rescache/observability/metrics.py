"""Prometheus counters for cache lookups and provider resolutions."""

from __future__ import annotations

from prometheus_client import Counter

cache_lookups_total = Counter(
    "rescache_cache_lookups_total",
    "Cache record lookups by namespace and result (hit, miss).",
    ["namespace", "result"],
)

resolutions_total = Counter(
    "rescache_resolutions_total",
    "Provider-backed resolutions by resolver and outcome (found, not_found).",
    ["resolver", "outcome"],
)
