"""Resolve load balancer names against the load balancer directory."""

from __future__ import annotations

from collections.abc import Sequence

from rescache.errors import LoadBalancerNotFoundError
from rescache.loadbalancing.directory import LoadBalancerProvider
from rescache.loadbalancing.models import LoadBalancerView
from rescache.observability.logging import get_logger
from rescache.observability.metrics import resolutions_total
from rescache.reporting import StatusReporter, default_reporter

_logger = get_logger("loadbalancing.resolver")

BASE_PHASE = "QUERY_LOAD_BALANCERS"


def resolve_load_balancers(
    provider: LoadBalancerProvider,
    names: Sequence[str],
    application: str = "",
    reporter: StatusReporter | None = None,
) -> list[LoadBalancerView]:
    """Return a view for every name in ``names``, in the same order.

    Raises:
        LoadBalancerNotFoundError: listing every missing name in request order.
    """
    reporter = default_reporter(reporter)
    reporter.update_status(BASE_PHASE, f"Looking up load balancers {', '.join(names)}...")

    by_name = {view.name: view for view in provider.application_load_balancers(application)}
    missing = list(dict.fromkeys(name for name in names if name not in by_name))
    if missing:
        resolutions_total.labels(resolver="load_balancers", outcome="not_found").inc()
        _logger.warning("load_balancers_not_found", application=application, missing=missing)
        raise LoadBalancerNotFoundError(missing)

    resolutions_total.labels(resolver="load_balancers", outcome="found").inc()
    return [by_name[name] for name in names]
