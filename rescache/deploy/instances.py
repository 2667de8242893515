"""Resolve instance names to self-links within one region."""

from __future__ import annotations

from collections.abc import Sequence

from rescache.compute.client import InstanceAggregatedListClient
from rescache.deploy.utils import region_of_zone
from rescache.errors import InstanceNotFoundError
from rescache.observability.logging import get_logger
from rescache.observability.metrics import resolutions_total
from rescache.reporting import StatusReporter, default_reporter

_logger = get_logger("deploy.instances")

BASE_PHASE = "QUERY_INSTANCES"

_ZONE_SCOPE_PREFIX = "zones/"


async def resolve_instance_urls(
    project: str,
    region: str,
    names: Sequence[str],
    client: InstanceAggregatedListClient,
    reporter: StatusReporter | None = None,
) -> list[str]:
    """Return the self-link of each requested instance, in request order.

    Only zones of ``region`` are searched; an instance of the same name in
    another region counts as missing.

    Raises:
        InstanceNotFoundError: listing every unresolved name in request order.
    """
    reporter = default_reporter(reporter)
    reporter.update_status(BASE_PHASE, f"Looking up instances {', '.join(names)} in {project}/{region}...")

    listing = await client.aggregated_list_instances(project)

    wanted = set(names)
    found: dict[str, str] = {}
    for scope, scoped in listing.items():
        if not scope.startswith(_ZONE_SCOPE_PREFIX):
            continue
        zone = scope[len(_ZONE_SCOPE_PREFIX):]
        if region_of_zone(zone) != region:
            continue
        for instance in scoped.instances:
            if instance.name in wanted and instance.name not in found:
                found[instance.name] = instance.self_link

    missing = list(dict.fromkeys(name for name in names if name not in found))
    if missing:
        resolutions_total.labels(resolver="instances", outcome="not_found").inc()
        _logger.warning("instances_not_found", project=project, region=region, missing=missing)
        raise InstanceNotFoundError(missing)

    resolutions_total.labels(resolver="instances", outcome="found").inc()
    reporter.update_status(BASE_PHASE, f"Found {len(names)} instance(s) in {region}.")
    return [found[name] for name in names]
