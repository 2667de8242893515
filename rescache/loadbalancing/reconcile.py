"""Drift detection for URL maps and backend-service membership.

Service references are compared by local name, so a full resource URL on
one side and a bare name on the other are treated as equal.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Sequence

from rescache.compute.client import BackendServiceClient
from rescache.compute.models import Backend, BackendService, PathMatcher, UrlMap
from rescache.deploy.utils import COMPUTE_BASE_URL, local_name, regional_server_group_url, zonal_server_group_url
from rescache.errors import NotFoundError
from rescache.loadbalancing.directory import LoadBalancerProvider
from rescache.loadbalancing.models import (
    HttpLoadBalancerDescription,
    HttpLoadBalancingPolicy,
    LoadBalancerType,
    PathMatcherSpec,
    ServerGroup,
)
from rescache.loadbalancing.resolver import resolve_load_balancers
from rescache.observability.logging import get_logger
from rescache.reporting import StatusReporter, default_reporter

_logger = get_logger("loadbalancing.reconcile")

BASE_PHASE = "ADD_HTTP_BACKENDS"


class LoadBalancingPolicyNotFoundError(NotFoundError):
    resource_label = "Load balancing policies"


def _path_matcher_differs(remote: PathMatcher, desired: PathMatcherSpec) -> bool:
    if desired.default_service is not None and local_name(remote.default_service) != desired.default_service.name:
        return True
    if len(remote.path_rules) != len(desired.path_rules):
        return True
    remaining = list(remote.path_rules)
    for rule in desired.path_rules:
        match = next(
            (
                candidate
                for candidate in remaining
                if set(candidate.paths) == set(rule.paths)
                and local_name(candidate.service) == rule.backend_service.name
            ),
            None,
        )
        if match is None:
            return True
        remaining.remove(match)
    return False


def url_map_differs(url_map: UrlMap, description: HttpLoadBalancerDescription) -> bool:
    """Return True when ``url_map`` must be updated to match ``description``."""
    if local_name(url_map.default_service) != description.default_service.name:
        return True
    if local_name(url_map.certificate or "") != local_name(description.certificate or ""):
        return True
    if len(url_map.host_rules) != len(description.host_rules):
        return True

    remaining = list(url_map.host_rules)
    for rule in description.host_rules:
        match = next((candidate for candidate in remaining if set(candidate.hosts) == set(rule.host_patterns)), None)
        if match is None:
            return True
        remaining.remove(match)
        matcher = url_map.path_matcher(match.path_matcher)
        if matcher is None or _path_matcher_differs(matcher, rule.path_matcher):
            return True
    return False


def backends_differ(service: BackendService, desired: Sequence[Backend]) -> bool:
    """Return True when ``service`` does not hold exactly the ``desired`` groups."""
    if len(service.backends) != len(desired):
        return True
    return Counter(backend.group for backend in service.backends) != Counter(backend.group for backend in desired)


def backend_from_policy(group: str, policy: HttpLoadBalancingPolicy) -> Backend:
    return Backend(
        group=group,
        balancing_mode=policy.balancing_mode,
        max_utilization=policy.max_utilization,
        max_rate_per_instance=policy.max_rate_per_instance,
        capacity_scaler=policy.capacity_scaler,
    )


async def add_http_load_balancer_backends(
    compute: BackendServiceClient,
    project: str,
    server_group: ServerGroup,
    provider: LoadBalancerProvider,
    reporter: StatusReporter | None = None,
    base_url: str = COMPUTE_BASE_URL,
) -> list[str]:
    """Register ``server_group`` as a backend of its HTTP load balancers' services.

    Returns the names of the backend services that were updated. Services
    already holding the group are left alone.

    Raises:
        LoadBalancerNotFoundError: a load balancer named in metadata is unknown.
        LoadBalancingPolicyNotFoundError: HTTP load balancers are configured
            but the metadata carries no load-balancing policy.
    """
    reporter = default_reporter(reporter)
    names = server_group.load_balancer_names
    if not names:
        return []

    views = resolve_load_balancers(provider, names, reporter=reporter)
    http_views = [view for view in views if view.load_balancer_type == LoadBalancerType.HTTP]
    if not http_views:
        return []

    policy = server_group.load_balancing_policy
    if policy is None:
        _logger.warning("load_balancing_policy_missing", server_group=server_group.name)
        raise LoadBalancingPolicyNotFoundError([server_group.name])

    if server_group.regional:
        group_url = regional_server_group_url(project, server_group.region, server_group.name, base_url)
    else:
        group_url = zonal_server_group_url(project, server_group.zone, server_group.name, base_url)

    service_names = server_group.backend_service_names
    if not service_names:
        _logger.warning(
            "backend_service_names_missing",
            server_group=server_group.name,
            load_balancers=[view.name for view in http_views],
        )
        return []

    updated: list[str] = []
    for service_name in service_names:
        service = await compute.get_backend_service(project, service_name)
        desired = list(service.backends)
        if group_url not in {backend.group for backend in desired}:
            desired.append(backend_from_policy(group_url, policy))
        if not backends_differ(service, desired):
            _logger.debug("backend_already_registered", backend_service=service_name, group=group_url)
            continue
        service.backends = desired
        await compute.update_backend_service(project, service_name, service)
        updated.append(service_name)
        reporter.update_status(
            BASE_PHASE,
            f"Enabled backend for server group {server_group.name} in backend service {service_name}.",
        )
    return updated
