"""Load balancer resolution and backend/URL-map reconciliation."""

from rescache.loadbalancing.directory import CachedLoadBalancerProvider, LoadBalancerProvider
from rescache.loadbalancing.models import LoadBalancerType, LoadBalancerView, ServerGroup
from rescache.loadbalancing.reconcile import add_http_load_balancer_backends, backends_differ, url_map_differs
from rescache.loadbalancing.resolver import resolve_load_balancers

__all__ = [
    "CachedLoadBalancerProvider",
    "LoadBalancerProvider",
    "LoadBalancerType",
    "LoadBalancerView",
    "ServerGroup",
    "add_http_load_balancer_backends",
    "backends_differ",
    "resolve_load_balancers",
    "url_map_differs",
]
