"""Load balancer views, desired declarations and server-group metadata."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import StrEnum

from rescache.compute.metadata import MetadataEntry, from_pairs, split_list


class LoadBalancerType(StrEnum):
    NETWORK = "network"
    HTTP = "http"


@dataclass(frozen=True)
class LoadBalancerView:
    """A load balancer as exposed by the load balancer directory."""

    name: str
    load_balancer_type: LoadBalancerType = LoadBalancerType.NETWORK
    account: str = ""
    region: str = "global"


# --- Desired state --------------------------------------------------------


@dataclass
class BackendServiceSpec:
    name: str
    health_check: str | None = None


@dataclass
class PathRuleSpec:
    paths: list[str]
    backend_service: BackendServiceSpec


@dataclass
class PathMatcherSpec:
    path_rules: list[PathRuleSpec] = field(default_factory=list)
    default_service: BackendServiceSpec | None = None


@dataclass
class HostRuleSpec:
    host_patterns: list[str]
    path_matcher: PathMatcherSpec


@dataclass
class HttpLoadBalancerDescription:
    """Declarative description of an HTTP(S) load balancer's URL map."""

    load_balancer_name: str
    default_service: BackendServiceSpec
    host_rules: list[HostRuleSpec] = field(default_factory=list)
    certificate: str = ""
    port_range: str = "80"


@dataclass
class HttpLoadBalancingPolicy:
    """Backend settings a server group registers with, stored as JSON metadata."""

    balancing_mode: str = "UTILIZATION"
    max_utilization: float | None = None
    max_rate_per_instance: float | None = None
    capacity_scaler: float | None = None

    @classmethod
    def from_json(cls, raw: str) -> HttpLoadBalancingPolicy:
        data = json.loads(raw)
        return cls(
            balancing_mode=data.get("balancingMode", "UTILIZATION"),
            max_utilization=data.get("maxUtilization"),
            max_rate_per_instance=data.get("maxRatePerInstance"),
            capacity_scaler=data.get("capacityScaler"),
        )


# --- Server groups --------------------------------------------------------

GLOBAL_LOAD_BALANCER_NAMES = "global-load-balancer-names"
REGIONAL_LOAD_BALANCER_NAMES = "load-balancer-names"
BACKEND_SERVICE_NAMES = "backend-service-names"
LOAD_BALANCING_POLICY = "load-balancing-policy"


@dataclass
class ServerGroup:
    """A managed instance group and its instance-template metadata."""

    name: str
    region: str
    zone: str = ""
    regional: bool = False
    metadata: list[MetadataEntry] = field(default_factory=list)

    @property
    def metadata_map(self) -> dict[str, str]:
        return from_pairs(self.metadata)

    @property
    def load_balancer_names(self) -> list[str]:
        values = self.metadata_map
        return split_list(values.get(GLOBAL_LOAD_BALANCER_NAMES)) + split_list(
            values.get(REGIONAL_LOAD_BALANCER_NAMES)
        )

    @property
    def backend_service_names(self) -> list[str]:
        return split_list(self.metadata_map.get(BACKEND_SERVICE_NAMES))

    @property
    def load_balancing_policy(self) -> HttpLoadBalancingPolicy | None:
        raw = self.metadata_map.get(LOAD_BALANCING_POLICY)
        return HttpLoadBalancingPolicy.from_json(raw) if raw else None
