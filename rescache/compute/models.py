"""Provider resource documents consumed by the resolvers.

These mirror the fields of the compute API documents that the resolvers
read; everything else the provider returns is ignored.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Image:
    """A compute image as listed in a project."""

    name: str
    self_link: str = ""
    project: str = ""
    family: str | None = None


@dataclass
class ImageList:
    """One page of a project's image listing."""

    items: list[Image] = field(default_factory=list)


@dataclass(frozen=True)
class Instance:
    name: str
    self_link: str
    zone: str = ""


@dataclass
class InstancesScopedList:
    """Instances of one zone within an aggregated listing."""

    instances: list[Instance] = field(default_factory=list)


@dataclass(frozen=True)
class ServiceAccount:
    email: str
    scopes: tuple[str, ...] = ()


@dataclass
class Backend:
    """A backend (instance group) attached to a backend service."""

    group: str
    balancing_mode: str = "UTILIZATION"
    max_utilization: float | None = None
    max_rate_per_instance: float | None = None
    capacity_scaler: float | None = None


@dataclass
class BackendService:
    name: str
    backends: list[Backend] = field(default_factory=list)
    health_checks: list[str] = field(default_factory=list)
    port_name: str = "http"


@dataclass
class PathRule:
    paths: list[str]
    service: str


@dataclass
class PathMatcher:
    name: str
    default_service: str | None = None
    path_rules: list[PathRule] = field(default_factory=list)


@dataclass
class HostRule:
    hosts: list[str]
    path_matcher: str


@dataclass
class UrlMap:
    """Remote URL map document.

    ``certificate`` is not part of the provider's URL map resource; callers
    copy it from the target HTTPS proxy so drift detection sees both.
    """

    name: str = ""
    default_service: str | None = None
    host_rules: list[HostRule] = field(default_factory=list)
    path_matchers: list[PathMatcher] = field(default_factory=list)
    certificate: str | None = None

    def path_matcher(self, name: str) -> PathMatcher | None:
        return next((matcher for matcher in self.path_matchers if matcher.name == name), None)
