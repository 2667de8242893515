"""Helpers shared by deploy operations: URLs, service accounts, sizing."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from rescache.compute.models import ServiceAccount

COMPUTE_BASE_URL = "https://www.googleapis.com/compute/v1"

AUTH_SCOPE_BASE_URL = "https://www.googleapis.com/auth/"


def local_name(url: str | None) -> str | None:
    """Return the last path segment of a resource URL (bare names pass through)."""
    if url is None:
        return None
    return url.rstrip("/").rsplit("/", 1)[-1]


def region_of_zone(zone: str) -> str:
    """``us-central1-b`` -> ``us-central1``."""
    return zone.rsplit("-", 1)[0]


def zonal_server_group_url(project: str, zone: str, name: str, base_url: str = COMPUTE_BASE_URL) -> str:
    return f"{base_url}/projects/{project}/zones/{zone}/instanceGroups/{name}"


def regional_server_group_url(project: str, region: str, name: str, base_url: str = COMPUTE_BASE_URL) -> str:
    return f"{base_url}/projects/{project}/regions/{region}/instanceGroups/{name}"


def build_service_account(email: str | None, auth_scopes: Sequence[str] | None) -> list[ServiceAccount]:
    """Build the instance service-account list.

    Empty when either the email or the scopes are unspecified. Short scope
    names (``"compute"``) are expanded to full scope URLs.
    """
    if not email or not auth_scopes:
        return []
    scopes = tuple(scope if "://" in scope else f"{AUTH_SCOPE_BASE_URL}{scope}" for scope in auth_scopes)
    return [ServiceAccount(email=email, scopes=scopes)]


@dataclass
class AutoscalingPolicy:
    min_num_replicas: int
    max_num_replicas: int


@dataclass
class DeployDescription:
    """The sizing part of a server-group deploy request."""

    target_size: int
    autoscaling_policy: AutoscalingPolicy | None = None


def calibrate_target_size(description: DeployDescription) -> None:
    """Clamp ``target_size`` into the autoscaler's replica range, in place."""
    policy = description.autoscaling_policy
    if policy is None:
        return
    description.target_size = min(max(description.target_size, policy.min_num_replicas), policy.max_num_replicas)
