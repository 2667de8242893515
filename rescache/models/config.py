"""Configuration data structures."""

from __future__ import annotations

from dataclasses import dataclass, field

DEFAULT_BASE_IMAGE_PROJECTS = (
    "centos-cloud",
    "debian-cloud",
    "rhel-cloud",
    "ubuntu-os-cloud",
)


@dataclass
class LookupConfig:
    """Named-image lookup configuration."""

    min_query_length: int = 2


@dataclass
class ComputeConfig:
    """Compute provider configuration."""

    base_url: str = "https://www.googleapis.com/compute/v1"
    base_image_projects: list[str] = field(default_factory=lambda: list(DEFAULT_BASE_IMAGE_PROJECTS))


@dataclass
class LogConfig:
    """Logging configuration."""

    level: str = "info"
    json_output: bool = True


@dataclass
class RescacheConfig:
    """Top-level rescache configuration."""

    lookup: LookupConfig = field(default_factory=LookupConfig)
    compute: ComputeConfig = field(default_factory=ComputeConfig)
    log: LogConfig = field(default_factory=LogConfig)
