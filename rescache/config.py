"""Configuration loading from environment variables."""

from __future__ import annotations

import os
import re

from rescache.models.config import (
    DEFAULT_BASE_IMAGE_PROJECTS,
    ComputeConfig,
    LogConfig,
    LookupConfig,
    RescacheConfig,
)

_PROJECT_ID = re.compile(r"^[a-z][a-z0-9.:-]*[a-z0-9]$")


def _env(key: str, default: str = "") -> str:
    return os.environ.get(f"RESCACHE_{key}", default)


def _env_bool(key: str, default: bool = False) -> bool:
    val = _env(key, str(default).lower())
    return val.lower() in ("true", "1", "yes")


def _env_int(key: str, default: int, min_val: int | None = None, max_val: int | None = None) -> int:
    val = int(_env(key, str(default)))
    if min_val is not None:
        val = max(val, min_val)
    if max_val is not None:
        val = min(val, max_val)
    return val


def _env_list(key: str, default: tuple[str, ...]) -> list[str]:
    raw = _env(key, ",".join(default))
    return [item.strip() for item in raw.split(",") if item.strip()]


def _validate_log_level(value: str) -> str:
    valid = {"debug", "info", "warning", "error"}
    if value.lower() not in valid:
        raise ValueError(f"Invalid log level: {value}. Must be one of {valid}")
    return value.lower()


def _validate_projects(values: list[str]) -> list[str]:
    for value in values:
        if not _PROJECT_ID.match(value):
            raise ValueError(f"Invalid project id: {value}")
    return values


def _validate_base_url(value: str) -> str:
    if not value.startswith(("http://", "https://")):
        raise ValueError(f"Invalid compute base URL: {value}")
    return value.rstrip("/")


def load_config() -> RescacheConfig:
    """Load configuration from RESCACHE_* environment variables."""
    return RescacheConfig(
        lookup=LookupConfig(
            min_query_length=_env_int("LOOKUP_MIN_QUERY_LENGTH", 2, min_val=1, max_val=64),
        ),
        compute=ComputeConfig(
            base_url=_validate_base_url(_env("COMPUTE_BASE_URL", "https://www.googleapis.com/compute/v1")),
            base_image_projects=_validate_projects(_env_list("BASE_IMAGE_PROJECTS", DEFAULT_BASE_IMAGE_PROJECTS)),
        ),
        log=LogConfig(
            level=_validate_log_level(_env("LOG_LEVEL", "info")),
            json_output=_env_bool("LOG_JSON", True),
        ),
    )
