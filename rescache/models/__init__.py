"""Configuration data structures for rescache."""

from rescache.models.config import ComputeConfig, LogConfig, LookupConfig, RescacheConfig

__all__ = [
    "ComputeConfig",
    "LogConfig",
    "LookupConfig",
    "RescacheConfig",
]
