"""Compute provider documents, metadata codec and client interfaces."""

from rescache.compute.metadata import MetadataEntry, from_pairs, split_list, to_pairs
from rescache.compute.models import (
    Backend,
    BackendService,
    HostRule,
    Image,
    ImageList,
    Instance,
    InstancesScopedList,
    PathMatcher,
    PathRule,
    ServiceAccount,
    UrlMap,
)

__all__ = [
    "Backend",
    "BackendService",
    "HostRule",
    "Image",
    "ImageList",
    "Instance",
    "InstancesScopedList",
    "MetadataEntry",
    "PathMatcher",
    "PathRule",
    "ServiceAccount",
    "UrlMap",
    "from_pairs",
    "split_list",
    "to_pairs",
]
