"""Conversion between flat metadata mappings and the provider's item list."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass


@dataclass(frozen=True)
class MetadataEntry:
    key: str
    value: str


def to_pairs(metadata: Mapping[str, str]) -> list[MetadataEntry]:
    """Return one entry per key, in the mapping's iteration order."""
    return [MetadataEntry(key=key, value=value) for key, value in metadata.items()]


def from_pairs(entries: Iterable[MetadataEntry] | None) -> dict[str, str]:
    """Collapse entries into a mapping.

    ``None`` (an instance template with no metadata) yields ``{}``. When the
    provider returns a key more than once the last value wins.
    """
    return {entry.key: entry.value for entry in entries or ()}


def split_list(value: str | None) -> list[str]:
    """Split a comma-separated metadata value, dropping blank items."""
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]
