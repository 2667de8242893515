"""Provider client interfaces consumed by the resolvers.

Implementations wrap a cloud SDK or REST transport. Every method may raise
any transport error; resolvers let those propagate unchanged.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Protocol, runtime_checkable

from rescache.compute.models import BackendService, ImageList, InstancesScopedList


@runtime_checkable
class ImageListClient(Protocol):
    async def list_images(self, project: str) -> ImageList: ...


class BatchImageListClient(ImageListClient, Protocol):
    """A client that can list several projects in one batched round trip.

    Callers opt in with ``batch=True``; the capability is never inferred from
    the presence of ``batch_list_images``.
    """

    async def batch_list_images(self, projects: Sequence[str]) -> list[ImageList]:
        """Return one listing per project, in the order given."""
        ...


@runtime_checkable
class InstanceAggregatedListClient(Protocol):
    async def aggregated_list_instances(self, project: str) -> Mapping[str, InstancesScopedList]:
        """Return listings keyed by scope, e.g. ``"zones/us-central1-b"``."""
        ...


@runtime_checkable
class BackendServiceClient(Protocol):
    async def get_backend_service(self, project: str, name: str) -> BackendService: ...

    async def update_backend_service(self, project: str, name: str, service: BackendService) -> None: ...
