"""Source-image search across an ordered list of candidate projects.

Every candidate project is listed concurrently; the winner is picked by the
project's position in the search order, never by which response arrived
first.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import cast

from rescache.compute.client import BatchImageListClient, ImageListClient
from rescache.compute.models import Image, ImageList
from rescache.errors import ImageNotFoundError
from rescache.observability.logging import get_logger
from rescache.observability.metrics import resolutions_total
from rescache.reporting import StatusReporter, default_reporter

_logger = get_logger("deploy.source_image")

BASE_PHASE = "QUERY_SOURCE_IMAGE"


@dataclass
class AccountImageConfig:
    """Image-related settings of the account a deployment runs under."""

    image_projects: list[str] = field(default_factory=list)


@dataclass
class ImageSpecification:
    """The image a deployment asks for, plus the account it is resolved in."""

    image: str
    account: AccountImageConfig | None = None


def search_order(primary_project: str, spec: ImageSpecification, fallback_projects: Iterable[str]) -> list[str]:
    """Primary project, then account-pinned projects, then fallbacks; first occurrence wins."""
    pinned = spec.account.image_projects if spec.account else []
    candidates = [primary_project, *pinned, *fallback_projects]
    return list(dict.fromkeys(project for project in candidates if project))


async def _list_all(client: ImageListClient, projects: Sequence[str], batch: bool) -> list[ImageList]:
    if batch:
        listings = await cast(BatchImageListClient, client).batch_list_images(projects)
        if len(listings) != len(projects):
            raise ValueError(f"Batch returned {len(listings)} listings for {len(projects)} projects")
        return listings
    return list(await asyncio.gather(*(client.list_images(project) for project in projects)))


async def find_source_image(
    primary_project: str,
    spec: ImageSpecification,
    client: ImageListClient,
    fallback_projects: Iterable[str] = (),
    reporter: StatusReporter | None = None,
    batch: bool = False,
) -> Image:
    """Return the image named ``spec.image`` from the earliest project containing it.

    With ``batch`` set, ``client`` must implement ``BatchImageListClient`` and
    every project is listed in a single call.

    Raises:
        ImageNotFoundError: no candidate project has an image with that exact name.
    """
    reporter = default_reporter(reporter)
    projects = search_order(primary_project, spec, fallback_projects)
    reporter.update_status(BASE_PHASE, f"Looking up source image {spec.image} in projects {', '.join(projects)}...")

    listings = await _list_all(client, projects, batch)

    for project, listing in zip(projects, listings, strict=True):
        match = next((image for image in listing.items if image.name == spec.image), None)
        if match is not None:
            resolutions_total.labels(resolver="source_image", outcome="found").inc()
            _logger.info("source_image_found", image=spec.image, project=project, candidates=len(projects))
            reporter.update_status(BASE_PHASE, f"Found source image {spec.image} in project {project}.")
            return match

    resolutions_total.labels(resolver="source_image", outcome="not_found").inc()
    _logger.warning("source_image_not_found", image=spec.image, projects=projects)
    raise ImageNotFoundError([spec.image], detail=f"Searched projects: {', '.join(projects)}.")
