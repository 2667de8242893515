"""Query engine facade.

Wires configuration, logging, the cache store, provider clients and the
load balancer directory into one object that REST controllers and deploy
operation handlers call into::

    engine = create_engine(cache=store, images=compute, instances=compute)
    views = engine.find_named_images("derp", region="us-central1")

Provider clients are optional: calling an operation whose client was not
supplied raises ``RuntimeError`` naming the missing component.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

from rescache.config import load_config
from rescache.deploy.instances import resolve_instance_urls
from rescache.deploy.source_image import ImageSpecification, find_source_image
from rescache.images.named_images import NamedImage, NamedImageLookup
from rescache.loadbalancing.directory import CachedLoadBalancerProvider, LoadBalancerProvider
from rescache.loadbalancing.models import LoadBalancerView, ServerGroup
from rescache.loadbalancing.reconcile import add_http_load_balancer_backends
from rescache.loadbalancing.resolver import resolve_load_balancers
from rescache.models.config import RescacheConfig
from rescache.observability.logging import get_logger, setup_logging

if TYPE_CHECKING:
    from rescache.cache.store import CacheStore
    from rescache.compute.client import BackendServiceClient, ImageListClient, InstanceAggregatedListClient
    from rescache.compute.models import Image
    from rescache.reporting import StatusReporter


class ResourceQueryEngine:
    """Owns the collaborators every query needs; holds no per-call state."""

    def __init__(
        self,
        config: RescacheConfig,
        cache: CacheStore,
        images: ImageListClient | None = None,
        instances: InstanceAggregatedListClient | None = None,
        backend_services: BackendServiceClient | None = None,
        load_balancers: LoadBalancerProvider | None = None,
        batch_images: bool = False,
    ) -> None:
        self.config = config
        self._cache = cache
        self._images = images
        self._batch_images = batch_images
        self._instances = instances
        self._backend_services = backend_services
        self._load_balancers = load_balancers or CachedLoadBalancerProvider(cache)
        self._named_images = NamedImageLookup(cache, min_query_length=config.lookup.min_query_length)
        self._log = get_logger("engine")

    @staticmethod
    def _require(component: object | None, name: str) -> object:
        if component is None:
            raise RuntimeError(f"Query engine was created without a {name} client")
        return component

    # ------------------------------------------------------------------
    # Cache-backed lookups
    # ------------------------------------------------------------------

    def find_named_images(self, q: str | None, account: str | None = None, region: str | None = None) -> list[NamedImage]:
        return self._named_images.search(q, account=account, region=region)

    def named_images_for_image(self, account: str, region: str, image_id: str) -> list[NamedImage]:
        return self._named_images.get_by_image_id(account, region, image_id)

    def resolve_load_balancers(
        self,
        names: Sequence[str],
        application: str = "",
        reporter: StatusReporter | None = None,
    ) -> list[LoadBalancerView]:
        return resolve_load_balancers(self._load_balancers, names, application=application, reporter=reporter)

    # ------------------------------------------------------------------
    # Provider-backed resolutions
    # ------------------------------------------------------------------

    async def find_source_image(
        self,
        project: str,
        spec: ImageSpecification,
        reporter: StatusReporter | None = None,
    ) -> Image:
        """Search ``project``, account image projects, then configured base projects."""
        client = self._require(self._images, "image list")
        return await find_source_image(
            project,
            spec,
            client,  # type: ignore[arg-type]
            fallback_projects=self.config.compute.base_image_projects,
            reporter=reporter,
            batch=self._batch_images,
        )

    async def resolve_instance_urls(
        self,
        project: str,
        region: str,
        names: Sequence[str],
        reporter: StatusReporter | None = None,
    ) -> list[str]:
        client = self._require(self._instances, "instance aggregated list")
        return await resolve_instance_urls(project, region, names, client, reporter=reporter)  # type: ignore[arg-type]

    async def add_http_load_balancer_backends(
        self,
        project: str,
        server_group: ServerGroup,
        reporter: StatusReporter | None = None,
    ) -> list[str]:
        client = self._require(self._backend_services, "backend service")
        updated = await add_http_load_balancer_backends(
            client,  # type: ignore[arg-type]
            project,
            server_group,
            self._load_balancers,
            reporter=reporter,
            base_url=self.config.compute.base_url,
        )
        self._log.info("http_backends_reconciled", server_group=server_group.name, updated=updated)
        return updated


def create_engine(
    cache: CacheStore,
    images: ImageListClient | None = None,
    instances: InstanceAggregatedListClient | None = None,
    backend_services: BackendServiceClient | None = None,
    load_balancers: LoadBalancerProvider | None = None,
    config: RescacheConfig | None = None,
    configure_logging: bool = True,
    batch_images: bool = False,
) -> ResourceQueryEngine:
    """Build a ``ResourceQueryEngine``.

    Loads configuration from the environment when ``config`` is not given
    and, unless ``configure_logging`` is False, configures structlog from it.
    Pass ``batch_images=True`` when ``images`` implements
    ``BatchImageListClient`` to list every candidate project in one call.
    """
    config = config or load_config()
    if configure_logging:
        setup_logging(config.log.level, json_output=config.log.json_output)
    engine = ResourceQueryEngine(
        config=config,
        cache=cache,
        images=images,
        instances=instances,
        backend_services=backend_services,
        load_balancers=load_balancers,
        batch_images=batch_images,
    )
    get_logger("engine").info(
        "query engine created",
        base_image_projects=config.compute.base_image_projects,
        min_query_length=config.lookup.min_query_length,
    )
    return engine
