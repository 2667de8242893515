"""End-to-end tests for ResourceQueryEngine over a populated cache."""

from __future__ import annotations

import json

import pytest

from rescache.cache.store import InMemoryCacheStore
from rescache.compute.metadata import to_pairs
from rescache.deploy.source_image import AccountImageConfig, ImageSpecification
from rescache.engine import ResourceQueryEngine, create_engine
from rescache.errors import ImageNotFoundError, InstanceNotFoundError, InvalidQueryError, LoadBalancerNotFoundError
from rescache.loadbalancing.directory import CachedLoadBalancerProvider
from rescache.loadbalancing.models import (
    BACKEND_SERVICE_NAMES,
    GLOBAL_LOAD_BALANCER_NAMES,
    LOAD_BALANCING_POLICY,
    REGIONAL_LOAD_BALANCER_NAMES,
    LoadBalancerType,
    ServerGroup,
)
from rescache.models.config import LookupConfig, RescacheConfig
from rescache.reporting import RecordingStatusReporter

from .conftest import PROJECT, REGION, BatchingFakeCompute, FakeCompute

pytestmark = pytest.mark.integration

# ---------------------------------------------------------------------------
# Named images
# ---------------------------------------------------------------------------


class TestNamedImages:
    def test_search_ranks_by_term_position(self, engine: ResourceQueryEngine) -> None:
        views = engine.find_named_images("derp")
        assert [v.image_name for v in views] == ["derpful-base", "xderpx"]

    def test_search_with_region(self, engine: ResourceQueryEngine) -> None:
        views = engine.find_named_images("derp", region="europe-west1")
        assert [v.image_name for v in views] == ["derpful-base"]
        assert views[0].amis["europe-west1"] == {"img-102"}

    def test_lookup_by_image_id(self, engine: ResourceQueryEngine) -> None:
        (view,) = engine.named_images_for_image("test", REGION, "img-201")
        assert view.image_name == "xderpx"

    def test_min_query_length_from_config(self, store: InMemoryCacheStore) -> None:
        config = RescacheConfig(lookup=LookupConfig(min_query_length=4))
        engine = create_engine(cache=store, config=config, configure_logging=False)
        with pytest.raises(InvalidQueryError):
            engine.find_named_images("der")


# ---------------------------------------------------------------------------
# Load balancers
# ---------------------------------------------------------------------------


class TestLoadBalancers:
    def test_cached_directory_scopes_by_application(self, store: InMemoryCacheStore) -> None:
        views = CachedLoadBalancerProvider(store).application_load_balancers("app")
        assert sorted(v.name for v in views) == ["app-tcp", "app-web"]
        assert {v.name: v.load_balancer_type for v in views}["app-web"] == LoadBalancerType.HTTP

    def test_cached_directory_account_filter(self, store: InMemoryCacheStore) -> None:
        assert CachedLoadBalancerProvider(store, account="test").application_load_balancers("") == []

    def test_resolve_in_request_order(self, engine: ResourceQueryEngine) -> None:
        views = engine.resolve_load_balancers(["other-lb", "app-web"])
        assert [v.name for v in views] == ["other-lb", "app-web"]

    def test_resolve_outside_application_scope(self, engine: ResourceQueryEngine) -> None:
        with pytest.raises(LoadBalancerNotFoundError, match=r"\[other-lb\]"):
            engine.resolve_load_balancers(["app-web", "other-lb"], application="app")

    async def test_add_http_backends(self, engine: ResourceQueryEngine, compute: FakeCompute) -> None:
        metadata = {
            GLOBAL_LOAD_BALANCER_NAMES: "app-web",
            REGIONAL_LOAD_BALANCER_NAMES: "app-tcp",
            BACKEND_SERVICE_NAMES: "app-web-backend",
            LOAD_BALANCING_POLICY: json.dumps({"balancingMode": "RATE", "maxRatePerInstance": 50}),
        }
        server_group = ServerGroup(name="app-v001", region=REGION, regional=True, metadata=to_pairs(metadata))
        reporter = RecordingStatusReporter()

        updated = await engine.add_http_load_balancer_backends(PROJECT, server_group, reporter=reporter)
        again = await engine.add_http_load_balancer_backends(PROJECT, server_group, reporter=reporter)

        assert updated == ["app-web-backend"]
        assert again == []
        assert compute.updates == ["app-web-backend"]
        (backend,) = compute.backend_services["app-web-backend"].backends
        assert backend.group.endswith(f"/projects/{PROJECT}/regions/{REGION}/instanceGroups/app-v001")
        assert backend.balancing_mode == "RATE"
        assert backend.max_rate_per_instance == 50


# ---------------------------------------------------------------------------
# Provider-backed resolution
# ---------------------------------------------------------------------------


class TestProviderResolution:
    async def test_source_image_from_first_base_project(self, engine: ResourceQueryEngine) -> None:
        image = await engine.find_source_image(PROJECT, ImageSpecification("centos-7"))
        assert image.project == "centos-cloud"

    async def test_account_image_project_precedes_base_projects(self, engine: ResourceQueryEngine) -> None:
        spec = ImageSpecification("centos-7", account=AccountImageConfig(image_projects=["ubuntu-os-cloud"]))
        image = await engine.find_source_image(PROJECT, spec)
        assert image.project == "ubuntu-os-cloud"

    async def test_source_image_missing(self, engine: ResourceQueryEngine) -> None:
        with pytest.raises(ImageNotFoundError, match="centos-cloud, ubuntu-os-cloud"):
            await engine.find_source_image(PROJECT, ImageSpecification("windows-2019"))

    async def test_instance_urls(self, engine: ResourceQueryEngine) -> None:
        urls = await engine.resolve_instance_urls(PROJECT, REGION, ["app-v000-efgh", "app-v000-abcd"])
        assert [url.rsplit("/", 1)[-1] for url in urls] == ["app-v000-efgh", "app-v000-abcd"]

    async def test_instance_in_other_region(self, engine: ResourceQueryEngine) -> None:
        with pytest.raises(InstanceNotFoundError, match=r"Instances \[app-v000-zzzz\] not found\."):
            await engine.resolve_instance_urls(PROJECT, REGION, ["app-v000-abcd", "app-v000-zzzz"])

    async def test_missing_client(self, store: InMemoryCacheStore, config: RescacheConfig) -> None:
        engine = create_engine(cache=store, config=config, configure_logging=False)
        with pytest.raises(RuntimeError, match="image list"):
            await engine.find_source_image(PROJECT, ImageSpecification("centos-7"))


class TestCreateEngine:
    def test_loads_config_from_environment(self, store: InMemoryCacheStore, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("RESCACHE_BASE_IMAGE_PROJECTS", "debian-cloud")
        monkeypatch.setenv("RESCACHE_LOG_LEVEL", "warning")
        engine = create_engine(cache=store)
        assert engine.config.compute.base_image_projects == ["debian-cloud"]
        assert engine.config.log.level == "warning"

    async def test_batch_images_opt_in(self, store: InMemoryCacheStore, config: RescacheConfig) -> None:
        compute = BatchingFakeCompute()
        engine = create_engine(cache=store, images=compute, config=config, configure_logging=False, batch_images=True)
        image = await engine.find_source_image(PROJECT, ImageSpecification("centos-7"))
        assert image.project == "centos-cloud"
        assert compute.batches == [[PROJECT, "centos-cloud", "ubuntu-os-cloud"]]
