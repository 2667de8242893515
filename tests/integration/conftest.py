"""Shared fixtures for rescache integration tests.

Provides a populated in-memory cache (named images, images, instances and
load balancers) and a fake compute provider so the engine can be exercised
end to end without a cloud project.
"""

from __future__ import annotations

import asyncio
from collections.abc import Mapping, Sequence

import pytest

from rescache.cache.keys import image_key, instance_key, load_balancer_key, named_image_key
from rescache.cache.records import CacheRecord
from rescache.cache.store import InMemoryCacheStore
from rescache.compute.models import BackendService, Image, ImageList, Instance, InstancesScopedList
from rescache.engine import ResourceQueryEngine, create_engine
from rescache.models.config import ComputeConfig, RescacheConfig

PROJECT = "my-project"
REGION = "us-central1"
BASE_URL = "https://www.googleapis.com/compute/v1"

# ---------------------------------------------------------------------------
# Cache contents
# ---------------------------------------------------------------------------


def _populate(store: InMemoryCacheStore) -> None:
    catalog = {
        ("prod", "derpful-base"): [("us-central1", "img-101"), ("europe-west1", "img-102")],
        ("test", "xderpx"): [("us-central1", "img-201")],
        ("prod", "nginx"): [("us-central1", "img-301")],
    }
    for (account, name), images in catalog.items():
        named = named_image_key(account, name)
        keys = [image_key(account, region, image_id) for region, image_id in images]
        store.put(CacheRecord.build(named, image=keys))
        for key in keys:
            store.put(CacheRecord.build(key, named_image=[named]))

    web_lb = load_balancer_key("prod", "global", "app-web")
    net_lb = load_balancer_key("prod", REGION, "app-tcp")
    instance = instance_key("prod", REGION, "app-v000-abcd")
    store.put(CacheRecord.build(web_lb, {"type": "http"}, instance=[instance]))
    store.put(CacheRecord.build(net_lb, {"type": "network"}, instance=[instance]))
    store.put(CacheRecord.build(load_balancer_key("prod", REGION, "other-lb"), {"type": "network"}))
    store.put(CacheRecord.build(instance, load_balancer=[web_lb, net_lb], image=[image_key("prod", REGION, "img-101")]))


# ---------------------------------------------------------------------------
# Fake compute provider
# ---------------------------------------------------------------------------


class FakeCompute:
    """Implements the image, instance and backend-service client protocols."""

    def __init__(self) -> None:
        self.images: dict[str, list[Image]] = {
            PROJECT: [],
            "centos-cloud": [Image(name="centos-7", project="centos-cloud")],
            "ubuntu-os-cloud": [
                Image(name="centos-7", project="ubuntu-os-cloud"),
                Image(name="ubuntu-2204", project="ubuntu-os-cloud"),
            ],
        }
        self.zones: dict[str, list[Instance]] = {
            "us-central1-a": [Instance(name="app-v000-abcd", self_link=f"{BASE_URL}/zones/us-central1-a/i/app-v000-abcd")],
            "us-central1-b": [Instance(name="app-v000-efgh", self_link=f"{BASE_URL}/zones/us-central1-b/i/app-v000-efgh")],
            "europe-west1-b": [Instance(name="app-v000-zzzz", self_link=f"{BASE_URL}/zones/europe-west1-b/i/zzzz")],
        }
        self.backend_services: dict[str, BackendService] = {"app-web-backend": BackendService(name="app-web-backend")}
        self.updates: list[str] = []

    async def list_images(self, project: str) -> ImageList:
        # centos-cloud answers last
        await asyncio.sleep(0.02 if project == "centos-cloud" else 0)
        return ImageList(items=list(self.images.get(project, [])))

    async def aggregated_list_instances(self, project: str) -> Mapping[str, InstancesScopedList]:
        return {f"zones/{zone}": InstancesScopedList(instances=list(items)) for zone, items in self.zones.items()}

    async def get_backend_service(self, project: str, name: str) -> BackendService:
        return self.backend_services[name]

    async def update_backend_service(self, project: str, name: str, service: BackendService) -> None:
        self.updates.append(name)
        self.backend_services[name] = service


class BatchingFakeCompute(FakeCompute):
    """Adds the batched image listing used when the engine opts into batching."""

    def __init__(self) -> None:
        super().__init__()
        self.batches: list[list[str]] = []

    async def batch_list_images(self, projects: Sequence[str]) -> list[ImageList]:
        self.batches.append(list(projects))
        return [ImageList(items=list(self.images.get(project, []))) for project in projects]


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def store() -> InMemoryCacheStore:
    cache = InMemoryCacheStore()
    _populate(cache)
    return cache


@pytest.fixture
def compute() -> FakeCompute:
    return FakeCompute()


@pytest.fixture
def config() -> RescacheConfig:
    return RescacheConfig(compute=ComputeConfig(base_url=BASE_URL, base_image_projects=["centos-cloud", "ubuntu-os-cloud"]))


@pytest.fixture
def engine(store: InMemoryCacheStore, compute: FakeCompute, config: RescacheConfig) -> ResourceQueryEngine:
    return create_engine(
        cache=store,
        images=compute,
        instances=compute,
        backend_services=compute,
        config=config,
        configure_logging=False,
    )
