"""Provider-backed resolvers used by deploy operations.

Submodules:
    source_image -- First-match image search across ordered candidate projects.
    instances    -- Instance-name to self-link resolution within a region.
    utils        -- URL builders, service accounts, autoscaler sizing.
"""

from rescache.deploy.instances import resolve_instance_urls
from rescache.deploy.source_image import AccountImageConfig, ImageSpecification, find_source_image, search_order

__all__ = [
    "AccountImageConfig",
    "ImageSpecification",
    "find_source_image",
    "resolve_instance_urls",
    "search_order",
]
