"""Error taxonomy for cache queries and provider resolutions.

NotFoundError          -- one or more identifiers absent after an exhaustive
                          search; always carries every missing identifier.
InvalidQueryError      -- caller input failed a precondition.
MalformedKeyError      -- the cache holds a key this codec cannot parse
                          (an upstream indexer bug, not a caller error).
"""

from __future__ import annotations

from collections.abc import Sequence


class RescacheError(Exception):
    """Base class for every error raised by rescache."""


class NotFoundError(RescacheError):
    """Raised when requested resources do not exist.

    The message lists every missing identifier in request order, e.g.
    ``"Instances [web-1, web-2] not found."``.
    """

    resource_label = "Resources"

    def __init__(self, missing: Sequence[str], detail: str = "") -> None:
        self.missing = list(missing)
        self.detail = detail
        message = f"{self.resource_label} [{', '.join(self.missing)}] not found."
        if detail:
            message = f"{message} {detail}"
        super().__init__(message)


class ImageNotFoundError(NotFoundError):
    resource_label = "Images"


class InstanceNotFoundError(NotFoundError):
    resource_label = "Instances"


class LoadBalancerNotFoundError(NotFoundError):
    resource_label = "Load balancers"


class InvalidQueryError(RescacheError):
    """Raised when a lookup request fails validation (e.g. term too short)."""


class MalformedKeyError(RescacheError):
    """Raised when a cache key cannot be decoded."""

    def __init__(self, key: str, reason: str) -> None:
        super().__init__(f"Malformed cache key {key!r}: {reason}")
        self.key = key
        self.reason = reason
