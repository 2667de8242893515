"""Named-image lookup (cross-namespace join over image records)."""

from rescache.images.named_images import NamedImage, NamedImageLookup, NamedImageNotFoundError

__all__ = ["NamedImage", "NamedImageLookup", "NamedImageNotFoundError"]
