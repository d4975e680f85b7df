"""API clients for external services."""

from .images import ImageFetcher, decode_image
from .printful import PrintfulClient

__all__ = ["ImageFetcher", "PrintfulClient", "decode_image"]
