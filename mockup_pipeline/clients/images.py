"""Image download client."""

import logging
from io import BytesIO

import requests
from PIL import Image, UnidentifiedImageError

from ..errors import FetchError

logger = logging.getLogger(__name__)


def decode_image(image_data: bytes, url: str | None = None) -> Image.Image:
    """Decode raw bytes into a fully loaded Pillow image."""
    try:
        img = Image.open(BytesIO(image_data))
        img.load()
        return img
    except (UnidentifiedImageError, OSError, ValueError) as e:
        raise FetchError(f"Could not decode image{f' from {url}' if url else ''}: {e}", url=url) from e


class ImageFetcher:
    """Download template, design and mockup images into memory."""

    def __init__(self, timeout: float = 30, session: requests.Session | None = None):
        self.timeout = timeout
        self.session = session or requests.Session()
        self.headers = {
            "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
        }

    def fetch(self, url: str) -> bytes:
        """Download raw bytes. Network errors and non-2xx responses raise FetchError."""
        try:
            response = self.session.get(url, headers=self.headers, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            logger.warning(f"Failed to fetch {url}: {e}")
            raise FetchError(f"Failed to fetch image from {url}: {e}", url=url) from e
        return response.content

    def fetch_image(self, url: str) -> Image.Image:
        """Download and decode an image."""
        return decode_image(self.fetch(url), url=url)
