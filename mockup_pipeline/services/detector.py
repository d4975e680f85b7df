"""Region detector - locates the chroma-keyed print area in a template."""

import logging

import numpy as np
from PIL import Image

from ..clients.images import decode_image
from ..errors import DetectionError
from ..models import PixelBounds, PrintArea
from .color import DEFAULT_KEY, ColorKey, placeholder_mask

logger = logging.getLogger(__name__)


class RegionDetector:
    """Find the bounding box of placeholder pixels and normalize it."""

    def __init__(self, key: ColorKey = DEFAULT_KEY):
        self.key = key

    def detect_bounds(self, image: Image.Image) -> PixelBounds:
        """
        Inclusive pixel bounds of every placeholder pixel.

        One pass over all pixels; the result depends only on pixel values,
        so repeated runs on the same image give identical bounds.
        """
        if image.mode != "RGB":
            image = image.convert("RGB")

        mask = placeholder_mask(np.asarray(image), self.key)
        rows = np.flatnonzero(mask.any(axis=1))
        if rows.size == 0:
            raise DetectionError(
                f"Placeholder not found: no pixels within {self.key.hue_tolerance}° of hue {self.key.target_hue}"
            )
        cols = np.flatnonzero(mask.any(axis=0))

        return PixelBounds(
            left=int(cols[0]),
            top=int(rows[0]),
            right=int(cols[-1]),
            bottom=int(rows[-1]),
            pixel_count=int(mask.sum()),
        )

    def detect(self, image: Image.Image) -> PrintArea:
        """Detect the print area of a decoded template."""
        width, height = image.size
        bounds = self.detect_bounds(image)
        print_area = PrintArea.from_bounds(bounds, width, height)
        logger.info(
            f"Detected placeholder {bounds.width}x{bounds.height}px at ({bounds.left}, {bounds.top}) "
            f"in {width}x{height} template ({bounds.pixel_count} px)"
        )
        return print_area

    def detect_bytes(self, image_data: bytes) -> PrintArea:
        """Decode and detect. Undecodable bytes raise FetchError."""
        return self.detect(decode_image(image_data))


def detect_print_area(image_data: bytes, key: ColorKey | None = None) -> PrintArea:
    """Detect the normalized print area of a template image."""
    return RegionDetector(key or DEFAULT_KEY).detect_bytes(image_data)
