"""Debug stage annotations collected while compositing."""

import base64
from dataclasses import dataclass

from PIL import Image

from ..utils import to_png_bytes


@dataclass
class DebugStage:
    """An intermediate raster and what produced it. Never persisted."""
    name: str
    image: Image.Image
    description: str | None = None

    def to_png(self) -> bytes:
        return to_png_bytes(self.image)

    def to_data_url(self) -> str:
        encoded = base64.b64encode(self.to_png()).decode("ascii")
        return f"data:image/png;base64,{encoded}"
