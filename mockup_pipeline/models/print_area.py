"""Normalized print-area rectangle and color samples."""

from dataclasses import dataclass
from typing import Any

# Float slack for x + width <= 1 after normalizing integer pixel bounds.
_EPSILON = 1e-9


@dataclass(frozen=True)
class HSLSample:
    """A pixel in hue/saturation/lightness space."""
    hue: float          # degrees, [0, 360)
    saturation: float   # [0, 1]
    lightness: float    # [0, 1]


@dataclass(frozen=True)
class PixelBounds:
    """Inclusive pixel bounding box of the matched placeholder pixels."""
    left: int
    top: int
    right: int
    bottom: int
    pixel_count: int = 0

    @property
    def width(self) -> int:
        return self.right - self.left + 1

    @property
    def height(self) -> int:
        return self.bottom - self.top + 1


@dataclass(frozen=True)
class PrintArea:
    """
    Placeholder location as fractions of the source image's own size.

    Resolution independent: the same PrintArea applies to any correctly
    cropped re-render of the template it was detected on.
    """
    x: float
    y: float
    width: float
    height: float

    def __post_init__(self):
        for name in ("x", "y", "width", "height"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"PrintArea.{name} must be within [0, 1], got {value}")
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"PrintArea must have positive size, got {self.width}x{self.height}")
        if self.x + self.width > 1.0 + _EPSILON or self.y + self.height > 1.0 + _EPSILON:
            raise ValueError(f"PrintArea extends past the image: {self}")

    @classmethod
    def from_bounds(cls, bounds: PixelBounds, image_width: int, image_height: int) -> "PrintArea":
        """Normalize inclusive pixel bounds against the image size."""
        return cls(
            x=bounds.left / image_width,
            y=bounds.top / image_height,
            width=bounds.width / image_width,
            height=bounds.height / image_height,
        )

    def to_pixels(self, image_width: int, image_height: int) -> tuple[int, int, int, int]:
        """
        Denormalize to a Pillow box (left, top, right, bottom), right/bottom exclusive.

        The box is clamped to the image and always at least 1x1.
        """
        left = min(int(round(self.x * image_width)), image_width - 1)
        top = min(int(round(self.y * image_height)), image_height - 1)
        right = min(int(round((self.x + self.width) * image_width)), image_width)
        bottom = min(int(round((self.y + self.height) * image_height)), image_height)
        return left, top, max(right, left + 1), max(bottom, top + 1)

    @property
    def orientation(self) -> str:
        if self.width > self.height:
            return "landscape"
        if self.width < self.height:
            return "portrait"
        return "square"

    def to_dict(self) -> dict[str, float]:
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PrintArea":
        """Build from {x, y, width, height}. Malformed input raises ValueError."""
        try:
            return cls(
                x=float(data["x"]),
                y=float(data["y"]),
                width=float(data["width"]),
                height=float(data["height"]),
            )
        except (KeyError, TypeError) as e:
            raise ValueError(f"Invalid print area {data!r}: missing or non-numeric {e}") from e
