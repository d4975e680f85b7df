"""Placeholder color classification in HSL space."""

from dataclasses import dataclass

import numpy as np

from ..config import HUE_TOLERANCE, MIN_LIGHTNESS, MIN_SATURATION, PLACEHOLDER_HUE
from ..models import HSLSample


@dataclass(frozen=True)
class ColorKey:
    """
    Chroma-key match rule.

    The saturation and lightness floors reject near-black and near-gray
    pixels that happen to fall in the hue band (compression artifacts,
    anti-aliased edges).
    """
    target_hue: float = PLACEHOLDER_HUE          # degrees, magenta by default
    hue_tolerance: float = HUE_TOLERANCE         # degrees, inclusive
    min_saturation: float = MIN_SATURATION       # exclusive
    min_lightness: float = MIN_LIGHTNESS         # exclusive

    def matches(self, hsl: HSLSample) -> bool:
        return (
            hue_distance(hsl.hue, self.target_hue) <= self.hue_tolerance
            and hsl.saturation > self.min_saturation
            and hsl.lightness > self.min_lightness
        )

    def is_placeholder(self, r: int, g: int, b: int) -> bool:
        return self.matches(rgb_to_hsl(r, g, b))


DEFAULT_KEY = ColorKey()


def default_color_key() -> ColorKey:
    """Color key built from the environment."""
    return DEFAULT_KEY


def rgb_to_hsl(r: int, g: int, b: int) -> HSLSample:
    """Convert 0-255 RGB to HSL (hue in degrees, saturation/lightness in [0, 1])."""
    r, g, b = r / 255, g / 255, b / 255
    high, low = max(r, g, b), min(r, g, b)
    lightness = (high + low) / 2

    if high == low:
        return HSLSample(0.0, 0.0, lightness)

    d = high - low
    saturation = d / (2 - high - low) if lightness > 0.5 else d / (high + low)
    if high == r:
        hue = (g - b) / d + (6 if g < b else 0)
    elif high == g:
        hue = (b - r) / d + 2
    else:
        hue = (r - g) / d + 4
    return HSLSample(hue * 60, saturation, lightness)


def hue_distance(a: float, b: float) -> float:
    """Circular distance between two hues, taking the shorter way around."""
    diff = abs(a - b) % 360
    return min(diff, 360 - diff)


def is_placeholder_pixel(r: int, g: int, b: int, key: ColorKey = DEFAULT_KEY) -> bool:
    """True if the pixel belongs to the chroma-keyed placeholder."""
    return key.is_placeholder(r, g, b)


def rgb_to_hsl_array(pixels: np.ndarray) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Vectorized rgb_to_hsl over an (..., 3) uint8 array. Returns (hue, sat, light)."""
    rgb = pixels[..., :3].astype(np.float64) / 255
    r, g, b = rgb[..., 0], rgb[..., 1], rgb[..., 2]
    high = rgb.max(axis=-1)
    low = rgb.min(axis=-1)
    d = high - low
    lightness = (high + low) / 2

    chromatic = d > 0
    safe_d = np.where(chromatic, d, 1.0)
    denom = np.where(lightness > 0.5, 2 - high - low, high + low)
    saturation = np.where(chromatic, d / np.where(denom > 0, denom, 1.0), 0.0)

    # Same branch priority as rgb_to_hsl: red, then green, then blue.
    hue = (r - g) / safe_d + 4
    hue = np.where(high == g, (b - r) / safe_d + 2, hue)
    hue = np.where(high == r, (g - b) / safe_d + np.where(g < b, 6, 0), hue)
    hue = np.where(chromatic, hue * 60, 0.0)
    return hue, saturation, lightness


def placeholder_mask(pixels: np.ndarray, key: ColorKey = DEFAULT_KEY) -> np.ndarray:
    """Boolean (H, W) mask of placeholder pixels in an (H, W, 3) array."""
    hue, saturation, lightness = rgb_to_hsl_array(pixels)
    diff = np.abs(hue - key.target_hue) % 360
    distance = np.minimum(diff, 360 - diff)
    return (
        (distance <= key.hue_tolerance)
        & (saturation > key.min_saturation)
        & (lightness > key.min_lightness)
    )
