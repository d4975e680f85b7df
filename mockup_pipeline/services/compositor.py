"""Mockup compositor - instant client-side preview of a design on a template."""

import logging
import math
from dataclasses import dataclass, field
from enum import Enum

import numpy as np
from PIL import Image, ImageDraw

from ..clients.images import decode_image
from ..models import DebugStage, PrintArea
from ..utils import to_png_bytes
from .color import rgb_to_hsl, rgb_to_hsl_array

logger = logging.getLogger(__name__)

SAMPLE_GRID_STEPS = 7      # 6x6 interior sample points
CHROMA_HUE_THRESHOLD = 30  # degrees
NEUTRAL_SATURATION = 0.1
MIN_TEMPLATE_ALPHA = 10


class BlendMode(Enum):
    AUTO = "auto"
    CHROMA = "chroma"      # replace key-colored pixels, multiply neutrals
    MULTIPLY = "multiply"  # multiply neutrals only (white placeholders)
    DIRECT = "direct"      # plain overlay


@dataclass
class CompositeResult:
    image_bytes: bytes
    stages: list[DebugStage] = field(default_factory=list)
    blend_mode: BlendMode = BlendMode.DIRECT
    size: tuple[int, int] = (0, 0)


def fit_cover(design: Image.Image, size: tuple[int, int]) -> tuple[Image.Image, Image.Image]:
    """
    Scale a design to fill `size`, then center-crop the overflow.

    Returns (resized, cropped); cropped is exactly `size` and never has gaps.
    """
    target_w, target_h = size
    scale = max(target_w / design.width, target_h / design.height)
    resized_w = max(target_w, math.ceil(design.width * scale))
    resized_h = max(target_h, math.ceil(design.height * scale))
    resized = design.resize((resized_w, resized_h), Image.LANCZOS)

    left = (resized_w - target_w) // 2
    top = (resized_h - target_h) // 2
    cropped = resized.crop((left, top, left + target_w, top + target_h))
    return resized, cropped


def sample_points(box: tuple[int, int, int, int]) -> list[tuple[int, int]]:
    """Interior grid of points inside a pixel box."""
    left, top, right, bottom = box
    width, height = right - left, bottom - top
    points = []
    for iy in range(1, SAMPLE_GRID_STEPS):
        for ix in range(1, SAMPLE_GRID_STEPS):
            points.append((
                left + int(width * ix / SAMPLE_GRID_STEPS),
                top + int(height * iy / SAMPLE_GRID_STEPS),
            ))
    return points


class MockupCompositor:
    """Place a design into a template's print area."""

    def __init__(self, blend_mode: BlendMode = BlendMode.AUTO, collect_stages: bool = True):
        self.blend_mode = blend_mode
        self.collect_stages = collect_stages

    def composite(self, template_data: bytes, design_data: bytes, print_area: PrintArea) -> CompositeResult:
        """
        Composite a design onto a template.

        Args:
            template_data: Encoded template image
            design_data: Encoded design image
            print_area: Normalized placeholder rectangle

        Returns:
            CompositeResult with PNG bytes of the template's size and debug stages

        Raises:
            FetchError: template or design bytes cannot be decoded
        """
        template = decode_image(template_data).convert("RGBA")
        design = decode_image(design_data).convert("RGBA")
        return self.composite_images(template, design, print_area)

    def composite_images(
        self, template: Image.Image, design: Image.Image, print_area: PrintArea
    ) -> CompositeResult:
        """Composite decoded images. Inputs are not modified."""
        stages: list[DebugStage] = []
        template = template.convert("RGBA")
        design = design.convert("RGBA")

        box = print_area.to_pixels(template.width, template.height)
        box_size = (box[2] - box[0], box[3] - box[1])
        logger.debug(
            f"Template {template.width}x{template.height}, design {design.width}x{design.height}, "
            f"print area {box}"
        )

        resized, fitted = fit_cover(design, box_size)
        self._stage(stages, "design resized", resized, f"Design scaled to cover {box_size[0]}x{box_size[1]}")
        self._stage(stages, "design cropped", fitted, "Overflow center-cropped to the print area")
        self._stage(stages, "raw template", template, "Template before compositing")

        mode = self.blend_mode
        if mode in (BlendMode.AUTO, BlendMode.CHROMA):
            key_rgb, best_point = self._sample_key_color(template, box)
            self._stage(
                stages, "sampling points", self._draw_samples(template, box, best_point),
                "Red dots are sample points, green box is the most saturated sample",
            )
            if mode == BlendMode.AUTO:
                mode = self._choose_mode(key_rgb)
        else:
            key_rgb = None

        if mode == BlendMode.DIRECT:
            result = template.copy()
            region = result.crop(box)
            result.paste(Image.alpha_composite(region, fitted), box[:2])
        else:
            key_hue = rgb_to_hsl(*key_rgb).hue if mode == BlendMode.CHROMA else None
            result = self._blend(template, fitted, box, key_hue)

        logger.info(f"Composited design into {box} using {mode.value} blend")
        self._stage(stages, "composited", result, "Final composited output")

        return CompositeResult(
            image_bytes=to_png_bytes(result),
            stages=stages,
            blend_mode=mode,
            size=result.size,
        )

    def _stage(self, stages: list[DebugStage], name: str, image: Image.Image, description: str):
        if self.collect_stages:
            stages.append(DebugStage(name=name, image=image.copy(), description=description))

    def _sample_key_color(
        self, template: Image.Image, box: tuple[int, int, int, int]
    ) -> tuple[tuple[int, int, int], tuple[int, int]]:
        """Most saturated template color on the sampling grid."""
        rgb = template.convert("RGB")
        best_rgb, best_point, best_saturation = (0, 0, 0), (box[0], box[1]), -1.0
        for x, y in sample_points(box):
            if not (0 <= x < template.width and 0 <= y < template.height):
                continue
            pixel = rgb.getpixel((x, y))
            saturation = rgb_to_hsl(*pixel).saturation
            if saturation > best_saturation:
                best_rgb, best_point, best_saturation = pixel, (x, y), saturation
        return best_rgb, best_point

    @staticmethod
    def _choose_mode(key_rgb: tuple[int, int, int]) -> BlendMode:
        hsl = rgb_to_hsl(*key_rgb)
        if hsl.saturation > NEUTRAL_SATURATION:
            return BlendMode.CHROMA
        if hsl.lightness < 0.1:
            # Black usually means a print-file template
            return BlendMode.DIRECT
        return BlendMode.MULTIPLY

    @staticmethod
    def _draw_samples(
        template: Image.Image, box: tuple[int, int, int, int], best_point: tuple[int, int]
    ) -> Image.Image:
        canvas = template.copy()
        draw = ImageDraw.Draw(canvas)
        for x, y in sample_points(box):
            draw.rectangle((x - 2, y - 2, x + 2, y + 2), fill=(255, 0, 0, 128))
        x, y = best_point
        draw.rectangle((x - 4, y - 4, x + 4, y + 4), outline=(0, 255, 0, 255), width=3)
        return canvas

    @staticmethod
    def _blend(
        template: Image.Image,
        fitted: Image.Image,
        box: tuple[int, int, int, int],
        key_hue: float | None,
    ) -> Image.Image:
        """
        Pixel blend inside the box.

        Neutral template pixels multiply with the design so frame lines and
        shadows survive. With a key hue, key-colored pixels are replaced.
        """
        left, top, right, bottom = box
        out = np.array(template, dtype=np.float64)
        region = out[top:bottom, left:right]
        design = np.asarray(fitted, dtype=np.float64)

        alpha = region[..., 3]
        writable = (alpha >= MIN_TEMPLATE_ALPHA) & (design[..., 3] > 0)
        hue, saturation, _ = rgb_to_hsl_array(region[..., :3].astype(np.uint8))
        neutral = saturation < NEUTRAL_SATURATION

        # Blend template over white first so translucent shadows dim instead of darken.
        a = (alpha / 255)[..., None]
        effective = region[..., :3] * a + 255 * (1 - a)
        multiplied = effective * design[..., :3] / 255

        new_region = region.copy()
        multiply_mask = writable & neutral
        new_region[multiply_mask, :3] = multiplied[multiply_mask]
        new_region[multiply_mask, 3] = design[multiply_mask, 3]

        if key_hue is not None:
            diff = np.abs(hue - key_hue) % 360
            distance = np.minimum(diff, 360 - diff)
            replace_mask = writable & ~neutral & (distance < CHROMA_HUE_THRESHOLD)
            new_region[replace_mask] = _over(design, region)[replace_mask]

        out[top:bottom, left:right] = new_region
        return Image.fromarray(np.clip(np.rint(out), 0, 255).astype(np.uint8))


def _over(top: np.ndarray, bottom: np.ndarray) -> np.ndarray:
    """Porter-Duff `over` for float RGBA arrays in 0-255, as Image.alpha_composite."""
    top_a = top[..., 3:] / 255
    bottom_a = bottom[..., 3:] / 255
    out_a = top_a + bottom_a * (1 - top_a)
    rgb = top[..., :3] * top_a + bottom[..., :3] * bottom_a * (1 - top_a)
    rgb = rgb / np.where(out_a > 0, out_a, 1)
    return np.concatenate([rgb, out_a * 255], axis=-1)


def composite_mockup(
    template_data: bytes,
    design_data: bytes,
    print_area: PrintArea,
    blend_mode: BlendMode = BlendMode.AUTO,
) -> tuple[bytes, list[DebugStage]]:
    """Composite a design onto a template. Returns (PNG bytes, debug stages)."""
    result = MockupCompositor(blend_mode=blend_mode).composite(template_data, design_data, print_area)
    return result.image_bytes, result.stages
