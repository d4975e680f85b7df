"""Comparison view - client composite next to the provider's own mockup."""

import logging
from dataclasses import dataclass, field

import numpy as np
from PIL import Image, ImageDraw, ImageFont

from ..clients.images import ImageFetcher, decode_image
from ..errors import DetectionError
from ..models import DebugStage, PixelBounds, PrintArea
from ..utils import to_png_bytes
from .compositor import MockupCompositor
from .detector import RegionDetector

logger = logging.getLogger(__name__)

PANEL_HEIGHT = 480
THUMB_HEIGHT = 160
MARGIN = 16
CAPTION_HEIGHT = 24
BACKGROUND = (243, 244, 246)
TEXT_COLOR = (55, 65, 81)


@dataclass
class TemplateAnalysis:
    """Detected placeholder vs the configured print area."""
    template_size: tuple[int, int]
    configured: PrintArea
    configured_pixels: tuple[int, int, int, int]
    detected: PrintArea | None = None
    detected_pixels: PixelBounds | None = None
    detection_error: str | None = None

    @property
    def orientation_match(self) -> bool | None:
        if self.detected is None:
            return None
        return self.detected.orientation == self.configured.orientation


@dataclass
class ComparisonReport:
    composite: bytes
    analysis: TemplateAnalysis
    stages: list[DebugStage] = field(default_factory=list)
    provider_mockup: bytes | None = None
    difference: float | None = None  # mean absolute channel difference, [0, 1]


def image_difference(a: Image.Image, b: Image.Image) -> float:
    """Mean absolute RGB difference in [0, 1]; b is resized to a's size."""
    a = a.convert("RGB")
    b = b.convert("RGB")
    if b.size != a.size:
        b = b.resize(a.size, Image.LANCZOS)
    diff = np.abs(np.asarray(a, dtype=np.int16) - np.asarray(b, dtype=np.int16))
    return float(diff.mean() / 255)


class ComparisonService:
    """Build and render the client-vs-provider comparison. Read-only."""

    def __init__(
        self,
        fetcher: ImageFetcher,
        compositor: MockupCompositor | None = None,
        detector: RegionDetector | None = None,
    ):
        self.fetcher = fetcher
        self.compositor = compositor or MockupCompositor()
        self.detector = detector or RegionDetector()

    def compare(
        self,
        template_url: str,
        design_url: str,
        print_area: PrintArea,
        provider_mockup_url: str | None = None,
    ) -> ComparisonReport:
        """Composite locally and pair it with the provider mockup, if given."""
        template_bytes = self.fetcher.fetch(template_url)
        design_bytes = self.fetcher.fetch(design_url)
        result = self.compositor.composite(template_bytes, design_bytes, print_area)

        analysis = self.analyze_template(decode_image(template_bytes, url=template_url), print_area)

        provider_bytes = None
        difference = None
        if provider_mockup_url:
            provider_bytes = self.fetcher.fetch(provider_mockup_url)
            difference = image_difference(
                decode_image(result.image_bytes),
                decode_image(provider_bytes, url=provider_mockup_url),
            )
            logger.info(f"Composite vs provider mockup difference: {difference:.4f}")

        return ComparisonReport(
            composite=result.image_bytes,
            analysis=analysis,
            stages=result.stages,
            provider_mockup=provider_bytes,
            difference=difference,
        )

    def analyze_template(self, template: Image.Image, print_area: PrintArea) -> TemplateAnalysis:
        """Detect the placeholder and line it up against the configured print area."""
        analysis = TemplateAnalysis(
            template_size=template.size,
            configured=print_area,
            configured_pixels=print_area.to_pixels(*template.size),
        )
        try:
            analysis.detected_pixels = self.detector.detect_bounds(template)
            analysis.detected = PrintArea.from_bounds(analysis.detected_pixels, *template.size)
        except DetectionError as e:
            # Analysis still reports the configured area without a placeholder.
            logger.warning(f"Template analysis: {e}")
            analysis.detection_error = str(e)
        return analysis

    def render(self, report: ComparisonReport) -> bytes:
        """Side-by-side PNG sheet with captions and a debug-stage strip."""
        font = ImageFont.load_default()
        panels = [("Client Composite", decode_image(report.composite))]
        if report.provider_mockup:
            panels.append(("Provider Mockup", decode_image(report.provider_mockup)))
        panels = [(caption, _fit_height(img, PANEL_HEIGHT)) for caption, img in panels]
        thumbs = [(stage.name, _fit_height(stage.image, THUMB_HEIGHT)) for stage in report.stages]

        panels_width = sum(img.width for _, img in panels) + MARGIN * (len(panels) + 1)
        thumbs_width = sum(img.width for _, img in thumbs) + MARGIN * (len(thumbs) + 1)
        width = max(panels_width, thumbs_width)
        height = MARGIN + CAPTION_HEIGHT + PANEL_HEIGHT + MARGIN
        if thumbs:
            height += CAPTION_HEIGHT + THUMB_HEIGHT + MARGIN
        height += CAPTION_HEIGHT

        sheet = Image.new("RGB", (width, height), BACKGROUND)
        draw = ImageDraw.Draw(sheet)

        y = MARGIN
        x = MARGIN
        for caption, img in panels:
            draw.text((x, y), caption, fill=TEXT_COLOR, font=font)
            sheet.paste(img.convert("RGB"), (x, y + CAPTION_HEIGHT))
            x += img.width + MARGIN
        y += CAPTION_HEIGHT + PANEL_HEIGHT + MARGIN

        if thumbs:
            x = MARGIN
            for name, img in thumbs:
                draw.text((x, y), name, fill=TEXT_COLOR, font=font)
                sheet.paste(img.convert("RGB"), (x, y + CAPTION_HEIGHT))
                x += img.width + MARGIN
            y += CAPTION_HEIGHT + THUMB_HEIGHT + MARGIN

        draw.text((MARGIN, y), _summary(report), fill=TEXT_COLOR, font=font)

        return to_png_bytes(sheet)


def _fit_height(img: Image.Image, height: int) -> Image.Image:
    width = max(1, round(img.width * height / img.height))
    return img.resize((width, height), Image.LANCZOS)


def _summary(report: ComparisonReport) -> str:
    analysis = report.analysis
    parts = [f"Template {analysis.template_size[0]}x{analysis.template_size[1]}"]
    if analysis.detected:
        d = analysis.detected
        parts.append(f"detected ({d.x:.3f}, {d.y:.3f}, {d.width:.3f}, {d.height:.3f})")
        parts.append(f"orientation match: {'yes' if analysis.orientation_match else 'no'}")
    else:
        parts.append("no placeholder detected")
    if report.difference is not None:
        parts.append(f"difference {report.difference:.4f}")
    return " | ".join(parts)
