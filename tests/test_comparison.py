from io import BytesIO

import pytest
from PIL import Image

from mockup_pipeline.errors import FetchError
from mockup_pipeline.models import PrintArea
from mockup_pipeline.services.comparison import ComparisonService, image_difference
from mockup_pipeline.services.compositor import MockupCompositor

from .helpers import FakeFetcher, make_template, png_bytes

TEMPLATE_URL = "https://cdn.example.com/template.png"
DESIGN_URL = "https://cdn.example.com/design.png"
PROVIDER_URL = "https://cdn.example.com/provider.jpg"
AREA = PrintArea(0.3, 0.2, 0.4, 0.6)


@pytest.fixture
def images():
    template = png_bytes(make_template())
    design = png_bytes(Image.new("RGB", (40, 60), (0, 128, 255)))
    composite = MockupCompositor().composite(template, design, AREA).image_bytes
    return {
        TEMPLATE_URL: template,
        DESIGN_URL: design,
        PROVIDER_URL: composite,
        "https://cdn.example.com/blank.png": png_bytes(Image.new("RGB", (100, 100), (255, 255, 255))),
    }


def test_compare_with_matching_provider_mockup(images):
    fetcher = FakeFetcher(images)
    report = ComparisonService(fetcher).compare(TEMPLATE_URL, DESIGN_URL, AREA, PROVIDER_URL)

    assert report.difference == pytest.approx(0.0)
    assert report.provider_mockup == images[PROVIDER_URL]
    assert [s.name for s in report.stages][-1] == "composited"
    assert report.analysis.template_size == (100, 100)
    assert report.analysis.detected == AREA
    assert report.analysis.orientation_match is True
    assert report.analysis.configured_pixels == (30, 20, 70, 80)


def test_compare_without_provider_mockup(images):
    report = ComparisonService(FakeFetcher(images)).compare(TEMPLATE_URL, DESIGN_URL, AREA)
    assert report.provider_mockup is None
    assert report.difference is None


def test_analysis_flags_orientation_mismatch(images):
    landscape = PrintArea(0.1, 0.4, 0.8, 0.2)
    report = ComparisonService(FakeFetcher(images)).compare(TEMPLATE_URL, DESIGN_URL, landscape)
    assert report.analysis.orientation_match is False


def test_analysis_without_placeholder_does_not_fail(images):
    report = ComparisonService(FakeFetcher(images)).compare("https://cdn.example.com/blank.png", DESIGN_URL, AREA)
    assert report.analysis.detected is None
    assert report.analysis.orientation_match is None
    assert "Placeholder not found" in report.analysis.detection_error


def test_missing_design_is_fetch_error(images):
    with pytest.raises(FetchError):
        ComparisonService(FakeFetcher(images)).compare(TEMPLATE_URL, "https://cdn.example.com/404.png", AREA)


def test_image_difference_bounds():
    black = Image.new("RGB", (10, 10), (0, 0, 0))
    white = Image.new("RGB", (20, 5), (255, 255, 255))
    assert image_difference(black, black) == 0.0
    assert image_difference(black, white) == pytest.approx(1.0)


def test_render_side_by_side(images):
    service = ComparisonService(FakeFetcher(images))
    report = service.compare(TEMPLATE_URL, DESIGN_URL, AREA, PROVIDER_URL)
    sheet = Image.open(BytesIO(service.render(report)))
    alone = Image.open(BytesIO(service.render(service.compare(TEMPLATE_URL, DESIGN_URL, AREA))))

    assert sheet.format == "PNG"
    assert sheet.height > 480
    assert sheet.width >= alone.width


def test_compare_does_not_mutate_inputs(images):
    before = dict(images)
    ComparisonService(FakeFetcher(images)).compare(TEMPLATE_URL, DESIGN_URL, AREA, PROVIDER_URL)
    assert images == before
