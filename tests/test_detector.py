import pytest
from PIL import Image

from mockup_pipeline.errors import DetectionError, FetchError
from mockup_pipeline.models import PrintArea
from mockup_pipeline.services.color import ColorKey, default_color_key
from mockup_pipeline.services.detector import RegionDetector, detect_print_area

from .helpers import MAGENTA, make_template, png_bytes


def test_scenario_1000px_template():
    img = make_template(size=(1000, 1000), box=(300, 200, 700, 800))
    area = detect_print_area(png_bytes(img))
    assert area.x == pytest.approx(0.30)
    assert area.y == pytest.approx(0.20)
    assert area.width == pytest.approx(0.40)
    assert area.height == pytest.approx(0.60)


@pytest.mark.parametrize("size", [(50, 80), (200, 120), (333, 517)])
def test_denormalized_bounds_match_block_at_any_size(size):
    w, h = size
    box = (w // 5, h // 4, w // 5 + w // 3, h // 4 + h // 2)
    area = RegionDetector().detect(make_template(size=size, box=box))
    assert area.to_pixels(w, h) == box


def test_no_placeholder_raises_detection_error():
    img = Image.new("RGB", (64, 64), (200, 200, 200))
    with pytest.raises(DetectionError):
        detect_print_area(png_bytes(img))


def test_dark_and_gray_magenta_do_not_count():
    img = Image.new("RGB", (64, 64), (30, 0, 30))
    img.paste((140, 120, 140), (0, 0, 32, 32))
    with pytest.raises(DetectionError):
        RegionDetector().detect(img)


def test_single_pixel_region_is_valid():
    img = Image.new("RGB", (10, 20), (255, 255, 255))
    img.putpixel((9, 19), MAGENTA)
    area = RegionDetector().detect(img)
    assert area == PrintArea(x=0.9, y=0.95, width=0.1, height=0.05)


def test_region_touching_edges():
    img = make_template(size=(40, 30), box=(0, 0, 40, 30))
    area = RegionDetector().detect(img)
    assert area == PrintArea(0.0, 0.0, 1.0, 1.0)


def test_bounds_and_pixel_count():
    bounds = RegionDetector().detect_bounds(make_template(size=(100, 100), box=(30, 20, 70, 80)))
    assert (bounds.left, bounds.top, bounds.right, bounds.bottom) == (30, 20, 69, 79)
    assert bounds.width == 40
    assert bounds.height == 60
    assert bounds.pixel_count == 2400


@pytest.mark.parametrize("mode", ["RGB", "RGBA", "P", "CMYK"])
def test_image_modes(mode):
    img = make_template(size=(60, 60), box=(10, 10, 30, 50), mode=mode)
    area = RegionDetector().detect(img)
    assert area.to_pixels(60, 60) == (10, 10, 30, 50)


def test_alpha_is_ignored():
    img = make_template(size=(60, 60), box=(10, 10, 30, 50)).convert("RGBA")
    img.putalpha(0)
    area = RegionDetector().detect(img)
    assert area.to_pixels(60, 60) == (10, 10, 30, 50)


def test_detection_is_idempotent():
    data = png_bytes(make_template(size=(257, 389), box=(17, 33, 201, 300)))
    first = detect_print_area(data)
    second = detect_print_area(data)
    assert first == second
    assert first.to_dict() == second.to_dict()


def test_scattered_pixels_fold_into_one_box():
    img = Image.new("RGB", (100, 100), (255, 255, 255))
    img.putpixel((5, 40), MAGENTA)
    img.putpixel((80, 10), MAGENTA)
    img.putpixel((50, 90), MAGENTA)
    area = RegionDetector().detect(img)
    assert area.to_pixels(100, 100) == (5, 10, 81, 91)


def test_custom_color_key():
    img = make_template(size=(50, 50), box=(5, 5, 25, 45), color=(0, 255, 0))
    with pytest.raises(DetectionError):
        RegionDetector().detect(img)
    area = RegionDetector(ColorKey(target_hue=120.0)).detect(img)
    assert area.to_pixels(50, 50) == (5, 5, 25, 45)


def test_undecodable_bytes_raise_fetch_error():
    with pytest.raises(FetchError):
        detect_print_area(b"not an image")


def test_default_detector_uses_configured_key():
    assert RegionDetector().key == default_color_key()
