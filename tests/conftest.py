import pytest
from PIL import Image

from .helpers import make_template, png_bytes


@pytest.fixture
def template_bytes():
    return png_bytes(make_template())


@pytest.fixture
def design_bytes():
    return png_bytes(Image.new("RGB", (50, 25), (0, 128, 255)))
