from io import BytesIO

from PIL import Image


def to_png_bytes(img: Image.Image) -> bytes:
    """Encode a Pillow image as PNG bytes."""
    output = BytesIO()
    img.save(output, format="PNG")
    return output.getvalue()
