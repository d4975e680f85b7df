"""Print-mockup pipeline: placeholder detection, compositing and provider rendering."""

from .models import PrintArea
from .services.compositor import composite_mockup
from .services.detector import detect_print_area

__all__ = ["PrintArea", "composite_mockup", "detect_print_area"]
