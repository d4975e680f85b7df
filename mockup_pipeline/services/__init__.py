"""Business logic services."""

from .catalog import CatalogStore, InMemoryCatalogStore, JsonCatalogStore
from .color import ColorKey, default_color_key, is_placeholder_pixel, rgb_to_hsl
from .comparison import ComparisonReport, ComparisonService, TemplateAnalysis
from .compositor import BlendMode, CompositeResult, MockupCompositor, composite_mockup
from .detector import RegionDetector, detect_print_area
from .orchestrator import MockupOrchestrator
from .registry import TemplateRegistry

__all__ = [
    "BlendMode",
    "CatalogStore",
    "ColorKey",
    "ComparisonReport",
    "ComparisonService",
    "CompositeResult",
    "InMemoryCatalogStore",
    "JsonCatalogStore",
    "MockupCompositor",
    "MockupOrchestrator",
    "RegionDetector",
    "TemplateAnalysis",
    "TemplateRegistry",
    "composite_mockup",
    "default_color_key",
    "detect_print_area",
    "is_placeholder_pixel",
    "rgb_to_hsl",
]
