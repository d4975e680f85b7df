"""Data models."""

from .debug import DebugStage
from .mockup_task import Mockup, MockupResult, MockupTask, TaskPoll, TaskStatus
from .print_area import HSLSample, PixelBounds, PrintArea
from .variant import ProductVariant

__all__ = [
    "DebugStage",
    "HSLSample",
    "Mockup",
    "MockupResult",
    "MockupTask",
    "PixelBounds",
    "PrintArea",
    "ProductVariant",
    "TaskPoll",
    "TaskStatus",
]
