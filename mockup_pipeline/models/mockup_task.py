"""Provider mockup task models."""

from dataclasses import dataclass, field
from enum import Enum


class TaskStatus(Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True)
class Mockup:
    """One rendered mockup returned by the provider."""
    placement: str
    url: str
    variant_ids: tuple[int, ...] = ()


@dataclass(frozen=True)
class TaskPoll:
    """A single poll response."""
    status: str                      # raw provider status
    mockups: list[Mockup] = field(default_factory=list)
    error: str | None = None


@dataclass
class MockupTask:
    """
    In-flight provider render job.

    Mutated only by poll responses. Not a system of record: callers that
    want to keep it must snapshot it.
    """
    task_key: str
    variant_ids: list[int]
    design_url: str
    status: TaskStatus = TaskStatus.PENDING
    mockups: list[Mockup] = field(default_factory=list)
    error: str | None = None
    attempts: int = 0

    @property
    def is_terminal(self) -> bool:
        return self.status != TaskStatus.PENDING


@dataclass(frozen=True)
class MockupResult:
    """Successful provider render."""
    task_key: str
    variant_ids: list[int]
    mockups: list[Mockup]
    attempts: int

    def url_for(self, variant_id: int) -> str | None:
        """Mockup URL for a variant, falling back to the first mockup."""
        for mockup in self.mockups:
            if variant_id in mockup.variant_ids:
                return mockup.url
        return self.mockups[0].url if self.mockups else None
