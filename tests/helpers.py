from io import BytesIO

from PIL import Image

from mockup_pipeline.clients.images import decode_image
from mockup_pipeline.errors import FetchError
from mockup_pipeline.models import TaskPoll

MAGENTA = (255, 0, 255)
WHITE = (255, 255, 255)


def png_bytes(img: Image.Image) -> bytes:
    output = BytesIO()
    img.save(output, format="PNG")
    return output.getvalue()


def make_template(size=(100, 100), box=(30, 20, 70, 80), color=MAGENTA, background=WHITE, mode="RGB"):
    """Template with a solid placeholder block; box is (left, top, right, bottom) exclusive."""
    img = Image.new("RGB", size, background)
    img.paste(color, box)
    return img.convert(mode)


class FakeFetcher:
    """ImageFetcher stand-in serving bytes from a dict."""

    def __init__(self, images: dict[str, bytes]):
        self.images = images
        self.calls: list[str] = []

    def fetch(self, url: str) -> bytes:
        self.calls.append(url)
        if url not in self.images:
            raise FetchError(f"404 for {url}", url=url)
        return self.images[url]

    def fetch_image(self, url: str) -> Image.Image:
        return decode_image(self.fetch(url), url=url)


class FakeProvider:
    """Rendering provider that replays a scripted sequence of poll responses."""

    def __init__(self, polls, task_key: str = "tk-123"):
        self.polls = list(polls)
        self.task_key = task_key
        self.created: list[tuple] = []
        self.poll_calls = 0

    def create_task(self, variant_ids, design_url, format="jpg"):
        self.created.append((list(variant_ids), design_url, format))
        return self.task_key

    def poll_task(self, task_key):
        assert task_key == self.task_key
        self.poll_calls += 1
        poll = self.polls.pop(0)
        if isinstance(poll, Exception):
            raise poll
        return poll


def pending(n: int) -> list[TaskPoll]:
    return [TaskPoll(status="pending") for _ in range(n)]
