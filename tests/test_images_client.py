import pytest
import requests

from mockup_pipeline.clients.images import ImageFetcher, decode_image
from mockup_pipeline.errors import FetchError

from .helpers import make_template, png_bytes


class FakeResponse:
    def __init__(self, status_code=200, content=b""):
        self.status_code = status_code
        self.content = content

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error")


class FakeSession:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.urls = []

    def get(self, url, headers=None, timeout=None):
        self.urls.append(url)
        if self.error:
            raise self.error
        return self.response


def test_fetch_returns_bytes():
    data = png_bytes(make_template())
    fetcher = ImageFetcher(session=FakeSession(FakeResponse(200, data)))
    assert fetcher.fetch("https://cdn.example.com/t.png") == data
    assert fetcher.fetch_image("https://cdn.example.com/t.png").size == (100, 100)


def test_non_2xx_is_fetch_error():
    fetcher = ImageFetcher(session=FakeSession(FakeResponse(404)))
    with pytest.raises(FetchError) as exc_info:
        fetcher.fetch("https://cdn.example.com/missing.png")
    assert exc_info.value.url == "https://cdn.example.com/missing.png"


def test_network_error_is_fetch_error():
    fetcher = ImageFetcher(session=FakeSession(error=requests.ConnectionError("refused")))
    with pytest.raises(FetchError):
        fetcher.fetch("https://cdn.example.com/t.png")


def test_malformed_bytes_are_fetch_error():
    fetcher = ImageFetcher(session=FakeSession(FakeResponse(200, b"<html>not found</html>")))
    with pytest.raises(FetchError):
        fetcher.fetch_image("https://cdn.example.com/t.png")


def test_decode_empty_bytes():
    with pytest.raises(FetchError) as exc_info:
        decode_image(b"", url="https://cdn.example.com/empty.png")
    assert "empty.png" in str(exc_info.value)
