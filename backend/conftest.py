"""Shared pytest fixtures."""

import io
import base64
from typing import Callable, List

import httpx
import pytest
from PIL import Image

PROVIDER_ENV_VARS = [
    "IMAGE_PROVIDER",
    "IMAGE_MODEL",
    "IMAGE_API_KEY",
    "XAI_API_KEY",
    "OPENAI_API_KEY",
    "BREAKDOWN_MODEL",
    "RUNWAY_API_KEY",
    "RUNWAY_MODEL",
    "GOOGLE_MAPS_API_KEY",
    "NEXT_PUBLIC_GOOGLE_MAPS_API_KEY",
]


@pytest.fixture(autouse=True)
def clean_provider_env(monkeypatch):
    """Start every test with no provider configuration (a local .env may set some)."""
    for name in PROVIDER_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class RecordingTransport(httpx.MockTransport):
    """MockTransport that remembers every outbound request."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]):
        self.requests: List[httpx.Request] = []

        def record(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        super().__init__(record)


@pytest.fixture
def make_transport():
    return RecordingTransport


def create_test_image(
    width: int,
    height: int,
    color: tuple = (40, 120, 60),
    format: str = "PNG",
    mode: str = "RGB",
) -> bytes:
    """Create a solid-color test image."""
    img = Image.new(mode, (width, height), color)
    buffer = io.BytesIO()
    img.save(buffer, format=format)
    return buffer.getvalue()


@pytest.fixture
def png_bytes() -> bytes:
    return create_test_image(64, 48)


@pytest.fixture
def png_base64(png_bytes) -> str:
    return base64.b64encode(png_bytes).decode("utf-8")


@pytest.fixture
def make_image():
    return create_test_image
