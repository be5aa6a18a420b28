"""
Tests for reference image normalization
"""

import io
import base64

import httpx
import pytest
from PIL import Image

from utils.image_processing import (
    MAX_REFERENCE_SIZE,
    strip_data_url,
    decode_base64_image,
    load_image_from_bytes,
    sniff_base64_mime_type,
    resize_image,
    normalize_reference_image,
    fetch_image_bytes,
)


def decode(reference) -> Image.Image:
    return Image.open(io.BytesIO(base64.b64decode(reference.image_base64)))


class TestBase64Helpers:
    def test_strip_data_url(self):
        assert strip_data_url("data:image/png;base64,QUJD") == "QUJD"
        assert strip_data_url("QUJD") == "QUJD"

    def test_decode_data_url(self, png_bytes, png_base64):
        assert decode_base64_image(f"data:image/png;base64,{png_base64}") == png_bytes

    def test_decode_invalid(self):
        with pytest.raises(ValueError):
            decode_base64_image("not base64 at all!")

    def test_sniff_mime_type(self, make_image):
        jpeg = base64.b64encode(make_image(8, 8, format="JPEG")).decode()
        assert sniff_base64_mime_type(jpeg) == "image/jpeg"
        assert sniff_base64_mime_type("QUJD", default="image/jpeg") == "image/jpeg"
        assert sniff_base64_mime_type(None) == "image/png"


class TestResize:
    def test_small_image_unchanged(self):
        img = Image.new("RGB", (100, 50))
        assert resize_image(img, max_size=200) is img

    def test_keeps_aspect_ratio(self):
        img = Image.new("RGB", (400, 200))
        resized = resize_image(img, max_size=100)
        assert resized.size == (100, 50)


class TestNormalizeReferenceImage:
    def test_png_passthrough(self, png_bytes):
        reference = normalize_reference_image(png_bytes)

        assert reference.mime_type == "image/png"
        assert (reference.width, reference.height) == (64, 48)
        assert base64.b64decode(reference.image_base64) == png_bytes

    def test_large_jpeg_downscaled(self, make_image):
        jpeg = make_image(MAX_REFERENCE_SIZE * 2, MAX_REFERENCE_SIZE, format="JPEG")

        reference = normalize_reference_image(jpeg)

        assert reference.mime_type == "image/jpeg"
        assert (reference.width, reference.height) == (MAX_REFERENCE_SIZE, MAX_REFERENCE_SIZE // 2)
        assert decode(reference).format == "JPEG"

    def test_other_formats_become_png(self, make_image):
        reference = normalize_reference_image(make_image(20, 10, format="BMP"))

        assert reference.mime_type == "image/png"
        assert decode(reference).size == (20, 10)

    def test_cmyk_tiff_becomes_rgb_png(self, make_image):
        tiff = make_image(20, 10, color=(0, 128, 255, 0), format="TIFF", mode="CMYK")

        reference = normalize_reference_image(tiff)

        assert reference.mime_type == "image/png"
        image = decode(reference)
        assert image.format == "PNG"
        assert image.mode == "RGB"
        assert image.size == (20, 10)

    def test_large_cmyk_jpeg_downscaled_as_jpeg(self, make_image):
        jpeg = make_image(MAX_REFERENCE_SIZE + 64, 32, color=(0, 0, 0, 0), format="JPEG", mode="CMYK")

        reference = normalize_reference_image(jpeg)

        assert reference.mime_type == "image/jpeg"
        assert decode(reference).mode == "RGB"

    def test_decompression_bomb_rejected(self, png_bytes, monkeypatch):
        monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 100)
        with pytest.raises(ValueError, match="Not a valid image"):
            normalize_reference_image(png_bytes)

    def test_not_an_image(self):
        with pytest.raises(ValueError, match="Not a valid image"):
            normalize_reference_image(b"plain text")

    def test_load_image_from_bytes(self, png_bytes):
        assert load_image_from_bytes(png_bytes).size == (64, 48)


class TestFetchImageBytes:
    @pytest.mark.asyncio
    async def test_returns_body(self, make_transport, png_bytes):
        transport = make_transport(lambda request: httpx.Response(200, content=png_bytes))

        content = await fetch_image_bytes("https://img/yard.png", transport=transport)

        assert content == png_bytes
        assert str(transport.requests[0].url) == "https://img/yard.png"

    @pytest.mark.asyncio
    async def test_error_status(self, make_transport):
        transport = make_transport(lambda request: httpx.Response(403))

        with pytest.raises(httpx.HTTPStatusError):
            await fetch_image_bytes("https://img/yard.png", transport=transport)
