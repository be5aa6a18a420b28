"""
Reference image utilities using Pillow.
Normalizes uploaded or fetched "before" photos into a base64 payload
for the generation providers.
"""

import io
import base64
import binascii
from typing import Optional
from dataclasses import dataclass

import httpx
from PIL import Image, UnidentifiedImageError


MAX_REFERENCE_SIZE = 1536

# Formats providers accept as-is; anything else is re-encoded to PNG
PASSTHROUGH_FORMATS = ("PNG", "JPEG", "WEBP")

# Camera JPEG variants, re-encoded as plain JPEG
JPEG_FORMATS = ("JPEG", "MPO")

# Modes Pillow can write as PNG
PNG_MODES = ("1", "L", "LA", "I", "I;16", "P", "RGB", "RGBA")


@dataclass
class ReferenceImage:
    """A normalized reference image."""
    image_base64: str
    mime_type: str
    width: int
    height: int


def strip_data_url(value: str) -> str:
    """Drop a 'data:image/...;base64,' prefix if present."""
    value = value.strip()
    if value.startswith("data:") and "," in value:
        return value.split(",", 1)[1]
    return value


def decode_base64_image(value: str) -> bytes:
    """Decode base64 (or a data URL) into raw bytes."""
    try:
        return base64.b64decode(strip_data_url(value), validate=True)
    except (binascii.Error, ValueError):
        raise ValueError("Image is not valid base64")


def load_image_from_bytes(image_bytes: bytes) -> Image.Image:
    """Open image bytes with Pillow, raising ValueError if undecodable."""
    try:
        image = Image.open(io.BytesIO(image_bytes))
        image.load()
    except (UnidentifiedImageError, OSError, Image.DecompressionBombError):
        raise ValueError("Not a valid image")
    return image


def sniff_mime_type(image_bytes: bytes, default: str = "image/png") -> str:
    """Best-effort MIME type from image bytes."""
    try:
        image = Image.open(io.BytesIO(image_bytes))
    except (UnidentifiedImageError, OSError):
        return default
    return Image.MIME.get(image.format or "", default)


def sniff_base64_mime_type(value: Optional[str], default: str = "image/png") -> str:
    """MIME type of a base64 payload, falling back to default."""
    if not value:
        return default
    try:
        return sniff_mime_type(decode_base64_image(value), default)
    except ValueError:
        return default


def resize_image(image: Image.Image, max_size: int = MAX_REFERENCE_SIZE) -> Image.Image:
    """
    Resize image maintaining aspect ratio.
    Images already within max_size are returned unchanged.
    """
    w, h = image.size

    if max(h, w) <= max_size:
        return image

    if h > w:
        new_h = max_size
        new_w = int(w * (max_size / h))
    else:
        new_w = max_size
        new_h = int(h * (max_size / w))

    return image.resize((new_w, new_h), Image.Resampling.LANCZOS)


def encode_image_to_base64(image: Image.Image, format: str = "PNG") -> str:
    """Encode a Pillow image to a base64 string."""
    if format == "JPEG" and image.mode not in ("RGB", "L"):
        image = image.convert("RGB")
    elif format == "PNG" and image.mode not in PNG_MODES:
        image = image.convert("RGBA" if "A" in image.getbands() else "RGB")

    buffer = io.BytesIO()
    image.save(buffer, format=format)
    return base64.b64encode(buffer.getvalue()).decode("utf-8")


def normalize_reference_image(
    image_bytes: bytes,
    max_size: int = MAX_REFERENCE_SIZE,
) -> ReferenceImage:
    """
    Normalize raw image bytes into a ReferenceImage.

    Args:
        image_bytes: Uploaded or fetched image bytes
        max_size: Longest side allowed before downscaling

    Returns:
        ReferenceImage with base64 payload and final dimensions

    Raises:
        ValueError: bytes are not a decodable image
    """
    image = load_image_from_bytes(image_bytes)
    source_format = image.format or "PNG"
    resized = resize_image(image, max_size)

    if resized is image and source_format in PASSTHROUGH_FORMATS:
        return ReferenceImage(
            image_base64=base64.b64encode(image_bytes).decode("utf-8"),
            mime_type=Image.MIME[source_format],
            width=image.width,
            height=image.height,
        )

    out_format = "JPEG" if source_format in JPEG_FORMATS else "PNG"
    try:
        image_base64 = encode_image_to_base64(resized, out_format)
    except OSError:
        raise ValueError("Could not re-encode image")

    return ReferenceImage(
        image_base64=image_base64,
        mime_type=Image.MIME[out_format],
        width=resized.width,
        height=resized.height,
    )


async def fetch_image_bytes(
    url: str,
    timeout: float = 30.0,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> bytes:
    """
    Download an image.

    Raises:
        httpx.HTTPError: network failure or non-2xx response
    """
    async with httpx.AsyncClient(
        timeout=timeout,
        transport=transport,
        follow_redirects=True,
    ) as client:
        response = await client.get(url)
        response.raise_for_status()
        return response.content
