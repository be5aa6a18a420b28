"""
Client for external image generation / editing providers.

The upstream request schema differs per provider, so each provider is
described by an ImageProvider adapter instead of a fixed payload.
"""

import os
import base64
import logging
from typing import Optional, Dict, Any, Tuple
from dataclasses import dataclass

import httpx

from .errors import ProviderError

logger = logging.getLogger(__name__)


# Supported aspect ratios (width:height)
ASPECT_RATIOS: Dict[str, Tuple[int, int]] = {
    "1:1": (1, 1),
    "4:3": (4, 3),
    "3:4": (3, 4),
    "16:9": (16, 9),
    "9:16": (9, 16),
}

# Pixel sizes for providers that take "size" instead of an aspect ratio.
# gpt-image-1 only renders these three, so each ratio maps to its orientation.
ASPECT_SIZES: Dict[str, str] = {
    "1:1": "1024x1024",
    "4:3": "1536x1024",
    "16:9": "1536x1024",
    "3:4": "1024x1536",
    "9:16": "1024x1536",
}


@dataclass(frozen=True)
class ImageProvider:
    """How to talk to one image provider."""
    name: str
    base_url: str
    model: str
    key_env: Tuple[str, ...]
    generation_path: str = "/images/generations"
    edit_path: str = "/images/edits"
    aspect_field: str = "aspect_ratio"  # "aspect_ratio" or "size"
    edit_encoding: str = "json"  # "json" or "multipart"
    response_format: Optional[str] = "url"
    inline_reference: bool = True  # generation endpoint accepts an image field


IMAGE_PROVIDERS: Dict[str, ImageProvider] = {
    "xai": ImageProvider(
        name="xai",
        base_url="https://api.x.ai/v1",
        model="grok-2-image",
        key_env=("IMAGE_API_KEY", "XAI_API_KEY"),
    ),
    "openai": ImageProvider(
        name="openai",
        base_url="https://api.openai.com/v1",
        model="gpt-image-1",
        key_env=("IMAGE_API_KEY", "OPENAI_API_KEY"),
        aspect_field="size",
        edit_encoding="multipart",
        # always answers with b64_json and rejects response_format
        response_format=None,
        inline_reference=False,
    ),
}


def get_image_provider(name: Optional[str] = None) -> ImageProvider:
    """Resolve the configured provider adapter (IMAGE_PROVIDER, default xai)."""
    key = (name or os.getenv("IMAGE_PROVIDER") or "xai").strip().lower()
    if key not in IMAGE_PROVIDERS:
        raise ValueError(
            f"Unknown IMAGE_PROVIDER '{key}'. Expected one of: {', '.join(IMAGE_PROVIDERS)}"
        )
    return IMAGE_PROVIDERS[key]


def to_data_url(image_base64: str, mime_type: str = "image/png") -> str:
    """Wrap raw base64 in a data URL."""
    return f"data:{mime_type};base64,{image_base64}"


class ImageGenerationClient:
    """
    Thin proxy to an image generation provider.

    Returns the provider's JSON unchanged. Does not retry.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        provider: Optional[ImageProvider] = None,
        model: Optional[str] = None,
        timeout: float = 120.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the client.

        Args:
            api_key: Provider key (or set one of the provider's key env vars)
            provider: Adapter to use (or set IMAGE_PROVIDER env var)
            model: Model override (or set IMAGE_MODEL env var)
            timeout: Request timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        self.provider = provider or get_image_provider()
        self.api_key = api_key or self._key_from_env()
        if not self.api_key:
            raise ValueError(f"{' or '.join(self.provider.key_env)} not set")

        self.model = model or os.getenv("IMAGE_MODEL") or self.provider.model
        self.timeout = timeout
        self.transport = transport

    def _key_from_env(self) -> Optional[str]:
        for name in self.provider.key_env:
            value = os.getenv(name)
            if value:
                return value
        return None

    def _get_headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.api_key}"}

    def _aspect_params(self, aspect: str) -> Dict[str, str]:
        if self.provider.aspect_field == "size":
            return {"size": ASPECT_SIZES.get(aspect, ASPECT_SIZES["1:1"])}
        return {"aspect_ratio": aspect}

    def _base_payload(self, prompt: str, aspect: str, n: int) -> Dict[str, Any]:
        payload = {
            "model": self.model,
            "prompt": prompt,
            "n": n,
            **self._aspect_params(aspect),
        }
        if self.provider.response_format:
            payload["response_format"] = self.provider.response_format
        return payload

    async def _post(self, path: str, **kwargs) -> Dict[str, Any]:
        logger.info(
            "Image request: provider=%s path=%s model=%s",
            self.provider.name, path, self.model,
        )
        try:
            async with httpx.AsyncClient(
                base_url=self.provider.base_url,
                timeout=self.timeout,
                headers=self._get_headers(),
                transport=self.transport,
            ) as client:
                response = await client.post(path, **kwargs)
        except httpx.HTTPError as e:
            logger.warning("Image provider request failed: %s", e)
            raise ProviderError(500, f"Image provider request failed: {e}")

        if response.is_error:
            logger.warning(
                "Image provider error: provider=%s status=%s",
                self.provider.name, response.status_code,
            )
            raise ProviderError(response.status_code, response.text)

        try:
            return response.json()
        except ValueError:
            raise ProviderError(500, "Invalid response from image provider")

    async def generate(
        self,
        prompt: str,
        aspect: str = "1:1",
        n: int = 1,
        image_base64: Optional[str] = None,
        mask_base64: Optional[str] = None,
        mime_type: str = "image/png",
    ) -> Dict[str, Any]:
        """
        Text-to-image generation, with an optional reference image.

        Args:
            prompt: The generation prompt
            aspect: Aspect ratio key from ASPECT_RATIOS
            n: Number of results
            image_base64: Optional reference image (raw base64)
            mask_base64: Optional secondary reference
            mime_type: MIME type of the reference images

        Returns:
            Provider JSON, e.g. {"data": [{"url": ...}]}
        """
        if image_base64 and not self.provider.inline_reference:
            return await self.edit(
                prompt, image_base64, aspect=aspect, n=n,
                mask_base64=mask_base64, mime_type=mime_type,
            )

        payload = self._base_payload(prompt, aspect, n)
        if image_base64:
            payload["image"] = to_data_url(image_base64, mime_type)
        if mask_base64:
            payload["mask"] = to_data_url(mask_base64, mime_type)
        return await self._post(self.provider.generation_path, json=payload)

    async def edit(
        self,
        prompt: str,
        image_base64: str,
        aspect: str = "1:1",
        n: int = 1,
        mask_base64: Optional[str] = None,
        mime_type: str = "image/png",
    ) -> Dict[str, Any]:
        """
        Edit the reference image according to the prompt.

        Returns:
            Provider JSON, e.g. {"data": [{"url": ...}]}
        """
        if self.provider.edit_encoding == "multipart":
            extension = mime_type.split("/")[-1]
            files = {
                "image": (f"reference.{extension}", base64.b64decode(image_base64), mime_type),
            }
            if mask_base64:
                files["mask"] = (f"mask.{extension}", base64.b64decode(mask_base64), mime_type)
            data = {
                key: str(value)
                for key, value in self._base_payload(prompt, aspect, n).items()
            }
            return await self._post(self.provider.edit_path, data=data, files=files)

        payload = self._base_payload(prompt, aspect, n)
        payload["image"] = to_data_url(image_base64, mime_type)
        if mask_base64:
            payload["mask"] = to_data_url(mask_base64, mime_type)
        return await self._post(self.provider.edit_path, json=payload)
