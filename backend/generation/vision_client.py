"""
Vision chat client for the cost / plant-list breakdown.
Sends the generated design (plus optional references) to an OpenAI-compatible
chat completions endpoint and returns the markdown answer.
"""

import os
import logging
from typing import Optional, Dict, Any, List
from dataclasses import dataclass

import httpx

from .errors import ProviderError
from .image_client import to_data_url
from .prompt_templates import BREAKDOWN_SYSTEM_PROMPT, format_breakdown_user_text

logger = logging.getLogger(__name__)


BREAKDOWN_CONFIG = {
    "temperature": 0.7,
    "max_tokens": 2500,
}

EMPTY_RESPONSE_ERROR = "Empty response from breakdown provider"


@dataclass(frozen=True)
class ChatProvider:
    name: str
    endpoint: str
    model: str
    key_env: str


# Checked in order; the first provider with a key wins
CHAT_PROVIDERS: List[ChatProvider] = [
    ChatProvider(
        name="openai",
        endpoint="https://api.openai.com/v1/chat/completions",
        model="gpt-4o",
        key_env="OPENAI_API_KEY",
    ),
    ChatProvider(
        name="xai",
        endpoint="https://api.x.ai/v1/chat/completions",
        model="grok-2-vision-1212",
        key_env="XAI_API_KEY",
    ),
]


def resolve_chat_provider() -> Optional[tuple]:
    """Return (provider, api_key) for the first configured provider, or None."""
    for provider in CHAT_PROVIDERS:
        api_key = os.getenv(provider.key_env)
        if api_key:
            return provider, api_key
    return None


def build_breakdown_messages(
    image_url: str,
    tier: Optional[str] = None,
    original_image_base64: Optional[str] = None,
    original_mime_type: str = "image/jpeg",
    satellite_url: Optional[str] = None,
) -> List[Dict[str, Any]]:
    """
    Build the system + user messages for a breakdown request.

    Images are attached in this order: concept design, original photo,
    satellite reference.
    """
    content: List[Dict[str, Any]] = [
        {"type": "text", "text": format_breakdown_user_text(tier)},
        {"type": "image_url", "image_url": {"url": image_url}},
    ]
    if original_image_base64:
        content.append({"type": "text", "text": "Original photo of the yard:"})
        content.append({
            "type": "image_url",
            "image_url": {"url": to_data_url(original_image_base64, original_mime_type)},
        })
    if satellite_url:
        content.append({"type": "text", "text": "Satellite / top-down reference:"})
        content.append({"type": "image_url", "image_url": {"url": satellite_url}})

    return [
        {"role": "system", "content": BREAKDOWN_SYSTEM_PROMPT},
        {"role": "user", "content": content},
    ]


def extract_message_content(data: Any) -> str:
    """Pull choices[0].message.content out of a chat completion."""
    try:
        content = data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError):
        raise ProviderError(500, EMPTY_RESPONSE_ERROR)
    if not isinstance(content, str) or not content.strip():
        raise ProviderError(500, EMPTY_RESPONSE_ERROR)
    return content


class BreakdownClient:
    """Client for the vision chat breakdown call."""

    def __init__(
        self,
        provider: Optional[ChatProvider] = None,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        timeout: float = 120.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if provider is None or api_key is None:
            resolved = resolve_chat_provider()
            if resolved is None:
                raise ValueError(
                    " or ".join(p.key_env for p in CHAT_PROVIDERS) + " not set"
                )
            provider, api_key = resolved

        self.provider = provider
        self.api_key = api_key
        self.model = model or os.getenv("BREAKDOWN_MODEL") or provider.model
        self.timeout = timeout
        self.transport = transport

    async def get_breakdown(
        self,
        image_url: str,
        tier: Optional[str] = None,
        original_image_base64: Optional[str] = None,
        original_mime_type: str = "image/jpeg",
        satellite_url: Optional[str] = None,
    ) -> str:
        """
        Request a markdown breakdown for a generated design.

        Returns:
            Markdown text from the first choice

        Raises:
            ProviderError: upstream failure or empty answer
        """
        payload = {
            "model": self.model,
            "messages": build_breakdown_messages(
                image_url,
                tier=tier,
                original_image_base64=original_image_base64,
                original_mime_type=original_mime_type,
                satellite_url=satellite_url,
            ),
            **BREAKDOWN_CONFIG,
        }

        logger.info("Breakdown request: provider=%s model=%s", self.provider.name, self.model)
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(
                    self.provider.endpoint,
                    json=payload,
                    headers={"Authorization": f"Bearer {self.api_key}"},
                )
        except httpx.HTTPError as e:
            logger.warning("Breakdown request failed: %s", e)
            raise ProviderError(500, f"Breakdown provider request failed: {e}")

        if response.is_error:
            logger.warning(
                "Breakdown provider error: provider=%s status=%s",
                self.provider.name, response.status_code,
            )
            raise ProviderError(response.status_code, f"API error: {response.text}")

        try:
            data = response.json()
        except ValueError:
            raise ProviderError(500, EMPTY_RESPONSE_ERROR)

        return extract_message_content(data)
