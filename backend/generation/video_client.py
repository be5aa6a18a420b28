"""
Client for Runway image-to-video animation.

Creates a task from a still design image and polls the task endpoint
until the provider reports a terminal status.
"""

import os
import asyncio
import logging
from typing import Optional, Dict, Any
from dataclasses import dataclass, field

import httpx

from .errors import ProviderError
from .prompt_templates import ANIMATION_PROMPT

logger = logging.getLogger(__name__)


RUNWAY_CONFIG = {
    "base_url": "https://api.dev.runwayml.com/v1",
    "api_version": "2024-11-06",
    "model": "gen4_turbo",
    "ratio": "1280:720",
    "duration": 5,
}

TERMINAL_FAILURES = ("FAILED", "CANCELLED")


@dataclass
class AnimationTask:
    """State of one image-to-video task."""
    task_id: str
    status: str
    video_url: Optional[str] = None
    error: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict)

    @property
    def succeeded(self) -> bool:
        return self.status == "SUCCEEDED"

    @property
    def failed(self) -> bool:
        return self.status in TERMINAL_FAILURES


def parse_task(data: Dict[str, Any]) -> AnimationTask:
    """Convert a Runway task response into an AnimationTask."""
    output = data.get("output") or []
    return AnimationTask(
        task_id=data.get("id", ""),
        status=data.get("status", "PENDING"),
        video_url=output[0] if output else None,
        error=data.get("failure"),
        raw=data,
    )


class AnimationClient:
    """Runway image-to-video client."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        poll_interval: float = 5.0,
        max_polls: int = 120,
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the client.

        Args:
            api_key: Runway API key (or set RUNWAY_API_KEY env var)
            model: Model override (or set RUNWAY_MODEL env var)
            poll_interval: Seconds between task status checks
            max_polls: Status checks before giving up
            timeout: Per-request timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        self.api_key = api_key or os.getenv("RUNWAY_API_KEY")
        if not self.api_key:
            raise ValueError("RUNWAY_API_KEY not set")

        self.model = model or os.getenv("RUNWAY_MODEL") or RUNWAY_CONFIG["model"]
        self.poll_interval = poll_interval
        self.max_polls = max_polls
        self.timeout = timeout
        self.transport = transport

    def _get_headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "X-Runway-Version": RUNWAY_CONFIG["api_version"],
        }

    async def _request(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        try:
            async with httpx.AsyncClient(
                base_url=RUNWAY_CONFIG["base_url"],
                timeout=self.timeout,
                headers=self._get_headers(),
                transport=self.transport,
            ) as client:
                response = await client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            raise ProviderError(500, f"Runway request failed: {e}")

        if response.is_error:
            logger.warning("Runway error: %s %s -> %s", method, path, response.status_code)
            raise ProviderError(500, f"Runway API error {response.status_code}: {response.text}")

        try:
            return response.json()
        except ValueError:
            raise ProviderError(500, "Invalid response from Runway")

    async def create_task(self, image_url: str) -> str:
        """Start an image-to-video task and return its id."""
        payload = {
            "model": self.model,
            "promptImage": image_url,
            "promptText": ANIMATION_PROMPT,
            "ratio": RUNWAY_CONFIG["ratio"],
            "duration": RUNWAY_CONFIG["duration"],
        }
        logger.info("Creating Runway task: model=%s", self.model)
        data = await self._request("POST", "/image_to_video", json=payload)
        task_id = data.get("id")
        if not task_id:
            raise ProviderError(500, "Runway did not return a task id")
        return task_id

    async def get_task(self, task_id: str) -> AnimationTask:
        """Fetch the current state of a task."""
        return parse_task(await self._request("GET", f"/tasks/{task_id}"))

    async def wait_for_task(self, task_id: str) -> AnimationTask:
        """
        Poll a task until it succeeds.

        Raises:
            ProviderError: task failed, was cancelled, or never finished
        """
        for attempt in range(self.max_polls):
            task = await self.get_task(task_id)
            if task.succeeded:
                if not task.video_url:
                    raise ProviderError(500, "Runway task finished without output")
                logger.info("Runway task %s succeeded after %d polls", task_id, attempt + 1)
                return task
            if task.failed:
                raise ProviderError(500, task.error or f"Runway task {task.status.lower()}")
            if attempt < self.max_polls - 1:
                await asyncio.sleep(self.poll_interval)

        raise ProviderError(500, f"Runway task {task_id} did not finish after {self.max_polls} checks")

    async def animate(self, image_url: str) -> AnimationTask:
        """Create a task for the image and block until the video is ready."""
        task_id = await self.create_task(image_url)
        return await self.wait_for_task(task_id)
