"""Yard design generation: prompts and provider clients."""

from .prompt_templates import (
    BREAKDOWN_SYSTEM_PROMPT,
    ANIMATION_PROMPT,
    STYLE_DESCRIPTIONS,
)
from .prompt_builder import (
    PromptBuilder,
    DesignOptions,
    describe_features,
    build_design_prompt,
    build_site_plan_prompt,
)
from .errors import ProviderError
from .image_client import (
    ImageGenerationClient,
    ImageProvider,
    IMAGE_PROVIDERS,
    get_image_provider,
)
from .vision_client import BreakdownClient
from .video_client import AnimationClient, AnimationTask

__all__ = [
    # Prompt templates
    "BREAKDOWN_SYSTEM_PROMPT",
    "ANIMATION_PROMPT",
    "STYLE_DESCRIPTIONS",
    # Prompt builder
    "PromptBuilder",
    "DesignOptions",
    "describe_features",
    "build_design_prompt",
    "build_site_plan_prompt",
    # Provider clients
    "ProviderError",
    "ImageGenerationClient",
    "ImageProvider",
    "IMAGE_PROVIDERS",
    "get_image_provider",
    "BreakdownClient",
    "AnimationClient",
    "AnimationTask",
]
