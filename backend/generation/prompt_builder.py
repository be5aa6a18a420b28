"""
Prompt builder for yard redesign generation.
Translates the UI's design toggles into the natural-language prompt sent to
the image-generation provider.
"""

from typing import List, Optional, Tuple, Dict
from dataclasses import dataclass, replace

from .prompt_templates import (
    DESIGN_TEMPLATE,
    SITE_PLAN_TEMPLATE,
    render_template,
)


HARDSCAPE_TYPES = ("walkway", "walkway_patio")
HARDSCAPE_MATERIALS = ("stone", "pavers")


@dataclass(frozen=True)
class DesignOptions:
    """User-selected design toggles for one design attempt."""
    native_planting: bool = False
    rain_garden: bool = False
    hardscape: bool = False
    hardscape_type: str = "walkway"
    hardscape_material: str = "stone"
    edible_guild: bool = False
    culinary: bool = False
    medicinal: bool = False
    fruit: bool = False
    style: Optional[str] = None
    budget: Optional[int] = None

    def __post_init__(self):
        if self.hardscape_type not in HARDSCAPE_TYPES:
            raise ValueError(f"Unknown hardscape type: {self.hardscape_type}")
        if self.hardscape_material not in HARDSCAPE_MATERIALS:
            raise ValueError(f"Unknown hardscape material: {self.hardscape_material}")


# Canonical toggle -> phrase table, in prompt order
NATIVE_PLANTING_PHRASE = (
    "Colorado native, drought-tolerant perennials and ornamental grasses replacing the lawn"
)
RAIN_GARDEN_PHRASE = (
    "a shallow rain garden basin planted with moisture-tolerant natives to capture roof runoff"
)
HARDSCAPE_PHRASES: Dict[Tuple[str, str], str] = {
    ("walkway", "stone"): "a natural flagstone walkway",
    ("walkway", "pavers"): "a permeable paver walkway",
    ("walkway_patio", "stone"): "a natural flagstone walkway leading to a flagstone patio",
    ("walkway_patio", "pavers"): "a permeable paver walkway leading to a paver patio",
}
EDIBLE_SUB_GUILDS: List[Tuple[str, str]] = [
    ("culinary", "culinary herbs"),
    ("medicinal", "medicinal plants"),
    ("fruit", "fruit trees and berry shrubs"),
]
EDIBLE_GENERIC_PHRASE = "an edible guild of mixed food-producing plants"


def edible_guild_phrase(options: DesignOptions) -> str:
    """Phrase for the edible guild, built from the active sub-guilds."""
    parts = [label for flag, label in EDIBLE_SUB_GUILDS if getattr(options, flag)]
    if not parts:
        return EDIBLE_GENERIC_PHRASE
    if len(parts) == 1:
        listing = parts[0]
    else:
        listing = ", ".join(parts[:-1]) + " and " + parts[-1]
    return f"an edible guild of {listing}"


def describe_features(options: DesignOptions) -> List[str]:
    """
    Ordered feature phrases for the active toggles.

    Order is fixed: native planting, rain garden, hardscape, edible guilds.
    Sub-flags are ignored when their parent toggle is off.
    """
    features = []
    if options.native_planting:
        features.append(NATIVE_PLANTING_PHRASE)
    if options.rain_garden:
        features.append(RAIN_GARDEN_PHRASE)
    if options.hardscape:
        features.append(HARDSCAPE_PHRASES[(options.hardscape_type, options.hardscape_material)])
    if options.edible_guild:
        features.append(edible_guild_phrase(options))
    return features


def build_design_prompt(options: DesignOptions) -> str:
    """
    Build the "after" photo prompt.

    Args:
        options: Design toggles

    Returns:
        Complete prompt string
    """
    return render_template(
        DESIGN_TEMPLATE,
        describe_features(options),
        style=options.style,
        budget=options.budget,
    )


def build_site_plan_prompt(options: DesignOptions) -> str:
    """Build the detailed top-down site plan prompt for the same options."""
    return render_template(
        SITE_PLAN_TEMPLATE,
        describe_features(options),
        style=options.style,
        budget=options.budget,
    )


class PromptBuilder:
    """
    Builder class for constructing generation prompts.
    Supports chaining and customization.
    """

    def __init__(self):
        self.options: DesignOptions = DesignOptions()
        self.site_plan: bool = False
        self.custom_instructions: List[str] = []

    def with_options(self, options: DesignOptions) -> "PromptBuilder":
        """Set the design toggles."""
        self.options = options
        return self

    def with_style(self, style: Optional[str]) -> "PromptBuilder":
        self.options = replace(self.options, style=style)
        return self

    def with_budget(self, budget: Optional[int]) -> "PromptBuilder":
        self.options = replace(self.options, budget=budget)
        return self

    def as_site_plan(self, enabled: bool = True) -> "PromptBuilder":
        """Build the top-down plan variant instead of the photo."""
        self.site_plan = enabled
        return self

    def with_instruction(self, instruction: str) -> "PromptBuilder":
        """Add a custom instruction."""
        self.custom_instructions.append(instruction)
        return self

    def build(self) -> str:
        """Build the final prompt."""
        if self.site_plan:
            prompt = build_site_plan_prompt(self.options)
        else:
            prompt = build_design_prompt(self.options)

        if self.custom_instructions:
            prompt += "\n\nADDITIONAL REQUIREMENTS:"
            for instruction in self.custom_instructions:
                prompt += f"\n- {instruction}"

        return prompt

    def reset(self) -> "PromptBuilder":
        """Reset the builder to initial state."""
        self.__init__()
        return self
