"""
Pydantic schemas for API request/response models.

Field names are snake_case in Python and camelCase on the wire, matching
the browser client. snake_case is accepted on input as well.
"""

from typing import List, Optional, Literal, Tuple

from pydantic import BaseModel, ConfigDict, Field, AliasChoices, field_validator
from pydantic.alias_generators import to_camel

from generation.prompt_builder import DesignOptions


AspectRatio = Literal["1:1", "4:3", "3:4", "16:9", "9:16"]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# =============================================================================
# DESIGN OPTIONS / PROMPTS
# =============================================================================

class DesignOptionsModel(CamelModel):
    """Toggle state from the design form."""
    native_planting: bool = False
    rain_garden: bool = False
    hardscape: bool = False
    hardscape_type: Literal["walkway", "walkway+patio", "walkway_patio"] = "walkway"
    hardscape_material: Literal["stone", "pavers"] = "stone"
    edible_guild: bool = False
    culinary: bool = False
    medicinal: bool = False
    fruit: bool = False
    style: Optional[str] = None
    budget: Optional[int] = Field(default=None, ge=0)

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "nativePlanting": True,
                "rainGarden": True,
                "hardscape": True,
                "hardscapeType": "walkway+patio",
                "hardscapeMaterial": "pavers",
                "edibleGuild": True,
                "culinary": True,
                "fruit": True,
                "budget": 8000,
            }
        },
    )

    def to_options(self) -> DesignOptions:
        return DesignOptions(
            native_planting=self.native_planting,
            rain_garden=self.rain_garden,
            hardscape=self.hardscape,
            hardscape_type=self.hardscape_type.replace("+", "_"),
            hardscape_material=self.hardscape_material,
            edible_guild=self.edible_guild,
            culinary=self.culinary,
            medicinal=self.medicinal,
            fruit=self.fruit,
            style=self.style,
            budget=self.budget,
        )


class PromptResponse(CamelModel):
    prompt: str
    site_plan_prompt: str
    features: List[str]


# =============================================================================
# GENERATION
# =============================================================================

class GenerateRequest(CamelModel):
    """Raw generation proxy request."""
    prompt: str
    is_edit: bool = False
    image_base64: Optional[str] = None
    images: List[str] = Field(default_factory=list)
    aspect: AspectRatio = "1:1"
    n: int = Field(default=1, ge=1, le=10)

    @field_validator("prompt")
    @classmethod
    def prompt_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("prompt must not be empty")
        return value

    def reference_images(self) -> Tuple[Optional[str], Optional[str]]:
        """(seed, mask) from imageBase64 or the legacy images list."""
        if self.image_base64:
            return self.image_base64, None
        seed = self.images[0] if self.images else None
        mask = self.images[1] if len(self.images) > 1 else None
        return seed, mask


class DesignRequest(CamelModel):
    """Build the prompt from options and generate in one call."""
    options: DesignOptionsModel = Field(default_factory=DesignOptionsModel)
    image_base64: Optional[str] = None
    aspect: AspectRatio = "1:1"
    n: int = Field(default=1, ge=1, le=10)
    site_plan: bool = False


class GeneratedDesign(CamelModel):
    url: str
    prompt_used: str


class DesignResponse(CamelModel):
    designs: List[GeneratedDesign]
    prompt: str


# =============================================================================
# BREAKDOWN / ANIMATION
# =============================================================================

class BreakdownRequest(CamelModel):
    image_url: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("imageUrl", "conceptUrl", "image_url"),
    )
    tier: Optional[str] = None
    original_image_base64: Optional[str] = None
    satellite_url: Optional[str] = None


class BreakdownResponse(CamelModel):
    breakdown: str


class AnimateRequest(CamelModel):
    image_url: Optional[str] = None
    wait: bool = True


class AnimateResponse(CamelModel):
    task_id: str
    status: str
    video_url: Optional[str] = None
    error: Optional[str] = None


# =============================================================================
# MAPS / REFERENCE IMAGES / REPORT
# =============================================================================

class MapUrlsResponse(CamelModel):
    satellite_url: str
    street_view_url: str


class ReferenceImageResponse(CamelModel):
    image_base64: str
    mime_type: str
    width: int
    height: int


class ReferenceUrlRequest(CamelModel):
    url: str


class ReportDesign(CamelModel):
    url: Optional[str] = None
    image_base64: Optional[str] = None
    prompt_used: Optional[str] = None


class ReportRequest(CamelModel):
    title: str = "Yard Design Concepts"
    address: Optional[str] = None
    designs: List[ReportDesign] = Field(default_factory=list)
    breakdown: Optional[str] = None
