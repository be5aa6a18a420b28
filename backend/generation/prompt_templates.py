"""
Prompt templates for yard redesign generation, breakdown and animation.

The design template is engineered to keep the model from "redesigning" the
house: only vegetation, ground-level landscape features and soil may change.
"""

from typing import Dict, List, Optional


# Everything the image model must leave untouched
PRESERVED_ELEMENTS = [
    "house",
    "roof",
    "windows",
    "doors",
    "garage",
    "driveway",
    "sidewalks",
    "fences",
    "existing structures",
]


DESIGN_TEMPLATE = """Photorealistic landscape design for a Fort Collins, Colorado yard.
ONLY modify the yard: lawn, plants, soil, mulch and ground-level landscape features.
DO NOT change or alter the {preserved} or architecture in any way.
Keep all non-landscape elements exactly the same as in the reference photo.
{style_line}Include these elements: {features}.
{budget_line}Natural daylight, high detail, professional photography style."""


SITE_PLAN_TEMPLATE = """Detailed top-down landscape site plan of the same Fort Collins, Colorado property.
VIEW: 90-degree orthographic plan view, architectural drawing style, north up.
Show the house footprint, driveway and fences as simple gray outlines exactly where they are.
Draw and label every planting bed and landscape feature with estimated square footage.
{style_line}Include these elements: {features}.
{budget_line}Clean white background, crisp linework, legible labels, no perspective."""


NO_FEATURES_PHRASE = "a tidy, water-wise refresh of the existing planting beds"


# Style direction descriptions, keyed by style id
STYLE_DESCRIPTIONS: Dict[str, str] = {
    "xeriscape": "drought-tolerant plants, decorative rock mulch, gravel paths, minimal turf",
    "permaculture": "herbs, vegetables, fruit trees, layered planting, companion planting",
    "water_wise_native": "Colorado native grasses and flowers, dry creek bed or rain garden features",
}

# Display names from the design form
STYLE_ALIASES: Dict[str, str] = {
    "permaculture_garden": "permaculture",
    "water_wise_native_plants": "water_wise_native",
}


def format_style_line(style: Optional[str]) -> str:
    """Return the 'Style:' line for a style key, or '' when unset."""
    if not style:
        return ""
    key = style.strip().lower().replace("-", "_").replace(" ", "_")
    key = STYLE_ALIASES.get(key, key)
    description = STYLE_DESCRIPTIONS.get(key, style.strip())
    return f"Style: {description}.\n"


def format_budget_line(budget: Optional[int]) -> str:
    """Return the budget line, e.g. 'Budget-conscious design around $8,000.'"""
    if budget is None:
        return ""
    return f"Budget-conscious design around ${budget:,}.\n"


def render_template(
    template: str,
    features: List[str],
    style: Optional[str] = None,
    budget: Optional[int] = None,
) -> str:
    """
    Fill a generation template.

    Args:
        template: DESIGN_TEMPLATE or SITE_PLAN_TEMPLATE
        features: Ordered feature phrases (already filtered to active toggles)
        style: Optional style key
        budget: Optional budget in USD

    Returns:
        Complete prompt string
    """
    return template.format(
        preserved=", ".join(PRESERVED_ELEMENTS),
        features=", ".join(features) if features else NO_FEATURES_PHRASE,
        style_line=format_style_line(style),
        budget_line=format_budget_line(budget),
    )


# =============================================================================
# BREAKDOWN (vision chat)
# =============================================================================

BREAKDOWN_SYSTEM_PROMPT = """You are a licensed landscape architect and installer working in Fort Collins, Colorado (USDA zone 5b, ~15 in. annual precipitation, clay-loam soils).

You will receive a concept image of a redesigned yard and, when provided, the original "before" photo and a satellite/top-down reference. Estimate quantities from visible features and the reference images. When a dimension cannot be seen, state your assumption.

### LOCAL PRICING RULES (2025 Fort Collins installed costs)
- Turf removal: sod cutter + haul-off, $1.25-$2.00 per sq ft.
- Soil prep: 2 in. compost tilled in, $0.75 per sq ft of new planting bed.
- Mulch: shredded cedar, 3 in. depth, $55 per cubic yard installed (1 cu yd covers ~108 sq ft).
- Decorative rock: 1.5 in. river rock over fabric, $2.50 per sq ft.
- Natural flagstone walkway/patio on compacted road base: $22-$30 per sq ft.
- Permeable pavers on open-graded base: $18-$26 per sq ft.
- Rain garden basin (excavation, amended soil, overflow rock): $12-$18 per sq ft.
- Drip irrigation conversion: $1.50-$2.25 per sq ft of planted area.
- Plants: 1-gal perennial $14, 5-gal shrub $45, 15-gal fruit tree $180, plug $4.
- Labor is included in the unit prices above. Add 10% contingency.

### NATIVE PLANT & REBATE RULES
- Count a plant as "native" only if it is native to the Colorado Front Range.
- Xeriscape Incentive Program (XIP) eligibility: at least 50% living plant cover at maturity across the converted area, at least 75% of plants rated low or very-low water, and turf removed from a minimum of 200 sq ft. Rebate is $1.00 per sq ft converted, capped at $1,500.
- If the design does not meet a threshold, say which one and by how much.

### TIER
The user message states a budget tier (Budget, Standard or Premium). Scale plant sizes and hardscape materials to that tier. If the tier is Unknown, assume Standard.

### OUTPUT FORMAT (Markdown, use these headings exactly, in this order)
## Project Summary
## Cost Estimate
A table with columns: | Item | Quantity | Unit | Unit Cost | Subtotal |
End with a **Total** row, a contingency row and the estimated XIP rebate as a negative line.
## Plant List
A table with columns: | Common Name | Botanical Name | Size | Quantity | Water Need | Native |
## Installation Phases
Numbered phases, each with duration in days and the crew/equipment needed.
## XIP Rebate Eligibility
State eligible/not eligible with the threshold math.
## Maintenance Notes

Be specific, practical and concise. Do not include any text outside these sections."""


def format_breakdown_user_text(tier: Optional[str]) -> str:
    """Text part of the breakdown user turn."""
    return f"Tier: {tier or 'Unknown'}. Concept design:"


# =============================================================================
# ANIMATION (image-to-video)
# =============================================================================

ANIMATION_PROMPT = (
    "smooth cinematic flythrough over the Fort Collins landscape design, "
    "gentle wind rustling through the plants and grasses, subtle water movement "
    "in the rain garden, natural daylight, realistic motion, peaceful and relaxing"
)
