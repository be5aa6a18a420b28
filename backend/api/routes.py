"""
FastAPI routes for the yard design studio.

Each route is a stateless proxy: one inbound request, one outbound
provider call (create + poll for animation), one response.
"""

import asyncio
import logging
from typing import Optional

import httpx
from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile
from fastapi.responses import JSONResponse, Response

from .schemas import (
    AnimateRequest,
    AnimateResponse,
    BreakdownRequest,
    BreakdownResponse,
    DesignOptionsModel,
    DesignRequest,
    DesignResponse,
    GeneratedDesign,
    GenerateRequest,
    MapUrlsResponse,
    PromptResponse,
    ReferenceImageResponse,
    ReferenceUrlRequest,
    ReportRequest,
)
from generation import (
    AnimationClient,
    BreakdownClient,
    ImageGenerationClient,
    ProviderError,
    build_design_prompt,
    build_site_plan_prompt,
    describe_features,
)
from generation.image_client import to_data_url
from utils import (
    ReportDesign,
    build_map_urls,
    build_report_pdf,
    decode_base64_image,
    fetch_image_bytes,
    get_maps_api_key,
    load_image_from_bytes,
    normalize_reference_image,
    sniff_base64_mime_type,
    strip_data_url,
)

logger = logging.getLogger(__name__)

router = APIRouter()

EMPTY_IMAGE_RESPONSE = "Empty response from image provider"
INVALID_IMAGE_RESPONSE = "Invalid response from image provider"


def get_transport() -> Optional[httpx.AsyncBaseTransport]:
    """Outbound transport for provider clients; overridden in tests."""
    return None


def _configuration_error(e: ValueError) -> HTTPException:
    logger.error("Configuration error: %s", e)
    return HTTPException(status_code=500, detail=str(e))


def _provider_error(e: ProviderError) -> HTTPException:
    return HTTPException(status_code=e.status_code, detail=e.message)


def _check_reference_images(*images: Optional[str]) -> None:
    """Reject reference images that are not valid base64 before any provider call."""
    for image in images:
        if not image:
            continue
        try:
            decode_base64_image(image)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=f"Invalid reference image: {e}")


def _image_client(transport) -> ImageGenerationClient:
    try:
        return ImageGenerationClient(transport=transport)
    except ValueError as e:
        raise _configuration_error(e)


async def _run_generation(
    client: ImageGenerationClient,
    prompt: str,
    is_edit: bool,
    seed: Optional[str],
    mask: Optional[str],
    aspect: str,
    n: int,
) -> dict:
    """Dispatch to the edit or generation endpoint."""
    mime_type = sniff_base64_mime_type(seed)
    seed = strip_data_url(seed) if seed else None
    mask = strip_data_url(mask) if mask else None

    if is_edit:
        return await client.edit(
            prompt, seed, aspect=aspect, n=n, mask_base64=mask, mime_type=mime_type,
        )
    return await client.generate(
        prompt, aspect=aspect, n=n, image_base64=seed, mask_base64=mask, mime_type=mime_type,
    )


# =============================================================================
# PROMPTS
# =============================================================================

@router.post("/prompt", response_model=PromptResponse)
async def build_prompt(request: DesignOptionsModel):
    """
    Build the generation prompts for a set of design toggles.

    Returns:
    - prompt: the "after" photo prompt
    - sitePlanPrompt: the top-down site plan prompt
    - features: the active feature phrases, in prompt order
    """
    options = request.to_options()
    return PromptResponse(
        prompt=build_design_prompt(options),
        site_plan_prompt=build_site_plan_prompt(options),
        features=describe_features(options),
    )


# =============================================================================
# GENERATION PROXY
# =============================================================================

@router.post("/generate")
async def generate_images(
    request: GenerateRequest,
    transport=Depends(get_transport),
):
    """
    Forward a prompt (and optional reference image) to the image provider.

    Returns the provider's JSON unchanged. Provider errors are passed
    through with the provider's status code.
    """
    seed, mask = request.reference_images()
    if request.is_edit and not seed:
        raise HTTPException(status_code=400, detail="isEdit requires imageBase64")
    _check_reference_images(seed, mask)

    client = _image_client(transport)

    try:
        result = await _run_generation(
            client, request.prompt, request.is_edit, seed, mask, request.aspect, request.n,
        )
    except ProviderError as e:
        raise _provider_error(e)
    except Exception as e:
        logger.exception("Generation failed")
        raise HTTPException(status_code=500, detail=str(e))

    return JSONResponse(result)


@router.post("/design", response_model=DesignResponse)
async def generate_design(
    request: DesignRequest,
    transport=Depends(get_transport),
):
    """
    Build the prompt from design toggles and generate concept images.

    Uses the reference image as an edit seed when one is supplied.
    Set sitePlan to get the detailed top-down plan instead of a photo.
    """
    options = request.options.to_options()
    if request.site_plan:
        prompt = build_site_plan_prompt(options)
    else:
        prompt = build_design_prompt(options)

    _check_reference_images(request.image_base64)
    client = _image_client(transport)
    is_edit = bool(request.image_base64) and not request.site_plan

    try:
        result = await _run_generation(
            client, prompt, is_edit, request.image_base64, None, request.aspect, request.n,
        )
    except ProviderError as e:
        raise _provider_error(e)
    except Exception as e:
        logger.exception("Design generation failed")
        raise HTTPException(status_code=500, detail=str(e))

    data = result.get("data") if isinstance(result, dict) else None
    if not isinstance(data, list):
        logger.warning("Unexpected image provider response: %s", type(result).__name__)
        raise HTTPException(status_code=500, detail=INVALID_IMAGE_RESPONSE)

    designs = []
    for item in data:
        if not isinstance(item, dict):
            continue
        if item.get("url"):
            url = item["url"]
        elif item.get("b64_json"):
            url = to_data_url(item["b64_json"])
        else:
            continue
        designs.append(GeneratedDesign(url=url, prompt_used=prompt))

    if not designs:
        raise HTTPException(status_code=500, detail=EMPTY_IMAGE_RESPONSE)

    logger.info("Generated %d design(s)", len(designs))
    return DesignResponse(designs=designs, prompt=prompt)


# =============================================================================
# BREAKDOWN PROXY
# =============================================================================

@router.post("/breakdown", response_model=BreakdownResponse)
async def get_breakdown(
    request: BreakdownRequest,
    transport=Depends(get_transport),
):
    """
    Ask the vision model for a cost estimate, plant list and install plan.

    Returns:
    - breakdown: markdown text
    """
    if not request.image_url or not request.image_url.strip():
        raise HTTPException(status_code=400, detail="Missing imageUrl")

    try:
        client = BreakdownClient(transport=transport)
    except ValueError as e:
        raise _configuration_error(e)

    original = request.original_image_base64
    try:
        breakdown = await client.get_breakdown(
            request.image_url,
            tier=request.tier,
            original_image_base64=strip_data_url(original) if original else None,
            original_mime_type=sniff_base64_mime_type(original, default="image/jpeg"),
            satellite_url=request.satellite_url,
        )
    except ProviderError as e:
        raise _provider_error(e)
    except Exception as e:
        logger.exception("Breakdown failed")
        raise HTTPException(status_code=500, detail=str(e))

    return BreakdownResponse(breakdown=breakdown)


# =============================================================================
# ANIMATION PROXY
# =============================================================================

def _animation_client(transport) -> AnimationClient:
    try:
        return AnimationClient(transport=transport)
    except ValueError as e:
        raise _configuration_error(e)


@router.post("/animate", response_model=AnimateResponse, response_model_exclude_none=True)
async def animate_design(
    request: AnimateRequest,
    transport=Depends(get_transport),
):
    """
    Turn a still design image into a short flythrough video.

    With wait=true (default) this blocks until the video is ready and
    returns videoUrl. With wait=false it returns the taskId immediately;
    poll GET /animate/{task_id}.
    """
    if not request.image_url or not request.image_url.strip():
        raise HTTPException(status_code=400, detail="Missing imageUrl")

    client = _animation_client(transport)

    try:
        if not request.wait:
            task_id = await client.create_task(request.image_url)
            return AnimateResponse(task_id=task_id, status="pending")

        task = await client.animate(request.image_url)
    except ProviderError as e:
        logger.warning("Animation failed: %s", e.message)
        raise HTTPException(status_code=500, detail=e.message)
    except Exception as e:
        logger.exception("Animation failed")
        raise HTTPException(status_code=500, detail=str(e) or "Runway animation failed")

    return AnimateResponse(task_id=task.task_id, status="success", video_url=task.video_url)


@router.get("/animate/{task_id}", response_model=AnimateResponse, response_model_exclude_none=True)
async def get_animation_status(task_id: str, transport=Depends(get_transport)):
    """Check an animation task started with wait=false."""
    client = _animation_client(transport)

    try:
        task = await client.get_task(task_id)
    except ProviderError as e:
        raise HTTPException(status_code=500, detail=e.message)

    return AnimateResponse(
        task_id=task.task_id or task_id,
        status=task.status,
        video_url=task.video_url,
        error=task.error,
    )


# =============================================================================
# MAPS
# =============================================================================

@router.get("/maps", response_model=MapUrlsResponse)
async def get_map_urls(address: Optional[str] = Query(default=None)):
    """Static satellite and street-view image URLs for an address."""
    if not address or not address.strip():
        raise HTTPException(status_code=400, detail="Missing address")

    api_key = get_maps_api_key()
    if not api_key:
        raise HTTPException(status_code=500, detail="GOOGLE_MAPS_API_KEY not set")

    urls = build_map_urls(address, api_key)
    return MapUrlsResponse(
        satellite_url=urls.satellite_url,
        street_view_url=urls.street_view_url,
    )


# =============================================================================
# REFERENCE IMAGES
# =============================================================================

def _reference_response(image_bytes: bytes) -> ReferenceImageResponse:
    try:
        reference = normalize_reference_image(image_bytes)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return ReferenceImageResponse(
        image_base64=reference.image_base64,
        mime_type=reference.mime_type,
        width=reference.width,
        height=reference.height,
    )


@router.post("/reference", response_model=ReferenceImageResponse)
async def upload_reference(file: UploadFile = File(...)):
    """
    Normalize an uploaded "before" photo into a base64 payload.

    Large photos are downscaled before they are sent to a provider.
    """
    if file.content_type and not file.content_type.startswith("image/"):
        raise HTTPException(status_code=400, detail="Please upload a PNG, JPG or WEBP image")

    content = await file.read()
    if not content:
        raise HTTPException(status_code=400, detail="Uploaded file is empty")

    return _reference_response(content)


@router.post("/reference/url", response_model=ReferenceImageResponse)
async def fetch_reference(
    request: ReferenceUrlRequest,
    transport=Depends(get_transport),
):
    """Fetch a remote reference image (street view, 3D capture) and normalize it."""
    try:
        content = await fetch_image_bytes(request.url, transport=transport)
    except httpx.HTTPError as e:
        logger.warning("Reference fetch failed: %s", e)
        raise HTTPException(status_code=502, detail=f"Could not fetch reference image: {e}")

    return _reference_response(content)


# =============================================================================
# REPORT EXPORT
# =============================================================================

@router.post("/report")
async def export_report(
    request: ReportRequest,
    transport=Depends(get_transport),
):
    """
    Assemble the designs (and optional breakdown) into a PDF download.
    """
    if not request.designs:
        raise HTTPException(status_code=400, detail="At least one design is required")

    designs = []
    for index, design in enumerate(request.designs, start=1):
        try:
            if design.image_base64:
                image_bytes = decode_base64_image(design.image_base64)
            elif design.url and design.url.startswith("data:"):
                # b64_json results come back from /design as data URLs
                image_bytes = decode_base64_image(design.url)
            elif design.url:
                image_bytes = await fetch_image_bytes(design.url, transport=transport)
            else:
                raise HTTPException(
                    status_code=400, detail=f"Design {index} has no url or imageBase64"
                )
            load_image_from_bytes(image_bytes)
        except (httpx.HTTPError, ValueError) as e:
            raise HTTPException(status_code=502, detail=f"Design {index} image unavailable: {e}")

        designs.append(ReportDesign(image_bytes=image_bytes, caption=design.prompt_used or ""))

    pdf = await asyncio.to_thread(
        build_report_pdf,
        request.title,
        designs,
        request.breakdown,
        request.address,
    )

    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": 'attachment; filename="yard-design-report.pdf"'},
    )
