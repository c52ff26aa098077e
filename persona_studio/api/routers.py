import base64
import logging
from typing import Any, Callable

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile

from persona_studio.api.dependencies import get_client_factory, get_credential_store, get_studio_executor
from persona_studio.api.schemas import (
    AnalyzePersonaRequest,
    BatchGenerationRequest,
    BatchGenerationResponse,
    CredentialRegisterRequest,
    CredentialStatusResponse,
    ErrorResponse,
    GenerationSettings,
    ImageResponse,
    PersonaResponse,
    ReferenceImageRequest,
    StoryPlanRequest,
    StoryPlanResponse,
    StoryRequest,
    StoryResponse,
    StudioRequest,
)
from persona_studio.core.client_config import credential_status
from persona_studio.core.credential_store import CredentialStore
from persona_studio.core.input_normalizer import to_data_uri
from persona_studio.pipeline.context import SessionContext
from persona_studio.pipeline.executor import StudioExecutor
from persona_studio.stages.batch_generation import generate_batch
from persona_studio.stages.image_generation import generate_reference_image
from persona_studio.stages.story_planning import plan_story

# Create logger
logger = logging.getLogger(__name__)

# Create routers
api_router = APIRouter(
    prefix="/api/v1",
    responses={status: {"model": ErrorResponse} for status in (401, 403, 422, 429, 502)},
)
credentials_router = APIRouter(prefix="/credentials", tags=["Credentials"])
personas_router = APIRouter(prefix="/personas", tags=["Personas"])
stories_router = APIRouter(prefix="/stories", tags=["Stories"])
studio_router = APIRouter(prefix="/studio", tags=["Studio"])


def _session(settings: GenerationSettings, **identity) -> SessionContext:
    """Build a session context from request settings."""
    return SessionContext(
        model_tier=settings.model_tier.value,
        aspect_ratio=settings.aspect_ratio.value,
        **identity,
    )


# Credential Endpoints
@credentials_router.get("", response_model=CredentialStatusResponse)
async def get_credential_status(store: CredentialStore = Depends(get_credential_store)):
    """Report whether an API key is available and where it comes from"""
    return credential_status(store)


@credentials_router.put("", response_model=CredentialStatusResponse)
async def register_credential(
    request: CredentialRegisterRequest,
    store: CredentialStore = Depends(get_credential_store),
):
    """Register (or replace) the user's API key"""
    try:
        store.register(request.api_key)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return credential_status(store)


@credentials_router.delete("", response_model=CredentialStatusResponse)
async def clear_credential(store: CredentialStore = Depends(get_credential_store)):
    """Remove the registered API key; the environment default applies again"""
    store.clear()
    return credential_status(store)


# Persona Endpoints
@personas_router.post("/reference-image", response_model=ImageResponse)
async def create_reference_image(
    request: ReferenceImageRequest,
    client_factory: Callable[[], Any] = Depends(get_client_factory),
):
    """Generate a reference portrait from creation attributes"""
    ctx = _session(request)
    image = await generate_reference_image(
        request.attributes, ctx.model_tier, ctx.aspect_ratio, client=client_factory()
    )
    return ImageResponse(image=image)


@personas_router.post("", response_model=PersonaResponse)
async def create_persona(
    request: ReferenceImageRequest,
    executor: StudioExecutor = Depends(get_studio_executor),
):
    """Generate a reference portrait and derive its persona"""
    ctx = await executor.create_persona(_session(request), request.attributes)
    return PersonaResponse(reference_image=ctx.reference_image, persona=ctx.persona, logs=ctx.logs)


@personas_router.post("/analyze", response_model=PersonaResponse)
async def analyze_reference(
    request: AnalyzePersonaRequest,
    executor: StudioExecutor = Depends(get_studio_executor),
):
    """Derive a persona from a reference image"""
    ctx = await executor.adopt_reference(SessionContext(), request.reference_image)
    return PersonaResponse(reference_image=ctx.reference_image, persona=ctx.persona, logs=ctx.logs)


@personas_router.post("/upload", response_model=PersonaResponse)
async def upload_reference(
    image_file: UploadFile = File(..., description="Reference photo"),
    executor: StudioExecutor = Depends(get_studio_executor),
):
    """Upload a reference photo and derive its persona"""
    if not image_file.content_type or not image_file.content_type.startswith("image/"):
        raise HTTPException(status_code=400, detail="Uploaded file must be an image")

    content = await image_file.read()
    if not content:
        raise HTTPException(status_code=400, detail="Uploaded file is empty")

    logger.info(f"📤 Reference upload received: {image_file.filename} ({len(content)} bytes)")
    reference_image = to_data_uri(base64.b64encode(content).decode("utf-8"), image_file.content_type)
    ctx = await executor.adopt_reference(SessionContext(), reference_image)
    return PersonaResponse(reference_image=ctx.reference_image, persona=ctx.persona, logs=ctx.logs)


# Story Endpoints
@stories_router.post("/plan", response_model=StoryPlanResponse)
async def plan_story_prompts(
    request: StoryPlanRequest,
    client_factory: Callable[[], Any] = Depends(get_client_factory),
):
    """Plan storyboard prompts for a persona"""
    prompts = await plan_story(
        request.persona, request.scenario, frame_count=request.frame_count, client=client_factory()
    )
    return StoryPlanResponse(prompts=prompts)


@stories_router.post("/generate", response_model=BatchGenerationResponse)
async def generate_story_images(
    request: BatchGenerationRequest,
    client_factory: Callable[[], Any] = Depends(get_client_factory),
):
    """Generate one image per prompt; failed frames are dropped"""
    if not request.prompts:
        return BatchGenerationResponse(images=[])

    ctx = _session(request)
    images = await generate_batch(
        request.reference_image,
        request.prompts,
        ctx.model_tier,
        ctx.aspect_ratio,
        persona=request.persona,
        client=client_factory(),
    )
    return BatchGenerationResponse(images=images)


@stories_router.post("", response_model=StoryResponse)
async def create_story(
    request: StoryRequest,
    executor: StudioExecutor = Depends(get_studio_executor),
):
    """Plan a story and generate all of its frames"""
    ctx = _session(request, reference_image=request.reference_image, persona=request.persona)
    story = await executor.run_story(ctx, request.scenario)
    return StoryResponse(
        id=story.id,
        scenario=story.scenario,
        prompts=story.prompts,
        images=story.images,
        logs=ctx.logs,
    )


# Studio Endpoints
@studio_router.post("", response_model=StoryResponse)
async def create_studio_shot(
    request: StudioRequest,
    executor: StudioExecutor = Depends(get_studio_executor),
):
    """Generate one studio shot from camera settings"""
    ctx = _session(request, reference_image=request.reference_image, persona=request.persona)
    story = await executor.run_studio(ctx, request.camera)
    return StoryResponse(
        id=story.id,
        scenario=story.scenario,
        prompts=story.prompts,
        images=story.images,
        logs=ctx.logs,
    )


# Include all routers
api_router.include_router(credentials_router)
api_router.include_router(personas_router)
api_router.include_router(stories_router)
api_router.include_router(studio_router)
