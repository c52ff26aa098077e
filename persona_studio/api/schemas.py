from typing import Optional, List, Literal
from pydantic import BaseModel, Field

from persona_studio.core.constants import STORY_FRAME_COUNT
from persona_studio.models import AspectRatio, CameraSettings, CreatorAttributes, GeneratedImage, ModelTier, Persona


class GenerationSettings(BaseModel):
    """Model tier and aspect ratio shared by every image request"""
    model_tier: ModelTier = Field(default=ModelTier.STANDARD, description="'standard' (Flash Lite) or 'pro' (Banana Pro)")
    aspect_ratio: AspectRatio = Field(default=AspectRatio.SQUARE, description="One of 1:1, 3:4, 4:3, 9:16, 16:9")


# Credentials
class CredentialRegisterRequest(BaseModel):
    """Request to register the user's API key"""
    api_key: str = Field(min_length=1, description="Gemini API key")


class CredentialStatusResponse(BaseModel):
    """Which credential source is active; never includes the key itself"""
    configured: bool
    source: Literal["registered", "environment", "missing"]


# Personas
class ReferenceImageRequest(GenerationSettings):
    """Request to generate a reference portrait from attributes"""
    attributes: CreatorAttributes


class ImageResponse(BaseModel):
    """A single generated image as data URI"""
    image: str


class AnalyzePersonaRequest(BaseModel):
    """Request to derive a persona from a reference image"""
    reference_image: str = Field(min_length=1, description="Data URI or bare base64 image")


class PersonaResponse(BaseModel):
    """Reference image together with the persona derived from it"""
    reference_image: str
    persona: Persona
    logs: List[str] = Field(default_factory=list)


# Stories
class StoryPlanRequest(BaseModel):
    """Request to plan storyboard prompts"""
    persona: Persona
    scenario: Optional[str] = Field(None, description="What the story should be about; omit for an automatic lifestyle story")
    frame_count: int = Field(default=STORY_FRAME_COUNT, ge=1, le=12)


class StoryPlanResponse(BaseModel):
    """Planned scene prompts"""
    prompts: List[str]


class BatchGenerationRequest(GenerationSettings):
    """Request to generate one image per scene prompt"""
    reference_image: str = Field(min_length=1)
    prompts: List[str] = Field(default_factory=list)
    persona: Optional[Persona] = None


class BatchGenerationResponse(BaseModel):
    """Successfully generated images, in prompt order"""
    images: List[GeneratedImage]


class StoryRequest(GenerationSettings):
    """Request to plan and generate a full story"""
    reference_image: str = Field(min_length=1)
    persona: Persona
    scenario: Optional[str] = None


class StoryResponse(BaseModel):
    """A generated story"""
    id: str
    scenario: str
    prompts: List[str]
    images: List[GeneratedImage]
    logs: List[str] = Field(default_factory=list)


# Studio
class StudioRequest(GenerationSettings):
    """Request for one studio shot"""
    reference_image: str = Field(min_length=1)
    persona: Persona
    camera: CameraSettings = Field(default_factory=CameraSettings)


class ErrorResponse(BaseModel):
    """Error body returned for classified failures"""
    detail: str
    error: str
    hint: Optional[str] = None
