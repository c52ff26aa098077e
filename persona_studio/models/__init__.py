"""
Pydantic models for Persona Studio.
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ModelTier(str, Enum):
    """Backing image model configuration."""
    STANDARD = "standard"
    PRO = "pro"


class AspectRatio(str, Enum):
    """Aspect ratios accepted by the image models."""
    SQUARE = "1:1"
    PORTRAIT = "3:4"
    LANDSCAPE = "4:3"
    STORY = "9:16"
    WIDE = "16:9"


class Persona(BaseModel):
    """Synthetic influencer identity derived from a reference image. Immutable once created."""
    model_config = ConfigDict(frozen=True)

    nickname: str = Field(..., description="Short, memorable nickname for the persona.")
    age: str = Field(..., description="Approximate age range (e.g. 'mid 20s').")
    occupation: str = Field(..., description="Occupation that fits the look and mood of the photo.")
    personality: str = Field(..., description="Personality read from expression and pose.")
    lifestyle: str = Field(..., description="Hobbies or way of life the persona would enjoy.")
    vibe: str = Field(..., description="Overall fashion and mood keywords.")
    description: str = Field(..., description="One-line summary of the persona (15 words or fewer).")
    hashtags: List[str] = Field(default_factory=list, description="3-4 related hashtags.")


class CreatorAttributes(BaseModel):
    """Attributes for generating a reference portrait from scratch. Interpolated verbatim."""
    gender: str
    age: str
    ethnicity: str
    build: str
    height: str = Field(..., description="Height in centimetres.")
    eye_color: str
    hair_color: str
    hair_style: str
    fashion_style: str
    vibe: str


class CameraSettings(BaseModel):
    """Virtual camera placement for studio shots."""
    rotation: float = Field(0.0, description="Horizontal orbit in degrees; negative is the subject's left.")
    vertical: float = Field(0.0, description="Camera height; negative is below eye level.")
    zoom: float = Field(5.0, description="Framing from full body (low) to extreme close-up (high).")
    is_wide_angle: bool = Field(False, description="Wide-angle lens instead of a portrait lens.")


class GeneratedImage(BaseModel):
    """A generated image (data URI) paired with the prompt that produced it."""
    image: str
    prompt: str


@dataclass
class UnitResult:
    """Outcome of one single-unit generation inside a batch."""
    prompt: str
    image: Optional[str] = None
    error: Optional[BaseException] = None

    @property
    def success(self) -> bool:
        return self.error is None and bool(self.image)


__all__ = [
    "ModelTier",
    "AspectRatio",
    "Persona",
    "CreatorAttributes",
    "CameraSettings",
    "GeneratedImage",
    "UnitResult",
]
