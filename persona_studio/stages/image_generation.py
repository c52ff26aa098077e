"""
Image Generation

Single-unit image generation against the Gemini image models, plus the two
single-image entry points built on it:
- generate_reference_image: a brand-new reference portrait from creation attributes
- generate_studio_image: one studio shot of an existing persona

generate_one performs exactly one service round trip and yields exactly one image
or one failure. It does not retry and does not classify errors; callers decide.
"""

import asyncio
import base64
import logging
from typing import Any, List, Optional, Union

from google.genai import types

from ..core.client_config import get_client
from ..core.constants import (
    DEFAULT_ASPECT_RATIO,
    DEFAULT_MODEL_TIER,
    IMAGE_MODEL_PRO,
    IMAGE_MODEL_STANDARD,
    MODEL_TIER_DISPLAY_NAMES,
    OUTPUT_IMAGE_MIME_TYPE,
    REFERENCE_IMAGE_MIME_TYPE,
    SUPPORTED_ASPECT_RATIOS,
)
from ..core.error_classifier import classify
from ..core.errors import ModelRefusalError, NoImageProducedError
from ..core.input_normalizer import clean_base64, to_data_uri
from ..models import (
    AspectRatio,
    CameraSettings,
    CreatorAttributes,
    GeneratedImage,
    ModelTier,
    Persona,
)
from .prompt_compiler import (
    compile_reference_prompt,
    compile_scene_variant_prompt,
    compile_studio_prompt,
)

logger = logging.getLogger(__name__)

TierLike = Union[ModelTier, str]
AspectLike = Union[AspectRatio, str]


def option_value(option: Union[ModelTier, AspectRatio, str]) -> str:
    return getattr(option, "value", option)


def get_model_name(model_tier: TierLike) -> str:
    """Map a model tier to the image model identifier."""
    return IMAGE_MODEL_PRO if option_value(model_tier) == ModelTier.PRO.value else IMAGE_MODEL_STANDARD


def build_contents(prompt: str, reference_image: Optional[str] = None) -> List[types.Part]:
    """Prompt text part, followed by the normalized reference image when given."""
    parts = [types.Part.from_text(text=prompt)]
    if reference_image:
        image_bytes = base64.b64decode(clean_base64(reference_image))
        parts.append(types.Part.from_bytes(data=image_bytes, mime_type=REFERENCE_IMAGE_MIME_TYPE))
    return parts


def normalize_aspect_ratio(aspect_ratio: AspectLike) -> str:
    """Return the ratio string, rejecting anything outside the fixed supported set."""
    value = option_value(aspect_ratio)
    if value not in SUPPORTED_ASPECT_RATIOS:
        raise ValueError(
            f"Unsupported aspect ratio '{value}'. Supported: {', '.join(SUPPORTED_ASPECT_RATIOS)}"
        )
    return value


def build_image_config(aspect_ratio: AspectLike) -> types.GenerateContentConfig:
    return types.GenerateContentConfig(
        image_config=types.ImageConfig(aspect_ratio=normalize_aspect_ratio(aspect_ratio)),
    )


def extract_image(response: Any) -> str:
    """
    Pull the generated image out of a generate_content response.

    Only the first candidate is inspected. Its first part carrying inline data is
    returned as a PNG data URI. A candidate with text but no image is a refusal.

    Raises:
        ModelRefusalError: The model answered with text only.
        NoImageProducedError: No candidates, no content or no parts.
    """
    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        raise NoImageProducedError()

    content = getattr(candidates[0], "content", None)
    parts = getattr(content, "parts", None) or []

    for part in parts:
        inline_data = getattr(part, "inline_data", None)
        data = getattr(inline_data, "data", None) if inline_data is not None else None
        if data:
            if isinstance(data, bytes):
                data = base64.b64encode(data).decode("utf-8")
            return to_data_uri(data, OUTPUT_IMAGE_MIME_TYPE)

    refusal = next((part.text for part in parts if getattr(part, "text", None)), None)
    if refusal:
        raise ModelRefusalError(refusal)

    raise NoImageProducedError()


async def generate_one(
    client: Any,
    reference_image: Optional[str],
    compiled_prompt: str,
    model_tier: TierLike = DEFAULT_MODEL_TIER,
    aspect_ratio: AspectLike = DEFAULT_ASPECT_RATIO,
) -> str:
    """
    Generate exactly one image.

    Args:
        client: A google-genai client.
        reference_image: Reference image as data URI or bare base64; None for text-only.
        compiled_prompt: Fully compiled instruction text.
        model_tier: "standard" or "pro".
        aspect_ratio: One of the supported aspect ratios.

    Returns:
        The image as a ``data:image/png;base64,...`` URI.

    Raises:
        ModelRefusalError, NoImageProducedError, or the raw service error.
    """
    model_id = get_model_name(model_tier)
    tier_name = MODEL_TIER_DISPLAY_NAMES.get(option_value(model_tier), option_value(model_tier))
    logger.debug(f"--- Calling Gemini Image API ({tier_name}: {model_id}, aspect {option_value(aspect_ratio)}) ---")

    response = await asyncio.to_thread(
        client.models.generate_content,
        model=model_id,
        contents=build_contents(compiled_prompt, reference_image),
        config=build_image_config(aspect_ratio),
    )
    return extract_image(response)


async def generate_reference_image(
    attributes: CreatorAttributes,
    model_tier: TierLike = DEFAULT_MODEL_TIER,
    aspect_ratio: AspectLike = DEFAULT_ASPECT_RATIO,
    *,
    api_key: Optional[str] = None,
    client: Any = None,
) -> str:
    """Generate a new reference portrait from creation attributes."""
    aspect_ratio = normalize_aspect_ratio(aspect_ratio)
    client = client or get_client(api_key)
    prompt = compile_reference_prompt(attributes)

    try:
        image = await generate_one(client, None, prompt, model_tier, aspect_ratio)
    except Exception as e:
        classify(e, option_value(model_tier))

    logger.info("✅ Reference image generated")
    return image


async def generate_studio_image(
    reference_image: str,
    settings: CameraSettings,
    persona: Persona,
    model_tier: TierLike = DEFAULT_MODEL_TIER,
    aspect_ratio: AspectLike = DEFAULT_ASPECT_RATIO,
    *,
    api_key: Optional[str] = None,
    client: Any = None,
) -> GeneratedImage:
    """Generate one studio shot; the returned prompt is the studio prompt."""
    aspect_ratio = normalize_aspect_ratio(aspect_ratio)
    client = client or get_client(api_key)
    prompt = compile_studio_prompt(persona, settings)

    try:
        image = await generate_one(
            client,
            reference_image,
            compile_scene_variant_prompt(persona, prompt),
            model_tier,
            aspect_ratio,
        )
    except Exception as e:
        classify(e, option_value(model_tier))

    logger.info(f"✅ Studio image generated for {persona.nickname}")
    return GeneratedImage(image=image, prompt=prompt)
