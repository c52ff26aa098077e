"""
Persona Analysis

Reads a reference photo and asks the text model for a structured influencer
persona (nickname, age, occupation, personality, lifestyle, vibe, one-line
description, hashtags). The result is validated into an immutable Persona.
"""

import asyncio
import logging
from typing import Any, Optional

from google.genai import types

from ..core.client_config import get_client
from ..core.constants import TEXT_MODEL_ID
from ..core.error_classifier import classify
from ..core.errors import InvalidResponseError
from ..core.json_parser import parse_structured_response
from ..models import Persona
from .image_generation import build_contents
from .prompt_compiler import compile_persona_analysis_prompt

logger = logging.getLogger(__name__)


def build_persona_config() -> types.GenerateContentConfig:
    return types.GenerateContentConfig(
        response_mime_type="application/json",
        response_schema=Persona,
    )


def parse_persona(text: Optional[str]) -> Persona:
    if not text:
        raise InvalidResponseError("Failed to generate persona")
    return parse_structured_response(text, expected_schema=Persona)


async def analyze_persona(
    reference_image: str,
    *,
    api_key: Optional[str] = None,
    client: Any = None,
) -> Persona:
    """
    Derive a Persona from a reference image.

    Args:
        reference_image: Data URI or bare base64 image.
        api_key: Explicit key; otherwise the active credential is resolved.
        client: Pre-built google-genai client (takes precedence over api_key).

    Raises:
        InvalidResponseError: Empty or unparsable response.
        AccessDeniedError, RateLimitedError, or the raw service error.
    """
    client = client or get_client(api_key)

    try:
        response = await asyncio.to_thread(
            client.models.generate_content,
            model=TEXT_MODEL_ID,
            contents=build_contents(compile_persona_analysis_prompt(), reference_image),
            config=build_persona_config(),
        )
        persona = parse_persona(getattr(response, "text", None))
    except Exception as e:
        classify(e)

    logger.info(f"✅ Persona analysed: {persona.nickname} ({persona.occupation})")
    return persona
