"""
Story Planning

Asks the text model for a sequential storyboard: a JSON array of scene prompts
that keep location and outfit consistent across frames.
"""

import asyncio
import logging
from typing import Any, List, Optional

from google.genai import types

from ..core.client_config import get_client
from ..core.constants import STORY_FRAME_COUNT, TEXT_MODEL_ID
from ..core.error_classifier import classify
from ..core.errors import InvalidResponseError
from ..core.json_parser import parse_structured_response
from ..models import Persona
from .prompt_compiler import compile_story_plan_prompt

logger = logging.getLogger(__name__)


def build_story_config() -> types.GenerateContentConfig:
    return types.GenerateContentConfig(
        response_mime_type="application/json",
        response_schema=list[str],
    )


def parse_story_prompts(text: Optional[str]) -> List[str]:
    """Parse the storyboard array, dropping blank entries."""
    if not text:
        raise InvalidResponseError("Failed to plan story")
    prompts = parse_structured_response(text, expected_schema=List[str])
    return [p.strip() for p in prompts if p and p.strip()]


async def plan_story(
    persona: Persona,
    scenario: Optional[str] = None,
    *,
    frame_count: int = STORY_FRAME_COUNT,
    api_key: Optional[str] = None,
    client: Any = None,
) -> List[str]:
    """Plan ``frame_count`` scene prompts for a persona, optionally around a user scenario."""
    client = client or get_client(api_key)
    prompt = compile_story_plan_prompt(persona, scenario, frame_count)

    try:
        response = await asyncio.to_thread(
            client.models.generate_content,
            model=TEXT_MODEL_ID,
            contents=prompt,
            config=build_story_config(),
        )
        prompts = parse_story_prompts(getattr(response, "text", None))
    except Exception as e:
        classify(e)

    if len(prompts) != frame_count:
        logger.warning(f"Story plan returned {len(prompts)} prompts, expected {frame_count}")
    logger.info(f"📝 Planned {len(prompts)} story frames for {persona.nickname}")
    return prompts
