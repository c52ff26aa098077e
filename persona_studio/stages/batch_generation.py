"""
Batch Generation

Fans out one single-unit generation per scene prompt and aggregates the outcomes.

Policy:
- All units are dispatched at once and joined with asyncio.gather; a failing
  unit never cancels or blocks the others.
- Every unit settles into a UnitResult (image or captured error).
- After the join, the first permission-class failure in dispatch order aborts
  the whole batch with a classified error, even if other units succeeded.
- Otherwise non-fatal failures (refusals, empty responses, transient errors) are
  logged and dropped; successes are returned in dispatch order.
"""

import asyncio
import logging
from typing import Any, List, Optional, Sequence

from ..core.client_config import get_client
from ..core.constants import DEFAULT_ASPECT_RATIO, DEFAULT_MODEL_TIER
from ..core.error_classifier import classify, is_fatal
from ..models import GeneratedImage, Persona, UnitResult
from .image_generation import AspectLike, TierLike, generate_one, normalize_aspect_ratio, option_value
from .prompt_compiler import compile_scene_variant_prompt

logger = logging.getLogger(__name__)


async def _run_unit(
    client: Any,
    reference_image: str,
    scene_prompt: str,
    model_tier: TierLike,
    aspect_ratio: AspectLike,
    persona: Optional[Persona] = None,
) -> UnitResult:
    """Run one unit and capture its outcome instead of raising."""
    try:
        image = await generate_one(
            client,
            reference_image,
            compile_scene_variant_prompt(persona, scene_prompt),
            model_tier,
            aspect_ratio,
        )
        return UnitResult(prompt=scene_prompt, image=image)
    except Exception as e:
        logger.warning(f"Frame generation failed for prompt '{scene_prompt[:80]}': {e}")
        return UnitResult(prompt=scene_prompt, error=e)


def find_fatal_failure(results: Sequence[UnitResult]) -> Optional[UnitResult]:
    """First unit, in dispatch order, whose failure invalidates the batch."""
    return next((r for r in results if r.error is not None and is_fatal(r.error)), None)


async def generate_batch(
    reference_image: str,
    prompts: Sequence[str],
    model_tier: TierLike = DEFAULT_MODEL_TIER,
    aspect_ratio: AspectLike = DEFAULT_ASPECT_RATIO,
    *,
    persona: Optional[Persona] = None,
    api_key: Optional[str] = None,
    client: Any = None,
) -> List[GeneratedImage]:
    """
    Generate one image per scene prompt, concurrently.

    Args:
        reference_image: Identity reference (data URI or bare base64), shared read-only.
        prompts: Scene descriptions; each is wrapped with the identity instruction.
        model_tier: "standard" or "pro".
        aspect_ratio: One of the supported aspect ratios.
        persona: Optional persona passed through to prompt compilation.
        api_key: Explicit key; otherwise the active credential is resolved.
        client: Pre-built google-genai client (takes precedence over api_key).

    Returns:
        Successful images paired with their scene prompts, in dispatch order.

    Raises:
        BillingRequiredError / AccessDeniedError when any unit hit a permission failure.
        ValueError: The aspect ratio is not one of the supported ratios.
    """
    if not prompts:
        return []

    aspect_ratio = normalize_aspect_ratio(aspect_ratio)
    client = client or get_client(api_key)
    logger.info(f"Processing {len(prompts)} image generations in parallel...")

    results: List[UnitResult] = await asyncio.gather(*[
        _run_unit(client, reference_image, prompt, model_tier, aspect_ratio, persona)
        for prompt in prompts
    ])

    fatal = find_fatal_failure(results)
    if fatal is not None:
        logger.error(f"❌ Fatal failure in batch, discarding {sum(r.success for r in results)} successful images")
        classify(fatal.error, option_value(model_tier))

    images = [GeneratedImage(image=r.image, prompt=r.prompt) for r in results if r.success]
    logger.info(f"✅ Generated {len(images)}/{len(results)} images successfully")
    return images
