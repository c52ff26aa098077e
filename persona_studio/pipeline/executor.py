"""
Studio Executor - runs the end-to-end persona workflows.

Workflows:
- create_persona: generate a reference portrait from attributes, then analyse it
- adopt_reference: analyse an uploaded reference photo
- run_story: plan a storyboard and generate it as one batch
- run_studio: one studio shot from camera settings

Every workflow resolves the credential afresh (through the stages) unless an
explicit key was given to the executor.
"""

import datetime
import logging
from typing import Any, Callable, Optional

from ..core.errors import EmptyStoryError
from ..core.constants import DEFAULT_STORY_SCENARIO_LABEL, STORY_FRAME_COUNT, STUDIO_SCENARIO_LABEL
from ..models import CameraSettings, CreatorAttributes
from ..stages.batch_generation import generate_batch
from ..stages.image_generation import generate_reference_image, generate_studio_image
from ..stages.persona_analysis import analyze_persona
from ..stages.story_planning import plan_story
from .context import SessionContext, StoryBatch

logger = logging.getLogger(__name__)


def _batch_id() -> str:
    return datetime.datetime.now().strftime("%Y%m%d%H%M%S%f")


class StudioExecutor:
    """Runs persona workflows against a SessionContext."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        client_factory: Optional[Callable[[], Any]] = None,
        frame_count: int = STORY_FRAME_COUNT,
    ):
        """
        Args:
            api_key: Explicit key threaded into every call; None resolves per call.
            client_factory: Builds a fresh client for every service operation (used for injection).
            frame_count: Number of frames planned per story.
        """
        self.api_key = api_key
        self.client_factory = client_factory
        self.frame_count = frame_count

    def _client(self) -> Any:
        return self.client_factory() if self.client_factory else None

    def _require_identity(self, ctx: SessionContext) -> None:
        if not ctx.has_identity:
            raise ValueError("A reference image and persona are required first")

    async def create_persona(self, ctx: SessionContext, attributes: CreatorAttributes) -> SessionContext:
        """Generate a reference portrait, then derive its persona."""
        ctx.reset_identity()
        ctx.log("Generating reference image...")
        ctx.reference_image = await generate_reference_image(
            attributes, ctx.model_tier, ctx.aspect_ratio, api_key=self.api_key, client=self._client()
        )
        ctx.log("Analyzing generated reference image...")
        ctx.persona = await analyze_persona(ctx.reference_image, api_key=self.api_key, client=self._client())
        ctx.log(f"✅ Persona created: {ctx.persona.nickname}")
        return ctx

    async def adopt_reference(self, ctx: SessionContext, reference_image: str) -> SessionContext:
        """Use an uploaded photo as the reference and derive its persona."""
        ctx.reset_identity()
        ctx.reference_image = reference_image
        ctx.log("Analyzing uploaded reference image...")
        ctx.persona = await analyze_persona(reference_image, api_key=self.api_key, client=self._client())
        ctx.log(f"✅ Persona created: {ctx.persona.nickname}")
        return ctx

    async def run_story(self, ctx: SessionContext, scenario: Optional[str] = None) -> StoryBatch:
        """
        Plan a storyboard and generate every frame.

        Raises:
            EmptyStoryError: No frame produced an image.
        """
        self._require_identity(ctx)

        ctx.log("Planning story...")
        prompts = await plan_story(
            ctx.persona, scenario, frame_count=self.frame_count, api_key=self.api_key, client=self._client()
        )

        ctx.log(f"Generating {len(prompts)} frames...")
        images = await generate_batch(
            ctx.reference_image,
            prompts,
            ctx.model_tier,
            ctx.aspect_ratio,
            persona=ctx.persona,
            api_key=self.api_key,
            client=self._client(),
        )
        if not images:
            ctx.log("❌ No frames were generated")
            raise EmptyStoryError()

        story = StoryBatch(
            id=_batch_id(),
            scenario=(scenario or "").strip() or DEFAULT_STORY_SCENARIO_LABEL,
            images=images,
            prompts=prompts,
        )
        ctx.add_story(story)
        ctx.log(f"✅ Story generated: {len(images)}/{len(prompts)} frames")
        return story

    async def run_studio(self, ctx: SessionContext, settings: CameraSettings) -> StoryBatch:
        """Generate one studio shot and record it as its own batch."""
        self._require_identity(ctx)
        ctx.log("Generating studio shot...")

        result = await generate_studio_image(
            ctx.reference_image,
            settings,
            ctx.persona,
            ctx.model_tier,
            ctx.aspect_ratio,
            api_key=self.api_key,
            client=self._client(),
        )
        story = StoryBatch(
            id=_batch_id(),
            scenario=STUDIO_SCENARIO_LABEL,
            images=[result],
            prompts=[result.prompt],
        )
        ctx.add_story(story)
        ctx.log("✅ Studio shot generated")
        return story
