"""
Session context for maintaining state across studio workflows.
"""

import datetime
import logging
from dataclasses import dataclass, field
from typing import List, Optional

from ..core.constants import DEFAULT_ASPECT_RATIO, DEFAULT_MODEL_TIER
from ..models import GeneratedImage, Persona

logger = logging.getLogger(__name__)


@dataclass
class StoryBatch:
    """One finished run of images shown together (a story or a studio session)."""
    id: str
    scenario: str
    images: List[GeneratedImage] = field(default_factory=list)
    prompts: List[str] = field(default_factory=list)
    created_at: datetime.datetime = field(default_factory=datetime.datetime.now)


@dataclass
class SessionContext:
    """
    State of one persona session: the reference image, the persona derived from it,
    the generation settings and every batch produced so far.
    """

    session_id: str = field(default_factory=lambda: datetime.datetime.now().strftime("%Y%m%d_%H%M%S_%f"))

    # Generation settings
    model_tier: str = DEFAULT_MODEL_TIER
    aspect_ratio: str = DEFAULT_ASPECT_RATIO

    # Identity
    reference_image: Optional[str] = None
    persona: Optional[Persona] = None

    # Results, newest first
    stories: List[StoryBatch] = field(default_factory=list)

    # Logs
    logs: List[str] = field(default_factory=list)

    def log(self, message: str) -> None:
        """Add a log message with timestamp."""
        timestamp = datetime.datetime.now().strftime("%H:%M:%S.%f")[:-3]
        self.logs.append(f"[{timestamp}] {message}")
        logger.info(f"[{self.session_id}] {message}")

    @property
    def has_identity(self) -> bool:
        return bool(self.reference_image) and self.persona is not None

    def reset_identity(self) -> None:
        self.reference_image = None
        self.persona = None

    def add_story(self, story: StoryBatch) -> None:
        self.stories.insert(0, story)
