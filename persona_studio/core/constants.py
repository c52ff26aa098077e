"""
Constants for Persona Studio.
=============================

Single place for:
- Model identifiers per tier
- Supported aspect ratios
- Credential sources (environment variable names, store location)
- Story planning defaults

Other modules import from here; environment overrides are applied once at import.
"""

import os
from typing import Dict, List

# --- Model Definitions ---
IMAGE_MODEL_STANDARD = os.getenv("IMAGE_MODEL_STANDARD", "gemini-2.5-flash-image")
IMAGE_MODEL_PRO = os.getenv("IMAGE_MODEL_PRO", "gemini-3-pro-image-preview")

# Text model used for persona analysis and story planning (structured JSON output)
TEXT_MODEL_ID = os.getenv("TEXT_MODEL_ID", "gemini-2.5-flash")

MODEL_TIER_DISPLAY_NAMES: Dict[str, str] = {
    "standard": "Flash Lite",
    "pro": "Banana Pro",
}

# --- Image Settings ---
SUPPORTED_ASPECT_RATIOS: List[str] = ["1:1", "3:4", "4:3", "9:16", "16:9"]
DEFAULT_ASPECT_RATIO = "1:1"
DEFAULT_MODEL_TIER = "standard"

# Reference images are always sent with this media type; outputs are always tagged PNG
REFERENCE_IMAGE_MIME_TYPE = "image/jpeg"
OUTPUT_IMAGE_MIME_TYPE = "image/png"

# --- Credentials ---
# Environment defaults, checked in order after the user-registered key
API_KEY_ENV_VARS: List[str] = ["GEMINI_API_KEY", "API_KEY"]
CREDENTIAL_NAME = "gemini_api_key"
STUDIO_HOME_ENV_VAR = "PERSONA_STUDIO_HOME"
DEFAULT_STUDIO_HOME = os.path.join(os.path.expanduser("~"), ".persona_studio")

# --- Client ---
REQUEST_TIMEOUT_SECONDS = 300

# --- Story Planning ---
STORY_FRAME_COUNT = 8
DEFAULT_STORY_SCENARIO_LABEL = "AI Lifestyle Series"
STUDIO_SCENARIO_LABEL = "Studio Session"
