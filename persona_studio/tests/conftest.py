"""
Shared fixtures and fake service responses for Persona Studio tests.
"""

import base64
from types import SimpleNamespace

import pytest
from google.genai import types

from persona_studio.models import CameraSettings, CreatorAttributes, Persona

PNG_BYTES = b"\x89PNG\r\n\x1a\nfake-image"
PNG_B64 = base64.b64encode(PNG_BYTES).decode("utf-8")
REFERENCE_B64 = base64.b64encode(b"reference-photo").decode("utf-8")


def image_response(data=PNG_BYTES):
    """generate_content response with one candidate holding one inline image."""
    return types.GenerateContentResponse(
        candidates=[
            types.Candidate(
                content=types.Content(
                    role="model",
                    parts=[types.Part(inline_data=types.Blob(data=data, mime_type="image/png"))],
                )
            )
        ]
    )


def text_response(text):
    """Response whose first candidate only answers with text."""
    return types.GenerateContentResponse(
        candidates=[types.Candidate(content=types.Content(role="model", parts=[types.Part(text=text)]))]
    )


def json_response(text):
    """Structured-output response as seen by the text model callers."""
    return SimpleNamespace(text=text)


class ServiceError(Exception):
    """Stand-in for an SDK error exposing a structured status."""

    def __init__(self, message, code=None, status=None):
        super().__init__(message)
        self.code = code
        self.status = status


@pytest.fixture
def persona():
    return Persona(
        nickname="Mina",
        age="mid 20s",
        occupation="Travel writer",
        personality="Calm and curious",
        lifestyle="Vintage cafe hopping",
        vibe="Minimal street casual",
        description="A quiet explorer of hidden city corners",
        hashtags=["#travel", "#cafe", "#daily"],
    )


@pytest.fixture
def attributes():
    return CreatorAttributes(
        gender="Female",
        age="25",
        ethnicity="Korean",
        build="Slim",
        height="168",
        eye_color="Brown",
        hair_color="Black",
        hair_style="Long straight",
        fashion_style="Minimal casual",
        vibe="Calm",
    )


@pytest.fixture
def camera():
    return CameraSettings()


@pytest.fixture
def reference_image():
    return f"data:image/jpeg;base64,{REFERENCE_B64}"
