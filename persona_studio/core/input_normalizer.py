"""
Input normalizer for reference images.

Reference images arrive from the UI as data URIs or bare base64 strings. The
generation service wants only the base64 payload.
"""

import re

DATA_URI_PREFIX = re.compile(r"^data:image/(png|jpeg|jpg|webp);base64,")


def clean_base64(image_data: str) -> str:
    """Strip an embedded ``data:image/...;base64,`` header, if present."""
    return DATA_URI_PREFIX.sub("", image_data, count=1)


def to_data_uri(b64_data: str, mime_type: str = "image/png") -> str:
    """Wrap a base64 payload as a data URI."""
    return f"data:{mime_type};base64,{b64_data}"

