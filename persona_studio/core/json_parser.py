"""
JSON Parsing Utilities for Structured Model Responses
====================================================

Persona analysis and story planning ask the model for JSON output. The service is
usually well behaved when a response schema is supplied, but text can still come
back wrapped in markdown fences or with stray prose around it.

Usage:
    from persona_studio.core.json_parser import StructuredResponseParser

    parser = StructuredResponseParser()
    persona = parser.extract_and_parse(response.text, expected_schema=Persona)
"""

import json
import re
import logging
from typing import Any, Optional, Type

from pydantic import BaseModel, TypeAdapter, ValidationError

from .errors import InvalidResponseError

logger = logging.getLogger(__name__)


class JSONExtractionError(InvalidResponseError):
    """Raised when no valid JSON can be extracted or it fails validation."""
    pass


class StructuredResponseParser:
    """
    Extracts JSON from model text responses.

    Strategies, in order:
    - Markdown code blocks (```json...``` and ```...```)
    - The whole text
    - Outermost brace/bracket span
    """

    def __init__(self, debug_mode: bool = False):
        self.debug_mode = debug_mode

    def extract_and_parse(
        self,
        raw_response: Optional[str],
        expected_schema: Optional[Any] = None,
    ) -> Any:
        """
        Extract, parse and optionally validate JSON from a model response.

        Args:
            raw_response: Raw text from the model.
            expected_schema: A pydantic model class or any type understood by
                ``pydantic.TypeAdapter`` (e.g. ``List[str]``).

        Returns:
            The validated model instance, or the parsed JSON value when no schema
            is given.

        Raises:
            JSONExtractionError: If JSON cannot be extracted or validated.
        """
        json_str = self.extract_json_string(raw_response)
        if json_str is None:
            preview = (raw_response or "")[:200]
            raise JSONExtractionError(f"Could not extract JSON from response. Raw content preview: {preview}...")

        parsed = json.loads(json_str)

        if expected_schema is None:
            return parsed

        try:
            if isinstance(expected_schema, type) and issubclass(expected_schema, BaseModel):
                return expected_schema.model_validate(parsed)
            return TypeAdapter(expected_schema).validate_python(parsed)
        except ValidationError as e:
            if self.debug_mode:
                logger.debug(f"Schema validation failed: {e}")
            raise JSONExtractionError(f"Schema validation failed: {e}")

    def extract_json_string(self, raw_text: Optional[str]) -> Optional[str]:
        """Return the first valid JSON string found in ``raw_text``, or None."""
        if not isinstance(raw_text, str) or not raw_text.strip():
            return None

        text = raw_text.strip()

        for strategy in (
            self._extract_from_markdown_blocks,
            self._extract_direct_json,
            self._extract_by_bracket_matching,
        ):
            json_str = strategy(text)
            if json_str is not None:
                return json_str

        if self.debug_mode:
            logger.debug(f"All extraction strategies failed for text: {text[:300]}...")
        return None

    def _extract_from_markdown_blocks(self, text: str) -> Optional[str]:
        match = re.search(r"```json\s*([\s\S]+?)\s*```", text, re.IGNORECASE)
        if match and self._is_valid_json(match.group(1)):
            return match.group(1).strip()

        match = re.search(r"```\s*([\s\S]+?)\s*```", text)
        if match:
            candidate = match.group(1).strip()
            if self._looks_like_json(candidate) and self._is_valid_json(candidate):
                return candidate
        return None

    def _extract_direct_json(self, text: str) -> Optional[str]:
        if self._is_valid_json(text):
            return text
        repaired = self._attempt_json_repair(text)
        return repaired

    def _extract_by_bracket_matching(self, text: str) -> Optional[str]:
        """Find JSON by matching the outermost braces or brackets."""
        candidates = []
        for open_char, close_char in (("{", "}"), ("[", "]")):
            start = text.find(open_char)
            end = text.rfind(close_char)
            if start != -1 and end > start:
                candidates.append((start, text[start:end + 1]))

        # Whichever structure opens first is the outer one
        for _, candidate in sorted(candidates):
            if self._is_valid_json(candidate):
                return candidate
            repaired = self._attempt_json_repair(candidate)
            if repaired:
                return repaired
        return None

    def _looks_like_json(self, text: str) -> bool:
        return ((text.startswith("{") and text.endswith("}")) or
                (text.startswith("[") and text.endswith("]")))

    def _is_valid_json(self, text: str) -> bool:
        try:
            json.loads(text)
            return True
        except (json.JSONDecodeError, TypeError):
            return False

    def _attempt_json_repair(self, json_str: str) -> Optional[str]:
        """Repair trailing commas, the one defect seen in schema-constrained output."""
        repaired = re.sub(r",(\s*[}\]])", r"\1", json_str)
        if repaired != json_str and self._is_valid_json(repaired):
            return repaired
        return None


def parse_structured_response(raw_response: Optional[str], expected_schema: Optional[Type] = None) -> Any:
    """Convenience wrapper around StructuredResponseParser.extract_and_parse."""
    return StructuredResponseParser().extract_and_parse(raw_response, expected_schema=expected_schema)
