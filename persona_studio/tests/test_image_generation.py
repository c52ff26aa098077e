"""
Tests for single-unit image generation and the single-image entry points.

The SDK call runs through asyncio.to_thread, so clients are plain Mocks.
"""

import base64
from types import SimpleNamespace
from unittest.mock import Mock, patch

import pytest
from google.genai import types

from persona_studio.core.constants import IMAGE_MODEL_PRO, IMAGE_MODEL_STANDARD
from persona_studio.core.errors import (
    AccessDeniedError,
    BillingRequiredError,
    ModelRefusalError,
    NoImageProducedError,
)
from persona_studio.core.input_normalizer import clean_base64
from persona_studio.models import AspectRatio, CameraSettings, GeneratedImage, ModelTier
from persona_studio.stages.image_generation import (
    build_contents,
    build_image_config,
    extract_image,
    generate_one,
    generate_reference_image,
    generate_studio_image,
    get_model_name,
    normalize_aspect_ratio,
)
from persona_studio.stages.prompt_compiler import compile_studio_prompt

from conftest import PNG_B64, REFERENCE_B64, ServiceError, image_response, text_response


def make_client(response=None, side_effect=None):
    client = Mock()
    client.models.generate_content.return_value = response
    client.models.generate_content.side_effect = side_effect
    return client


class TestInputNormalization:

    def test_strips_data_uri_prefix(self):
        assert clean_base64("data:image/png;base64,AAAA") == "AAAA"

    @pytest.mark.parametrize("prefix", ["png", "jpeg", "jpg", "webp"])
    def test_strips_all_supported_prefixes(self, prefix):
        assert clean_base64(f"data:image/{prefix};base64,QUJD") == "QUJD"

    def test_bare_base64_unchanged(self):
        assert clean_base64("QUJD") == "QUJD"


class TestBuildContents:

    def test_text_only(self):
        parts = build_contents("a prompt")
        assert len(parts) == 1
        assert parts[0].text == "a prompt"

    def test_reference_image_is_decoded_inline_jpeg(self, reference_image):
        parts = build_contents("a prompt", reference_image)

        assert len(parts) == 2
        assert parts[1].inline_data.mime_type == "image/jpeg"
        assert parts[1].inline_data.data == base64.b64decode(REFERENCE_B64)


class TestModelSelection:

    def test_pro_tier(self):
        assert get_model_name("pro") == IMAGE_MODEL_PRO
        assert get_model_name(ModelTier.PRO) == IMAGE_MODEL_PRO

    @pytest.mark.parametrize("tier", ["standard", ModelTier.STANDARD, "unknown"])
    def test_everything_else_is_standard(self, tier):
        assert get_model_name(tier) == IMAGE_MODEL_STANDARD


class TestAspectRatio:

    @pytest.mark.parametrize("aspect", ["1:1", "3:4", "4:3", "9:16", AspectRatio.WIDE])
    def test_supported_ratios(self, aspect):
        assert build_image_config(aspect).image_config.aspect_ratio == getattr(aspect, "value", aspect)

    @pytest.mark.parametrize("aspect", ["2:1", "1.91:1", "", "16x9"])
    def test_unsupported_ratios_rejected(self, aspect):
        with pytest.raises(ValueError):
            normalize_aspect_ratio(aspect)

    @pytest.mark.asyncio
    async def test_reference_image_rejects_before_any_request(self, attributes):
        client = make_client(image_response())

        with pytest.raises(ValueError):
            await generate_reference_image(attributes, "standard", "2:1", client=client)
        client.models.generate_content.assert_not_called()


class TestExtractImage:

    def test_bytes_become_png_data_uri(self):
        assert extract_image(image_response()) == f"data:image/png;base64,{PNG_B64}"

    def test_string_data_taken_as_encoded(self):
        part = SimpleNamespace(inline_data=SimpleNamespace(data="QUJD"), text=None)
        response = SimpleNamespace(candidates=[SimpleNamespace(content=SimpleNamespace(parts=[part]))])
        assert extract_image(response) == "data:image/png;base64,QUJD"

    def test_image_after_text_part(self):
        response = types.GenerateContentResponse(candidates=[types.Candidate(content=types.Content(
            role="model",
            parts=[
                types.Part(text="Here is your photo"),
                types.Part(inline_data=types.Blob(data=b"img", mime_type="image/png")),
            ],
        ))])
        assert extract_image(response) == "data:image/png;base64,aW1n"

    def test_text_only_is_refusal(self):
        with pytest.raises(ModelRefusalError) as exc_info:
            extract_image(text_response("I cannot create that image."))
        assert exc_info.value.refusal_text == "I cannot create that image."
        assert str(exc_info.value) == "Model refused: I cannot create that image."

    @pytest.mark.parametrize("response", [
        types.GenerateContentResponse(candidates=[]),
        types.GenerateContentResponse(),
        types.GenerateContentResponse(candidates=[types.Candidate()]),
        types.GenerateContentResponse(candidates=[types.Candidate(content=types.Content(parts=[]))]),
    ])
    def test_empty_responses(self, response):
        with pytest.raises(NoImageProducedError):
            extract_image(response)

    def test_only_first_candidate_is_inspected(self):
        response = types.GenerateContentResponse(candidates=[
            types.Candidate(content=types.Content(parts=[])),
            image_response().candidates[0],
        ])
        with pytest.raises(NoImageProducedError):
            extract_image(response)


class TestGenerateOne:

    @pytest.mark.asyncio
    async def test_single_call_with_reference_and_config(self, reference_image):
        client = make_client(image_response())

        image = await generate_one(client, reference_image, "compiled", "pro", "9:16")

        assert image == f"data:image/png;base64,{PNG_B64}"
        client.models.generate_content.assert_called_once()
        kwargs = client.models.generate_content.call_args.kwargs
        assert kwargs["model"] == IMAGE_MODEL_PRO
        assert kwargs["contents"][0].text == "compiled"
        assert kwargs["contents"][1].inline_data.data == base64.b64decode(REFERENCE_B64)
        assert kwargs["config"].image_config.aspect_ratio == "9:16"

    @pytest.mark.asyncio
    async def test_raw_service_error_propagates_unchanged(self):
        raw = ServiceError("denied", code=403)
        client = make_client(side_effect=raw)

        with pytest.raises(ServiceError) as exc_info:
            await generate_one(client, None, "compiled")
        assert exc_info.value is raw
        assert client.models.generate_content.call_count == 1


class TestGenerateReferenceImage:

    @pytest.mark.asyncio
    async def test_text_only_request(self, attributes):
        client = make_client(image_response())

        image = await generate_reference_image(attributes, "standard", "3:4", client=client)

        assert image.startswith("data:image/png;base64,")
        kwargs = client.models.generate_content.call_args.kwargs
        assert kwargs["model"] == IMAGE_MODEL_STANDARD
        assert len(kwargs["contents"]) == 1
        assert "VISUAL ATTRIBUTES:" in kwargs["contents"][0].text

    @pytest.mark.asyncio
    async def test_permission_failure_on_pro_is_classified(self, attributes):
        client = make_client(side_effect=ServiceError("denied", code=403))

        with pytest.raises(BillingRequiredError):
            await generate_reference_image(attributes, "pro", client=client)

    @pytest.mark.asyncio
    async def test_resolves_client_from_api_key(self, attributes):
        client = make_client(image_response())

        with patch("persona_studio.stages.image_generation.get_client", return_value=client) as mock_get_client:
            await generate_reference_image(attributes, api_key="explicit-key")

        mock_get_client.assert_called_once_with("explicit-key")


class TestGenerateStudioImage:

    @pytest.mark.asyncio
    async def test_returns_image_with_studio_prompt(self, persona, reference_image):
        settings = CameraSettings(rotation=25, zoom=2)
        client = make_client(image_response())

        result = await generate_studio_image(reference_image, settings, persona, "standard", "1:1", client=client)

        assert isinstance(result, GeneratedImage)
        assert result.prompt == compile_studio_prompt(persona, settings)
        sent = client.models.generate_content.call_args.kwargs["contents"][0].text
        assert "CRITICAL INSTRUCTION" in sent
        assert "Profile view from the right (25 degrees)" in sent

    @pytest.mark.asyncio
    async def test_refusal_propagates(self, persona, reference_image, camera):
        client = make_client(text_response("Not allowed"))

        with pytest.raises(ModelRefusalError):
            await generate_studio_image(reference_image, camera, persona, client=client)

    @pytest.mark.asyncio
    async def test_access_denied_on_standard(self, persona, reference_image, camera):
        client = make_client(side_effect=RuntimeError("403 PERMISSION_DENIED"))

        with pytest.raises(AccessDeniedError) as exc_info:
            await generate_studio_image(reference_image, camera, persona, "standard", client=client)
        assert not isinstance(exc_info.value, BillingRequiredError)
