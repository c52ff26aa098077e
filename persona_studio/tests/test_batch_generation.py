"""
Tests for the batch orchestrator: fan-out, partial failure aggregation and the
fatal-error short-circuit.
"""

import asyncio
from unittest.mock import Mock, patch

import pytest

from persona_studio.core.errors import (
    AccessDeniedError,
    BillingRequiredError,
    ModelRefusalError,
    NoImageProducedError,
)
from persona_studio.models import UnitResult
from persona_studio.stages.batch_generation import find_fatal_failure, generate_batch

from conftest import ServiceError, image_response, text_response


def scripted_client(outcomes):
    """
    Client whose generate_content answers per scene.

    ``outcomes`` maps scene text to either a response or an exception instance.
    """
    def generate_content(**kwargs):
        scene = kwargs["contents"][0].text.split("SCENE DESCRIPTION: ", 1)[1].split("\n", 1)[0]
        outcome = outcomes[scene]
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    client = Mock()
    client.models.generate_content.side_effect = generate_content
    return client


class TestGenerateBatch:

    @pytest.mark.asyncio
    async def test_empty_prompts_make_no_requests(self):
        with patch("persona_studio.stages.batch_generation.get_client") as mock_get_client:
            result = await generate_batch("ref", [])

        assert result == []
        mock_get_client.assert_not_called()

    @pytest.mark.asyncio
    async def test_all_success_preserves_order(self, reference_image):
        prompts = ["Morning coffee", "Desk work", "Evening walk"]
        client = scripted_client({
            "Morning coffee": image_response(b"one"),
            "Desk work": image_response(b"two"),
            "Evening walk": image_response(b"three"),
        })

        images = await generate_batch(reference_image, prompts, "standard", "9:16", client=client)

        assert [img.prompt for img in images] == prompts
        assert images[0].image == "data:image/png;base64,b25l"
        assert images[2].image == "data:image/png;base64,dGhyZWU="
        assert client.models.generate_content.call_count == 3

    @pytest.mark.asyncio
    async def test_prompts_are_wrapped_but_results_keep_scene_text(self, reference_image):
        client = scripted_client({"Rooftop yoga": image_response()})

        images = await generate_batch(reference_image, ["Rooftop yoga"], client=client)

        sent = client.models.generate_content.call_args.kwargs["contents"][0].text
        assert "CRITICAL INSTRUCTION" in sent
        assert images[0].prompt == "Rooftop yoga"

    @pytest.mark.asyncio
    async def test_non_fatal_failures_are_dropped(self, reference_image):
        client = scripted_client({
            "A": image_response(b"a"),
            "B": text_response("refused"),
            "C": ServiceError("slow down", code=429),
            "D": ConnectionError("reset"),
            "E": image_response(b"e"),
        })

        images = await generate_batch(reference_image, ["A", "B", "C", "D", "E"], client=client)

        assert [img.prompt for img in images] == ["A", "E"]

    @pytest.mark.asyncio
    async def test_all_non_fatal_failures_return_empty(self, reference_image):
        client = scripted_client({"A": text_response("no"), "B": RuntimeError("timeout")})

        assert await generate_batch(reference_image, ["A", "B"], client=client) == []

    @pytest.mark.asyncio
    async def test_permission_failure_on_pro_aborts_batch(self, reference_image):
        client = scripted_client({
            "A": image_response(),
            "B": ServiceError("denied", code=403),
            "C": image_response(),
        })

        with pytest.raises(BillingRequiredError):
            await generate_batch(reference_image, ["A", "B", "C"], "pro", client=client)

        # Every unit still ran to completion before the abort
        assert client.models.generate_content.call_count == 3

    @pytest.mark.asyncio
    async def test_permission_failure_on_standard(self, reference_image):
        client = scripted_client({"A": image_response(), "B": RuntimeError("PERMISSION_DENIED")})

        with pytest.raises(AccessDeniedError) as exc_info:
            await generate_batch(reference_image, ["A", "B"], "standard", client=client)
        assert not isinstance(exc_info.value, BillingRequiredError)

    @pytest.mark.asyncio
    async def test_permission_text_under_other_code_aborts_batch(self, reference_image):
        client = scripted_client({
            "A": image_response(),
            "B": ServiceError("403 PERMISSION_DENIED: caller lacks permission", code=500),
        })

        with pytest.raises(BillingRequiredError):
            await generate_batch(reference_image, ["A", "B"], "pro", client=client)

    @pytest.mark.asyncio
    async def test_first_fatal_in_dispatch_order_is_raised(self, reference_image):
        first = ServiceError("first denied", code=403)
        second = ServiceError("second denied", code=403)
        client = scripted_client({"A": first, "B": second})

        with pytest.raises(AccessDeniedError) as exc_info:
            await generate_batch(reference_image, ["A", "B"], client=client)
        assert exc_info.value.__cause__ is first

    @pytest.mark.asyncio
    async def test_unsupported_aspect_ratio_makes_no_requests(self, reference_image):
        client = scripted_client({"A": image_response()})

        with pytest.raises(ValueError):
            await generate_batch(reference_image, ["A"], "standard", "2:1", client=client)
        client.models.generate_content.assert_not_called()

    @pytest.mark.asyncio
    async def test_units_run_concurrently(self, reference_image):
        started = []
        release = asyncio.Event()

        async def fake_generate_one(client, ref, prompt, tier, aspect):
            started.append(prompt)
            await release.wait()
            return "data:image/png;base64,QUJD"

        async def release_when_all_started():
            while len(started) < 3:
                await asyncio.sleep(0)
            release.set()

        with patch("persona_studio.stages.batch_generation.generate_one", side_effect=fake_generate_one):
            images, _ = await asyncio.gather(
                generate_batch(reference_image, ["A", "B", "C"], client=Mock()),
                release_when_all_started(),
            )

        assert len(images) == 3


class TestFindFatalFailure:

    def test_none_when_no_fatal(self):
        results = [
            UnitResult(prompt="A", image="img"),
            UnitResult(prompt="B", error=ModelRefusalError("no")),
            UnitResult(prompt="C", error=NoImageProducedError()),
        ]
        assert find_fatal_failure(results) is None

    def test_returns_first_fatal(self):
        results = [
            UnitResult(prompt="A", error=RuntimeError("429")),
            UnitResult(prompt="B", error=ServiceError("denied", code=403)),
            UnitResult(prompt="C", error=ServiceError("denied", code=403)),
        ]
        assert find_fatal_failure(results).prompt == "B"
