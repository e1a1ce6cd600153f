"""Tests for the Gemini-backed try-on image composer."""

from __future__ import annotations

from types import SimpleNamespace

import pytest

from agents.outfit_composer import OutfitComposerAgent, first_inline_image
from logic.errors import CompositionFailedError, NoImageReturnedError
from logic.image_codec import decode
from logic.prompts import COMPOSITION_RULES

from fakes import FakeClient, image_response, make_item, text_response, user_photo

SELECTED = [make_item("top1", "white shirt"), make_item("shoe1", "loafers", mime_type="image/png")]


def _composer(*responses: object) -> tuple[OutfitComposerAgent, FakeClient]:
    client = FakeClient(*responses)
    return OutfitComposerAgent(client, model="gemini-2.5-flash-image-preview"), client


def test_returns_first_inline_image() -> None:
    composer, _ = _composer(image_response(b"generated-png"))
    assert composer.compose_image(user_photo(), SELECTED) == b"generated-png"


def test_request_orders_photo_items_then_prompt() -> None:
    composer, client = _composer(image_response(b"generated-png"))
    photo = user_photo()

    composer.compose_image(photo, SELECTED)

    call = client.models.calls[0]
    parts = call["contents"].parts
    assert len(parts) == 2 + len(SELECTED)
    assert parts[0].inline_data.data == decode(photo)
    assert parts[0].inline_data.mime_type == "image/jpeg"
    for part, item in zip(parts[1:-1], SELECTED):
        assert part.inline_data.data == decode(item.image)
        assert part.inline_data.mime_type == item.mime_type

    prompt = parts[-1].text
    assert "white shirt and loafers" in prompt
    for rule in COMPOSITION_RULES:
        assert rule in prompt
    assert call["config"].response_modalities == ["IMAGE", "TEXT"]


def test_untagged_items_are_described_by_count() -> None:
    composer, client = _composer(image_response(b"png"))

    composer.compose_image(user_photo(), [make_item("a"), make_item("b")])

    assert "the 2 provided clothing items" in client.models.calls[0]["contents"].parts[-1].text


def test_text_only_response_raises_no_image_returned() -> None:
    composer, _ = _composer(text_response("I cannot edit this photo."))

    with pytest.raises(NoImageReturnedError):
        composer.compose_image(user_photo(), SELECTED)


def test_backend_error_becomes_composition_failed() -> None:
    composer, _ = _composer(ConnectionError("reset by peer"))

    with pytest.raises(CompositionFailedError) as excinfo:
        composer.compose_image(user_photo(), SELECTED)
    assert isinstance(excinfo.value.__cause__, ConnectionError)


def test_first_inline_image_scans_every_candidate() -> None:
    response = SimpleNamespace(
        candidates=[
            SimpleNamespace(content=None),
            SimpleNamespace(content=SimpleNamespace(parts=[SimpleNamespace(inline_data=None, text="hmm")])),
            SimpleNamespace(
                content=SimpleNamespace(
                    parts=[
                        SimpleNamespace(inline_data=SimpleNamespace(data=b"first")),
                        SimpleNamespace(inline_data=SimpleNamespace(data=b"second")),
                    ]
                )
            ),
        ]
    )
    assert first_inline_image(response) == b"first"
    assert first_inline_image(SimpleNamespace(candidates=None)) is None


def test_requires_selected_items() -> None:
    composer, client = _composer()
    with pytest.raises(ValueError):
        composer.compose_image(user_photo(), [])
    assert client.models.calls == []
